from __future__ import annotations

from pipework import Context, always, get, map_pool, parse, switch_case, visualize


def build_context() -> Context:
    return Context(
        steps={"shout": lambda: lambda text: text.upper() + "!"},
        system_funcs={"set": lambda value, ctx, *args: value},
    )


def double(value):
    return value * 2


def test_visualize_nested_pipeline():
    tree = visualize(parse("(strip | upper), len", build_context()))
    assert tree.splitlines() == [
        "all(pipe(strip | upper), len) (All)",
        "  pipe(strip | upper) (Pipe)",
        "    strip (function)",
        "    upper (function)",
        "  len (function)",
    ]


def test_visualize_details():
    assert visualize(map_pool(3, double)).splitlines() == [
        "map_pool(3, double) (MapPool) [concurrency=3]",
        "  double (function)",
    ]
    assert visualize(get("a.b")) == "get(a.b) (Get) [path=['a', 'b']]"
    assert visualize(parse(":set mode debug", build_context())) == (
        ":set (SystemFunctor) [system | args=['mode', 'debug']]"
    )


def test_visualize_switch_case_lists_every_case():
    is_negative = (lambda n: n < 0)
    tree = visualize(switch_case([is_negative, always("neg"), always("pos")]))
    lines = tree.splitlines()
    assert lines[0].endswith("(SwitchCase)")
    assert len(lines) == 4


def test_visualize_custom_step_and_transform():
    tree = visualize(parse("shout | take 2", build_context()))
    lines = tree.splitlines()
    assert lines[0] == "pipe(<lambda> | transform(take(2))) (Pipe)"
    assert lines[2] == "  transform(take(2)) (Transform) [init=[]]"
