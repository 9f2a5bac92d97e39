"""Awaitable-aware function composition, container operations and transducers."""

from .engine import (
    All,
    AllSeries,
    all_,
    all_series,
    always,
    and_,
    Assign,
    assign,
    Compose,
    compose,
    Context,
    Engine,
    eq,
    Every,
    every,
    Filter,
    filter_,
    FlatMap,
    flat_map,
    Functor,
    Get,
    get,
    gt,
    gte,
    identity,
    lt,
    lte,
    Map,
    MapPool,
    MapSeries,
    map_,
    map_pool,
    map_series,
    noop,
    not_,
    Omit,
    omit,
    or_,
    parse,
    ParseError,
    Pick,
    pick,
    Pipe,
    pipe,
    PipeworkError,
    Reduce,
    Reduced,
    reduce_,
    Some,
    some,
    SwitchCase,
    switch_case,
    SystemFunctor,
    Tap,
    tap,
    Thunk,
    thunkify,
    Transducer,
    Transform,
    transform,
    TryCatch,
    try_catch,
    UnsupportedTypeError,
)
from .visualize import visualize

__version__ = "0.1.0"

__all__ = [
    "Context",
    "Engine",
    "Functor",
    "Pipe",
    "Compose",
    "Tap",
    "All",
    "AllSeries",
    "Assign",
    "SwitchCase",
    "TryCatch",
    "Thunk",
    "Map",
    "MapSeries",
    "MapPool",
    "Filter",
    "FlatMap",
    "Reduce",
    "Reduced",
    "Some",
    "Every",
    "Get",
    "Pick",
    "Omit",
    "Transducer",
    "Transform",
    "SystemFunctor",
    "PipeworkError",
    "UnsupportedTypeError",
    "ParseError",
    "pipe",
    "compose",
    "tap",
    "all_",
    "all_series",
    "assign",
    "switch_case",
    "try_catch",
    "thunkify",
    "always",
    "identity",
    "noop",
    "map_",
    "map_series",
    "map_pool",
    "filter_",
    "flat_map",
    "reduce_",
    "some",
    "every",
    "transform",
    "get",
    "pick",
    "omit",
    "and_",
    "or_",
    "not_",
    "eq",
    "gt",
    "lt",
    "gte",
    "lte",
    "parse",
    "visualize",
]
