"""Composition engine: functors, container operations, transducers and the expression language."""

from .accessors import Get, Omit, Pick, get, omit, pick
from .containers import (
    Every,
    Filter,
    FlatMap,
    Map,
    MapPool,
    MapSeries,
    Reduce,
    Reduced,
    Some,
    every,
    filter_,
    flat_map,
    map_,
    map_pool,
    map_series,
    reduce_,
    some,
)
from .context import Context
from .engine import Engine
from .functors import (
    All,
    AllSeries,
    Assign,
    Compose,
    Functor,
    Pipe,
    PipeworkError,
    SwitchCase,
    Tap,
    Thunk,
    TryCatch,
    UnsupportedTypeError,
    all_,
    all_series,
    always,
    assign,
    compose,
    identity,
    noop,
    pipe,
    switch_case,
    tap,
    thunkify,
    try_catch,
)
from .logic import and_, eq, gt, gte, lt, lte, not_, or_
from .parser import ParseError, SystemFunctor, parse
from .transducers import Transducer, Transform, transform

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
]
