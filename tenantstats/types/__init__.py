"""类型定义统一出口."""

from .structures import (
    ContextDict,
    ContextValue,
    JsonDict,
    JsonValue,
    LoggerExtra,
    RouteSafetyOptions,
    ScalarValue,
    StructlogEventDict,
)

__all__ = [
    "ContextDict",
    "ContextValue",
    "JsonDict",
    "JsonValue",
    "LoggerExtra",
    "RouteSafetyOptions",
    "ScalarValue",
    "StructlogEventDict",
]
