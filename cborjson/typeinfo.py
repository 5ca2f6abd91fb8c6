"""Static checks on Python types: can they be serialized, and to what JSON shape."""

from __future__ import annotations

import collections
import collections.abc as cabc
import dataclasses
import enum
import types
import typing

__all__ = ["JsonKind", "is_serializable", "json_type"]


class JsonKind(enum.Enum):
    """The JSON shape a type serializes to."""

    VALUE = "value"
    OBJECT = "object"
    ARRAY = "array"


_ARRAY_CLASSES = (list, tuple, set, frozenset, collections.deque)
_OBJECT_CLASSES = (dict,)
_ARRAY_ABCS = (cabc.Sequence, cabc.MutableSequence, cabc.Set, cabc.MutableSet)
_OBJECT_ABCS = (cabc.Mapping, cabc.MutableMapping)
_UNSERIALIZABLE_ABCS = (
    cabc.Callable,
    cabc.Iterator,
    cabc.Iterable,
    cabc.Generator,
    cabc.Awaitable,
    cabc.Coroutine,
    cabc.AsyncIterator,
    cabc.AsyncIterable,
    cabc.AsyncGenerator,
)
_UNSERIALIZABLE_CLASSES = (
    types.FunctionType,
    types.BuiltinFunctionType,
    types.MethodType,
    types.ModuleType,
    types.GeneratorType,
    types.CoroutineType,
    type,
)


def _is_union(origin: object) -> bool:
    return origin is typing.Union or origin is types.UnionType


def _type_args(tp: object) -> tuple:
    return tuple(arg for arg in typing.get_args(tp) if arg is not Ellipsis)


def _class_serializable(cls: type) -> bool:
    if cls in _UNSERIALIZABLE_ABCS:
        return False
    return not issubclass(cls, _UNSERIALIZABLE_CLASSES)


def is_serializable(tp: object) -> bool:
    """Tell whether values of the type ``tp`` can be serialized."""
    if tp is None or tp is typing.Any or isinstance(tp, typing.TypeVar):
        return True
    origin = typing.get_origin(tp)
    if origin is None:
        return isinstance(tp, type) and _class_serializable(tp)
    if origin is typing.Annotated:
        return is_serializable(typing.get_args(tp)[0])
    if origin is typing.Literal:
        return True
    if _is_union(origin):
        return all(is_serializable(arg) for arg in _type_args(tp))
    if origin is type or (isinstance(origin, type) and not _class_serializable(origin)):
        return False
    return all(is_serializable(arg) for arg in _type_args(tp))


def _class_kind(cls: type) -> JsonKind:
    if cls in _ARRAY_ABCS or issubclass(cls, _ARRAY_CLASSES):
        return JsonKind.ARRAY
    if cls in _OBJECT_ABCS or issubclass(cls, _OBJECT_CLASSES):
        return JsonKind.OBJECT
    if dataclasses.is_dataclass(cls):
        return JsonKind.OBJECT
    return JsonKind.VALUE


def json_type(tp: object) -> JsonKind:
    """Return the JSON shape ``tp`` serializes to.

    Raises TypeError if the type cannot be serialized. An ``Optional[T]`` is
    a plain value; any other union serializes as an array.
    """
    if not is_serializable(tp):
        raise TypeError(f"Type {tp!r} must be serializable to be used in a generic expression")
    if tp is None or tp is typing.Any or isinstance(tp, typing.TypeVar):
        return JsonKind.VALUE
    origin = typing.get_origin(tp)
    if origin is None:
        return _class_kind(tp)  # type: ignore[arg-type]
    if origin is typing.Annotated:
        return json_type(typing.get_args(tp)[0])
    if origin is typing.Literal:
        return JsonKind.VALUE
    if _is_union(origin):
        members = typing.get_args(tp)
        if len(members) == 2 and type(None) in members:
            return JsonKind.VALUE
        return JsonKind.ARRAY
    return _class_kind(origin)