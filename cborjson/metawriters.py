"""Writers that fill sequential and associative containers, looked up by type name.

A type name is a string such as ``"list[int]"``, ``"set<str>"`` or
``"dict[str, float]"``. Writers are made by factories registered per type name.
A factory is a callable taking the container to fill; it may be given ``None``
when only the writer's ``info()`` is wanted. For type names without a factory,
the element types are guessed by parsing the name.
"""

from __future__ import annotations

import abc
import logging
import re
import threading
from collections.abc import Callable, MutableMapping, MutableSequence, MutableSet
from dataclasses import dataclass
from typing import Any

__all__ = [
    "SequenceInfo",
    "AssociationInfo",
    "SequentialWriter",
    "AssociativeWriter",
    "ListWriter",
    "SetWriter",
    "DictWriter",
    "register_sequential_writer",
    "can_write_sequence",
    "get_sequential_writer",
    "sequence_info",
    "register_associative_writer",
    "can_write_association",
    "get_associative_writer",
    "association_info",
    "parse_sequence_info",
    "parse_association_info",
]

_seq_log = logging.getLogger("cborjson.metawriters.sequential")
_assoc_log = logging.getLogger("cborjson.metawriters.associative")


@dataclass(frozen=True)
class SequenceInfo:
    """Element type of a sequential container (``None`` if unknown) and whether it is a set."""

    type: str | None = None
    is_set: bool = False


@dataclass(frozen=True)
class AssociationInfo:
    """Key and value types of an associative container (``None`` if unknown)."""

    key_type: str | None = None
    value_type: str | None = None


_CONVERTERS: dict[str, Callable[[Any], Any]] = {
    "str": str,
    "int": int,
    "float": float,
    "bool": bool,
    "bytes": bytes,
}


def _convert(value: Any, type_name: str | None) -> Any:
    converter = _CONVERTERS.get(type_name) if type_name is not None else None
    if converter is None or isinstance(value, converter):
        return value
    return converter(value)


def _check_size(size: int) -> int:
    size = int(size)
    if size < 0:
        raise ValueError("size must not be negative")
    return size


class SequentialWriter(abc.ABC):
    """Fills a sequential container."""

    @abc.abstractmethod
    def info(self) -> SequenceInfo:
        """Return the information for the wrapped container."""

    @abc.abstractmethod
    def reserve(self, size: int) -> None:
        """Prepare the container for ``size`` elements."""

    @abc.abstractmethod
    def add(self, value: Any) -> None:
        """Add an element to the end of the container."""


class AssociativeWriter(abc.ABC):
    """Fills an associative container."""

    @abc.abstractmethod
    def info(self) -> AssociationInfo:
        """Return the information for the wrapped container."""

    @abc.abstractmethod
    def add(self, key: Any, value: Any) -> None:
        """Insert ``value`` for ``key`` into the container."""


class ListWriter(SequentialWriter):
    """Appends to a list; values are converted to ``value_type`` where it is a basic type."""

    def __init__(self, data: MutableSequence | None, value_type: str | None) -> None:
        self._data = data
        self._value_type = value_type
        self.capacity = 0

    def info(self) -> SequenceInfo:
        return SequenceInfo(self._value_type, False)

    def reserve(self, size: int) -> None:
        """Record the expected number of elements; negative sizes are rejected."""
        self.capacity = _check_size(size)

    def add(self, value: Any) -> None:
        self._data.append(_convert(value, self._value_type))


class SetWriter(SequentialWriter):
    """Inserts into a set; values are converted to ``value_type`` where it is a basic type."""

    def __init__(self, data: MutableSet | None, value_type: str | None) -> None:
        self._data = data
        self._value_type = value_type
        self.capacity = 0

    def info(self) -> SequenceInfo:
        return SequenceInfo(self._value_type, True)

    def reserve(self, size: int) -> None:
        """Record the expected number of elements; negative sizes are rejected."""
        self.capacity = _check_size(size)

    def add(self, value: Any) -> None:
        self._data.add(_convert(value, self._value_type))


class DictWriter(AssociativeWriter):
    """Inserts into a mapping; keys and values are converted where their types are basic."""

    def __init__(
        self, data: MutableMapping | None, key_type: str | None, value_type: str | None
    ) -> None:
        self._data = data
        self._key_type = key_type
        self._value_type = value_type

    def info(self) -> AssociationInfo:
        return AssociationInfo(self._key_type, self._value_type)

    def add(self, key: Any, value: Any) -> None:
        self._data[_convert(key, self._key_type)] = _convert(value, self._value_type)


SequentialWriterFactory = Callable[[Any], SequentialWriter]
AssociativeWriterFactory = Callable[[Any], AssociativeWriter]

_sequence_lock = threading.RLock()
_sequence_factories: dict[str, SequentialWriterFactory] = {
    "list": lambda data: ListWriter(data, None),
}
_sequence_cache: dict[str, SequenceInfo] = {}

_association_lock = threading.RLock()
_association_factories: dict[str, AssociativeWriterFactory] = {
    "dict": lambda data: DictWriter(data, "str", None),
}
_association_cache: dict[str, AssociationInfo] = {}

_SET_NAMES = frozenset({"set", "frozenset", "QSet"})

_TEMPLATE_RE = re.compile(
    r"^((?![0-9_])(?:\w|::|\.)*\w)\s*(?:<\s*(.*?)\s*>|\[\s*(.*?)\s*\])$"
)


def _match_template(type_name: str) -> tuple[str, str] | None:
    match = _TEMPLATE_RE.match(type_name)
    if match is None:
        return None
    inner = match.group(2) if match.group(2) is not None else match.group(3)
    return match.group(1), inner


def _type_or_none(name: str) -> str | None:
    name = name.strip()
    return name or None


def parse_sequence_info(type_name: str) -> SequenceInfo:
    """Guess the element type of a sequential container from its type name."""
    if type_name == "list":
        return SequenceInfo(None, False)
    parsed = _match_template(type_name)
    if parsed is None:
        return SequenceInfo()
    container, inner = parsed
    return SequenceInfo(_type_or_none(inner), container in _SET_NAMES)


def parse_association_info(type_name: str) -> AssociationInfo:
    """Guess the key and value types of an associative container from its type name."""
    if type_name == "dict":
        return AssociationInfo("str", None)
    parsed = _match_template(type_name)
    if parsed is None:
        return AssociationInfo()
    inner = parsed[1]
    depth = 0
    for pos, char in enumerate(inner):
        if char in "<[":
            depth += 1
        elif char in ">]":
            depth -= 1
        elif depth == 0 and char == ",":
            return AssociationInfo(_type_or_none(inner[:pos]), _type_or_none(inner[pos + 1 :]))
    return AssociationInfo()


def register_sequential_writer(type_name: str, factory: SequentialWriterFactory) -> None:
    """Register the factory that makes writers for containers of ``type_name``."""
    if not callable(factory):
        raise TypeError("factory must be callable")
    with _sequence_lock:
        _sequence_factories[type_name] = factory
        _sequence_cache.pop(type_name, None)
    _seq_log.debug("Added factory for type: %s", type_name)


def can_write_sequence(type_name: str) -> bool:
    """Tell whether a sequential writer is registered for ``type_name``."""
    with _sequence_lock:
        return type_name in _sequence_factories


def get_sequential_writer(type_name: str, data: Any) -> SequentialWriter | None:
    """Return a writer filling ``data``, or ``None`` if no factory is registered."""
    with _sequence_lock:
        factory = _sequence_factories.get(type_name)
    if factory is None:
        _seq_log.warning("Unable to find factory for data of type: %s", type_name)
        return None
    _seq_log.debug("Found factory for data of type: %s", type_name)
    return factory(data)


def sequence_info(type_name: str) -> SequenceInfo:
    """Return the element information for ``type_name``, caching the result."""
    with _sequence_lock:
        cached = _sequence_cache.get(type_name)
        if cached is not None:
            return cached
        factory = _sequence_factories.get(type_name)
        if factory is not None:
            info = factory(None).info()
        else:
            _seq_log.warning(
                "Unable to find SequenceInfo for type %s - trying to guess by parsing the types name",
                type_name,
            )
            info = parse_sequence_info(type_name)
        _sequence_cache[type_name] = info
        return info


def register_associative_writer(type_name: str, factory: AssociativeWriterFactory) -> None:
    """Register the factory that makes writers for containers of ``type_name``."""
    if not callable(factory):
        raise TypeError("factory must be callable")
    with _association_lock:
        _association_factories[type_name] = factory
        _association_cache.pop(type_name, None)
    _assoc_log.debug("Added factory for type: %s", type_name)


def can_write_association(type_name: str) -> bool:
    """Tell whether an associative writer is registered for ``type_name``."""
    with _association_lock:
        return type_name in _association_factories


def get_associative_writer(type_name: str, data: Any) -> AssociativeWriter | None:
    """Return a writer filling ``data``, or ``None`` if no factory is registered."""
    with _association_lock:
        factory = _association_factories.get(type_name)
    if factory is None:
        _assoc_log.warning("Unable to find factory for data of type: %s", type_name)
        return None
    _assoc_log.debug("Found factory for data of type: %s", type_name)
    return factory(data)


def association_info(type_name: str) -> AssociationInfo:
    """Return the key and value information for ``type_name``, caching the result."""
    with _association_lock:
        cached = _association_cache.get(type_name)
        if cached is not None:
            return cached
        factory = _association_factories.get(type_name)
        if factory is not None:
            info = factory(None).info()
        else:
            _assoc_log.warning(
                "Unable to find AssociationInfo for type %s - trying to guess by parsing the types name",
                type_name,
            )
            info = parse_association_info(type_name)
        _association_cache[type_name] = info
        return info