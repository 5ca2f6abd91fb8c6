"""Errors raised by the serializers, with a trace of the properties being processed."""

from __future__ import annotations

import logging
import threading
from types import TracebackType

__all__ = [
    "SerializerError",
    "SerializationError",
    "DeserializationError",
    "ExceptionContext",
    "current_context",
    "current_depth",
]

_log = logging.getLogger("cborjson.exceptioncontext")

PropertyTrace = list[tuple[str, str]]

_UNNAMED = "<unnamed>"


class _ContextStore(threading.local):
    def __init__(self) -> None:
        self.stack: PropertyTrace = []


_store = _ContextStore()


def current_context() -> PropertyTrace:
    """Return a copy of this thread's property trace, outermost entry first."""
    return list(_store.stack)


def current_depth() -> int:
    """Return how many property contexts are active in this thread."""
    return len(_store.stack)


class ExceptionContext:
    """Marks a property as being processed for as long as the ``with`` block runs.

    Errors created inside the block record the active properties in their trace.
    A ``name`` of ``None`` is recorded as ``<unnamed>``.
    """

    def __init__(self, name: str | None, type_name: str) -> None:
        self.name = _UNNAMED if name is None else name
        self.type_name = type_name

    def __enter__(self) -> ExceptionContext:
        _store.stack.append((self.name, self.type_name))
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        if _store.stack:
            _store.stack.pop()
        else:
            _log.warning("Corrupted context store")
        return False


class SerializerError(Exception):
    """Base error of the serializers; carries the property trace at creation time."""

    def __init__(self, message: str) -> None:
        self._message = message
        self._trace = current_context()
        super().__init__(self._describe())

    def _describe(self) -> str:
        text = f"what: {self._message}\nProperty Trace:"
        if not self._trace:
            return text + " <root element>"
        return text + "".join(f"\n\t{name} (Type: {type_name})" for name, type_name in self._trace)

    def message(self) -> str:
        """Return the error message without the property trace."""
        return self._message

    def property_trace(self) -> PropertyTrace:
        """Return the trace of (property name, type name) pairs, outermost first."""
        return list(self._trace)


class SerializationError(SerializerError):
    """Raised when a value cannot be serialized."""

    def __init__(self, message: str) -> None:
        super().__init__("Failed to serialize with error: " + message)


class DeserializationError(SerializerError):
    """Raised when data cannot be deserialized."""

    def __init__(self, message: str) -> None:
        super().__init__("Failed to deserialize with error: " + message)