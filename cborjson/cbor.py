"""CBOR serializer: type tags, special number decoding and reading/writing CBOR data."""

from __future__ import annotations

import enum
import logging
import math
import struct
import threading
from typing import IO, Any

import cbor2
from cbor2 import CBORSimpleValue, CBORTag

from .exceptions import DeserializationError, SerializationError

__all__ = [
    "ExtendedTags",
    "CustomTags",
    "CborSerializer",
    "decode_positive_bignum",
    "decode_negative_bignum",
    "decode_decimal",
    "decode_bigfloat",
    "decode_rational",
]

_log = logging.getLogger("cborjson.serializer.cbor")

_POSITIVE_BIGNUM = 2
_NEGATIVE_BIGNUM = 3
_DECIMAL = 4
_BIGFLOAT = 5
_INT64_SIZE = 8


class ExtendedTags(enum.IntEnum):
    """Additional registered CBOR tags."""

    GenericObject = 27
    RationaleNumber = 30
    Identifier = 39
    Homogeneous = 41
    Set = 258
    ExplicitMap = 259
    NetworkAddress = 260
    NetworkAddressPrefix = 261


class CustomTags(enum.IntEnum):
    """Unregistered CBOR tags used to mark specific types."""

    Color = 10000
    Font = 10001
    Enum = 10002
    Flags = 10003
    ConstructedObject = 10004
    Pair = 10005
    MultiMap = 10006
    VersionNumber = 10007
    Tuple = 10008
    BitArray = 10009
    Date = 10010
    Time = 10011

    LocaleISO = 10100
    LocaleBCP47 = 10101

    GeomSize = 10110
    GeomPoint = 10111
    GeomLine = 10112
    GeomRect = 10113

    ChronoNanoSeconds = 10120
    ChronoMicroSeconds = 10121
    ChronoMilliSeconds = 10122
    ChronoSeconds = 10123
    ChronoMinutes = 10124
    ChronoHours = 10125

    NoTag = 2**64 - 1


# ------------- special number decoding -------------


def _to_integer(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value):
        return int(value)
    return 0


def _pair(data: Any, kind: str) -> tuple[int, int]:
    items = data if isinstance(data, (list, tuple)) else []
    if len(items) != 2:
        raise DeserializationError(
            f"{kind} tagged types must be an array with exactly two elements"
        )
    return _to_integer(items[0]), _to_integer(items[1])


def decode_positive_bignum(data: bytes) -> int:
    """Decode the big-endian bytes of a positive bignum, at most 8 bytes long."""
    if len(data) > _INT64_SIZE:
        raise DeserializationError(
            f"Unable to handle PositiveBignum tagged integers, bigger then {_INT64_SIZE} bytes"
        )
    return int.from_bytes(data, "big")


def decode_negative_bignum(data: bytes) -> int:
    """Decode the bytes of a negative bignum; the result must fit a signed 64-bit integer."""
    if len(data) > _INT64_SIZE or (len(data) == _INT64_SIZE and data[0] & 0x80):
        raise DeserializationError(
            "Unable to handle NegativeBignum tagged integers, bigger then "
            f"{_INT64_SIZE} bytes (- the first bit)"
        )
    return -1 - int.from_bytes(data, "big")


def decode_decimal(data: Any) -> float:
    """Decode a decimal fraction ``[exponent, mantissa]`` as ``mantissa * 10**exponent``."""
    exponent, mantissa = _pair(data, "Decimal")
    try:
        return math.pow(10, exponent) * mantissa
    except OverflowError:
        return math.copysign(math.inf, mantissa) if mantissa else 0.0


def decode_bigfloat(data: Any) -> float:
    """Decode a bigfloat ``[exponent, mantissa]`` as ``mantissa * 2**exponent``."""
    exponent, mantissa = _pair(data, "Bigfloat")
    try:
        return math.ldexp(mantissa, exponent)
    except OverflowError:
        return math.copysign(math.inf, mantissa)


def decode_rational(data: Any) -> float:
    """Decode a rational number ``[numerator, denominator]`` as a float."""
    numerator, denominator = _pair(data, "RationaleNumber")
    if denominator == 0:
        return math.copysign(math.inf, numerator) if numerator else math.nan
    return numerator / denominator


# ------------- raw CBOR reading -------------


class _CborFormatError(ValueError):
    pass


_BREAK = object()


def _hashable(key: Any) -> Any:
    if isinstance(key, list):
        return tuple(_hashable(item) for item in key)
    if isinstance(key, dict):
        return frozenset((k, _hashable(v)) for k, v in key.items())
    return key


class _Reader:
    """Reads one CBOR item, keeping every tag as a ``CBORTag``."""

    def __init__(self, data: bytes) -> None:
        self._data = data
        self._pos = 0

    def _take(self, size: int) -> bytes:
        end = self._pos + size
        if end > len(self._data):
            raise _CborFormatError("Unexpected end of data")
        chunk = self._data[self._pos:end]
        self._pos = end
        return chunk

    def _head(self) -> tuple[int, int]:
        byte = self._take(1)[0]
        return byte >> 5, byte & 0x1F

    def _argument(self, info: int) -> int | None:
        if info < 24:
            return info
        if info <= 27:
            return int.from_bytes(self._take(1 << (info - 24)), "big")
        if info == 31:
            return None
        raise _CborFormatError("Illegal additional information")

    def _chunks(self, major: int) -> bytes:
        parts = []
        while True:
            chunk_major, info = self._head()
            if (chunk_major, info) == (7, 31):
                return b"".join(parts)
            if chunk_major != major or info == 31:
                raise _CborFormatError("Illegal chunk in indefinite length string")
            parts.append(self._take(self._argument(info)))

    def _text(self, raw: bytes) -> str:
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as error:
            raise _CborFormatError("Invalid UTF-8 text string") from error

    def _simple(self, info: int, allow_break: bool) -> Any:
        if info == 31:
            if allow_break:
                return _BREAK
            raise _CborFormatError("Unexpected break")
        fixed = {20: False, 21: True, 22: None, 23: cbor2.undefined}
        if info in fixed:
            return fixed[info]
        if info == 24:
            number = self._take(1)[0]
            if number < 32:
                raise _CborFormatError("Illegal simple value")
            return CBORSimpleValue(number)
        formats = {25: (">e", 2), 26: (">f", 4), 27: (">d", 8)}
        if info in formats:
            fmt, size = formats[info]
            return struct.unpack(fmt, self._take(size))[0]
        if info < 20:
            return CBORSimpleValue(info)
        raise _CborFormatError("Illegal additional information")

    def _items(self, count: int | None):
        if count is None:
            while (item := self.item(allow_break=True)) is not _BREAK:
                yield item
        else:
            for _ in range(count):
                yield self.item()

    def item(self, allow_break: bool = False) -> Any:
        major, info = self._head()
        if major == 7:
            return self._simple(info, allow_break)
        argument = self._argument(info)
        if argument is None and major in (0, 1, 6):
            raise _CborFormatError("Illegal indefinite length item")
        if major == 0:
            return argument
        if major == 1:
            return -1 - argument
        if major == 2:
            return self._chunks(2) if argument is None else self._take(argument)
        if major == 3:
            return self._text(self._chunks(3) if argument is None else self._take(argument))
        if major == 4:
            return list(self._items(argument))
        if major == 5:
            result = {}
            keys = self._items(None if argument is None else argument)
            for key in keys:
                if argument is None:
                    value = self.item()
                else:
                    value = self.item()
                try:
                    result[_hashable(key)] = value
                except TypeError as error:
                    raise _CborFormatError("Unhashable map key") from error
            return result
        return CBORTag(argument, self.item())


def _read_cbor(data: bytes) -> Any:
    try:
        return _Reader(bytes(data)).item()
    except (_CborFormatError, RecursionError) as error:
        raise DeserializationError(f"Failed to read file as CBOR with error: {error}") from error


# ------------- serializer -------------


class CborSerializer:
    """Serializes values to CBOR and back, with per-type tags and special number handling."""

    def __init__(self) -> None:
        self._handle_special_numbers = False
        self._type_tags_lock = threading.RLock()
        self._type_tags: dict[str, int] = {
            "Color": CustomTags.Color,
            "Font": CustomTags.Font,
        }

    @property
    def handle_special_numbers(self) -> bool:
        """Whether bignum, decimal, bigfloat and rational tags are decoded to numbers."""
        return self._handle_special_numbers

    @handle_special_numbers.setter
    def handle_special_numbers(self, value: bool) -> None:
        self._handle_special_numbers = bool(value)

    def set_type_tag(self, type_name: str, tag: int = CustomTags.NoTag) -> None:
        """Tag values of ``type_name`` with ``tag``; ``NoTag`` removes the tag."""
        if not type_name:
            raise ValueError("A tag cannot be assigned to an unknown type")
        with self._type_tags_lock:
            if tag == CustomTags.NoTag:
                self._type_tags.pop(type_name, None)
                _log.debug("Removed Type-Tag for type %s", type_name)
            else:
                self._type_tags[type_name] = int(tag)
                _log.debug("Added Type-Tag for %s as %s", type_name, tag)

    def type_tag(self, type_name: str) -> int:
        """Return the tag for ``type_name``, or ``CustomTags.NoTag`` if it has none."""
        with self._type_tags_lock:
            tag = self._type_tags.get(type_name, CustomTags.NoTag)
        if tag != CustomTags.NoTag:
            _log.debug("Found Type-Tag for type %s as %s", type_name, tag)
        else:
            _log.debug("No Type-Tag found for type %s", type_name)
        return tag

    def types_for_tag(self, tag: int) -> list[str]:
        """Return the type names that are tagged with ``tag``."""
        with self._type_tags_lock:
            names = [name for name, value in self._type_tags.items() if value == tag]
        _log.debug("Found types for tag %s as %s", tag, names)
        return names

    def json_mode(self) -> bool:
        """This serializer writes CBOR, not JSON."""
        return False

    def _apply_tags(self, value: Any) -> Any:
        if isinstance(value, CBORTag):
            return CBORTag(value.tag, self._apply_tags(value.value))
        if isinstance(value, list):
            value = [self._apply_tags(item) for item in value]
        elif isinstance(value, tuple):
            value = tuple(self._apply_tags(item) for item in value)
        elif isinstance(value, dict):
            value = {key: self._apply_tags(item) for key, item in value.items()}
        tag = self.type_tag(type(value).__name__)
        return value if tag == CustomTags.NoTag else CBORTag(tag, value)

    def decode_value(self, value: Any) -> Any:
        """Decode special number tags in ``value`` (if enabled), recursing into containers."""
        if isinstance(value, CBORTag):
            if self._handle_special_numbers:
                inner = value.value
                if value.tag == _POSITIVE_BIGNUM:
                    return decode_positive_bignum(inner if isinstance(inner, bytes) else b"")
                if value.tag == _NEGATIVE_BIGNUM:
                    return decode_negative_bignum(inner if isinstance(inner, bytes) else b"")
                if value.tag == _DECIMAL:
                    return decode_decimal(inner)
                if value.tag == _BIGFLOAT:
                    return decode_bigfloat(inner)
                if value.tag == ExtendedTags.RationaleNumber:
                    return decode_rational(inner)
            return CBORTag(value.tag, self.decode_value(value.value))
        if isinstance(value, list):
            return [self.decode_value(item) for item in value]
        if isinstance(value, dict):
            return {key: self.decode_value(item) for key, item in value.items()}
        return value

    def serialize_to(self, data: Any) -> bytes:
        """Encode ``data`` as CBOR bytes, tagging values whose type has a type tag."""
        try:
            return cbor2.dumps(self._apply_tags(data))
        except (cbor2.CBOREncodeError, TypeError, ValueError) as error:
            raise SerializationError(str(error)) from error

    def deserialize_from(self, data: bytes) -> Any:
        """Decode one CBOR item from ``data``."""
        return self.decode_value(_read_cbor(data))

    def serialize_to_file(self, fp: IO[bytes], data: Any) -> None:
        """Write ``data`` as CBOR to the open, writable binary file ``fp``."""
        if getattr(fp, "closed", False) or not fp.writable():
            raise SerializationError("file must be open and writable!")
        fp.write(self.serialize_to(data))

    def deserialize_from_file(self, fp: IO[bytes]) -> Any:
        """Read one CBOR item from the open, readable binary file ``fp``."""
        if getattr(fp, "closed", False) or not fp.readable():
            raise DeserializationError("file must be open and readable!")
        return self.deserialize_from(fp.read())