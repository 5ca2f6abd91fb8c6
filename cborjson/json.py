"""JSON serializer: byte array formats and reading/writing JSON documents."""

from __future__ import annotations

import base64
import binascii
import enum
import json
import math
from collections.abc import Mapping
from typing import IO, Any

from .cbor import CustomTags
from .exceptions import DeserializationError, SerializationError

__all__ = ["ByteArrayFormat", "JsonSerializer"]

_EXPECTED_BASE64URL = 21
_EXPECTED_BASE64 = 22
_EXPECTED_BASE16 = 23

_BYTES_TYPE = "bytes"

# JSON values never carry CBOR tags, so no tag leads back to a type.
_TAG_TYPES: Mapping[int, tuple[str, ...]] = {}


class ByteArrayFormat(enum.Enum):
    """How byte strings are written as JSON strings."""

    Base64 = "base64"
    Base64url = "base64url"
    Base16 = "base16"


_FORMAT_TAGS = {
    ByteArrayFormat.Base64: _EXPECTED_BASE64,
    ByteArrayFormat.Base64url: _EXPECTED_BASE64URL,
    ByteArrayFormat.Base16: _EXPECTED_BASE16,
}


class JsonSerializer:
    """Serializes values to JSON documents and back."""

    def __init__(self) -> None:
        self._byte_array_format = ByteArrayFormat.Base64
        self._validate_base64 = True

    @property
    def byte_array_format(self) -> ByteArrayFormat:
        """The format in which byte strings are written as JSON strings."""
        return self._byte_array_format

    @byte_array_format.setter
    def byte_array_format(self, value: ByteArrayFormat) -> None:
        self._byte_array_format = ByteArrayFormat(value)

    @property
    def validate_base64(self) -> bool:
        """Whether base64 data is validated when read instead of silently cleaned up."""
        return self._validate_base64

    @validate_base64.setter
    def validate_base64(self, value: bool) -> None:
        self._validate_base64 = bool(value)

    def json_mode(self) -> bool:
        """This serializer writes JSON."""
        return True

    def type_tag(self, type_name: str) -> int:
        """Return the CBOR "expected encoding" tag for byte strings, ``NoTag`` otherwise."""
        if type_name == _BYTES_TYPE:
            return _FORMAT_TAGS[self._byte_array_format]
        return CustomTags.NoTag

    def types_for_tag(self, tag: int) -> list[str]:
        """Return the types written with ``tag``; JSON carries no tags, so none are found."""
        return list(_TAG_TYPES.get(int(tag), ()))

    def _encode_bytes(self, data: bytes) -> str:
        if self._byte_array_format is ByteArrayFormat.Base64:
            return base64.b64encode(data).decode("ascii")
        if self._byte_array_format is ByteArrayFormat.Base64url:
            return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")
        return binascii.hexlify(data).decode("ascii")

    def _to_json(self, value: Any) -> Any:
        if value is None or isinstance(value, (bool, str, int)):
            return value
        if isinstance(value, float):
            return value if math.isfinite(value) else None
        if isinstance(value, (bytes, bytearray, memoryview)):
            return self._encode_bytes(bytes(value))
        if isinstance(value, Mapping):
            return {str(key): self._to_json(item) for key, item in value.items()}
        if isinstance(value, (list, tuple, set, frozenset)):
            return [self._to_json(item) for item in value]
        if isinstance(value, enum.Enum):
            return self._to_json(value.value)
        raise SerializationError(f"Unable to convert value of type {type(value).__name__} to JSON")

    def serialize_to(self, data: Any, compact: bool = True) -> bytes:
        """Encode ``data`` as a JSON document; only objects and arrays can be written."""
        document = self._to_json(data)
        if not isinstance(document, (dict, list)):
            raise SerializationError("Only objects or arrays can be written to a device!")
        if compact:
            text = json.dumps(document, ensure_ascii=False, separators=(",", ":"), allow_nan=False)
        else:
            text = json.dumps(document, ensure_ascii=False, indent=4, allow_nan=False) + "\n"
        return text.encode("utf-8")

    def deserialize_from(self, data: bytes | str) -> Any:
        """Decode a JSON document holding an object or an array."""
        try:
            text = data.decode("utf-8") if isinstance(data, (bytes, bytearray)) else data
            document = json.loads(text)
        except (UnicodeDecodeError, json.JSONDecodeError) as error:
            raise DeserializationError(
                f"Failed to read file as JSON with error: {error}"
            ) from error
        if not isinstance(document, (dict, list)):
            raise DeserializationError(
                "Failed to read file as JSON with error: illegal value"
            )
        return document

    def serialize_to_file(self, fp: IO[bytes], data: Any, compact: bool = True) -> None:
        """Write ``data`` as JSON to the open, writable binary file ``fp``."""
        if getattr(fp, "closed", False) or not fp.writable():
            raise SerializationError("file must be open and writable!")
        fp.write(self.serialize_to(data, compact))

    def deserialize_from_file(self, fp: IO[bytes]) -> Any:
        """Read a JSON document from the open, readable file ``fp``."""
        if getattr(fp, "closed", False) or not fp.readable():
            raise DeserializationError("file must be open and readable!")
        return self.deserialize_from(fp.read())