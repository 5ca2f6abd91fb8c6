import io

import pytest

from cborjson.cbor import CustomTags
from cborjson.exceptions import DeserializationError, SerializationError
from cborjson.json import ByteArrayFormat, JsonSerializer


@pytest.fixture
def serializer():
    return JsonSerializer()


def test_defaults(serializer):
    assert serializer.byte_array_format is ByteArrayFormat.Base64
    assert serializer.json_mode() is True


def test_validate_base64_setting(serializer):
    serializer.validate_base64 = False
    assert serializer.validate_base64 is False


@pytest.mark.parametrize(
    "fmt, tag",
    [
        (ByteArrayFormat.Base64, 22),
        (ByteArrayFormat.Base64url, 21),
        (ByteArrayFormat.Base16, 23),
    ],
)
def test_type_tag_for_bytes(serializer, fmt, tag):
    serializer.byte_array_format = fmt
    assert serializer.type_tag("bytes") == tag


def test_type_tag_other_types(serializer):
    assert serializer.type_tag("str") == CustomTags.NoTag


def test_types_for_tag_empty(serializer):
    assert serializer.types_for_tag(22) == []


def test_invalid_format_rejected(serializer):
    with pytest.raises(ValueError):
        serializer.byte_array_format = "base32"
    assert serializer.byte_array_format is ByteArrayFormat.Base64
    assert serializer.type_tag("bytes") == 22


def test_compact_output(serializer):
    assert serializer.serialize_to({"a": 1}) == b'{"a":1}'


def test_indented_output_round_trip(serializer):
    data = {"a": [1, 2], "b": {"c": "d"}}
    out = serializer.serialize_to(data, compact=False)
    assert b"\n" in out
    assert serializer.deserialize_from(out) == data


def test_round_trip(serializer):
    data = [1, 2.5, True, None, "x", {"k": [1, 2]}]
    assert serializer.deserialize_from(serializer.serialize_to(data)) == data


def test_bytes_base64(serializer):
    out = serializer.deserialize_from(serializer.serialize_to([b"\x00UUU"]))
    assert out == ["AFVVVQ=="]


def test_bytes_base64url(serializer):
    serializer.byte_array_format = ByteArrayFormat.Base64url
    out = serializer.deserialize_from(serializer.serialize_to([b"\x00UUU"]))
    assert out == ["AFVVVQ"]


def test_bytes_base16(serializer):
    serializer.byte_array_format = ByteArrayFormat.Base16
    out = serializer.deserialize_from(serializer.serialize_to([b"\x00UUU"]))
    assert out == ["00555555"]


def test_scalar_cannot_be_written(serializer):
    with pytest.raises(SerializationError) as info:
        serializer.serialize_to(42)
    assert "Only objects or arrays" in info.value.message()


def test_unsupported_value(serializer):
    with pytest.raises(SerializationError):
        serializer.serialize_to([object()])


def test_invalid_json(serializer):
    with pytest.raises(DeserializationError) as info:
        serializer.deserialize_from(b"{not json")
    assert info.value.message().startswith(
        "Failed to deserialize with error: Failed to read file as JSON with error:"
    )


def test_scalar_document_rejected(serializer):
    with pytest.raises(DeserializationError):
        serializer.deserialize_from(b"42")


def test_file_round_trip(serializer):
    buffer = io.BytesIO()
    serializer.serialize_to_file(buffer, {"x": [1, 2, 3]})
    buffer.seek(0)
    assert serializer.deserialize_from_file(buffer) == {"x": [1, 2, 3]}


def test_closed_file_write(serializer):
    buffer = io.BytesIO()
    buffer.close()
    with pytest.raises(SerializationError):
        serializer.serialize_to_file(buffer, {"x": 1})


def test_closed_file_read(serializer):
    buffer = io.BytesIO(b"{}")
    buffer.close()
    with pytest.raises(DeserializationError):
        serializer.deserialize_from_file(buffer)