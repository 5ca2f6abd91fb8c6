# cborjson

Read and write CBOR and JSON data from plain Python values. The package also
covers these related tasks:

- it tags values of chosen types with CBOR tags;
- it decodes the special CBOR number formats;
- it fills typed containers by type name;
- it raises errors that record which properties were being processed.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## CBOR (`cborjson.cbor`)

```python
from cborjson.cbor import CborSerializer, CustomTags

serializer = CborSerializer()
encoded = serializer.serialize_to({"id": 10, "scores": [0.0, 6.66, 47.11]})
value = serializer.deserialize_from(encoded)

with open("data.cbor", "wb") as fp:
    serializer.serialize_to_file(fp, value)
with open("data.cbor", "rb") as fp:
    value = serializer.deserialize_from_file(fp)
```

`deserialize_from` reads one CBOR item. It returns plain Python values. Tagged
items come back as `cbor2.CBORTag`. Malformed input raises
`DeserializationError`.

`serialize_to_file` raises `SerializationError` if the file is closed or not
writable. `deserialize_from_file` raises `DeserializationError` if the file is
closed or not readable.

### Special numbers

`handle_special_numbers` is a property and is off by default. When it is set to
`True`, decoding turns these tagged numbers into Python numbers:

- positive bignums (tag 2) and negative bignums (tag 3), up to 8 bytes;
- decimal fractions (tag 4);
- bigfloats (tag 5);
- rational numbers (tag 30).

The same conversions are available for raw payloads:

- `decode_positive_bignum`
- `decode_negative_bignum`
- `decode_decimal`
- `decode_bigfloat`
- `decode_rational`

`decode_value` applies them to a value that has already been read.

### Type tags

A CBOR tag can be attached to a type name. When writing, every value whose
class name matches is wrapped in that tag. `Color` and `Font` are tagged by
default.

```python
serializer.set_type_tag("Version", CustomTags.VersionNumber)
serializer.type_tag("Version")                    # CustomTags.VersionNumber
serializer.types_for_tag(CustomTags.VersionNumber)  # ["Version"]
serializer.set_type_tag("Version", CustomTags.NoTag)  # removes the tag
```

`ExtendedTags` lists the registered tag numbers the package knows about.
`CustomTags` lists its own tag numbers. `CustomTags.NoTag` means "no tag".

## JSON (`cborjson.json`)

```python
from cborjson.json import JsonSerializer, ByteArrayFormat

serializer = JsonSerializer()
serializer.byte_array_format = ByteArrayFormat.Base16
text = serializer.serialize_to({"title": "Example", "raw": b"\x01\x02"})
value = serializer.deserialize_from(text)
```

`serialize_to(data, compact=True)` returns UTF-8 bytes. With `compact=False`
it writes indented output instead. Only objects and arrays are accepted at the
top level; anything else raises `SerializationError`.

How values are written:

- Tuples and sets become arrays.
- Enum members are written as their values.
- Non-finite floats become `null`.
- Byte strings become strings in the chosen `byte_array_format`: `Base64`
  (padded), `Base64url` (unpadded) or `Base16` (hex).

`deserialize_from` accepts bytes or a string. It raises `DeserializationError`
in two cases: if the input is not valid JSON, or if its top level is not an
object or an array. `serialize_to_file` and `deserialize_from_file` work like
their CBOR counterparts.

`type_tag("bytes")` returns the CBOR "expected encoding" tag that matches the
byte array format. `types_for_tag` always returns an empty list.

## Container writers (`cborjson.metawriters`)

Writers fill lists, sets and dicts and are looked up by type name. Writers are
made by factories that you register:

```python
from cborjson import metawriters

metawriters.register_sequential_writer("list[int]", lambda d: metawriters.ListWriter(d, "int"))
target = []
writer = metawriters.get_sequential_writer("list[int]", target)
writer.add("5")          # target == [5]
```

For names without a registered factory, `sequence_info` and `association_info`
work out the element types by parsing the name. `parse_sequence_info` and
`parse_association_info` do the parsing directly. Both `<...>` and `[...]`
forms are understood, for example `set<str>` or `dict[str, float]`.

## Type checks (`cborjson.typeinfo`)

- `is_serializable(tp)` tells whether a type annotation can be serialized.
- `json_type(tp)` returns the `JsonKind` that values of that type are written
  as: `VALUE`, `OBJECT` or `ARRAY`.

## Errors (`cborjson.exceptions`)

`SerializationError` and `DeserializationError` derive from `SerializerError`.
Each error records two things:

- its `message()`;
- a `property_trace()`: the (name, type) pairs that were active in the current
  thread when it was created.

Mark nested work with `ExceptionContext` to add entries to the trace:

```python
from cborjson.exceptions import ExceptionContext, DeserializationError

with ExceptionContext("child", "Sample"):
    error = DeserializationError("bad data")
error.property_trace()   # [("child", "Sample")]
```

## What the package does not do

The serializers work on plain values only: dicts, lists, numbers, strings,
bytes and similar. They do not turn objects or dataclasses into property maps,
and reading does not produce typed objects. Byte strings written to JSON are
not decoded back into bytes. The `validate_base64` setting is stored but is not
applied when reading.