"""
Tests for the type classifier
"""

# Third Party
import pytest

# Local
from struct_to_proto.classifier import allowed_map_key, allowed_map_value, classify
from struct_to_proto.descriptors import (
    Kind,
    Map,
    Pointer,
    Scalar,
    Sequence,
    Struct,
    Unsupported,
)
from struct_to_proto.errors import (
    ConversionError,
    ErrorKind,
    UnsupportedMapShapeError,
    UnsupportedTypeError,
)

## Happy Path ##################################################################


@pytest.mark.parametrize(
    ["kind", "expected"],
    [
        (Kind.FLOAT64, "double"),
        (Kind.FLOAT32, "float"),
        (Kind.INT, "int64"),
        (Kind.INT64, "int64"),
        (Kind.INT32, "int32"),
        (Kind.INT16, "int32"),
        (Kind.INT8, "int32"),
        (Kind.UINT, "uint64"),
        (Kind.UINT64, "uint64"),
        (Kind.UINT32, "uint32"),
        (Kind.UINT16, "uint32"),
        (Kind.UINT8, "uint32"),
        (Kind.BOOL, "bool"),
        (Kind.STRING, "string"),
    ],
)
def test_classify_scalars(kind, expected):
    """Make sure every scalar kind maps to its proto keyword"""
    assert classify(Scalar(kind)) == expected
    assert classify(Scalar(kind), strict=False) == expected


def test_classify_sequence():
    """Make sure sequences are wrapped as repeated"""
    assert classify(Sequence(Scalar(Kind.STRING))) == "repeated string"


def test_classify_nested_sequence():
    """Make sure nested sequences are not special cased"""
    nested = Sequence(Sequence(Scalar(Kind.INT32)))
    assert classify(nested) == "repeated repeated int32"


def test_classify_sequence_of_messages():
    """Make sure a sequence of records references the message by name"""
    assert classify(Sequence(Struct("Job"))) == "repeated Job"


def test_classify_map():
    """Make sure a map with allowed key and value is rendered with the raw key
    name and the classified value
    """
    assert classify(Map(Scalar(Kind.STRING), Scalar(Kind.INT))) == "map<string, int64>"


def test_classify_map_uses_raw_key_name():
    """Make sure the key is rendered by its host name, not its proto type"""
    map_type = Map(Scalar(Kind.INT32, name="UserId"), Scalar(Kind.STRING))
    assert classify(map_type) == "map<UserId, string>"
    assert classify(Map(Scalar(Kind.INT), Scalar(Kind.BOOL))) == "map<int, bool>"


def test_classify_map_message_value():
    """Make sure map values may be records or optional records"""
    assert classify(Map(Scalar(Kind.STRING), Struct("User"))) == "map<string, User>"
    assert (
        classify(Map(Scalar(Kind.STRING), Pointer(Struct("User"))))
        == "map<string, User>"
    )


def test_classify_map_lenient_float_key():
    """Make sure a floating point key degrades the value to Any when not strict"""
    map_type = Map(Scalar(Kind.FLOAT64), Scalar(Kind.STRING))
    assert classify(map_type, strict=False) == "map<float64, Any>"


def test_classify_map_lenient_container_value():
    """Make sure container values degrade to Any when not strict"""
    nested_map = Map(Scalar(Kind.STRING), Map(Scalar(Kind.STRING), Scalar(Kind.INT)))
    assert classify(nested_map, strict=False) == "map<string, Any>"
    list_value = Map(Scalar(Kind.STRING), Sequence(Scalar(Kind.INT)))
    assert classify(list_value, strict=False) == "map<string, Any>"


def test_classify_time_like_struct():
    """Make sure time-like records are carried as int64 timestamps"""
    assert classify(Struct("LocalTime", is_time_like=True)) == "int64"


def test_classify_struct_reference():
    """Make sure other records are referenced by their bare name"""
    struct = Struct("Job", qualified_name="some.module.Job")
    assert classify(struct) == "Job"


def test_classify_pointer():
    """Make sure optional wrappers are unwrapped"""
    assert classify(Pointer(Scalar(Kind.UINT8))) == "uint32"
    assert classify(Pointer(Pointer(Struct("Job")))) == "Job"


def test_allowed_map_key():
    """Make sure only non-floating scalars are allowed as keys"""
    assert allowed_map_key(Scalar(Kind.STRING))
    assert allowed_map_key(Scalar(Kind.UINT16))
    assert allowed_map_key(Scalar(Kind.BOOL))
    assert not allowed_map_key(Scalar(Kind.FLOAT32))
    assert not allowed_map_key(Scalar(Kind.FLOAT64))
    assert not allowed_map_key(Sequence(Scalar(Kind.STRING)))
    assert not allowed_map_key(Map(Scalar(Kind.STRING), Scalar(Kind.STRING)))
    assert not allowed_map_key(Struct("User"))


def test_allowed_map_value():
    """Make sure containers are not allowed as values"""
    assert allowed_map_value(Scalar(Kind.FLOAT32))
    assert allowed_map_value(Struct("User"))
    assert not allowed_map_value(Sequence(Scalar(Kind.STRING)))
    assert not allowed_map_value(Map(Scalar(Kind.STRING), Scalar(Kind.STRING)))


## Error Cases #################################################################


def test_classify_map_strict_float_key():
    """Make sure a floating point key is fatal in strict mode"""
    with pytest.raises(UnsupportedMapShapeError) as exc_info:
        classify(Map(Scalar(Kind.FLOAT32), Scalar(Kind.STRING)), strict=True)
    assert exc_info.value.kind == ErrorKind.UNSUPPORTED_MAP_SHAPE
    assert exc_info.value.type_name == "Dict[float32, string]"


def test_classify_map_strict_container_value():
    """Make sure a nested map value is fatal in strict mode"""
    nested_map = Map(Scalar(Kind.STRING), Map(Scalar(Kind.STRING), Scalar(Kind.INT)))
    with pytest.raises(UnsupportedMapShapeError):
        classify(nested_map)


@pytest.mark.parametrize("strict", [True, False])
def test_classify_unsupported(strict):
    """Make sure unsupported types are fatal regardless of strictness"""
    with pytest.raises(UnsupportedTypeError) as exc_info:
        classify(Unsupported("complex"), strict=strict)
    assert exc_info.value.kind == ErrorKind.UNSUPPORTED_TYPE
    assert exc_info.value.type_name == "complex"
    assert isinstance(exc_info.value, ConversionError)
    assert isinstance(exc_info.value, ValueError)


def test_classify_unsupported_nested():
    """Make sure unsupported types inside containers are still fatal"""
    with pytest.raises(UnsupportedTypeError):
        classify(Sequence(Unsupported("Callable")), strict=False)
    with pytest.raises(UnsupportedTypeError):
        classify(Pointer(Unsupported("Queue")), strict=False)
    with pytest.raises(UnsupportedTypeError):
        classify(Map(Scalar(Kind.STRING), Unsupported("Any")), strict=False)
