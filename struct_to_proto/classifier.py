"""
This module maps type descriptors onto proto type expressions: scalar
keywords, repeated fields, maps and references to other messages by name.
"""

# Third Party
from google.protobuf import any_pb2
from google.protobuf import descriptor as _descriptor

# First Party
import alog

# Local
from .descriptors import (
    FLOAT_KINDS,
    Kind,
    Map,
    Pointer,
    Scalar,
    Sequence,
    Struct,
    TypeDescriptor,
)
from .errors import UnsupportedMapShapeError, UnsupportedTypeError

log = alog.use_channel("S2PCLS")


## Globals #####################################################################

PROTO_TYPE_NAMES = {
    type_val: type_name[5:].lower()
    for type_name, type_val in vars(_descriptor.FieldDescriptor).items()
    if type_name.startswith("TYPE_")
}

# NOTE: Native width integers are treated as 64 bits. Anything narrower than
#   32 bits is widened to the 32 bit varint types since proto has nothing
#   smaller.
KIND_TO_PROTO_TYPES = {
    Kind.FLOAT64: _descriptor.FieldDescriptor.TYPE_DOUBLE,
    Kind.FLOAT32: _descriptor.FieldDescriptor.TYPE_FLOAT,
    Kind.INT: _descriptor.FieldDescriptor.TYPE_INT64,
    Kind.INT64: _descriptor.FieldDescriptor.TYPE_INT64,
    Kind.INT32: _descriptor.FieldDescriptor.TYPE_INT32,
    Kind.INT16: _descriptor.FieldDescriptor.TYPE_INT32,
    Kind.INT8: _descriptor.FieldDescriptor.TYPE_INT32,
    Kind.UINT: _descriptor.FieldDescriptor.TYPE_UINT64,
    Kind.UINT64: _descriptor.FieldDescriptor.TYPE_UINT64,
    Kind.UINT32: _descriptor.FieldDescriptor.TYPE_UINT32,
    Kind.UINT16: _descriptor.FieldDescriptor.TYPE_UINT32,
    Kind.UINT8: _descriptor.FieldDescriptor.TYPE_UINT32,
    Kind.BOOL: _descriptor.FieldDescriptor.TYPE_BOOL,
    Kind.STRING: _descriptor.FieldDescriptor.TYPE_STRING,
}

REPEATED_LABEL = "repeated"
MAP_KEYWORD = "map"
CATCH_ALL_TYPE = any_pb2.Any.DESCRIPTOR.name
TIMESTAMP_TYPE = PROTO_TYPE_NAMES[_descriptor.FieldDescriptor.TYPE_INT64]


## Interface ###################################################################


def classify(type_: TypeDescriptor, strict: bool = True) -> str:
    """Get the proto type expression for the given type descriptor

    Args:
        type_:  TypeDescriptor
            The descriptor of the field's type
        strict:  bool
            If True, maps with a disallowed key or value type raise. Otherwise
            the value type is replaced with the catch-all Any type.

    Returns:
        type_expression:  str
            The scalar keyword, "repeated <T>", "map<K, V>" or the bare name of
            a nested message

    Raises:
        UnsupportedTypeError: The type has no proto representation
        UnsupportedMapShapeError: A map shape is disallowed in strict mode
    """
    if isinstance(type_, Scalar):
        proto_type = KIND_TO_PROTO_TYPES[type_.kind]
        log.debug4("Scalar %s -> %s", type_.kind, PROTO_TYPE_NAMES[proto_type])
        return PROTO_TYPE_NAMES[proto_type]

    if isinstance(type_, Sequence):
        log.debug3("Handling sequence: %s", type_.name)
        return f"{REPEATED_LABEL} {classify(type_.elem, strict)}"

    if isinstance(type_, Map):
        log.debug3("Handling map: %s", type_.name)
        return _classify_map(type_, strict)

    if isinstance(type_, Struct):
        if type_.is_time_like:
            log.debug3("Treating time-like struct %s as a timestamp", type_.name)
            return TIMESTAMP_TYPE
        return type_.name

    if isinstance(type_, Pointer):
        return classify(type_.pointee, strict)

    name = getattr(type_, "name", repr(type_))
    raise UnsupportedTypeError(f"unsupported type: {name}", type_name=name)


def allowed_map_key(type_: TypeDescriptor) -> bool:
    """Map keys may be any integral or string scalar"""
    return isinstance(type_, Scalar) and type_.kind not in FLOAT_KINDS


def allowed_map_value(type_: TypeDescriptor) -> bool:
    """Map values may not be other containers"""
    return not isinstance(type_, (Map, Sequence))


## Impl ########################################################################


def _classify_map(type_: Map, strict: bool) -> str:
    """Render a map type, degrading the value to Any when the shape is not
    allowed and strict mode is off
    """
    if allowed_map_key(type_.key) and allowed_map_value(type_.value):
        value = classify(type_.value, strict)
    elif strict:
        raise UnsupportedMapShapeError(
            f"unsupported map type: key:{type_.key.name}  value:{type_.value.name}",
            type_name=type_.name,
        )
    else:
        log.debug(
            "Unsupported map shape %s, falling back to %s", type_.name, CATCH_ALL_TYPE
        )
        value = CATCH_ALL_TYPE
    return f"{MAP_KEYWORD}<{type_.key.name}, {value}>"
