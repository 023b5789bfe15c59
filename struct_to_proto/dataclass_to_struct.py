# Standard
from datetime import date, datetime, time
from typing import Annotated, Any, Dict, NewType, Optional, Union, get_args, get_origin
import collections.abc
import dataclasses
import types
import typing

# Third Party
from google.protobuf import timestamp_pb2

# First Party
import alog

# Local
from .descriptors import (
    Kind,
    Map,
    Pointer,
    Scalar,
    Sequence,
    Struct,
    StructField,
    TypeDescriptor,
    Unsupported,
)

log = alog.use_channel("DCLS2S")


## Globals #####################################################################

# Fixed width aliases for annotating dataclass fields beyond the native types
int8 = NewType("int8", int)
int16 = NewType("int16", int)
int32 = NewType("int32", int)
int64 = NewType("int64", int)
uint = NewType("uint", int)
uint8 = NewType("uint8", int)
uint16 = NewType("uint16", int)
uint32 = NewType("uint32", int)
uint64 = NewType("uint64", int)
float32 = NewType("float32", float)
float64 = NewType("float64", float)

# Types that are carried as timestamps rather than nested messages
TIME_LIKE_TYPES = (datetime, date, time, timestamp_pb2.Timestamp)

PY_TO_STRUCT_TYPES = {
    bool: Scalar(Kind.BOOL),
    int: Scalar(Kind.INT),
    float: Scalar(Kind.FLOAT64),
    str: Scalar(Kind.STRING),
    # Raw bytes are a sequence of octets
    bytes: Sequence(Scalar(Kind.UINT8)),
    int8: Scalar(Kind.INT8),
    int16: Scalar(Kind.INT16),
    int32: Scalar(Kind.INT32),
    int64: Scalar(Kind.INT64),
    uint: Scalar(Kind.UINT),
    uint8: Scalar(Kind.UINT8),
    uint16: Scalar(Kind.UINT16),
    uint32: Scalar(Kind.UINT32),
    uint64: Scalar(Kind.UINT64),
    float32: Scalar(Kind.FLOAT32),
    float64: Scalar(Kind.FLOAT64),
}

_SEQUENCE_ORIGINS = (
    list,
    set,
    frozenset,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Set,
    collections.abc.MutableSet,
    collections.abc.Iterable,
)
_MAP_ORIGINS = (dict, collections.abc.Mapping, collections.abc.MutableMapping)
_UNION_ORIGINS = tuple(
    origin for origin in (Union, getattr(types, "UnionType", None)) if origin
)

## Interface ###################################################################


class Embedded:
    """Annotation marking a dataclass field whose own fields are flattened
    into the containing message, e.g. `base: Annotated[Base, Embedded()]`
    """


def dataclass_to_struct(
    dataclass_: type,
    *,
    validate: bool = False,
    type_mapping: Optional[Dict[Any, TypeDescriptor]] = None,
) -> Struct:
    """Convert a dataclass into a Struct type descriptor.

    Reference: https://docs.python.org/3/library/dataclasses.html#dataclasses.dataclass

    Args:
        dataclass_:  type
            The dataclass class

    Kwargs:
        validate:  bool
            Whether or not to validate the class proactively
        type_mapping:  Optional[Dict[Any, TypeDescriptor]]
            A non-default mapping from python types to type descriptors

    Returns:
        struct:  Struct
            The descriptor for the dataclass and all of its fields
    """
    return DataclassConverter(
        dataclass_=dataclass_,
        validate=validate,
        type_mapping=type_mapping,
    ).struct


## Impl ########################################################################


class DataclassConverter:
    """Walks a dataclass's type annotations to build its descriptor"""

    def __init__(
        self,
        dataclass_: type,
        *,
        type_mapping: Optional[Dict[Any, TypeDescriptor]] = None,
        validate: bool = False,
    ):
        self.type_mapping = type_mapping or PY_TO_STRUCT_TYPES
        if validate:
            log.debug2("Validating")
            if not self.validate(dataclass_):
                raise ValueError(f"Invalid Schema: {dataclass_}")

        # Structs already seen in this conversion so that self-referencing
        # dataclasses terminate
        self._structs: Dict[type, Struct] = {}

        log.debug("Performing conversion of %s", dataclass_)
        struct = self._convert(dataclass_)
        if not isinstance(struct, Struct) or struct.is_time_like:
            raise ValueError(f"Only dataclasses can be converted: {dataclass_}")
        self.struct = struct

    @staticmethod
    def validate(source_schema: type) -> bool:
        """Perform preprocess validation of the input"""
        return isinstance(source_schema, type) and dataclasses.is_dataclass(
            source_schema
        )

    ## Implementation Details ##################################################

    def _convert(self, entry: Any) -> TypeDescriptor:
        """Recursively convert a python type annotation to a descriptor"""
        origin = get_origin(entry)
        args = get_args(entry)

        # Unwrap any Annotations
        if origin is Annotated:
            return self._convert(args[0])

        if self._is_mapped(entry):
            log.debug4("Mapped type: %s", entry)
            return self.type_mapping[entry]

        # User defined NewTypes resolve to their supertype
        supertype = getattr(entry, "__supertype__", None)
        if supertype is not None:
            return self._convert(supertype)

        if origin in _UNION_ORIGINS:
            non_none_args = [arg for arg in args if arg is not type(None)]
            if len(non_none_args) == 1 and len(args) == 2:
                log.debug3("Handling optional: %s", entry)
                return Pointer(self._convert(non_none_args[0]))
            return Unsupported(self._type_name(entry))

        if origin is tuple:
            if len(args) == 2 and args[1] is Ellipsis:
                return Sequence(self._convert(args[0]))
            if args and all(arg == args[0] for arg in args):
                return Sequence(self._convert(args[0]))
            return Unsupported(self._type_name(entry))

        if origin in _SEQUENCE_ORIGINS and len(args) == 1:
            log.debug3("Handling sequence: %s", entry)
            return Sequence(self._convert(args[0]))

        if origin in _MAP_ORIGINS and len(args) == 2:
            log.debug3("Handling map: %s", entry)
            return Map(self._convert(args[0]), self._convert(args[1]))

        if isinstance(entry, type) and issubclass(entry, TIME_LIKE_TYPES):
            return Struct(
                name=entry.__name__,
                qualified_name=self._qualified_name(entry),
                is_time_like=True,
            )

        if isinstance(entry, type) and dataclasses.is_dataclass(entry):
            return self._convert_dataclass(entry)

        log.debug2("Unsupported type: %s", entry)
        return Unsupported(self._type_name(entry))

    def _convert_dataclass(self, dataclass_: type) -> Struct:
        """Build the Struct for a dataclass, registering it before walking the
        fields
        """
        if dataclass_ in self._structs:
            return self._structs[dataclass_]

        struct = Struct(
            name=dataclass_.__name__,
            qualified_name=self._qualified_name(dataclass_),
        )
        self._structs[dataclass_] = struct

        try:
            hints = typing.get_type_hints(dataclass_, include_extras=True)
        except NameError as err:
            raise ValueError(f"Cannot resolve annotations of {dataclass_}") from err

        for field in dataclasses.fields(dataclass_):
            field_type = hints.get(field.name, field.type)
            log.debug2("Handling field [%s.%s]", struct.name, field.name)
            struct.fields.append(
                StructField(
                    name=field.name,
                    type=self._convert(field_type),
                    exported=not field.name.startswith("_"),
                    embedded=self._is_embedded(field_type),
                )
            )
        return struct

    def _is_mapped(self, entry: Any) -> bool:
        try:
            return entry in self.type_mapping
        except TypeError:
            # Unhashable annotation
            return False

    @staticmethod
    def _is_embedded(field_type: Any) -> bool:
        if get_origin(field_type) is not Annotated:
            return False
        return any(
            arg is Embedded or isinstance(arg, Embedded)
            for arg in get_args(field_type)[1:]
        )

    @staticmethod
    def _qualified_name(type_: type) -> str:
        return f"{type_.__module__}.{type_.__qualname__}"

    @staticmethod
    def _type_name(entry: Any) -> str:
        if isinstance(entry, type):
            return entry.__name__
        return str(entry).replace("typing.", "")
