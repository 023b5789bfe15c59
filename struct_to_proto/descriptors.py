"""
Explicit descriptors for the record types that get converted to proto
messages. These stand in for live type reflection so that classification is
total and can be exercised without a host type system.
"""

# Standard
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union


class Kind(Enum):
    """Scalar kinds understood by the classifier"""

    FLOAT32 = "float32"
    FLOAT64 = "float64"
    INT = "int"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    UINT = "uint"
    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"
    BOOL = "bool"
    STRING = "string"


FLOAT_KINDS = (Kind.FLOAT32, Kind.FLOAT64)


@dataclass(frozen=True)
class Scalar:
    """A scalar type. The name is the host-facing type name and is what gets
    rendered for map keys.
    """

    kind: Kind
    name: Optional[str] = None

    def __post_init__(self):
        if self.name is None:
            object.__setattr__(self, "name", self.kind.value)


@dataclass(frozen=True)
class Sequence:
    """An array or variable length list"""

    elem: "TypeDescriptor"

    @property
    def name(self) -> str:
        return f"List[{self.elem.name}]"


@dataclass(frozen=True)
class Map:
    """A key/value mapping"""

    key: "TypeDescriptor"
    value: "TypeDescriptor"

    @property
    def name(self) -> str:
        return f"Dict[{self.key.name}, {self.value.name}]"


@dataclass(frozen=True)
class Pointer:
    """An optional/pointer wrapper around another type"""

    pointee: "TypeDescriptor"

    @property
    def name(self) -> str:
        return f"Optional[{self.pointee.name}]"


@dataclass(frozen=True)
class Unsupported:
    """Any type with no proto representation (channels, functions, ...)"""

    name: str


@dataclass(eq=False)
class StructField:
    """One declared field of a record type"""

    name: str
    type: "TypeDescriptor"
    exported: bool = True
    embedded: bool = False


@dataclass(eq=False)
class Struct:
    """A record type with fields in declaration order.

    The field list is mutable so that self-referencing records can be built by
    registering the Struct before its fields are resolved.
    """

    name: str
    fields: List[StructField] = field(default_factory=list)
    qualified_name: Optional[str] = None
    is_time_like: bool = False

    def __post_init__(self):
        if not self.name:
            raise ValueError("A Struct must have a non-empty name")
        if self.qualified_name is None:
            self.qualified_name = self.name


TypeDescriptor = Union[Scalar, Sequence, Map, Pointer, Struct, Unsupported]
