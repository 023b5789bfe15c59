"""
Error types raised while converting record types to proto message text
"""

# Standard
from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """The category of a fatal conversion failure"""

    UNSUPPORTED_TYPE = "UnsupportedType"
    UNSUPPORTED_MAP_SHAPE = "UnsupportedMapShape"
    COMMENT_LOOKUP_FAILED = "CommentLookupFailed"


class ConversionError(ValueError):
    """Base for all fatal conversion errors. Any one of these aborts the whole
    batch being converted.
    """

    kind: Optional[ErrorKind] = None

    def __init__(self, message: str, type_name: str = ""):
        super().__init__(message)
        self.type_name = type_name


class UnsupportedTypeError(ConversionError):
    """A type falls outside of the classification tree (channels, functions,
    complex numbers, interfaces, ...). This is fatal regardless of strictness.
    """

    kind = ErrorKind.UNSUPPORTED_TYPE


class UnsupportedMapShapeError(ConversionError):
    """A map has a disallowed key or value type and strict mode is on"""

    kind = ErrorKind.UNSUPPORTED_MAP_SHAPE


class CommentLookupError(ConversionError):
    """The comment source could not locate or read a type's declaration"""

    kind = ErrorKind.COMMENT_LOOKUP_FAILED
