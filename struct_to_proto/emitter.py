"""
This module walks record types and emits the proto message text for them.

Example:

```
from dataclasses import dataclass

import struct_to_proto

@dataclass
class User:
    \"\"\"UserInfo\"\"\"
    id: str  # id field
    age: struct_to_proto.int32

print(struct_to_proto.structs_to_proto([User]))
```
"""

# Standard
from typing import FrozenSet, Iterable, List, Optional, Tuple, Union

# First Party
import alog

# Local
from .classifier import CATCH_ALL_TYPE, classify
from .comments import CommentSource, SourceCommentSource
from .dataclass_to_struct import dataclass_to_struct
from .descriptors import Pointer, Struct
from .errors import UnsupportedTypeError
from .message import Message, MessageField
from .utils import to_lower_camel

log = alog.use_channel("S2PEMT")

## Globals #####################################################################

# A record may be given as an explicit descriptor or as a dataclass
RecordType = Union[Struct, type]

PROTO_FILE_AUTOGEN_HEADER = """
/*------------------------------------------------------------------------------
 * AUTO GENERATED
 *----------------------------------------------------------------------------*/
"""

PROTO_FILE_SYNTAX = "proto3"
CATCH_ALL_IMPORT = "google/protobuf/any.proto"


## Interface ###################################################################


def struct_to_fields(
    struct: Struct,
    start_tag: int = 1,
    strict: bool = True,
    comment_source: Optional[CommentSource] = None,
) -> Tuple[str, List[MessageField]]:
    """Build the tagged message fields for a record

    Args:
        struct:  Struct
            The record to walk
        start_tag:  int
            The tag given to the first emitted field
        strict:  bool
            Whether unsupported map shapes are fatal
        comment_source:  Optional[CommentSource]
            Where to find the record's comments. Defaults to the class source,
            which raises CommentLookupError for names it cannot import.

    Returns:
        comment:  str
            The record's own comment
        fields:  List[MessageField]
            The fields in declaration order with sequential tags. Fields of
            embedded records are spliced in where the embedded field sits.
    """
    comment_source = comment_source or SourceCommentSource()
    return _struct_to_fields(struct, start_tag, strict, comment_source, frozenset())


def struct_to_message(
    struct: Struct,
    strict: bool = True,
    comment_source: Optional[CommentSource] = None,
) -> Message:
    """Build the Message for a single top-level record"""
    comment, fields = struct_to_fields(struct, 1, strict, comment_source)
    return Message(name=struct.name, comment=comment, fields=fields)


def structs_to_proto(
    records: Iterable[RecordType],
    strict: bool = True,
    comment_source: Optional[CommentSource] = None,
) -> str:
    """Convert a batch of records into proto message text

    Args:
        records:  Iterable[Union[Struct, type]]
            Struct descriptors and/or dataclasses, emitted in this order
        strict:  bool
            Whether unsupported map shapes are fatal
        comment_source:  Optional[CommentSource]
            Where to find comments. Defaults to the source of the classes,
            which only resolves importable <module>.<class> names. Explicit
            Struct descriptors whose qualified names are not importable need
            a DictCommentSource or NoCommentSource.

    Returns:
        proto_text:  str
            Each rendered message followed by a blank line

    Raises:
        ConversionError: The first fatal error hit anywhere in the batch. No
            partial output is produced. This includes a CommentLookupError
            when the comment source cannot resolve a record's qualified name.
    """
    messages = _records_to_messages(records, strict, comment_source)
    return "".join(f"{message}\n" for message in messages)


def structs_to_proto_file(
    records: Iterable[RecordType],
    package: Optional[str] = None,
    strict: bool = True,
    comment_source: Optional[CommentSource] = None,
) -> str:
    """Serialize a standalone .proto file holding the messages for a batch of
    records
    """
    messages = _records_to_messages(records, strict, comment_source)
    proto_file_lines = [PROTO_FILE_AUTOGEN_HEADER]
    proto_file_lines.append(f'syntax = "{PROTO_FILE_SYNTAX}";')
    if package:
        proto_file_lines.append(f"package {package};")
    if any(_uses_catch_all(message) for message in messages):
        proto_file_lines.append(f'import "{CATCH_ALL_IMPORT}";')
    proto_file_lines.append("")
    for message in messages:
        proto_file_lines.extend(message.to_lines())
        proto_file_lines.append("")
    return "\n".join(proto_file_lines)


## Impl ########################################################################


def _struct_to_fields(
    struct: Struct,
    start_tag: int,
    strict: bool,
    comment_source: CommentSource,
    flattening: FrozenSet[int],
) -> Tuple[str, List[MessageField]]:
    """Walk a record's fields, tracking the records whose fields are being
    flattened so that a record embedding itself is rejected
    """
    flattening = flattening | {id(struct)}
    comment, field_comments = comment_source.get_comment(struct.qualified_name)

    tag = start_tag
    fields = []
    for struct_field in struct.fields:
        if not struct_field.exported:
            log.debug3(
                "Skipping unexported field [%s.%s]", struct.name, struct_field.name
            )
            continue

        if struct_field.embedded:
            embedded = _unwrap_embedded(struct, struct_field.type)
            log.debug2("Flattening embedded %s into %s", embedded.name, struct.name)
            if id(embedded) in flattening:
                raise UnsupportedTypeError(
                    f"recursive embedded type in {struct.name}: {embedded.name}",
                    type_name=embedded.name,
                )
            _, embedded_fields = _struct_to_fields(
                embedded, tag, strict, comment_source, flattening
            )
            tag += len(embedded_fields)
            fields.extend(embedded_fields)
            continue

        proto_type = classify(struct_field.type, strict)
        field_name = to_lower_camel(struct_field.name)
        log.debug2("Field [%s.%s] (%d): %s", struct.name, field_name, tag, proto_type)
        fields.append(
            MessageField(
                type=proto_type,
                name=field_name,
                tag=tag,
                comment=field_comments.get(struct_field.name, ""),
            )
        )
        tag += 1
    return comment, fields


def _records_to_messages(
    records: Iterable[RecordType],
    strict: bool,
    comment_source: Optional[CommentSource],
) -> List[Message]:
    """Convert every record, stopping at the first error"""
    comment_source = comment_source or SourceCommentSource()
    messages = []
    for record in records:
        if isinstance(record, Struct):
            struct = record
        else:
            struct = dataclass_to_struct(record, validate=True)
        log.debug("Converting %s", struct.qualified_name)
        messages.append(struct_to_message(struct, strict, comment_source))
    return messages


def _unwrap_embedded(struct: Struct, embedded_type) -> Struct:
    """Get the record behind an embedded field, allowing one optional wrapper"""
    if isinstance(embedded_type, Pointer):
        embedded_type = embedded_type.pointee
    if not isinstance(embedded_type, Struct) or embedded_type.is_time_like:
        name = getattr(embedded_type, "name", repr(embedded_type))
        raise UnsupportedTypeError(
            f"unsupported embedded type in {struct.name}: {name}", type_name=name
        )
    return embedded_type


def _uses_catch_all(message: Message) -> bool:
    return any(
        f", {CATCH_ALL_TYPE}>" in field.type or field.type == CATCH_ALL_TYPE
        for field in message.fields
    )
