"""
This library converts record types (dataclasses or explicit type descriptors)
into Protobuf message definitions.

Rerferences:
* https://developers.google.com/protocol-buffers
* https://docs.python.org/3/library/dataclasses.html

Example:

```
from dataclasses import dataclass

import struct_to_proto

@dataclass
class User:
    \"\"\"UserInfo\"\"\"

    id: str  # id field
    name: str  # username
    age: int  # user age

print(struct_to_proto.structs_to_proto([User]))
# // UserInfo
# message User {
#   string id = 1; // id field
#   string name = 2; // username
#   int64 age = 3; // user age
# }
```
"""

# Local
from .classifier import allowed_map_key, allowed_map_value, classify
from .comments import (
    CommentSource,
    DictCommentSource,
    NoCommentSource,
    SourceCommentSource,
)
from .dataclass_to_struct import (
    Embedded,
    dataclass_to_struct,
    float32,
    float64,
    int8,
    int16,
    int32,
    int64,
    uint,
    uint8,
    uint16,
    uint32,
    uint64,
)
from .descriptors import (
    Kind,
    Map,
    Pointer,
    Scalar,
    Sequence,
    Struct,
    StructField,
    Unsupported,
)
from .emitter import (
    struct_to_fields,
    struct_to_message,
    structs_to_proto,
    structs_to_proto_file,
)
from .errors import (
    CommentLookupError,
    ConversionError,
    ErrorKind,
    UnsupportedMapShapeError,
    UnsupportedTypeError,
)
from .message import Message, MessageField
from .utils import to_lower_camel
