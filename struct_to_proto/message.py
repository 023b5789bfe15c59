"""
Value objects for the messages being emitted and their text rendering
"""

# Standard
from dataclasses import dataclass
from typing import Tuple

## Globals #####################################################################

PROTO_FILE_INDENT = "  "
PROTO_COMMENT = "//"


## Interface ###################################################################


@dataclass(frozen=True)
class MessageField:
    """A single typed, tagged field of a message"""

    type: str
    name: str
    tag: int
    comment: str = ""

    def __post_init__(self):
        if self.tag <= 0:
            raise ValueError("A field tag must be a positive integer")

    def __str__(self) -> str:
        return f"{self.type} {self.name} = {self.tag}"


@dataclass(frozen=True)
class Message:
    """A proto message with its fields in emission order"""

    name: str
    comment: str = ""
    fields: Tuple[MessageField, ...] = ()

    def __post_init__(self):
        if not self.name:
            raise ValueError("A message must have a non-empty name")
        object.__setattr__(self, "fields", tuple(self.fields))

    def __str__(self) -> str:
        return "".join(f"{line}\n" for line in self.to_lines())

    def to_lines(self):
        """Make the lines of the message block without trailing newlines"""
        lines = []
        if self.comment:
            lines.append(f"{PROTO_COMMENT} {self.comment}")
        lines.append(f"message {self.name} {{")
        for field in self.fields:
            field_line = f"{PROTO_FILE_INDENT}{field};"
            if field.comment:
                field_line += f" {PROTO_COMMENT} {field.comment}"
            lines.append(field_line)
        lines.append("}")
        return lines
