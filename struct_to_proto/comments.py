"""
Sources for the human authored comments that are carried over onto messages
and their fields.

A comment source is looked up by a type's qualified name and returns the
message-level comment along with a mapping from declared field name to that
field's trailing comment.
"""

# Standard
from typing import Dict, Mapping, Set, Tuple, Type
import abc
import ast
import dataclasses
import importlib
import inspect
import io
import textwrap
import tokenize

# First Party
import alog

# Local
from .errors import CommentLookupError

log = alog.use_channel("S2PCMT")

# (message comment, {field name: field comment})
CommentInfo = Tuple[str, Dict[str, str]]

SOURCE_COMMENT_MARKER = "#"


## Interface ###################################################################


class CommentSource(abc.ABC):
    """Abstract interface for looking up the comments of a record type"""

    @abc.abstractmethod
    def get_comment(self, qualified_name: str) -> CommentInfo:
        """Get the message comment and per-field comments for the type with
        the given qualified name

        Raises:
            CommentLookupError: The type cannot be located or introspected
        """


class NoCommentSource(CommentSource):
    """Comment source for callers that have no documentation to carry over"""

    def get_comment(self, qualified_name: str) -> CommentInfo:
        return "", {}


class DictCommentSource(CommentSource):
    """Comment source backed by a fixed mapping from qualified type name to
    (message comment, field comments)
    """

    def __init__(self, comments: Mapping[str, CommentInfo]):
        self._comments = dict(comments)

    def get_comment(self, qualified_name: str) -> CommentInfo:
        if qualified_name not in self._comments:
            raise CommentLookupError(
                f"No comments registered for {qualified_name}",
                type_name=qualified_name,
            )
        message_comment, field_comments = self._comments[qualified_name]
        return message_comment, dict(field_comments)


class SourceCommentSource(CommentSource):
    """Comment source that reads the Python source of a class.

    The message comment is the first line of the class docstring. A field's
    comment is the trailing comment on the line that declares it, e.g.

        @dataclass
        class User:
            \"\"\"UserInfo\"\"\"
            id: str  # id field

    Several comment markers on one line are joined with a single space. Fields
    inherited from base dataclasses use the comments from the base's source
    unless the subclass redeclares them.
    """

    def get_comment(self, qualified_name: str) -> CommentInfo:
        cls = self._resolve(qualified_name)
        message_comment = ""
        field_comments = {}

        # Walk the bases first so that declarations on the class itself win
        for klass in reversed(cls.__mro__):
            if klass is not cls and not dataclasses.is_dataclass(klass):
                continue
            (
                class_comment,
                class_field_comments,
                declared_names,
            ) = self._read_class_comments(klass)
            # A redeclared field only keeps a comment from its own declaration
            for field_name in declared_names - class_field_comments.keys():
                field_comments.pop(field_name, None)
            field_comments.update(class_field_comments)
            if klass is cls:
                message_comment = class_comment

        log.debug3(
            "Comments for %s: [%s] %s", qualified_name, message_comment, field_comments
        )
        return message_comment, field_comments

    ## Implementation Details ##################################################

    @staticmethod
    def _resolve(qualified_name: str) -> Type:
        """Import the class named by <module>.<qualname>, trying the longest
        importable module prefix first
        """
        parts = qualified_name.split(".")
        if "<locals>" in parts:
            raise CommentLookupError(
                f"Cannot locate {qualified_name}: declared in a local scope",
                type_name=qualified_name,
            )
        for split in range(len(parts) - 1, 0, -1):
            module_name = ".".join(parts[:split])
            try:
                obj = importlib.import_module(module_name)
            except ImportError:
                log.debug4("No module named %s", module_name)
                continue
            try:
                for attr in parts[split:]:
                    obj = getattr(obj, attr)
            except AttributeError as err:
                raise CommentLookupError(
                    f"Cannot locate {qualified_name}: {err}",
                    type_name=qualified_name,
                ) from err
            if not isinstance(obj, type):
                raise CommentLookupError(
                    f"{qualified_name} is not a class", type_name=qualified_name
                )
            return obj
        raise CommentLookupError(
            f"Cannot locate {qualified_name}: no importable module",
            type_name=qualified_name,
        )

    @classmethod
    def _read_class_comments(cls, klass: Type) -> Tuple[str, Dict[str, str], Set[str]]:
        """Parse the class source for its docstring, its trailing field
        comments and the names of the fields it declares
        """
        name = f"{klass.__module__}.{klass.__qualname__}"
        try:
            source_lines, _ = inspect.getsourcelines(klass)
        except (OSError, TypeError) as err:
            raise CommentLookupError(
                f"Cannot read source for {name}: {err}", type_name=name
            ) from err
        source = textwrap.dedent("".join(source_lines))

        try:
            class_node = next(
                node
                for node in ast.parse(source).body
                if isinstance(node, ast.ClassDef)
            )
            line_comments = cls._get_line_comments(source)
        except (SyntaxError, StopIteration, tokenize.TokenError) as err:
            raise CommentLookupError(
                f"Cannot parse source for {name}: {err}", type_name=name
            ) from err

        docstring = ast.get_docstring(class_node) or ""
        message_comment = docstring.strip().split("\n")[0].strip()

        field_comments = {}
        declared_names = set()
        for stmt in class_node.body:
            if not isinstance(stmt, ast.AnnAssign) or not isinstance(
                stmt.target, ast.Name
            ):
                continue
            declared_names.add(stmt.target.id)
            # Comments may trail the closing line or the opening line of a
            # declaration that spans several lines
            comment = line_comments.get(stmt.end_lineno) or line_comments.get(
                stmt.lineno
            )
            if comment:
                field_comments[stmt.target.id] = comment
        return message_comment, field_comments, declared_names

    @staticmethod
    def _get_line_comments(source: str) -> Dict[int, str]:
        """Map line numbers to the text of the comment on that line"""
        line_comments = {}
        for token in tokenize.generate_tokens(io.StringIO(source).readline):
            if token.type != tokenize.COMMENT:
                continue
            parts = [
                part.strip()
                for part in token.string.split(SOURCE_COMMENT_MARKER)[1:]
                if part.strip()
            ]
            if parts:
                line_comments[token.start[0]] = " ".join(parts)
        return line_comments
