"""
Common test helpers
"""

# Standard
import os

# Third Party
import pytest

# First Party
import alog

# Local
from struct_to_proto.comments import DictCommentSource
from struct_to_proto.descriptors import Kind, Scalar, Struct, StructField

# Global logging config
alog.configure(
    default_level=os.environ.get("LOG_LEVEL", "info"),
    filters=os.environ.get("LOG_FILTERS", ""),
    formatter="json" if os.environ.get("LOG_JSON", "").lower() == "true" else "pretty",
    thread_id=os.environ.get("LOG_THREAD_ID", "").lower() == "true",
)


@pytest.fixture
def user_struct():
    """Explicit descriptor for a simple user record"""
    yield Struct(
        name="User",
        fields=[
            StructField("Id", Scalar(Kind.STRING)),
            StructField("Name", Scalar(Kind.STRING)),
            StructField("Age", Scalar(Kind.INT)),
        ],
    )


@pytest.fixture
def user_comments():
    """Canned comments for the user record"""
    yield DictCommentSource(
        {
            "User": (
                "UserInfo",
                {"Id": "id field", "Name": "username", "Age": "user age"},
            ),
        }
    )
