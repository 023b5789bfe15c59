"""
Common utilities that are shared across the converter modules
"""


def to_lower_camel(name: str) -> str:
    """Convert an UpperCamelCase name to lowerCamelCase by lowering only the
    first character
    """
    if not name:
        return name
    return name[0].lower() + name[1:]
