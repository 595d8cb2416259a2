import os
from typing import Any

MAX_PERMISSION = 0o7777


def check_node_name(name: str) -> str:
    """Check that a node name is a single, sane path segment."""
    if not name:
        raise ValueError("name must not be empty")
    if name in (".", ".."):
        raise ValueError(f"name must not be a relative reference: {name!r}")
    separators = {os.sep, "/"} | ({os.altsep} if os.altsep else set())
    if any(sep in name for sep in separators):
        raise ValueError(f"name must be a single path segment: {name!r}")
    if "\0" in name:
        raise ValueError(f"name must not contain NUL bytes: {name!r}")
    return name


def parse_permission(value: Any) -> int:
    """Parse permission bits given as an int or as an octal string ("0755", "0o755", "755").

    YAML 1.1 (which pyyaml implements) already turns an unquoted 0755 into the int 493,
    quoted values arrive here as strings.
    """
    if isinstance(value, bool):
        raise ValueError(f"expected permission bits, got {value!r}")
    if isinstance(value, str):
        text = value.strip().lower().removeprefix("0o")
        try:
            value = int(text, 8)
        except ValueError:
            raise ValueError(f"not an octal permission: {value!r}") from None
    if not isinstance(value, int):
        raise ValueError(f"expected int or octal string, got {type(value).__name__}")
    if not 0 <= value <= MAX_PERMISSION:
        raise ValueError(f"permission out of range: {oct(value)}")
    return value
