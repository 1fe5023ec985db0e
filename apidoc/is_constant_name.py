"""Utility for recognising constant-like member names."""

import re

CONSTANT_NAME_RE = re.compile(r"[A-Z0-9_]+")


def is_constant_name(name: str) -> bool:
    """Check if the name only uses uppercase letters, digits and underscore."""
    return CONSTANT_NAME_RE.fullmatch(name) is not None
