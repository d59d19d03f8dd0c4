"""Compiled patterns shared by the normalization primitives."""

import re

# UPC: whitespace and hyphens first, then anything that is not a digit
UPC_SEPARATORS_RE = re.compile(r"[\s\-]+")
NON_DIGIT_RE = re.compile(r"[^0-9]")

# Tags
TAG_SEPARATORS_RE = re.compile(r"[\s\-]+")
UNDERSCORE_RUN_RE = re.compile(r"_+")
EDGE_UNDERSCORE_RE = re.compile(r"^_|_$")


def numeric_first_key(value: object) -> tuple[int, float | str]:
    """Sort key ordering numbers numerically ahead of anything else as text."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return (0, value)
    return (1, str(value))
