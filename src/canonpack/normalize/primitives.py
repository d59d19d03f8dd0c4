"""Frozen normalization primitives.

Each primitive here is part of the identity contract: changing its output
for any input changes identity hashes. New behaviour must be added as a new
named variant in ``FROZEN_NORMALIZERS`` rather than by editing an existing
function.
"""

from collections.abc import Callable, Iterable, Mapping
from typing import Any

from canonpack.normalize._helpers import (
    EDGE_UNDERSCORE_RE,
    NON_DIGIT_RE,
    TAG_SEPARATORS_RE,
    UNDERSCORE_RUN_RE,
    UPC_SEPARATORS_RE,
)

__all__ = [
    "REGION_NONE",
    "normalize_upc",
    "normalize_tag",
    "normalize_tags",
    "normalize_region",
    "FROZEN_NORMALIZERS",
]

REGION_NONE = "NONE"


def _as_text(raw: Any) -> str:
    return "" if raw is None else str(raw)


def normalize_upc(raw: Any) -> str:
    """Normalize a product code to digits only.

    Parameters
    ----------
    raw : Any
        Raw UPC/EAN value (None is treated as empty).

    Returns
    -------
    str
        Digits only; empty string when no digits remain.

    Examples
    --------
    >>> normalize_upc(" 0123-4567 8905 ")
    '012345678905'
    """
    text = UPC_SEPARATORS_RE.sub("", _as_text(raw).strip())
    return NON_DIGIT_RE.sub("", text)


def normalize_tag(raw: Any) -> str:
    """Normalize a classification tag.

    Trim, lowercase, turn whitespace/hyphen runs into ``_``, collapse
    repeated underscores and strip one leading and trailing underscore.

    Examples
    --------
    >>> normalize_tag("  Director-Cut  ")
    'director_cut'
    """
    text = _as_text(raw).strip().lower()
    text = TAG_SEPARATORS_RE.sub("_", text)
    text = UNDERSCORE_RUN_RE.sub("_", text)
    return EDGE_UNDERSCORE_RE.sub("", text)


def normalize_tags(raw_tags: Iterable[Any]) -> list[str]:
    """Normalize, deduplicate and sort a tag list, dropping empty results."""
    return sorted({tag for tag in (normalize_tag(t) for t in raw_tags) if tag})


def normalize_region(raw: Any, mappings: Mapping[str, str]) -> str:
    """Normalize a region code using the dataset's region mappings.

    The trimmed, lower-cased value is looked up in ``mappings``; when absent
    the raw value itself is kept. The result is upper-cased and an empty
    result becomes the ``NONE`` sentinel.

    Parameters
    ----------
    raw : Any
        Raw region value.
    mappings : Mapping[str, str]
        Lower-case alias to canonical region code.

    Returns
    -------
    str
        Canonical region code or ``NONE``.
    """
    text = _as_text(raw)
    region = mappings.get(text.strip().lower())
    if region is None:
        region = text
    return str(region).upper() or REGION_NONE


FROZEN_NORMALIZERS: Mapping[str, Callable[..., Any]] = {
    "upc_v1": normalize_upc,
    "tag_v1": normalize_tag,
    "region_v1": normalize_region,
}
