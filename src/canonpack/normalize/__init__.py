"""Normalization of edition fields.

The primitives are frozen parts of the identity contract; the canonical
shape mapper builds strictly-typed records on top of them.
"""

from canonpack.normalize.primitives import (
    FROZEN_NORMALIZERS,
    REGION_NONE,
    normalize_region,
    normalize_tag,
    normalize_tags,
    normalize_upc,
)
from canonpack.normalize.shape import FIELD_RULES, FieldRule, to_canonical_shape

__all__ = [
    "FROZEN_NORMALIZERS",
    "REGION_NONE",
    "normalize_upc",
    "normalize_tag",
    "normalize_tags",
    "normalize_region",
    "FIELD_RULES",
    "FieldRule",
    "to_canonical_shape",
]
