"""Shared data types for canonpack.

This package contains the canonical edition dataclasses and the identity
string helpers consumed across the identity engine and the pack builder.
"""

from canonpack.models.edition import (
    Barcode,
    CanonicalEdition,
    Disc,
    DiscIdentity,
    ExternalRef,
    Gs1Info,
    MovieRef,
    Packaging,
)
from canonpack.models.identifiers import (
    IDENTITY_PREFIX,
    format_identity,
    identity_generation,
    is_identity_string,
    parse_identity,
)

__all__ = [
    # Canonical edition models
    "CanonicalEdition",
    "MovieRef",
    "Packaging",
    "DiscIdentity",
    "Disc",
    "Gs1Info",
    "Barcode",
    "ExternalRef",
    # Identity strings
    "IDENTITY_PREFIX",
    "format_identity",
    "parse_identity",
    "identity_generation",
    "is_identity_string",
]
