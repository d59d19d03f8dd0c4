"""Content-addressable identities and signed distribution packs for catalog editions.

This package provides:
- Canonical serialization (canonpack.canonical) - the byte form behind every hash
- Normalization (canonpack.normalize) - frozen field primitives and the canonical shape
- Models (canonpack.models) - canonical edition records and identity strings
- Identity (canonpack.identity) - hash generations, redirects and migration
- Packs (canonpack.pack) - payload, manifest, signing and verification
- Engine (canonpack.engine) - build pipeline orchestration
- Audit (canonpack.audit) - structured event logging
- CLI (canonpack.cli) - command-line interface
- Public API (canonpack.api) - high-level convenience functions
"""

__version__ = "0.4.0"
__license__ = "MIT"

from canonpack.api import (
    build_pack,
    check_redirects,
    edition_identities,
    regenerate_redirects,
    resolve,
    sign,
    verify,
)
from canonpack.canonical import canonical_bytes, canonical_dumps, canonical_hash
from canonpack.errors import CanonError
from canonpack.identity import compute_identity, resolve_identity
from canonpack.normalize import to_canonical_shape

__all__ = [
    "__version__",
    "__license__",
    "CanonError",
    "canonical_dumps",
    "canonical_bytes",
    "canonical_hash",
    "compute_identity",
    "resolve_identity",
    "to_canonical_shape",
    "build_pack",
    "sign",
    "verify",
    "edition_identities",
    "resolve",
    "check_redirects",
    "regenerate_redirects",
]
