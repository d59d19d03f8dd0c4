"""Edition identity: versioned content hashes and redirects.

The active generation is the only one used to mint identities; legacy
generations are callable for migration and redirect tooling.
"""

from canonpack.identity.engine import compute_identity, compute_identity_for_generation
from canonpack.identity.generations import (
    ACTIVE_GENERATION,
    LEGACY_GENERATIONS,
    HashGeneration,
    extract_identity_fields,
)
from canonpack.identity.migration import migrate_edition_region
from canonpack.identity.redirects import (
    RedirectViolation,
    ViolationKind,
    flatten_redirects,
    generate_redirects,
    load_redirect_map,
    resolve_identity,
    validate_redirect_map,
)

__all__ = [
    # Engine
    "compute_identity",
    "compute_identity_for_generation",
    # Generations
    "HashGeneration",
    "ACTIVE_GENERATION",
    "LEGACY_GENERATIONS",
    "extract_identity_fields",
    # Migration
    "migrate_edition_region",
    # Redirects
    "resolve_identity",
    "load_redirect_map",
    "validate_redirect_map",
    "flatten_redirects",
    "generate_redirects",
    "RedirectViolation",
    "ViolationKind",
]
