"""Edition identity computation.

``compute_identity`` is the single public entry point and always uses the
active generation. ``compute_identity_for_generation`` exists for migration
tooling that must recompute superseded identities.
"""

from collections.abc import Mapping
from typing import Any

from canonpack.canonical import canonical_hash
from canonpack.errors import InvalidEditionError
from canonpack.identity.generations import (
    ACTIVE_GENERATION,
    HashGeneration,
    extract_identity_fields,
)
from canonpack.models.edition import CanonicalEdition
from canonpack.models.identifiers import format_identity

__all__ = ["compute_identity", "compute_identity_for_generation"]


def _as_document(edition: Any) -> Mapping[str, Any]:
    if isinstance(edition, CanonicalEdition):
        return edition.to_dict()
    if not isinstance(edition, Mapping):
        raise InvalidEditionError("Edition must be a non-null object")
    return edition


def compute_identity_for_generation(
    edition: Any,
    generation: HashGeneration,
    region_mappings: Mapping[str, str] | None = None,
) -> str:
    """Compute an edition's identity under a specific hash generation.

    Parameters
    ----------
    edition : Mapping[str, Any] | CanonicalEdition
        Edition document or canonical record.
    generation : HashGeneration
        Generation whose frozen extractor is applied.
    region_mappings : Mapping[str, str] | None
        Region alias table.

    Returns
    -------
    str
        Identity string ``edition:v<N>:<sha256 hex>``.

    Raises
    ------
    InvalidEditionError
        If the edition is not an object or has a malformed structured field.
    """
    document = _as_document(edition)
    fields = extract_identity_fields(document, generation, region_mappings)
    return format_identity(generation.value, canonical_hash(fields))


def compute_identity(edition: Any, region_mappings: Mapping[str, str] | None = None) -> str:
    """Compute an edition's current identity using the active generation."""
    return compute_identity_for_generation(edition, ACTIVE_GENERATION, region_mappings)
