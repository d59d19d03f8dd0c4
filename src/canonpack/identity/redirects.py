"""Identity redirects: resolution, validation and generation.

A redirect map sends superseded identities straight to current ones. At
resolution time only a single hop is taken; chains and self-loops are
structural defects that ``validate_redirect_map`` reports before a map is
shipped and that ``resolve_identity`` refuses to paper over.
"""

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from canonpack.errors import (
    CanonError,
    CanonLoadError,
    InvalidIdentityError,
    RedirectChainError,
    RedirectLoopError,
    RedirectMapError,
)
from canonpack.identity.engine import compute_identity, compute_identity_for_generation
from canonpack.identity.generations import (
    ACTIVE_GENERATION,
    LEGACY_GENERATIONS,
    HashGeneration,
)
from canonpack.identity.migration import migrate_edition_region
from canonpack.models.edition import CanonicalEdition
from canonpack.models.identifiers import identity_generation
from canonpack.normalize.shape import to_canonical_shape
from canonpack.schemas import REDIRECT_MAP, schema_errors

__all__ = [
    "ViolationKind",
    "RedirectViolation",
    "resolve_identity",
    "load_redirect_map",
    "validate_redirect_map",
    "flatten_redirects",
    "generate_redirects",
]


class ViolationKind(str, Enum):
    """Categories of redirect map defects."""

    DANGLING_TARGET = "dangling_target"
    STALE_TARGET = "stale_target"
    CHAIN = "chain"
    SELF_LOOP = "self_loop"
    DUPLICATE_KEY = "duplicate_key"
    MISSING_REDIRECT = "missing_redirect"
    INVALID_EDITION = "invalid_edition"


@dataclass(frozen=True)
class RedirectViolation:
    """One defect found while validating a redirect map.

    Attributes
    ----------
    kind : ViolationKind
        Defect category.
    identity : str
        Redirect key (or legacy identity, for missing redirects).
    message : str
        Human-readable description.
    """

    kind: ViolationKind
    identity: str
    message: str

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary."""
        return {"kind": self.kind.value, "identity": self.identity, "message": self.message}


def resolve_identity(identity: str, redirect_map: Mapping[str, str]) -> str:
    """Resolve an identity through a flattened redirect map.

    Parameters
    ----------
    identity : str
        Identity string; surrounding whitespace is ignored.
    redirect_map : Mapping[str, str]
        Legacy identity to current identity.

    Returns
    -------
    str
        The redirect target, or the trimmed input when it is not a key.

    Raises
    ------
    InvalidIdentityError
        If the identity is not a string or is blank.
    RedirectLoopError
        If the entry maps the identity to itself.
    RedirectChainError
        If the target is itself a redirect key.
    """
    if not isinstance(identity, str) or not identity.strip():
        raise InvalidIdentityError("Identity must be a non-empty string")

    trimmed = identity.strip()
    target = redirect_map.get(trimmed)
    if target is None:
        return trimmed
    if target == trimmed:
        raise RedirectLoopError(f"Identity redirect loop: {trimmed} -> {target}")
    if target in redirect_map:
        raise RedirectChainError(
            f"Identity redirect chain detected: {trimmed} -> {target} -> ... "
            "(redirects must be flattened)"
        )
    return target


def load_redirect_map(path: Path) -> tuple[dict[str, str], list[str]]:
    """Read a redirect map file, keeping track of duplicated keys.

    Parameters
    ----------
    path : Path
        Path to ``identity_redirects.json``.

    Returns
    -------
    tuple[dict[str, str], list[str]]
        ``(redirects, duplicate_keys)``. For duplicated keys the last value
        wins, as with any JSON parser.

    Raises
    ------
    CanonLoadError
        If the file cannot be read.
    RedirectMapError
        If the file is not valid JSON or not a map of identity strings.
    """
    duplicates: list[str] = []

    def _pairs_hook(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for key, value in pairs:
            if key in out:
                duplicates.append(key)
            out[key] = value
        return out

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise CanonLoadError(f"Cannot read redirect map {path}: {e}") from e

    try:
        data = json.loads(text, object_pairs_hook=_pairs_hook)
    except json.JSONDecodeError as e:
        raise RedirectMapError(f"Invalid JSON in {path}: {e}") from e

    errors = schema_errors(data, REDIRECT_MAP)
    if errors:
        raise RedirectMapError(f"Invalid redirect map {path}: " + "; ".join(errors))

    return data, duplicates


def flatten_redirects(redirects: Mapping[str, str]) -> dict[str, str]:
    """Collapse multi-hop histories so every key points at its final target.

    Raises
    ------
    RedirectMapError
        If following the map from some key revisits an identity.
    """
    flattened: dict[str, str] = {}
    for key, target in redirects.items():
        seen = {key}
        while target in redirects:
            if target in seen:
                raise RedirectMapError(f"Redirect cycle through {key}")
            seen.add(target)
            target = redirects[target]
        flattened[key] = target
    return flattened


def _current_identity(edition: Any, region_mappings: Mapping[str, str]) -> str:
    return compute_identity(to_canonical_shape(edition), region_mappings)


def validate_redirect_map(
    redirects: Mapping[str, str],
    editions: Iterable[Any],
    region_mappings: Mapping[str, str] | None = None,
    duplicate_keys: Iterable[str] = (),
) -> list[RedirectViolation]:
    """Check a redirect map against the current editions.

    Every defect is collected; nothing is raised for map problems.

    Parameters
    ----------
    redirects : Mapping[str, str]
        Redirect map to check.
    editions : Iterable[Any]
        Current edition documents.
    region_mappings : Mapping[str, str] | None
        Region alias table.
    duplicate_keys : Iterable[str]
        Keys seen more than once when the map was parsed.

    Returns
    -------
    list[RedirectViolation]
        All violations found, empty when the map is valid.
    """
    mappings = region_mappings or {}
    violations: list[RedirectViolation] = []
    current: dict[str, CanonicalEdition] = {}

    for index, edition in enumerate(editions):
        try:
            shape = to_canonical_shape(edition)
            current[compute_identity(shape, mappings)] = shape
        except CanonError as e:
            violations.append(
                RedirectViolation(ViolationKind.INVALID_EDITION, f"#{index}", str(e))
            )

    for key, target in redirects.items():
        if target == key:
            violations.append(
                RedirectViolation(ViolationKind.SELF_LOOP, key, f"Redirect loop: {key} -> {target}")
            )
        elif target in redirects:
            violations.append(
                RedirectViolation(
                    ViolationKind.CHAIN,
                    key,
                    f"Redirect chain: {key} -> {target} -> ... (must be flattened)",
                )
            )
        if target not in current:
            violations.append(
                RedirectViolation(
                    ViolationKind.DANGLING_TARGET,
                    key,
                    f"Redirect target does not exist: {key} -> {target}",
                )
            )
        generation = identity_generation(target)
        if generation is not None and generation < ACTIVE_GENERATION.value:
            violations.append(
                RedirectViolation(
                    ViolationKind.STALE_TARGET,
                    key,
                    f"Redirect target must be {ACTIVE_GENERATION.tag}, got: {target}",
                )
            )

    for key in dict.fromkeys(duplicate_keys):
        violations.append(
            RedirectViolation(ViolationKind.DUPLICATE_KEY, key, f"Duplicate redirect key: {key}")
        )

    for identity, shape in current.items():
        for generation in LEGACY_GENERATIONS:
            legacy = compute_identity_for_generation(shape, generation, mappings)
            if legacy != identity and legacy not in redirects:
                violations.append(
                    RedirectViolation(
                        ViolationKind.MISSING_REDIRECT,
                        legacy,
                        f"Missing {generation.tag}->{ACTIVE_GENERATION.tag} redirect: "
                        f"{legacy} (edition hashes to {identity})",
                    )
                )

    return violations


def generate_redirects(
    editions: Iterable[Any],
    region_mappings: Mapping[str, str] | None = None,
    existing: Mapping[str, str] | None = None,
    legacy_editions: Iterable[Any] | None = None,
) -> dict[str, str]:
    """Build a flattened redirect map for the current editions.

    Legacy V2 and V3 identities are recomputed from the current records.
    V1 identities need the edition-level region that migration removed, so
    they are computed from ``legacy_editions`` (pre-migration documents) and
    pointed at the identity of the migrated record.

    Parameters
    ----------
    editions : Iterable[Any]
        Current edition documents.
    region_mappings : Mapping[str, str] | None
        Region alias table.
    existing : Mapping[str, str] | None
        Redirects to merge (e.g., the currently shipped map).
    legacy_editions : Iterable[Any] | None
        Edition documents as they were before the region migration.

    Returns
    -------
    dict[str, str]
        Flattened redirect map sorted by key.
    """
    mappings = region_mappings or {}
    redirects: dict[str, str] = dict(existing or {})

    for edition in editions:
        shape = to_canonical_shape(edition)
        identity = compute_identity(shape, mappings)
        for generation in LEGACY_GENERATIONS:
            legacy = compute_identity_for_generation(shape, generation, mappings)
            if legacy != identity:
                redirects[legacy] = identity

    for record in legacy_editions or ():
        changed, migrated = migrate_edition_region(record)
        if not changed:
            continue
        legacy = compute_identity_for_generation(record, HashGeneration.V1, mappings)
        redirects[legacy] = _current_identity(migrated, mappings)

    return dict(sorted(flatten_redirects(redirects).items()))
