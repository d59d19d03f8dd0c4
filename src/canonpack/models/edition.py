"""Canonical edition data models for canonpack.

This module defines the strictly-typed storage shape of an edition. Loose
input documents are mapped onto these types by
``canonpack.normalize.shape.to_canonical_shape``; everything downstream that
needs a stable edition record consumes this form.
"""

from dataclasses import dataclass
from typing import Any

__all__ = [
    "MovieRef",
    "Packaging",
    "DiscIdentity",
    "Disc",
    "Gs1Info",
    "Barcode",
    "ExternalRef",
    "CanonicalEdition",
]


def _compact(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    """Build a dict, dropping None values and empty sequences."""
    out: dict[str, Any] = {}
    for key, value in pairs:
        if value is None:
            continue
        if isinstance(value, (list, tuple)) and not value:
            continue
        out[key] = value
    return out


@dataclass(frozen=True)
class MovieRef:
    """Reference to one associated work.

    Attributes
    ----------
    tmdb_movie_id : Any
        Stable numeric work id; works are ordered by it.
    studios : tuple[str, ...]
        Sorted, trimmed studio names.
    """

    tmdb_movie_id: Any
    studios: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return _compact([("tmdb_movie_id", self.tmdb_movie_id), ("studios", list(self.studios))])


@dataclass(frozen=True)
class Packaging:
    """Packaging type and optional free-text annotation.

    Attributes
    ----------
    type : str | None
        Lower-cased packaging type (e.g., 'keepcase', 'steelbook').
    notes : str | None
        Informational notes; never identity-significant.
    """

    type: str | None = None
    notes: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return _compact([("type", self.type), ("notes", self.notes)])


@dataclass(frozen=True)
class DiscIdentity:
    """Optical fingerprint metadata. All four fields are required."""

    structural_hash: str
    casie_hash: str
    hash_algorithm: str
    generated_at: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "structural_hash": self.structural_hash,
            "casie_hash": self.casie_hash,
            "hash_algorithm": self.hash_algorithm,
            "generated_at": self.generated_at,
        }


@dataclass(frozen=True)
class Disc:
    """One physical disc entry of an edition.

    Attributes
    ----------
    format : str
        Upper-cased disc format (e.g., 'BLURAY', 'UHD', 'DVD').
    disc_count : Any
        Number of physical units of this format (default 1).
    region : str | None
        Trimmed region code as recorded; normalized only when hashing.
    movie_tmdb_id : Any | None
        Back-reference to the work this disc carries.
    """

    format: str
    disc_count: Any = 1
    region: str | None = None
    movie_tmdb_id: Any | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return _compact(
            [
                ("format", self.format),
                ("disc_count", self.disc_count),
                ("region", self.region),
                ("movie_tmdb_id", self.movie_tmdb_id),
            ]
        )


@dataclass(frozen=True)
class Gs1Info:
    """Minimal GS1 verification metadata.

    Attributes
    ----------
    prefix : str
        GS1 company prefix.
    verified : bool
        Whether the prefix was verified against the registry.
    gs1_status : str | None
        'active' or 'inactive' when known.
    """

    prefix: str
    verified: bool = False
    gs1_status: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return _compact(
            [("prefix", self.prefix), ("verified", self.verified), ("gs1_status", self.gs1_status)]
        )


@dataclass(frozen=True)
class Barcode:
    """Barcode block carrying GS1 metadata."""

    gs1: Gs1Info
    upc: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return _compact([("gs1", self.gs1.to_dict()), ("upc", self.upc)])


@dataclass(frozen=True)
class ExternalRef:
    """Cross-reference to an external catalog entry.

    Attributes
    ----------
    source : str
        Lower-cased source name (e.g., 'blu-ray.com').
    id : str
        Identifier within the source.
    url : str | None
        Optional link.
    """

    source: str
    id: str
    url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return _compact([("source", self.source), ("id", self.id), ("url", self.url)])


@dataclass(frozen=True)
class CanonicalEdition:
    """Canonical storage shape of one edition.

    All fields are optional; absent fields are omitted from ``to_dict()``
    so that empty strings, nulls, and empty lists never reach storage.

    Attributes
    ----------
    movies : tuple[MovieRef, ...]
        Associated works sorted by ``tmdb_movie_id``.
    release_year : Any | None
        Release year.
    publisher : str | None
        Trimmed publisher id.
    packaging : Packaging | None
        Packaging block.
    disc_identity : DiscIdentity | None
        Optical fingerprint.
    discs : tuple[Disc, ...]
        Discs in source order; order is identity-significant.
    upc : str | None
        Digits-only product code.
    barcode : Barcode | None
        GS1 barcode metadata.
    edition_tags : tuple[str, ...]
        Normalized, deduplicated, sorted classification tags.
    notes : str | None
        Free-text notes.
    external_refs : tuple[ExternalRef, ...]
        Cross-references sorted by (source, id).
    """

    movies: tuple[MovieRef, ...] = ()
    release_year: Any | None = None
    publisher: str | None = None
    packaging: Packaging | None = None
    disc_identity: DiscIdentity | None = None
    discs: tuple[Disc, ...] = ()
    upc: str | None = None
    barcode: Barcode | None = None
    edition_tags: tuple[str, ...] = ()
    notes: str | None = None
    external_refs: tuple[ExternalRef, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON storage shape."""
        return _compact(
            [
                ("movies", [m.to_dict() for m in self.movies]),
                ("release_year", self.release_year),
                ("publisher", self.publisher),
                ("packaging", self.packaging.to_dict() if self.packaging else None),
                ("disc_identity", self.disc_identity.to_dict() if self.disc_identity else None),
                ("discs", [d.to_dict() for d in self.discs]),
                ("upc", self.upc),
                ("barcode", self.barcode.to_dict() if self.barcode else None),
                ("edition_tags", list(self.edition_tags)),
                ("notes", self.notes),
                ("external_refs", [r.to_dict() for r in self.external_refs]),
            ]
        )
