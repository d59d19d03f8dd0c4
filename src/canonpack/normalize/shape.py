"""Canonical storage shape for editions.

A single declarative table, ``FIELD_RULES``, decides which fields of a loose
edition document reach storage and how each is normalized. Every rule maps
the whole edition to a candidate value; the candidate is kept only when the
rule's inclusion predicate accepts it. Titles, years of works, source-file
markers and any field without a rule never survive.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from canonpack.errors import InvalidEditionError
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
from canonpack.normalize._helpers import numeric_first_key
from canonpack.normalize.primitives import normalize_tags, normalize_upc

__all__ = ["FieldRule", "FIELD_RULES", "to_canonical_shape"]

GS1_STATUSES = frozenset({"active", "inactive"})


@dataclass(frozen=True)
class FieldRule:
    """One entry of the canonical shape table.

    Attributes
    ----------
    name : str
        Target field on ``CanonicalEdition``.
    normalize : Callable[[Mapping[str, Any]], Any]
        Produces the candidate value from the raw edition.
    include : Callable[[Any], bool]
        Inclusion predicate applied to the candidate.
    """

    name: str
    normalize: Callable[[Mapping[str, Any]], Any]
    include: Callable[[Any], bool] = lambda value: value is not None and value != ()


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _mapping_or_none(edition: Mapping[str, Any], key: str) -> Mapping[str, Any] | None:
    value = edition.get(key)
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise InvalidEditionError(f"Field '{key}' must be an object")
    return value


def _list_or_empty(edition: Mapping[str, Any], key: str) -> list[Any]:
    value = edition.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise InvalidEditionError(f"Field '{key}' must be a list")
    return value


def _movie_ref(movie: Any) -> MovieRef | None:
    if not isinstance(movie, Mapping) or movie.get("tmdb_movie_id") is None:
        return None
    studios = movie.get("studios")
    valid: list[str] = []
    if isinstance(studios, list):
        valid = sorted(s for s in (_text(item) for item in studios) if s)
    return MovieRef(tmdb_movie_id=movie["tmdb_movie_id"], studios=tuple(valid))


def _movies(edition: Mapping[str, Any]) -> tuple[MovieRef, ...]:
    raw = _list_or_empty(edition, "movies")
    if not raw:
        legacy = _mapping_or_none(edition, "movie")
        raw = [legacy] if legacy is not None else []
    refs = [ref for ref in (_movie_ref(m) for m in raw) if ref is not None]
    return tuple(sorted(refs, key=lambda ref: numeric_first_key(ref.tmdb_movie_id)))


def _publisher(edition: Mapping[str, Any]) -> str | None:
    return _text(edition.get("publisher")) or None


def _packaging(edition: Mapping[str, Any]) -> Packaging | None:
    packaging = _mapping_or_none(edition, "packaging")
    if packaging is None:
        return None
    type_ = _text(packaging.get("type")).lower() or None
    notes = _text(packaging.get("notes")) or None
    if type_ is None and notes is None:
        return None
    return Packaging(type=type_, notes=notes)


def _disc_identity(edition: Mapping[str, Any]) -> DiscIdentity | None:
    raw = edition.get("disc_identity")
    if not isinstance(raw, Mapping):
        return None
    fields = {
        name: _text(raw.get(name))
        for name in ("structural_hash", "casie_hash", "hash_algorithm", "generated_at")
    }
    if not all(fields.values()):
        return None
    return DiscIdentity(**fields)


def _disc(raw: Any) -> Disc:
    if not isinstance(raw, Mapping):
        raise InvalidEditionError("Each disc must be an object")
    fmt = raw.get("format")
    count = raw.get("disc_count")
    return Disc(
        format=str("OTHER" if fmt is None else fmt).upper(),
        disc_count=1 if count is None else count,
        region=_text(raw.get("region")) or None,
        movie_tmdb_id=raw.get("movie_tmdb_id"),
    )


def _discs(edition: Mapping[str, Any]) -> tuple[Disc, ...]:
    return tuple(_disc(d) for d in _list_or_empty(edition, "discs"))


def _upc(edition: Mapping[str, Any]) -> str | None:
    return normalize_upc(edition.get("upc")) or None


def _barcode(edition: Mapping[str, Any]) -> Barcode | None:
    barcode = edition.get("barcode")
    if not isinstance(barcode, Mapping) or not isinstance(barcode.get("gs1"), Mapping):
        return None
    gs1 = barcode["gs1"]
    prefix = _text(gs1.get("prefix"))
    if not prefix:
        return None
    status = gs1.get("gs1_status")
    info = Gs1Info(
        prefix=prefix,
        verified=gs1.get("verified") is True,
        gs1_status=status if status in GS1_STATUSES else None,
    )
    return Barcode(gs1=info, upc=_upc(edition))


def _edition_tags(edition: Mapping[str, Any]) -> tuple[str, ...]:
    return tuple(normalize_tags(_list_or_empty(edition, "edition_tags")))


def _notes(edition: Mapping[str, Any]) -> str | None:
    return _text(edition.get("notes")) or None


def _external_ref(raw: Any) -> ExternalRef | None:
    if not isinstance(raw, Mapping):
        return None
    source = _text(raw.get("source")).lower()
    ref_id = _text(raw.get("id"))
    if not source or not ref_id:
        return None
    return ExternalRef(source=source, id=ref_id, url=_text(raw.get("url")) or None)


def _external_refs(edition: Mapping[str, Any]) -> tuple[ExternalRef, ...]:
    refs = [r for r in (_external_ref(x) for x in _list_or_empty(edition, "external_refs")) if r]
    return tuple(sorted(refs, key=lambda r: (r.source, r.id)))


FIELD_RULES: tuple[FieldRule, ...] = (
    FieldRule("movies", _movies),
    FieldRule("release_year", lambda e: e.get("release_year")),
    FieldRule("publisher", _publisher),
    FieldRule("packaging", _packaging),
    FieldRule("disc_identity", _disc_identity),
    FieldRule("discs", _discs),
    FieldRule("upc", _upc),
    FieldRule("barcode", _barcode),
    FieldRule("edition_tags", _edition_tags),
    FieldRule("notes", _notes),
    FieldRule("external_refs", _external_refs),
)


def to_canonical_shape(edition: Any) -> CanonicalEdition:
    """Map a loose edition document onto its canonical storage record.

    Parameters
    ----------
    edition : Any
        Raw edition document (JSON object).

    Returns
    -------
    CanonicalEdition
        Strictly-typed record; ``to_dict()`` yields the storage JSON.

    Raises
    ------
    InvalidEditionError
        If the edition is not an object or a structured field has the wrong
        shape.
    """
    if not isinstance(edition, Mapping):
        raise InvalidEditionError("Edition must be a non-null object")

    fields: dict[str, Any] = {}
    for rule in FIELD_RULES:
        value = rule.normalize(edition)
        if rule.include(value):
            fields[rule.name] = value
    return CanonicalEdition(**fields)
