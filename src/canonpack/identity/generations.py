"""Frozen identity extraction rules, one per hash generation.

Each generation is a pure function from a raw edition document to the
identity-significant field object that gets canonicalized and hashed. Legacy
generations are kept byte-for-byte so that previously published identities
can be recomputed for redirect generation and validation. Later generations
never reuse an earlier extractor by mutation; they share only the frozen
normalization primitives.

Generations
-----------
V1
    Single edition-level region (``NONE`` when missing), raw tag sort.
V2
    Region recorded per disc, tags normalized and deduplicated.
V3
    V2 plus the normalized product code.
V4
    V3 with the sorted list of associated works replacing the single work.
"""

from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any

from canonpack.errors import InvalidEditionError
from canonpack.normalize._helpers import numeric_first_key
from canonpack.normalize.primitives import (
    normalize_region,
    normalize_tags,
    normalize_upc,
)

__all__ = [
    "HashGeneration",
    "ACTIVE_GENERATION",
    "LEGACY_GENERATIONS",
    "extract_identity_fields",
]

RegionMappings = Mapping[str, str]
Extractor = Callable[[Mapping[str, Any], RegionMappings], dict[str, Any]]


def _discs(edition: Mapping[str, Any]) -> list[Mapping[str, Any]]:
    discs = edition.get("discs")
    if discs is None:
        return []
    if not isinstance(discs, list):
        raise InvalidEditionError("Field 'discs' must be a list")
    for disc in discs:
        if not isinstance(disc, Mapping):
            raise InvalidEditionError("Each disc must be an object")
    return discs


def _optional_mapping(edition: Mapping[str, Any], key: str) -> Mapping[str, Any] | None:
    value = edition.get(key)
    if value is not None and not isinstance(value, Mapping):
        raise InvalidEditionError(f"Field '{key}' must be an object")
    return value


def _raw_tags(edition: Mapping[str, Any]) -> list[Any]:
    tags = edition.get("edition_tags")
    return list(tags) if isinstance(tags, list) else []


def _disc_format(disc: Mapping[str, Any]) -> str:
    fmt = disc.get("format")
    return str("OTHER" if fmt is None else fmt).upper()


def _disc_count(disc: Mapping[str, Any]) -> Any:
    count = disc.get("disc_count")
    return 1 if count is None else count


def _packaging(edition: Mapping[str, Any]) -> dict[str, Any] | None:
    packaging = _optional_mapping(edition, "packaging")
    if packaging is None:
        return None
    type_ = packaging.get("type")
    return {"type": str("other" if type_ is None else type_).lower()}


def _publisher(edition: Mapping[str, Any]) -> str:
    publisher = edition.get("publisher")
    return "" if publisher is None else str(publisher).strip()


def _works(edition: Mapping[str, Any]) -> list[Mapping[str, Any]]:
    """Associated works, preferring ``movies`` over the legacy ``movie``."""
    movies = edition.get("movies")
    if movies is not None:
        if not isinstance(movies, list):
            raise InvalidEditionError("Field 'movies' must be a list")
        works = [m for m in movies if isinstance(m, Mapping)]
        if works:
            return works
    movie = _optional_mapping(edition, "movie")
    return [movie] if movie is not None else []


def _legacy_movie(edition: Mapping[str, Any]) -> dict[str, Any] | None:
    movie = _optional_mapping(edition, "movie")
    if movie is None:
        works = sorted(_works(edition), key=lambda w: numeric_first_key(w.get("tmdb_movie_id")))
        if not works:
            return None
        movie = works[0]
    return {"tmdb_movie_id": movie.get("tmdb_movie_id")}


def _v1(edition: Mapping[str, Any], region_mappings: RegionMappings) -> dict[str, Any]:
    return {
        "discs": [
            {"disc_count": _disc_count(d), "format": _disc_format(d)} for d in _discs(edition)
        ],
        "edition_tags": sorted(_raw_tags(edition), key=str),
        "movie": _legacy_movie(edition),
        "packaging": _packaging(edition),
        "publisher": _publisher(edition),
        "region": normalize_region(edition.get("region"), region_mappings),
        "release_year": edition.get("release_year"),
    }


def _v2_disc(disc: Mapping[str, Any], region_mappings: RegionMappings) -> dict[str, Any]:
    out: dict[str, Any] = {"disc_count": _disc_count(disc), "format": _disc_format(disc)}
    raw_region = disc.get("region")
    if raw_region is not None and str(raw_region).strip():
        out["region"] = normalize_region(raw_region, region_mappings)
    return out


def _v2(edition: Mapping[str, Any], region_mappings: RegionMappings) -> dict[str, Any]:
    return {
        "discs": [_v2_disc(d, region_mappings) for d in _discs(edition)],
        "edition_tags": normalize_tags(_raw_tags(edition)),
        "movie": _legacy_movie(edition),
        "packaging": _packaging(edition),
        "publisher": _publisher(edition),
        "release_year": edition.get("release_year"),
    }


def _v3(edition: Mapping[str, Any], region_mappings: RegionMappings) -> dict[str, Any]:
    fields = _v2(edition, region_mappings)
    upc = normalize_upc(edition.get("upc"))
    if upc:
        fields["upc"] = upc
    return fields


def _v4(edition: Mapping[str, Any], region_mappings: RegionMappings) -> dict[str, Any]:
    fields = _v3(edition, region_mappings)
    del fields["movie"]
    ids = [w.get("tmdb_movie_id") for w in _works(edition)]
    fields["movies"] = [
        {"tmdb_movie_id": work_id}
        for work_id in sorted((i for i in ids if i is not None), key=numeric_first_key)
    ]
    return fields


class HashGeneration(Enum):
    """Closed set of identity hash generations.

    The enum value is the generation number carried in the identity string.
    """

    V1 = 1
    V2 = 2
    V3 = 3
    V4 = 4

    @property
    def tag(self) -> str:
        """Generation tag as it appears in identity strings (e.g., 'v4')."""
        return f"v{self.value}"

    @property
    def extractor(self) -> Extractor:
        return _EXTRACTORS[self]

    @classmethod
    def from_tag(cls, tag: str | int) -> "HashGeneration":
        """Look up a generation from 'v3', '3' or 3."""
        text = str(tag).strip().lower().removeprefix("v")
        try:
            return cls(int(text))
        except ValueError as e:
            raise ValueError(f"Unknown hash generation: {tag!r}") from e


_EXTRACTORS: dict[HashGeneration, Extractor] = {
    HashGeneration.V1: _v1,
    HashGeneration.V2: _v2,
    HashGeneration.V3: _v3,
    HashGeneration.V4: _v4,
}

ACTIVE_GENERATION = HashGeneration.V4

# Generations for which current records still carry enough data to recompute
# the legacy hash. V1 needs the pre-migration edition-level region.
LEGACY_GENERATIONS: tuple[HashGeneration, ...] = (HashGeneration.V2, HashGeneration.V3)


def extract_identity_fields(
    edition: Mapping[str, Any],
    generation: HashGeneration,
    region_mappings: RegionMappings | None = None,
) -> dict[str, Any]:
    """Extract the identity-significant field object for one generation.

    Parameters
    ----------
    edition : Mapping[str, Any]
        Raw edition document.
    generation : HashGeneration
        Generation whose frozen rules apply.
    region_mappings : Mapping[str, str] | None
        Region alias table from the dataset (empty when None).

    Returns
    -------
    dict[str, Any]
        Field object ready for canonical serialization.
    """
    return generation.extractor(edition, region_mappings or {})
