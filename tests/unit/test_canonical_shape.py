"""Tests for the canonical storage shape."""

from typing import Any

import pytest

from canonpack.errors import InvalidEditionError
from canonpack.models import CanonicalEdition, Disc, MovieRef
from canonpack.normalize import FIELD_RULES, to_canonical_shape


@pytest.mark.unit
def test_shape_of_snapshot_edition(snapshot_edition: dict[str, Any]) -> None:
    """Test a typical edition maps onto the storage shape."""
    shape = to_canonical_shape(snapshot_edition)

    assert shape.to_dict() == {
        "movies": [{"tmdb_movie_id": 550}],
        "release_year": 1999,
        "publisher": "warner_bros",
        "packaging": {"type": "keepcase"},
        "discs": [{"format": "BLURAY", "disc_count": 1, "region": "A"}],
        "upc": "012345678905",
        "edition_tags": ["theatrical"],
    }


@pytest.mark.unit
def test_shape_drops_unknown_and_empty_fields() -> None:
    """Test titles, unknown fields, blanks and empty lists never survive."""
    shape = to_canonical_shape(
        {
            "title": "Fight Club",
            "_source_file": "fight-club.json",
            "publisher": "   ",
            "notes": "",
            "edition_tags": [],
            "upc": "n/a",
            "movies": [{"tmdb_movie_id": 550, "title": "Fight Club", "year": 1999}],
        }
    )

    assert shape.to_dict() == {"movies": [{"tmdb_movie_id": 550}]}


@pytest.mark.unit
def test_shape_sorts_movies_and_studios() -> None:
    """Test works are ordered by id and studios sorted and trimmed."""
    shape = to_canonical_shape(
        {
            "movies": [
                {"tmdb_movie_id": 680, "studios": [" Miramax ", "", "A Band Apart"]},
                {"tmdb_movie_id": 550},
                {"title": "no id"},
            ]
        }
    )

    assert shape.movies == (
        MovieRef(tmdb_movie_id=550),
        MovieRef(tmdb_movie_id=680, studios=("A Band Apart", "Miramax")),
    )


@pytest.mark.unit
def test_shape_converts_legacy_movie() -> None:
    """Test a single legacy movie becomes a one-item works list."""
    shape = to_canonical_shape({"movie": {"tmdb_movie_id": 550}})

    assert shape.movies == (MovieRef(tmdb_movie_id=550),)


@pytest.mark.unit
def test_shape_disc_defaults() -> None:
    """Test discs default format and count and keep source order."""
    shape = to_canonical_shape(
        {"discs": [{"format": "uhd", "region": " b "}, {"disc_count": 2}]}
    )

    assert shape.discs == (
        Disc(format="UHD", disc_count=1, region="b"),
        Disc(format="OTHER", disc_count=2),
    )


@pytest.mark.unit
def test_shape_packaging() -> None:
    """Test packaging type is lower-cased and empty packaging dropped."""
    assert to_canonical_shape({"packaging": {"type": "SteelBook"}}).packaging.type == "steelbook"
    assert to_canonical_shape({"packaging": {"type": "", "notes": " "}}).packaging is None


@pytest.mark.unit
def test_shape_disc_identity_requires_all_fields() -> None:
    """Test incomplete disc fingerprints are dropped."""
    complete = {
        "structural_hash": "s",
        "casie_hash": "c",
        "hash_algorithm": "sha256",
        "generated_at": "2024-01-01",
    }

    assert to_canonical_shape({"disc_identity": complete}).disc_identity is not None
    partial = {**complete, "casie_hash": ""}
    assert to_canonical_shape({"disc_identity": partial}).disc_identity is None


@pytest.mark.unit
def test_shape_barcode() -> None:
    """Test GS1 barcode metadata with status filtering."""
    shape = to_canonical_shape(
        {
            "upc": "0-12345-67890-5",
            "barcode": {"gs1": {"prefix": "012345", "verified": True, "gs1_status": "bogus"}},
        }
    )

    assert shape.to_dict()["barcode"] == {
        "gs1": {"prefix": "012345", "verified": True},
        "upc": "012345678905",
    }
    assert to_canonical_shape({"barcode": {"gs1": {"prefix": ""}}}).barcode is None


@pytest.mark.unit
def test_shape_external_refs_sorted_and_filtered() -> None:
    """Test external references are lower-cased, filtered and sorted."""
    shape = to_canonical_shape(
        {
            "external_refs": [
                {"source": "TMDB", "id": "2"},
                {"source": "blu-ray.com", "id": "9", "url": "https://example.org/9"},
                {"source": "tmdb", "id": "1"},
                {"source": "", "id": "x"},
                "junk",
            ]
        }
    )

    assert [(r.source, r.id) for r in shape.external_refs] == [
        ("blu-ray.com", "9"),
        ("tmdb", "1"),
        ("tmdb", "2"),
    ]


@pytest.mark.unit
def test_shape_of_empty_edition() -> None:
    """Test an empty object gives an empty record."""
    assert to_canonical_shape({}) == CanonicalEdition()
    assert to_canonical_shape({}).to_dict() == {}


@pytest.mark.unit
@pytest.mark.parametrize("edition", [None, "edition", 42, ["a"]])
def test_shape_rejects_non_objects(edition: object) -> None:
    """Test non-object input raises."""
    with pytest.raises(InvalidEditionError):
        to_canonical_shape(edition)


@pytest.mark.unit
@pytest.mark.parametrize(
    "edition",
    [
        {"discs": "BLURAY"},
        {"discs": ["BLURAY"]},
        {"packaging": "keepcase"},
        {"movies": {"tmdb_movie_id": 1}},
    ],
)
def test_shape_rejects_malformed_structured_fields(edition: dict[str, Any]) -> None:
    """Test wrongly shaped structured fields raise."""
    with pytest.raises(InvalidEditionError):
        to_canonical_shape(edition)


@pytest.mark.unit
def test_field_rules_cover_every_record_field() -> None:
    """Test the rule table and the record type stay in step."""
    assert {rule.name for rule in FIELD_RULES} == set(CanonicalEdition.__dataclass_fields__)
