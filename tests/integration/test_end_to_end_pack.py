"""Integration tests for the full build, sign and verify flow."""

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from canonpack import build_pack, compute_identity, regenerate_redirects, resolve_identity
from canonpack.identity import HashGeneration, compute_identity_for_generation
from canonpack.pack import (
    MANIFEST_PATH,
    PAYLOAD_PATH,
    load_canon,
    sign_pack,
    verify_pack,
)


def _catalog() -> dict[str, Any]:
    return {
        "fight-club.json": {
            "movie": {"tmdb_movie_id": 550},
            "release_year": 1999,
            "publisher": "warner_bros",
            "packaging": {"type": "keepcase"},
            "upc": "012345678905",
            "edition_tags": ["theatrical"],
            "discs": [{"format": "BLURAY", "disc_count": 1, "region": "A"}],
        },
        "tarantino.json": [
            {
                "movies": [{"tmdb_movie_id": 680}, {"tmdb_movie_id": 24}],
                "release_year": 2011,
                "publisher": "criterion",
                "packaging": {"type": "Steelbook", "notes": "Numbered"},
                "edition_tags": ["Box Set", "limited-edition"],
                "discs": [
                    {"format": "uhd", "region": "region free"},
                    {"format": "bluray", "region": "b", "disc_count": 2},
                ],
                "external_refs": [
                    {"source": "tmdb", "id": "680"},
                    {"source": "blu-ray.com", "id": "12345"},
                ],
            }
        ],
    }


@pytest.mark.integration
def test_build_sign_verify(
    make_canon: Callable[..., Path], tmp_path: Path, signing_keys: tuple[bytes, bytes]
) -> None:
    """Test a canon builds, signs and verifies, and tampering is detected."""
    private_pem, public_pem = signing_keys
    pack_root = tmp_path / "pack"

    result = build_pack(make_canon(_catalog()), output_dir=pack_root, canon_version="e2e")
    sign_pack(pack_root, private_pem)

    assert result.edition_count == 2
    assert verify_pack(pack_root, public_pem).ok

    payload = pack_root / PAYLOAD_PATH
    original = payload.read_bytes()
    payload.write_bytes(original.replace(b"criterion", b"criterioN", 1))
    tampered = verify_pack(pack_root, public_pem)
    assert tampered.integrity_errors
    assert not tampered.authenticity_errors

    payload.write_bytes(original)
    assert verify_pack(pack_root, public_pem).ok


@pytest.mark.integration
def test_payload_round_trips_editions(make_canon: Callable[..., Path], tmp_path: Path) -> None:
    """Test the payload holds every edition with the identities of its source."""
    canon = make_canon(_catalog())
    pack_root = tmp_path / "pack"
    build_pack(canon, output_dir=pack_root)

    payload = json.loads((pack_root / PAYLOAD_PATH).read_bytes())
    mappings = payload["regions"]["mappings"]
    from_payload = sorted(compute_identity(e, mappings) for e in payload["editions"])
    dataset = load_canon(canon)
    from_source = sorted(compute_identity(e, dataset.region_mappings) for e in dataset.editions)

    assert from_payload == from_source
    refs = [e for e in payload["editions"] if "external_refs" in e][0]["external_refs"]
    assert [r["source"] for r in refs] == ["blu-ray.com", "tmdb"]


@pytest.mark.integration
def test_rebuilds_from_reordered_canon_match(
    make_canon: Callable[..., Path], tmp_path: Path
) -> None:
    """Test logically equal canons produce byte-identical payloads and digests."""
    catalog = _catalog()
    flattened = [catalog["tarantino.json"][0], catalog["fight-club.json"]]
    first = make_canon(catalog, name="first")
    second = make_canon({"all.json": flattened}, name="second")

    a = build_pack(first, output_dir=tmp_path / "a", canon_version="x")
    b = build_pack(second, output_dir=tmp_path / "b", canon_version="x")

    assert a.payload_sha256 == b.payload_sha256
    assert (tmp_path / "a" / PAYLOAD_PATH).read_bytes() == (
        tmp_path / "b" / PAYLOAD_PATH
    ).read_bytes()
    manifest_a = json.loads((tmp_path / "a" / MANIFEST_PATH).read_bytes())
    manifest_b = json.loads((tmp_path / "b" / MANIFEST_PATH).read_bytes())
    assert manifest_a["payload"] == manifest_b["payload"]


@pytest.mark.integration
def test_legacy_identities_resolve_after_regeneration(
    make_canon: Callable[..., Path],
) -> None:
    """Test every legacy identity of every edition resolves to its current identity."""
    canon = make_canon(_catalog())
    redirects = regenerate_redirects(canon)
    dataset = load_canon(canon)

    for edition in dataset.editions:
        current = compute_identity(edition, dataset.region_mappings)
        for generation in (HashGeneration.V2, HashGeneration.V3):
            legacy = compute_identity_for_generation(edition, generation, dataset.region_mappings)
            assert resolve_identity(legacy, redirects) == current
        assert resolve_identity(current, redirects) == current
