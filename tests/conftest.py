"""Pytest configuration and fixtures for test suite."""

import copy
import json
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

# Add src directory to path for imports
SRC_PATH = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(SRC_PATH))

from cryptography.hazmat.primitives import serialization  # noqa: E402
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey  # noqa: E402

_SNAPSHOT_EDITION: dict[str, Any] = {
    "movie": {"tmdb_movie_id": 550},
    "release_year": 1999,
    "publisher": "warner_bros",
    "packaging": {"type": "keepcase"},
    "upc": "012345678905",
    "edition_tags": ["theatrical"],
    "discs": [{"format": "BLURAY", "disc_count": 1, "region": "A"}],
}

_REGION_MAPPINGS: dict[str, str] = {
    "a": "A",
    "b": "B",
    "c": "C",
    "abc": "ABC",
    "region free": "ABC",
    "region_free": "ABC",
}

_PUBLISHERS: list[dict[str, Any]] = [
    {"publisher_id": "warner_bros", "name": "Warner Bros."},
    {"publisher_id": "criterion", "name": "The Criterion Collection"},
]


@pytest.fixture
def snapshot_edition() -> dict[str, Any]:
    """Fixed sample edition whose identities are frozen per generation."""
    return copy.deepcopy(_SNAPSHOT_EDITION)


@pytest.fixture
def region_mappings() -> dict[str, str]:
    """Region alias table matching the sample canon."""
    return dict(_REGION_MAPPINGS)


def _write_json(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


@pytest.fixture
def make_canon(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a canon root on disk.

    Editions are given as ``{file_name: edition_or_list}``. Pass
    ``redirects`` to write identity_redirects.json.
    """

    def _factory(
        editions: dict[str, Any] | None = None,
        *,
        name: str = "canon",
        schema: dict[str, Any] | None = None,
        publishers: list[dict[str, Any]] | None = None,
        regions: dict[str, Any] | None = None,
        redirects: dict[str, str] | None = None,
    ) -> Path:
        root = tmp_path / name
        _write_json(
            root / "schema" / "schema.json",
            schema
            if schema is not None
            else {"version": 3, "identityContract": {"editionHashVersion": 4}},
        )
        _write_json(
            root / "schema" / "publishers.json",
            publishers if publishers is not None else copy.deepcopy(_PUBLISHERS),
        )
        _write_json(
            root / "schema" / "regions.json",
            regions
            if regions is not None
            else {"canonical": ["C", "A", "B", "ABC"], "mappings": dict(_REGION_MAPPINGS)},
        )
        if editions is None:
            editions = {"fight-club.json": copy.deepcopy(_SNAPSHOT_EDITION)}
        (root / "editions").mkdir(parents=True, exist_ok=True)
        for file_name, content in editions.items():
            _write_json(root / "editions" / file_name, content)
        if redirects is not None:
            _write_json(root / "identity_redirects.json", redirects)
        return root

    return _factory


@pytest.fixture(scope="session")
def signing_keys() -> tuple[bytes, bytes]:
    """Ed25519 key pair as (private PEM, public PEM)."""
    private_key = Ed25519PrivateKey.generate()
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return private_pem, public_pem
