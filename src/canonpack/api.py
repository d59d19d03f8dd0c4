"""Public API for building, signing and verifying canon packs.

This module provides the high-level entry points of canonpack:
- Building a pack from a canon root
- Signing and verifying packs
- Computing and resolving edition identities
- Checking and regenerating the identity redirect map
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Any

from canonpack.errors import BuildError
from canonpack.identity import (
    ACTIVE_GENERATION,
    HashGeneration,
    RedirectViolation,
    compute_identity_for_generation,
    generate_redirects,
    resolve_identity,
    validate_redirect_map,
)
from canonpack.normalize import to_canonical_shape
from canonpack.pack import (
    REDIRECTS_FILE,
    load_canon,
    load_editions,
    sign_pack,
    verify_pack,
)
from canonpack.utils import write_bytes_atomic

if TYPE_CHECKING:
    from canonpack.engine.config import BuildResult
    from canonpack.pack import Validator, VerifyResult

__all__ = [
    "build_pack",
    "sign",
    "verify",
    "edition_identities",
    "resolve",
    "check_redirects",
    "regenerate_redirects",
    "dump_redirect_map",
]


def build_pack(
    canon_path: str | Path,
    *,
    output_dir: str | Path = "out",
    canon_version: str | None = None,
    validator: Validator | None = None,
) -> BuildResult:
    """Build a pack from a canon root.

    Parameters
    ----------
    canon_path : str | Path
        Canon root directory.
    output_dir : str | Path, optional
        Pack output directory, by default "out".
    canon_version : str | None, optional
        Dataset version label. If None, derived from git or "local".
    validator : Validator | None, optional
        Dataset validator run before anything is built.

    Returns
    -------
    BuildResult
        Successful build result.

    Raises
    ------
    FileNotFoundError
        If the canon root does not exist.
    BuildError
        If the build fails.

    Examples
    --------
        >>> from canonpack import build_pack
        >>> result = build_pack("canon/", output_dir="out")
        >>> print(result.payload_sha256)
    """
    from canonpack.engine import BuildConfig, run_build

    canon_path_obj = Path(canon_path)
    if not canon_path_obj.exists():
        raise FileNotFoundError(f"Canon path not found: {canon_path}")

    config = BuildConfig(
        canon_path=canon_path_obj,
        output_dir=Path(output_dir),
        canon_version=canon_version,
    )
    result = run_build(config, validator=validator)

    if not result.success:
        raise BuildError(f"Build failed: {result.error_message}")

    return result


def sign(pack_root: str | Path, private_key_path: str | Path) -> Path:
    """Sign a pack's manifest with the private key stored at a path.

    Returns
    -------
    Path
        Path of the written ``signature/manifest.sig``.
    """
    return sign_pack(Path(pack_root), Path(private_key_path).read_bytes())


def verify(pack_root: str | Path, public_key_path: str | Path | None = None) -> VerifyResult:
    """Verify a pack; hash-only when no public key path is given."""
    public_key = Path(public_key_path).read_bytes() if public_key_path is not None else None
    return verify_pack(Path(pack_root), public_key)


def edition_identities(
    path: str | Path,
    *,
    region_mappings: dict[str, str] | None = None,
    generation: HashGeneration = ACTIVE_GENERATION,
) -> list[str]:
    """Compute identities for the editions in one file or an editions directory.

    Editions are hashed in canonical shape, the same form the redirect
    validator hashes.

    Parameters
    ----------
    path : str | Path
        Edition JSON file (object or list) or a directory of them.
    region_mappings : dict[str, str] | None, optional
        Region alias table.
    generation : HashGeneration, optional
        Hash generation, by default the active one.

    Returns
    -------
    list[str]
        Identity strings in file order.

    Raises
    ------
    InvalidEditionError
        If an edition cannot be reduced to its canonical shape.
    """
    path_obj = Path(path)
    if path_obj.is_dir():
        editions = load_editions(path_obj)
    else:
        data = json.loads(path_obj.read_text(encoding="utf-8"))
        editions = data if isinstance(data, list) else [data]

    shapes = [to_canonical_shape(edition) for edition in editions]
    return [
        compute_identity_for_generation(shape, generation, region_mappings) for shape in shapes
    ]


def resolve(identity: str, canon_path: str | Path) -> str:
    """Resolve an identity through the canon root's redirect map."""
    dataset = load_canon(Path(canon_path))
    return resolve_identity(identity, dataset.redirects)


def check_redirects(canon_path: str | Path) -> list[RedirectViolation]:
    """Validate the canon root's redirect map against its editions.

    Returns
    -------
    list[RedirectViolation]
        Every violation found, empty when the map is valid.
    """
    dataset = load_canon(Path(canon_path))
    return validate_redirect_map(
        dataset.redirects,
        dataset.editions,
        dataset.region_mappings,
        duplicate_keys=dataset.duplicate_redirect_keys,
    )


def dump_redirect_map(redirects: dict[str, str]) -> bytes:
    """Render a redirect map as indented JSON with a trailing newline."""
    return (json.dumps(redirects, indent=2, ensure_ascii=False) + "\n").encode("utf-8")


def regenerate_redirects(
    canon_path: str | Path,
    *,
    legacy_editions_dir: str | Path | None = None,
    write: bool = True,
) -> dict[str, Any]:
    """Regenerate the canon root's redirect map.

    Existing redirects are merged in and the result is flattened.

    Parameters
    ----------
    canon_path : str | Path
        Canon root directory.
    legacy_editions_dir : str | Path | None, optional
        Directory of pre-migration edition files, used for V1 redirects.
    write : bool, optional
        Write ``identity_redirects.json`` into the canon root, by default True.

    Returns
    -------
    dict[str, Any]
        The flattened redirect map.
    """
    root = Path(canon_path)
    dataset = load_canon(root)
    legacy = load_editions(Path(legacy_editions_dir)) if legacy_editions_dir else None

    redirects = generate_redirects(
        dataset.editions,
        dataset.region_mappings,
        existing=dataset.redirects,
        legacy_editions=legacy,
    )

    if write:
        write_bytes_atomic(root / REDIRECTS_FILE, dump_redirect_map(redirects))

    return redirects
