"""Dataset loading for pack builds.

The canon root is always passed in explicitly; nothing here consults the
environment or the working directory. Layout::

    <canon>/schema/schema.json
    <canon>/schema/publishers.json      (optional)
    <canon>/schema/regions.json         (optional)
    <canon>/editions/*.json
    <canon>/identity_redirects.json     (optional)
"""

import json
import subprocess
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from canonpack.errors import CanonLoadError
from canonpack.identity.generations import ACTIVE_GENERATION
from canonpack.identity.redirects import load_redirect_map

__all__ = [
    "REDIRECTS_FILE",
    "CanonDataset",
    "Validator",
    "load_canon",
    "load_editions",
    "command_validator",
    "accept_all",
]

SCHEMA_FILE = Path("schema") / "schema.json"
PUBLISHERS_FILE = Path("schema") / "publishers.json"
REGIONS_FILE = Path("schema") / "regions.json"
EDITIONS_DIR = Path("editions")
REDIRECTS_FILE = Path("identity_redirects.json")

Validator = Callable[[Path], tuple[bool, list[str]]]


@dataclass(frozen=True)
class CanonDataset:
    """In-memory snapshot of a canon root.

    Attributes
    ----------
    root : Path
        Canon root directory.
    schema_version : int
        ``version`` from schema.json.
    identity_version : str
        Identity generation tag (e.g., 'v4').
    publishers : list[dict[str, Any]]
        Publisher records in file order.
    region_canonical : list[str]
        Canonical region codes in file order.
    region_mappings : dict[str, str]
        Region alias table.
    editions : list[Any]
        Edition documents, files read in name order.
    redirects : dict[str, str]
        Identity redirect map (empty when the file is absent).
    duplicate_redirect_keys : list[str]
        Keys repeated in the redirect map file.
    """

    root: Path
    schema_version: int
    identity_version: str
    publishers: list[dict[str, Any]] = field(default_factory=list)
    region_canonical: list[str] = field(default_factory=list)
    region_mappings: dict[str, str] = field(default_factory=dict)
    editions: list[Any] = field(default_factory=list)
    redirects: dict[str, str] = field(default_factory=dict)
    duplicate_redirect_keys: list[str] = field(default_factory=list)


def _read_json(path: Path) -> Any:
    try:
        with path.open(encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise CanonLoadError(f"Malformed JSON in {path}: {e}") from e
    except OSError as e:
        raise CanonLoadError(f"Cannot read {path}: {e}") from e


def _load_schema(root: Path) -> tuple[int, str]:
    schema_path = root / SCHEMA_FILE
    if not schema_path.is_file():
        raise CanonLoadError(f"Canon schema not found at {schema_path}")

    schema = _read_json(schema_path)
    if not isinstance(schema, dict):
        raise CanonLoadError(f"Canon schema must be an object: {schema_path}")

    version = schema.get("version")
    if not isinstance(version, int) or isinstance(version, bool):
        raise CanonLoadError("Canon schema must have an integer version")

    contract = schema.get("identityContract") or {}
    hash_version = contract.get("editionHashVersion") if isinstance(contract, dict) else None
    if isinstance(hash_version, int) and not isinstance(hash_version, bool):
        identity_version = f"v{hash_version}"
    else:
        identity_version = ACTIVE_GENERATION.tag
    return version, identity_version


def load_editions(editions_dir: Path) -> list[Any]:
    """Read every ``*.json`` file in name order.

    A file holds either one edition object or a list of them.

    Raises
    ------
    CanonLoadError
        If a file is malformed or holds something other than objects.
    """
    if not editions_dir.is_dir():
        return []

    editions: list[Any] = []
    for path in sorted(editions_dir.glob("*.json")):
        data = _read_json(path)
        items = data if isinstance(data, list) else [data]
        for item in items:
            if not isinstance(item, dict):
                raise CanonLoadError(f"Edition entries must be objects: {path}")
            editions.append(item)
    return editions


def load_canon(canon_path: Path) -> CanonDataset:
    """Load a canon root into memory.

    Parameters
    ----------
    canon_path : Path
        Canon root directory.

    Returns
    -------
    CanonDataset
        Loaded dataset.

    Raises
    ------
    CanonLoadError
        If the schema is missing or invalid, or any file is malformed.
    RedirectMapError
        If the redirect map exists but is not a map of identity strings.
    """
    root = Path(canon_path)
    schema_version, identity_version = _load_schema(root)

    publishers: list[dict[str, Any]] = []
    if (root / PUBLISHERS_FILE).is_file():
        publishers = _read_json(root / PUBLISHERS_FILE)
        if not isinstance(publishers, list):
            raise CanonLoadError(f"publishers.json must be a list: {root / PUBLISHERS_FILE}")

    regions: dict[str, Any] = {}
    if (root / REGIONS_FILE).is_file():
        regions = _read_json(root / REGIONS_FILE)
        if not isinstance(regions, dict):
            raise CanonLoadError(f"regions.json must be an object: {root / REGIONS_FILE}")

    redirects: dict[str, str] = {}
    duplicates: list[str] = []
    if (root / REDIRECTS_FILE).is_file():
        redirects, duplicates = load_redirect_map(root / REDIRECTS_FILE)

    return CanonDataset(
        root=root,
        schema_version=schema_version,
        identity_version=identity_version,
        publishers=publishers,
        region_canonical=list(regions.get("canonical") or []),
        region_mappings=dict(regions.get("mappings") or {}),
        editions=load_editions(root / EDITIONS_DIR),
        redirects=redirects,
        duplicate_redirect_keys=duplicates,
    )


def accept_all(canon_path: Path) -> tuple[bool, list[str]]:
    """Validator that accepts every dataset."""
    return True, []


def command_validator(argv: Sequence[str], timeout: float = 300) -> Validator:
    """Wrap an external validation command as a validator.

    The command runs with the canon root as its working directory; exit
    status 0 means valid and stderr lines become the diagnostics.

    Parameters
    ----------
    argv : Sequence[str]
        Command and arguments (e.g., ``["pnpm", "run", "validate"]``).
    timeout : float
        Seconds before the command is abandoned.

    Returns
    -------
    Validator
        Callable taking the canon root.
    """
    command = list(argv)

    def _validate(canon_path: Path) -> tuple[bool, list[str]]:
        try:
            result = subprocess.run(
                command,
                cwd=canon_path,
                capture_output=True,
                text=True,
                check=False,
                timeout=timeout,
            )
        except (subprocess.SubprocessError, FileNotFoundError) as e:
            return False, [f"Validator could not run: {e}"]
        diagnostics = [line for line in result.stderr.splitlines() if line.strip()]
        return result.returncode == 0, diagnostics

    return _validate
