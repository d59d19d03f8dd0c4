"""Helper utilities for audit logging.

Run ID generation, package version lookup and the canon version label
derived from the canon root's git history.

For timestamp and hashing utilities, see canonpack.utils.
"""

import secrets
import subprocess
from datetime import UTC, datetime
from pathlib import Path

__all__ = [
    "LOCAL_CANON_VERSION",
    "generate_run_id",
    "get_package_version",
    "get_canon_version",
]

LOCAL_CANON_VERSION = "local"


def generate_run_id() -> str:
    """Generate unique run identifier.

    Returns
    -------
    str
        Run ID in format: ISO8601_timestamp__random_suffix.
    """
    timestamp = datetime.now(UTC).isoformat().replace("+00:00", "Z")
    suffix = secrets.token_hex(4)
    return f"{timestamp}__{suffix}"


def get_package_version() -> str:
    """Get canonpack package version.

    Returns
    -------
    str
        Package version or "unknown".
    """
    try:
        import importlib.metadata

        return importlib.metadata.version("canonpack")
    except importlib.metadata.PackageNotFoundError:
        return "unknown"


def _git(canon_path: Path, *args: str) -> str | None:
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=canon_path,
            capture_output=True,
            text=True,
            check=True,
            timeout=5,
        )
    except (subprocess.SubprocessError, FileNotFoundError, NotADirectoryError):
        return None
    return result.stdout.strip() or None


def get_canon_version(canon_path: Path) -> str:
    """Derive the dataset version label from the canon root's git HEAD.

    Parameters
    ----------
    canon_path : Path
        Canon root directory.

    Returns
    -------
    str
        ``<commit date YYYY-MM-DD>+<short sha>``, or "local" when the canon
        root is not a git checkout.
    """
    commit_date = _git(canon_path, "log", "-1", "--format=%ci")
    sha = _git(canon_path, "rev-parse", "--short", "HEAD")
    if not commit_date or not sha:
        return LOCAL_CANON_VERSION
    return f"{commit_date[:10]}+{sha}"
