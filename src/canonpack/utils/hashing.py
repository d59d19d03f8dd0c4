"""Hashing utilities for canonpack.

Digests are plain lowercase sha256 hex strings, the form recorded in pack
manifests.
"""

import hashlib
from pathlib import Path

__all__ = [
    "calculate_file_sha256",
    "calculate_bytes_sha256",
]


def calculate_file_sha256(path: Path) -> str:
    """Calculate SHA256 hash of file contents from file path.

    Parameters
    ----------
    path : Path
        Path to file.

    Returns
    -------
    str
        Lowercase hex digest.

    Raises
    ------
    FileNotFoundError
        If file does not exist.

    Notes
    -----
    This function reads files in chunks for memory efficiency.
    """
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    sha256_hash = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            sha256_hash.update(chunk)

    return sha256_hash.hexdigest()


def calculate_bytes_sha256(data: bytes) -> str:
    """Calculate SHA-256 digest of bytes already in memory.

    Parameters
    ----------
    data : bytes
        Complete content.

    Returns
    -------
    str
        Lowercase hex digest.
    """
    return hashlib.sha256(data).hexdigest()
