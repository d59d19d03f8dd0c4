"""Atomic file writing."""

import os
from pathlib import Path

__all__ = ["write_bytes_atomic"]


def write_bytes_atomic(path: Path, data: bytes) -> None:
    """Write bytes atomically: write to temp, fsync, rename.

    Readers never observe a partially written file.

    Parameters
    ----------
    path : Path
        Final file path. Parent directories are created.
    data : bytes
        Exact bytes to write; nothing is appended.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = path.with_name(path.name + ".tmp")

    try:
        with temp_path.open("wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        temp_path.replace(path)
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise
