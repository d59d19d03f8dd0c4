"""Common utility functions for canonpack.

This module consolidates shared utility functions used across the codebase,
including hashing, timestamps, and atomic file writes.
"""

from canonpack.utils.files import write_bytes_atomic
from canonpack.utils.hashing import calculate_bytes_sha256, calculate_file_sha256
from canonpack.utils.timestamps import get_iso_timestamp

__all__ = [
    "get_iso_timestamp",
    "calculate_file_sha256",
    "calculate_bytes_sha256",
    "write_bytes_atomic",
]
