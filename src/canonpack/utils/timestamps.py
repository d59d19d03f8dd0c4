"""Timestamp utilities for canonpack."""

from datetime import UTC, datetime

__all__ = ["get_iso_timestamp"]


def get_iso_timestamp() -> str:
    """Get current UTC timestamp in ISO8601 format with microseconds.

    Returns
    -------
    str
        ISO8601 timestamp (e.g., "2026-02-03T12:34:56.123456Z").

    Notes
    -----
    Timestamps are informational only. They appear in audit events and in
    the manifest's ``created_at`` but never inside a payload.
    """
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")
