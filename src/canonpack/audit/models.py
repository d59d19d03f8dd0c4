"""Data models for audit logging."""

from dataclasses import dataclass, field
from typing import Any

__all__ = ["LogEvent"]


@dataclass
class LogEvent:
    """One structured audit event (one line of events.jsonl).

    Attributes
    ----------
    ts : str
        ISO8601 UTC timestamp.
    run_id : str
        Build run identifier.
    level : str
        Log level ("DEBUG", "INFO", "WARN", "ERROR").
    event : str
        Event type (e.g., "stage_started", "artifact_written").
    data : dict[str, Any]
        Event-specific payload.
    stage : str | None
        Pipeline stage the event belongs to.
    """

    ts: str
    run_id: str
    level: str
    event: str
    data: dict[str, Any] = field(default_factory=dict)
    stage: str | None = None
