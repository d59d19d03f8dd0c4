"""Structured audit logger for JSONL event logging.

Events go to ``events.jsonl`` next to the build outputs and never into the
payload, so logging cannot influence payload hashes.
"""

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any

from canonpack.audit.helpers import get_package_version
from canonpack.audit.models import LogEvent
from canonpack.utils import get_iso_timestamp

__all__ = ["AuditLogger"]


class AuditLogger:
    """JSONL audit logger with persistent file handle.

    Writes one JSON object per line and flushes after each write.

    Attributes
    ----------
    run_id : str
        Unique run identifier.
    log_path : Path
        Path to JSONL log file.
    current_stage : str | None
        Current stage name for context.
    """

    def __init__(self, run_id: str, log_path: Path) -> None:
        """Initialize audit logger and open file handle.

        Parameters
        ----------
        run_id : str
            Unique run identifier.
        log_path : Path
            Path to JSONL log file.
        """
        self.run_id = run_id
        self.log_path = log_path
        self.current_stage: str | None = None

        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        self._file = self.log_path.open("a", encoding="utf-8")

    def __enter__(self) -> "AuditLogger":
        """Enter context manager."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Exit context manager and close file."""
        self.close()

    def close(self) -> None:
        """Flush and close the log file handle."""
        if not self._file.closed:
            self._file.flush()
            self._file.close()

    def event(
        self,
        event_type: str,
        data: dict[str, Any] | None = None,
        level: str = "INFO",
        stage: str | None = None,
    ) -> None:
        """Write structured event to log.

        Parameters
        ----------
        event_type : str
            Event type identifier (e.g., "stage_started").
        data : dict[str, Any] | None, optional
            Event-specific data payload.
        level : str, optional
            Log level ("DEBUG", "INFO", "WARN", "ERROR").
        stage : str | None, optional
            Stage identifier, uses current_stage if not provided.
        """
        log_event = LogEvent(
            ts=get_iso_timestamp(),
            run_id=self.run_id,
            level=level,
            event=event_type,
            data=data or {},
            stage=stage if stage is not None else self.current_stage,
        )
        json.dump(asdict(log_event), self._file, ensure_ascii=False, separators=(",", ":"))
        self._file.write("\n")
        self._file.flush()

    def run_started(self, parameters: dict[str, Any]) -> None:
        """Log run_started event with the build configuration and package version."""
        self.event(
            "run_started",
            data={"canonpack_version": get_package_version(), "parameters": parameters},
        )

    def run_finished(self, status: str, duration_seconds: float) -> None:
        """Log run_finished event.

        Parameters
        ----------
        status : str
            Run status ("success" or "failed").
        duration_seconds : float
            Total execution time in seconds.
        """
        self.event("run_finished", data={"status": status, "duration_seconds": duration_seconds})

    def stage_started(self, stage: str) -> None:
        """Log stage_started event and make it the current stage."""
        self.current_stage = stage
        self.event("stage_started", stage=stage)

    def stage_finished(
        self,
        stage: str,
        duration_seconds: float,
        counters: dict[str, int] | None = None,
    ) -> None:
        """Log stage_finished event.

        Parameters
        ----------
        stage : str
            Stage identifier.
        duration_seconds : float
            Stage execution time in seconds.
        counters : dict[str, int] | None, optional
            Stage-specific counters.
        """
        data: dict[str, Any] = {"duration_seconds": duration_seconds}
        if counters:
            data["counters"] = counters
        self.event("stage_finished", data=data, stage=stage)
        self.current_stage = None

    def artifact_written(self, path: str, sha256: str, bytes_written: int) -> None:
        """Log artifact_written event.

        Parameters
        ----------
        path : str
            Path relative to the output directory.
        sha256 : str
            SHA256 hex digest of the artifact.
        bytes_written : int
            File size in bytes.
        """
        self.event("artifact_written", data={"path": path, "sha256": sha256, "bytes": bytes_written})

    def validation_failed(self, diagnostics: list[str]) -> None:
        """Log the diagnostics of a rejected dataset."""
        self.event("validation_failed", data={"diagnostics": diagnostics}, level="ERROR")

    def error(self, exception_class: str, message: str, stage: str | None = None) -> None:
        """Log error event.

        Parameters
        ----------
        exception_class : str
            Exception class name.
        message : str
            Error message.
        stage : str | None, optional
            Stage where error occurred.
        """
        self.event(
            "error",
            data={"exception_class": exception_class, "message": message},
            stage=stage,
            level="ERROR",
        )
