"""Build configuration and result dataclasses."""

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from canonpack.pack.manifest import PackManifest

__all__ = ["BuildConfig", "BuildResult"]


@dataclass
class BuildConfig:
    """Configuration for one pack build.

    Every location is explicit; nothing is read from the environment.

    Attributes
    ----------
    canon_path : Path
        Canon root directory.
    output_dir : Path
        Pack output directory.
    canon_version : str | None
        Dataset version label. If None, derived from the canon root's git
        HEAD (``<date>+<sha>``), falling back to "local".
    created_at : str | None
        Manifest creation timestamp. If None, the current UTC time.
    audit_log : bool
        Write ``events.jsonl`` into the output directory.
    """

    canon_path: Path
    output_dir: Path = Path("out")
    canon_version: str | None = None
    created_at: str | None = None
    audit_log: bool = True

    def __post_init__(self) -> None:
        """Normalize paths and validate."""
        self.canon_path = Path(self.canon_path)
        self.output_dir = Path(self.output_dir)

        if self.canon_version is not None and not self.canon_version.strip():
            raise ValueError("canon_version must be non-empty when given")

        if self.output_dir.resolve() == self.canon_path.resolve():
            raise ValueError("output_dir must differ from canon_path")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = asdict(self)
        data["canon_path"] = str(self.canon_path)
        data["output_dir"] = str(self.output_dir)
        return data


@dataclass
class BuildResult:
    """Results from a pack build.

    Attributes
    ----------
    success : bool
        Whether the pack was written.
    manifest : PackManifest | None
        Manifest of the written pack.
    payload_sha256 : str | None
        sha256 of ``payload/data.json``.
    edition_count : int
        Number of editions in the payload.
    output_files : dict[str, str]
        Map of artifact type to file path.
    error_message : str | None
        Error message if failed.
    diagnostics : list[str]
        Validator diagnostics when validation rejected the dataset.
    exit_code : int
        Process exit code matching the failure (0 on success).
    """

    success: bool
    manifest: PackManifest | None = None
    payload_sha256: str | None = None
    edition_count: int = 0
    output_files: dict[str, str] = field(default_factory=dict)
    error_message: str | None = None
    diagnostics: list[str] = field(default_factory=list)
    exit_code: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "success": self.success,
            "manifest": self.manifest.to_dict() if self.manifest else None,
            "payload_sha256": self.payload_sha256,
            "edition_count": self.edition_count,
            "output_files": dict(self.output_files),
            "error_message": self.error_message,
            "diagnostics": list(self.diagnostics),
            "exit_code": self.exit_code,
        }
