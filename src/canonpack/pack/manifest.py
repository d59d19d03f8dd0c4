"""Pack manifest: the signing target.

The manifest describes exactly one payload release. It is serialized with
the canonical serializer so that the bytes written to ``manifest.json`` are
the bytes that get signed and verified.
"""

from dataclasses import dataclass, field
from typing import Any

from canonpack.canonical import canonical_bytes
from canonpack.errors import IntegrityError
from canonpack.schemas import PACK_MANIFEST, schema_errors
from canonpack.utils import calculate_bytes_sha256, get_iso_timestamp

__all__ = [
    "PACK_FORMAT_VERSION",
    "PAYLOAD_PATH",
    "MANIFEST_PATH",
    "SIGNATURE_PATH",
    "PayloadFile",
    "PackManifest",
    "build_manifest",
    "serialize_manifest",
]

PACK_FORMAT_VERSION = "1"
PAYLOAD_PATH = "payload/data.json"
MANIFEST_PATH = "manifest.json"
SIGNATURE_PATH = "signature/manifest.sig"

SUPPORTED_KINDS = frozenset({"full"})


@dataclass(frozen=True)
class PayloadFile:
    """One payload file entry.

    Attributes
    ----------
    path : str
        Path relative to the pack root (POSIX separators).
    sha256 : str
        Lowercase hex digest of the file bytes.
    bytes : int
        File size in bytes.
    """

    path: str
    sha256: str
    bytes: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {"path": self.path, "sha256": self.sha256, "bytes": self.bytes}


@dataclass(frozen=True)
class PackManifest:
    """Manifest describing one payload release.

    Attributes
    ----------
    canon_version : str
        Dataset version label (e.g., '2024-05-01+abc1234' or 'local').
    schema_version : str
        Dataset schema version.
    identity_version : str
        Identity generation tag used by the dataset.
    created_at : str
        ISO-8601 creation time. Informational only.
    files : tuple[PayloadFile, ...]
        Payload files sorted by path.
    kind : str
        Release kind; only 'full' exists.
    pack_format_version : str
        Pack layout version.
    """

    canon_version: str
    schema_version: str
    identity_version: str
    created_at: str
    files: tuple[PayloadFile, ...] = field(default_factory=tuple)
    kind: str = "full"
    pack_format_version: str = PACK_FORMAT_VERSION

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON manifest document."""
        return {
            "pack_format_version": self.pack_format_version,
            "canon_version": self.canon_version,
            "schema_version": self.schema_version,
            "identity_version": self.identity_version,
            "type": self.kind,
            "created_at": self.created_at,
            "payload": {"files": [f.to_dict() for f in self.files]},
        }

    @classmethod
    def from_dict(cls, data: Any) -> "PackManifest":
        """Parse a manifest document after schema validation.

        Parameters
        ----------
        data : Any
            Decoded ``manifest.json``.

        Returns
        -------
        PackManifest
            Parsed manifest.

        Raises
        ------
        IntegrityError
            If the document does not satisfy the manifest schema.
        """
        errors = schema_errors(data, PACK_MANIFEST)
        if errors:
            raise IntegrityError("Invalid manifest: " + "; ".join(errors))

        files = tuple(
            PayloadFile(path=f["path"], sha256=f["sha256"], bytes=f["bytes"])
            for f in data["payload"]["files"]
        )
        return cls(
            canon_version=data["canon_version"],
            schema_version=data["schema_version"],
            identity_version=data["identity_version"],
            created_at=data["created_at"],
            files=files,
            kind=data["type"],
            pack_format_version=data["pack_format_version"],
        )


def build_manifest(
    payload_bytes: bytes,
    canon_version: str,
    schema_version: int | str,
    identity_version: str,
    *,
    created_at: str | None = None,
    kind: str = "full",
) -> PackManifest:
    """Build the manifest for a serialized payload.

    Parameters
    ----------
    payload_bytes : bytes
        Exact bytes of ``payload/data.json``.
    canon_version : str
        Dataset version label.
    schema_version : int | str
        Dataset schema version; stored as a string.
    identity_version : str
        Identity generation tag.
    created_at : str | None, optional
        Creation timestamp, current UTC time when None.
    kind : str, optional
        Release kind. Only 'full' is supported.

    Returns
    -------
    PackManifest
        Manifest with a single payload file entry.

    Raises
    ------
    ValueError
        If ``kind`` is not supported.
    """
    if kind not in SUPPORTED_KINDS:
        raise ValueError(f"Unsupported manifest kind: {kind!r} (supported: full)")

    files = [
        PayloadFile(
            path=PAYLOAD_PATH,
            sha256=calculate_bytes_sha256(payload_bytes),
            bytes=len(payload_bytes),
        )
    ]
    files.sort(key=lambda f: f.path)

    return PackManifest(
        canon_version=canon_version,
        schema_version=str(schema_version),
        identity_version=identity_version,
        created_at=created_at or get_iso_timestamp(),
        files=tuple(files),
        kind=kind,
    )


def serialize_manifest(manifest: PackManifest) -> bytes:
    """Serialize a manifest to its canonical bytes (the signing target)."""
    return canonical_bytes(manifest.to_dict())
