"""Pack verification.

Two independent checks are made and reported separately:

integrity
    The manifest parses and is schema-valid, and every payload file it lists
    exists with the recorded byte length and sha256.
authenticity
    The detached signature verifies over the exact manifest bytes. Only
    performed when a public key is supplied.

Without a public key verification runs in the explicit ``HASH_ONLY`` mode.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Any

from canonpack.errors import IntegrityError
from canonpack.pack.manifest import MANIFEST_PATH, SIGNATURE_PATH, PackManifest
from canonpack.pack.signing import KeyMaterial, verify_manifest_signature
from canonpack.utils import calculate_file_sha256

__all__ = ["VerifyMode", "VerifyResult", "verify_pack"]


class VerifyMode(str, Enum):
    """Which checks a verification run performs."""

    HASH_ONLY = "hash_only"
    HASH_AND_SIGNATURE = "hash_and_signature"


@dataclass
class VerifyResult:
    """Outcome of verifying one pack.

    Attributes
    ----------
    mode : VerifyMode
        Checks that were performed.
    integrity_errors : list[str]
        Manifest or payload hash problems.
    authenticity_errors : list[str]
        Signature problems.
    manifest : PackManifest | None
        Parsed manifest when it was readable.
    """

    mode: VerifyMode
    integrity_errors: list[str] = field(default_factory=list)
    authenticity_errors: list[str] = field(default_factory=list)
    manifest: PackManifest | None = None

    @property
    def ok(self) -> bool:
        """True when no check failed."""
        return not self.integrity_errors and not self.authenticity_errors

    @property
    def errors(self) -> list[str]:
        """All errors, integrity first."""
        return self.integrity_errors + self.authenticity_errors

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "ok": self.ok,
            "mode": self.mode.value,
            "integrity_errors": list(self.integrity_errors),
            "authenticity_errors": list(self.authenticity_errors),
        }


def _check_signature(
    pack_root: Path, manifest_bytes: bytes, public_key_pem: KeyMaterial
) -> list[str]:
    signature_path = pack_root / SIGNATURE_PATH
    if not signature_path.is_file():
        return [f"Signature not found at {SIGNATURE_PATH}"]
    signature = signature_path.read_bytes()
    if not verify_manifest_signature(manifest_bytes, signature, public_key_pem):
        return ["Signature does not verify against the public key"]
    return []


def _resolve_payload_path(pack_root: Path, relative: str) -> Path | None:
    posix = PurePosixPath(relative)
    if posix.is_absolute() or ".." in posix.parts:
        return None
    return pack_root.joinpath(*posix.parts)


def _check_payload(pack_root: Path, manifest: PackManifest) -> list[str]:
    errors: list[str] = []
    for entry in manifest.files:
        path = _resolve_payload_path(pack_root, entry.path)
        if path is None:
            errors.append(f"Payload path escapes pack root: {entry.path}")
            continue
        if not path.is_file():
            errors.append(f"Payload file missing: {entry.path}")
            continue
        size = path.stat().st_size
        if size != entry.bytes:
            errors.append(f"Size mismatch for {entry.path}: expected {entry.bytes}, got {size}")
        actual = calculate_file_sha256(path)
        if actual != entry.sha256:
            errors.append(f"Hash mismatch for {entry.path}: expected {entry.sha256}, got {actual}")
    return errors


def _parse_manifest(manifest_bytes: bytes) -> PackManifest:
    try:
        data = json.loads(manifest_bytes.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise IntegrityError(f"manifest.json is not valid JSON: {e}") from e
    return PackManifest.from_dict(data)


def verify_pack(pack_root: Path, public_key_pem: KeyMaterial | None = None) -> VerifyResult:
    """Verify a pack on disk.

    Parameters
    ----------
    pack_root : Path
        Pack directory containing ``manifest.json``.
    public_key_pem : bytes | str | None, optional
        Ed25519 public key. When None only integrity is checked.

    Returns
    -------
    VerifyResult
        Separate integrity and authenticity findings.

    Raises
    ------
    SigningError
        If a public key is supplied but is not a usable Ed25519 key.
    """
    pack_root = Path(pack_root)
    mode = VerifyMode.HASH_ONLY if public_key_pem is None else VerifyMode.HASH_AND_SIGNATURE
    result = VerifyResult(mode=mode)

    manifest_path = pack_root / MANIFEST_PATH
    if not manifest_path.is_file():
        result.integrity_errors.append(f"manifest.json not found at {manifest_path}")
        return result
    manifest_bytes = manifest_path.read_bytes()

    if public_key_pem is not None:
        result.authenticity_errors.extend(
            _check_signature(pack_root, manifest_bytes, public_key_pem)
        )

    try:
        result.manifest = _parse_manifest(manifest_bytes)
    except IntegrityError as e:
        result.integrity_errors.append(str(e))
        return result

    result.integrity_errors.extend(_check_payload(pack_root, result.manifest))
    return result
