"""Ed25519 signing of pack manifests.

Signatures cover the exact bytes of ``manifest.json`` as written to disk.
Private keys are held by the caller; this module never generates or stores
key material.
"""

from pathlib import Path

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

from canonpack.errors import CanonLoadError, SigningError
from canonpack.pack.manifest import MANIFEST_PATH, SIGNATURE_PATH
from canonpack.utils import write_bytes_atomic

__all__ = [
    "load_private_key",
    "load_public_key",
    "sign_manifest_bytes",
    "verify_manifest_signature",
    "read_manifest_bytes",
    "sign_pack",
    "attach_signature",
]

KeyMaterial = bytes | str


def _as_bytes(pem: KeyMaterial) -> bytes:
    return pem.encode("utf-8") if isinstance(pem, str) else pem


def load_private_key(private_key_pem: KeyMaterial) -> Ed25519PrivateKey:
    """Load an unencrypted Ed25519 private key from PEM.

    Raises
    ------
    SigningError
        If the PEM cannot be parsed or holds a non-Ed25519 key.
    """
    try:
        key = serialization.load_pem_private_key(_as_bytes(private_key_pem), password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise SigningError(f"Unreadable private key: {e}") from e
    if not isinstance(key, Ed25519PrivateKey):
        raise SigningError(f"Private key must be Ed25519, got {type(key).__name__}")
    return key


def load_public_key(public_key_pem: KeyMaterial) -> Ed25519PublicKey:
    """Load an Ed25519 public key from PEM.

    Raises
    ------
    SigningError
        If the PEM cannot be parsed or holds a non-Ed25519 key.
    """
    try:
        key = serialization.load_pem_public_key(_as_bytes(public_key_pem))
    except (ValueError, UnsupportedAlgorithm) as e:
        raise SigningError(f"Unreadable public key: {e}") from e
    if not isinstance(key, Ed25519PublicKey):
        raise SigningError(f"Public key must be Ed25519, got {type(key).__name__}")
    return key


def sign_manifest_bytes(manifest_bytes: bytes, private_key_pem: KeyMaterial) -> bytes:
    """Sign manifest bytes and return the raw 64-byte signature.

    Parameters
    ----------
    manifest_bytes : bytes
        Exact bytes of ``manifest.json``.
    private_key_pem : bytes | str
        Ed25519 private key in PEM (PKCS#8) form.

    Returns
    -------
    bytes
        Detached signature.
    """
    return load_private_key(private_key_pem).sign(manifest_bytes)


def verify_manifest_signature(
    manifest_bytes: bytes, signature: bytes, public_key_pem: KeyMaterial
) -> bool:
    """Check a detached signature over manifest bytes.

    Returns False for a signature that does not verify; raises
    ``SigningError`` only when the key itself is unusable.
    """
    key = load_public_key(public_key_pem)
    try:
        key.verify(signature, manifest_bytes)
    except InvalidSignature:
        return False
    return True


def read_manifest_bytes(pack_root: Path) -> bytes:
    """Read ``manifest.json`` from a pack.

    Raises
    ------
    CanonLoadError
        If the manifest is missing or unreadable.
    """
    manifest_path = Path(pack_root) / MANIFEST_PATH
    try:
        return manifest_path.read_bytes()
    except OSError as e:
        raise CanonLoadError(f"manifest.json not found at {manifest_path}") from e


def attach_signature(pack_root: Path, signature: bytes) -> Path:
    """Write an externally produced signature into the pack.

    Parameters
    ----------
    pack_root : Path
        Pack directory.
    signature : bytes
        Raw signature bytes.

    Returns
    -------
    Path
        Path of the written signature file.

    Raises
    ------
    SigningError
        If the signature is empty.
    """
    if not signature:
        raise SigningError("No signature received (empty input)")
    signature_path = Path(pack_root) / SIGNATURE_PATH
    write_bytes_atomic(signature_path, signature)
    return signature_path


def sign_pack(pack_root: Path, private_key_pem: KeyMaterial) -> Path:
    """Sign a built pack's manifest with a local private key.

    Returns
    -------
    Path
        Path of the written signature file.
    """
    manifest_bytes = read_manifest_bytes(pack_root)
    return attach_signature(pack_root, sign_manifest_bytes(manifest_bytes, private_key_pem))
