"""Pack building, signing and verification.

A pack is a directory holding the canonical payload, the manifest that
describes it and, once signed, a detached Ed25519 signature::

    manifest.json
    payload/data.json
    signature/manifest.sig
"""

from canonpack.pack.loader import (
    REDIRECTS_FILE,
    CanonDataset,
    Validator,
    accept_all,
    command_validator,
    load_canon,
    load_editions,
)
from canonpack.pack.manifest import (
    MANIFEST_PATH,
    PACK_FORMAT_VERSION,
    PAYLOAD_PATH,
    SIGNATURE_PATH,
    PackManifest,
    PayloadFile,
    build_manifest,
    serialize_manifest,
)
from canonpack.pack.payload import build_canon_payload, hash_payload, sort_external_refs
from canonpack.pack.signing import (
    attach_signature,
    load_private_key,
    load_public_key,
    read_manifest_bytes,
    sign_manifest_bytes,
    sign_pack,
    verify_manifest_signature,
)
from canonpack.pack.verify import VerifyMode, VerifyResult, verify_pack

__all__ = [
    # Loader
    "REDIRECTS_FILE",
    "CanonDataset",
    "Validator",
    "load_canon",
    "load_editions",
    "accept_all",
    "command_validator",
    # Payload
    "build_canon_payload",
    "hash_payload",
    "sort_external_refs",
    # Manifest
    "PACK_FORMAT_VERSION",
    "MANIFEST_PATH",
    "PAYLOAD_PATH",
    "SIGNATURE_PATH",
    "PayloadFile",
    "PackManifest",
    "build_manifest",
    "serialize_manifest",
    # Signing
    "load_private_key",
    "load_public_key",
    "sign_manifest_bytes",
    "verify_manifest_signature",
    "read_manifest_bytes",
    "sign_pack",
    "attach_signature",
    # Verification
    "VerifyMode",
    "VerifyResult",
    "verify_pack",
]
