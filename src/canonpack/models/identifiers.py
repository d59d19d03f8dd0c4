"""Identity string helpers.

An identity string has the form ``edition:v<N>:<64 lowercase hex>``; the
generation tag ``N`` records which frozen extractor produced the hash.
"""

import re

from canonpack.errors import InvalidIdentityError

__all__ = [
    "IDENTITY_PREFIX",
    "format_identity",
    "parse_identity",
    "identity_generation",
    "is_identity_string",
]

IDENTITY_PREFIX = "edition"

_IDENTITY_RE = re.compile(r"^edition:v([1-9][0-9]*):([0-9a-f]{64})$")
_GENERATION_TAG_RE = re.compile(r"^edition:v(\d+):")


def format_identity(generation: int, digest: str) -> str:
    """Compose an identity string from a generation number and hex digest.

    Parameters
    ----------
    generation : int
        Positive generation number.
    digest : str
        64-character lowercase sha256 hex digest.

    Returns
    -------
    str
        Identity string.

    Raises
    ------
    InvalidIdentityError
        If the generation or digest is malformed.
    """
    identity = f"{IDENTITY_PREFIX}:v{generation}:{digest}"
    if not _IDENTITY_RE.match(identity):
        raise InvalidIdentityError(f"Cannot format identity from v{generation} and {digest!r}")
    return identity


def parse_identity(identity: str) -> tuple[int, str]:
    """Split a well-formed identity string into (generation, digest).

    Raises
    ------
    InvalidIdentityError
        If the input is not a string or does not match the identity format.
    """
    if not isinstance(identity, str):
        raise InvalidIdentityError(f"Identity must be a string, got {type(identity).__name__}")
    match = _IDENTITY_RE.match(identity.strip())
    if not match:
        raise InvalidIdentityError(f"Malformed identity: {identity!r}")
    return int(match.group(1)), match.group(2)


def identity_generation(identity: str) -> int | None:
    """Return the generation tag of an identity, or None when untagged.

    Only the ``edition:v<N>:`` prefix is inspected, so this also works on
    identities whose digest part is abbreviated.
    """
    if not isinstance(identity, str):
        return None
    match = _GENERATION_TAG_RE.match(identity.strip())
    return int(match.group(1)) if match else None


def is_identity_string(value: object) -> bool:
    """Check whether a value is a well-formed identity string."""
    return isinstance(value, str) and _IDENTITY_RE.match(value) is not None
