"""Error taxonomy and exit code mapping for canonpack."""

from __future__ import annotations

__all__ = [
    "CanonError",
    "InvalidEditionError",
    "InvalidIdentityError",
    "CanonicalizationError",
    "CanonLoadError",
    "RedirectError",
    "RedirectChainError",
    "RedirectLoopError",
    "RedirectMapError",
    "IntegrityError",
    "AuthenticityError",
    "SigningError",
    "ValidationFailed",
    "BuildError",
    "exit_code_for_exception",
]


class CanonError(Exception):
    """Base error for deterministic CLI exit codes."""

    exit_code: int = 1


class InvalidEditionError(CanonError, ValueError):
    """Edition input is not a structured record or has a malformed field."""

    exit_code = 2


class InvalidIdentityError(CanonError, ValueError):
    """Identity string is empty, not a string, or malformed."""

    exit_code = 2


class CanonicalizationError(CanonError, ValueError):
    """Value cannot be rendered in canonical form."""

    exit_code = 2


class CanonLoadError(CanonError):
    """Dataset files are missing or unreadable."""

    exit_code = 3


class RedirectError(CanonError):
    """Redirect map structural failure."""

    exit_code = 4


class RedirectChainError(RedirectError):
    """Redirect target is itself a redirect key."""


class RedirectLoopError(RedirectError):
    """Redirect key maps to itself."""


class RedirectMapError(RedirectError):
    """Redirect map file has the wrong shape or cannot be flattened."""


class IntegrityError(CanonError):
    """Payload bytes do not match the hash recorded in the manifest."""

    exit_code = 5


class AuthenticityError(CanonError):
    """Manifest signature does not verify against the public key."""

    exit_code = 6


class SigningError(CanonError):
    """Key material is unusable for Ed25519 signing or verification."""

    exit_code = 6


class ValidationFailed(CanonError):
    """External dataset validator rejected the canon.

    Attributes
    ----------
    diagnostics : list[str]
        Messages reported by the validator.
    """

    exit_code = 7

    def __init__(self, message: str, diagnostics: list[str] | None = None) -> None:
        super().__init__(message)
        self.diagnostics = diagnostics or []


class BuildError(CanonError):
    """Build pipeline did not produce a pack."""

    exit_code = 1


def exit_code_for_exception(exc: BaseException) -> int:
    """Resolve a deterministic exit code for an exception."""
    if isinstance(exc, CanonError):
        return exc.exit_code
    if isinstance(exc, OSError):
        return CanonLoadError.exit_code
    return CanonError.exit_code
