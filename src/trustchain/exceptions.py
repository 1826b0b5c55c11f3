"""trustchain exception hierarchy.

All public exceptions inherit from TrustChainError, giving callers a single
base class to catch when they want to handle any trustchain-specific failure
without swallowing unrelated errors.

Every error carries an ``ErrorKind``, the offending path or identifier
(``subject``), and, when it wraps a lower-level failure, the underlying
cause. Wrapping is done with ``raise ... from exc`` so the cause is also
visible in tracebacks.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path


class ErrorKind(Enum):
    """Classification shared by every trustchain error."""

    ARTIFACT_NOT_FOUND = "ArtifactNotFound"
    ARTIFACT_READ = "ArtifactReadError"
    ARTIFACT_FOLDER_READ = "ArtifactFolderReadError"
    INVALID_ARTIFACT_ID = "InvalidArtifactId"
    CLAIM_NOT_FOUND = "ClaimNotFound"
    CLAIM_ALREADY_REVOKED = "ClaimAlreadyRevoked"
    CLAIMS = "Claims"
    IO = "Io"
    GPG = "Gpg"
    INVALID_SIGNATURE = "InvalidSignature"
    EXPIRED_SIGNATURE = "ExpiredSignature"
    EXPIRED_KEY_SIGNATURE = "ExpiredKeySignature"
    SIGNATURE_FORMAT = "SignatureFormat"
    CONFIG = "Config"


class TrustChainError(Exception):
    """Base exception for all trustchain errors.

    Args:
        message: Human-readable description.
        subject: The path or identifier the error is about, if any.
        cause: The wrapped lower-level exception, if any.
    """

    kind: ErrorKind = ErrorKind.CLAIMS
    retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        subject: str | Path | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.subject = str(subject) if subject is not None else None
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message} ({self.cause})"
        return self.message


# ---------------------------------------------------------------------------
# Artifacts
# ---------------------------------------------------------------------------


class ArtifactNotFoundError(TrustChainError):
    """Raised when an artifact file does not exist at its resolved path."""

    kind = ErrorKind.ARTIFACT_NOT_FOUND


class ArtifactReadError(TrustChainError):
    """Raised when an existing artifact file cannot be read."""

    kind = ErrorKind.ARTIFACT_READ


class ArtifactFolderReadError(TrustChainError):
    """Raised when an artifact directory cannot be listed."""

    kind = ErrorKind.ARTIFACT_FOLDER_READ


class InvalidArtifactIdError(TrustChainError):
    """Raised when a repository locator is malformed for its backend."""

    kind = ErrorKind.INVALID_ARTIFACT_ID


class UnsupportedRepositoryError(InvalidArtifactIdError):
    """Raised when a declared but unimplemented repository kind is selected.

    Covers ecosystems such as npm and cargo which are known by name but
    have no resolution algorithm yet. Selecting one fails immediately
    instead of resolving to a wrong path.
    """


# ---------------------------------------------------------------------------
# Claims and storage
# ---------------------------------------------------------------------------


class ClaimsError(TrustChainError):
    """Raised for claim registry failures.

    Covers folder creation problems, oversized claim documents, and
    cleanup failures while relocating staged claims.
    """

    kind = ErrorKind.CLAIMS


class ClaimNotFoundError(ClaimsError):
    """Raised when a claim (or its artifact folder) is not in the registry."""

    kind = ErrorKind.CLAIM_NOT_FOUND


class ClaimAlreadyRevokedError(ClaimsError):
    """Raised when revoking a claim that already has a stored revocation."""

    kind = ErrorKind.CLAIM_ALREADY_REVOKED


class ClaimFormatError(ClaimsError):
    """Raised when a stored claim document cannot be parsed."""


class StorageError(TrustChainError):
    """Raised when creating, writing, or copying a signed document fails."""

    kind = ErrorKind.IO


# ---------------------------------------------------------------------------
# Signing engine
# ---------------------------------------------------------------------------


class SigningError(TrustChainError):
    """Raised when the external signing engine fails.

    Covers failures to launch the engine and non-zero exit codes when
    signing.
    """

    kind = ErrorKind.GPG


class SigningTimeoutError(SigningError):
    """Raised when the signing engine does not finish within its timeout."""

    retryable = True


class SignatureProcessError(SigningError):
    """Raised when verification produced no verdict and the engine exited non-zero."""


class SignatureOutputError(SigningError):
    """Raised when verification exited cleanly but no status record was recognised."""


class InvalidSignatureError(TrustChainError):
    """Raised when a signature does not match its data (possible tampering)."""

    kind = ErrorKind.INVALID_SIGNATURE


class ExpiredSignatureError(TrustChainError):
    """Raised when the signature itself has expired."""

    kind = ErrorKind.EXPIRED_SIGNATURE


class ExpiredKeySignatureError(TrustChainError):
    """Raised when the signing key has been revoked.

    Attributes:
        key_id: Key id reported by the engine, when parseable.
        uid: User id reported by the engine, when parseable.
    """

    kind = ErrorKind.EXPIRED_KEY_SIGNATURE

    def __init__(
        self,
        message: str,
        *,
        subject: str | Path | None = None,
        key_id: str | None = None,
        uid: str | None = None,
    ) -> None:
        super().__init__(message, subject=subject)
        self.key_id = key_id
        self.uid = uid


class SignatureFormatError(TrustChainError):
    """Raised when the engine reports a malformed or unusable signature."""

    kind = ErrorKind.SIGNATURE_FORMAT


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class ConfigError(TrustChainError):
    """Raised when configuration is missing, unreadable, or invalid."""

    kind = ErrorKind.CONFIG
