"""Claim data models and their persisted JSON form.

A claim is an immutable signed statement about one artifact. There are two
variants:

- ``PositiveClaim`` -- asserts a claim kind (e.g. "reviewed", "built-by-ci")
  with an optional free-text value.
- ``RevocationClaim`` -- nullifies an earlier claim, referenced by id.

Claims are append-only. Revoking a claim stores a new ``RevocationClaim``;
the revoked claim's files are never touched.

Persisted document::

    {
      "id": "<uuid4>",
      "uid": "<signer identity>",
      "artifact_id": "<hex sha-256>",
      "identifier": "<repository locator>" | null,
      "comment": "<text>" | null,
      "timestamp": "<ISO-8601 UTC>",
      "specifics": {"Positive": {"claim_kind": "...", "claim_value": "..." | null}}
                 | {"Revocation": {"revoked_id": "<uuid4>"}}
    }
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from trustchain.core.artifacts.models import ArtifactId
from trustchain.core.signing.status import PublicKey
from trustchain.exceptions import ClaimFormatError

POSITIVE_TAG: str = "Positive"
REVOCATION_TAG: str = "Revocation"


def new_claim_id() -> str:
    """Draw a fresh random claim id (UUID4, hyphenated)."""
    return str(uuid.uuid4())


def is_claim_id(value: str) -> bool:
    """Return True if ``value`` is a canonical hyphenated UUID string."""
    try:
        return str(uuid.UUID(value)) == value
    except (ValueError, AttributeError, TypeError):
        return False


@dataclass(frozen=True)
class Claim:
    """Fields common to every claim.

    Attributes:
        id: Random unique claim id; also the claim's file name.
        uid: Signer identity that created the claim.
        artifact_id: Digest of the artifact the claim is about.
        identifier: Repository locator used when signing, if known.
        comment: Optional free-text comment.
        timestamp: Creation time (timezone-aware, UTC).
    """

    id: str
    uid: str
    artifact_id: ArtifactId
    identifier: str | None
    comment: str | None
    timestamp: datetime

    @property
    def is_revocation(self) -> bool:
        return False


@dataclass(frozen=True)
class PositiveClaim(Claim):
    """A claim asserting ``claim_kind`` (with optional ``claim_value``)."""

    claim_kind: str = ""
    claim_value: str | None = None


@dataclass(frozen=True)
class RevocationClaim(Claim):
    """A claim nullifying the claim with id ``revoked_id``."""

    revoked_id: str = ""

    @property
    def is_revocation(self) -> bool:
        return True


@dataclass(frozen=True)
class AuthenticatedClaim:
    """A claim whose detached signature has been verified.

    Attributes:
        claim: The parsed claim.
        signer: Key that produced the verified signature.
    """

    claim: Claim
    signer: PublicKey

    @property
    def id(self) -> str:
        return self.claim.id


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


def claim_to_dict(claim: Claim) -> dict[str, Any]:
    """Build the persisted document for ``claim``."""
    if isinstance(claim, RevocationClaim):
        specifics: dict[str, Any] = {REVOCATION_TAG: {"revoked_id": claim.revoked_id}}
    elif isinstance(claim, PositiveClaim):
        specifics = {
            POSITIVE_TAG: {
                "claim_kind": claim.claim_kind,
                "claim_value": claim.claim_value,
            }
        }
    else:
        raise TypeError(f"unsupported claim type {type(claim).__name__}")

    return {
        "id": claim.id,
        "uid": claim.uid,
        "artifact_id": claim.artifact_id.hex,
        "identifier": claim.identifier,
        "comment": claim.comment,
        "timestamp": claim.timestamp.isoformat(),
        "specifics": specifics,
    }


def claim_to_json(claim: Claim) -> str:
    """Serialize ``claim`` deterministically (sorted keys)."""
    return json.dumps(claim_to_dict(claim), indent=2, sort_keys=True) + "\n"


def _require_str(data: dict[str, Any], key: str, optional: bool = False) -> str | None:
    value = data.get(key)
    if value is None and optional:
        return None
    if not isinstance(value, str):
        raise ClaimFormatError(f"claim field '{key}' must be a string, got {value!r}")
    return value


def claim_from_dict(data: Any) -> Claim:
    """Parse a persisted claim document.

    Raises:
        ClaimFormatError: If any field is missing or malformed.
    """
    if not isinstance(data, dict):
        raise ClaimFormatError("claim document must be a JSON object")

    claim_id = _require_str(data, "id")
    if not is_claim_id(claim_id):
        raise ClaimFormatError(f"invalid claim id {claim_id!r}")
    try:
        artifact_id = ArtifactId.from_hex(_require_str(data, "artifact_id"))
        timestamp = datetime.fromisoformat(_require_str(data, "timestamp"))
    except ValueError as exc:
        raise ClaimFormatError(f"malformed claim {claim_id}: {exc}", cause=exc) from exc

    common: dict[str, Any] = {
        "id": claim_id,
        "uid": _require_str(data, "uid"),
        "artifact_id": artifact_id,
        "identifier": _require_str(data, "identifier", optional=True),
        "comment": _require_str(data, "comment", optional=True),
        "timestamp": timestamp,
    }

    specifics = data.get("specifics")
    if not isinstance(specifics, dict) or len(specifics) != 1:
        raise ClaimFormatError(f"claim {claim_id} has malformed 'specifics'")
    tag, body = next(iter(specifics.items()))
    if not isinstance(body, dict):
        raise ClaimFormatError(f"claim {claim_id} has malformed '{tag}' body")

    if tag == POSITIVE_TAG:
        return PositiveClaim(
            **common,
            claim_kind=_require_str(body, "claim_kind"),
            claim_value=_require_str(body, "claim_value", optional=True),
        )
    if tag == REVOCATION_TAG:
        revoked_id = _require_str(body, "revoked_id")
        if not is_claim_id(revoked_id):
            raise ClaimFormatError(f"claim {claim_id} revokes invalid id {revoked_id!r}")
        return RevocationClaim(**common, revoked_id=revoked_id)
    raise ClaimFormatError(f"claim {claim_id} has unknown variant '{tag}'")


def claim_from_json(text: str | bytes) -> Claim:
    """Parse a claim document from JSON text.

    Raises:
        ClaimFormatError: On invalid JSON or an invalid document.
    """
    try:
        data = json.loads(text)
    except ValueError as exc:
        raise ClaimFormatError(f"claim is not valid JSON: {exc}", cause=exc) from exc
    return claim_from_dict(data)
