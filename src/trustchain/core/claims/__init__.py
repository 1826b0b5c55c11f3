"""Signed claims about artifacts and their on-disk registry.

Submodules:
    models    -- Claim, PositiveClaim, RevocationClaim, AuthenticatedClaim, JSON form
    registry  -- ClaimRegistry, FileSystemClaimRegistry
"""

from trustchain.core.claims.models import (
    AuthenticatedClaim,
    Claim,
    PositiveClaim,
    RevocationClaim,
    claim_from_json,
    claim_to_json,
    new_claim_id,
)
from trustchain.core.claims.registry import ClaimRegistry, FileSystemClaimRegistry

__all__ = [
    "AuthenticatedClaim",
    "Claim",
    "ClaimRegistry",
    "FileSystemClaimRegistry",
    "PositiveClaim",
    "RevocationClaim",
    "claim_from_json",
    "claim_to_json",
    "new_claim_id",
]
