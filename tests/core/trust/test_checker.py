"""Tests for the Checker against a real registry and a fixed policy."""

from __future__ import annotations

import hashlib
from typing import Iterable

import pytest

from trustchain.core.artifacts.models import ArtifactId
from trustchain.core.claims import AuthenticatedClaim, FileSystemClaimRegistry
from trustchain.core.trust import (
    Checker,
    CheckerConfig,
    DistinctKindPolicy,
    TrustLevel,
    TrustPolicy,
)
from trustchain.exceptions import InvalidSignatureError

ARTIFACT = ArtifactId(hashlib.sha256(b"artifact").digest())


class FixedPolicy(TrustPolicy):
    """Returns the same level whatever the claims are."""

    name = "fixed"

    def __init__(self, value: float) -> None:
        self.value = value
        self.seen: list[AuthenticatedClaim] = []

    def evaluate(self, claims: Iterable[AuthenticatedClaim]) -> TrustLevel:
        self.seen = list(claims)
        return TrustLevel(self.value)


def _checker(registry: FileSystemClaimRegistry, policy: TrustPolicy, threshold: float = 0.5) -> Checker:
    return Checker(CheckerConfig(TrustLevel(threshold)), registry, policy)


class TestCheck:
    """Tests for the pass/fail decision."""

    def test_high_trust_passes(self, registry: FileSystemClaimRegistry) -> None:
        result = _checker(registry, FixedPolicy(0.9)).check(ARTIFACT)
        assert result.passed
        assert result.trust_level == TrustLevel(0.9)
        assert result.threshold == TrustLevel(0.5)
        assert result.artifact_id == ARTIFACT

    def test_low_trust_fails(self, registry: FileSystemClaimRegistry) -> None:
        assert not _checker(registry, FixedPolicy(0.1)).check(ARTIFACT).passed

    def test_threshold_is_inclusive(self, registry: FileSystemClaimRegistry) -> None:
        assert _checker(registry, FixedPolicy(0.5)).check(ARTIFACT).passed

    def test_config_override(self, registry: FileSystemClaimRegistry) -> None:
        checker = _checker(registry, FixedPolicy(0.6))
        result = checker.check(ARTIFACT, CheckerConfig(TrustLevel(0.8)))
        assert not result.passed
        assert result.threshold == TrustLevel(0.8)
        assert checker.check(ARTIFACT).passed

    def test_policy_receives_authenticated_claims(
        self, registry: FileSystemClaimRegistry
    ) -> None:
        claim_id = registry.sign_claim("com.example:mylib:1.2.3", ARTIFACT, "reviewed")
        policy = FixedPolicy(0.0)
        _checker(registry, policy).check(ARTIFACT)
        assert [c.id for c in policy.seen] == [claim_id]

    def test_claims_drive_distinct_kind_policy(self, registry: FileSystemClaimRegistry) -> None:
        checker = _checker(registry, DistinctKindPolicy(saturation=2))
        assert not checker.check(ARTIFACT).passed
        registry.sign_claim("com.example:mylib:1.2.3", ARTIFACT, "reviewed")
        assert checker.check(ARTIFACT).passed

    def test_revocation_drops_trust(self, registry: FileSystemClaimRegistry) -> None:
        checker = _checker(registry, DistinctKindPolicy(saturation=1))
        claim_id = registry.sign_claim("com.example:mylib:1.2.3", ARTIFACT, "reviewed")
        assert checker.check(ARTIFACT).passed
        registry.revoke_claim("com.example:mylib:1.2.3", ARTIFACT, claim_id)
        assert checker.trust_level(ARTIFACT) == TrustLevel(0.0)

    def test_signature_failure_propagates(self, registry: FileSystemClaimRegistry) -> None:
        claim_id = registry.sign_claim("com.example:mylib:1.2.3", ARTIFACT, "reviewed")
        path = registry.root / ARTIFACT.hex / claim_id
        path.write_text(path.read_text().replace("reviewed", "reviewee"))
        with pytest.raises(InvalidSignatureError):
            _checker(registry, FixedPolicy(1.0)).check(ARTIFACT)
