"""Checker: artifact -> authenticated claims -> policy -> pass/fail."""

from __future__ import annotations

import logging

from trustchain.core.artifacts.models import ArtifactId
from trustchain.core.claims.registry import ClaimRegistry
from trustchain.core.trust.models import CheckerConfig, CheckResult, TrustLevel
from trustchain.core.trust.policy import TrustPolicy

logger = logging.getLogger(__name__)


class Checker:
    """Evaluates an artifact's trust level against a pass threshold.

    Signature failures among the artifact's claims are not downgraded to
    "untrusted": they propagate out of ``check``.

    Args:
        config: Threshold configuration.
        claim_registry: Source of authenticated claims.
        trust_policy: Aggregation strategy.
    """

    def __init__(
        self,
        config: CheckerConfig,
        claim_registry: ClaimRegistry,
        trust_policy: TrustPolicy,
    ) -> None:
        self.config = config
        self.claim_registry = claim_registry
        self.trust_policy = trust_policy

    def trust_level(self, artifact_id: ArtifactId) -> TrustLevel:
        """Evaluate the policy over the artifact's authenticated claims."""
        claims = self.claim_registry.authenticated_claims_for(artifact_id)
        return self.trust_policy.evaluate(claims)

    def check(self, artifact_id: ArtifactId, config: CheckerConfig | None = None) -> CheckResult:
        """Check ``artifact_id``.

        Args:
            artifact_id: The artifact to check.
            config: Overrides the checker's configuration for this call.

        Returns:
            ``CheckResult`` with ``passed = trust_level >= pass_threshold``.
        """
        threshold = (config or self.config).pass_threshold
        level = self.trust_level(artifact_id)
        passed = level >= threshold
        logger.debug(
            "artifact %s: trust %s vs threshold %s -> %s",
            artifact_id, level, threshold, "pass" if passed else "fail",
        )
        return CheckResult(
            artifact_id=artifact_id,
            passed=passed,
            trust_level=level,
            threshold=threshold,
        )
