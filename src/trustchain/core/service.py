"""Core operations wired from configuration.

``TrustChainService`` composes the repository backend, hasher, signature
engine, claim registry, trust policy, and checker for one
``TrustChainConfig``. The CLI is a thin caller of its methods:

- ``compute_digest(identifier)``
- ``sign_claim(identifier, key, value)`` -> claim id
- ``revoke_claim(identifier, claim_id)`` -> revocation id
- ``verify_claim(identifier, claim_file_name)`` -> signer fingerprint
- ``claims_for(identifier)`` -> stored claims
- ``check(identifier)`` -> pass/fail

Every method re-hashes the artifact; identities are never cached.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from trustchain.config import TrustChainConfig
from trustchain.core.artifacts.backends import BackendRegistry, default_backends
from trustchain.core.artifacts.identity import ArtifactIdentity
from trustchain.core.artifacts.models import ArtifactId
from trustchain.core.claims.models import AuthenticatedClaim, Claim
from trustchain.core.claims.registry import ClaimRegistry, FileSystemClaimRegistry
from trustchain.core.signing.engine import GpgSignatureEngine, SignatureEngine
from trustchain.core.signing.status import PublicKey
from trustchain.core.trust.checker import Checker
from trustchain.core.trust.models import CheckerConfig, CheckResult, TrustLevel
from trustchain.core.trust.policy import TrustPolicy, policy_from_config
from trustchain.exceptions import ConfigError

logger = logging.getLogger(__name__)


@dataclass
class TrustChainService:
    """Facade over the core components for one configuration.

    Attributes:
        identity: Locator -> ``ArtifactId``.
        registry: Claim registry.
        checker: Trust checker.
    """

    identity: ArtifactIdentity
    registry: ClaimRegistry
    checker: Checker

    @classmethod
    def from_config(
        cls,
        config: TrustChainConfig,
        *,
        engine: SignatureEngine | None = None,
        backends: BackendRegistry | None = None,
        policy: TrustPolicy | None = None,
    ) -> TrustChainService:
        """Build every component from ``config``.

        Args:
            config: Resolved configuration.
            engine: Signature engine; defaults to ``GpgSignatureEngine``.
            backends: Backend registry; defaults to the built-in one.
            policy: Trust policy; defaults to the configured one.

        Raises:
            UnsupportedRepositoryError: If the repository kind has no backend.
            ClaimsError: If the registry root cannot be created.
            ConfigError: If the configured policy is invalid.
        """
        backend = (backends or default_backends()).create(
            config.repository_kind, config.repository_root
        )
        if engine is None:
            engine = GpgSignatureEngine(
                config.signer_uid,
                program=config.gpg_program,
                homedir=config.gpg_homedir,
                timeout=config.signing_timeout,
            )
        registry = FileSystemClaimRegistry(
            config.registry_root,
            engine,
            config.signer_uid,
            staging_dir=config.staging_dir,
            max_claim_size=config.max_claim_size,
        )
        if policy is None:
            try:
                policy = policy_from_config(config.policy, config.policy_options)
            except ValueError as exc:
                raise ConfigError(str(exc), subject="policy", cause=exc) from exc
        checker = Checker(
            CheckerConfig(pass_threshold=TrustLevel(config.pass_threshold)),
            registry,
            policy,
        )
        return cls(identity=ArtifactIdentity(backend), registry=registry, checker=checker)

    def compute_digest(self, identifier: str) -> ArtifactId:
        return self.identity.compute(identifier)

    def sign_claim(
        self,
        identifier: str,
        claim_key: str,
        claim_value: str | None = None,
        comment: str | None = None,
    ) -> str:
        artifact_id = self.compute_digest(identifier)
        logger.debug("signing claim %s for %s (%s)", claim_key, identifier, artifact_id)
        return self.registry.sign_claim(identifier, artifact_id, claim_key, claim_value, comment)

    def revoke_claim(self, identifier: str, claim_id: str, comment: str | None = None) -> str:
        artifact_id = self.compute_digest(identifier)
        logger.debug("revoking claim %s for %s (%s)", claim_id, identifier, artifact_id)
        return self.registry.revoke_claim(identifier, artifact_id, claim_id, comment)

    def verify_claim(self, identifier: str, claim_file_name: str) -> PublicKey:
        artifact_id = self.compute_digest(identifier)
        logger.debug("verifying claim %s for %s (%s)", claim_file_name, identifier, artifact_id)
        return self.registry.verify_claim(artifact_id, claim_file_name)

    def claims_for(self, identifier: str) -> list[AuthenticatedClaim]:
        return list(self.registry.authenticated_claims_for(self.compute_digest(identifier)))

    def raw_claims_for(self, identifier: str) -> list[Claim]:
        return list(self.registry.raw_claims_for(self.compute_digest(identifier)))

    def check(self, identifier: str) -> CheckResult:
        return self.checker.check(self.compute_digest(identifier))
