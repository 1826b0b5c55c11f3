"""Trust evaluation for artifacts.

Submodules:
    models   -- TrustLevel, CheckerConfig, CheckResult
    policy   -- TrustPolicy, DistinctKindPolicy, SignerWeightPolicy, active_claims
    checker  -- Checker (claims -> policy -> threshold)
"""

from trustchain.core.trust.checker import Checker
from trustchain.core.trust.models import (
    FULL_TRUST,
    NO_TRUST,
    CheckerConfig,
    CheckResult,
    TrustLevel,
)
from trustchain.core.trust.policy import (
    DistinctKindPolicy,
    SignerWeightPolicy,
    TrustPolicy,
    active_claims,
    policy_from_config,
)

__all__ = [
    "FULL_TRUST",
    "NO_TRUST",
    "CheckResult",
    "Checker",
    "CheckerConfig",
    "DistinctKindPolicy",
    "SignerWeightPolicy",
    "TrustLevel",
    "TrustPolicy",
    "active_claims",
    "policy_from_config",
]
