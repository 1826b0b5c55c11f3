"""Trust data models: level, checker configuration, and check result.

- ``TrustLevel`` -- scalar confidence in the closed interval [0, 1].
- ``CheckerConfig`` -- pass threshold for the checker.
- ``CheckResult`` -- artifact id plus the pass/fail decision.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from trustchain.core.artifacts.models import ArtifactId


# ---------------------------------------------------------------------------
# TrustLevel: normalized confidence score
# ---------------------------------------------------------------------------


@dataclass(frozen=True, order=True)
class TrustLevel:
    """Normalized confidence that an artifact is trustworthy.

    The value lies in the closed interval [0, 1], where 0 means no trust
    and 1 full trust. Levels are totally ordered by their numeric value.

    Attributes:
        value: The trust value.

    Raises:
        ValueError: On construction with a non-numeric value, NaN, or a
            value outside [0, 1].
    """

    value: float

    def __post_init__(self) -> None:
        value = self.value
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(
                f"Trust level must be numeric, got {type(value).__name__}"
            )
        if math.isnan(value) or value < 0.0 or value > 1.0:
            raise ValueError(f"Trust level must be in [0, 1], got {value}")
        object.__setattr__(self, "value", float(value))

    def __float__(self) -> float:
        return self.value

    def __str__(self) -> str:
        return f"{self.value:.3f}"


NO_TRUST = TrustLevel(0.0)
FULL_TRUST = TrustLevel(1.0)


# ---------------------------------------------------------------------------
# Checker configuration and result
# ---------------------------------------------------------------------------


DEFAULT_PASS_THRESHOLD: float = 0.5


@dataclass(frozen=True)
class CheckerConfig:
    """Configuration for ``Checker``.

    Attributes:
        pass_threshold: Minimum trust level an artifact needs to pass.
    """

    pass_threshold: TrustLevel = TrustLevel(DEFAULT_PASS_THRESHOLD)


@dataclass(frozen=True)
class CheckResult:
    """Outcome of checking one artifact.

    Attributes:
        artifact_id: The checked artifact.
        passed: True if ``trust_level >= pass_threshold``.
        trust_level: The level the policy computed.
        threshold: The threshold the level was compared against.
    """

    artifact_id: ArtifactId
    passed: bool
    trust_level: TrustLevel
    threshold: TrustLevel
