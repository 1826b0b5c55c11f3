"""Trust policies --- from an authenticated claim set to a ``TrustLevel``.

A ``TrustPolicy`` is a pure function of the claims it is given. Every
policy first reduces the claim set to its *active* claims with
:func:`active_claims`:

- Revocations never contribute trust themselves.
- A positive claim is excluded when a revocation referencing its id,
  signed by the same key, is present. Exclusion is permanent: a later
  positive claim of the same kind is a different claim and counts on its
  own, but it does not bring the revoked one back.

Concrete strategies:

- ``DistinctKindPolicy`` -- number of distinct positive claim kinds,
  scaled by a saturation count.
- ``SignerWeightPolicy`` -- noisy-OR over per-signer reputation weights:
  ``T = 1 - prod(1 - w_s)`` over the distinct signers with active claims.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Collection, Iterable, Mapping

from trustchain.core.claims.models import (
    AuthenticatedClaim,
    PositiveClaim,
    RevocationClaim,
)
from trustchain.core.signing.status import normalize_fingerprint
from trustchain.core.trust.models import TrustLevel


def active_claims(claims: Iterable[AuthenticatedClaim]) -> list[AuthenticatedClaim]:
    """Return the positive claims not revoked by their own signer.

    Args:
        claims: Authenticated claims for one artifact, in any order.

    Returns:
        Positive claims in input order, minus revoked ones.
    """
    claims = list(claims)
    revoked: set[tuple[str, str]] = {
        (c.claim.revoked_id, normalize_fingerprint(c.signer.fingerprint))
        for c in claims
        if isinstance(c.claim, RevocationClaim)
    }
    return [
        c for c in claims
        if isinstance(c.claim, PositiveClaim)
        and (c.claim.id, normalize_fingerprint(c.signer.fingerprint)) not in revoked
    ]


class TrustPolicy(ABC):
    """Strategy turning an artifact's authenticated claims into a trust level."""

    #: Name used to select the policy from configuration.
    name: str = ""

    @abstractmethod
    def evaluate(self, claims: Iterable[AuthenticatedClaim]) -> TrustLevel:
        """Compute the trust level for one artifact's claims."""


class DistinctKindPolicy(TrustPolicy):
    """Trust grows with the number of distinct active claim kinds.

    ``T = min(1, |distinct kinds| / saturation)``

    Args:
        saturation: Number of distinct kinds that yields full trust.
        kinds: If given, only these claim kinds are counted.

    Raises:
        ValueError: If ``saturation`` is not a positive integer.
    """

    name = "distinct-kinds"

    def __init__(self, saturation: int = 3, kinds: Collection[str] | None = None) -> None:
        if isinstance(saturation, bool) or not isinstance(saturation, int) or saturation < 1:
            raise ValueError(f"saturation must be a positive integer, got {saturation!r}")
        self.saturation = saturation
        self.kinds = frozenset(kinds) if kinds is not None else None

    def evaluate(self, claims: Iterable[AuthenticatedClaim]) -> TrustLevel:
        distinct = {
            c.claim.claim_kind
            for c in active_claims(claims)
            if self.kinds is None or c.claim.claim_kind in self.kinds
        }
        return TrustLevel(min(1.0, len(distinct) / self.saturation))


class SignerWeightPolicy(TrustPolicy):
    """Trust from the reputation of the keys that made active claims.

    Each signer fingerprint maps to a weight in [0, 1]. Signers not in the
    map get ``default_weight``. A signer counts once however many claims it
    made, so repeating a claim does not inflate trust.

    Args:
        weights: Fingerprint -> weight.
        default_weight: Weight of unlisted signers. Default 0 (no trust).
        kinds: If given, only claims of these kinds count.

    Raises:
        ValueError: If any weight is non-numeric or outside [0, 1].
    """

    name = "signer-weights"

    def __init__(
        self,
        weights: Mapping[str, float],
        default_weight: float = 0.0,
        kinds: Collection[str] | None = None,
    ) -> None:
        for fingerprint, value in {**weights, "<default>": default_weight}.items():
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(
                    f"Weight for '{fingerprint}' must be numeric, got {type(value).__name__}"
                )
            if value < 0.0 or value > 1.0:
                raise ValueError(
                    f"Weight for '{fingerprint}' must be in [0, 1], got {value}"
                )
        self.weights = {normalize_fingerprint(k): float(v) for k, v in weights.items()}
        self.default_weight = float(default_weight)
        self.kinds = frozenset(kinds) if kinds is not None else None

    def weight_of(self, fingerprint: str) -> float:
        return self.weights.get(normalize_fingerprint(fingerprint), self.default_weight)

    def evaluate(self, claims: Iterable[AuthenticatedClaim]) -> TrustLevel:
        signers = {
            normalize_fingerprint(c.signer.fingerprint)
            for c in active_claims(claims)
            if self.kinds is None or c.claim.claim_kind in self.kinds
        }
        distrust = 1.0
        for fingerprint in sorted(signers):
            distrust *= 1.0 - self.weight_of(fingerprint)
        # Clamp to [0, 1] to guard against floating-point drift
        return TrustLevel(max(0.0, min(1.0, 1.0 - distrust)))


def policy_from_config(name: str, options: Mapping[str, Any] | None = None) -> TrustPolicy:
    """Build a policy by name.

    Args:
        name: ``distinct-kinds`` or ``signer-weights``.
        options: Keyword options for the policy constructor.

    Raises:
        ValueError: On an unknown name or invalid options.
    """
    options = dict(options or {})
    try:
        if name == DistinctKindPolicy.name:
            return DistinctKindPolicy(**options)
        if name == SignerWeightPolicy.name:
            options.setdefault("weights", {})
            return SignerWeightPolicy(**options)
    except TypeError as exc:
        raise ValueError(f"invalid options for policy '{name}': {exc}") from exc
    raise ValueError(
        f"unknown trust policy '{name}' "
        f"(expected '{DistinctKindPolicy.name}' or '{SignerWeightPolicy.name}')"
    )
