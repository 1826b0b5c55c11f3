"""Tests for TrustLevel, CheckerConfig, and CheckResult."""

from __future__ import annotations

import math

import pytest

from trustchain.core.trust.models import (
    DEFAULT_PASS_THRESHOLD,
    FULL_TRUST,
    NO_TRUST,
    CheckerConfig,
    TrustLevel,
)


class TestTrustLevel:
    """Tests for the bounded trust value."""

    @pytest.mark.parametrize("value", [0, 0.0, 0.25, 1, 1.0])
    def test_accepts_unit_interval(self, value: float) -> None:
        assert TrustLevel(value).value == float(value)

    @pytest.mark.parametrize("value", [-0.01, 1.01, math.nan, math.inf])
    def test_rejects_out_of_range(self, value: float) -> None:
        with pytest.raises(ValueError):
            TrustLevel(value)

    @pytest.mark.parametrize("value", ["0.5", None, True])
    def test_rejects_non_numeric(self, value: object) -> None:
        with pytest.raises(ValueError):
            TrustLevel(value)  # type: ignore[arg-type]

    def test_ordering(self) -> None:
        assert NO_TRUST < TrustLevel(0.3) < TrustLevel(0.7) < FULL_TRUST
        assert TrustLevel(0.5) >= TrustLevel(0.5)
        assert max(TrustLevel(0.2), TrustLevel(0.9)) == TrustLevel(0.9)

    def test_int_and_float_equal(self) -> None:
        assert TrustLevel(1) == TrustLevel(1.0)

    def test_conversions(self) -> None:
        assert float(TrustLevel(0.25)) == 0.25
        assert str(TrustLevel(0.25)) == "0.250"

    def test_frozen(self) -> None:
        level = TrustLevel(0.5)
        with pytest.raises(AttributeError):
            level.value = 0.6  # type: ignore[misc]


class TestCheckerConfig:
    """Tests for the checker configuration defaults."""

    def test_default_threshold(self) -> None:
        assert CheckerConfig().pass_threshold == TrustLevel(DEFAULT_PASS_THRESHOLD)
