"""
TBURN Staking Reward Tests
"""

import pytest
from decimal import Decimal

from tburn.tokenomics.rewards import (
    apy_from_daily_reward,
    apy_percent,
    compound,
    project_staking,
)


class TestProjectStaking:
    """Test simple staking projections."""

    def test_reference_projection(self):
        projection = project_staking(100_000, 1200)

        assert projection.apy_percent == Decimal(12)
        assert projection.annual_reward == Decimal(12_000)
        assert abs(projection.daily_reward - Decimal("32.88")) < Decimal("0.01")
        assert abs(projection.monthly_reward - Decimal("986.3")) < Decimal("0.1")

    @pytest.mark.parametrize("bp", [0, 1, 50, 1200, 2500, 9999, 10000])
    def test_annual_consistent_with_daily(self, bp):
        projection = project_staking(Decimal("123456.789"), bp)
        expected = projection.daily_reward * 365
        if expected == 0:
            assert projection.annual_reward == 0
        else:
            assert abs(projection.annual_reward - expected) / expected < Decimal("0.01")

    @pytest.mark.parametrize("amount,bp", [
        (50_000, 800),
        (Decimal("123456.789"), 1337),
        (7_000_000_000, 1),
        (1, 9999),
    ])
    def test_monthly_is_thirty_days(self, amount, bp):
        projection = project_staking(amount, bp)
        assert projection.monthly_reward == projection.daily_reward * 30
        assert projection.daily_reward == projection.daily_reward.quantize(Decimal("1e-18"))

    def test_string_amount(self):
        assert project_staking("1000", 1000).annual_reward == 100

    @pytest.mark.parametrize("amount", [-1, 1.5, "abc"])
    def test_rejects_invalid_amount(self, amount):
        with pytest.raises((TypeError, ValueError)):
            project_staking(amount, 1200)

    def test_rejects_invalid_apy(self):
        with pytest.raises(ValueError):
            project_staking(1000, -1)
        with pytest.raises(TypeError):
            apy_percent(12.0)

    def test_to_dict(self):
        data = project_staking(100_000, 1200).to_dict()
        assert data["annual_reward"] == "12000"
        assert data["apy_percent"] == "12"


class TestCompound:
    """Test compounded projections."""

    def test_zero_days(self):
        result = compound(1000, 1200, 0)
        assert result.final_amount == 1000
        assert result.total_reward == 0

    def test_annual_compounding_once(self):
        result = compound(1000, 1000, 365, periods_per_year=1)
        assert result.final_amount == Decimal(1100)

    def test_compounding_beats_simple(self):
        simple = project_staking(1000, 1200).annual_reward
        compounded = compound(1000, 1200, 365).total_reward
        assert compounded > simple
        assert compound(1000, 1200, 365).effective_apy_percent > 12

    def test_invalid(self):
        with pytest.raises(ValueError):
            compound(1000, 1200, -1)
        with pytest.raises(ValueError):
            compound(1000, 1200, 10, periods_per_year=0)


class TestApyFromDailyReward:

    def test_apy(self):
        apy = apy_from_daily_reward(Decimal("32.876712328767"), 100_000)
        assert abs(apy - 12) < Decimal("0.01")

    def test_zero_stake(self):
        assert apy_from_daily_reward(10, 0) == 0
