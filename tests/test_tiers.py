"""
TBURN Tier Classification Tests
"""

import pytest
from decimal import Decimal

from tburn.constants import WEI_PER_TOKEN
from tburn.exceptions import InvalidAmount
from tburn.validator.tiers import (
    TierKey,
    TierConfig,
    DEFAULT_TIER_CONFIGS,
    classify_tier,
    classify_stake,
    meets_minimum_stake,
)


class TestClassifyTier:
    """Test direct-stake tier thresholds."""

    @pytest.mark.parametrize("stake,expected", [
        (0, TierKey.COMMUNITY),
        (199_999, TierKey.COMMUNITY),
        (200_000, TierKey.STANDARD),
        (499_999, TierKey.STANDARD),
        (500_000, TierKey.PIONEER),
        (999_999, TierKey.PIONEER),
        (1_000_000, TierKey.GENESIS),
        (50_000_000, TierKey.GENESIS),
    ])
    def test_thresholds(self, stake, expected):
        assert classify_tier(stake) == expected

    def test_fractional_tokens(self):
        assert classify_tier(Decimal("199999.999999")) == TierKey.COMMUNITY
        assert classify_tier("200000.0") == TierKey.STANDARD

    def test_monotonic(self):
        """Tier ordinal never decreases as stake grows."""
        stakes = sorted({0, 1, 150_000, 199_999, 200_000, 200_001, 350_000, 499_999,
                         500_000, 750_000, 999_999, 1_000_000, 1_000_001, 10 ** 9})
        ordinals = [classify_tier(s).ordinal for s in stakes]
        assert ordinals == sorted(ordinals)

    @pytest.mark.parametrize("value", [-1, "abc", 1.5, True])
    def test_rejects_invalid(self, value):
        with pytest.raises(InvalidAmount):
            classify_tier(value)


class TestClassifyStake:
    """Test base-unit classification."""

    def test_exact_boundary(self):
        boundary = 1_000_000 * WEI_PER_TOKEN
        assert classify_stake(boundary) == TierKey.GENESIS
        assert classify_stake(boundary - 1) == TierKey.PIONEER

    def test_string_input(self):
        assert classify_stake(str(200_000 * WEI_PER_TOKEN)) == TierKey.STANDARD

    def test_ordinals(self):
        assert TierKey.COMMUNITY.ordinal < TierKey.STANDARD.ordinal
        assert TierKey.STANDARD.ordinal < TierKey.PIONEER.ordinal
        assert TierKey.PIONEER.ordinal < TierKey.GENESIS.ordinal


class TestTierConfig:
    """Test tier reward configuration."""

    def test_defaults(self):
        genesis = DEFAULT_TIER_CONFIGS[TierKey.GENESIS]
        assert genesis.max_validators == 50
        assert genesis.reward_pool_share == Decimal("0.40")
        assert genesis.apy_range == (Decimal("20"), Decimal("25"))

    def test_pool_shares_sum_to_one(self):
        total = sum(c.reward_pool_share for c in DEFAULT_TIER_CONFIGS.values())
        assert total == Decimal("1.00")

    def test_from_dict_overrides(self):
        config = TierConfig.from_dict("pioneer", {
            "max_validators": 120,
            "apy_range": {"min": 15, "max": 19},
        })
        assert config.tier == TierKey.PIONEER
        assert config.max_validators == 120
        assert config.apy_range == (Decimal(15), Decimal(19))
        # Unspecified values keep the tier defaults
        assert config.target_apy == Decimal("18")

    def test_round_trip_dict(self):
        config = DEFAULT_TIER_CONFIGS[TierKey.STANDARD]
        data = config.to_dict()
        assert TierConfig.from_dict(data["tier"], data) == config

    def test_meets_minimum_stake(self):
        assert meets_minimum_stake(100_000, TierKey.COMMUNITY)
        assert not meets_minimum_stake(99_999, TierKey.COMMUNITY)
        assert meets_minimum_stake(1_000_000, "genesis")
