"""
TBURN Vesting Tests

Unlock curves, integer schedules, sale round presets and purchase bonuses.
"""

import pytest
from decimal import Decimal

from tburn.constants import WEI_PER_TOKEN
from tburn.tokenomics.vesting import (
    SALE_ROUNDS,
    VESTING_PRESETS,
    VestingSchedule,
    get_vesting_preset,
    project_vesting,
    purchase_bonus,
)


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def launchpad():
    return VestingSchedule(tge_unlock_fraction=Decimal("0.15"), cliff_months=0, linear_vesting_months=6)


@pytest.fixture
def seed():
    return VestingSchedule.from_percent(5, 6, 18)


# =============================================================================
# UNLOCK FRACTION
# =============================================================================

class TestUnlockedFraction:
    """Test the unlock curve."""

    def test_reference_curve(self, launchpad):
        assert launchpad.unlocked_fraction(0) == Decimal("0.15")
        assert launchpad.unlocked_fraction(3) == Decimal("0.575")
        assert launchpad.unlocked_fraction(6) == Decimal(1)

    def test_cliff_holds_tge(self, seed):
        assert seed.is_in_cliff(5)
        assert seed.unlocked_fraction(0) == Decimal("0.05")
        assert seed.unlocked_fraction(5) == Decimal("0.05")
        assert seed.unlocked_fraction(6) == Decimal("0.05")
        assert seed.unlocked_fraction(7) > Decimal("0.05")

    @pytest.mark.parametrize("name", sorted(VESTING_PRESETS))
    def test_presets_monotonic_and_complete(self, name):
        schedule = VESTING_PRESETS[name]
        fractions = [schedule.unlocked_fraction(m) for m in range(schedule.total_months + 3)]
        assert fractions == sorted(fractions)
        assert schedule.unlocked_fraction(schedule.total_months) == 1
        assert all(f <= 1 for f in fractions)

    def test_no_linear_period(self):
        schedule = VestingSchedule(tge_unlock_fraction=Decimal(0), cliff_months=12, linear_vesting_months=0)
        assert schedule.unlocked_fraction(11) == 0
        assert schedule.unlocked_fraction(12) == 1

    def test_negative_month(self, launchpad):
        with pytest.raises(ValueError):
            launchpad.unlocked_fraction(-1)

    @pytest.mark.parametrize("kwargs", [
        {"tge_unlock_fraction": Decimal("1.5")},
        {"tge_unlock_fraction": Decimal("-0.1")},
        {"tge_unlock_fraction": Decimal("0.1"), "cliff_months": -1},
        {"tge_unlock_fraction": Decimal("0.1"), "linear_vesting_months": -1},
    ])
    def test_invalid_schedule(self, kwargs):
        with pytest.raises(ValueError):
            VestingSchedule(**kwargs)

    def test_float_fraction_read_exactly(self, launchpad):
        schedule = VestingSchedule(tge_unlock_fraction=0.15, cliff_months=0, linear_vesting_months=6)
        assert schedule.tge_unlock_fraction == Decimal("0.15")
        assert schedule == launchpad
        assert schedule.unlocked_fraction(3) == launchpad.unlocked_fraction(3)

    def test_bool_fraction_rejected(self):
        with pytest.raises(TypeError):
            VestingSchedule(tge_unlock_fraction=True)


# =============================================================================
# INTEGER SCHEDULES
# =============================================================================

class TestMonthlySchedule:
    """Test integer unlock schedules."""

    def test_cumulative_equals_total(self, seed):
        total = 1_000_003 * WEI_PER_TOKEN + 7
        releases = seed.monthly_schedule(total)
        assert releases[-1].cumulative_unlocked == total
        assert sum(r.unlock_amount for r in releases) == total
        assert releases[-1].kind == "final"
        assert releases[0].kind == "tge"

    def test_amounts_non_negative(self, seed):
        releases = seed.monthly_schedule(12_345)
        assert all(r.unlock_amount >= 0 for r in releases)
        assert [r.month for r in releases] == list(range(seed.total_months + 1))

    def test_cliff_months_release_nothing(self, seed):
        releases = seed.monthly_schedule(1000)
        assert releases[0].unlock_amount == 50
        assert [r.unlock_amount for r in releases[1:6]] == [0] * 5
        assert all(r.kind == "cliff" for r in releases[1:6])

    def test_unlocked_amount(self, launchpad):
        assert launchpad.unlocked_amount(1000, 0) == 150
        assert launchpad.unlocked_amount(1000, 3) == 575
        assert launchpad.unlocked_amount(1000, 6) == 1000
        assert launchpad.unlocked_amount(1000, 60) == 1000

    def test_zero_total(self, launchpad):
        releases = launchpad.monthly_schedule(0)
        assert releases[-1].cumulative_unlocked == 0


# =============================================================================
# SALE PROJECTIONS
# =============================================================================

class TestProjectVesting:
    """Test sale round projections."""

    def test_tokens_received(self, launchpad):
        projection = project_vesting(1000, Decimal("0.05"), launchpad)
        assert projection.tokens_received == Decimal(20_000)
        assert projection.tge_tokens == Decimal(3_000)
        assert projection.unlocked_tokens(3) == Decimal(11_500)
        assert projection.unlocked_tokens(6) == projection.total_tokens

    def test_listing_price_value(self, launchpad):
        projection = project_vesting(1000, Decimal("0.05"), launchpad, listing_price=Decimal("0.10"))
        assert projection.potential_value == Decimal(2000)
        assert projection.potential_profit == Decimal(1000)
        assert project_vesting(1000, Decimal("0.05"), launchpad).potential_value is None

    def test_bonus(self, launchpad):
        projection = project_vesting(10_000, Decimal("0.05"), launchpad, apply_bonus=True)
        assert projection.bonus_tokens == Decimal(6_000)
        assert projection.total_tokens == Decimal(206_000)

    def test_invalid_price(self, launchpad):
        with pytest.raises(ValueError):
            project_vesting(1000, 0, launchpad)
        with pytest.raises(ValueError):
            project_vesting(-1, Decimal("0.05"), launchpad)

    def test_curve(self, launchpad):
        curve = project_vesting(1000, Decimal("0.05"), launchpad).curve()
        assert len(curve) == 7
        assert curve[-1] == (6, Decimal(20_000))

    def test_sale_rounds(self):
        assert SALE_ROUNDS["seed"].token_price == Decimal("0.008")
        assert SALE_ROUNDS["private"].token_price == Decimal("0.015")
        assert SALE_ROUNDS["public"].token_price == Decimal("0.05")
        projection = SALE_ROUNDS["seed"].project(800)
        assert projection.tokens_received == Decimal(100_000)
        assert projection.schedule.cliff_months == 6

    def test_unknown_preset_unlocks_at_tge(self):
        assert get_vesting_preset("unknown").unlocked_fraction(0) == 1


class TestPurchaseBonus:

    @pytest.mark.parametrize("invested,name,percent", [
        (0, "shrimp", 0),
        (999, "shrimp", 0),
        (1_000, "fish", 1),
        (10_000, "dolphin", 3),
        (49_999, "dolphin", 3),
        (50_000, "whale", 5),
    ])
    def test_tiers(self, invested, name, percent):
        bonus = purchase_bonus(invested)
        assert bonus.name == name
        assert bonus.bonus_percent == percent
