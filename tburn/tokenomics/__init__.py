"""
TBURN Tokenomics Module

Reward, emission and vesting projections.

Components:
- TokenomicsProjector: Network-wide figures derived from a ranking
- EmissionScheduler: Halving schedule with a terminal multiplier
- project_staking / compound: Per-principal staking rewards
- VestingSchedule / project_vesting: Sale round unlock curves

Usage:
    from tburn.tokenomics import TokenomicsProjector, project_staking

    report = TokenomicsProjector().project(ranking)
    projection = project_staking(100_000, 1200)
"""

from .emission import (
    BASE_PERIOD_REWARD,
    HalvingEpoch,
    EmissionScheduler,
)
from .rewards import (
    StakingProjection,
    CompoundProjection,
    apy_percent,
    project_staking,
    compound,
    apy_from_daily_reward,
)
from .vesting import (
    VestingRelease,
    VestingSchedule,
    VestingProjection,
    PurchaseBonus,
    SaleRound,
    PURCHASE_BONUS_TIERS,
    VESTING_PRESETS,
    SALE_ROUNDS,
    purchase_bonus,
    project_vesting,
    get_vesting_preset,
)
from .projector import (
    NetworkFigures,
    TierStats,
    ValidatorReward,
    NetworkStats,
    TokenomicsReport,
    ScopeSummary,
    TokenomicsProjector,
)

__all__ = [
    # Emission
    'BASE_PERIOD_REWARD',
    'HalvingEpoch',
    'EmissionScheduler',

    # Staking rewards
    'StakingProjection',
    'CompoundProjection',
    'apy_percent',
    'project_staking',
    'compound',
    'apy_from_daily_reward',

    # Vesting
    'VestingRelease',
    'VestingSchedule',
    'VestingProjection',
    'PurchaseBonus',
    'SaleRound',
    'PURCHASE_BONUS_TIERS',
    'VESTING_PRESETS',
    'SALE_ROUNDS',
    'purchase_bonus',
    'project_vesting',
    'get_vesting_preset',

    # Projector
    'NetworkFigures',
    'TierStats',
    'ValidatorReward',
    'NetworkStats',
    'TokenomicsReport',
    'ScopeSummary',
    'TokenomicsProjector',
]
