"""
TBURN Validator Module

Turns raw validator ledger records into a ranked, tiered view of the network.

Components:
- stake: Exact base-unit arithmetic (18-decimal fixed point)
- VotingPowerRanker: Voting power ordering and top-21 committee
- classify_tier / TierConfig: Direct-stake tiers and tier reward settings

Usage:
    from tburn.validator import VotingPowerRanker, ValidatorRecord

    ranking = VotingPowerRanker().rank(records)
    top = ranking.committee_members
"""

from .stake import (
    parse_amount,
    sum_amounts,
    voting_power,
    to_tokens,
    to_base_units,
    format_tokens,
    format_compact,
)
from .tiers import (
    TierKey,
    TierConfig,
    TIER_THRESHOLDS,
    DEFAULT_TIER_CONFIGS,
    classify_tier,
    classify_stake,
    meets_minimum_stake,
)
from .types import (
    ValidatorStatus,
    ValidatorRecord,
    RankedValidator,
    Ranking,
    normalize_address,
)
from .ranking import VotingPowerRanker, rank_validators

__all__ = [
    # Stake arithmetic
    'parse_amount',
    'sum_amounts',
    'voting_power',
    'to_tokens',
    'to_base_units',
    'format_tokens',
    'format_compact',

    # Tiers
    'TierKey',
    'TierConfig',
    'TIER_THRESHOLDS',
    'DEFAULT_TIER_CONFIGS',
    'classify_tier',
    'classify_stake',
    'meets_minimum_stake',

    # Types
    'ValidatorStatus',
    'ValidatorRecord',
    'RankedValidator',
    'Ranking',
    'normalize_address',

    # Ranking
    'VotingPowerRanker',
    'rank_validators',
]
