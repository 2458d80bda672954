"""
TBURN Validator Tiers

Maps a validator's direct stake to a marketing/reward tier and holds the
per-tier reward configuration.

Classification deliberately uses direct self-stake in whole tokens, not
voting power: a validator with little self-stake but large delegations ranks
high yet stays in a low tier.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Dict, Tuple, Union

from ..constants import (
    COMMUNITY_TIER_MIN_STAKE,
    GENESIS_TIER_MIN_STAKE,
    PIONEER_TIER_MIN_STAKE,
    STANDARD_TIER_MIN_STAKE,
    WEI_PER_TOKEN,
)
from ..exceptions import InvalidAmount
from .stake import parse_amount


class TierKey(str, Enum):
    """Validator tiers, lowest first."""
    COMMUNITY = "community"
    STANDARD = "standard"
    PIONEER = "pioneer"
    GENESIS = "genesis"

    @property
    def ordinal(self) -> int:
        return _TIER_ORDER.index(self)


_TIER_ORDER = (TierKey.COMMUNITY, TierKey.STANDARD, TierKey.PIONEER, TierKey.GENESIS)

# (tier, minimum direct stake in whole tokens), highest first
TIER_THRESHOLDS: Tuple[Tuple[TierKey, int], ...] = (
    (TierKey.GENESIS, GENESIS_TIER_MIN_STAKE),
    (TierKey.PIONEER, PIONEER_TIER_MIN_STAKE),
    (TierKey.STANDARD, STANDARD_TIER_MIN_STAKE),
)


def classify_tier(stake_tokens: Union[int, str, Decimal]) -> TierKey:
    """
    Classify a direct stake expressed in whole tokens.

    Raises:
        InvalidAmount: if the stake is negative or not a number.
    """
    if isinstance(stake_tokens, (bool, float)):
        raise InvalidAmount(stake_tokens, f"unsupported type {type(stake_tokens).__name__}")
    try:
        stake = Decimal(str(stake_tokens))
    except ArithmeticError:
        raise InvalidAmount(stake_tokens, "not a number") from None
    if not stake.is_finite() or stake < 0:
        raise InvalidAmount(stake_tokens, "stake must be a non-negative number")

    for tier, threshold in TIER_THRESHOLDS:
        if stake >= threshold:
            return tier
    return TierKey.COMMUNITY


def classify_stake(stake_base_units: Union[int, str]) -> TierKey:
    """Classify a direct stake given in base units, comparing exact integers."""
    stake = parse_amount(stake_base_units)
    for tier, threshold in TIER_THRESHOLDS:
        if stake >= threshold * WEI_PER_TOKEN:
            return tier
    return TierKey.COMMUNITY


@dataclass(frozen=True)
class TierConfig:
    """
    Reward configuration for one tier.

    Attributes:
        tier: Tier key
        display_name: Human readable name
        min_stake_tokens: Minimum direct stake to register in this tier
        max_validators: Slot count used for fill rates (0 means unlimited)
        reward_pool_share: Fraction of daily emission paid to this tier
        daily_reward_pool: Daily pool in tokens at base emission
        target_apy: Target APY in percent
        apy_range: (min, max) APY in percent
        default_commission: Commission fraction offered at registration
    """
    tier: TierKey
    display_name: str
    min_stake_tokens: Decimal
    max_validators: int
    reward_pool_share: Decimal
    daily_reward_pool: Decimal
    target_apy: Decimal
    apy_range: Tuple[Decimal, Decimal] = field(default=(Decimal("0"), Decimal("0")))
    default_commission: Decimal = Decimal("0")

    @classmethod
    def from_dict(cls, tier: Union[str, TierKey], data: Dict) -> "TierConfig":
        """Create from a TOML/JSON section, falling back to the tier's defaults."""
        key = TierKey(tier)
        base = DEFAULT_TIER_CONFIGS[key]
        apy_range = data.get("apy_range")
        if isinstance(apy_range, dict):
            apy_range = (apy_range.get("min", base.apy_range[0]), apy_range.get("max", base.apy_range[1]))
        elif apy_range is None:
            apy_range = base.apy_range
        return cls(
            tier=key,
            display_name=data.get("display_name", base.display_name),
            min_stake_tokens=Decimal(str(data.get("min_stake_tokens", base.min_stake_tokens))),
            max_validators=int(data.get("max_validators", base.max_validators)),
            reward_pool_share=Decimal(str(data.get("reward_pool_share", base.reward_pool_share))),
            daily_reward_pool=Decimal(str(data.get("daily_reward_pool", base.daily_reward_pool))),
            target_apy=Decimal(str(data.get("target_apy", base.target_apy))),
            apy_range=(Decimal(str(apy_range[0])), Decimal(str(apy_range[1]))),
            default_commission=Decimal(str(data.get("default_commission", base.default_commission))),
        )

    def to_dict(self) -> dict:
        return {
            'tier': self.tier.value,
            'display_name': self.display_name,
            'min_stake_tokens': str(self.min_stake_tokens),
            'max_validators': self.max_validators,
            'reward_pool_share': str(self.reward_pool_share),
            'daily_reward_pool': str(self.daily_reward_pool),
            'target_apy': str(self.target_apy),
            'apy_range': {'min': str(self.apy_range[0]), 'max': str(self.apy_range[1])},
            'default_commission': str(self.default_commission),
        }


DEFAULT_TIER_CONFIGS: Dict[TierKey, TierConfig] = {
    TierKey.GENESIS: TierConfig(
        tier=TierKey.GENESIS,
        display_name="Genesis Validator",
        min_stake_tokens=Decimal(GENESIS_TIER_MIN_STAKE),
        max_validators=50,
        reward_pool_share=Decimal("0.40"),
        daily_reward_pool=Decimal("200000"),
        target_apy=Decimal("22.5"),
        apy_range=(Decimal("20"), Decimal("25")),
        default_commission=Decimal("0.03"),
    ),
    TierKey.PIONEER: TierConfig(
        tier=TierKey.PIONEER,
        display_name="Pioneer Validator",
        min_stake_tokens=Decimal(PIONEER_TIER_MIN_STAKE),
        max_validators=100,
        reward_pool_share=Decimal("0.30"),
        daily_reward_pool=Decimal("150000"),
        target_apy=Decimal("18"),
        apy_range=(Decimal("16"), Decimal("20")),
        default_commission=Decimal("0.10"),
    ),
    TierKey.STANDARD: TierConfig(
        tier=TierKey.STANDARD,
        display_name="Standard Validator",
        min_stake_tokens=Decimal(STANDARD_TIER_MIN_STAKE),
        max_validators=150,
        reward_pool_share=Decimal("0.20"),
        daily_reward_pool=Decimal("100000"),
        target_apy=Decimal("16"),
        apy_range=(Decimal("14"), Decimal("18")),
        default_commission=Decimal("0.15"),
    ),
    TierKey.COMMUNITY: TierConfig(
        tier=TierKey.COMMUNITY,
        display_name="Community Validator",
        min_stake_tokens=Decimal(COMMUNITY_TIER_MIN_STAKE),
        max_validators=75,
        reward_pool_share=Decimal("0.10"),
        daily_reward_pool=Decimal("50000"),
        target_apy=Decimal("13.5"),
        apy_range=(Decimal("12"), Decimal("15")),
        default_commission=Decimal("0.20"),
    ),
}


def meets_minimum_stake(
    stake_tokens: Union[int, str, Decimal],
    tier: TierKey,
    configs: Dict[TierKey, TierConfig] = None,
) -> bool:
    """Check whether a direct stake satisfies a tier's registration minimum."""
    configs = configs or DEFAULT_TIER_CONFIGS
    return Decimal(str(stake_tokens)) >= configs[TierKey(tier)].min_stake_tokens
