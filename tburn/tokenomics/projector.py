"""
TBURN Tokenomics Projector

Combines a ranking with tier and emission configuration into network-wide
figures: per-tier counts and averages, fill rates, reward pools, adaptive
emission, burn, per-validator rewards and security estimates.

Every ratio over a possibly-empty collection returns a defined sentinel
instead of raising:
- empty tier: uptime 0, AI-trust 0, APY falls back to the tier's target APY
- max_validators == 0: fill rate 0
- zero supply / zero stake: percentages and APY 0
"""

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_FLOOR, localcontext
from typing import Dict, Iterable, Mapping, Optional, Tuple, Union

from ..config.loader import EmissionConfig
from ..constants import (
    ANNUAL_INFLATION_RATE,
    ATTACK_STAKE_FRACTION,
    CIRCULATING_SUPPLY,
    DAYS_PER_YEAR,
    GENESIS_SUPPLY,
    PERCENT_SCALE,
    SECURITY_DECENTRALIZED_VALIDATORS,
    SECURITY_TARGET_VALIDATORS,
    TARGET_STAKED_SUPPLY,
)
from ..logger import get_logger
from ..validator.stake import to_tokens
from ..validator.tiers import DEFAULT_TIER_CONFIGS, TierConfig, TierKey
from ..validator.types import RankedValidator, Ranking, ValidatorStatus
from .emission import EmissionScheduler
from .rewards import apy_from_daily_reward

logger = get_logger(__name__)

_PRECISION = 50
_ZERO = Decimal("0")


def _mean(values: Iterable[Decimal]) -> Optional[Decimal]:
    values = list(values)
    if not values:
        return None
    return sum(values, _ZERO) / len(values)


def _ratio(numerator: Decimal, denominator: Decimal) -> Decimal:
    if denominator == 0:
        return _ZERO
    return numerator / denominator


# =============================================================================
# INPUT
# =============================================================================

@dataclass(frozen=True)
class NetworkFigures:
    """
    Network aggregates supplied alongside the ranking (whole tokens).

    Attributes:
        total_supply: Total token supply
        circulating_supply: Circulating supply
        staked_amount: Total staked; None uses the ranking's total voting power
        daily_fees: Transaction fees collected per day
        token_price: Token price (USD) for attack cost estimates
        annual_inflation_rate: Passed through to the report
        year: Years since genesis, selects the halving epoch
    """
    total_supply: Decimal = GENESIS_SUPPLY
    circulating_supply: Decimal = CIRCULATING_SUPPLY
    staked_amount: Optional[Decimal] = None
    daily_fees: Decimal = _ZERO
    token_price: Decimal = _ZERO
    annual_inflation_rate: Decimal = ANNUAL_INFLATION_RATE
    year: int = 0

    @classmethod
    def from_config(cls, network, staked_amount: Optional[Decimal] = None, year: int = 0) -> "NetworkFigures":
        """Build from a loaded [network] section."""
        return cls(
            total_supply=network.total_supply,
            circulating_supply=network.circulating_supply,
            staked_amount=staked_amount,
            daily_fees=network.daily_fees,
            token_price=network.token_price,
            annual_inflation_rate=network.annual_inflation_rate,
            year=year,
        )


# =============================================================================
# OUTPUT
# =============================================================================

@dataclass(frozen=True)
class TierStats:
    """Aggregates for one tier."""
    tier: TierKey
    count: int
    total_stake: Decimal
    average_uptime: Decimal
    average_apy: Decimal
    average_ai_trust: Decimal
    fill_rate: Decimal
    daily_reward_pool: Decimal
    configured_reward_pool: Decimal

    def to_dict(self) -> dict:
        return {
            'tier': self.tier.value,
            'count': self.count,
            'total_stake': str(self.total_stake),
            'average_uptime': str(self.average_uptime),
            'average_apy': str(self.average_apy),
            'average_ai_trust': str(self.average_ai_trust),
            'fill_rate': str(self.fill_rate),
            'daily_reward_pool': str(self.daily_reward_pool),
            'configured_reward_pool': str(self.configured_reward_pool),
        }


@dataclass(frozen=True)
class ValidatorReward:
    """Projected daily reward of one validator within its tier pool."""
    address: str
    tier: TierKey
    daily_reward: Decimal
    apy: Decimal

    def to_dict(self) -> dict:
        return {
            'address': self.address,
            'tier': self.tier.value,
            'daily_reward': str(self.daily_reward),
            'apy': str(self.apy),
        }


@dataclass(frozen=True)
class NetworkStats:
    """Network-wide figures. Percentages are 0-100."""
    total_supply: Decimal
    circulating_supply: Decimal
    staked_amount: Decimal
    staked_percent: Decimal
    circulating_percent: Decimal
    stake_ratio: Decimal
    annual_inflation_rate: Decimal
    validator_count: int
    active_validator_count: int
    committee_size: int
    committee_voting_power_share: Decimal
    halving_epoch: int
    base_daily_emission: Decimal
    emission_multiplier: Decimal
    daily_gross_emission: Decimal
    daily_burn: Decimal
    daily_net_emission: Decimal
    attack_cost: Decimal
    security_score: int

    def to_dict(self) -> dict:
        result = {}
        for name in self.__dataclass_fields__:
            value = getattr(self, name)
            result[name] = str(value) if isinstance(value, Decimal) else value
        return result


@dataclass(frozen=True)
class TokenomicsReport:
    tiers: Dict[TierKey, TierStats]
    network: NetworkStats
    validator_rewards: Dict[str, ValidatorReward] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            'tiers': {tier.value: stats.to_dict() for tier, stats in self.tiers.items()},
            'network': self.network.to_dict(),
            'validator_rewards': [r.to_dict() for r in self.validator_rewards.values()],
        }


@dataclass(frozen=True)
class ScopeSummary:
    """Aggregates over a filtered subset of a ranking."""
    count: int
    total_stake: Decimal
    total_delegated_stake: Decimal
    total_voting_power: Decimal
    voting_power_share: Decimal
    average_uptime: Decimal
    average_apy: Decimal
    average_ai_trust: Decimal
    average_commission: Decimal
    validators: Tuple[RankedValidator, ...] = ()

    def to_dict(self) -> dict:
        return {
            'count': self.count,
            'total_stake': str(self.total_stake),
            'total_delegated_stake': str(self.total_delegated_stake),
            'total_voting_power': str(self.total_voting_power),
            'voting_power_share': str(self.voting_power_share),
            'average_uptime': str(self.average_uptime),
            'average_apy': str(self.average_apy),
            'average_ai_trust': str(self.average_ai_trust),
            'average_commission': str(self.average_commission),
            'validators': [v.address for v in self.validators],
        }


# =============================================================================
# PROJECTOR
# =============================================================================

class TokenomicsProjector:
    """
    Derives tokenomics figures from a ranking.

    Pure: the projector holds configuration only and never mutates its inputs.
    """

    def __init__(
        self,
        tier_configs: Optional[Mapping[TierKey, TierConfig]] = None,
        emission_config: Optional[EmissionConfig] = None,
    ):
        self.tier_configs: Dict[TierKey, TierConfig] = dict(DEFAULT_TIER_CONFIGS)
        if tier_configs:
            self.tier_configs.update({TierKey(k): v for k, v in tier_configs.items()})
        self.emission_config = emission_config or EmissionConfig()
        self.scheduler = EmissionScheduler(
            base_reward=self.emission_config.base_emission_daily * DAYS_PER_YEAR
            * self.emission_config.halving_period_years,
            halving_period_years=self.emission_config.halving_period_years,
            max_epochs=self.emission_config.max_epochs,
        )

    # --- emission -----------------------------------------------------------

    def emission_multiplier(self, staked: Decimal, circulating_supply: Decimal) -> Decimal:
        """clamp(sqrt(stake_ratio / target_ratio), min, max)."""
        cfg = self.emission_config
        if cfg.target_stake_ratio == 0:
            return cfg.max_multiplier
        with localcontext() as ctx:
            ctx.prec = _PRECISION
            stake_ratio = _ratio(Decimal(staked), Decimal(circulating_supply))
            multiplier = (stake_ratio / cfg.target_stake_ratio).sqrt()
        return min(cfg.max_multiplier, max(cfg.min_multiplier, multiplier))

    def adaptive_emission(self, staked: Decimal, circulating_supply: Decimal, year: int = 0) -> Decimal:
        """Daily gross emission in whole tokens (rounded down)."""
        with localcontext() as ctx:
            ctx.prec = _PRECISION
            base = self.scheduler.daily_emission(year)
            emission = base * self.emission_multiplier(staked, circulating_supply)
            return emission.to_integral_value(ROUND_FLOOR)

    def daily_burn(self, daily_fees: Decimal) -> Decimal:
        with localcontext() as ctx:
            ctx.prec = _PRECISION
            return Decimal(daily_fees) * self.emission_config.burn_rate

    # --- security -----------------------------------------------------------

    @staticmethod
    def attack_cost(staked: Decimal, token_price: Decimal) -> Decimal:
        """Cost of acquiring a Byzantine share of the stake."""
        with localcontext() as ctx:
            ctx.prec = _PRECISION
            return Decimal(staked) * ATTACK_STAKE_FRACTION * Decimal(token_price)

    @staticmethod
    def security_score(staked: Decimal, validator_count: int) -> int:
        """
        Network security score (0-100).

        Up to 50 points for stake relative to the staking target, 30 for
        validator count relative to the target set size and 20 for
        decentralization.
        """
        with localcontext() as ctx:
            ctx.prec = _PRECISION
            stake_score = min(Decimal(staked) / TARGET_STAKED_SUPPLY * 50, Decimal(50))
            count_score = min(Decimal(validator_count) / SECURITY_TARGET_VALIDATORS * 30, Decimal(30))
            if validator_count >= SECURITY_DECENTRALIZED_VALIDATORS:
                decentralization = Decimal(20)
            else:
                decentralization = Decimal(validator_count) / SECURITY_DECENTRALIZED_VALIDATORS * 20
            total = stake_score + count_score + decentralization
        return int(total.to_integral_value(ROUND_FLOOR))

    # --- aggregation --------------------------------------------------------

    def tier_stats(self, members: Tuple[RankedValidator, ...], config: TierConfig,
                   daily_emission: Decimal) -> TierStats:
        with localcontext() as ctx:
            ctx.prec = _PRECISION
            uptime = _mean(v.percent('uptime') for v in members)
            apy = _mean(v.percent('apy') for v in members)
            ai_trust = _mean(v.percent('ai_trust_score') for v in members)
            fill_rate = _ZERO
            if config.max_validators > 0:
                fill_rate = Decimal(len(members)) / config.max_validators
            return TierStats(
                tier=config.tier,
                count=len(members),
                total_stake=to_tokens(sum(v.stake for v in members)),
                average_uptime=_ZERO if uptime is None else uptime,
                average_apy=config.target_apy if apy is None else apy,
                average_ai_trust=_ZERO if ai_trust is None else ai_trust,
                fill_rate=fill_rate,
                daily_reward_pool=daily_emission * config.reward_pool_share,
                configured_reward_pool=config.daily_reward_pool,
            )

    @staticmethod
    def validator_rewards(members: Tuple[RankedValidator, ...], tier_pool: Decimal) -> Dict[str, ValidatorReward]:
        """Split a tier pool by direct stake; equal split when the tier holds no stake."""
        rewards: Dict[str, ValidatorReward] = {}
        if not members:
            return rewards
        total_stake = sum(v.stake for v in members)
        with localcontext() as ctx:
            ctx.prec = _PRECISION
            for v in members:
                if total_stake > 0:
                    weight = Decimal(v.stake) / Decimal(total_stake)
                else:
                    weight = Decimal(1) / len(members)
                daily = tier_pool * weight
                rewards[v.address] = ValidatorReward(
                    address=v.address,
                    tier=v.tier,
                    daily_reward=daily,
                    apy=apy_from_daily_reward(daily, v.stake_tokens),
                )
        return rewards

    def project(self, ranking: Ranking, network: Optional[NetworkFigures] = None) -> TokenomicsReport:
        """
        Project tokenomics figures for a ranking.

        Args:
            ranking: Output of VotingPowerRanker
            network: Network aggregates (defaults to protocol supply constants)
        """
        network = network or NetworkFigures()
        staked = network.staked_amount
        if staked is None:
            staked = to_tokens(ranking.total_voting_power)
        staked = Decimal(staked)

        with localcontext() as ctx:
            ctx.prec = _PRECISION
            multiplier = self.emission_multiplier(staked, network.circulating_supply)
            gross = self.adaptive_emission(staked, network.circulating_supply, network.year)
            burn = self.daily_burn(network.daily_fees)

            tiers: Dict[TierKey, TierStats] = {}
            rewards: Dict[str, ValidatorReward] = {}
            for tier in sorted(self.tier_configs, key=lambda t: t.ordinal, reverse=True):
                config = self.tier_configs[tier]
                members = ranking.by_tier(tier)
                stats = self.tier_stats(members, config, gross)
                tiers[tier] = stats
                rewards.update(self.validator_rewards(members, stats.daily_reward_pool))

            active = sum(1 for v in ranking if v.status == ValidatorStatus.ACTIVE)
            network_stats = NetworkStats(
                total_supply=Decimal(network.total_supply),
                circulating_supply=Decimal(network.circulating_supply),
                staked_amount=staked,
                staked_percent=_ratio(staked, Decimal(network.total_supply)) * PERCENT_SCALE,
                circulating_percent=_ratio(Decimal(network.circulating_supply),
                                           Decimal(network.total_supply)) * PERCENT_SCALE,
                stake_ratio=_ratio(staked, Decimal(network.circulating_supply)),
                annual_inflation_rate=Decimal(network.annual_inflation_rate),
                validator_count=len(ranking),
                active_validator_count=active,
                committee_size=len(ranking.committee),
                committee_voting_power_share=_ratio(Decimal(ranking.committee_voting_power),
                                                    Decimal(ranking.total_voting_power)),
                halving_epoch=self.scheduler.epoch_for_year(network.year),
                base_daily_emission=self.scheduler.daily_emission(network.year),
                emission_multiplier=multiplier,
                daily_gross_emission=gross,
                daily_burn=burn,
                daily_net_emission=gross - burn,
                attack_cost=self.attack_cost(staked, network.token_price),
                security_score=self.security_score(staked, active),
            )

        logger.debug(
            f"Projected tokenomics for {len(ranking)} validators "
            f"(gross emission: {gross}, security score: {network_stats.security_score})"
        )
        return TokenomicsReport(tiers=tiers, network=network_stats, validator_rewards=rewards)

    def drill_down(
        self,
        ranking: Ranking,
        tier: Optional[Union[TierKey, str]] = None,
        status: Optional[Union[ValidatorStatus, str]] = None,
        committee_only: bool = False,
    ) -> ScopeSummary:
        """
        Aggregate over a filtered subset of the ranking.

        Averages over an empty scope are 0.
        """
        tier = TierKey(tier) if tier is not None else None
        status = ValidatorStatus(status) if status is not None else None

        scope = tuple(
            v for v in ranking
            if (tier is None or v.tier == tier)
            and (status is None or v.status == status)
            and (not committee_only or v.address in ranking.committee)
        )

        with localcontext() as ctx:
            ctx.prec = _PRECISION
            voting_power = sum(v.voting_power for v in scope)
            uptime = _mean(v.percent('uptime') for v in scope)
            apy = _mean(v.percent('apy') for v in scope)
            ai_trust = _mean(v.percent('ai_trust_score') for v in scope)
            commission = _mean(v.percent('commission') for v in scope)
            return ScopeSummary(
                count=len(scope),
                total_stake=to_tokens(sum(v.stake for v in scope)),
                total_delegated_stake=to_tokens(sum(v.delegated_stake for v in scope)),
                total_voting_power=to_tokens(voting_power),
                voting_power_share=_ratio(Decimal(voting_power), Decimal(ranking.total_voting_power)),
                average_uptime=uptime if uptime is not None else _ZERO,
                average_apy=apy if apy is not None else _ZERO,
                average_ai_trust=ai_trust if ai_trust is not None else _ZERO,
                average_commission=commission if commission is not None else _ZERO,
                validators=scope,
            )
