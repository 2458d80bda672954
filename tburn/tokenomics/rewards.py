"""
TBURN Staking Reward Projections

Per-principal reward figures derived from an annual percentage yield given
in basis points (1200 = 12.00%).

The daily, monthly and annual figures are derived from the same rate so
they stay mutually consistent. The daily figure is fixed to 18 places, so
monthly == daily * 30 exactly and annual = daily * 365 up to that rounding.
"""

from dataclasses import dataclass
from decimal import ROUND_DOWN, Decimal, localcontext
from typing import Union

from ..constants import DAYS_PER_MONTH, DAYS_PER_YEAR, PERCENT_SCALE

Number = Union[int, str, Decimal]

_PRECISION = 40

# Daily rewards are rounded down to 18 places (one base unit)
REWARD_QUANTUM = Decimal("1e-18")


def _to_decimal(value: Number, name: str) -> Decimal:
    if isinstance(value, (bool, float)):
        raise TypeError(f"{name} must be int, str or Decimal, got {type(value).__name__}")
    try:
        result = Decimal(str(value))
    except ArithmeticError:
        raise ValueError(f"{name} is not a number: {value!r}") from None
    if not result.is_finite() or result < 0:
        raise ValueError(f"{name} must be a non-negative number, got {value!r}")
    return result


def apy_percent(apy_basis_points: int) -> Decimal:
    """Basis points scaled x100 to a percentage (1200 -> 12)."""
    if isinstance(apy_basis_points, bool) or not isinstance(apy_basis_points, int):
        raise TypeError("apy_basis_points must be an integer")
    if apy_basis_points < 0:
        raise ValueError("apy_basis_points must be non-negative")
    return Decimal(apy_basis_points) / PERCENT_SCALE


@dataclass(frozen=True)
class StakingProjection:
    """
    Reward projection for a staked principal.

    Attributes:
        staked_amount: Principal in tokens
        apy_percent: Annual yield in percent
        daily_reward: staked * apy / 36500
        monthly_reward: daily_reward * 30
        annual_reward: staked * apy / 100
    """
    staked_amount: Decimal
    apy_percent: Decimal
    daily_reward: Decimal
    monthly_reward: Decimal
    annual_reward: Decimal

    def to_dict(self) -> dict:
        return {
            'staked_amount': str(self.staked_amount),
            'apy_percent': str(self.apy_percent),
            'daily_reward': str(self.daily_reward),
            'monthly_reward': str(self.monthly_reward),
            'annual_reward': str(self.annual_reward),
        }


def project_staking(staked_amount: Number, apy_basis_points: int) -> StakingProjection:
    """
    Project simple (non-compounded) staking rewards.

    Args:
        staked_amount: Principal in tokens
        apy_basis_points: APY scaled x100 (1200 = 12.00%)
    """
    staked = _to_decimal(staked_amount, "staked_amount")
    apy = apy_percent(apy_basis_points)
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        daily = (staked * apy / (PERCENT_SCALE * DAYS_PER_YEAR)).quantize(REWARD_QUANTUM, rounding=ROUND_DOWN)
        monthly = daily * DAYS_PER_MONTH
        annual = staked * apy / PERCENT_SCALE
    return StakingProjection(
        staked_amount=staked,
        apy_percent=apy,
        daily_reward=daily,
        monthly_reward=monthly,
        annual_reward=annual,
    )


@dataclass(frozen=True)
class CompoundProjection:
    """Result of compounding a principal over a number of days."""
    principal: Decimal
    final_amount: Decimal
    total_reward: Decimal
    effective_apy_percent: Decimal
    days: int
    periods_per_year: int

    def to_dict(self) -> dict:
        return {
            'principal': str(self.principal),
            'final_amount': str(self.final_amount),
            'total_reward': str(self.total_reward),
            'effective_apy_percent': str(self.effective_apy_percent),
            'days': self.days,
            'periods_per_year': self.periods_per_year,
        }


def compound(
    staked_amount: Number,
    apy_basis_points: int,
    days: int,
    periods_per_year: int = DAYS_PER_YEAR,
) -> CompoundProjection:
    """
    Project rewards when they are restaked `periods_per_year` times a year.

    final = principal * (1 + r / n) ^ (n * days / 365)
    """
    principal = _to_decimal(staked_amount, "staked_amount")
    if days < 0:
        raise ValueError("days must be non-negative")
    if periods_per_year < 1:
        raise ValueError("periods_per_year must be at least 1")

    rate = apy_percent(apy_basis_points) / PERCENT_SCALE
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        growth = Decimal(1) + rate / periods_per_year
        exponent = Decimal(periods_per_year * days) / DAYS_PER_YEAR
        if exponent == exponent.to_integral_value():
            exponent = int(exponent)
        final_amount = principal * growth ** exponent
        effective = (growth ** periods_per_year - 1) * PERCENT_SCALE
    return CompoundProjection(
        principal=principal,
        final_amount=final_amount,
        total_reward=final_amount - principal,
        effective_apy_percent=effective,
        days=days,
        periods_per_year=periods_per_year,
    )


def apy_from_daily_reward(daily_reward: Number, stake: Number) -> Decimal:
    """Annualized yield in percent; 0 when there is no stake."""
    reward = _to_decimal(daily_reward, "daily_reward")
    principal = _to_decimal(stake, "stake")
    if principal == 0:
        return Decimal("0")
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return reward * DAYS_PER_YEAR / principal * PERCENT_SCALE
