"""
TBURN Token Sale Vesting

Vesting curves for token sale rounds and allocation programs:
- TGE (Token Generation Event) unlock available immediately
- Cliff period during which only the TGE portion is available
- Linear monthly vesting of the remainder after the cliff

The unlocked fraction is non-decreasing in the month index and is exactly
1 from month `cliff_months + linear_vesting_months` onward. Integer amount
schedules assign any rounding remainder to the final month so the cumulative
unlock always equals the allocation.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_FLOOR, localcontext
from typing import Dict, List, Optional, Tuple, Union

from ..validator.stake import parse_amount

Number = Union[int, float, str, Decimal]

_PRECISION = 60


def _decimal(value: Number, name: str) -> Decimal:
    # Floats go through their shortest repr, so 0.15 becomes Decimal("0.15")
    if isinstance(value, bool):
        raise TypeError(f"{name} must be a number, got bool")
    try:
        result = Decimal(str(value))
    except ArithmeticError:
        raise ValueError(f"{name} is not a number: {value!r}") from None
    if not result.is_finite():
        raise ValueError(f"{name} must be finite")
    return result


@dataclass(frozen=True)
class VestingRelease:
    """One month of an integer unlock schedule."""
    month: int
    unlock_amount: int
    cumulative_unlocked: int
    cumulative_fraction: Decimal
    kind: str  # 'tge', 'cliff', 'vesting' or 'final'

    def to_dict(self) -> dict:
        return {
            'month': self.month,
            'unlock_amount': str(self.unlock_amount),
            'cumulative_unlocked': str(self.cumulative_unlocked),
            'cumulative_fraction': str(self.cumulative_fraction),
            'kind': self.kind,
        }


@dataclass(frozen=True)
class VestingSchedule:
    """
    Vesting terms of one sale round or allocation.

    Attributes:
        tge_unlock_fraction: Fraction released at TGE (0-1); floats are read
            through their decimal repr, so 0.15 is exactly Decimal("0.15")
        cliff_months: Months before linear vesting starts (0 allowed)
        linear_vesting_months: Months over which the remainder vests
        name: Optional label
    """
    tge_unlock_fraction: Decimal
    cliff_months: int = 0
    linear_vesting_months: int = 0
    name: str = ""

    def __post_init__(self):
        tge = _decimal(self.tge_unlock_fraction, "tge_unlock_fraction")
        if tge < 0 or tge > 1:
            raise ValueError(f"tge_unlock_fraction must be within [0, 1], got {tge}")
        if self.cliff_months < 0:
            raise ValueError("cliff_months must be non-negative")
        if self.linear_vesting_months < 0:
            raise ValueError("linear_vesting_months must be non-negative")
        object.__setattr__(self, 'tge_unlock_fraction', tge)

    @classmethod
    def from_percent(
        cls,
        tge_percent: Number,
        cliff_months: int,
        linear_vesting_months: int,
        name: str = "",
    ) -> 'VestingSchedule':
        """Create from a TGE percentage (15 -> 0.15)."""
        return cls(
            tge_unlock_fraction=_decimal(tge_percent, "tge_percent") / 100,
            cliff_months=cliff_months,
            linear_vesting_months=linear_vesting_months,
            name=name,
        )

    @property
    def total_months(self) -> int:
        """Month at which everything is unlocked."""
        return self.cliff_months + self.linear_vesting_months

    def is_in_cliff(self, month: int) -> bool:
        return month < self.cliff_months

    def unlocked_fraction(self, month: int) -> Decimal:
        """
        Fraction of the allocation available at `month` (0 = TGE).

        Raises:
            ValueError: for negative months
        """
        if month < 0:
            raise ValueError(f"month must be non-negative, got {month}")
        if month >= self.total_months:
            return Decimal(1)
        if month < self.cliff_months:
            return self.tge_unlock_fraction
        with localcontext() as ctx:
            ctx.prec = _PRECISION
            elapsed = Decimal(month - self.cliff_months) / self.linear_vesting_months
            return self.tge_unlock_fraction + (1 - self.tge_unlock_fraction) * elapsed

    def tge_amount(self, total: Union[int, str]) -> int:
        """TGE portion of an integer allocation, rounded down."""
        amount = parse_amount(total)
        with localcontext() as ctx:
            ctx.prec = _PRECISION
            return int((Decimal(amount) * self.tge_unlock_fraction).to_integral_value(ROUND_FLOOR))

    def unlocked_amount(self, total: Union[int, str], month: int) -> int:
        """
        Integer amount unlocked at `month`, exact at the final month.

        Linear portions are rounded down, so the result never exceeds the
        exact fractional value before the final month.
        """
        if month < 0:
            raise ValueError(f"month must be non-negative, got {month}")
        amount = parse_amount(total)
        if month >= self.total_months:
            return amount
        tge = self.tge_amount(amount)
        if month < self.cliff_months:
            return tge
        vested = (amount - tge) * (month - self.cliff_months) // self.linear_vesting_months
        return tge + vested

    def monthly_schedule(self, total: Union[int, str]) -> List[VestingRelease]:
        """
        Month-by-month unlock schedule for an integer allocation.

        Covers months 0..total_months; the final entry's cumulative amount
        equals `total` exactly.
        """
        amount = parse_amount(total)
        releases: List[VestingRelease] = []
        previous = 0
        for month in range(self.total_months + 1):
            cumulative = self.unlocked_amount(amount, month)
            if month == self.total_months:
                kind = 'final'
            elif month == 0:
                kind = 'tge'
            elif month < self.cliff_months:
                kind = 'cliff'
            else:
                kind = 'vesting'
            fraction = Decimal(cumulative) / Decimal(amount) if amount else Decimal(1)
            releases.append(VestingRelease(
                month=month,
                unlock_amount=cumulative - previous,
                cumulative_unlocked=cumulative,
                cumulative_fraction=fraction,
                kind=kind,
            ))
            previous = cumulative
        return releases

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'tge_unlock_fraction': str(self.tge_unlock_fraction),
            'cliff_months': self.cliff_months,
            'linear_vesting_months': self.linear_vesting_months,
            'total_months': self.total_months,
        }


# =============================================================================
# PURCHASE BONUSES
# =============================================================================

@dataclass(frozen=True)
class PurchaseBonus:
    """Bonus tier granted for a purchase size (USD)."""
    name: str
    min_investment: Decimal
    bonus_percent: Decimal


# Highest threshold first
PURCHASE_BONUS_TIERS: Tuple[PurchaseBonus, ...] = (
    PurchaseBonus("whale", Decimal(50_000), Decimal(5)),
    PurchaseBonus("dolphin", Decimal(10_000), Decimal(3)),
    PurchaseBonus("fish", Decimal(1_000), Decimal(1)),
    PurchaseBonus("shrimp", Decimal(0), Decimal(0)),
)


def purchase_bonus(invested_amount: Number) -> PurchaseBonus:
    """Bonus tier for an investment amount."""
    invested = _decimal(invested_amount, "invested_amount")
    for bonus in PURCHASE_BONUS_TIERS:
        if invested >= bonus.min_investment:
            return bonus
    return PURCHASE_BONUS_TIERS[-1]


# =============================================================================
# SALE PROJECTIONS
# =============================================================================

@dataclass(frozen=True)
class VestingProjection:
    """
    Token figures for an investment in a sale round.

    Attributes:
        invested_amount: Amount paid (USD)
        token_price: Price per token (USD)
        tokens_received: invested_amount / token_price
        bonus_tokens: Purchase bonus tokens (0 unless requested)
        total_tokens: tokens_received + bonus_tokens
        tge_tokens: Tokens available at TGE
        schedule: Vesting terms applied
        listing_price: Expected listing price, if known
    """
    invested_amount: Decimal
    token_price: Decimal
    tokens_received: Decimal
    bonus_tokens: Decimal
    total_tokens: Decimal
    tge_tokens: Decimal
    schedule: VestingSchedule
    listing_price: Optional[Decimal] = None

    def unlocked_tokens(self, month: int) -> Decimal:
        """Tokens available at `month`; equals total_tokens from the final month."""
        fraction = self.schedule.unlocked_fraction(month)
        if fraction == 1:
            return self.total_tokens
        with localcontext() as ctx:
            ctx.prec = _PRECISION
            return self.total_tokens * fraction

    def curve(self) -> List[Tuple[int, Decimal]]:
        """(month, unlocked_tokens) for every month through the final unlock."""
        return [(m, self.unlocked_tokens(m)) for m in range(self.schedule.total_months + 1)]

    @property
    def potential_value(self) -> Optional[Decimal]:
        if self.listing_price is None:
            return None
        return self.total_tokens * self.listing_price

    @property
    def potential_profit(self) -> Optional[Decimal]:
        value = self.potential_value
        if value is None:
            return None
        return value - self.invested_amount

    def to_dict(self) -> dict:
        return {
            'invested_amount': str(self.invested_amount),
            'token_price': str(self.token_price),
            'tokens_received': str(self.tokens_received),
            'bonus_tokens': str(self.bonus_tokens),
            'total_tokens': str(self.total_tokens),
            'tge_tokens': str(self.tge_tokens),
            'schedule': self.schedule.to_dict(),
            'listing_price': None if self.listing_price is None else str(self.listing_price),
            'potential_value': None if self.potential_value is None else str(self.potential_value),
            'potential_profit': None if self.potential_profit is None else str(self.potential_profit),
        }


def project_vesting(
    invested_amount: Number,
    token_price: Number,
    schedule: VestingSchedule,
    listing_price: Optional[Number] = None,
    apply_bonus: bool = False,
) -> VestingProjection:
    """
    Project tokens received and their unlock curve for a sale purchase.

    Args:
        invested_amount: Amount paid (USD)
        token_price: Sale price per token (USD), must be positive
        schedule: Vesting terms
        listing_price: Optional expected listing price for value estimates
        apply_bonus: Add the purchase bonus tier to the token amount

    Raises:
        ValueError: for negative investments or non-positive prices
    """
    invested = _decimal(invested_amount, "invested_amount")
    price = _decimal(token_price, "token_price")
    if invested < 0:
        raise ValueError("invested_amount must be non-negative")
    if price <= 0:
        raise ValueError("token_price must be positive")

    with localcontext() as ctx:
        ctx.prec = _PRECISION
        tokens = invested / price
        bonus = Decimal(0)
        if apply_bonus:
            bonus = tokens * purchase_bonus(invested).bonus_percent / 100
        total = tokens + bonus
        tge = total * schedule.tge_unlock_fraction

    return VestingProjection(
        invested_amount=invested,
        token_price=price,
        tokens_received=tokens,
        bonus_tokens=bonus,
        total_tokens=total,
        tge_tokens=tge,
        schedule=schedule,
        listing_price=None if listing_price is None else _decimal(listing_price, "listing_price"),
    )


@dataclass(frozen=True)
class SaleRound:
    """A priced sale round with its vesting terms."""
    name: str
    token_price: Decimal
    schedule: VestingSchedule

    def project(self, invested_amount: Number, listing_price: Optional[Number] = None,
                apply_bonus: bool = False) -> VestingProjection:
        return project_vesting(invested_amount, self.token_price, self.schedule,
                               listing_price=listing_price, apply_bonus=apply_bonus)


# Allocation programs: (TGE %, cliff months, linear vesting months after cliff)
VESTING_PRESETS: Dict[str, VestingSchedule] = {
    name: VestingSchedule.from_percent(tge, cliff, linear, name=name)
    for name, (tge, cliff, linear) in {
        'team_allocation':    (0, 12, 36),
        'advisor_allocation': (0, 12, 24),
        'seed_round':         (5, 6, 18),
        'private_round':      (10, 3, 15),
        'public_round':       (25, 0, 12),
        'launchpad':          (15, 0, 6),
        'strategic_partner':  (0, 6, 18),
        'ecosystem_grant':    (20, 3, 21),
        'ecosystem_fund':     (10, 6, 30),
        'airdrop':            (50, 0, 6),
        'community':          (30, 0, 12),
        'referral':           (50, 0, 6),
        'marketing':          (25, 0, 12),
        'exchange_listing':   (50, 0, 6),
        'reserve':            (0, 12, 48),
        'dao_treasury':       (10, 6, 42),
        'staking_rewards':    (100, 0, 0),
    }.items()
}

SALE_ROUNDS: Dict[str, SaleRound] = {
    'seed': SaleRound('seed', Decimal("0.008"), VESTING_PRESETS['seed_round']),
    'private': SaleRound('private', Decimal("0.015"), VESTING_PRESETS['private_round']),
    'public': SaleRound('public', Decimal("0.05"), VESTING_PRESETS['public_round']),
    'launchpad': SaleRound('launchpad', Decimal("0.05"), VESTING_PRESETS['launchpad']),
}


def get_vesting_preset(name: str) -> VestingSchedule:
    """Vesting terms for an allocation program; unknown programs unlock at TGE."""
    return VESTING_PRESETS.get(name, VESTING_PRESETS['staking_rewards'])
