"""
TBURN Emission Schedule

Halving-based emission model. The base reward pool of each halving period
is halved every `halving_period_years` years for a bounded number of epochs;
after the last defined epoch the multiplier stays at its terminal value
instead of continuing to halve.

All amounts are Decimal and computed in a local high-precision context, so
20-year totals carry no accumulated floating-point drift.
"""

from dataclasses import dataclass
from decimal import Decimal, localcontext
from typing import List, Tuple, Union

from ..constants import (
    BASE_EMISSION_DAILY,
    DAYS_PER_YEAR,
    HALVING_PERIOD_YEARS,
    MAX_HALVING_EPOCHS,
)

# Base reward pool per halving period at 100% multiplier
BASE_PERIOD_REWARD = BASE_EMISSION_DAILY * DAYS_PER_YEAR * HALVING_PERIOD_YEARS

_MIN_PRECISION = 60


@dataclass(frozen=True)
class HalvingEpoch:
    """
    One halving period.

    Attributes:
        epoch: Epoch index (0 = genesis period)
        period_start_year: Years since genesis when the epoch begins
        reward_multiplier: Fraction of the base reward paid in this epoch
        period_reward: Reward pool emitted over the epoch
        cumulative_amount: Total emitted through the end of this epoch
    """
    epoch: int
    period_start_year: int
    reward_multiplier: Decimal
    period_reward: Decimal
    cumulative_amount: Decimal

    def to_dict(self) -> dict:
        return {
            'epoch': self.epoch,
            'period_start_year': self.period_start_year,
            'reward_multiplier': str(self.reward_multiplier),
            'period_reward': str(self.period_reward),
            'cumulative_amount': str(self.cumulative_amount),
        }


class EmissionScheduler:
    """
    Computes halving multipliers and emitted amounts over time.

    Example (defaults):
        epoch 0 (years 0-3):   100%
        epoch 1 (years 4-7):    50%
        epoch 2 (years 8-11):   25%
        epoch 3 (years 12-15): 12.5%
        epoch 4 (years 16-19): 6.25%, and every later epoch
    """

    def __init__(
        self,
        base_reward: Union[int, str, Decimal] = BASE_PERIOD_REWARD,
        halving_period_years: int = HALVING_PERIOD_YEARS,
        max_epochs: int = MAX_HALVING_EPOCHS,
    ):
        """
        Args:
            base_reward: Reward pool of one halving period at 100%
            halving_period_years: Length of each halving period
            max_epochs: Number of defined epochs; the last one is terminal
        """
        if halving_period_years < 1:
            raise ValueError("halving_period_years must be at least 1")
        if max_epochs < 1:
            raise ValueError("max_epochs must be at least 1")
        base = Decimal(str(base_reward))
        if not base.is_finite() or base < 0:
            raise ValueError("base_reward must be a non-negative number")

        self.base_reward = base
        self.halving_period_years = halving_period_years
        self.max_epochs = max_epochs
        self._precision = max(_MIN_PRECISION, max_epochs + 40)

    @property
    def terminal_epoch(self) -> int:
        """Last epoch with its own multiplier."""
        return self.max_epochs - 1

    def _check_epoch(self, epoch: int) -> None:
        if epoch < 0:
            raise ValueError(f"epoch must be non-negative, got {epoch}")

    def reward_multiplier(self, epoch: int) -> Decimal:
        """1 / 2^epoch, frozen at the terminal epoch's value."""
        self._check_epoch(epoch)
        effective = min(epoch, self.terminal_epoch)
        with localcontext() as ctx:
            ctx.prec = self._precision
            return Decimal(1) / (Decimal(2) ** effective)

    def epoch_reward(self, epoch: int) -> Decimal:
        """Reward pool emitted over one epoch."""
        multiplier = self.reward_multiplier(epoch)
        with localcontext() as ctx:
            ctx.prec = self._precision
            return self.base_reward * multiplier

    def cumulative_amount(self, epoch: int) -> Decimal:
        """
        Total emitted through the end of `epoch` (inclusive).

        Within the defined schedule this is the geometric sum
        base * (2 - 2^(1-n)) with n = epoch + 1 elapsed epochs. Each epoch past
        the terminal one adds the terminal reward.
        """
        self._check_epoch(epoch)
        with localcontext() as ctx:
            ctx.prec = self._precision
            within = min(epoch, self.terminal_epoch) + 1
            total = self.base_reward * (Decimal(2) - Decimal(2) ** (1 - within))
            extra_epochs = epoch - self.terminal_epoch
            if extra_epochs > 0:
                total += self.epoch_reward(self.terminal_epoch) * extra_epochs
            return total

    def epoch_for_year(self, year: int) -> int:
        """Epoch containing a year counted from genesis (year 0)."""
        if year < 0:
            raise ValueError(f"year must be non-negative, got {year}")
        return year // self.halving_period_years

    def annual_emission(self, year: int) -> Decimal:
        """Tokens emitted during one year of the schedule."""
        with localcontext() as ctx:
            ctx.prec = self._precision
            return self.epoch_reward(self.epoch_for_year(year)) / self.halving_period_years

    def daily_emission(self, year: int, days_per_year: int = DAYS_PER_YEAR) -> Decimal:
        with localcontext() as ctx:
            ctx.prec = self._precision
            return self.annual_emission(year) / days_per_year

    def block_reward(self, year: int, blocks_per_year: int) -> Decimal:
        """Per-block reward during a year, given the block production rate."""
        if blocks_per_year <= 0:
            raise ValueError("blocks_per_year must be positive")
        with localcontext() as ctx:
            ctx.prec = self._precision
            return self.annual_emission(year) / blocks_per_year

    def schedule(self) -> Tuple[HalvingEpoch, ...]:
        """The defined epochs, genesis first."""
        return tuple(
            HalvingEpoch(
                epoch=epoch,
                period_start_year=epoch * self.halving_period_years,
                reward_multiplier=self.reward_multiplier(epoch),
                period_reward=self.epoch_reward(epoch),
                cumulative_amount=self.cumulative_amount(epoch),
            )
            for epoch in range(self.max_epochs)
        )

    def projection(self, years: int) -> List[Tuple[int, Decimal]]:
        """
        Cumulative emission at the end of each year.

        Returns:
            List of (year, cumulative_emitted) tuples for years 0..years-1
        """
        projections = []
        total = Decimal(0)
        with localcontext() as ctx:
            ctx.prec = self._precision
            for year in range(years):
                total += self.annual_emission(year)
                projections.append((year, total))
        return projections
