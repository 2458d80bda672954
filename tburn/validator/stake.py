"""
TBURN Stake Arithmetic

Exact arithmetic over on-chain stake amounts expressed in base units
(18-decimal fixed point). Amounts are Python integers throughout; the only
lossy step is the display conversion in `format_tokens`.
"""

from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Union

from ..constants import (
    DECIMALS,
    DISPLAY_PRECISION,
    WEI_PER_TOKEN,
    VALID_DECIMAL_PATTERN,
    VALID_HEX_AMOUNT_PATTERN,
)
from ..exceptions import InvalidAmount

Amount = Union[int, str]

# Enough digits for any realistic supply expressed in base units
_PRECISION = 80


def parse_amount(value: Amount) -> int:
    """
    Parse a base-unit amount into a non-negative integer.

    Accepts Python ints and decimal-digit strings (surrounding whitespace is
    ignored). On-chain hex quantities (``0x...``) are accepted as well.

    Raises:
        InvalidAmount: for negatives, fractions, floats, booleans, None or
            anything else that is not an integer amount.
    """
    # bool is an int subclass, but True is never a stake
    if isinstance(value, bool):
        raise InvalidAmount(value, "boolean is not an amount")

    if isinstance(value, int):
        if value < 0:
            raise InvalidAmount(value, "amount is negative")
        return value

    if isinstance(value, str):
        text = value.strip()
        if VALID_DECIMAL_PATTERN.match(text):
            return int(text)
        if VALID_HEX_AMOUNT_PATTERN.match(text):
            return int(text, 16)
        if text.startswith("-") and VALID_DECIMAL_PATTERN.match(text[1:]):
            raise InvalidAmount(value, "amount is negative")
        raise InvalidAmount(value)

    raise InvalidAmount(value, f"unsupported type {type(value).__name__}")


def sum_amounts(*values: Amount) -> int:
    """Exact sum of base-unit amounts."""
    total = 0
    for value in values:
        total += parse_amount(value)
    return total


def voting_power(stake: Amount, delegated_stake: Amount = 0) -> int:
    """Voting power is self-stake plus delegated stake, in base units."""
    return sum_amounts(stake, 0 if delegated_stake is None else delegated_stake)


def to_tokens(base_units: Amount) -> Decimal:
    """Exact conversion of base units to whole-token units."""
    amount = parse_amount(base_units)
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return Decimal(amount).scaleb(-DECIMALS)


def to_base_units(tokens: Union[int, str, Decimal]) -> int:
    """
    Convert a token quantity to base units.

    Raises:
        InvalidAmount: if the quantity is negative, not a number, or carries
            more than 18 decimal places.
    """
    if isinstance(tokens, (bool, float)):
        raise InvalidAmount(tokens, f"unsupported type {type(tokens).__name__}")
    try:
        quantity = Decimal(str(tokens).strip())
    except ArithmeticError:
        raise InvalidAmount(tokens, "not a number") from None
    if not quantity.is_finite():
        raise InvalidAmount(tokens, "not a finite number")
    if quantity < 0:
        raise InvalidAmount(tokens, "amount is negative")

    with localcontext() as ctx:
        ctx.prec = _PRECISION
        scaled = quantity * WEI_PER_TOKEN
    if scaled != scaled.to_integral_value():
        raise InvalidAmount(tokens, f"more than {DECIMALS} decimal places")
    return int(scaled)


def format_tokens(base_units: Amount, precision: int = DISPLAY_PRECISION) -> str:
    """
    Render base units as a token string rounded half-up to `precision` places.

    This is the explicitly lossy display conversion; never feed the result
    back into ranking or summation.
    """
    if precision < 0:
        raise ValueError("precision must be non-negative")
    tokens = to_tokens(base_units)
    quantum = Decimal(1).scaleb(-precision)
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return f"{tokens.quantize(quantum, rounding=ROUND_HALF_UP):f}"


def format_compact(tokens: Union[int, Decimal], precision: int = DISPLAY_PRECISION) -> str:
    """Leaderboard style rendering: 2.10M, 350.00K, 1.25B."""
    value = Decimal(tokens)
    quantum = Decimal(1).scaleb(-precision)
    for divisor, suffix in ((Decimal(10) ** 9, "B"), (Decimal(10) ** 6, "M"), (Decimal(10) ** 3, "K")):
        if abs(value) >= divisor:
            return f"{(value / divisor).quantize(quantum, rounding=ROUND_HALF_UP)}{suffix}"
    return f"{value.quantize(quantum, rounding=ROUND_HALF_UP)}"
