"""
TBURN Validator Types

Core data types for validator ranking: the raw ledger record, the ranked
view derived from it, and the immutable ranking produced by each cycle.
"""

from dataclasses import dataclass, field, fields
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple, Union

from ..constants import FRACTION_SCALE, PERCENT_SCALE, VALID_ADDRESS_PATTERN
from ..exceptions import (
    DuplicateValidator,
    InvalidAmount,
    InvalidValidatorRecord,
)
from .stake import to_tokens
from .tiers import TierKey

__all__ = [
    'ValidatorStatus',
    'ValidatorRecord',
    'RankedValidator',
    'Ranking',
    'DuplicateValidator',
    'InvalidAmount',
    'InvalidValidatorRecord',
    'normalize_address',
]


class ValidatorStatus(str, Enum):
    """Validator status as reported by the registry."""
    ACTIVE = "active"
    INACTIVE = "inactive"
    JAILED = "jailed"


# Scaled x100 integer fields
SCALED_FIELDS = (
    'commission',
    'apy',
    'uptime',
    'ai_trust_score',
    'reputation_score',
    'performance_score',
    'behavior_score',
)

COUNTER_FIELDS = ('total_blocks', 'missed_blocks', 'delegators')

# Registry payload key -> record attribute
_PAYLOAD_KEYS = {
    'delegatedStake': 'delegated_stake',
    'aiTrustScore': 'ai_trust_score',
    'reputationScore': 'reputation_score',
    'performanceScore': 'performance_score',
    'behaviorScore': 'behavior_score',
    'totalBlocks': 'total_blocks',
    'missedBlocks': 'missed_blocks',
}


def normalize_address(address: str) -> str:
    """Addresses compare case-insensitively; lower case is canonical."""
    return address.strip().lower()


def _read_int(data: Mapping[str, Any], key: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    # Some registries send the delegator list instead of a count
    if key == 'delegators' and isinstance(value, (list, tuple)):
        return len(value)
    if isinstance(value, bool):
        raise InvalidValidatorRecord(f"Field {key!r} must be an integer, got {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise InvalidValidatorRecord(f"Field {key!r} must be an integer, got {value!r}")
    try:
        result = int(value)
    except (TypeError, ValueError):
        raise InvalidValidatorRecord(f"Field {key!r} must be an integer, got {value!r}") from None
    if result < 0:
        raise InvalidValidatorRecord(f"Field {key!r} must be non-negative, got {value!r}")
    return result


@dataclass(frozen=True)
class ValidatorRecord:
    """
    A validator as read from the external registry.

    Stake fields hold the amounts as supplied (integer or decimal string in
    base units); they are normalized by the ranker so that one unparsable
    record can be excluded without aborting the whole ranking.

    Attributes:
        address: 0x-prefixed 20-byte identifier, lower case
        name: Display label (not unique)
        stake: Self-stake in base units
        delegated_stake: Stake delegated by others in base units
        commission .. behavior_score: Percentages scaled x100 (950 = 9.50%)
        total_blocks, missed_blocks, delegators: Counters
        status: Registry status
    """
    address: str
    name: str = ""
    stake: Union[int, str] = 0
    delegated_stake: Union[int, str] = 0
    commission: int = 0
    apy: int = 0
    uptime: int = 0
    ai_trust_score: int = 0
    reputation_score: int = 0
    performance_score: int = 0
    behavior_score: int = 0
    total_blocks: int = 0
    missed_blocks: int = 0
    delegators: int = 0
    status: ValidatorStatus = ValidatorStatus.ACTIVE

    def __post_init__(self):
        object.__setattr__(self, 'address', normalize_address(self.address))
        if self.delegated_stake is None:
            object.__setattr__(self, 'delegated_stake', 0)
        if not isinstance(self.status, ValidatorStatus):
            object.__setattr__(self, 'status', ValidatorStatus(self.status))

    @property
    def is_active(self) -> bool:
        return self.status == ValidatorStatus.ACTIVE

    @property
    def is_jailed(self) -> bool:
        return self.status == ValidatorStatus.JAILED

    def percent(self, name: str) -> Decimal:
        """A scaled field as a percentage (950 -> 9.5)."""
        if name not in SCALED_FIELDS:
            raise KeyError(name)
        return Decimal(getattr(self, name)) / PERCENT_SCALE

    def fraction(self, name: str) -> Decimal:
        """A scaled field as a decimal fraction (950 -> 0.095)."""
        if name not in SCALED_FIELDS:
            raise KeyError(name)
        return Decimal(getattr(self, name)) / FRACTION_SCALE

    @property
    def block_success_rate(self) -> Decimal:
        """Share of assigned blocks actually produced; 0 with no history."""
        if self.total_blocks <= 0:
            return Decimal("0")
        produced = max(0, self.total_blocks - self.missed_blocks)
        return Decimal(produced) / Decimal(self.total_blocks)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'ValidatorRecord':
        """
        Create from a registry payload.

        Accepts both the registry's camelCase keys and snake_case keys.
        Stake values are kept as supplied and validated later by the ranker.

        Raises:
            InvalidValidatorRecord: missing/invalid address, bad counters or status.
        """
        if not isinstance(data, Mapping):
            raise InvalidValidatorRecord(f"Validator payload must be an object, got {type(data).__name__}")

        normalized = {_PAYLOAD_KEYS.get(k, k): v for k, v in data.items()}

        address = normalized.get('address')
        if not isinstance(address, str) or not VALID_ADDRESS_PATTERN.match(address.strip()):
            raise InvalidValidatorRecord(f"Invalid validator address: {address!r}")

        status_raw = normalized.get('status', ValidatorStatus.ACTIVE.value)
        try:
            status = ValidatorStatus(str(status_raw).lower())
        except ValueError:
            raise InvalidValidatorRecord(f"Unknown validator status: {status_raw!r}") from None

        stake = normalized.get('stake', 0)
        delegated = normalized.get('delegated_stake')

        return cls(
            address=address,
            name=str(normalized.get('name') or ""),
            stake=stake,
            delegated_stake=0 if delegated is None else delegated,
            status=status,
            **{name: _read_int(normalized, name) for name in SCALED_FIELDS + COUNTER_FIELDS},
        )

    def to_dict(self) -> dict:
        """Serialize with the registry's camelCase keys."""
        reverse = {v: k for k, v in _PAYLOAD_KEYS.items()}
        result = {}
        for f in fields(ValidatorRecord):
            value = getattr(self, f.name)
            if f.name in ('stake', 'delegated_stake'):
                value = str(value)
            elif f.name == 'status':
                value = value.value
            result[reverse.get(f.name, f.name)] = value
        return result


@dataclass(frozen=True)
class RankedValidator(ValidatorRecord):
    """
    A validator after one ranking cycle.

    `stake` and `delegated_stake` are parsed integers here. `voting_power` is
    exact; `voting_power_tokens` is its exact Decimal value in whole tokens.
    """
    voting_power: int = 0
    tier: TierKey = TierKey.COMMUNITY
    rank: int = 0

    @property
    def voting_power_tokens(self) -> Decimal:
        return to_tokens(self.voting_power)

    @property
    def stake_tokens(self) -> Decimal:
        return to_tokens(self.stake)

    @property
    def delegated_stake_tokens(self) -> Decimal:
        return to_tokens(self.delegated_stake)

    def to_dict(self) -> dict:
        result = super().to_dict()
        result.update({
            'votingPower': str(self.voting_power),
            'votingPowerTokens': str(self.voting_power_tokens),
            'tier': self.tier.value,
            'rank': self.rank,
        })
        return result


@dataclass(frozen=True)
class Ranking:
    """
    Result of one ranking cycle.

    Attributes:
        validators: Ranked validators, highest voting power first
        committee: Addresses of the top-N validators
        committee_order: The same addresses in rank order
        excluded: (address, reason) for records rejected with InvalidAmount
    """
    validators: Tuple[RankedValidator, ...] = ()
    committee: FrozenSet[str] = frozenset()
    committee_order: Tuple[str, ...] = ()
    excluded: Tuple[Tuple[str, str], ...] = ()
    _index: Dict[str, RankedValidator] = field(default=None, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, '_index', {v.address: v for v in self.validators})

    def __len__(self) -> int:
        return len(self.validators)

    def __iter__(self):
        return iter(self.validators)

    def get(self, address: str) -> Optional[RankedValidator]:
        """Get ranked validator by address."""
        return self._index.get(normalize_address(address))

    def is_committee_member(self, address: str) -> bool:
        return normalize_address(address) in self.committee

    @property
    def committee_members(self) -> Tuple[RankedValidator, ...]:
        return tuple(self._index[a] for a in self.committee_order)

    @property
    def total_voting_power(self) -> int:
        return sum(v.voting_power for v in self.validators)

    @property
    def committee_voting_power(self) -> int:
        return sum(v.voting_power for v in self.committee_members)

    def voting_power_share(self, address: str) -> Decimal:
        """Share of total voting power held by a validator; 0 if unknown or empty."""
        validator = self.get(address)
        total = self.total_voting_power
        if validator is None or total == 0:
            return Decimal("0")
        return Decimal(validator.voting_power) / Decimal(total)

    def by_tier(self, tier: TierKey) -> Tuple[RankedValidator, ...]:
        return tuple(v for v in self.validators if v.tier == tier)

    def to_dict(self) -> dict:
        return {
            'validators': [v.to_dict() for v in self.validators],
            'committee': list(self.committee_order),
            'excluded': [{'address': a, 'reason': r} for a, r in self.excluded],
            'totalVotingPower': str(self.total_voting_power),
        }
