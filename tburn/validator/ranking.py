"""
TBURN Voting Power Ranking

Orders validators by voting power (self-stake plus delegated stake) and
derives the governing committee from the top of the ranking.

Ordering properties:
- Voting power is summed with exact integers, so validators that differ by a
  single base unit are still distinguished.
- Ties are broken by ascending address, giving a total order that is
  reproducible across runs and processes.
- The committee is a pure read of the current ranking; it carries no term or
  rotation state.
"""

from dataclasses import replace
from typing import Iterable, List, Mapping, Set, Tuple, Union

from ..constants import COMMITTEE_SIZE
from ..exceptions import DuplicateValidator, InvalidAmount, InvalidValidatorRecord
from ..logger import get_logger
from .stake import parse_amount
from .tiers import classify_stake
from .types import RankedValidator, Ranking, ValidatorRecord

logger = get_logger(__name__)


class VotingPowerRanker:
    """
    Ranks validators by voting power and selects the top-N committee.
    """

    def __init__(self, committee_size: int = COMMITTEE_SIZE):
        """
        Initialize ranker.

        Args:
            committee_size: Number of top-ranked validators in the committee
        """
        if committee_size < 0:
            raise ValueError("committee_size must be non-negative")
        self.committee_size = committee_size

    def rank(self, records: Iterable[Union[ValidatorRecord, Mapping]]) -> Ranking:
        """
        Rank a snapshot of validator records.

        Records whose stake cannot be parsed are excluded and reported in
        `Ranking.excluded`; the rest of the ranking still completes.

        Args:
            records: Validator records (or registry payload dicts)

        Returns:
            Immutable ranking with committee

        Raises:
            DuplicateValidator: if two records share an address
        """
        seen: Set[str] = set()
        scored: List[RankedValidator] = []
        excluded: List[Tuple[str, str]] = []

        for record in records:
            if not isinstance(record, ValidatorRecord):
                try:
                    record = ValidatorRecord.from_dict(record)
                except InvalidValidatorRecord as e:
                    address = record.get('address') if isinstance(record, Mapping) else None
                    logger.warning(f"Excluding malformed validator payload: {e}")
                    excluded.append((str(address or ""), str(e)))
                    continue

            if record.address in seen:
                raise DuplicateValidator(record.address)
            seen.add(record.address)

            try:
                scored.append(self._score(record))
            except InvalidAmount as e:
                logger.warning(f"Excluding validator {record.address} from ranking: {e}")
                excluded.append((record.address, str(e)))

        scored.sort(key=lambda v: (-v.voting_power, v.address))

        validators = tuple(
            replace(v, rank=position) for position, v in enumerate(scored, start=1)
        )
        committee_order = tuple(v.address for v in validators[:self.committee_size])

        logger.debug(
            f"Ranked {len(validators)} validators "
            f"(committee: {len(committee_order)}, excluded: {len(excluded)})"
        )

        return Ranking(
            validators=validators,
            committee=frozenset(committee_order),
            committee_order=committee_order,
            excluded=tuple(excluded),
        )

    @staticmethod
    def _score(record: ValidatorRecord) -> RankedValidator:
        stake = parse_amount(record.stake)
        delegated = parse_amount(record.delegated_stake)
        return RankedValidator(
            address=record.address,
            name=record.name,
            stake=stake,
            delegated_stake=delegated,
            commission=record.commission,
            apy=record.apy,
            uptime=record.uptime,
            ai_trust_score=record.ai_trust_score,
            reputation_score=record.reputation_score,
            performance_score=record.performance_score,
            behavior_score=record.behavior_score,
            total_blocks=record.total_blocks,
            missed_blocks=record.missed_blocks,
            delegators=record.delegators,
            status=record.status,
            voting_power=stake + delegated,
            # Tier is driven by direct stake only
            tier=classify_stake(stake),
        )


def rank_validators(
    records: Iterable[Union[ValidatorRecord, Mapping]],
    committee_size: int = COMMITTEE_SIZE,
) -> Ranking:
    """Convenience wrapper around `VotingPowerRanker.rank`."""
    return VotingPowerRanker(committee_size).rank(records)
