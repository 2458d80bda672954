"""
TBURN Live Update Reducer

Folds push-feed events into the current validator set and re-runs the ranking
pipeline. The reducer always holds a last-good snapshot: malformed events are
logged and dropped without touching it.

States:
    IDLE         waiting for the next event
    RECOMPUTING  re-ranking the merged record set

Recomputation is serialized by a single lock and the snapshot is replaced in
one assignment, so readers never observe a partially applied update.
"""

import threading
import time
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from ..constants import COMMITTEE_SIZE, MAX_ACTIVITY_LOG_SIZE
from ..exceptions import InvalidValidatorRecord, MalformedEvent, TBURNException
from ..logger import get_logger
from ..validator.ranking import VotingPowerRanker
from ..validator.types import Ranking, ValidatorRecord
from .events import EventType, LiveEvent, parse_event

logger = get_logger(__name__)

SnapshotListener = Callable[["Snapshot"], Any]


class ReducerState(str, Enum):
    IDLE = "idle"
    RECOMPUTING = "recomputing"


@dataclass(frozen=True)
class Snapshot:
    """
    Immutable view published after each accepted update.

    Attributes:
        version: Incremented whenever the record set changes
        records: Current validator records, keyed by address
        ranking: Ranking computed from `records`
        updated_at: Time the snapshot was produced
    """
    version: int = 0
    records: Tuple[ValidatorRecord, ...] = ()
    ranking: Ranking = field(default_factory=Ranking)
    updated_at: float = field(default_factory=time.time, compare=False)

    @property
    def committee(self):
        return self.ranking.committee


def _to_record(payload: Union[ValidatorRecord, Mapping]) -> ValidatorRecord:
    if isinstance(payload, ValidatorRecord):
        return payload
    return ValidatorRecord.from_dict(payload)


class LiveUpdateReducer:
    """
    Applies live events to a validator set and keeps the ranking current.
    """

    def __init__(
        self,
        ranker: Optional[VotingPowerRanker] = None,
        committee_size: int = COMMITTEE_SIZE,
        activity_log_size: int = MAX_ACTIVITY_LOG_SIZE,
    ):
        """
        Args:
            ranker: Ranker to use (defaults to a VotingPowerRanker)
            committee_size: Committee size for the default ranker
            activity_log_size: Voting activity entries retained
        """
        self.ranker = ranker or VotingPowerRanker(committee_size)
        self._lock = threading.Lock()
        self._stats_lock = threading.Lock()
        self._state = ReducerState.IDLE
        self._snapshot = Snapshot()
        self._activity: deque = deque(maxlen=activity_log_size)
        self._listeners: List[SnapshotListener] = []
        self._dispatch_lock = threading.Lock()
        self._dispatching = False
        self._pending: Optional[Snapshot] = None
        self._delivered_version = 0

        # Stats
        self.events_received: int = 0
        self.events_applied: int = 0
        self.events_dropped: int = 0
        self.recomputations: int = 0

    # -- Read side ----------------------------------------------------------

    @property
    def state(self) -> ReducerState:
        return self._state

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    @property
    def ranking(self) -> Ranking:
        return self._snapshot.ranking

    @property
    def version(self) -> int:
        return self._snapshot.version

    @property
    def activity(self) -> Tuple[Dict[str, Any], ...]:
        """Most recent voting activity entries, oldest first."""
        with self._lock:
            return tuple(self._activity)

    def subscribe(self, callback: SnapshotListener) -> Callable[[], None]:
        """
        Register a listener called with each new snapshot.

        Returns:
            Callable that removes the listener
        """
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    # -- Write side ---------------------------------------------------------

    def load_snapshot(self, records: Iterable[Union[ValidatorRecord, Mapping]]) -> Snapshot:
        """
        Replace the validator set from a full registry snapshot.

        Payloads that fail validation are skipped with a warning.

        Raises:
            DuplicateValidator: if two records share an address
        """
        parsed: List[ValidatorRecord] = []
        for payload in records:
            try:
                parsed.append(_to_record(payload))
            except InvalidValidatorRecord as e:
                logger.warning(f"Skipping invalid validator payload: {e}")

        with self._lock:
            snapshot = self._recompute(parsed)
        self._notify(snapshot)
        return snapshot

    def apply(self, raw_event: Union[str, bytes, Mapping]) -> bool:
        """
        Apply one live event.

        Returns:
            True if the event was accepted, False if it was dropped
        """
        self._count('events_received')
        try:
            event = parse_event(raw_event)
            changed = self._apply_event(event)
        except MalformedEvent as e:
            self._count('events_dropped')
            logger.warning(f"Dropped live event: {e}")
            return False

        self._count('events_applied')
        if changed is not None:
            self._notify(changed)
        return True

    def _count(self, name: str) -> None:
        with self._stats_lock:
            setattr(self, name, getattr(self, name) + 1)

    def _apply_event(self, event: LiveEvent) -> Optional[Snapshot]:
        if event.type == EventType.VOTING_ACTIVITY:
            with self._lock:
                self._activity.extend(event.activity)
            logger.debug(f"voting_activity: {len(event.activity)} entries")
            return None

        try:
            updates = [_to_record(payload) for payload in event.validators]
        except InvalidValidatorRecord as e:
            raise MalformedEvent(f"validators_update rejected: {e}") from None

        addresses = [r.address for r in updates]
        if len(set(addresses)) != len(addresses):
            raise MalformedEvent("validators_update contains duplicate addresses")

        with self._lock:
            if event.replace:
                merged = updates
            else:
                merged = self._merge(event, updates)
            if tuple(merged) == self._snapshot.records:
                logger.debug("validators_update: no changes")
                return None
            try:
                snapshot = self._recompute(merged)
            except TBURNException as e:
                raise MalformedEvent(f"validators_update rejected: {e}") from None

        logger.info(
            f"validators_update applied: {len(updates)} records "
            f"(version {snapshot.version}, validators {len(snapshot.ranking)})"
        )
        return snapshot

    def _merge(self, event: LiveEvent, updates: List[ValidatorRecord]) -> List[ValidatorRecord]:
        """Field-level merge of partial payloads onto the current records."""
        current = {r.address: r for r in self._snapshot.records}
        for payload, record in zip(event.validators, updates):
            existing = current.get(record.address)
            if existing is None:
                current[record.address] = record
                continue
            try:
                current[record.address] = ValidatorRecord.from_dict({**existing.to_dict(), **payload})
            except InvalidValidatorRecord as e:
                raise MalformedEvent(f"validators_update rejected: {e}") from None
        return list(current.values())

    def _recompute(self, records: List[ValidatorRecord]) -> Snapshot:
        # Caller holds self._lock
        self._state = ReducerState.RECOMPUTING
        try:
            ranking = self.ranker.rank(records)
        finally:
            self._state = ReducerState.IDLE
        self.recomputations += 1
        snapshot = Snapshot(
            version=self._snapshot.version + 1,
            records=tuple(records),
            ranking=ranking,
        )
        self._snapshot = snapshot
        return snapshot

    def _notify(self, snapshot: Snapshot) -> None:
        """
        Deliver snapshots to listeners in version order.

        One thread dispatches at a time. A concurrent caller only posts its
        snapshot and returns; the active dispatcher delivers the newest pending
        snapshot once its current round finishes. Snapshots older than the
        last delivered version are skipped.
        """
        with self._dispatch_lock:
            if self._pending is None or snapshot.version > self._pending.version:
                self._pending = snapshot
            if self._dispatching:
                return
            self._dispatching = True

        while True:
            with self._dispatch_lock:
                snapshot, self._pending = self._pending, None
                if snapshot is None:
                    self._dispatching = False
                    return
                if snapshot.version <= self._delivered_version:
                    continue
                self._delivered_version = snapshot.version
            for callback in list(self._listeners):
                try:
                    callback(snapshot)
                except Exception:
                    logger.exception(f"Snapshot listener {callback!r} failed")

    # -- Diagnostics --------------------------------------------------------

    def stats(self) -> Dict[str, Any]:
        """Return reducer statistics."""
        return {
            "state": self._state.value,
            "version": self.version,
            "validators": len(self._snapshot.ranking),
            "committee": len(self._snapshot.ranking.committee),
            "excluded": len(self._snapshot.ranking.excluded),
            "activity_entries": len(self._activity),
            "listeners": len(self._listeners),
            "events_received": self.events_received,
            "events_applied": self.events_applied,
            "events_dropped": self.events_dropped,
            "recomputations": self.recomputations,
        }
