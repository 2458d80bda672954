"""
TBURN Live Updates

Folds push-feed events into the validator set and keeps the ranking current.

Usage:
    from tburn.live import LiveUpdateReducer

    reducer = LiveUpdateReducer()
    reducer.load_snapshot(records)
    reducer.apply('{"type": "validators_update", "data": [...]}')
"""

from .events import EventType, LiveEvent, parse_event
from .reducer import LiveUpdateReducer, ReducerState, Snapshot

__all__ = [
    'EventType',
    'LiveEvent',
    'parse_event',
    'LiveUpdateReducer',
    'ReducerState',
    'Snapshot',
]
