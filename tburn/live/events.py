"""
TBURN Live Update Events

Parsing of push-feed messages of the form ``{"type": ..., "data": ...}``
delivered either as decoded objects or as JSON text. The transport itself is
external; this module only validates and normalizes payloads.
"""

import json
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Tuple, Union

from ..exceptions import MalformedEvent


class EventType(str, Enum):
    """Supported live update channels."""
    VALIDATORS_UPDATE = "validators_update"
    VOTING_ACTIVITY = "voting_activity"


@dataclass(frozen=True)
class LiveEvent:
    """
    A parsed live update.

    Attributes:
        type: Event channel
        validators: Validator payloads (validators_update only)
        replace: Whether the payloads replace the full record set
        activity: Activity entries (voting_activity only)
        received_at: Local receive time
    """
    type: EventType
    validators: Tuple[Dict[str, Any], ...] = ()
    replace: bool = False
    activity: Tuple[Dict[str, Any], ...] = ()
    received_at: float = field(default_factory=time.time, compare=False)


def _decode(raw: Union[str, bytes, Mapping]) -> Mapping:
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError:
            raise MalformedEvent("Event is not valid UTF-8") from None
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            raise MalformedEvent(f"Event is not valid JSON: {e.msg}") from None
    if not isinstance(raw, Mapping):
        raise MalformedEvent(f"Event must be an object, got {type(raw).__name__}")
    return raw


def _objects(items: Any, what: str) -> Tuple[Dict[str, Any], ...]:
    if not isinstance(items, (list, tuple)):
        raise MalformedEvent(f"{what} must be a list, got {type(items).__name__}")
    for item in items:
        if not isinstance(item, Mapping):
            raise MalformedEvent(f"{what} entries must be objects, got {type(item).__name__}")
    return tuple(dict(item) for item in items)


def parse_event(raw: Union[str, bytes, Mapping]) -> LiveEvent:
    """
    Parse and validate a live update message.

    ``validators_update`` data is either a list of validator payloads (merged
    into the current set by address) or ``{"validators": [...], "replace": bool}``.
    ``voting_activity`` data is one activity object or a list of them.

    Raises:
        MalformedEvent: bad JSON, unknown type or malformed data
    """
    message = _decode(raw)

    type_raw = message.get("type")
    try:
        event_type = EventType(type_raw)
    except ValueError:
        raise MalformedEvent(f"Unknown event type: {type_raw!r}") from None

    if "data" not in message:
        raise MalformedEvent(f"{event_type.value} event has no data")
    data = message["data"]

    if event_type == EventType.VALIDATORS_UPDATE:
        replace = False
        if isinstance(data, Mapping):
            replace = data.get("replace", False)
            if not isinstance(replace, bool):
                raise MalformedEvent(f"replace must be a boolean, got {replace!r}")
            data = data.get("validators")
        return LiveEvent(
            type=event_type,
            validators=_objects(data, "validators"),
            replace=replace,
        )

    if isinstance(data, Mapping):
        data = [data]
    return LiveEvent(type=event_type, activity=_objects(data, "voting activity"))
