from collections.abc import Sequence
from datetime import UTC, datetime

from youtrack_hub.core.constants import DEFAULT_RESOLVED_STATE, DEFAULT_STATE_FIELD, NOT_RESOLVED
from youtrack_hub.schemas.youtrack.activity import HistoryEvent, StateTransition


def get_resolved_timestamp(
    history: Sequence[HistoryEvent],
    *,
    field_name: str = DEFAULT_STATE_FIELD,
    resolved_state: str = DEFAULT_RESOLVED_STATE,
) -> int:
    """Return the timestamp of the most recent transition into the resolved state.

    ``history`` is expected oldest-first. It is walked backwards so that an issue
    resolved, reopened and resolved again reports its latest resolution.
    Returns ``NOT_RESOLVED`` (-1) when no such event exists.
    """
    for event in reversed(history):
        if event.field_name == field_name and event.added and event.added[0].name == resolved_state:
            return event.timestamp
    return NOT_RESOLVED


def get_state_transitions(
    history: Sequence[HistoryEvent],
    *,
    field_name: str = DEFAULT_STATE_FIELD,
) -> list[StateTransition]:
    """Extract State changes, oldest-first (for time-in-state analysis)."""
    transitions: list[StateTransition] = []

    for event in history:
        if event.field_name != field_name or not event.added:
            continue
        to_state = event.added[0].name
        if not to_state:
            continue
        from_state = event.removed[0].name if event.removed else None
        transitions.append(
            StateTransition(from_state=from_state, to_state=to_state, timestamp=event.timestamp)
        )

    return transitions


def timestamp_to_datetime(timestamp: int) -> datetime:
    """Convert an epoch-millis timestamp to an aware UTC datetime."""
    return datetime.fromtimestamp(timestamp / 1000, tz=UTC)
