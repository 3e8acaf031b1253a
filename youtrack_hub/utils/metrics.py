from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any

from youtrack_hub.core.constants import DEFAULT_RESOLVED_STATE, DEFAULT_STATE_FIELD, NOT_RESOLVED
from youtrack_hub.core.exceptions.domain import ValidationError
from youtrack_hub.schemas.youtrack.activity import HistoryEvent, StateTransition
from youtrack_hub.schemas.youtrack.issue import Issue
from youtrack_hub.services.history import get_resolved_timestamp, timestamp_to_datetime

MILLIS_PER_HOUR = 3_600_000

BASE_COLUMNS = ("id", "summary", "reporter")
RESOLUTION_COLUMNS = ("resolved_timestamp", "resolved_at")
RESERVED_COLUMNS = frozenset(BASE_COLUMNS + RESOLUTION_COLUMNS)


def check_report_columns(columns: Sequence[str]) -> None:
    """Reject custom-field columns that would overwrite the built-in report columns."""
    clashes = sorted(RESERVED_COLUMNS.intersection(columns))
    if clashes:
        raise ValidationError(
            f"Custom field columns clash with report columns: {', '.join(clashes)}"
        )


def build_report_row(
    issue: Issue,
    history: Sequence[HistoryEvent],
    columns: Sequence[str],
    *,
    field_name: str = DEFAULT_STATE_FIELD,
    resolved_state: str = DEFAULT_RESOLVED_STATE,
) -> dict[str, Any]:
    """Flatten an issue into a report row.

    Custom-field columns missing from the issue are left empty.
    """
    check_report_columns(columns)
    fields = issue.parse_custom_fields()
    resolved_ts = issue.get_resolved_timestamp(
        history, field_name=field_name, resolved_state=resolved_state
    )

    row: dict[str, Any] = {
        "id": issue.idReadable or issue.id,
        "summary": issue.summary,
        "reporter": issue.reporter.fullName if issue.reporter else "",
    }
    for column in columns:
        row[column] = fields.find_or_empty(column)

    row["resolved_timestamp"] = resolved_ts
    row["resolved_at"] = timestamp_to_datetime(resolved_ts) if resolved_ts != NOT_RESOLVED else None
    return row


def get_resolved_issues(
    issues: Sequence[Issue],
    histories: Mapping[str, Sequence[HistoryEvent]],
    *,
    field_name: str = DEFAULT_STATE_FIELD,
    resolved_state: str = DEFAULT_RESOLVED_STATE,
) -> list[Issue]:
    """Filter issues whose history contains a resolution.

    ``histories`` maps readable issue id to that issue's activity, oldest-first.
    """
    return [
        issue
        for issue in issues
        if get_resolved_timestamp(
            histories.get(issue.idReadable, []),
            field_name=field_name,
            resolved_state=resolved_state,
        )
        != NOT_RESOLVED
    ]


def calculate_resolution_hours(
    issue: Issue,
    history: Sequence[HistoryEvent],
    *,
    field_name: str = DEFAULT_STATE_FIELD,
    resolved_state: str = DEFAULT_RESOLVED_STATE,
) -> float | None:
    """Hours from creation to the latest resolution.

    Returns None if the issue has no creation time or was never resolved.
    """
    resolved_ts = get_resolved_timestamp(
        history, field_name=field_name, resolved_state=resolved_state
    )
    if issue.created is None or resolved_ts == NOT_RESOLVED:
        return None
    return (resolved_ts - issue.created) / MILLIS_PER_HOUR


def calculate_time_in_state(
    transitions: Sequence[StateTransition],
    *,
    now: datetime | None = None,
) -> dict[str, float]:
    """Calculate total time (in hours) spent in each state.

    The last state is counted up to ``now`` when given, and ignored otherwise.
    """
    time_in_state: dict[str, float] = {}

    for current, next_t in zip(transitions, transitions[1:]):
        hours = (next_t.timestamp - current.timestamp) / MILLIS_PER_HOUR
        time_in_state[current.to_state] = time_in_state.get(current.to_state, 0) + hours

    if now is not None and transitions:
        last = transitions[-1]
        hours = (now.timestamp() * 1000 - last.timestamp) / MILLIS_PER_HOUR
        time_in_state[last.to_state] = time_in_state.get(last.to_state, 0) + hours

    return time_in_state
