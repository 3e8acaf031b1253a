from collections.abc import Mapping, Sequence

import pandas as pd

from youtrack_hub.core.constants import DEFAULT_RESOLVED_STATE, DEFAULT_STATE_FIELD
from youtrack_hub.schemas.youtrack.activity import HistoryEvent
from youtrack_hub.schemas.youtrack.issue import Issue
from youtrack_hub.utils.metrics import (
    BASE_COLUMNS,
    RESOLUTION_COLUMNS,
    build_report_row,
    check_report_columns,
)


def issues_to_dataframe(
    issues: Sequence[Issue],
    histories: Mapping[str, Sequence[HistoryEvent]],
    columns: Sequence[str],
    *,
    field_name: str = DEFAULT_STATE_FIELD,
    resolved_state: str = DEFAULT_RESOLVED_STATE,
) -> pd.DataFrame:
    """One row per issue with the requested custom-field columns and resolution time."""
    check_report_columns(columns)
    rows = [
        build_report_row(
            issue,
            histories.get(issue.idReadable, []),
            columns,
            field_name=field_name,
            resolved_state=resolved_state,
        )
        for issue in issues
    ]
    return pd.DataFrame(rows, columns=[*BASE_COLUMNS, *columns, *RESOLUTION_COLUMNS])
