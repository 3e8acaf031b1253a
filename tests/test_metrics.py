from datetime import UTC, datetime

import pytest

from youtrack_hub.core.exceptions.domain import ValidationError
from youtrack_hub.schemas.youtrack.activity import StateTransition
from youtrack_hub.schemas.youtrack.issue import Issue
from youtrack_hub.utils.export import issues_to_dataframe
from youtrack_hub.utils.metrics import (
    build_report_row,
    calculate_resolution_hours,
    calculate_time_in_state,
    get_resolved_issues,
)

from tests.factories import history_event

HOUR = 3_600_000


def _issue(id_readable: str, *, created: int | None = None) -> Issue:
    return Issue.model_validate(
        {
            "id": f"2-{id_readable}",
            "idReadable": id_readable,
            "summary": f"Summary of {id_readable}",
            "reporter": {"fullName": "Jane Doe"},
            "created": created,
            "customFields": [
                {"name": "Priority", "$type": "SingleEnumIssueCustomField", "value": {"name": "High"}},
                {"name": "Assignee", "$type": "SingleUserIssueCustomField", "value": {"login": "j"}},
            ],
        }
    )


def test_build_report_row_resolved():
    row = build_report_row(
        _issue("PROJ-1"),
        [history_event(1672531200000, "State", ["Available"])],
        ["Priority", "Assignee"],
    )

    assert row == {
        "id": "PROJ-1",
        "summary": "Summary of PROJ-1",
        "reporter": "Jane Doe",
        "Priority": "High",
        "Assignee": "",
        "resolved_timestamp": 1672531200000,
        "resolved_at": datetime(2023, 1, 1, tzinfo=UTC),
    }


def test_build_report_row_unresolved():
    row = build_report_row(_issue("PROJ-2"), [], ["Priority"])

    assert row["resolved_timestamp"] == -1
    assert row["resolved_at"] is None


def test_get_resolved_issues():
    issues = [_issue("PROJ-1"), _issue("PROJ-2"), _issue("PROJ-3")]
    histories = {
        "PROJ-1": [history_event(100, "State", ["Available"])],
        "PROJ-2": [history_event(100, "State", ["Open"])],
    }

    resolved = get_resolved_issues(issues, histories)

    assert [i.idReadable for i in resolved] == ["PROJ-1"]


def test_calculate_resolution_hours():
    issue = _issue("PROJ-1", created=0)
    history = [
        history_event(2 * HOUR, "State", ["Available"]),
        history_event(3 * HOUR, "State", ["Open"]),
        history_event(5 * HOUR, "State", ["Available"]),
    ]

    assert calculate_resolution_hours(issue, history) == 5.0


def test_calculate_resolution_hours_missing_data():
    resolved = [history_event(HOUR, "State", ["Available"])]

    assert calculate_resolution_hours(_issue("PROJ-1"), resolved) is None
    assert calculate_resolution_hours(_issue("PROJ-1", created=0), []) is None


def test_calculate_time_in_state():
    transitions = [
        StateTransition(from_state="Open", to_state="In Progress", timestamp=0),
        StateTransition(from_state="In Progress", to_state="Open", timestamp=2 * HOUR),
        StateTransition(from_state="Open", to_state="In Progress", timestamp=3 * HOUR),
        StateTransition(from_state="In Progress", to_state="Available", timestamp=4 * HOUR),
    ]

    assert calculate_time_in_state(transitions) == {"In Progress": 3.0, "Open": 1.0}


def test_calculate_time_in_state_until_now():
    transitions = [StateTransition(from_state=None, to_state="Open", timestamp=0)]
    now = datetime.fromtimestamp(6 * 3600, tz=UTC)

    assert calculate_time_in_state(transitions, now=now) == {"Open": 6.0}
    assert calculate_time_in_state(transitions) == {}


def test_issues_to_dataframe():
    issues = [_issue("PROJ-1"), _issue("PROJ-2")]
    histories = {"PROJ-1": [history_event(1672531200000, "State", ["Available"])]}

    df = issues_to_dataframe(issues, histories, ["Priority"])

    assert list(df.columns) == [
        "id",
        "summary",
        "reporter",
        "Priority",
        "resolved_timestamp",
        "resolved_at",
    ]
    assert df["id"].tolist() == ["PROJ-1", "PROJ-2"]
    assert df["resolved_timestamp"].tolist() == [1672531200000, -1]


def test_issues_to_dataframe_empty():
    df = issues_to_dataframe([], {}, ["Priority"])

    assert df.empty
    assert "Priority" in df.columns


def test_report_uses_configured_state_names():
    issues = [_issue("PROJ-1", created=0), _issue("PROJ-2")]
    histories = {
        "PROJ-1": [history_event(HOUR, "State", ["Done"])],
        "PROJ-2": [history_event(HOUR, "State", ["Available"])],
    }
    states = {"field_name": "State", "resolved_state": "Done"}

    row = build_report_row(issues[0], histories["PROJ-1"], ["Priority"], **states)
    df = issues_to_dataframe(issues, histories, ["Priority"], **states)

    assert row["resolved_timestamp"] == HOUR
    assert [i.idReadable for i in get_resolved_issues(issues, histories, **states)] == ["PROJ-1"]
    assert calculate_resolution_hours(issues[0], histories["PROJ-1"], **states) == 1.0
    assert df["resolved_timestamp"].tolist() == [HOUR, -1]


@pytest.mark.parametrize("column", ["id", "summary", "reporter", "resolved_timestamp", "resolved_at"])
def test_custom_columns_cannot_shadow_report_columns(column):
    with pytest.raises(ValidationError, match=column):
        build_report_row(_issue("PROJ-1"), [], ["Priority", column])
    with pytest.raises(ValidationError, match=column):
        issues_to_dataframe([], {}, [column])
