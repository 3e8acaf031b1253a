from youtrack_hub.core.constants import NOT_RESOLVED
from youtrack_hub.schemas.youtrack.activity import HistoryEvent, HistoryUser
from youtrack_hub.schemas.youtrack.custom_field import RawCustomField
from youtrack_hub.schemas.youtrack.issue import Issue
from youtrack_hub.services.history import get_resolved_timestamp

ISSUE_PAYLOAD = {
    "id": "2-17",
    "idReadable": "PROJ-17",
    "summary": "Login page crashes",
    "description": None,
    "reporter": {"fullName": "Jane Doe", "$type": "User"},
    "created": 1672531200000,
    "customFields": [
        {
            "name": "Priority",
            "$type": "SingleEnumIssueCustomField",
            "value": {"name": "Critical", "$type": "EnumBundleElement"},
        },
        {
            "name": "Assignee",
            "$type": "SingleUserIssueCustomField",
            "value": {"fullName": "John Roe", "$type": "User"},
        },
        {"name": "Spent time", "$type": "PeriodIssueCustomField", "value": None},
    ],
    "$type": "Issue",
}


def test_issue_keeps_custom_field_values_raw():
    issue = Issue.model_validate(ISSUE_PAYLOAD)

    assert issue.idReadable == "PROJ-17"
    assert issue.reporter.fullName == "Jane Doe"
    assert issue.customFields[0] == RawCustomField(
        name="Priority",
        type="SingleEnumIssueCustomField",
        value={"name": "Critical", "$type": "EnumBundleElement"},
    )
    assert issue.customFields[1].value == {"fullName": "John Roe", "$type": "User"}


def test_issue_parse_custom_fields():
    issue = Issue.model_validate(ISSUE_PAYLOAD)

    fields = issue.parse_custom_fields()

    assert [(f.name, f.value) for f in fields] == [("Priority", "Critical"), ("Spent time", "")]
    assert issue.customFields[0].value == {"name": "Critical", "$type": "EnumBundleElement"}


def test_history_event_structured():
    event = HistoryEvent.model_validate(
        {
            "timestamp": 1672531200000,
            "field": {"id": "123", "name": "State", "$type": "CustomFilterField"},
            "added": [{"name": "Available", "$type": "StateBundleElement"}],
            "removed": [{"name": "Open", "$type": "StateBundleElement"}],
            "author": {"name": "Jane Doe", "login": "jane", "$type": "User"},
            "$type": "CustomFieldActivityItem",
        }
    )

    assert event.field_name == "State"
    assert event.added == [HistoryUser(name="Available", type="StateBundleElement")]
    assert event.removed[0].name == "Open"
    assert event.author.login == "jane"


def test_history_event_tolerates_text_field_activity():
    event = HistoryEvent.model_validate(
        {
            "timestamp": 10,
            "field": {"name": "Description"},
            "added": "new text",
            "removed": "old text",
        }
    )

    assert event.added == []
    assert event.removed == []


def test_history_event_tolerates_missing_and_null_entities():
    event = HistoryEvent.model_validate({"timestamp": 10, "added": None})

    assert event.added == []
    assert event.removed == []
    assert event.field_name == ""
    assert event.author is None


def test_history_event_keeps_position_of_null_entities():
    event = HistoryEvent.model_validate(
        {
            "timestamp": 100,
            "field": {"name": "State"},
            "added": [None, {"name": "Available"}],
        }
    )

    assert event.added == [HistoryUser(), HistoryUser(name="Available")]
    assert get_resolved_timestamp([event]) == NOT_RESOLVED


def test_history_event_tolerates_null_field_name():
    event = HistoryEvent.model_validate(
        {"timestamp": 10, "field": {"name": None}, "added": [{"name": "Available"}]}
    )

    assert event.field_name == ""
    assert get_resolved_timestamp([event]) == NOT_RESOLVED
