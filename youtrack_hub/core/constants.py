from enum import StrEnum

# Returned by the history scanner when no resolution event exists.
NOT_RESOLVED = -1

DEFAULT_STATE_FIELD = "State"
DEFAULT_RESOLVED_STATE = "Available"


class CustomFieldType(StrEnum):
    """`$type` discriminators of the custom-field variants we know how to decode."""

    TEXT = "TextIssueCustomField"
    SINGLE_ENUM = "SingleEnumIssueCustomField"
    SINGLE_VERSION = "SingleVersionIssueCustomField"
    STATE_MACHINE = "StateMachineIssueCustomField"
    SIMPLE = "SimpleIssueCustomField"
    DATE = "DateIssueCustomField"
    PERIOD = "PeriodIssueCustomField"


class ActivityCategory(StrEnum):
    CUSTOM_FIELD = "CustomFieldCategory"


class FieldQueries:
    """`fields=` projections sent to the REST API."""

    ISSUE = (
        "id,description,summary,idReadable,created,updated,resolved,"
        "reporter(fullName),updater(fullName),"
        "customFields(name,value(name,text,presentation,fullName,color(background,foreground)))"
    )
    ACTIVITY = (
        "author(name,login),timestamp,added(name,login),removed(name,login),field(id,name,text)"
    )
    ISSUE_RESULT = "id,numberInProject"
    ID = "id"
