from __future__ import annotations

from collections.abc import Sequence

from pydantic import BaseModel, ConfigDict, Field

from youtrack_hub.core.constants import DEFAULT_RESOLVED_STATE, DEFAULT_STATE_FIELD
from youtrack_hub.schemas.base import YouTrackSchema
from youtrack_hub.schemas.youtrack.activity import HistoryEvent
from youtrack_hub.schemas.youtrack.custom_field import FormattedFields, RawCustomField
from youtrack_hub.services.custom_fields import decode_custom_fields
from youtrack_hub.services.history import get_resolved_timestamp


class ProjectRef(YouTrackSchema):
    id: str
    shortName: str | None = None
    name: str | None = None


class Reporter(YouTrackSchema):
    fullName: str = ""
    login: str | None = None


class Issue(YouTrackSchema):
    id: str
    idReadable: str = ""
    summary: str = ""
    description: str | None = None
    project: ProjectRef | None = None
    reporter: Reporter | None = None
    customFields: list[RawCustomField] = []
    # Epoch millis; only present when requested through `fields=`
    created: int | None = None
    updated: int | None = None
    resolved: int | None = None
    type: str | None = Field(default=None, alias="$type")

    def parse_custom_fields(self) -> FormattedFields:
        """Decode the raw custom fields into name/value pairs."""
        return decode_custom_fields(self.customFields)

    def get_resolved_timestamp(
        self,
        history: Sequence[HistoryEvent],
        *,
        field_name: str = DEFAULT_STATE_FIELD,
        resolved_state: str = DEFAULT_RESOLVED_STATE,
    ) -> int:
        """Timestamp of the latest transition to the resolved state, or -1."""
        return get_resolved_timestamp(
            history, field_name=field_name, resolved_state=resolved_state
        )


# ─── Write payloads & results ────────────────────────────────────────


class IssueCreate(BaseModel):
    summary: str
    description: str = ""
    project: ProjectRef


class IDResult(YouTrackSchema):
    id: str


class IssueResult(IDResult):
    numberInProject: int | None = None


class IssueAttachment(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    base64Content: str
