from typing import Any

from pydantic import BaseModel, Field, field_validator

from youtrack_hub.schemas.base import YouTrackSchema


class HistoryUser(YouTrackSchema):
    """Entity reference inside an activity item (a user, an enum value, a state...)."""

    login: str | None = None
    name: str | None = None
    type: str | None = Field(default=None, alias="$type")


class HistoryField(YouTrackSchema):
    id: str | None = None
    name: str | None = ""
    text: str | None = None
    type: str | None = Field(default=None, alias="$type")


class HistoryEvent(YouTrackSchema):
    """One recorded change of one issue field."""

    id: str | None = None
    timestamp: int
    field: HistoryField | None = None
    added: list[HistoryUser] = []
    removed: list[HistoryUser] = []
    author: HistoryUser | None = None
    type: str | None = Field(default=None, alias="$type")

    @field_validator("added", "removed", mode="before")
    @classmethod
    def _structured_only(cls, value: Any) -> Any:
        # Text field activity carries a bare string here instead of entity lists;
        # that shape is not supported and is read as "no entities".
        if not isinstance(value, list):
            return []
        # Non-object entries keep their position as empty references.
        return [item if isinstance(item, dict | BaseModel) else {} for item in value]

    @property
    def field_name(self) -> str:
        if self.field is None:
            return ""
        return self.field.name or ""


class StateTransition(BaseModel):
    """Processed State change, oldest-first, for time-in-state analysis."""

    from_state: str | None
    to_state: str
    timestamp: int  # epoch millis
