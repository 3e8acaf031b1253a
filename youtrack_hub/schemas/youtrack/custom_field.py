from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictStr

from youtrack_hub.core.exceptions.domain import FieldNotFoundError
from youtrack_hub.schemas.base import YouTrackSchema


class RawCustomField(YouTrackSchema):
    """Custom field as returned by the API; `value` is decoded later according to `type`."""

    name: str
    type: str = Field(default="", alias="$type")
    value: Any = None


# ─── Variant value shapes ────────────────────────────────────────────
# Missing keys fall back to "" but a key of the wrong JSON type is malformed.


class TextFieldValue(BaseModel):
    model_config = ConfigDict(extra="allow")

    text: StrictStr | None = ""


class NamedFieldValue(BaseModel):
    """Value shape shared by enum, version and state-machine fields."""

    model_config = ConfigDict(extra="allow")

    name: StrictStr | None = ""


class PeriodFieldValue(BaseModel):
    model_config = ConfigDict(extra="allow")

    presentation: StrictStr | None = ""


# ─── Decoded output ──────────────────────────────────────────────────


class FormattedField(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    value: str


class FormattedFields(list[FormattedField]):
    """Ordered decoded custom fields. Duplicate names are kept; lookups return the first match."""

    def find(self, name: str) -> str:
        for field in self:
            if field.name == name:
                return field.value
        raise FieldNotFoundError(name)

    def find_or_empty(self, name: str) -> str:
        """Like `find`, but missing columns yield an empty string."""
        for field in self:
            if field.name == name:
                return field.value
        return ""
