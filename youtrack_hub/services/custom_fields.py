"""Decoding of polymorphic YouTrack custom fields into flat name/value pairs.

Each custom field arrives as ``{"name", "$type", "value"}`` where the shape of
``value`` depends on ``$type``. Known variants are decoded through
``FIELD_DECODERS``; everything else is reported to a diagnostic sink and
dropped. Decoding a list never fails: malformed values are skipped.
"""

from collections.abc import Callable, Iterable, Mapping
from typing import Any

from loguru import logger
from pydantic import BaseModel, StrictStr, TypeAdapter, ValidationError

from youtrack_hub.core.constants import CustomFieldType
from youtrack_hub.schemas.youtrack.custom_field import (
    FormattedField,
    FormattedFields,
    NamedFieldValue,
    PeriodFieldValue,
    RawCustomField,
    TextFieldValue,
)

FieldDecoder = Callable[[Any], str | None]
UnsupportedFieldSink = Callable[[RawCustomField], None]

_string_adapter: TypeAdapter[str | None] = TypeAdapter(StrictStr | None)


def _object_attribute(model: type[BaseModel], attribute: str) -> FieldDecoder:
    """Build a decoder reading one string attribute of an object-shaped value."""

    def decode(value: Any) -> str | None:
        if value is None:
            return ""
        try:
            parsed = model.model_validate(value)
        except ValidationError:
            return None
        return getattr(parsed, attribute) or ""

    return decode


def _bare_string(value: Any) -> str | None:
    try:
        return _string_adapter.validate_python(value) or ""
    except ValidationError:
        return None


FIELD_DECODERS: Mapping[str, FieldDecoder] = {
    CustomFieldType.TEXT: _object_attribute(TextFieldValue, "text"),
    CustomFieldType.SINGLE_ENUM: _object_attribute(NamedFieldValue, "name"),
    CustomFieldType.SINGLE_VERSION: _object_attribute(NamedFieldValue, "name"),
    CustomFieldType.STATE_MACHINE: _object_attribute(NamedFieldValue, "name"),
    CustomFieldType.SIMPLE: _bare_string,
    CustomFieldType.DATE: _bare_string,
    CustomFieldType.PERIOD: _object_attribute(PeriodFieldValue, "presentation"),
}


def log_unsupported_field(field: RawCustomField) -> None:
    """Default diagnostic sink for custom-field types without a decoder."""
    logger.info(f"Custom field [{field.name}] of type {field.type!r} is not supported yet")


def decode_custom_field(field: RawCustomField) -> FormattedField | None:
    """Decode a single field; None when its type is unknown or its value is malformed."""
    decoder = FIELD_DECODERS.get(field.type)
    if decoder is None:
        return None
    value = decoder(field.value)
    if value is None:
        return None
    return FormattedField(name=field.name, value=value)


def decode_custom_fields(
    raw_fields: Iterable[RawCustomField],
    *,
    on_unsupported: UnsupportedFieldSink | None = None,
) -> FormattedFields:
    """Decode raw custom fields in input order.

    Unknown types are passed to ``on_unsupported`` (logged by default);
    malformed values of known types are dropped silently.
    """
    sink = on_unsupported or log_unsupported_field
    fields = FormattedFields()

    for raw in raw_fields:
        if raw.type not in FIELD_DECODERS:
            sink(raw)
            continue
        formatted = decode_custom_field(raw)
        if formatted is not None:
            fields.append(formatted)

    return fields
