"""Pydantic models for the results of each extraction pass.

Language models return loosely shaped JSON: a mention may be a bare
string or an object, a name may itself be nested in an object, numbers
may arrive as strings. These models normalize every such shape at the
boundary so reconciliation only ever sees one reference type per kind.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _as_text(value: Any) -> str | None:
    """Coerce a scalar to a trimmed string, mapping empty values to ``None``.

    Containers and booleans are not text and also map to ``None``.
    """
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        return None
    text = str(value).strip()
    return text or None


def _as_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _as_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


class _LenientModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class PersonReference(_LenientModel):
    """A reference to a person from any extraction pass."""

    name: str = ""
    email: str | None = None
    confidence: float | None = None
    note: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _normalize_shape(cls, value: Any) -> Any:
        if isinstance(value, PersonReference):
            return value
        if isinstance(value, dict):
            data = dict(value)
            name = data.get("name")
            if isinstance(name, dict):
                data["name"] = name.get("name")
            return data
        return {"name": value}

    @field_validator("name", mode="before")
    @classmethod
    def _coerce_name(cls, value: Any) -> str:
        return _as_text(value) or ""

    @field_validator("email", "note", mode="before")
    @classmethod
    def _coerce_optional_text(cls, value: Any) -> str | None:
        return _as_text(value)

    @field_validator("confidence", mode="before")
    @classmethod
    def _coerce_confidence(cls, value: Any) -> float | None:
        return _as_float(value)


class EntityReference(_LenientModel):
    """A reference to a topical entity (brand, event, topic, ...)."""

    entity_type: str | None = None
    entity_value: str | None = None
    context: str | None = None
    confidence: float | None = None

    @model_validator(mode="before")
    @classmethod
    def _normalize_shape(cls, value: Any) -> Any:
        if isinstance(value, (dict, EntityReference)):
            return value
        return {"entity_value": value}

    @field_validator("entity_type", "entity_value", "context", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str | None:
        return _as_text(value)

    @field_validator("confidence", mode="before")
    @classmethod
    def _coerce_confidence(cls, value: Any) -> float | None:
        return _as_float(value)


class LocationReference(_LenientModel):
    """A reference to a place, optionally with coordinates."""

    location_name: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    context: str | None = None
    confidence: float | None = None
    note: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _normalize_shape(cls, value: Any) -> Any:
        if isinstance(value, (dict, LocationReference)):
            return value
        return {"location_name": value}

    @field_validator("location_name", "context", "note", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str | None:
        return _as_text(value)

    @field_validator("latitude", "longitude", "confidence", mode="before")
    @classmethod
    def _coerce_number(cls, value: Any) -> float | None:
        return _as_float(value)


class ArtifactInfo(_LenientModel):
    """Document-level metadata from the primary pass."""

    subject: str | None = None
    sent_datetime: str | None = None
    artifact_purpose: str | None = None

    @field_validator("subject", "sent_datetime", "artifact_purpose", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str | None:
        return _as_text(value)


class RawExtraction(_LenientModel):
    """Result of the primary structured extraction pass."""

    artifact: ArtifactInfo | None = None
    sender: PersonReference | None = None
    recipients: list[PersonReference] = Field(default_factory=list)
    mentioned: list[PersonReference] = Field(default_factory=list)
    entities: list[EntityReference] = Field(default_factory=list)
    locations: list[LocationReference] = Field(default_factory=list)

    @field_validator("artifact", mode="before")
    @classmethod
    def _artifact_object(cls, value: Any) -> Any:
        if isinstance(value, ArtifactInfo):
            return value
        if isinstance(value, dict) and value:
            return value
        return None

    @field_validator("sender", mode="before")
    @classmethod
    def _sender_reference(cls, value: Any) -> Any:
        if isinstance(value, PersonReference):
            return value
        if isinstance(value, (dict, str)) and value:
            return value
        return None

    @field_validator("recipients", "mentioned", "entities", "locations", mode="before")
    @classmethod
    def _coerce_list(cls, value: Any) -> list:
        return _as_list(value)


class AdditionalExtraction(_LenientModel):
    """Result of the supplementary free-text sweep.

    The default instance (all lists empty) is what the pipeline uses when
    the supplementary pass fails.
    """

    additional_people: list[PersonReference] = Field(default_factory=list)
    additional_locations: list[LocationReference] = Field(default_factory=list)
    additional_entities: list[EntityReference] = Field(default_factory=list)

    @field_validator(
        "additional_people",
        "additional_locations",
        "additional_entities",
        mode="before",
    )
    @classmethod
    def _coerce_list(cls, value: Any) -> list:
        return _as_list(value)


class TaggerResult(_LenientModel):
    """Candidates found by the local NLP tagger."""

    people: list[PersonReference] = Field(default_factory=list)
    locations: list[LocationReference] = Field(default_factory=list)
    entities: list[EntityReference] = Field(default_factory=list)
