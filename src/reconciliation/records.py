"""Canonical relational records produced by reconciliation.

All identifiers are sequential, 1-based and only meaningful within a
single reconciliation run.
"""

from dataclasses import dataclass, field
from enum import StrEnum


class ParticipantRole(StrEnum):
    """Role a person plays in an artifact."""

    SENDER = "sender"
    RECIPIENT = "recipient"
    MENTIONED = "mentioned"


@dataclass
class Vertex:
    """A 2D point of an OCR bounding polygon, in source-image pixels."""

    x: int
    y: int


@dataclass
class Annotation:
    """An OCR-detected text fragment with its bounding polygon."""

    text: str
    vertices: list[Vertex]


@dataclass
class Artifact:
    """The processed document."""

    artifact_id: int
    subject: str
    transcription: str
    sent_datetime: str
    artifact_purpose: str
    collection_id: str
    extracted_datetime: str
    thread_id: str | None = None
    in_reply_to: str | None = None
    source_filename: str | None = None
    auto_summary: str | None = None
    manual_summary: str | None = None
    tags: list[str] = field(default_factory=list)


@dataclass
class Person:
    """A deduplicated person."""

    person_id: int
    full_name: str
    email_address: str | None = None


@dataclass
class ArtifactParticipant:
    """Links a person to an artifact under a role."""

    artifact_id: int
    person_id: int
    role: ParticipantRole


@dataclass
class Entity:
    """A deduplicated topical entity (brand, event, topic, ...)."""

    entity_id: int
    entity_type: str
    entity_value: str


@dataclass
class ArtifactEntity:
    artifact_id: int
    entity_id: int
    context: str | None = None


@dataclass
class Location:
    """A deduplicated place."""

    location_id: int
    location_name: str
    latitude: float | None = None
    longitude: float | None = None


@dataclass
class ArtifactLocation:
    artifact_id: int
    location_id: int
    context: str | None = None


@dataclass
class PersonAnnotation:
    """The single bounding polygon assigned to a person."""

    person_id: int
    vertices: list[Vertex]


@dataclass
class CanonicalSchema:
    """Deduplicated, cross-referenced output of one reconciliation run."""

    artifacts: list[Artifact] = field(default_factory=list)
    people: list[Person] = field(default_factory=list)
    artifact_participants: list[ArtifactParticipant] = field(default_factory=list)
    entities: list[Entity] = field(default_factory=list)
    artifact_entities: list[ArtifactEntity] = field(default_factory=list)
    locations: list[Location] = field(default_factory=list)
    artifact_locations: list[ArtifactLocation] = field(default_factory=list)
