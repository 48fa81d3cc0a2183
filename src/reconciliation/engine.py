"""Reconciliation of extraction passes into the canonical schema.

Merges the primary extraction, the supplementary sweep and the optional
local tagger output into deduplicated people, entities and locations
plus their junction records. Reconciliation is a pure function of its
inputs: it performs no I/O and never raises, substituting ``"Unknown"``
for missing required strings and ``None`` for missing optional values.

People are resolved strictly in the order sender, recipients, primary
mentions, supplementary people, tagger people, so that a full name from
the header is already known when a bare first name from the body is
resolved.

Only one artifact is produced per run; ``artifact_id`` is threaded
explicitly into every junction record but multi-artifact runs are not
supported.
"""

from collections.abc import Iterable
from datetime import datetime, timezone

from src.extraction.models import (
    AdditionalExtraction,
    ArtifactInfo,
    EntityReference,
    LocationReference,
    PersonReference,
    RawExtraction,
    TaggerResult,
)
from src.utils.logger import get_logger

from .identity import KeyedRegistry, PersonIdentityTable
from .records import (
    Artifact,
    ArtifactEntity,
    ArtifactLocation,
    ArtifactParticipant,
    CanonicalSchema,
    Entity,
    Location,
    ParticipantRole,
)

logger = get_logger(__name__)

UNKNOWN = "Unknown"
DEFAULT_ENTITY_TYPE = "Topic"
DEFAULT_COLLECTION_ID = "NewCollection"


def entity_key(entity_type: str, entity_value: str) -> str:
    return f"{entity_type}:{entity_value}".lower()


def location_key(location_name: str) -> str:
    return location_name.strip().lower()


def build_artifact(
    info: ArtifactInfo | None,
    transcription: str,
    artifact_id: int = 1,
    collection_id: str = DEFAULT_COLLECTION_ID,
    source_filename: str | None = None,
    extracted_at: datetime | None = None,
) -> Artifact:
    """Build the artifact record, defaulting missing metadata to ``"Unknown"``."""
    info = info or ArtifactInfo()
    extracted_at = extracted_at or datetime.now(timezone.utc)
    return Artifact(
        artifact_id=artifact_id,
        subject=info.subject or UNKNOWN,
        transcription=transcription or "",
        sent_datetime=info.sent_datetime or UNKNOWN,
        artifact_purpose=info.artifact_purpose or UNKNOWN,
        collection_id=collection_id,
        extracted_datetime=extracted_at.isoformat(),
        source_filename=source_filename,
    )


def resolve_people(
    raw: RawExtraction,
    additional: AdditionalExtraction,
    tagged: TaggerResult | None = None,
) -> PersonIdentityTable:
    """Resolve every person reference of every pass into one table."""
    table = PersonIdentityTable()

    references: list[PersonReference] = []
    if raw.sender is not None:
        references.append(raw.sender)
    references.extend(raw.recipients)
    references.extend(raw.mentioned)
    references.extend(additional.additional_people)
    if tagged is not None:
        references.extend(tagged.people)

    for reference in references:
        table.resolve(reference)
    return table


def assign_participants(
    raw: RawExtraction, table: PersonIdentityTable, artifact_id: int = 1
) -> list[ArtifactParticipant]:
    """Emit participant rows for the primary pass's sender, recipients and mentions.

    Sender and recipients must match a person exactly; mentions may also
    match a unique first name. References that do not resolve are dropped.
    """
    roles: list[tuple[PersonReference, ParticipantRole]] = []
    if raw.sender is not None:
        roles.append((raw.sender, ParticipantRole.SENDER))
    roles.extend((r, ParticipantRole.RECIPIENT) for r in raw.recipients)
    roles.extend((m, ParticipantRole.MENTIONED) for m in raw.mentioned)

    participants: list[ArtifactParticipant] = []
    for reference, role in roles:
        person = table.find(
            reference.name, allow_first_name=role is ParticipantRole.MENTIONED
        )
        if person is None:
            logger.debug("Dropping unresolved %s reference %r", role, reference.name)
            continue
        participants.append(
            ArtifactParticipant(
                artifact_id=artifact_id, person_id=person.person_id, role=role
            )
        )
    return participants


def merge_entities(
    references: Iterable[EntityReference], artifact_id: int = 1
) -> tuple[list[Entity], list[ArtifactEntity]]:
    """Deduplicate entities by ``type:value``; one junction row per reference."""
    registry: KeyedRegistry[Entity] = KeyedRegistry()
    links: list[ArtifactEntity] = []

    for ref in references:
        if not ref.entity_value:
            continue
        entity_type = ref.entity_type or DEFAULT_ENTITY_TYPE
        value = ref.entity_value
        entity = registry.get_or_create(
            entity_key(entity_type, value),
            lambda new_id: Entity(
                entity_id=new_id, entity_type=entity_type, entity_value=value
            ),
        )
        links.append(
            ArtifactEntity(
                artifact_id=artifact_id,
                entity_id=entity.entity_id,
                context=ref.context,
            )
        )
    return registry.values(), links


def merge_locations(
    references: Iterable[LocationReference], artifact_id: int = 1
) -> tuple[list[Location], list[ArtifactLocation]]:
    """Deduplicate locations by name; one junction row per reference."""
    registry: KeyedRegistry[Location] = KeyedRegistry()
    links: list[ArtifactLocation] = []

    for ref in references:
        if not ref.location_name:
            continue
        location = registry.get_or_create(
            location_key(ref.location_name),
            lambda new_id: Location(
                location_id=new_id,
                location_name=ref.location_name.strip(),
                latitude=ref.latitude,
                longitude=ref.longitude,
            ),
        )
        links.append(
            ArtifactLocation(
                artifact_id=artifact_id,
                location_id=location.location_id,
                context=ref.context,
            )
        )
    return registry.values(), links


def reconcile(
    raw: RawExtraction,
    additional: AdditionalExtraction | None = None,
    tagged: TaggerResult | None = None,
    *,
    transcription: str = "",
    artifact_id: int = 1,
    collection_id: str = DEFAULT_COLLECTION_ID,
    source_filename: str | None = None,
    extracted_at: datetime | None = None,
) -> CanonicalSchema:
    """Reconcile extraction passes into the canonical relational schema.

    Args:
        raw: Primary extraction result.
        additional: Supplementary extraction result, if any.
        tagged: Local tagger result, if the tagger ran.
        transcription: Full OCR text stored on the artifact.
        artifact_id: Identifier of the single artifact of this run.
        collection_id: Collection the artifact belongs to.
        source_filename: Uploaded filename, if known.
        extracted_at: Extraction timestamp. Defaults to now (UTC).

    Returns:
        The canonical schema for one artifact.
    """
    additional = additional or AdditionalExtraction()
    tagger_entities = tagged.entities if tagged is not None else []
    tagger_locations = tagged.locations if tagged is not None else []

    artifact = build_artifact(
        raw.artifact,
        transcription,
        artifact_id=artifact_id,
        collection_id=collection_id,
        source_filename=source_filename,
        extracted_at=extracted_at,
    )

    table = resolve_people(raw, additional, tagged)
    participants = assign_participants(raw, table, artifact_id)

    entities, artifact_entities = merge_entities(
        [*raw.entities, *additional.additional_entities, *tagger_entities],
        artifact_id,
    )
    locations, artifact_locations = merge_locations(
        [*raw.locations, *additional.additional_locations, *tagger_locations],
        artifact_id,
    )

    logger.info(
        "Reconciled %d people, %d participants, %d entities, %d locations",
        len(table),
        len(participants),
        len(entities),
        len(locations),
    )
    return CanonicalSchema(
        artifacts=[artifact],
        people=table.people,
        artifact_participants=participants,
        entities=entities,
        artifact_entities=artifact_entities,
        locations=locations,
        artifact_locations=artifact_locations,
    )
