"""Pydantic response schemas for the FastAPI endpoints."""

from dataclasses import asdict

from pydantic import BaseModel

from src.extraction.models import RawExtraction
from src.pipeline import PipelineResult
from src.reconciliation.records import ParticipantRole


class VertexResponse(BaseModel):
    x: int
    y: int


class ArtifactResponse(BaseModel):
    """Response schema for the processed artifact."""

    artifact_id: int
    subject: str
    transcription: str
    sent_datetime: str
    artifact_purpose: str
    thread_id: str | None = None
    in_reply_to: str | None = None
    source_filename: str | None = None
    collection_id: str
    extracted_datetime: str
    auto_summary: str | None = None
    manual_summary: str | None = None
    tags: list[str] = []


class PersonResponse(BaseModel):
    person_id: int
    full_name: str
    email_address: str | None = None


class ArtifactParticipantResponse(BaseModel):
    artifact_id: int
    person_id: int
    role: ParticipantRole


class EntityResponse(BaseModel):
    entity_id: int
    entity_type: str
    entity_value: str


class ArtifactEntityResponse(BaseModel):
    artifact_id: int
    entity_id: int
    context: str | None = None


class LocationResponse(BaseModel):
    location_id: int
    location_name: str
    latitude: float | None = None
    longitude: float | None = None


class ArtifactLocationResponse(BaseModel):
    artifact_id: int
    location_id: int
    context: str | None = None


class FinalSchemaResponse(BaseModel):
    """Response schema for the reconciled relational schema."""

    artifacts: list[ArtifactResponse]
    people: list[PersonResponse]
    artifact_participants: list[ArtifactParticipantResponse]
    entities: list[EntityResponse]
    artifact_entities: list[ArtifactEntityResponse]
    locations: list[LocationResponse]
    artifact_locations: list[ArtifactLocationResponse]


class PersonAnnotationResponse(BaseModel):
    """Bounding polygon assigned to a person."""

    person_id: int
    vertices: list[VertexResponse]


class ParseUploadResponse(BaseModel):
    """Response schema for a document upload."""

    success: bool
    document_id: str
    extracted_text: str
    final_schema: FinalSchemaResponse | None = None
    parse_result: RawExtraction | None = None
    person_annotations: list[PersonAnnotationResponse] = []
    message: str | None = None
    processing_time_ms: float

    @classmethod
    def from_result(
        cls, result: PipelineResult, document_id: str, processing_time_ms: float
    ) -> "ParseUploadResponse":
        """Build the response from a pipeline result."""
        if not result.has_text:
            return cls(
                success=True,
                document_id=document_id,
                extracted_text="",
                message="No text extracted from image.",
                processing_time_ms=processing_time_ms,
            )
        return cls(
            success=True,
            document_id=document_id,
            extracted_text=result.extracted_text,
            final_schema=(
                FinalSchemaResponse.model_validate(asdict(result.final_schema))
                if result.final_schema is not None
                else None
            ),
            parse_result=result.parse_result,
            person_annotations=[
                PersonAnnotationResponse.model_validate(asdict(a))
                for a in result.person_annotations
            ],
            processing_time_ms=processing_time_ms,
        )


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str
    tesseract_available: bool
    llm_configured: bool
    local_nlp_enabled: bool
