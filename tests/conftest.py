"""Shared test fixtures for the artifact ingestion test suite."""

import io
from pathlib import Path

import pytest
from PIL import Image

from src.extraction.models import AdditionalExtraction, RawExtraction


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def config_dir(project_root: Path) -> Path:
    """Return the configs directory path."""
    return project_root / "configs"


@pytest.fixture
def png_bytes() -> bytes:
    """Create a minimal white PNG image as bytes."""
    img = Image.new("RGB", (200, 100), color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def raw_extraction() -> RawExtraction:
    """A primary extraction for a short memo."""
    return RawExtraction.model_validate(
        {
            "artifact": {
                "subject": "Q3 budget review",
                "sent_datetime": "2024-03-01 09:15",
                "artifact_purpose": "Schedule a review meeting",
            },
            "sender": {"name": "Alice Chen", "email": "alice@example.com"},
            "recipients": [
                {"name": "Mark Duvall", "email": "mark@example.com"},
                {"name": "Dana Ortiz", "email": None},
            ],
            "mentioned": ["Mark", {"name": "Priya Raman", "note": "finance"}],
            "entities": [
                {"entity_type": "Topic", "entity_value": "budget", "context": "Q3 budget"}
            ],
            "locations": [{"location_name": "Pittsburgh", "context": "meet in Pittsburgh"}],
        }
    )


@pytest.fixture
def additional_extraction() -> AdditionalExtraction:
    """A supplementary extraction overlapping the primary one."""
    return AdditionalExtraction.model_validate(
        {
            "additional_people": [{"name": "Tom Reyes"}, {"name": "priya raman"}],
            "additional_entities": [
                {"entity_type": "Topic", "entity_value": "Budget", "context": "budget line"}
            ],
            "additional_locations": [{"location_name": " pittsburgh "}],
        }
    )
