"""FastAPI application for the artifact ingestion API.

Provides the document upload endpoint and a health check. One pipeline is
shared by all requests and closed when the application shuts down.
"""

import shutil
import time
import uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Annotated

from fastapi import FastAPI, File, HTTPException, Query, UploadFile
from fastapi.middleware.cors import CORSMiddleware

from src.errors import InputError, ParseError
from src.pipeline import DocumentPipeline
from src.utils.config import load_config
from src.utils.logger import get_logger

from .schemas import HealthResponse, ParseUploadResponse

logger = get_logger(__name__)

API_VERSION = "1.0.0"


@lru_cache(maxsize=1)
def _get_pipeline() -> DocumentPipeline:
    """Build the shared document pipeline from the current configuration."""
    return DocumentPipeline(load_config())


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Close the shared pipeline's provider connections on shutdown."""
    yield
    if _get_pipeline.cache_info().currsize:
        logger.info("Closing document pipeline")
        await _get_pipeline().aclose()
        _get_pipeline.cache_clear()


app = FastAPI(
    title="Artifact Ingestion API",
    description=(
        "Extract people, locations and entities from scanned documents "
        "into a normalized relational schema"
    ),
    version=API_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


_ALLOWED_CONTENT_TYPES = {
    "image/png",
    "image/jpeg",
    "image/tiff",
    "image/bmp",
    "image/gif",
    "image/webp",
    "application/octet-stream",
}


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Return system health status."""
    config = load_config()
    return HealthResponse(
        status="healthy",
        version=API_VERSION,
        tesseract_available=shutil.which("tesseract") is not None,
        llm_configured=config.llm.resolved_api_key() is not None,
        local_nlp_enabled=config.nlp.enabled,
    )


@app.post("/parse-upload", response_model=ParseUploadResponse)
async def parse_upload(
    file: Annotated[UploadFile | None, File()] = None,
    local_nlp: Annotated[bool | None, Query()] = None,
) -> ParseUploadResponse:
    """Extract and reconcile people, entities and locations from a document.

    Args:
        file: Uploaded document image.
        local_nlp: Force the local NLP pass on or off for this request.

    Returns:
        Canonical schema, merged parse result and per-person annotations.
    """
    start_time = time.time()

    if file is None:
        logger.info("No file provided in form data")
        raise HTTPException(status_code=400, detail="No file provided")

    if file.content_type and file.content_type not in _ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type: {file.content_type}",
        )

    logger.info("Received file: %s", file.filename)
    try:
        pipeline = _get_pipeline()
        content = await file.read()
        result = await pipeline.process(
            content, file.filename or "document", use_local_nlp=local_nlp
        )
    except InputError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except ParseError as exc:
        logger.error("Failed to parse first-pass LLM output: %s", exc)
        raise HTTPException(
            status_code=500,
            detail={
                "error": "Failed to parse first-pass LLM output as JSON",
                "raw_output": exc.raw_text,
            },
        ) from exc
    except Exception as exc:
        logger.error("Error in parse-upload route: %s", exc)
        raise HTTPException(status_code=500, detail="Internal Server Error") from exc

    processing_time = (time.time() - start_time) * 1000
    return ParseUploadResponse.from_result(
        result, document_id=str(uuid.uuid4()), processing_time_ms=processing_time
    )
