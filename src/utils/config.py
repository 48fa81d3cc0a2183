"""Configuration management for the artifact ingestion system.

Loads and validates YAML configuration with sensible defaults for OCR,
the language-model passes, the optional local NLP tagger, and pipeline
behavior.
"""

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class OCRConfig(BaseModel):
    """Configuration for the Tesseract OCR adapter."""

    tesseract_cmd: str | None = None
    default_lang: str = "eng"
    psm: int = 3


class LLMConfig(BaseModel):
    """Configuration for the language-model extraction passes.

    ``api_key`` falls back to the ``OPENAI_API_KEY`` environment variable.
    Retries are off by default; ``timeout_seconds`` bounds each call.
    """

    api_key: str | None = None
    base_url: str | None = None
    primary_model: str = "gpt-4o-mini"
    supplementary_model: str = "gpt-4o-mini"
    temperature: float = 0.2
    timeout_seconds: float | None = None
    max_retries: int = 0

    def resolved_api_key(self) -> str | None:
        """Return the configured API key or the environment fallback."""
        return self.api_key or os.environ.get("OPENAI_API_KEY")


class NLPConfig(BaseModel):
    """Configuration for the optional local spaCy tagger."""

    enabled: bool = False
    model_name: str = "en_core_web_sm"


class PipelineConfig(BaseModel):
    """Configuration for pass orchestration and artifact defaults."""

    supplementary_enabled: bool = True
    concurrent_extraction: bool = True
    collection_id: str = "NewCollection"


class ServerConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000


class AppConfig(BaseModel):
    """Top-level application configuration."""

    ocr: OCRConfig = Field(default_factory=OCRConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    nlp: NLPConfig = Field(default_factory=NLPConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    log_level: str = "INFO"


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.
            Defaults to configs/config.yaml.

    Returns:
        Validated application configuration.
    """
    if path is None:
        path = Path("configs/config.yaml")

    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        return AppConfig(**raw)

    logger.info("No config file found at %s, using defaults", path)
    return AppConfig()
