"""Tests for configuration loading and validation."""

from pathlib import Path

import pytest
import yaml

from src.utils.config import (
    AppConfig,
    LLMConfig,
    NLPConfig,
    OCRConfig,
    PipelineConfig,
    load_config,
)


class TestOCRConfig:
    """Tests for OCRConfig defaults and overrides."""

    def test_defaults(self) -> None:
        cfg = OCRConfig()
        assert cfg.default_lang == "eng"
        assert cfg.psm == 3
        assert cfg.tesseract_cmd is None

    def test_custom_lang(self) -> None:
        cfg = OCRConfig(default_lang="fra", psm=6)
        assert cfg.default_lang == "fra"
        assert cfg.psm == 6


class TestLLMConfig:
    """Tests for LLMConfig defaults and API key resolution."""

    def test_defaults(self) -> None:
        cfg = LLMConfig()
        assert cfg.primary_model == "gpt-4o-mini"
        assert cfg.supplementary_model == "gpt-4o-mini"
        assert cfg.temperature == 0.2
        assert cfg.max_retries == 0
        assert cfg.timeout_seconds is None

    def test_api_key_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        assert LLMConfig().resolved_api_key() == "sk-env"

    def test_explicit_api_key_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        assert LLMConfig(api_key="sk-file").resolved_api_key() == "sk-file"

    def test_no_api_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        assert LLMConfig().resolved_api_key() is None


class TestNLPAndPipelineConfig:
    """Tests for NLPConfig and PipelineConfig defaults."""

    def test_nlp_disabled_by_default(self) -> None:
        cfg = NLPConfig()
        assert cfg.enabled is False
        assert cfg.model_name == "en_core_web_sm"

    def test_pipeline_defaults(self) -> None:
        cfg = PipelineConfig()
        assert cfg.supplementary_enabled is True
        assert cfg.concurrent_extraction is True
        assert cfg.collection_id == "NewCollection"


class TestAppConfig:
    """Tests for the top-level AppConfig."""

    def test_defaults(self) -> None:
        cfg = AppConfig()
        assert isinstance(cfg.ocr, OCRConfig)
        assert isinstance(cfg.llm, LLMConfig)
        assert isinstance(cfg.nlp, NLPConfig)
        assert isinstance(cfg.pipeline, PipelineConfig)
        assert cfg.log_level == "INFO"

    def test_server_defaults(self) -> None:
        cfg = AppConfig()
        assert cfg.server.host == "0.0.0.0"
        assert cfg.server.port == 8000

    def test_nested_override(self) -> None:
        cfg = AppConfig(nlp=NLPConfig(enabled=True), log_level="DEBUG")
        assert cfg.nlp.enabled is True
        assert cfg.log_level == "DEBUG"


class TestLoadConfig:
    """Tests for the load_config function."""

    def test_load_default_config(self, config_dir: Path) -> None:
        cfg = load_config(config_dir / "config.yaml")
        assert isinstance(cfg, AppConfig)
        assert cfg.ocr.default_lang == "eng"
        assert cfg.pipeline.collection_id == "NewCollection"

    def test_load_missing_file_returns_defaults(self) -> None:
        cfg = load_config(Path("/nonexistent/path/config.yaml"))
        assert isinstance(cfg, AppConfig)
        assert cfg.ocr.default_lang == "eng"

    def test_load_custom_yaml(self, tmp_path: Path) -> None:
        config_data = {
            "ocr": {"default_lang": "deu", "psm": 6},
            "llm": {"primary_model": "gpt-4o", "timeout_seconds": 20},
            "nlp": {"enabled": True},
            "pipeline": {"collection_id": "Letters"},
            "log_level": "DEBUG",
        }
        config_file = tmp_path / "config.yaml"
        with open(config_file, "w") as f:
            yaml.dump(config_data, f)

        cfg = load_config(config_file)
        assert cfg.ocr.default_lang == "deu"
        assert cfg.ocr.psm == 6
        assert cfg.llm.primary_model == "gpt-4o"
        assert cfg.llm.timeout_seconds == 20.0
        assert cfg.nlp.enabled is True
        assert cfg.pipeline.collection_id == "Letters"
        assert cfg.log_level == "DEBUG"

    def test_load_empty_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")
        cfg = load_config(config_file)
        assert isinstance(cfg, AppConfig)

    def test_load_none_defaults_to_standard_path(self) -> None:
        cfg = load_config()
        assert isinstance(cfg, AppConfig)
