"""Tests for the local tagger and multi-pass orchestration."""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.errors import ParseError, ProviderError
from src.extraction.local_tagger import LocalTagger
from src.extraction.models import (
    AdditionalExtraction,
    EntityReference,
    PersonReference,
    RawExtraction,
    TaggerResult,
)
from src.extraction.multi_pass import MultiPassExtractor, merge_extractions
from src.utils.config import AppConfig, NLPConfig, PipelineConfig


def _fake_nlp(*ents: tuple[str, str]) -> MagicMock:
    doc = SimpleNamespace(
        ents=[SimpleNamespace(text=text, label_=label) for text, label in ents]
    )
    return MagicMock(return_value=doc)


def _extractor(
    config: AppConfig | None = None, tagger: LocalTagger | None = None
) -> MultiPassExtractor:
    extractor = MultiPassExtractor(
        config or AppConfig(), client=MagicMock(), tagger=tagger or MagicMock()
    )
    extractor.primary = MagicMock()
    extractor.supplementary = MagicMock()
    return extractor


class TestLocalTagger:
    """Tests for the spaCy-backed local tagger (mocked)."""

    @patch("src.extraction.local_tagger.spacy")
    def test_groups_entities_by_label(self, mock_spacy: MagicMock) -> None:
        mock_spacy.load.return_value = _fake_nlp(
            ("Mark Duvall", "PERSON"),
            ("Pittsburgh", "GPE"),
            ("Acme Corp", "ORG"),
            ("Lake Erie", "LOC"),
            ("Tuesday", "DATE"),
        )
        result = LocalTagger("en_core_web_sm").tag("text")

        assert [p.name for p in result.people] == ["Mark Duvall"]
        assert [loc.location_name for loc in result.locations] == [
            "Pittsburgh",
            "Lake Erie",
        ]
        assert result.entities[0].entity_type == "Organization"
        assert result.entities[0].entity_value == "Acme Corp"
        assert result.people[0].confidence == 1.0

    @patch("src.extraction.local_tagger.spacy")
    def test_dedups_surface_forms(self, mock_spacy: MagicMock) -> None:
        mock_spacy.load.return_value = _fake_nlp(
            ("Mark\nDuvall", "PERSON"), ("Mark Duvall", "PERSON")
        )
        result = LocalTagger().tag("text")
        assert [p.name for p in result.people] == ["Mark Duvall"]

    @patch("src.extraction.local_tagger.spacy")
    def test_model_loaded_once(self, mock_spacy: MagicMock) -> None:
        mock_spacy.load.return_value = _fake_nlp()
        tagger = LocalTagger("en_core_web_sm")
        tagger.tag("a")
        tagger.tag("b")
        mock_spacy.load.assert_called_once()

    @patch("src.extraction.local_tagger.spacy")
    def test_missing_model_is_provider_error(self, mock_spacy: MagicMock) -> None:
        mock_spacy.load.side_effect = OSError("E050")
        with pytest.raises(ProviderError):
            LocalTagger("missing_model").tag("text")


class TestMergeExtractions:
    """Tests for folding the supplementary pass into the primary result."""

    def test_appends_to_mentioned_entities_locations(
        self, raw_extraction, additional_extraction
    ) -> None:
        merged = merge_extractions(raw_extraction, additional_extraction)
        assert [m.name for m in merged.mentioned] == [
            "Mark",
            "Priya Raman",
            "Tom Reyes",
            "priya raman",
        ]
        assert len(merged.entities) == 2
        assert len(merged.locations) == 2
        assert merged.recipients == raw_extraction.recipients
        assert merged.sender == raw_extraction.sender

    def test_inputs_unchanged(self, raw_extraction, additional_extraction) -> None:
        merge_extractions(raw_extraction, additional_extraction)
        assert len(raw_extraction.mentioned) == 2

    def test_empty_supplementary(self, raw_extraction) -> None:
        merged = merge_extractions(raw_extraction, AdditionalExtraction())
        assert merged == raw_extraction


class TestMultiPassExtractor:
    """Tests for the pass orchestrator."""

    def test_runs_primary_and_supplementary(self) -> None:
        extractor = _extractor()
        raw = RawExtraction(mentioned=[PersonReference(name="Mark")])
        extra = AdditionalExtraction(additional_people=[PersonReference(name="Tom")])
        extractor.primary.extract = AsyncMock(return_value=raw)
        extractor.supplementary.extract = AsyncMock(return_value=extra)

        passes = asyncio.run(extractor.extract("text"))

        assert passes.primary is raw
        assert passes.supplementary is extra
        assert passes.tagged is None
        extractor.supplementary.extract.assert_awaited_once_with("text")

    def test_passes_run_concurrently(self) -> None:
        extractor = _extractor()
        started: list[str] = []

        async def primary(text: str) -> RawExtraction:
            started.append("primary")
            await asyncio.sleep(0.01)
            assert "supplementary" in started
            return RawExtraction()

        async def supplementary(text: str) -> AdditionalExtraction:
            started.append("supplementary")
            await asyncio.sleep(0.01)
            return AdditionalExtraction()

        extractor.primary.extract = primary
        extractor.supplementary.extract = supplementary
        asyncio.run(extractor.extract("text"))
        assert sorted(started) == ["primary", "supplementary"]

    def test_sequential_mode(self) -> None:
        config = AppConfig(pipeline=PipelineConfig(concurrent_extraction=False))
        extractor = _extractor(config)
        extractor.primary.extract = AsyncMock(return_value=RawExtraction())
        extractor.supplementary.extract = AsyncMock(return_value=AdditionalExtraction())
        passes = asyncio.run(extractor.extract("text"))
        assert passes.supplementary == AdditionalExtraction()

    def test_supplementary_disabled(self) -> None:
        config = AppConfig(pipeline=PipelineConfig(supplementary_enabled=False))
        extractor = _extractor(config)
        extractor.primary.extract = AsyncMock(return_value=RawExtraction())
        extractor.supplementary.extract = AsyncMock()
        passes = asyncio.run(extractor.extract("text"))
        assert passes.supplementary == AdditionalExtraction()
        extractor.supplementary.extract.assert_not_called()

    def test_primary_parse_failure_propagates(self) -> None:
        extractor = _extractor()
        extractor.primary.extract = AsyncMock(side_effect=ParseError("bad", "raw"))
        extractor.supplementary.extract = AsyncMock(return_value=AdditionalExtraction())
        with pytest.raises(ParseError):
            asyncio.run(extractor.extract("text"))

    def test_primary_failure_cancels_supplementary(self) -> None:
        extractor = _extractor()
        finished: list[bool] = []

        async def slow_supplementary(text: str) -> AdditionalExtraction:
            await asyncio.sleep(10)
            finished.append(True)
            return AdditionalExtraction()

        extractor.primary.extract = AsyncMock(side_effect=ProviderError("down"))
        extractor.supplementary.extract = slow_supplementary
        with pytest.raises(ProviderError):
            asyncio.run(extractor.extract("text"))
        assert finished == []

    def test_local_tagger_enabled_by_config(self) -> None:
        tagger = MagicMock()
        tagged = TaggerResult(
            entities=[EntityReference(entity_type="Organization", entity_value="Acme")]
        )
        tagger.tag.return_value = tagged
        extractor = _extractor(AppConfig(nlp=NLPConfig(enabled=True)), tagger=tagger)
        extractor.primary.extract = AsyncMock(return_value=RawExtraction())
        extractor.supplementary.extract = AsyncMock(return_value=AdditionalExtraction())

        passes = asyncio.run(extractor.extract("text"))

        assert passes.tagged == tagged
        tagger.tag.assert_called_once_with("text")

    def test_local_tagger_override(self) -> None:
        tagger = MagicMock()
        tagger.tag.return_value = TaggerResult()
        extractor = _extractor(AppConfig(nlp=NLPConfig(enabled=True)), tagger=tagger)
        extractor.primary.extract = AsyncMock(return_value=RawExtraction())
        extractor.supplementary.extract = AsyncMock(return_value=AdditionalExtraction())

        passes = asyncio.run(extractor.extract("text", use_local_nlp=False))

        assert passes.tagged is None
        tagger.tag.assert_not_called()

    def test_unavailable_tagger_contributes_nothing(self) -> None:
        tagger = MagicMock()
        tagger.tag.side_effect = ProviderError("model missing")
        extractor = _extractor(tagger=tagger)
        extractor.primary.extract = AsyncMock(return_value=RawExtraction())
        extractor.supplementary.extract = AsyncMock(return_value=AdditionalExtraction())

        passes = asyncio.run(extractor.extract("text", use_local_nlp=True))

        assert passes.tagged == TaggerResult()

    def test_aclose_closes_shared_client(self) -> None:
        client = MagicMock()
        client.close = AsyncMock()
        extractor = MultiPassExtractor(AppConfig(), client=client, tagger=MagicMock())

        asyncio.run(extractor.aclose())

        assert extractor.primary.client is client
        assert extractor.supplementary.client is client
        client.close.assert_awaited_once()
