"""Multi-pass extraction combining language-model and local NLP passes.

Runs the primary structured pass, the supplementary sweep and the
optional local tagger over the same OCR text. The passes are independent
of each other, so the language-model calls may run concurrently; every
pass has settled before the result is returned.
"""

import asyncio
from dataclasses import dataclass

from src.errors import ProviderError
from src.utils.config import AppConfig
from src.utils.logger import get_logger

from .llm_client import LanguageModelClient
from .local_tagger import LocalTagger
from .models import AdditionalExtraction, RawExtraction, TaggerResult
from .primary import PrimaryExtractor
from .supplementary import SupplementaryExtractor

logger = get_logger(__name__)


@dataclass
class ExtractionPasses:
    """Results of every extraction pass over one document."""

    primary: RawExtraction
    supplementary: AdditionalExtraction
    tagged: TaggerResult | None = None


def merge_extractions(
    primary: RawExtraction, supplementary: AdditionalExtraction
) -> RawExtraction:
    """Fold the supplementary pass into a copy of the primary result.

    Additional people are appended to ``mentioned`` only, never to the
    sender or recipients. The inputs are left untouched.

    Args:
        primary: First-pass extraction.
        supplementary: Second-pass extraction.

    Returns:
        Merged extraction suitable for reporting back to the caller.
    """
    return primary.model_copy(
        update={
            "mentioned": [*primary.mentioned, *supplementary.additional_people],
            "entities": [*primary.entities, *supplementary.additional_entities],
            "locations": [*primary.locations, *supplementary.additional_locations],
        }
    )


class MultiPassExtractor:
    """Orchestrates the extraction passes for one document.

    Args:
        config: Application configuration.
        client: Language-model adapter. Built from ``config.llm`` when omitted.
        tagger: Local tagger. Built from ``config.nlp`` when omitted.
    """

    def __init__(
        self,
        config: AppConfig,
        client: LanguageModelClient | None = None,
        tagger: LocalTagger | None = None,
    ) -> None:
        self.config = config
        self.client = client or LanguageModelClient(config.llm)
        self.primary = PrimaryExtractor(self.client, config.llm)
        self.supplementary = SupplementaryExtractor(self.client, config.llm)
        self.tagger = tagger or LocalTagger(config.nlp.model_name)

    async def extract(self, text: str, use_local_nlp: bool | None = None) -> ExtractionPasses:
        """Run all enabled passes over ``text``.

        Args:
            text: Full OCR text.
            use_local_nlp: Override for ``config.nlp.enabled``.

        Returns:
            Results of every pass. Disabled passes contribute empty results.

        Raises:
            ProviderError: If the primary language-model call fails.
            ParseError: If the primary response cannot be parsed.
        """
        run_tagger = self.config.nlp.enabled if use_local_nlp is None else use_local_nlp

        if not self.config.pipeline.concurrent_extraction:
            primary = await self.primary.extract(text)
            supplementary = await self._run_supplementary(text)
            tagged = await self._run_tagger(text) if run_tagger else None
            return ExtractionPasses(primary, supplementary, tagged)

        side_tasks = [asyncio.create_task(self._run_supplementary(text))]
        if run_tagger:
            side_tasks.append(asyncio.create_task(self._run_tagger(text)))

        try:
            primary = await self.primary.extract(text)
        except BaseException:
            for task in side_tasks:
                task.cancel()
            await asyncio.gather(*side_tasks, return_exceptions=True)
            raise

        results = await asyncio.gather(*side_tasks)
        supplementary = results[0]
        tagged = results[1] if run_tagger else None
        return ExtractionPasses(primary, supplementary, tagged)

    async def aclose(self) -> None:
        """Release the language-model client's connections."""
        await self.client.close()

    async def _run_supplementary(self, text: str) -> AdditionalExtraction:
        if not self.config.pipeline.supplementary_enabled:
            return AdditionalExtraction()
        return await self.supplementary.extract(text)

    async def _run_tagger(self, text: str) -> TaggerResult:
        try:
            return await asyncio.to_thread(self.tagger.tag, text)
        except ProviderError as exc:
            logger.warning("Local NLP pass unavailable, skipping: %s", exc)
            return TaggerResult()
