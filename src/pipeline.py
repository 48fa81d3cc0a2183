"""End-to-end document pipeline: OCR, extraction, reconciliation, assembly.

External provider calls (OCR and the language-model passes) are the only
suspension points and are each awaited as a single unit before
reconciliation starts, so a timeout can be layered around any of them.
Per-document state is created inside ``process`` and discarded after; a
pipeline instance may be reused across documents and is closed with
``aclose``.
"""

import asyncio
from dataclasses import dataclass, field

from src.extraction.models import RawExtraction
from src.extraction.multi_pass import MultiPassExtractor, merge_extractions
from src.ocr.document_processor import DocumentProcessor
from src.ocr.tesseract_engine import OCRResult
from src.reconciliation.annotations import cross_reference_annotations
from src.reconciliation.engine import reconcile
from src.reconciliation.records import CanonicalSchema, PersonAnnotation
from src.utils.config import AppConfig
from src.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class PipelineResult:
    """Everything produced for one uploaded document.

    When OCR finds no text the pipeline stops early: ``final_schema`` and
    ``parse_result`` are ``None`` and this is not an error.
    """

    extracted_text: str
    final_schema: CanonicalSchema | None = None
    parse_result: RawExtraction | None = None
    person_annotations: list[PersonAnnotation] = field(default_factory=list)

    @property
    def has_text(self) -> bool:
        return bool(self.extracted_text)


class DocumentPipeline:
    """Processes one uploaded document image into the canonical schema.

    Args:
        config: Application configuration.
        processor: OCR stage. Built from ``config.ocr`` when omitted.
        extractor: Extraction passes. Built from ``config`` when omitted.
    """

    def __init__(
        self,
        config: AppConfig,
        processor: DocumentProcessor | None = None,
        extractor: MultiPassExtractor | None = None,
    ) -> None:
        self.config = config
        self.processor = processor or DocumentProcessor(config.ocr)
        self.extractor = extractor or MultiPassExtractor(config)

    async def process(
        self,
        content: bytes,
        filename: str = "document",
        use_local_nlp: bool | None = None,
    ) -> PipelineResult:
        """Run the full pipeline over uploaded image bytes.

        Args:
            content: Raw image bytes.
            filename: Original upload filename.
            use_local_nlp: Override for ``config.nlp.enabled``.

        Returns:
            Canonical schema, merged parse result and person annotations.

        Raises:
            InputError: If ``content`` is empty.
            ProviderError: If OCR or the primary language-model call fails.
            ParseError: If the primary response is not valid JSON.
        """
        ocr_result: OCRResult = await asyncio.to_thread(
            self.processor.process, content, filename
        )
        text = ocr_result.full_text
        if not text:
            logger.info("No text extracted from %s, returning early", filename)
            return PipelineResult(extracted_text="")

        passes = await self.extractor.extract(text, use_local_nlp=use_local_nlp)

        schema = reconcile(
            passes.primary,
            passes.supplementary,
            passes.tagged,
            transcription=text,
            collection_id=self.config.pipeline.collection_id,
            source_filename=filename,
        )
        person_annotations = cross_reference_annotations(
            schema.people, ocr_result.annotations
        )

        logger.info("Finished building final schema for %s", filename)
        return PipelineResult(
            extracted_text=text,
            final_schema=schema,
            parse_result=merge_extractions(passes.primary, passes.supplementary),
            person_annotations=person_annotations,
        )

    async def aclose(self) -> None:
        """Close provider connections held by the extraction passes."""
        await self.extractor.aclose()
