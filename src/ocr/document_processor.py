"""Upload-to-OCR stage of the ingestion pipeline.

Stages the uploaded bytes in a temporary file, runs OCR on it, and
guarantees the temporary file is removed whether OCR succeeds or not.
"""

import tempfile
from pathlib import Path

from src.errors import InputError
from src.utils.config import OCRConfig
from src.utils.logger import get_logger

from .tesseract_engine import OCRResult, TesseractEngine

logger = get_logger(__name__)


class DocumentProcessor:
    """Runs OCR over an uploaded document image.

    Args:
        config: OCR configuration.
        engine: OCR engine to use. Built from ``config`` when omitted.
    """

    def __init__(
        self, config: OCRConfig | None = None, engine: TesseractEngine | None = None
    ) -> None:
        self.config = config or OCRConfig()
        self.ocr_engine = engine or TesseractEngine(
            tesseract_cmd=self.config.tesseract_cmd,
            default_lang=self.config.default_lang,
            psm=self.config.psm,
        )

    def process(self, content: bytes, filename: str = "document") -> OCRResult:
        """OCR an uploaded document.

        Args:
            content: Raw uploaded file bytes.
            filename: Original upload name; its suffix is kept on the temp file.

        Returns:
            OCR result with full text and annotations.

        Raises:
            InputError: If no content was uploaded.
            ProviderError: If OCR fails.
        """
        if not content:
            raise InputError("No file provided")

        logger.info("Processing document: %s", filename)
        suffix = Path(filename).suffix or ".img"

        with tempfile.TemporaryDirectory(prefix="artifact-upload-") as tmp_dir:
            temp_path = Path(tmp_dir) / f"upload{suffix}"
            temp_path.write_bytes(content)
            logger.debug("Wrote upload to temp path %s", temp_path)
            result = self.ocr_engine.detect_text(temp_path)
        logger.debug("Temp file deleted")

        logger.info(
            "OCR complete for %s. Extracted text length: %d",
            filename,
            len(result.full_text),
        )
        return result
