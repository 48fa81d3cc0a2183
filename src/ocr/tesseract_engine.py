"""Tesseract OCR adapter producing full text and spatial annotations.

The first annotation of every result covers the whole page and carries
the full text; the remaining annotations are individual words with
four-vertex polygons in source-image pixel coordinates.
"""

import io
from dataclasses import dataclass
from pathlib import Path

import pytesseract
from PIL import Image, UnidentifiedImageError

from src.errors import ProviderError
from src.reconciliation.records import Annotation, Vertex
from src.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class OCRResult:
    """OCR output for one document image."""

    full_text: str
    annotations: list[Annotation]
    language: str
    confidence: float

    @property
    def word_annotations(self) -> list[Annotation]:
        """Annotations excluding the leading full-page annotation."""
        return self.annotations[1:]


def box_to_vertices(left: int, top: int, width: int, height: int) -> list[Vertex]:
    """Convert an axis-aligned box into a clockwise polygon from top-left."""
    right = left + width
    bottom = top + height
    return [
        Vertex(x=left, y=top),
        Vertex(x=right, y=top),
        Vertex(x=right, y=bottom),
        Vertex(x=left, y=bottom),
    ]


class TesseractEngine:
    """Wrapper around Tesseract OCR for document text detection.

    Args:
        tesseract_cmd: Path to the Tesseract executable.
            If ``None``, uses the system default.
        default_lang: Default OCR language code.
        psm: Tesseract page segmentation mode.
    """

    def __init__(
        self,
        tesseract_cmd: str | None = None,
        default_lang: str = "eng",
        psm: int = 3,
    ) -> None:
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        self.default_lang = default_lang
        self.psm = psm

    def detect_text(self, source: Path | bytes, lang: str | None = None) -> OCRResult:
        """Detect text in an image with word-level bounding polygons.

        Args:
            source: Path to an image file, or raw image bytes.
            lang: OCR language code. Defaults to the engine default.

        Returns:
            OCRResult whose first annotation spans the full page.

        Raises:
            ProviderError: If the image cannot be read or Tesseract fails.
        """
        lang = lang or self.default_lang
        config = f"--psm {self.psm}"

        try:
            image = self._open_image(source)
            text = pytesseract.image_to_string(image, lang=lang, config=config)
            data = pytesseract.image_to_data(
                image,
                lang=lang,
                config=config,
                output_type=pytesseract.Output.DICT,
            )
        except (pytesseract.TesseractError, UnidentifiedImageError, OSError) as exc:
            raise ProviderError(f"OCR failed: {exc}") from exc

        full_text = text.strip()
        width, height = image.size
        annotations = [
            Annotation(text=full_text, vertices=box_to_vertices(0, 0, width, height))
        ]

        total_conf = 0.0
        for i in range(len(data["text"])):
            conf = float(data["conf"][i])
            word_text = str(data["text"][i]).strip()

            if conf > 0 and word_text:
                annotations.append(
                    Annotation(
                        text=word_text,
                        vertices=box_to_vertices(
                            int(data["left"][i]),
                            int(data["top"][i]),
                            int(data["width"][i]),
                            int(data["height"][i]),
                        ),
                    )
                )
                total_conf += conf

        word_count = len(annotations) - 1
        avg_conf = (total_conf / word_count / 100.0) if word_count > 0 else 0.0

        logger.info(
            "OCR extracted %d words with average confidence %.2f",
            word_count,
            avg_conf,
        )
        return OCRResult(
            full_text=full_text,
            annotations=annotations,
            language=lang,
            confidence=avg_conf,
        )

    @staticmethod
    def _open_image(source: Path | bytes) -> Image.Image:
        if isinstance(source, bytes):
            image = Image.open(io.BytesIO(source))
        else:
            image = Image.open(Path(source))
        image.load()
        return image
