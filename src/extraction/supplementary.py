"""Supplementary free-text sweep for people, places and entities."""

from pydantic import ValidationError

from src.errors import ParseError, ProviderError
from src.utils.config import LLMConfig
from src.utils.logger import get_logger

from .llm_client import LanguageModelClient
from .models import AdditionalExtraction
from .prompts import SUPPLEMENTARY_SYSTEM_PROMPT, build_supplementary_prompt
from .response_parser import parse_json_response

logger = get_logger(__name__)


class SupplementaryExtractor:
    """Second, independent language-model pass over the OCR text.

    Failures never propagate: a provider or parse error yields an empty
    ``AdditionalExtraction`` so the pipeline continues with first-pass data.

    Args:
        client: Language-model adapter.
        config: Language-model configuration (model name).
    """

    def __init__(self, client: LanguageModelClient, config: LLMConfig) -> None:
        self.client = client
        self.model = config.supplementary_model

    async def extract(self, text: str) -> AdditionalExtraction:
        logger.info("Starting second-pass extraction")
        try:
            raw = await self.client.complete(
                build_supplementary_prompt(text),
                system_prompt=SUPPLEMENTARY_SYSTEM_PROMPT,
                model=self.model,
            )
            logger.debug("Raw second-pass LLM result: %s", raw)
            result = AdditionalExtraction.model_validate(parse_json_response(raw))
        except ProviderError as exc:
            logger.warning("Second-pass call failed, continuing without it: %s", exc)
            return AdditionalExtraction()
        except (ParseError, ValidationError) as exc:
            logger.warning("Failed to parse second-pass JSON: %s", exc)
            return AdditionalExtraction()

        logger.info(
            "Second pass found %d people, %d entities, %d locations",
            len(result.additional_people),
            len(result.additional_entities),
            len(result.additional_locations),
        )
        return result
