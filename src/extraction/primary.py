"""Primary structured extraction pass."""

from pydantic import ValidationError

from src.errors import ParseError
from src.utils.config import LLMConfig
from src.utils.logger import get_logger

from .llm_client import LanguageModelClient
from .models import RawExtraction
from .prompts import PRIMARY_SYSTEM_PROMPT, build_primary_prompt
from .response_parser import parse_json_response

logger = get_logger(__name__)


class PrimaryExtractor:
    """Extracts artifact metadata, sender, recipients, mentions, entities
    and locations from OCR text.

    Any failure of this pass is fatal for the request.

    Args:
        client: Language-model adapter.
        config: Language-model configuration (model name).
    """

    def __init__(self, client: LanguageModelClient, config: LLMConfig) -> None:
        self.client = client
        self.model = config.primary_model

    async def extract(self, text: str) -> RawExtraction:
        """Run the primary pass over ``text``.

        Raises:
            ProviderError: If the language model call fails.
            ParseError: If the response is not a valid extraction object.
                The error carries the raw response text.
        """
        raw = await self.client.complete(
            build_primary_prompt(text),
            system_prompt=PRIMARY_SYSTEM_PROMPT,
            model=self.model,
        )
        logger.debug("Raw first-pass LLM parse result: %s", raw)

        data = parse_json_response(raw)
        try:
            result = RawExtraction.model_validate(data)
        except ValidationError as exc:
            raise ParseError(f"First-pass output failed validation: {exc}", raw) from exc

        logger.info(
            "First pass found %d recipients, %d mentions, %d entities, %d locations",
            len(result.recipients),
            len(result.mentioned),
            len(result.entities),
            len(result.locations),
        )
        return result
