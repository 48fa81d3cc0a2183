"""Language-model adapter over the OpenAI chat completions API.

Each call is a single awaitable unit with no retries, so a caller can
wrap it in a timeout without touching reconciliation.
"""

from openai import AsyncOpenAI, OpenAIError

from src.errors import ProviderError
from src.utils.config import LLMConfig
from src.utils.logger import get_logger

logger = get_logger(__name__)


class LanguageModelClient:
    """Thin async wrapper returning the raw text of a chat completion.

    Args:
        config: Language-model configuration.
    """

    def __init__(self, config: LLMConfig) -> None:
        self.config = config
        self._client: AsyncOpenAI | None = None

    def _get_client(self) -> AsyncOpenAI:
        """Lazily create the OpenAI client on first use.

        Raises:
            ProviderError: If the client cannot be configured (e.g. no API key).
        """
        if self._client is None:
            kwargs: dict[str, object] = {
                "api_key": self.config.resolved_api_key(),
                "base_url": self.config.base_url,
                "max_retries": self.config.max_retries,
            }
            if self.config.timeout_seconds is not None:
                kwargs["timeout"] = self.config.timeout_seconds
            try:
                self._client = AsyncOpenAI(**kwargs)
            except OpenAIError as exc:
                raise ProviderError(f"Language model client unavailable: {exc}") from exc
        return self._client

    async def complete(
        self,
        prompt: str,
        system_prompt: str,
        model: str,
    ) -> str:
        """Send one chat completion request and return the message text.

        Args:
            prompt: User message content.
            system_prompt: System message content.
            model: Model name to query.

        Returns:
            Raw message content (may be empty).

        Raises:
            ProviderError: On any network or provider failure.
        """
        client = self._get_client()
        logger.info("Sending prompt to %s, length: %d", model, len(prompt))
        try:
            response = await client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": prompt},
                ],
                temperature=self.config.temperature,
            )
        except OpenAIError as exc:
            raise ProviderError(f"Language model call failed: {exc}") from exc

        if not response.choices:
            raise ProviderError("Language model returned no choices")
        return response.choices[0].message.content or ""

    async def close(self) -> None:
        """Close the underlying HTTP connection pool, if one was opened."""
        if self._client is not None:
            await self._client.close()
            self._client = None
