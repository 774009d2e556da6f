"""Text generation clients.

GenerationClient is the only thing the pipeline knows about the model: one
prompt in, one completion out, or ProviderError. GeminiGenerationClient
implements it on the google-genai SDK. Output is untrusted: it may be wrapped in
Markdown fences, incomplete, or not JSON at all.
"""

import asyncio
from typing import Optional, Protocol

from google import genai
from google.genai import types

from recipe_generator.pipeline.errors import ProviderError
from recipe_generator.utils.config import Config, config as default_config
from recipe_generator.utils.logger import logger


class GenerationClient(Protocol):
    async def generate(self, prompt: str) -> str:
        """Return the raw completion for `prompt` or raise ProviderError."""
        ...


class GeminiGenerationClient:
    """Single-shot Gemini text generation (no retries, no streaming)."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-1.5-flash",
        temperature: float = 0.7,
        max_output_tokens: int = 2048,
        client: Optional[genai.Client] = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: Gemini API key.
            model: Model id used for every request.
            temperature: Sampling temperature.
            max_output_tokens: Upper bound on completion length.
            client: Pre-built genai.Client (tests); created from api_key otherwise.

        Raises:
            ValueError: If api_key is empty and no client was supplied.
        """
        if client is None and not api_key:
            raise ValueError("GEMINI_API_KEY is required")

        self.model = model
        self.generation_config = types.GenerateContentConfig(
            temperature=temperature,
            max_output_tokens=max_output_tokens,
        )
        self._client = client if client is not None else genai.Client(api_key=api_key)

    @classmethod
    def from_config(cls, settings: Optional[Config] = None) -> "GeminiGenerationClient":
        settings = settings or default_config
        return cls(
            api_key=settings.GEMINI_API_KEY,
            model=settings.GEMINI_MODEL,
            temperature=settings.TEMPERATURE,
            max_output_tokens=settings.MAX_OUTPUT_TOKENS,
        )

    async def generate(self, prompt: str) -> str:
        """Send `prompt` to Gemini and return the completion text.

        The SDK call is synchronous, so it runs in a worker thread to keep the
        event loop free for other requests.

        Raises:
            ProviderError: If the API call fails or returns no text (e.g. blocked by safety filters).
        """
        logger.debug(f"Calling Gemini model {self.model} (prompt: {len(prompt)} chars)")
        try:
            response = await asyncio.to_thread(
                self._client.models.generate_content,
                model=self.model,
                contents=prompt,
                config=self.generation_config,
            )
        except Exception as e:
            raise ProviderError(f"Gemini request failed: {e}") from e

        text = response.text
        if text is None:
            raise ProviderError("Gemini returned an empty response")

        logger.debug(f"Gemini returned {len(text)} chars")
        return text
