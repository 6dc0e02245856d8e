"""AI service for the LLM stages of the pipeline using Google GenAI.

Every stage (product analysis, prompt orchestration, two-clip split) asks for
a single JSON object. This service owns the client, the request config and
the response cleanup; the stages own their prompts and their fallbacks.
"""

import json
import logging
from typing import Any, Optional

from google.genai import Client
from google.genai import types

from services.prompts import strip_markdown_code_blocks

logger = logging.getLogger(__name__)


class AIServiceError(Exception):
    """Raised when the model call fails or returns something that is not a JSON object."""

    pass


class AIService:
    """Thin async wrapper around Gemini JSON-mode generation."""

    def __init__(
        self,
        api_key: Optional[str],
        model_name: str = "gemini-3-flash-preview",
    ):
        """Initialize Google GenAI client.

        Args:
            api_key: Google GenAI API key. Without one every call raises
                AIServiceError, which callers treat as "use the template".
            model_name: Gemini model to use
        """
        self.api_key = api_key
        self.model_name = model_name
        self.client = Client(api_key=api_key) if api_key else None

        if self.client:
            logger.info(f"Initialized AI service with model: {model_name}")
        else:
            logger.warning("GEMINI_API_KEY not set, AI stages will use template fallbacks")

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    async def generate_json(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
        temperature: float = 0.7,
        operation: str = "generate",
    ) -> dict[str, Any]:
        """Run one JSON-mode generation and parse the result.

        Args:
            prompt: User prompt
            system_instruction: Optional system persona
            temperature: Sampling temperature
            operation: Short name used in log lines

        Returns:
            Parsed JSON object

        Raises:
            AIServiceError: On missing key, API failure, empty or non-object output
        """
        if self.client is None:
            raise AIServiceError("GEMINI_API_KEY not configured")

        try:
            response = await self.client.aio.models.generate_content(
                model=self.model_name,
                contents=prompt,
                config=types.GenerateContentConfig(
                    system_instruction=system_instruction,
                    temperature=temperature,
                    response_mime_type="application/json",
                ),
            )
        except Exception as e:
            raise AIServiceError(f"{operation} request failed: {e}") from e

        text = response.text or ""
        if not text.strip():
            raise AIServiceError(f"{operation} returned an empty response")

        try:
            data = json.loads(strip_markdown_code_blocks(text))
        except json.JSONDecodeError as e:
            logger.debug(f"Unparseable {operation} response: {text[:500]}")
            raise AIServiceError(f"{operation} returned invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise AIServiceError(f"{operation} returned {type(data).__name__}, expected object")

        logger.debug(f"{operation} returned keys: {sorted(data)}")
        return data
