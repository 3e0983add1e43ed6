"""
Generative text client.
Talks to any OpenAI-compatible chat completions endpoint (Gemini by default).
"""
import logging
from typing import Any, Dict, Optional

from openai import AsyncOpenAI

from cinemood.config.settings import Settings
from cinemood.core.exceptions import ConfigurationError, GeneratorError
from cinemood.services.prompts import SCHEMA_NAME

logger = logging.getLogger(__name__)


class OpenAICompatibleGenerator:
    """
    One-shot prompt completion.

    With a schema the request asks for strict structured output; without one
    the model is free to answer in any shape and the caller recovers the JSON.
    """

    def __init__(self, settings: Settings, client: Optional[AsyncOpenAI] = None) -> None:
        if not settings.LLM_API_KEY and client is None:
            raise ConfigurationError(["LLM_API_KEY"])
        self._model = settings.LLM_MODEL
        self._temperature = settings.LLM_TEMPERATURE
        self._top_p = settings.LLM_TOP_P
        self._max_tokens = settings.LLM_MAX_TOKENS
        self._client = client or AsyncOpenAI(
            api_key=settings.LLM_API_KEY,
            base_url=settings.LLM_BASE_URL,
            timeout=settings.LLM_TIMEOUT_SEC,
            max_retries=0,
        )

    async def generate(self, prompt: str, schema: Optional[Dict[str, Any]] = None) -> str:
        """
        Complete a prompt.

        Raises:
            GeneratorError: Provider failure or empty completion
        """
        kwargs: Dict[str, Any] = {
            "model": self._model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self._temperature,
            "top_p": self._top_p,
            "max_tokens": self._max_tokens,
        }
        if schema is not None:
            kwargs["response_format"] = {
                "type": "json_schema",
                "json_schema": {"name": SCHEMA_NAME, "strict": True, "schema": schema},
            }

        try:
            response = await self._client.chat.completions.create(**kwargs)
        except Exception as e:
            raise GeneratorError(str(e)) from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise GeneratorError("Empty completion")
        return content

    async def close(self) -> None:
        await self._client.close()
