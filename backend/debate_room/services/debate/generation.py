"""
Generation Client — The one place that talks to the language model.

WHAT THIS DOES:
Wraps AsyncOpenAI so every debate component (personas, fact-checker,
judge, discovery, attachment summarizer) goes through the same door.

TWO WAYS TO CALL IT:
- complete(): buffered, waits for the full response. The state machine
  only ever needs this to make its decisions.
- stream(): incremental, yields tokens as they arrive, for live rendering.

ERRORS:
Provider exceptions never leak out of this module. They become:
- ConfigurationError  → no API key / rejected key (not retried)
- GenerationTimeout   → provider too slow
- ProviderError       → anything else from the provider

Works with any OpenAI-compatible gateway (e.g. OpenRouter) via
OPENAI_BASE_URL, which is how the premium model picker reaches
non-OpenAI models.

USAGE:
    client = GenerationClient()
    text = await client.complete(system_prompt, user_prompt, model="gpt-4o-mini")

    async for token in client.stream(system_prompt, user_prompt):
        print(token, end="")
"""

import logging
from typing import AsyncIterator, Optional

import openai
from openai import AsyncOpenAI

from debate_room.config import Settings, get_settings
from debate_room.services.debate.errors import (
    ConfigurationError,
    GenerationTimeout,
    ProviderError,
)
from debate_room.services.debate.prompts import VISION_PROMPT

logger = logging.getLogger(__name__)


class GenerationClient:
    """
    Thin async wrapper around the chat completions API.

    The underlying AsyncOpenAI client is created lazily so the service can
    boot (and report has_api_key=False) without credentials.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self._client: Optional[AsyncOpenAI] = None

    @property
    def has_api_key(self) -> bool:
        return bool(self.settings.openai_api_key)

    def _get_client(self) -> AsyncOpenAI:
        """Get or create the OpenAI client (lazy initialization)."""
        if not self.has_api_key:
            raise ConfigurationError("OpenAI API key not configured. Set OPENAI_API_KEY.")
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self.settings.openai_api_key,
                base_url=self.settings.openai_base_url or None,
                timeout=self.settings.generation_timeout_seconds,
            )
        return self._client

    def resolve_model(self, requested: Optional[str], premium: bool) -> str:
        """
        Pick the model for a debate.

        Premium users may choose any model on the allow-list; everyone
        else (and any unknown model name) gets the default debate model.
        """
        if premium and requested and requested in self.settings.premium_models:
            return requested
        if requested and requested != self.settings.debate_model:
            logger.info(f"Model '{requested}' not available, using {self.settings.debate_model}")
        return self.settings.debate_model

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        model: Optional[str] = None,
        json_mode: bool = False,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> str:
        """
        Run a buffered chat completion and return the full text.

        Args:
            system_prompt: Role-fixed instructions
            user_prompt: Per-call context
            model: Model name (defaults to the debate model)
            json_mode: Ask the provider for a JSON object response
            temperature: Sampling temperature
            max_tokens: Output cap

        Returns:
            The response text ("" if the provider returned no content)
        """
        client = self._get_client()
        model = model or self.settings.debate_model

        kwargs = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        if max_tokens:
            kwargs["max_tokens"] = max_tokens

        try:
            response = await client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=temperature,
                **kwargs,
            )
        except openai.APIError as e:
            raise _translate_error(e, model) from e

        content = response.choices[0].message.content if response.choices else None
        return content or ""

    async def stream(
        self,
        system_prompt: str,
        user_prompt: str,
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> AsyncIterator[str]:
        """Yield response tokens as the provider produces them."""
        client = self._get_client()
        model = model or self.settings.debate_model

        try:
            response = await client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=temperature,
                max_tokens=max_tokens,
                stream=True,
            )
            async for chunk in response:
                if not chunk.choices:
                    continue
                token = chunk.choices[0].delta.content
                if token:
                    yield token
        except openai.APIError as e:
            raise _translate_error(e, model) from e

    async def describe_image(self, data_url: str, context: str = "") -> str:
        """Caption an image (data URL or https URL) with the vision model."""
        client = self._get_client()
        model = self.settings.vision_model
        prompt = VISION_PROMPT
        if context:
            prompt += f"\n\nThe startup idea: {context}"

        try:
            response = await client.chat.completions.create(
                model=model,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": prompt},
                            {"type": "image_url", "image_url": {"url": data_url}},
                        ],
                    }
                ],
                max_tokens=300,
            )
        except openai.APIError as e:
            raise _translate_error(e, model) from e

        content = response.choices[0].message.content if response.choices else None
        return (content or "").strip()


def _translate_error(error: openai.APIError, model: str) -> Exception:
    """Map provider exceptions onto the debate error taxonomy."""
    if isinstance(error, openai.APITimeoutError):
        logger.error(f"Generation timed out ({model})")
        return GenerationTimeout(f"The model ({model}) took too long to respond")
    if isinstance(error, (openai.AuthenticationError, openai.PermissionDeniedError)):
        logger.error(f"Provider rejected credentials: {error}")
        return ConfigurationError(f"Provider rejected the API key: {error}")
    logger.error(f"Provider error ({model}): {error}")
    return ProviderError(str(error))
