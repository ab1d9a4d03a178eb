# backend/listing_guard/services/llm.py
"""LLM transport: one request, one JSON-object reply."""
import logging
from typing import Dict, List, Optional, Protocol

import openai

from listing_guard import settings

Message = Dict[str, str]


class LLMTransportError(Exception):
    """The model call could not complete (network, auth, quota, config)."""


class LLMClient(Protocol):
    async def complete(self, system_prompt: str, messages: List[Message]) -> str:
        ...


class OpenAIChatClient:
    """Chat-completions client asking for a single JSON object."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.OPENAI_API_KEY
        self.model = model or settings.OPENAI_MODEL
        self.base_url = base_url or settings.OPENAI_BASE_URL
        self.timeout = timeout or settings.OPENAI_TIMEOUT_SEC
        self._client: Optional[openai.AsyncOpenAI] = None

    def _get_client(self) -> openai.AsyncOpenAI:
        if self._client is not None:
            return self._client
        if not self.api_key:
            logging.error("OPENAI_API_KEY is not set")
            raise LLMTransportError("AI configuration error: OPENAI_API_KEY is missing")
        self._client = openai.AsyncOpenAI(api_key=self.api_key, base_url=self.base_url, timeout=self.timeout)
        return self._client

    async def complete(self, system_prompt: str, messages: List[Message]) -> str:
        client = self._get_client()
        try:
            resp = await client.chat.completions.create(
                model=self.model,
                response_format={"type": "json_object"},
                messages=[{"role": "system", "content": system_prompt}, *messages],
            )
        except openai.OpenAIError as e:
            raise LLMTransportError(str(e)) from e
        content = resp.choices[0].message.content if resp and resp.choices else None
        return content or "{}"
