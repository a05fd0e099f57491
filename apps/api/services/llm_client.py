"""
Language-model client over the Anthropic Messages API.

Wraps a single non-streaming messages.create call and reduces the response
to an LLMCompletion: the joined text blocks plus token usage. Any provider
or network failure becomes UpstreamTransportError; callers never see
SDK exceptions.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import anthropic
from anthropic import Anthropic

from core.config import settings
from core.exceptions import UpstreamTransportError

logger = logging.getLogger(__name__)


@dataclass
class LLMCompletion:
    text: str
    input_tokens: int = 0
    output_tokens: int = 0
    model: str = ""


class LanguageModelClient:
    def __init__(self, api_key: Optional[str] = None, timeout_s: Optional[float] = None):
        self._api_key = api_key if api_key is not None else settings.ANTHROPIC_API_KEY
        self._timeout_s = timeout_s if timeout_s is not None else settings.AI_REQUEST_TIMEOUT_S
        self._client: Optional[Anthropic] = None

    def _get_client(self) -> Anthropic:
        if self._client is None:
            if not self._api_key:
                logger.error("ANTHROPIC_API_KEY is not configured")
                raise UpstreamTransportError()
            self._client = Anthropic(api_key=self._api_key, timeout=self._timeout_s)
        return self._client

    def complete(
        self,
        system: str,
        user: str,
        temperature: float,
        max_tokens: int,
        model: str,
    ) -> LLMCompletion:
        client = self._get_client()
        try:
            response = client.messages.create(
                model=model,
                max_tokens=max_tokens,
                temperature=temperature,
                system=system,
                messages=[{"role": "user", "content": user}],
            )
        except anthropic.APIError as e:
            logger.error(f"Anthropic request failed: {type(e).__name__}: {e}")
            raise UpstreamTransportError()

        text = "".join(
            block.text for block in response.content
            if getattr(block, "type", None) == "text"
        )
        usage = getattr(response, "usage", None)
        return LLMCompletion(
            text=text,
            input_tokens=(getattr(usage, "input_tokens", 0) or 0) if usage else 0,
            output_tokens=(getattr(usage, "output_tokens", 0) or 0) if usage else 0,
            model=getattr(response, "model", None) or model,
        )


_default_client: Optional[LanguageModelClient] = None


def get_llm_client() -> LanguageModelClient:
    """FastAPI dependency. Tests override it with a scripted fake."""
    global _default_client
    if _default_client is None:
        _default_client = LanguageModelClient()
    return _default_client
