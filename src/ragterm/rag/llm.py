"""Chat model clients: a local Ollama server or an OpenAI-compatible API."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal, Protocol

import httpx
import openai

from ragterm.config import Config

logger = logging.getLogger(__name__)

Role = Literal["system", "user", "assistant"]


@dataclass
class ChatMessage:
    role: Role
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


class ChatModel(Protocol):
    async def complete(self, messages: list[ChatMessage]) -> str: ...


class OllamaChat:
    """Non-streaming ``/api/chat`` calls against Ollama."""

    def __init__(
        self,
        base_url: str,
        model: str,
        *,
        temperature: float = 0.0,
        timeout: float = 300.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.temperature = temperature
        self._timeout = httpx.Timeout(timeout)
        self._transport = transport

    async def complete(self, messages: list[ChatMessage]) -> str:
        body = {
            "model": self.model,
            "messages": [m.to_dict() for m in messages],
            "stream": False,
            "options": {"temperature": self.temperature},
        }
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            try:
                response = await client.post(f"{self.base_url}/api/chat", json=body)
                response.raise_for_status()
            except httpx.HTTPError as e:
                raise RuntimeError(f"Ollama request failed: {e}") from e

        return (response.json().get("message") or {}).get("content", "")


class OpenAIChat:
    """Chat Completions via the ``openai`` SDK (any compatible base URL)."""

    def __init__(
        self,
        model: str,
        *,
        api_key: str | None = None,
        base_url: str | None = None,
        client: openai.AsyncOpenAI | None = None,
    ) -> None:
        self.model = model
        self._client = client or openai.AsyncOpenAI(api_key=api_key, base_url=base_url)

    async def complete(self, messages: list[ChatMessage]) -> str:
        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=[m.to_dict() for m in messages],
            )
        except openai.OpenAIError as e:
            raise RuntimeError(f"{self.model} request failed: {e}") from e

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""


def create_chat_model(config: Config) -> ChatModel:
    """Pick the chat model for ``config.provider``."""
    if config.provider == "local":
        logger.info("Using local model %s at %s", config.local_llm_model, config.ollama_base_url)
        return OllamaChat(config.ollama_base_url, config.local_llm_model)
    if not config.api_key:
        raise ValueError("API_KEY (or OPENAI_API_KEY) must be set for the 'api' provider")
    logger.info("Using API model %s", config.api_model)
    return OpenAIChat(config.api_model, api_key=config.api_key, base_url=config.api_base_url)
