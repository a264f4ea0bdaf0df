"""Embedding client for a local Ollama server."""

from __future__ import annotations

import logging
from typing import Protocol

import httpx

logger = logging.getLogger(__name__)


class Embeddings(Protocol):
    async def embed(self, texts: list[str]) -> list[list[float]]: ...


class OllamaEmbeddings:
    """Calls Ollama's ``/api/embed`` endpoint, batching long inputs."""

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = "nomic-embed-text",
        *,
        batch_size: int = 64,
        timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.batch_size = batch_size
        self._timeout = httpx.Timeout(timeout)
        self._transport = transport

    async def embed(self, texts: list[str]) -> list[list[float]]:
        vectors: list[list[float]] = []
        if not texts:
            return vectors

        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            for start in range(0, len(texts), self.batch_size):
                batch = texts[start : start + self.batch_size]
                try:
                    response = await client.post(
                        f"{self.base_url}/api/embed",
                        json={"model": self.model, "input": batch},
                    )
                    response.raise_for_status()
                except httpx.HTTPError as e:
                    raise RuntimeError(f"Embedding request to {self.base_url} failed: {e}") from e

                embeddings = response.json().get("embeddings") or []
                if len(embeddings) != len(batch):
                    raise RuntimeError(
                        f"Expected {len(batch)} embeddings from {self.model}, got {len(embeddings)}"
                    )
                vectors.extend(embeddings)

        logger.debug("Embedded %d texts with %s", len(texts), self.model)
        return vectors
