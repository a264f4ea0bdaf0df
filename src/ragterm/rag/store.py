"""ChromaDB-backed vector store.

The Chroma client is synchronous; every call into it runs in a worker thread
so the event loop stays free while the server answers.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any
from urllib.parse import urlparse

import chromadb

from ragterm.config import Config
from ragterm.rag.documents import Document
from ragterm.rag.embeddings import Embeddings

logger = logging.getLogger(__name__)


def _sanitize_metadata(metadata: dict[str, Any]) -> dict[str, Any]:
    """Chroma only stores str, int, float and bool metadata values."""
    sanitized: dict[str, Any] = {}
    for key, value in metadata.items():
        if isinstance(value, (str, int, float, bool)):
            sanitized[key] = value
        elif value is None:
            sanitized[key] = ""
        else:
            sanitized[key] = str(value)
    return sanitized


class VectorStore:
    """A Chroma collection plus the embedding model used to fill and query it."""

    def __init__(self, client: Any, collection_name: str, embeddings: Embeddings) -> None:
        self._client = client
        self.collection_name = collection_name
        self._embeddings = embeddings
        self._collection = client.get_or_create_collection(
            name=collection_name,
            metadata={"hnsw:space": "cosine"},
        )

    @classmethod
    async def connect(cls, config: Config, embeddings: Embeddings) -> VectorStore:
        """Connect to the Chroma server at ``config.chroma_url``."""
        url = urlparse(config.chroma_url)

        def _open() -> VectorStore:
            client = chromadb.HttpClient(
                host=url.hostname or "localhost",
                port=url.port or (443 if url.scheme == "https" else 8000),
                ssl=url.scheme == "https",
            )
            return cls(client, config.collection_name, embeddings)

        return await asyncio.to_thread(_open)

    async def count(self) -> int:
        return await asyncio.to_thread(self._collection.count)

    async def add_documents(self, chunks: list[Document]) -> None:
        if not chunks:
            logger.warning("No documents to add")
            return

        vectors = await self._embeddings.embed([chunk.content for chunk in chunks])
        await asyncio.to_thread(
            self._collection.upsert,
            ids=[
                f"{chunk.source}:{chunk.metadata.get('chunk_index', i)}"
                for i, chunk in enumerate(chunks)
            ],
            embeddings=vectors,
            documents=[chunk.content for chunk in chunks],
            metadatas=[_sanitize_metadata(chunk.metadata) for chunk in chunks],
        )
        logger.info("Added %d chunks to collection '%s'", len(chunks), self.collection_name)

    async def similarity_search(self, query: str, k: int = 10) -> list[Document]:
        total = await self.count()
        if total == 0:
            return []

        [vector] = await self._embeddings.embed([query])
        results = await asyncio.to_thread(
            self._collection.query,
            query_embeddings=[vector],
            n_results=min(k, total),
            include=["documents", "metadatas"],
        )

        documents = (results.get("documents") or [[]])[0] or []
        metadatas = (results.get("metadatas") or [[]])[0] or []
        return [
            Document(
                content=content or "",
                metadata=dict(metadatas[i] or {}) if i < len(metadatas) else {},
            )
            for i, content in enumerate(documents)
        ]
