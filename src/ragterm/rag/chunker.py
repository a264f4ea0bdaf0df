"""Fixed-window text chunking."""

from __future__ import annotations

from ragterm.rag.documents import Document


class TextChunker:
    """Split documents into overlapping windows of ``chunk_size`` characters.

    Consecutive chunks start ``chunk_size - chunk_overlap`` characters apart.
    Each chunk carries the parent metadata plus its ``chunk_index``.
    """

    def __init__(self, chunk_size: int = 500, chunk_overlap: int = 50) -> None:
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        if not 0 <= chunk_overlap < chunk_size:
            raise ValueError(
                f"chunk_overlap must be in [0, chunk_size), got {chunk_overlap}"
            )
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap

    def chunk_document(self, document: Document) -> list[Document]:
        content = document.content
        step = self.chunk_size - self.chunk_overlap
        chunks: list[Document] = []

        for chunk_index, start in enumerate(range(0, len(content), step)):
            chunks.append(
                Document(
                    content=content[start : start + self.chunk_size],
                    metadata={**document.metadata, "chunk_index": chunk_index},
                )
            )

        return chunks

    def chunk_documents(self, documents: list[Document]) -> list[Document]:
        return [chunk for doc in documents for chunk in self.chunk_document(doc)]
