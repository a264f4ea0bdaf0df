"""ragterm.rag: the retrieval side of the chat CLI."""

from ragterm.rag.chain import ChainResult, ChatHistory, RetrievalChain
from ragterm.rag.chunker import TextChunker
from ragterm.rag.documents import Document
from ragterm.rag.embeddings import OllamaEmbeddings
from ragterm.rag.llm import ChatMessage, OllamaChat, OpenAIChat, create_chat_model
from ragterm.rag.loaders import (
    EpubLoader,
    PdfLoader,
    TextLoader,
    discover_documents,
    load_document,
)
from ragterm.rag.store import VectorStore

__all__ = [
    "ChainResult",
    "ChatHistory",
    "ChatMessage",
    "Document",
    "EpubLoader",
    "OllamaChat",
    "OllamaEmbeddings",
    "OpenAIChat",
    "PdfLoader",
    "RetrievalChain",
    "TextChunker",
    "TextLoader",
    "VectorStore",
    "create_chat_model",
    "discover_documents",
    "load_document",
]
