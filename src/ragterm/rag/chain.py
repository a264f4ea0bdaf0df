"""Retrieval chain: optional question rewriting, retrieval, then answering."""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass, field
from typing import Protocol

from ragterm.config import DEFAULT_QA_PROMPT
from ragterm.rag.documents import Document
from ragterm.rag.llm import ChatMessage, ChatModel

logger = logging.getLogger(__name__)

CONTEXTUALIZE_PROMPT = (
    "Given a chat history and the latest user question, formulate a standalone "
    "question which can be understood without the chat history."
)

_PRONOUN_RE = re.compile(r"\b(it|they|that|those|he|she)\b", re.IGNORECASE)
_SHORT_QUESTION = 20
_REWRITE_HISTORY = 2


class Retriever(Protocol):
    async def similarity_search(self, query: str, k: int = 10) -> list[Document]: ...


@dataclass
class ChainResult:
    answer: str
    sources: list[Document] = field(default_factory=list)
    duration: float = 0.0
    question: str = ""


class ChatHistory:
    """The most recent *limit* chat messages."""

    def __init__(self, limit: int = 10) -> None:
        self.limit = limit
        self._messages: list[ChatMessage] = []

    def add_exchange(self, question: str, answer: str) -> None:
        self._messages.append(ChatMessage("user", question))
        self._messages.append(ChatMessage("assistant", answer))
        if len(self._messages) > self.limit:
            self._messages = self._messages[-self.limit :]

    @property
    def messages(self) -> list[ChatMessage]:
        return list(self._messages)

    def __len__(self) -> int:
        return len(self._messages)


def needs_rewrite(question: str, history: list[ChatMessage]) -> bool:
    """Short or pronoun-bearing follow-ups are rewritten before retrieval."""
    if not history:
        return False
    return len(question) < _SHORT_QUESTION or bool(_PRONOUN_RE.search(question))


def format_documents(documents: list[Document]) -> str:
    return "\n\n".join(doc.content for doc in documents)


def build_system_prompt(template: str, context: str) -> str:
    if "{context}" in template:
        return template.replace("{context}", context)
    return f"{template}\n\nContext:\n{context}"


class RetrievalChain:
    """Answers a question from retrieved documents and the chat history."""

    def __init__(
        self,
        llm: ChatModel,
        retriever: Retriever,
        *,
        qa_prompt: str = DEFAULT_QA_PROMPT,
        k: int = 10,
    ) -> None:
        self._llm = llm
        self._retriever = retriever
        self._qa_prompt = qa_prompt
        self._k = k

    async def standalone_question(self, question: str, history: list[ChatMessage]) -> str:
        messages = [
            ChatMessage("system", CONTEXTUALIZE_PROMPT),
            *history[-_REWRITE_HISTORY:],
            ChatMessage("user", question),
        ]
        rewritten = (await self._llm.complete(messages)).strip()
        logger.debug("Rewrote %r as %r", question, rewritten)
        return rewritten or question

    async def invoke(self, question: str, history: list[ChatMessage] | None = None) -> ChainResult:
        history = history or []
        start = time.monotonic()

        query = question
        if needs_rewrite(question, history):
            query = await self.standalone_question(question, history)

        documents = await self._retriever.similarity_search(query, self._k)
        logger.info("Retrieved %d documents for %r", len(documents), query)

        messages = [
            ChatMessage("system", build_system_prompt(self._qa_prompt, format_documents(documents))),
            *history,
            ChatMessage("user", question),
        ]
        answer = await self._llm.complete(messages)

        return ChainResult(
            answer=answer,
            sources=documents,
            duration=time.monotonic() - start,
            question=query,
        )
