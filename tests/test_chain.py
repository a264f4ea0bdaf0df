"""Tests for ragterm.rag.chain."""

from __future__ import annotations

import pytest

from ragterm.rag.chain import (
    CONTEXTUALIZE_PROMPT,
    ChatHistory,
    RetrievalChain,
    build_system_prompt,
    format_documents,
    needs_rewrite,
)
from ragterm.rag.documents import Document
from ragterm.rag.llm import ChatMessage


class FakeLLM:
    def __init__(self, *replies: str) -> None:
        self._replies = list(replies)
        self.calls: list[list[ChatMessage]] = []

    async def complete(self, messages: list[ChatMessage]) -> str:
        self.calls.append(messages)
        return self._replies.pop(0)


class FakeRetriever:
    def __init__(self, documents: list[Document]) -> None:
        self._documents = documents
        self.queries: list[tuple[str, int]] = []

    async def similarity_search(self, query: str, k: int = 10) -> list[Document]:
        self.queries.append((query, k))
        return self._documents[:k]


DOCS = [
    Document("Dragons breathe fire.", {"source": "bestiary.pdf"}),
    Document("Elves live long.", {"source": "peoples.epub"}),
]

HISTORY = [
    ChatMessage("user", "Tell me about dragons in the setting"),
    ChatMessage("assistant", "Dragons are ancient."),
]


class TestChatHistory:
    def test_add_exchange(self) -> None:
        history = ChatHistory()
        history.add_exchange("q", "a")
        assert [m.to_dict() for m in history.messages] == [
            {"role": "user", "content": "q"},
            {"role": "assistant", "content": "a"},
        ]

    def test_limit(self) -> None:
        history = ChatHistory(limit=4)
        for i in range(5):
            history.add_exchange(f"q{i}", f"a{i}")
        assert len(history) == 4
        assert [m.content for m in history.messages] == ["q3", "a3", "q4", "a4"]

    def test_messages_is_a_copy(self) -> None:
        history = ChatHistory()
        history.messages.append(ChatMessage("user", "x"))
        assert len(history) == 0


class TestHelpers:
    def test_no_rewrite_without_history(self) -> None:
        assert not needs_rewrite("why?", [])

    def test_short_question_is_rewritten(self) -> None:
        assert needs_rewrite("and elves?", HISTORY)

    def test_pronoun_is_rewritten(self) -> None:
        assert needs_rewrite("How long do they usually live in the north?", HISTORY)

    def test_pronoun_must_be_a_word(self) -> None:
        assert not needs_rewrite("What is the theory behind sheep farming here?", HISTORY)

    def test_format_documents(self) -> None:
        assert format_documents(DOCS) == "Dragons breathe fire.\n\nElves live long."

    def test_build_system_prompt(self) -> None:
        assert build_system_prompt("Use:\n{context}\nEnd", "CTX") == "Use:\nCTX\nEnd"
        assert build_system_prompt("Be brief.", "CTX") == "Be brief.\n\nContext:\nCTX"


class TestRetrievalChain:
    @pytest.mark.asyncio
    async def test_first_question(self) -> None:
        llm = FakeLLM("Fire.")
        retriever = FakeRetriever(DOCS)
        chain = RetrievalChain(llm, retriever, qa_prompt="Context: {context}", k=5)

        result = await chain.invoke("What do dragons breathe?")

        assert result.answer == "Fire."
        assert result.sources == DOCS
        assert result.question == "What do dragons breathe?"
        assert result.duration >= 0
        assert retriever.queries == [("What do dragons breathe?", 5)]

        [messages] = llm.calls
        assert messages[0].role == "system"
        assert "Dragons breathe fire." in messages[0].content
        assert messages[-1] == ChatMessage("user", "What do dragons breathe?")

    @pytest.mark.asyncio
    async def test_follow_up_is_rewritten(self) -> None:
        llm = FakeLLM("How long do elves live?", "Very long.")
        retriever = FakeRetriever(DOCS)
        chain = RetrievalChain(llm, retriever)

        result = await chain.invoke("and elves?", HISTORY)

        assert result.answer == "Very long."
        assert result.question == "How long do elves live?"
        assert retriever.queries[0][0] == "How long do elves live?"

        rewrite, answer = llm.calls
        assert rewrite[0] == ChatMessage("system", CONTEXTUALIZE_PROMPT)
        assert rewrite[1:-1] == HISTORY
        # the answer sees the original question and the full history
        assert answer[1:-1] == HISTORY
        assert answer[-1] == ChatMessage("user", "and elves?")

    @pytest.mark.asyncio
    async def test_rewrite_uses_recent_history_only(self) -> None:
        long_history = [ChatMessage("user", f"m{i}") for i in range(6)]
        llm = FakeLLM("standalone", "answer")
        chain = RetrievalChain(llm, FakeRetriever([]))

        await chain.invoke("why?", long_history)

        rewrite = llm.calls[0]
        assert [m.content for m in rewrite[1:-1]] == ["m4", "m5"]

    @pytest.mark.asyncio
    async def test_empty_rewrite_falls_back(self) -> None:
        llm = FakeLLM("   ", "answer")
        retriever = FakeRetriever([])
        chain = RetrievalChain(llm, retriever)

        result = await chain.invoke("why?", HISTORY)

        assert result.question == "why?"
        assert result.sources == []
