"""Tests for ragterm.cli."""

from __future__ import annotations

import io
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from ragterm import cli
from ragterm.config import Config
from ragterm.rag import llm as llm_module
from ragterm.rag.documents import Document
from ragterm.rag.llm import ChatMessage


class FakeStore:
    def __init__(self, documents: list[Document] | None = None) -> None:
        self.documents = list(documents or [])
        self.added: list[Document] = []

    async def count(self) -> int:
        return len(self.documents) + len(self.added)

    async def add_documents(self, chunks: list[Document]) -> None:
        self.added.extend(chunks)

    async def similarity_search(self, query: str, k: int = 10) -> list[Document]:
        return self.documents[:k]


class FakeLLM:
    def __init__(self, answer: str = "**Dragons** breathe fire.") -> None:
        self.answer = answer
        self.calls: list[list[ChatMessage]] = []

    async def complete(self, messages: list[ChatMessage]) -> str:
        self.calls.append(messages)
        return self.answer


def _connect_to(store: FakeStore):
    async def connect(config: Config) -> FakeStore:
        return store

    return connect


def _inputs(*lines: str):
    remaining = list(lines)

    def fake_input(prompt: str = "") -> str:
        if not remaining:
            raise EOFError
        return remaining.pop(0)

    return fake_input


class TestParseArgs:
    def test_no_command(self) -> None:
        args = cli.parse_args([])
        assert args.command is None
        assert args.log_level == "warning"
        assert not hasattr(args, "no_color")

    def test_render(self) -> None:
        args = cli.parse_args(["render", "answer.md", "--width", "60", "--no-color"])
        assert args.command == "render"
        assert args.file == "answer.md"
        assert args.width == 60
        assert args.no_color is True

    def test_common_options_before_command(self) -> None:
        args = cli.parse_args(["--no-color", "chat", "-p", "local"])
        assert args.no_color is True
        assert args.provider == "local"

    def test_ingest_docs(self) -> None:
        args = cli.parse_args(["ingest", "--docs", "books"])
        assert args.docs == Path("books")

    def test_bad_provider(self) -> None:
        with pytest.raises(SystemExit):
            cli.parse_args(["chat", "-p", "cloud"])


class TestRender:
    def test_main_render_file(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        path = tmp_path / "answer.md"
        path.write_text("# Title\n\n| A | B |\n| 1 | 2 |\n", encoding="utf-8")

        with patch.dict(os.environ, {}, clear=True):
            code = cli.main(
                ["--env-file", str(tmp_path / "none.env"), "render", str(path), "--no-color", "--width", "80"]
            )

        assert code == 0
        out = capsys.readouterr().out
        assert "\x1b[" not in out
        assert out.splitlines()[0] == "Title"
        assert "│ A        │ B        │" in out

    def test_render_stdin(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO("- **item**"))
        out = io.StringIO()
        args = cli.parse_args(["render", "--no-color"])
        assert cli.run_render(args, Config(no_color=True), out) == 0
        assert out.getvalue() == "• item\n"

    def test_render_colour(self, tmp_path: Path) -> None:
        path = tmp_path / "a.md"
        path.write_text("**x**", encoding="utf-8")
        out = io.StringIO()
        cli.run_render(cli.parse_args(["render", str(path)]), Config(), out)
        assert "\x1b[1m" in out.getvalue()

    def test_bad_env_value(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        with patch.dict(os.environ, {"RAGTERM_CHUNK_SIZE": "lots"}, clear=True):
            code = cli.main(["--env-file", str(tmp_path / "none.env"), "render"])
        assert code == 2
        assert "RAGTERM_CHUNK_SIZE" in capsys.readouterr().err


class TestIngest:
    @pytest.mark.asyncio
    async def test_ingest_documents(self, tmp_path: Path) -> None:
        (tmp_path / "a.txt").write_text("x" * 25)
        (tmp_path / "b.md").write_text("")
        (tmp_path / "c.pdf").write_bytes(b"broken")
        config = Config(docs_dir=tmp_path, chunk_size=10, chunk_overlap=0)
        store = FakeStore()
        out = io.StringIO()

        assert await cli.ingest_documents(config, store, out) == 1

        assert len(store.added) == 3
        assert out.getvalue().splitlines() == ["[1/3] a.txt", "[2/3] b.md", "[3/3] c.pdf"]

    @pytest.mark.asyncio
    async def test_no_documents(self, tmp_path: Path) -> None:
        out = io.StringIO()
        assert await cli.ingest_documents(Config(docs_dir=tmp_path), FakeStore(), out) == 0
        assert "No documents found" in out.getvalue()


class TestChat:
    def test_format_sources(self) -> None:
        sources = [
            Document("a", {"source": "x.pdf"}),
            Document("b", {"source": "y.epub"}),
            Document("c", {"source": "x.pdf"}),
            Document("d", {}),
        ]
        assert cli.format_sources(sources) == "• x.pdf\n• y.epub"

    @pytest.mark.asyncio
    async def test_session(self, monkeypatch: pytest.MonkeyPatch) -> None:
        store = FakeStore([Document("Dragons breathe fire.", {"source": "bestiary.pdf"})])
        fake_llm = FakeLLM()
        monkeypatch.setattr(cli, "_connect_store", _connect_to(store))
        monkeypatch.setattr(llm_module, "create_chat_model", lambda config: fake_llm)
        monkeypatch.setattr("builtins.input", _inputs("What do dragons breathe?", "  ", "exit"))

        out = io.StringIO()
        code = await cli.run_chat(Config(no_color=True), width=80, out=out)

        text = out.getvalue()
        assert code == 0
        assert "Database contains 1 chunks." in text
        assert "Dragons breathe fire." in text
        assert "**" not in text
        assert "• bestiary.pdf" in text
        assert text.endswith("Session ended.\n")
        assert len(fake_llm.calls) == 1

    @pytest.mark.asyncio
    async def test_model_error_is_reported(self, monkeypatch: pytest.MonkeyPatch) -> None:
        class FailingLLM:
            async def complete(self, messages: list[ChatMessage]) -> str:
                raise RuntimeError("model offline")

        monkeypatch.setattr(cli, "_connect_store", _connect_to(FakeStore([Document("x")])))
        monkeypatch.setattr(llm_module, "create_chat_model", lambda config: FailingLLM())
        monkeypatch.setattr("builtins.input", _inputs("What is this about anyway?"))

        out = io.StringIO()
        assert await cli.run_chat(Config(no_color=True), width=80, out=out) == 0
        assert "Error: model offline" in out.getvalue()

    @pytest.mark.asyncio
    async def test_error_panel_has_red_border(self, monkeypatch: pytest.MonkeyPatch) -> None:
        class FailingLLM:
            async def complete(self, messages: list[ChatMessage]) -> str:
                raise RuntimeError("model offline")

        monkeypatch.setattr(cli, "_connect_store", _connect_to(FakeStore([Document("x")])))
        monkeypatch.setattr(llm_module, "create_chat_model", lambda config: FailingLLM())
        monkeypatch.setattr("builtins.input", _inputs("What is this about anyway?"))

        out = io.StringIO()
        await cli.run_chat(Config(), width=80, out=out)
        assert "\x1b[31m╭─ Error " in out.getvalue()

    @pytest.mark.asyncio
    async def test_empty_store_triggers_ingestion(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "notes.txt").write_text("Elves live long.")
        store = FakeStore()
        monkeypatch.setattr(cli, "_connect_store", _connect_to(store))
        monkeypatch.setattr(llm_module, "create_chat_model", lambda config: FakeLLM())
        monkeypatch.setattr("builtins.input", _inputs())

        out = io.StringIO()
        await cli.run_chat(Config(no_color=True, docs_dir=tmp_path), width=80, out=out)

        assert [d.source for d in store.added] == ["notes.txt"]
        assert "Database contains 1 chunks." in out.getvalue()
