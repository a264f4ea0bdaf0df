"""CLI entry point for ragterm.

Subcommands:

* ``render [FILE]`` -- render markdown from a file or stdin.
* ``ingest`` -- load, chunk and store every document in the docs directory.
* ``chat`` (default) -- interactive question answering over the store.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import TextIO

from ragterm.config import Config
from ragterm.tui import MarkdownRenderer, MarkdownTheme, Panel, Spinner, default_theme, plain_theme
from ragterm.tui.theme import Style

logger = logging.getLogger(__name__)

_EXIT_COMMANDS = ("exit", "quit")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    # Accepted before or after the subcommand; SUPPRESS keeps a subcommand
    # from resetting a value given at the top level.
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--no-color", action="store_true", default=argparse.SUPPRESS, help="Disable ANSI styling"
    )
    common.add_argument(
        "--width", type=int, default=argparse.SUPPRESS, help="Terminal width used for tables"
    )

    parser = argparse.ArgumentParser(
        prog="ragterm",
        description="Chat with your documents in the terminal",
        parents=[common],
    )
    parser.add_argument("--env-file", help="Path to a .env file (default: ./.env)")
    parser.add_argument(
        "--log-level",
        default="warning",
        choices=["debug", "info", "warning", "error"],
    )

    sub = parser.add_subparsers(dest="command")

    render = sub.add_parser("render", parents=[common], help="Render a markdown file (or stdin)")
    render.add_argument("file", nargs="?", help="Markdown file; reads stdin when omitted")

    ingest = sub.add_parser("ingest", parents=[common], help="Load documents into the vector store")
    ingest.add_argument("--docs", type=Path, help="Documents directory")

    chat = sub.add_parser("chat", parents=[common], help="Interactive chat (default)")
    chat.add_argument("--docs", type=Path, help="Documents directory")
    chat.add_argument("-p", "--provider", choices=["api", "local"], help="Model provider")

    return parser.parse_args(argv)


def _theme(no_color: bool) -> MarkdownTheme:
    return plain_theme() if no_color else default_theme()


def _print_panel(text: str, title: str, border: Style, out: TextIO) -> None:
    out.write("\n".join(Panel(title, border_style=border).render(text)) + "\n")


# ---------------------------------------------------------------------------
# render
# ---------------------------------------------------------------------------


def run_render(args: argparse.Namespace, config: Config, out: TextIO | None = None) -> int:
    out = out or sys.stdout

    if args.file:
        text = Path(args.file).read_text(encoding="utf-8")
    else:
        text = sys.stdin.read()

    renderer = MarkdownRenderer(_theme(config.no_color), width=getattr(args, "width", None))
    out.write(renderer.render(text) + "\n")
    return 0


# ---------------------------------------------------------------------------
# ingest
# ---------------------------------------------------------------------------


async def ingest_documents(config: Config, store, out: TextIO | None = None) -> int:
    """Load, chunk and store every document in ``config.docs_dir``.

    Returns the number of files that produced at least one chunk.
    """
    from ragterm.rag.chunker import TextChunker
    from ragterm.rag.loaders import discover_documents, load_document

    out = out or sys.stdout

    files = discover_documents(config.docs_dir)
    if not files:
        out.write(f"No documents found in {config.docs_dir}\n")
        return 0

    chunker = TextChunker(config.chunk_size, config.chunk_overlap)
    ingested = 0
    for index, path in enumerate(files, start=1):
        out.write(f"[{index}/{len(files)}] {path.name}\n")
        document = load_document(path)
        if document is None:
            continue
        chunks = chunker.chunk_document(document)
        if not chunks:
            continue
        await store.add_documents(chunks)
        ingested += 1

    logger.info("Ingested %d of %d files", ingested, len(files))
    return ingested


async def _connect_store(config: Config):
    from ragterm.rag.embeddings import OllamaEmbeddings
    from ragterm.rag.store import VectorStore

    embeddings = OllamaEmbeddings(config.ollama_base_url, config.embedding_model)
    return await VectorStore.connect(config, embeddings)


async def run_ingest(config: Config, out: TextIO | None = None) -> int:
    out = out or sys.stdout
    store = await _connect_store(config)
    await ingest_documents(config, store, out)
    out.write(f"Total chunks in database: {await store.count()}\n")
    return 0


# ---------------------------------------------------------------------------
# chat
# ---------------------------------------------------------------------------


def format_sources(sources) -> str:
    """One line per distinct source file, in retrieval order."""
    names = list(dict.fromkeys(doc.source for doc in sources if doc.source))
    return "\n".join(f"• {name}" for name in names)


async def run_chat(config: Config, width: int | None = None, out: TextIO | None = None) -> int:
    out = out or sys.stdout
    from ragterm.rag.chain import ChatHistory, RetrievalChain
    from ragterm.rag.llm import create_chat_model

    theme = _theme(config.no_color)
    renderer = MarkdownRenderer(theme, width=width)
    accent = theme.heading2
    dim = theme.rule

    _print_panel(
        f"{accent('RAG System Terminal')}\n{dim('Chat with your documents')}",
        "ragterm",
        accent,
        out,
    )

    llm = create_chat_model(config)
    store = await _connect_store(config)
    count = await store.count()
    if count == 0:
        out.write(theme.bold("Starting document ingestion...") + "\n")
        await ingest_documents(config, store, out)
        count = await store.count()
        if count == 0:
            _print_panel("Ingestion finished but the database is still empty.", "Warning", accent, out)
    _print_panel(f"Database contains {count} chunks.", "Ready", accent, out)

    chain = RetrievalChain(
        llm,
        store,
        qa_prompt=config.qa_prompt,
        k=config.retriever_k,
    )
    history = ChatHistory(config.history_limit)

    while True:
        try:
            question = await asyncio.to_thread(input, "\n❯ You: ")
        except (EOFError, KeyboardInterrupt):
            break

        if question.strip().lower() in _EXIT_COMMANDS:
            break
        if not question.strip():
            continue

        spinner = Spinner("Thinking...", spinner_color_fn=accent, message_color_fn=dim)
        try:
            async with spinner:
                result = await chain.invoke(question, history.messages)
        except Exception as e:
            logger.debug("Question failed", exc_info=True)
            _print_panel(f"Error: {e}", "Error", theme.error, out)
            continue

        body = renderer.render(result.answer)
        sources = format_sources(result.sources)
        if sources:
            body += "\n\n" + dim("Sources:") + "\n" + sources
        body += "\n" + dim(f"({result.duration:.1f}s)")
        _print_panel(body, "Assistant", accent, out)

        history.add_exchange(question, result.answer)

    out.write("Session ended.\n")
    return 0


# ---------------------------------------------------------------------------
# main
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        config = Config.from_env(args.env_file)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    if getattr(args, "no_color", False):
        config.no_color = True
    if getattr(args, "docs", None):
        config.docs_dir = args.docs
    if getattr(args, "provider", None):
        config.provider = args.provider

    if args.command == "render":
        return run_render(args, config)

    try:
        if args.command == "ingest":
            return asyncio.run(run_ingest(config))
        return asyncio.run(run_chat(config, getattr(args, "width", None)))
    except (ValueError, RuntimeError, ConnectionError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
