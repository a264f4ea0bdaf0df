"""File loaders: plain text, PDF and EPUB to :class:`Document`."""

from __future__ import annotations

import logging
import zipfile
from pathlib import Path

import ebooklib
from bs4 import BeautifulSoup
from ebooklib import epub
from pypdf import PdfReader
from pypdf.errors import PdfReadError

from ragterm.rag.documents import Document

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".pdf", ".epub", ".txt", ".md")


class TextLoader:
    def load(self, path: str | Path) -> Document:
        path = Path(path)
        return Document(
            content=path.read_text(encoding="utf-8"),
            metadata={"source": path.name, "category": "text"},
        )


class PdfLoader:
    """Extract the text of every page of a PDF with ``pypdf``.

    Files named with a known keyword get a category (``(DNA)`` ->
    ``thematic_dna``, ``(Core)`` -> ``rules``).  PDFs that cannot be parsed
    or contain no text are skipped with a warning.
    """

    category_map = {
        "(DNA)": "thematic_dna",
        "(Core)": "rules",
    }

    def category_for(self, path: Path) -> str:
        for keyword, category in self.category_map.items():
            if keyword in path.name:
                return category
        return "uncategorized"

    def load(self, path: str | Path) -> Document | None:
        path = Path(path)
        try:
            reader = PdfReader(str(path))
            text = "\n".join(page.extract_text() or "" for page in reader.pages)
        except (PdfReadError, OSError, ValueError) as e:
            logger.warning("Skipping %s: PDF could not be parsed (%s)", path.name, e)
            return None

        if not text.strip():
            logger.warning("Skipping %s: no extractable text", path.name)
            return None

        return Document(
            content=text,
            metadata={"source": path.name, "category": self.category_for(path)},
        )


class EpubLoader:
    """Read an EPUB's chapters in spine order and return them as plain text.

    A chapter that cannot be read is skipped; the book is only dropped when
    the archive itself is unreadable or no chapter yields text.
    """

    def load(self, path: str | Path) -> Document | None:
        path = Path(path)
        try:
            book = epub.read_epub(str(path), options={"ignore_ncx": True})
        # SyntaxError covers lxml's XMLSyntaxError for a malformed OPF.
        except (epub.EpubException, zipfile.BadZipFile, KeyError, OSError, SyntaxError) as e:
            logger.warning("Skipping %s: EPUB could not be read (%s)", path.name, e)
            return None

        chapters: list[str] = []
        for idref, _linear in book.spine:
            item = book.get_item_with_id(idref)
            if item is None or item.get_type() != ebooklib.ITEM_DOCUMENT:
                logger.debug("Skipping spine entry %r in %s", idref, path.name)
                continue
            text = _html_to_text(item.get_content())
            if text:
                chapters.append(text)

        if not chapters:
            logger.warning("Skipping %s: no chapter text in EPUB", path.name)
            return None

        content = "\n\n".join(chapters)
        logger.info("Extracted %d characters from %s", len(content), path.name)
        return Document(content=content, metadata={"source": path.name, "category": "epub"})


def _html_to_text(markup: bytes | str) -> str:
    return " ".join(BeautifulSoup(markup, "html.parser").get_text(" ").split())


def discover_documents(
    directory: str | Path,
    extensions: tuple[str, ...] = SUPPORTED_EXTENSIONS,
) -> list[Path]:
    """Loadable files directly inside *directory*, sorted by name."""
    directory = Path(directory)
    if not directory.is_dir():
        return []
    return sorted(
        p
        for p in directory.iterdir()
        if p.is_file()
        and not p.name.startswith(".")
        and ".identifier" not in p.name
        and p.suffix.lower() in extensions
    )


def load_document(path: str | Path) -> Document | None:
    """Load *path* with the loader matching its extension."""
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix == ".pdf":
        return PdfLoader().load(path)
    if suffix == ".epub":
        return EpubLoader().load(path)
    if suffix in (".txt", ".md"):
        return TextLoader().load(path)
    raise ValueError(f"Unsupported document type: {path.name}")
