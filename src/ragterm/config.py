"""Configuration for the ragterm chat CLI, read from the environment / ``.env``."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_QA_PROMPT = (
    "You are a helpful assistant answering questions about the user's documents. "
    "Use only the following context to answer. If the answer is not in the "
    "context, say that you don't know. Format the answer as markdown.\n\n"
    "Context:\n{context}"
)


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _env_str(name: str, default: str | None = None) -> str | None:
    value = os.environ.get(name)
    return value if value else default


@dataclass
class Config:
    """Chat CLI configuration."""

    provider: str = "api"  # "api" (OpenAI-compatible) or "local" (Ollama)
    chroma_url: str = "http://localhost:8000"
    collection_name: str = "RAG"
    ollama_base_url: str = "http://localhost:11434"
    local_llm_model: str = "llama3"
    embedding_model: str = "nomic-embed-text"
    api_base_url: str | None = None
    api_model: str = "gpt-4o-mini"
    api_key: str | None = None
    qa_prompt: str = DEFAULT_QA_PROMPT
    docs_dir: Path = field(default_factory=lambda: Path("docs"))
    chunk_size: int = 1500
    chunk_overlap: int = 150
    retriever_k: int = 10
    history_limit: int = 10
    no_color: bool = False

    def __post_init__(self) -> None:
        if self.provider not in ("api", "local"):
            raise ValueError(f"Unknown provider {self.provider!r} (expected 'api' or 'local')")

    @classmethod
    def from_env(cls, env_file: str | os.PathLike[str] | None = None) -> Config:
        """Build a config from environment variables, loading ``.env`` first.

        Variables already set in the environment win over the ``.env`` file.
        """
        load_dotenv(env_file)
        defaults = cls()
        return cls(
            provider=(_env_str("RAGTERM_PROVIDER", defaults.provider) or "").lower(),
            chroma_url=_env_str("CHROMA_URL", defaults.chroma_url),
            collection_name=_env_str("CHROMA_COLLECTION", defaults.collection_name),
            ollama_base_url=_env_str("OLLAMA_BASE_URL", defaults.ollama_base_url),
            local_llm_model=_env_str("LOCAL_LLM_MODEL", defaults.local_llm_model),
            embedding_model=_env_str("EMBEDDING_MODEL", defaults.embedding_model),
            api_base_url=_env_str("API_BASE_URL"),
            api_model=_env_str("API_MODEL", defaults.api_model),
            api_key=_env_str("API_KEY") or _env_str("OPENAI_API_KEY"),
            qa_prompt=_env_str("QA_PROMPT", defaults.qa_prompt),
            docs_dir=Path(_env_str("RAGTERM_DOCS_DIR", str(defaults.docs_dir))),
            chunk_size=_env_int("RAGTERM_CHUNK_SIZE", defaults.chunk_size),
            chunk_overlap=_env_int("RAGTERM_CHUNK_OVERLAP", defaults.chunk_overlap),
            retriever_k=_env_int("RAGTERM_RETRIEVER_K", defaults.retriever_k),
            history_limit=_env_int("RAGTERM_HISTORY_LIMIT", defaults.history_limit),
            no_color="NO_COLOR" in os.environ,
        )
