"""Runtime settings read from the environment."""
from __future__ import annotations

import os
from typing import Optional

from pydantic import BaseModel, Field


DEFAULT_MODEL = "gpt-4o-mini"


class Settings(BaseModel):
    """Provider credentials and the bounded windows each stage reads."""

    api_key: Optional[str] = None
    base_url: Optional[str] = None
    model: str = DEFAULT_MODEL
    search_model: Optional[str] = None
    search_tool: str = "web_search"
    # title/abstract are expected in the first few pages
    metadata_prefix_chars: int = Field(default=15_000, gt=0)
    summary_window_chars: int = Field(default=100_000, gt=0)
    evaluation_window_chars: int = Field(default=30_000, gt=0)
    max_related: int = Field(default=5, gt=0)
    timeout: float = Field(default=60.0, gt=0)
    # stages are never retried; resubmitting is the caller's decision
    max_retries: int = Field(default=0, ge=0)
    db_path: Optional[str] = None

    @property
    def effective_search_model(self) -> str:
        return self.search_model or self.model

    @classmethod
    def from_env(cls, **overrides) -> "Settings":
        """Build settings from ``OPENAI_*`` and ``SCHOLAR_SYNC_*`` variables.

        Keyword overrides win over the environment. Unset variables fall back
        to the field defaults; malformed numbers raise ``ValueError``.
        """
        env = {
            "api_key": os.getenv("OPENAI_API_KEY"),
            "base_url": os.getenv("OPENAI_BASE_URL"),
            "model": os.getenv("SCHOLAR_SYNC_MODEL"),
            "search_model": os.getenv("SCHOLAR_SYNC_SEARCH_MODEL"),
            "search_tool": os.getenv("SCHOLAR_SYNC_SEARCH_TOOL"),
            "metadata_prefix_chars": os.getenv("SCHOLAR_SYNC_METADATA_CHARS"),
            "summary_window_chars": os.getenv("SCHOLAR_SYNC_SUMMARY_CHARS"),
            "evaluation_window_chars": os.getenv("SCHOLAR_SYNC_EVALUATION_CHARS"),
            "max_related": os.getenv("SCHOLAR_SYNC_MAX_RELATED"),
            "timeout": os.getenv("SCHOLAR_SYNC_TIMEOUT"),
            "max_retries": os.getenv("SCHOLAR_SYNC_MAX_RETRIES"),
            "db_path": os.getenv("SCHOLAR_SYNC_DB"),
        }
        values = {k: v for k, v in env.items() if v not in (None, "")}
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
