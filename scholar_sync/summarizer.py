"""Structured paper summarization.

Only the first ``window_chars`` characters are sent to the model, which keeps
cost and latency bounded. Papers longer than the window are summarized from
that truncated view.
"""
from __future__ import annotations

import logging

from pydantic import ValidationError

from .errors import ProviderUnavailable, SummarizationError
from .interfaces import Provider
from .models import Summary
from .providers import parse_json_object

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are an expert academic researcher. Answer with JSON only."

_LIST = {"type": "array", "items": {"type": "string"}}

SCHEMA = {
    "type": "object",
    "properties": {
        "mainSummary": {"type": "string", "description": "A 150-200 word concise overview."},
        "contributions": _LIST,
        "method": _LIST,
        "results": _LIST,
        "limitations": _LIST,
    },
    "required": ["mainSummary", "contributions", "method", "results"],
}


class PaperSummarizer:
    def __init__(self, provider: Provider, window_chars: int = 100_000) -> None:
        self.provider = provider
        self.window_chars = window_chars

    async def summarize(self, text: str) -> Summary:
        safe_text = text[: self.window_chars]
        if len(text) > self.window_chars:
            logger.info("summarizing the first %d of %d chars", self.window_chars, len(text))

        prompt = (
            "Analyze the following research paper text and provide a structured summary "
            "with a main summary, key contributions, method, results and limitations.\n\n"
            f"Paper Text:\n{safe_text}"
        )
        try:
            content = await self.provider.complete_json(SYSTEM_PROMPT, prompt, "paper_summary", SCHEMA)
        except ProviderUnavailable as exc:
            raise SummarizationError(str(exc)) from exc

        try:
            data = parse_json_object(content)
        except ValueError as exc:
            raise SummarizationError(f"Summarizer returned malformed output: {exc}") from exc

        try:
            return Summary.model_validate(data)
        except ValidationError as exc:
            raise SummarizationError(
                f"Summarizer returned an unexpected summary shape ({exc.error_count()} invalid fields)"
            ) from exc
