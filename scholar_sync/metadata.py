"""Title and abstract extraction from the start of a paper."""
from __future__ import annotations

import logging

from .errors import MetadataError, ProviderUnavailable
from .interfaces import Provider
from .models import Metadata
from .providers import parse_json_object

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You extract bibliographic metadata from academic papers. Answer with JSON only."

SCHEMA = {
    "type": "object",
    "properties": {
        "title": {"type": "string"},
        "abstract": {"type": "string"},
    },
    "required": ["title", "abstract"],
}


class MetadataExtractor:
    """Reads only the first ``prefix_chars`` characters of the text."""

    def __init__(self, provider: Provider, prefix_chars: int = 15_000) -> None:
        self.provider = provider
        self.prefix_chars = prefix_chars

    async def extract_metadata(self, text: str) -> Metadata:
        first_chunk = text[: self.prefix_chars]
        prompt = (
            "Extract the Title and Abstract from the following academic paper text.\n\n"
            f"Text: {first_chunk}"
        )
        try:
            content = await self.provider.complete_json(SYSTEM_PROMPT, prompt, "paper_metadata", SCHEMA)
        except ProviderUnavailable as exc:
            raise MetadataError(str(exc)) from exc

        try:
            data = parse_json_object(content)
        except ValueError:
            logger.warning("metadata output was not a JSON object; using placeholders")
            data = {}

        return Metadata(
            title=_usable(data.get("title")),
            abstract=_usable(data.get("abstract")),
        )


def _usable(value) -> str:
    if not isinstance(value, str):
        return ""
    return " ".join(value.split())
