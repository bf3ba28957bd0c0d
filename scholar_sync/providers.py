"""OpenAI-backed provider used by every AI stage.

Two capabilities are exposed:

- ``complete_json`` asks a chat model for a JSON object constrained by a
  JSON schema and returns the raw message content.
- ``search`` runs a web-search grounded response and returns the cited
  pages as :class:`GroundingHit` objects.

Any SDK or transport failure is raised as :class:`ProviderUnavailable`.
Parsing the returned content is the calling stage's job.
"""
from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Optional

import openai

from .config import Settings
from .errors import ProviderUnavailable, RetrievalFailure
from .models import GroundingHit

logger = logging.getLogger(__name__)

LIST_MARKER = re.compile(r"^\s*(?:[-*•]|\d+\.)\s+")
# opening fence with optional language tag, or closing fence
CODE_FENCE = re.compile(r"^```[\w-]*|```$")


class OpenAIProvider:
    def __init__(self, settings: Settings, client: Optional[Any] = None) -> None:
        self.settings = settings
        self._client = client

    @property
    def client(self):
        # built lazily so a missing key fails the stage that needs it
        if self._client is None:
            if not self.settings.api_key:
                raise ProviderUnavailable("API Key not found")
            self._client = openai.AsyncOpenAI(
                api_key=self.settings.api_key,
                base_url=self.settings.base_url,
                timeout=self.settings.timeout,
                max_retries=self.settings.max_retries,
            )
        return self._client

    async def complete_json(self, system: str, prompt: str, schema_name: str, schema: Dict[str, Any]) -> str:
        try:
            resp = await self.client.chat.completions.create(
                model=self.settings.model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": prompt},
                ],
                response_format={
                    "type": "json_schema",
                    "json_schema": {"name": schema_name, "schema": schema},
                },
                temperature=0.2,
            )
        except openai.OpenAIError as exc:
            raise ProviderUnavailable(_describe(exc)) from exc

        if not resp.choices:
            return ""
        return resp.choices[0].message.content or ""

    async def search(self, prompt: str) -> List[GroundingHit]:
        try:
            resp = await self.client.responses.create(
                model=self.settings.effective_search_model,
                tools=[{"type": self.settings.search_tool}],
                input=prompt,
            )
        except openai.OpenAIError as exc:
            raise ProviderUnavailable(_describe(exc)) from exc
        return grounding_hits(resp)


def parse_json_object(content: Optional[str]) -> Dict[str, Any]:
    """Parse model output into a dict.

    Empty output becomes ``{}``. Markdown code fences are tolerated. Anything
    that is not a JSON object raises ``ValueError``.
    """
    text = CODE_FENCE.sub("", (content or "").strip()).strip()
    if not text:
        return {}

    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    return data


def grounding_hits(response: Any) -> List[GroundingHit]:
    """Collect ``url_citation`` annotations from a Responses API result.

    Raises RetrievalFailure when the response does not have the expected
    shape at all; an answer without citations simply yields no hits.
    """
    output = getattr(response, "output", None)
    if output is None:
        raise RetrievalFailure("search response carried no output")

    hits: List[GroundingHit] = []
    try:
        for item in output:
            if getattr(item, "type", None) != "message":
                continue
            for part in getattr(item, "content", None) or []:
                text = getattr(part, "text", "") or ""
                for ann in getattr(part, "annotations", None) or []:
                    if getattr(ann, "type", None) != "url_citation":
                        continue
                    hits.append(
                        GroundingHit(
                            url=getattr(ann, "url", None),
                            title=getattr(ann, "title", None),
                            snippet=_cited_span(text, ann),
                        )
                    )
    except TypeError as exc:
        raise RetrievalFailure(f"malformed grounding data: {exc}") from exc

    logger.debug("search returned %d grounding hits", len(hits))
    return hits


def _cited_span(text: str, annotation: Any, limit: int = 300) -> Optional[str]:
    """Return the answer text on the line leading up to a citation marker."""
    start = getattr(annotation, "start_index", None)
    if not isinstance(start, int) or start <= 0 or start > len(text):
        return None
    line_start = text.rfind("\n", 0, start) + 1
    span = LIST_MARKER.sub("", text[line_start:start]).strip(" \t*-:(")
    if not span:
        return None
    return span[:limit]


def _describe(exc: Exception) -> str:
    message = getattr(exc, "message", None) or str(exc)
    body = getattr(exc, "body", None)
    if not message and body:
        message = json.dumps(body)
    return message
