"""Related-work retrieval through grounded web search."""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional
from urllib.parse import urlparse

from .errors import RetrievalFailure
from .interfaces import Provider
from .models import GroundingHit, RelatedPaper

logger = logging.getLogger(__name__)

# result-list pages of search engines, not papers
SEARCH_PAGE_MARKERS = (
    "google.com/search",
    "bing.com/search",
    "duckduckgo.com/?",
    "scholar.google.com/scholar?",
)


def source_label(url: str) -> Optional[str]:
    """Human-readable site name: the url host without a leading ``www.``."""
    host = urlparse(url).hostname
    if not host:
        return None
    return host[4:] if host.startswith("www.") else host


def is_search_page(url: str) -> bool:
    lowered = url.lower()
    return any(marker in lowered for marker in SEARCH_PAGE_MARKERS)


def select_papers(hits: Iterable[GroundingHit], limit: int = 5) -> List[RelatedPaper]:
    """Filter, deduplicate by url (first seen wins) and cap grounding hits."""
    papers: List[RelatedPaper] = []
    seen: set[str] = set()
    for hit in hits:
        if len(papers) >= limit:
            break
        if not hit.url or not hit.title:
            continue
        if is_search_page(hit.url):
            logger.debug("dropping search page %s", hit.url)
            continue
        if hit.url in seen:
            continue
        seen.add(hit.url)
        papers.append(
            RelatedPaper(title=hit.title, url=hit.url, source=source_label(hit.url), snippet=hit.snippet)
        )
    return papers


class RelatedWorkFinder:
    def __init__(self, provider: Provider, max_results: int = 5) -> None:
        self.provider = provider
        self.max_results = max_results

    def build_query(self, title: str, abstract: str) -> str:
        return (
            f"Find {self.max_results} distinct, real academic research papers that are semantically "
            f'similar to the paper titled "{title}" with the following abstract: "{abstract}".\n\n'
            "For each paper found, provide the title, and a brief snippet describing why it is similar.\n"
            "Focus on papers from reputable sources like Semantic Scholar, arXiv, IEEE, ACM, or Nature."
        )

    async def find_related(self, title: str, abstract: str) -> List[RelatedPaper]:
        """Return up to ``max_results`` related papers; an empty list is a valid answer.

        Provider transport failures propagate. Unusable grounding data does not.
        """
        try:
            hits = await self.provider.search(self.build_query(title, abstract))
        except RetrievalFailure as exc:
            logger.warning("no usable grounding data: %s", exc)
            return []

        papers = select_papers(hits, limit=self.max_results)
        logger.info("found %d related papers from %d grounding hits", len(papers), len(hits))
        return papers
