"""Protocols for the collaborators the pipeline depends on."""
from __future__ import annotations

from typing import Any, Dict, List, Protocol

from .models import ActivityLogEntry, Evaluation, GroundingHit, Metadata, RelatedPaper, Summary


class Provider(Protocol):
    """Gateway to the hosted model: structured completion and grounded search."""

    async def complete_json(self, system: str, prompt: str, schema_name: str, schema: Dict[str, Any]) -> str: ...

    async def search(self, prompt: str) -> List[GroundingHit]: ...


class TextExtraction(Protocol):
    async def extract(self, document: bytes) -> str: ...


class MetadataService(Protocol):
    async def extract_metadata(self, text: str) -> Metadata: ...


class SummarizationService(Protocol):
    async def summarize(self, text: str) -> Summary: ...


class RetrievalService(Protocol):
    async def find_related(self, title: str, abstract: str) -> List[RelatedPaper]: ...


class EvaluationService(Protocol):
    async def evaluate(self, source_text: str, summary: Summary) -> Evaluation: ...


class ActivitySink(Protocol):
    """Storage for activity log entries, newest first."""

    async def append(self, entry: ActivityLogEntry) -> None: ...

    async def list(self) -> List[ActivityLogEntry]: ...

    async def clear(self) -> None: ...
