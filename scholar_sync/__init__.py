"""scholar_sync package

Public importable API for programmatic usage. Prefer importing the
high-level helpers from the package root::

	from scholar_sync import build_pipeline, Settings, Stage

	pipeline = build_pipeline(Settings.from_env())
	run = await pipeline.submit(pdf_bytes)

Use ``asyncio.run`` to call the async helpers from synchronous code, or the
``*_sync`` wrappers below.
"""

from .config import Settings
from .errors import (
	DownloadError,
	EvaluationError,
	ExtractionError,
	MetadataError,
	ProviderUnavailable,
	RetrievalFailure,
	ScholarSyncError,
	SummarizationError,
)
from .models import AggregateResult, Evaluation, Metadata, RelatedPaper, Run, Stage, Summary, User
from .downloader import fetch_document, read_document
from .pipeline import AnalysisPipeline, build_pipeline

__all__ = [
	"AggregateResult",
	"AnalysisPipeline",
	"DownloadError",
	"Evaluation",
	"EvaluationError",
	"ExtractionError",
	"Metadata",
	"MetadataError",
	"ProviderUnavailable",
	"RelatedPaper",
	"RetrievalFailure",
	"Run",
	"ScholarSyncError",
	"Settings",
	"Stage",
	"SummarizationError",
	"Summary",
	"User",
	"build_pipeline",
	"fetch_document",
	"read_document",
]

__version__ = "0.1.0"


def analyze_document_sync(document: bytes, settings: Settings | None = None, **kwargs) -> Run:
	"""Synchronous wrapper: build a pipeline and analyze one document.

	Example: analyze_document_sync(Path("paper.pdf").read_bytes())
	"""
	import asyncio

	return asyncio.run(build_pipeline(settings, **kwargs).submit(document))


def fetch_document_sync(*args, **kwargs) -> bytes:
	"""Synchronous wrapper for `fetch_document`."""
	import asyncio

	return asyncio.run(fetch_document(*args, **kwargs))
