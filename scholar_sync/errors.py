"""Error taxonomy for scholar-sync.

Every stage raises a subclass of :class:`ScholarSyncError`. The ``kind``
attribute names the stage that failed and is carried into the tagged
``Err`` result the pipeline produces.
"""
from __future__ import annotations


class ScholarSyncError(Exception):
    kind = "unknown"


class ExtractionError(ScholarSyncError):
    """The document is not a readable PDF or has no text layer."""

    kind = "extraction"


class MetadataError(ScholarSyncError):
    kind = "metadata"


class SummarizationError(ScholarSyncError):
    kind = "summarization"


class RetrievalFailure(ScholarSyncError):
    """Grounding data was unusable. Callers treat this as "no related work"."""

    kind = "retrieval"


class EvaluationError(ScholarSyncError):
    kind = "evaluation"


class ProviderUnavailable(ScholarSyncError):
    """Transport or auth failure talking to the AI provider."""

    kind = "provider"


class DownloadError(ScholarSyncError):
    kind = "download"


class InvalidTransition(ScholarSyncError):
    kind = "state"
