"""Analysis pipeline orchestration.

A submitted document moves through one Run::

    idle -> extracting_text -> analyzing -> completed
                   |              |
                   +----> error <-+

Inside ``analyzing`` the stages run strictly one after another because each
feeds the next: metadata (from the bounded prefix of the text), summary,
related work (from the metadata), then the faithfulness evaluation (from the
bounded evaluation window and the summary). Every stage call is captured as
a tagged ``Ok``/``Err`` result; the first ``Err`` ends the Run and its
message becomes the Run's error.

Only one Run is active per pipeline. ``reset()`` or a new ``submit()``
replaces it; a replaced Run that is still awaiting a stage is discarded when
that stage returns, and nothing it produces is published. In-flight provider
calls are not aborted.
"""
from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, List, Optional

from .config import Settings
from .errors import ExtractionError
from .evaluator import FaithfulnessEvaluator
from .extractor import EMPTY_TEXT, PdfTextExtractor
from .interfaces import (
    EvaluationService,
    MetadataService,
    Provider,
    RetrievalService,
    SummarizationService,
    TextExtraction,
)
from .metadata import MetadataExtractor
from .models import (
    AggregateResult,
    Completed,
    Failed,
    PaperMetadata,
    Progress,
    Run,
    RunEvent,
    SourceText,
    Stage,
    StageChanged,
)
from .providers import OpenAIProvider
from .related import RelatedWorkFinder
from .result import Err, Ok, StageResult, capture
from .summarizer import PaperSummarizer

logger = logging.getLogger(__name__)

STEP_LABELS = {
    "extraction": "Extracting text from PDF...",
    "metadata": "Analyzing structure and metadata...",
    "summarization": "Generating comprehensive summary...",
    "retrieval": "Searching for related literature...",
    "evaluation": "Evaluating summary accuracy against source...",
}

Subscriber = Callable[[RunEvent], Any]
CompletionListener = Callable[[str, AggregateResult], Awaitable[None]]

_DISCARDED = Err("discarded", "run was discarded")


class AnalysisPipeline:
    def __init__(
        self,
        extractor: TextExtraction,
        metadata: MetadataService,
        summarizer: SummarizationService,
        related: RetrievalService,
        evaluator: EvaluationService,
        settings: Optional[Settings] = None,
        listeners: Optional[List[CompletionListener]] = None,
    ) -> None:
        self.extractor = extractor
        self.metadata = metadata
        self.summarizer = summarizer
        self.related = related
        self.evaluator = evaluator
        self.settings = settings or Settings()
        self.run = Run()
        self._subscribers: List[Subscriber] = []
        self._listeners: List[CompletionListener] = list(listeners or [])

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Receive every event of every Run. Returns an unsubscribe function."""
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    def on_completed(self, listener: CompletionListener) -> None:
        """Register a listener awaited with ``(title, result)`` after a Run completes."""
        self._listeners.append(listener)

    def reset(self) -> Run:
        """Discard the current Run and return to ``idle``."""
        if self.run.stage is not Stage.IDLE:
            logger.info("run %s discarded at %s", self.run.id, self.run.stage.value)
            self.run = Run()
        return self.run

    async def submit(self, document: bytes) -> Run:
        """Analyze one document. The returned Run is terminal unless it was discarded."""
        run = Run()
        self.run = run
        self._advance(run, Stage.EXTRACTING_TEXT)

        extracted = await self._step(run, "extraction", self.extractor.extract, document)
        if not isinstance(extracted, Ok):
            return self._fail(run, extracted)

        source = SourceText.from_text(
            extracted.value or "",
            prefix_chars=self.settings.metadata_prefix_chars,
            window_chars=self.settings.evaluation_window_chars,
        )
        if source.is_blank():
            return self._fail(run, Err(ExtractionError.kind, EMPTY_TEXT))
        self._advance(run, Stage.ANALYZING)

        meta = await self._step(run, "metadata", self.metadata.extract_metadata, source.prefix)
        if not isinstance(meta, Ok):
            return self._fail(run, meta)

        summary = await self._step(run, "summarization", self.summarizer.summarize, source.text)
        if not isinstance(summary, Ok):
            return self._fail(run, summary)

        papers = await self._step(run, "retrieval", self.related.find_related, meta.value.title, meta.value.abstract)
        if not isinstance(papers, Ok):
            return self._fail(run, papers)

        evaluation = await self._step(run, "evaluation", self.evaluator.evaluate, source.window, summary.value)
        if not isinstance(evaluation, Ok):
            return self._fail(run, evaluation)

        for name in evaluation.value.clamped_fields:
            run.warnings.append(f"Evaluator returned an out-of-range {name}; it was clamped to [0, 100].")

        result = AggregateResult(
            metadata=PaperMetadata(title=meta.value.title, abstract=meta.value.abstract, text=source.text),
            summary=summary.value,
            similar_papers=papers.value,
            evaluation=evaluation.value,
        )
        run.result = result
        self._advance(run, Stage.COMPLETED)
        self._emit(Completed(run_id=run.id, result=result))
        await self._notify_completed(result)
        return run

    def _is_current(self, run: Run) -> bool:
        return run is self.run

    async def _step(self, run: Run, step: str, func, *args) -> StageResult:
        label = STEP_LABELS[step]
        run.progress = label
        logger.info("run %s: %s", run.id, label)
        self._emit(Progress(run_id=run.id, step=step, label=label))

        outcome = await capture(step, func, *args)
        if not self._is_current(run):
            logger.info("run %s was replaced during %s; dropping its result", run.id, step)
            return _DISCARDED
        return outcome

    def _advance(self, run: Run, stage: Stage) -> None:
        run.transition(stage)
        self._emit(StageChanged(run_id=run.id, stage=stage))

    def _fail(self, run: Run, err: Err) -> Run:
        if not self._is_current(run):
            return run
        run.error = err.message
        run.result = None
        self._advance(run, Stage.ERROR)
        logger.warning("run %s failed during %s: %s", run.id, err.kind, err.message)
        self._emit(Failed(run_id=run.id, kind=err.kind, message=err.message))
        return run

    def _emit(self, event: RunEvent) -> None:
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception:
                logger.exception("run event subscriber failed on %s", event.type)

    async def _notify_completed(self, result: AggregateResult) -> None:
        for listener in list(self._listeners):
            try:
                await listener(result.title, result)
            except Exception:
                logger.exception("completion listener failed for %r", result.title)


def build_pipeline(
    settings: Optional[Settings] = None,
    provider: Optional[Provider] = None,
    extractor: Optional[TextExtraction] = None,
    listeners: Optional[List[CompletionListener]] = None,
) -> AnalysisPipeline:
    """Wire the default stages around one provider."""
    settings = settings or Settings.from_env()
    provider = provider or OpenAIProvider(settings)
    return AnalysisPipeline(
        extractor=extractor or PdfTextExtractor(),
        metadata=MetadataExtractor(provider, prefix_chars=settings.metadata_prefix_chars),
        summarizer=PaperSummarizer(provider, window_chars=settings.summary_window_chars),
        related=RelatedWorkFinder(provider, max_results=settings.max_related),
        evaluator=FaithfulnessEvaluator(provider, window_chars=settings.evaluation_window_chars),
        settings=settings,
        listeners=listeners,
    )
