from __future__ import annotations

import uuid
from enum import Enum
from typing import List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

from .errors import InvalidTransition


UNKNOWN_TITLE = "Unknown Title"
NO_ABSTRACT = "No abstract found."
ANALYSIS_COMPLETED = "ANALYSIS_COMPLETED"


class _Record(BaseModel):
    """Base for records whose serialized form uses camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Stage(str, Enum):
    IDLE = "idle"
    EXTRACTING_TEXT = "extracting_text"
    ANALYZING = "analyzing"
    COMPLETED = "completed"
    ERROR = "error"


TRANSITIONS = {
    Stage.IDLE: {Stage.EXTRACTING_TEXT},
    Stage.EXTRACTING_TEXT: {Stage.ANALYZING, Stage.ERROR},
    Stage.ANALYZING: {Stage.COMPLETED, Stage.ERROR},
    Stage.COMPLETED: set(),
    Stage.ERROR: set(),
}


class SourceText(_Record):
    """Extracted document text plus the bounded views derived from it."""

    model_config = ConfigDict(frozen=True)

    text: str
    prefix: str
    window: str

    @classmethod
    def from_text(cls, text: str, prefix_chars: int, window_chars: int) -> "SourceText":
        return cls(text=text, prefix=text[:prefix_chars], window=text[:window_chars])

    def is_blank(self) -> bool:
        return not self.text.strip()


class _FrozenRecord(_Record):
    """Record that cannot be changed once built; sequences are stored as tuples."""

    model_config = ConfigDict(frozen=True)


_METADATA_FALLBACK = {"title": UNKNOWN_TITLE, "abstract": NO_ABSTRACT}


class Metadata(_FrozenRecord):
    title: str = UNKNOWN_TITLE
    abstract: str = NO_ABSTRACT

    @field_validator("title", "abstract", mode="before")
    @classmethod
    def _blank_to_sentinel(cls, value, info: ValidationInfo):
        if value is None or (isinstance(value, str) and not value.strip()):
            return _METADATA_FALLBACK[info.field_name]
        return value


class PaperMetadata(Metadata):
    """Metadata joined with the full source text, as handed to callers."""

    text: str


class Summary(_FrozenRecord):
    main_summary: str = ""
    contributions: Tuple[str, ...] = ()
    method: Tuple[str, ...] = ()
    results: Tuple[str, ...] = ()
    limitations: Tuple[str, ...] = ()

    @field_validator("main_summary", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return "" if value is None else value

    @field_validator("contributions", "method", "results", "limitations", mode="before")
    @classmethod
    def _as_list(cls, value):
        # models sometimes answer a list field with a single sentence
        if value is None:
            return ()
        if isinstance(value, str):
            return (value,) if value.strip() else ()
        return value

    def serialize(self) -> str:
        """Render the text the faithfulness judge compares against the source."""
        return f"{self.main_summary}\n\nContributions: {', '.join(self.contributions)}"


class RelatedPaper(_FrozenRecord):
    title: str
    url: str
    source: Optional[str] = None
    snippet: Optional[str] = None


class GroundingHit(BaseModel):
    """One web citation returned by the provider's search tool."""

    url: Optional[str] = None
    title: Optional[str] = None
    snippet: Optional[str] = None


class Evaluation(_FrozenRecord):
    score: float = Field(ge=0, le=100)
    semantic_similarity_score: float = Field(ge=0, le=100)
    keypoint_coverage_score: float = Field(ge=0, le=100)
    reasoning: str = ""
    missing_keypoints: Tuple[str, ...] = ()
    clamped_fields: Tuple[str, ...] = ()


class AggregateResult(_FrozenRecord):
    metadata: PaperMetadata
    summary: Summary
    similar_papers: Tuple[RelatedPaper, ...] = ()
    evaluation: Evaluation

    @property
    def title(self) -> str:
        return self.metadata.title


class User(_Record):
    id: str
    username: str
    name: Optional[str] = None


class ActivityLogEntry(_Record):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str
    username: str
    timestamp: int
    paper_title: str
    action_type: str = ANALYSIS_COMPLETED


class StageChanged(BaseModel):
    type: Literal["stage"] = "stage"
    run_id: str
    stage: Stage


class Progress(BaseModel):
    type: Literal["progress"] = "progress"
    run_id: str
    step: str
    label: str


class Completed(BaseModel):
    type: Literal["completed"] = "completed"
    run_id: str
    result: AggregateResult


class Failed(BaseModel):
    type: Literal["failed"] = "failed"
    run_id: str
    kind: str
    message: str


RunEvent = Union[StageChanged, Progress, Completed, Failed]


class Run(BaseModel):
    """One pipeline execution. Mutated only by the pipeline that owns it."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    stage: Stage = Stage.IDLE
    progress: Optional[str] = None
    error: Optional[str] = None
    result: Optional[AggregateResult] = None
    warnings: List[str] = []

    def transition(self, stage: Stage) -> None:
        if stage not in TRANSITIONS[self.stage]:
            raise InvalidTransition(f"cannot move run from {self.stage.value} to {stage.value}")
        self.stage = stage
