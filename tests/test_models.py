import pytest
from pydantic import ValidationError

from scholar_sync.errors import InvalidTransition
from scholar_sync.models import (
    NO_ABSTRACT,
    UNKNOWN_TITLE,
    AggregateResult,
    Evaluation,
    Metadata,
    PaperMetadata,
    RelatedPaper,
    Run,
    SourceText,
    Stage,
    Summary,
)


def test_run_follows_state_machine():
    run = Run()
    assert run.stage is Stage.IDLE
    run.transition(Stage.EXTRACTING_TEXT)
    run.transition(Stage.ANALYZING)
    run.transition(Stage.COMPLETED)
    with pytest.raises(InvalidTransition):
        run.transition(Stage.ANALYZING)


def test_idle_cannot_skip_extraction():
    with pytest.raises(InvalidTransition):
        Run().transition(Stage.ANALYZING)


def test_source_text_views():
    source = SourceText.from_text("abcdefghij", prefix_chars=3, window_chars=6)
    assert source.prefix == "abc"
    assert source.window == "abcdef"
    assert not source.is_blank()
    assert SourceText.from_text(" \n", 3, 6).is_blank()


def test_metadata_sentinels():
    metadata = Metadata()
    assert metadata.title == UNKNOWN_TITLE
    assert metadata.abstract == NO_ABSTRACT


def test_summary_coerces_loose_fields():
    summary = Summary.model_validate({"mainSummary": None, "contributions": "One thing", "method": None})
    assert summary.main_summary == ""
    assert summary.contributions == ("One thing",)
    assert summary.method == ()


def test_evaluation_rejects_out_of_range_scores():
    with pytest.raises(ValueError):
        Evaluation(score=101, semantic_similarity_score=50, keypoint_coverage_score=50)


def test_aggregate_result_serializes_camel_case():
    result = AggregateResult(
        metadata=PaperMetadata(title="T", abstract="A", text="body"),
        summary=Summary(main_summary="S"),
        evaluation=Evaluation(score=1, semantic_similarity_score=2, keypoint_coverage_score=3),
    )
    data = result.model_dump(by_alias=True)
    assert result.title == "T"
    assert set(data) == {"metadata", "summary", "similarPapers", "evaluation"}
    assert data["summary"]["mainSummary"] == "S"
    assert data["evaluation"]["semanticSimilarityScore"] == 2


@pytest.mark.parametrize("title, abstract", [("", ""), ("   ", "\n\t"), (None, None)])
def test_blank_metadata_becomes_sentinels(title, abstract):
    metadata = PaperMetadata(title=title, abstract=abstract, text="body")
    assert metadata.title == UNKNOWN_TITLE
    assert metadata.abstract == NO_ABSTRACT


def test_aggregate_result_is_deeply_immutable():
    result = AggregateResult(
        metadata=PaperMetadata(title="T", abstract="A", text="body"),
        summary=Summary(main_summary="S", contributions=["c"]),
        similar_papers=[RelatedPaper(title="R", url="https://arxiv.org/abs/1")],
        evaluation=Evaluation(score=90, semantic_similarity_score=80, keypoint_coverage_score=70),
    )

    with pytest.raises(ValidationError):
        result.evaluation.score = 150
    with pytest.raises(ValidationError):
        result.summary.main_summary = "tampered"
    with pytest.raises(ValidationError):
        result.metadata.title = ""
    with pytest.raises(ValidationError):
        result.similar_papers[0].url = "https://example.com"
    with pytest.raises(AttributeError):
        result.similar_papers.append(RelatedPaper(title="X", url="https://x"))
    with pytest.raises(AttributeError):
        result.summary.contributions.append("extra")
    assert result.evaluation.score == 90
