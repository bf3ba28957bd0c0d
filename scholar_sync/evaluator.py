"""Faithfulness evaluation of a generated summary against its source.

The judge model returns three 0-100 scores. Scores outside that range are
clamped and the affected fields are listed in ``clamped_fields`` so callers
can report the data-quality problem.
"""
from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Tuple

from .errors import EvaluationError, ProviderUnavailable
from .interfaces import Provider
from .models import Evaluation, Summary
from .providers import parse_json_object

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an impartial judge evaluating the quality of an AI-generated summary "
    "of a research paper. Answer with JSON only."
)

SCORE_FIELDS = ("score", "semanticSimilarityScore", "keypointCoverageScore")

SCHEMA = {
    "type": "object",
    "properties": {
        "score": {"type": "number", "description": "Overall faithfulness score 0-100"},
        "semanticSimilarityScore": {
            "type": "number",
            "description": "0-100 score based on semantic meaning preservation",
        },
        "keypointCoverageScore": {
            "type": "number",
            "description": "0-100 score based on coverage of key contributions",
        },
        "reasoning": {"type": "string", "description": "Explanation of the score"},
        "missingKeypoints": {
            "type": "array",
            "items": {"type": "string"},
            "description": "Key points from original text missed in summary",
        },
    },
    "required": list(SCORE_FIELDS) + ["reasoning", "missingKeypoints"],
}


def clamp_score(name: str, value: Any) -> Tuple[float, bool]:
    """Coerce a score to float in [0, 100]; the flag is True when clamping happened."""
    if isinstance(value, bool) or value is None:
        raise EvaluationError(f"Evaluator returned no usable {name}")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise EvaluationError(f"Evaluator returned a non-numeric {name}: {value!r}") from exc
    if math.isnan(number):
        raise EvaluationError(f"Evaluator returned a non-numeric {name}: {value!r}")
    clamped = min(100.0, max(0.0, number))
    return clamped, clamped != number


class FaithfulnessEvaluator:
    def __init__(self, provider: Provider, window_chars: int = 30_000) -> None:
        self.provider = provider
        self.window_chars = window_chars

    def build_prompt(self, source_text: str, summary: Summary) -> str:
        comparison_text = source_text[: self.window_chars]
        return (
            f"Original Paper Text (Truncated):\n{comparison_text}\n\n"
            f"Generated Summary:\n{summary.serialize()}\n\n"
            "Task:\n"
            "1. Identify key contributions in the Original Text.\n"
            "2. Check if the Generated Summary covers these points.\n"
            "3. Evaluate if the semantic meaning is preserved without hallucinations.\n"
            "4. Provide scores (0-100)."
        )

    async def evaluate(self, source_text: str, summary: Summary) -> Evaluation:
        prompt = self.build_prompt(source_text, summary)
        try:
            content = await self.provider.complete_json(SYSTEM_PROMPT, prompt, "summary_evaluation", SCHEMA)
        except ProviderUnavailable as exc:
            raise EvaluationError(str(exc)) from exc

        try:
            data = parse_json_object(content)
        except ValueError as exc:
            raise EvaluationError(f"Evaluator returned malformed output: {exc}") from exc
        if not data:
            raise EvaluationError("Evaluator returned an empty response")

        return build_evaluation(data)


def build_evaluation(data: Dict[str, Any]) -> Evaluation:
    scores: Dict[str, float] = {}
    clamped: List[str] = []
    for name in SCORE_FIELDS:
        value, was_clamped = clamp_score(name, data.get(name))
        scores[name] = value
        if was_clamped:
            clamped.append(name)
            logger.warning("evaluator %s=%r out of range; clamped to %s", name, data.get(name), value)

    missing = data.get("missingKeypoints") or []
    if isinstance(missing, str):
        missing = [missing]
    elif not isinstance(missing, list):
        missing = []
    reasoning = data.get("reasoning")

    return Evaluation(
        **scores,
        reasoning=reasoning if isinstance(reasoning, str) else "",
        missing_keypoints=[str(item) for item in missing],
        clamped_fields=clamped,
    )
