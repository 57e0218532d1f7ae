# career_core/engine.py
from __future__ import annotations
import logging, math
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from . import config
from .scoring import aggregate, correctness_score, declared_fields
from .types import AptitudeTest, BestMatch, Question, Response, ResultSet


log = logging.getLogger(__name__)

NO_MATCH_SUMMARY = (
    "Based on your responses, we could not match you to a specific career field yet. "
    "Try a test that covers more career fields."
)


def _emit_trace(**values: object) -> None:
    if not config.DEBUG_TRACE:
        return
    ordered = []
    for key in config.TRACE_FIELDS:
        if key in values:
            ordered.append(f"{key}={values[key]}")
    if ordered:
        log.info("trace %s", " ".join(ordered))


def round_half_up(x: float) -> int:
    """Round .5 away from zero for positive scores, matching stored results."""
    return int(math.floor(float(x) + 0.5))


def confidence_level(score: float) -> str:
    if score >= config.LEVEL_VERY_HIGH:
        return "Very High"
    if score >= config.LEVEL_HIGH:
        return "High"
    if score <= config.LEVEL_LOW:
        return "Low"
    return "Medium"


def normalized_scores(
    raw_score: Mapping[str, float], response_count: Mapping[str, int], fields: Sequence[str]
) -> Dict[str, float]:
    out: Dict[str, float] = {}
    for f in fields:
        n = int(response_count.get(f, 0) or 0)
        out[f] = float(raw_score.get(f, 0.0)) / n if n > 0 else 0.0
    return out


def relative_scores(normalized: Mapping[str, float]) -> Dict[str, float]:
    max_norm = max([*normalized.values(), 1.0])
    return {f: (v / max_norm) * 100.0 for f, v in normalized.items()}


def confidence_scores(
    relative: Mapping[str, float], response_count: Mapping[str, int]
) -> Dict[str, float]:
    max_responses = max([*(int(response_count.get(f, 0) or 0) for f in relative), 1])
    out: Dict[str, float] = {}
    for f, rel in relative.items():
        ratio = int(response_count.get(f, 0) or 0) / max_responses
        blended = rel * config.CONFIDENCE_SCORE_WEIGHT + ratio * 100.0 * config.CONFIDENCE_COVERAGE_WEIGHT
        # float error can push a perfect field a hair past 100
        out[f] = min(100.0, max(0.0, blended))
    return out


def rank_fields(confidence: Mapping[str, float]) -> List[str]:
    # stable: equal confidence keeps declaration order
    return sorted(confidence, key=lambda f: confidence[f], reverse=True)


def _insights(best: Optional[str], strengths: Sequence[str], ranked: Sequence[str]) -> List[str]:
    out: List[str] = []
    if best is not None:
        out.append(f"Your responses show a strong alignment with careers in {best}.")
    out.append(
        "You demonstrate particular strength in areas related to "
        f"{' and '.join(strengths[: config.INSIGHT_STRENGTHS])}."
    )
    if len(ranked) >= 2:
        out.append(f"Consider exploring educational pathways related to {ranked[0]} and {ranked[1]}.")
    return out


def finalize(
    test: AptitudeTest,
    raw_score: Mapping[str, float],
    response_count: Mapping[str, int],
) -> ResultSet:
    """
    Turn per-field totals into the ranked recommendation.

    normalized = raw / responses, relative = normalized / max(normalized, 1) * 100,
    confidence = relative * 0.7 + responses / max(responses, 1) * 100 * 0.3.
    Fields scoring at least the significance threshold (relative) are
    recommended in confidence order; when none qualify the top three of the
    ranking are used instead.
    """
    fields = declared_fields(test)
    raw = {f: float(raw_score.get(f, 0.0)) for f in fields}
    counts = {f: int(response_count.get(f, 0) or 0) for f in fields}

    normalized = normalized_scores(raw, counts, fields)
    relative = relative_scores(normalized)
    confidence = confidence_scores(relative, counts)
    ranked = rank_fields(confidence)

    for f in ranked:
        _emit_trace(
            field=f,
            raw=raw[f],
            responses=counts[f],
            normalized=round(normalized[f], 4),
            relative=round(relative[f], 4),
            confidence=round(confidence[f], 4),
        )

    significant = [f for f in ranked if relative[f] >= config.SIGNIFICANT_THRESHOLD]
    recommended = significant if significant else ranked[: config.FALLBACK_TOP_N]

    strengths = recommended[: config.STRENGTHS_MAX]
    if not strengths:
        strengths = [config.PLACEHOLDER_STRENGTH]

    best_match: Optional[BestMatch] = None
    if ranked:
        best = ranked[0]
        best_conf = confidence[best]
        level = confidence_level(best_conf)
        best_match = BestMatch(field=best, confidence_score=round_half_up(best_conf), confidence_level=level)
        summary = (
            f"Based on your responses, {best} appears to be your strongest career match with "
            f"{level.lower()} confidence ({best_match.confidence_score}%). "
            "This aligns well with your preferences and demonstrated interests."
        )
    else:
        summary = NO_MATCH_SUMMARY

    log.debug(
        "finalize test=%s fields=%d best=%s recommended=%s",
        test.id, len(fields), best_match.field if best_match else None, recommended,
    )

    return ResultSet(
        summary=summary,
        recommended_fields=list(recommended),
        strengths=list(strengths),
        best_match=best_match,
        aptitude_scores=raw,
        normalized_scores=normalized,
        relative_scores=relative,
        confidence_scores=confidence,
        response_counts=counts,
        insights=_insights(best_match.field if best_match else None, strengths, ranked),
        all_fields=ranked,
    )


def analyze(
    test: AptitudeTest,
    questions: Sequence[Question],
    responses: Iterable[Response],
) -> ResultSet:
    answers = list(responses)
    totals = aggregate(test, questions, answers)
    return finalize(test, totals.raw_score, totals.response_count)


def submission_result(
    test: Optional[AptitudeTest],
    questions: Sequence[Question],
    responses: Iterable[Response],
) -> tuple[Optional[float], Dict[str, Any]]:
    """
    Coarse result stored at submit time, before ``analyze`` refines it.

    Returns ``(score, results)``; ``score`` is the correctness percentage or
    None when no question carries a correct answer.
    """
    answers = list(responses)
    score = correctness_score(questions, answers)
    title = test.title if test and test.title else "aptitude"
    results = {
        "summary": f"You completed the {title} test.",
        "recommendedFields": list(test.career_fields) if test else [],
        "strengths": list(config.SUBMIT_STRENGTHS),
        "details": {
            "score": f"{round_half_up(score)}%" if score is not None else "Not scored",
            "responseCount": len(answers),
        },
    }
    return score, results
