from __future__ import annotations
import logging
from typing import Dict, Iterable, List, Optional, Sequence

from . import config
from .types import AptitudeTest, FieldTotals, Option, Question, Response

log = logging.getLogger(__name__)


def declared_fields(test: AptitudeTest) -> List[str]:
    """Career fields of ``test`` in declaration order, duplicates dropped."""
    return list(dict.fromkeys(test.career_fields or []))


def option_score(option: Option) -> float:
    # unset and zero both count as the default weight
    return float(option.score or config.DEFAULT_OPTION_SCORE)


def aggregate(
    test: AptitudeTest,
    questions: Sequence[Question],
    responses: Iterable[Response],
) -> FieldTotals:
    """
    Sum option scores per career field.

    Every declared field starts at zero. A response whose question or selected
    value is unknown contributes nothing; option fields the test does not
    declare are ignored.
    """
    fields = declared_fields(test)
    raw: Dict[str, float] = {f: 0.0 for f in fields}
    counts: Dict[str, int] = {f: 0 for f in fields}
    by_id = {q.id: q for q in questions}

    for resp in responses:
        question = by_id.get(resp.question_id)
        if question is None:
            log.debug("skip response: unknown question %s", resp.question_id)
            continue
        option = question.option_for(resp.response)
        if option is None:
            log.debug("skip response: question %s has no option %r", question.id, resp.response)
            continue
        credit = option_score(option)
        for name in option.career_fields or []:
            if name not in raw:
                continue
            raw[name] += credit
            counts[name] += 1

    return FieldTotals(raw_score=raw, response_count=counts)


def correctness_score(
    questions: Sequence[Question],
    responses: Iterable[Response],
) -> Optional[float]:
    """Percentage of keyed questions answered correctly, None if none are keyed."""
    by_id = {q.id: q for q in questions}
    correct = 0
    possible = 0
    for resp in responses:
        question = by_id.get(resp.question_id)
        if question is None or question.correct_answer is None:
            continue
        possible += 1
        if question.correct_answer == resp.response:
            correct += 1
    if possible == 0:
        return None
    return correct / possible * 100.0
