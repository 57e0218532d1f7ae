from __future__ import annotations

import pytest

from career_core.types import AptitudeTest, Option, Question, Response


def build_test(
    fields: list[str] | None = None,
    *,
    test_id: str = "t1",
    category: str = "Career Interest",
    title: str = "Career Interest Basics",
) -> AptitudeTest:
    return AptitudeTest(
        id=test_id,
        title=title,
        category=category,
        career_fields=list(fields if fields is not None else ["Engineering", "Medicine"]),
    )


def build_question(
    qid: str,
    options: list[tuple[str, float | None, list[str]]],
    *,
    test_id: str = "t1",
    correct: str | None = None,
    order: int = 0,
) -> Question:
    """Options are ``(value, score, careerFields)`` triples."""

    return Question(
        id=qid,
        test_id=test_id,
        text=f"Question {qid}",
        options=[Option(text=f"Option {v}", value=v, score=s, career_fields=list(f)) for v, s, f in options],
        correct_answer=correct,
        order_index=order,
    )


def answers(*pairs: tuple[str, str]) -> list[Response]:
    return [Response(question_id=q, response=v) for q, v in pairs]


@pytest.fixture
def scenario() -> tuple[AptitudeTest, list[Question], list[Response]]:
    """Two fields; Q1/A favours Engineering, Q2/B is shared."""

    test = build_test(["Engineering", "Medicine"])
    questions = [
        build_question("q1", [("A", 2, ["Engineering"]), ("B", 1, ["Medicine"])], order=0),
        build_question("q2", [("A", 1, []), ("B", 1, ["Engineering", "Medicine"])], order=1),
    ]
    return test, questions, answers(("q1", "A"), ("q2", "B"))
