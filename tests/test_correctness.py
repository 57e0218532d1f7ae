from __future__ import annotations

import pytest

from career_core.engine import submission_result
from career_core.scoring import correctness_score
from tests.conftest import answers, build_question, build_test


def _keyed(n: int) -> list:
    return [
        build_question(f"q{i}", [("a", 1, []), ("b", 1, [])], correct="a", order=i, test_id="skills")
        for i in range(n)
    ]


def test_three_of_four_correct_is_75():
    questions = _keyed(4)
    responses = answers(("q0", "a"), ("q1", "a"), ("q2", "a"), ("q3", "b"))
    assert correctness_score(questions, responses) == 75


def test_no_keyed_questions_is_unscored():
    questions = [build_question("q1", [("a", 1, ["Engineering"])])]
    assert correctness_score(questions, answers(("q1", "a"))) is None


def test_only_answered_keyed_questions_count():
    questions = [*_keyed(2), build_question("free", [("x", 1, [])])]
    responses = answers(("q0", "a"), ("free", "x"), ("ghost", "a"))
    # q1 unanswered, ghost unknown, free has no key
    assert correctness_score(questions, responses) == 100


def test_submission_result_reports_rounded_score():
    test = build_test(["Engineering", "Finance"], test_id="skills", category="Skills", title="Numeracy")
    questions = _keyed(3)
    score, results = submission_result(test, questions, answers(("q0", "a"), ("q1", "b"), ("q2", "b")))

    assert score == pytest.approx(33.333, abs=0.001)
    assert results == {
        "summary": "You completed the Numeracy test.",
        "recommendedFields": ["Engineering", "Finance"],
        "strengths": ["Analytical thinking", "Problem solving"],
        "details": {"score": "33%", "responseCount": 3},
    }


def test_submission_result_without_test_or_keys():
    score, results = submission_result(None, [], answers(("q1", "a")))
    assert score is None
    assert results["summary"] == "You completed the aptitude test."
    assert results["recommendedFields"] == []
    assert results["details"] == {"score": "Not scored", "responseCount": 1}
