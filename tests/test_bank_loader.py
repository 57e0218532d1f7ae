from __future__ import annotations

import pytest

from career_core.bank import (
    aptitude_test_to_dict,
    find_test,
    load_bank,
    migrate_options,
    parse_question,
    parse_responses,
    parse_test,
    question_to_dict,
    rollback_options,
    standard_options,
)
from career_core.engine import analyze
from career_core.scoring import correctness_score


def test_packaged_bank_loads_in_order():
    bank = load_bank()
    ids = [t.id for t, _ in bank]
    assert "career-interest-basics" in ids

    test, questions = find_test("career-interest-basics")
    assert test.career_fields == ["Engineering", "Medicine", "Arts", "Business"]
    assert [q.order_index for q in questions] == sorted(q.order_index for q in questions)
    assert all(q.test_id == test.id for q in questions)


def test_packaged_interest_test_recommends_medicine():
    test, questions = find_test("career-interest-basics")
    responses = parse_responses([
        {"questionId": "cib-q1", "response": "b"},
        {"questionId": "cib-q2", "response": "false"},
        {"questionId": "cib-q3", "response": "5"},
        {"questionId": "cib-q4", "response": "c"},
    ])
    res = analyze(test, questions, responses)
    assert res.best_match.field == "Medicine"
    assert res.recommended_fields == ["Medicine"]


def test_packaged_skills_test_is_keyed():
    _test, questions = find_test("numeracy-skills")
    responses = parse_responses([
        {"questionId": "ns-q1", "response": "12"},
        {"questionId": "ns-q2", "response": "false"},
    ])
    assert correctness_score(questions, responses) == 50


def test_unknown_test_id():
    assert find_test("nope") is None


def test_parse_round_trip_keeps_record_shape():
    raw_q = {
        "id": "q1",
        "testId": "t1",
        "questionText": "Pick one",
        "questionType": "true-false",
        "orderIndex": 2,
        "correctAnswer": "true",
        "options": [
            {"text": "True", "value": "true", "score": 2.0, "careerFields": ["Law"]},
            {"text": "False", "value": "false"},
        ],
    }
    assert question_to_dict(parse_question(raw_q)) == raw_q

    raw_t = {
        "id": "t1",
        "title": "T",
        "description": "",
        "category": "Skills",
        "difficulty": "Hard",
        "active": False,
        "careerFields": ["Law"],
        "timeLimit": 20,
    }
    assert aptitude_test_to_dict(parse_test(raw_t)) == raw_t


@pytest.mark.parametrize(
    "option",
    [
        {"text": "x", "value": "x", "score": -1},
        {"text": "x", "value": "x", "score": float("inf")},
        {"text": "x", "value": "x", "score": "nan"},
        {"text": "x", "value": "x", "careerFields": "Engineering"},
        {"text": "x", "value": "x", "careerFields": [3]},
    ],
)
def test_malformed_options_are_rejected(option):
    with pytest.raises(ValueError):
        parse_question({"id": "q", "options": [option]})


def test_unknown_question_type_is_rejected():
    with pytest.raises(ValueError):
        parse_question({"id": "q", "questionType": "essay", "options": []})


def test_scale_options_are_fixed_and_keep_fields():
    opts = standard_options("scale", [{"text": "meh", "value": "4", "score": 0, "careerFields": ["Arts"]}])
    assert [(o["value"], o["score"]) for o in opts] == [("1", 1.0), ("2", 2.0), ("3", 3.0), ("4", 4.0), ("5", 5.0)]
    assert opts[3]["careerFields"] == ["Arts"]
    assert all("careerFields" not in o for i, o in enumerate(opts) if i != 3)

    question = parse_question({"id": "q", "questionType": "scale", "options": opts})
    test = parse_test({"id": "t", "careerFields": ["Arts"]})
    res = analyze(test, [question], parse_responses([{"questionId": "q", "response": "4"}]))
    assert res.aptitude_scores == {"Arts": 4.0}


def test_multiple_choice_options_pass_through():
    given = [{"text": "a", "value": "a", "score": 3, "careerFields": ["Law"]}]
    assert standard_options("multiple-choice", given) == given


def test_migrate_and_rollback_field_suffix():
    rows = [
        {
            "id": "q1",
            "options": [
                {"text": "Build robots #FIELDS:Engineering,Arts", "value": "a", "score": 1},
                {"text": "Read", "value": "b", "careerFields": ["Law"]},
            ],
        }
    ]

    assert migrate_options(rows) == "Migrated 1 questions"
    first, second = rows[0]["options"]
    assert first == {"text": "Build robots", "value": "a", "score": 1, "careerFields": ["Engineering", "Arts"]}
    assert second == {"text": "Read", "value": "b", "careerFields": ["Law"]}

    assert rollback_options(rows) == "Rolled back 1 questions"
    first, second = rows[0]["options"]
    assert first == {"text": "Build robots #FIELDS:Engineering,Arts", "value": "a", "score": 1}
    assert second == {"text": "Read #FIELDS:Law", "value": "b"}
