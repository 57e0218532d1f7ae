"""Test definitions: JSON loading, record (camelCase) conversion and the
legacy ``#FIELDS:`` option migration."""
from __future__ import annotations
import json, math, re, importlib.resources as ir
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .types import AptitudeTest, Option, Question, Response

QUESTION_TYPES = ("multiple-choice", "true-false", "scale")

# (text, value, score) per fixed-option question type
_STANDARD_OPTIONS: Dict[str, Tuple[Tuple[str, str, float], ...]] = {
    "true-false": (("True", "true", 0.0), ("False", "false", 0.0)),
    "scale": (
        ("1 (Strongly Disagree)", "1", 1.0),
        ("2 (Disagree)", "2", 2.0),
        ("3 (Neutral)", "3", 3.0),
        ("4 (Agree)", "4", 4.0),
        ("5 (Strongly Agree)", "5", 5.0),
    ),
}

_FIELDS_RX = re.compile(r"#FIELDS:(.*?)$")


def _str_list(raw: Any, what: str) -> List[str]:
    if raw is None:
        return []
    if not isinstance(raw, (list, tuple)):
        raise ValueError(f"{what} must be a list of strings")
    out: List[str] = []
    for v in raw:
        if not isinstance(v, str):
            raise ValueError(f"{what} must be a list of strings")
        out.append(v)
    return out


def parse_option(d: Mapping[str, Any]) -> Option:
    score = d.get("score")
    if score is not None:
        score = float(score)
        if not math.isfinite(score):
            raise ValueError(f"option {d.get('value')!r} has a non-finite score")
        if score < 0:
            raise ValueError(f"option {d.get('value')!r} has a negative score")
    return Option(
        text=str(d.get("text", "")),
        value=str(d["value"]),
        score=score,
        career_fields=_str_list(d.get("careerFields"), "careerFields"),
    )


def parse_question(d: Mapping[str, Any]) -> Question:
    qtype = d.get("questionType") or "multiple-choice"
    if qtype not in QUESTION_TYPES:
        raise ValueError(f"unknown questionType {qtype!r}")
    correct = d.get("correctAnswer")
    return Question(
        id=str(d["id"]),
        test_id=str(d.get("testId", "")),
        text=str(d.get("questionText", "")),
        type=qtype,
        options=[parse_option(o) for o in d.get("options") or []],
        correct_answer=None if correct is None else str(correct),
        order_index=int(d.get("orderIndex", 0) or 0),
    )


def standard_options(question_type: str, options: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """
    Option list stored for a new question.

    true-false and scale questions always get their fixed values, texts and
    scores; careerFields carry over from a given option with the same value.
    multiple-choice options are returned as given.
    """
    given = [dict(o) for o in options or []]
    preset = _STANDARD_OPTIONS.get(question_type)
    if preset is None:
        return given
    fields_by_value = {str(o.get("value")): o.get("careerFields") for o in given}
    out: List[Dict[str, Any]] = []
    for text, value, score in preset:
        opt: Dict[str, Any] = {"text": text, "value": value, "score": score}
        fields = fields_by_value.get(value)
        if fields:
            opt["careerFields"] = list(fields)
        out.append(opt)
    return out


def parse_test(d: Mapping[str, Any]) -> AptitudeTest:
    time_limit = d.get("timeLimit")
    return AptitudeTest(
        id=str(d["id"]),
        title=str(d.get("title", "")),
        description=str(d.get("description", "")),
        category=str(d.get("category", "Career Interest")),
        difficulty=str(d.get("difficulty", "Medium")),
        active=bool(d.get("active", True)),
        career_fields=_str_list(d.get("careerFields"), "careerFields"),
        time_limit=None if time_limit is None else int(time_limit),
        image_url=d.get("imageUrl"),
        created_by=d.get("createdBy"),
    )


def parse_responses(rows: Iterable[Mapping[str, Any]]) -> List[Response]:
    return [Response(question_id=str(r["questionId"]), response=str(r["response"])) for r in rows or []]


def option_to_dict(o: Option) -> Dict[str, Any]:
    out: Dict[str, Any] = {"text": o.text, "value": o.value}
    if o.score is not None:
        out["score"] = o.score
    if o.career_fields:
        out["careerFields"] = list(o.career_fields)
    return out


def question_to_dict(q: Question) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "id": q.id,
        "testId": q.test_id,
        "questionText": q.text,
        "questionType": q.type,
        "options": [option_to_dict(o) for o in q.options],
        "orderIndex": q.order_index,
    }
    if q.correct_answer is not None:
        out["correctAnswer"] = q.correct_answer
    return out


def aptitude_test_to_dict(t: AptitudeTest) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "id": t.id,
        "title": t.title,
        "description": t.description,
        "category": t.category,
        "difficulty": t.difficulty,
        "active": t.active,
        "careerFields": list(t.career_fields),
    }
    for key, val in (("timeLimit", t.time_limit), ("imageUrl", t.image_url), ("createdBy", t.created_by)):
        if val is not None:
            out[key] = val
    return out


def load_bank() -> List[Tuple[AptitudeTest, List[Question]]]:
    """Packaged sample tests, each with its questions ordered by ``orderIndex``."""
    data = ir.files(__package__).joinpath("data/tests.json").read_text(encoding="utf-8")
    raw = json.loads(data)
    out: List[Tuple[AptitudeTest, List[Question]]] = []
    for entry in raw:
        test = parse_test(entry)
        questions = [parse_question({"testId": test.id, **q}) for q in entry.get("questions", [])]
        questions.sort(key=lambda q: q.order_index)
        out.append((test, questions))
    return out


def find_test(test_id: str) -> Optional[Tuple[AptitudeTest, List[Question]]]:
    for test, questions in load_bank():
        if test.id == test_id:
            return test, questions
    return None


# ---- legacy option encoding: "Option text #FIELDS:Engineering,Medicine" ----
def migrate_option(d: Mapping[str, Any]) -> Dict[str, Any]:
    out = dict(d)
    text = str(out.get("text", ""))
    m = _FIELDS_RX.search(text)
    if not m:
        # already migrated or never tagged
        return out
    fields = [f.strip() for f in m.group(1).split(",") if f.strip()]
    out["text"] = _FIELDS_RX.sub("", text).strip()
    if fields:
        out["careerFields"] = fields
    else:
        out.pop("careerFields", None)
    return out


def rollback_option(d: Mapping[str, Any]) -> Dict[str, Any]:
    out = dict(d)
    fields = out.pop("careerFields", None) or []
    if fields:
        out["text"] = f"{out.get('text', '')} #FIELDS:{','.join(fields)}"
    return out


def migrate_options(questions: List[Dict[str, Any]]) -> str:
    for q in questions:
        q["options"] = [migrate_option(o) for o in q.get("options") or []]
    return f"Migrated {len(questions)} questions"


def rollback_options(questions: List[Dict[str, Any]]) -> str:
    for q in questions:
        q["options"] = [rollback_option(o) for o in q.get("options") or []]
    return f"Rolled back {len(questions)} questions"
