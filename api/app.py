from __future__ import annotations
from fastapi import FastAPI, HTTPException, Body, Query, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, ConfigDict, Field
import logging, os, typing as t

# ---- Engine imports ----
from career_core import config
from career_core.audit_tests import audit_test
from career_core.bank import (
    migrate_options,
    parse_question,
    parse_responses,
    parse_test,
    rollback_options,
    standard_options,
)
from career_core.engine import analyze, submission_result
from career_core.report_html import render_report_html
from career_core.results_export import to_csv as scores_to_csv, to_json as scores_to_json
from career_core.types import AptitudeTest, Question
from . import storage

log = logging.getLogger(__name__)

app = FastAPI(title="Career Guidance API")


@app.get("/")
def root():
    return {"status": "ok", "service": "career-guidance-api"}


ALLOWED_ORIGINS = [
    o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",") if o.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=False,
)

# ---- Schemas ----
class _Camel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class OptionIn(_Camel):
    text: str
    value: str
    score: float | None = Field(default=None, ge=0, allow_inf_nan=False)
    career_fields: list[str] | None = Field(default=None, alias="careerFields")


class QuestionIn(_Camel):
    question_text: str = Field(alias="questionText")
    question_type: t.Literal["multiple-choice", "true-false", "scale"] = Field(
        default="multiple-choice", alias="questionType"
    )
    options: list[OptionIn]
    correct_answer: str | None = Field(default=None, alias="correctAnswer")


class TestIn(_Camel):
    title: str
    description: str = ""
    time_limit: int | None = Field(default=None, alias="timeLimit")
    category: str
    difficulty: str
    active: bool = True
    image_url: str | None = Field(default=None, alias="imageUrl")
    created_by: str | None = Field(default=None, alias="createdBy")
    career_fields: list[str] = Field(default_factory=list, alias="careerFields")


class TestPatch(_Camel):
    title: str | None = None
    description: str | None = None
    time_limit: int | None = Field(default=None, alias="timeLimit")
    category: str | None = None
    difficulty: str | None = None
    active: bool | None = None
    image_url: str | None = Field(default=None, alias="imageUrl")
    career_fields: list[str] | None = Field(default=None, alias="careerFields")


class StartReq(BaseModel):
    user_id: str


class AnswerIn(_Camel):
    question_id: str = Field(alias="questionId")
    response: str


class SubmitReq(BaseModel):
    user_id: str
    user_email: str | None = None
    answers: list[AnswerIn]


class EventIn(_Camel):
    type: str
    status: str
    user_id: str | None = Field(default=None, alias="userId")
    user_email: str | None = Field(default=None, alias="userEmail")
    entity_id: str | None = Field(default=None, alias="entityId")
    entity_name: str | None = Field(default=None, alias="entityName")
    details: str | None = None


# ---- Helpers ----
def _dump(model: BaseModel) -> dict[str, t.Any]:
    return model.model_dump(by_alias=True, exclude_none=True)


# optional test attributes a PATCH may reset to null
_CLEARABLE = ("timeLimit", "imageUrl")


def _patch_dump(model: BaseModel) -> dict[str, t.Any]:
    sent = model.model_dump(by_alias=True, exclude_unset=True)
    return {k: v for k, v in sent.items() if v is not None or k in _CLEARABLE}


def _require_test(test_id: str) -> dict[str, t.Any]:
    record = storage.get_test(test_id)
    if not record:
        raise HTTPException(404, "test not found")
    return record


def _require_response(response_id: str) -> dict[str, t.Any]:
    record = storage.get_response(response_id)
    if not record:
        raise HTTPException(404, "test response not found")
    return record


def _definition(test_id: str) -> tuple[AptitudeTest | None, list[Question]]:
    raw = storage.get_test(test_id)
    test = parse_test(raw) if raw else None
    questions = [parse_question(q) for q in storage.list_questions(test_id)]
    return test, questions


# ---- Health ----
@app.get("/health")
def health():
    return {
        "data_dir": str(storage.DATA_ROOT),
        "tests": storage.count_tests(),
        "results_export_enabled": config.RESULTS_EXPORT_ENABLED,
    }

# ---- Tests & questions (admin) ----
@app.post("/tests")
def create_test(req: TestIn):
    record = storage.create_test(_dump(req))
    storage.log_event({
        "type": "test_added",
        "userId": req.created_by,
        "entityId": record["id"],
        "entityName": record["title"],
        "status": "success",
    })
    return record


@app.get("/tests")
def list_tests(active: bool = Query(False, description="Only tests open to students")):
    return {"tests": storage.list_tests(active_only=active)}


@app.get("/tests/count")
def tests_count():
    return {"count": storage.count_tests()}


@app.get("/tests/{test_id}")
def get_test(test_id: str):
    return _require_test(test_id)


@app.patch("/tests/{test_id}")
def update_test(test_id: str, req: TestPatch):
    record = storage.update_test(test_id, _patch_dump(req))
    if record is None:
        raise HTTPException(404, "test not found")
    return record


@app.delete("/tests/{test_id}")
def delete_test(test_id: str):
    if not storage.delete_test(test_id):
        raise HTTPException(404, "test not found")
    return {"ok": True}


@app.get("/tests/{test_id}/questions")
def list_questions(test_id: str):
    return {"questions": storage.list_questions(test_id)}


@app.post("/tests/{test_id}/questions")
def add_question(test_id: str, req: QuestionIn):
    test = parse_test(_require_test(test_id))
    payload = _dump(req)
    payload["options"] = standard_options(req.question_type, payload.get("options") or [])

    keyed = bool(req.correct_answer)
    if test.category in config.SKILLS_CATEGORIES and not keyed:
        raise HTTPException(422, f"{test.category} questions must have a correctAnswer")
    if test.category not in config.SKILLS_CATEGORIES and keyed:
        raise HTTPException(422, f"{test.category} questions cannot have a correctAnswer")
    if not keyed:
        payload.pop("correctAnswer", None)

    try:
        parse_question({"id": "", **payload})
    except ValueError as e:
        raise HTTPException(422, str(e))
    return storage.add_question(test_id, payload)


@app.delete("/questions/{question_id}")
def delete_question(question_id: str):
    if not storage.delete_question(question_id):
        raise HTTPException(404, "question not found")
    return {"ok": True}


@app.get("/tests/{test_id}/audit")
def audit_test_endpoint(test_id: str):
    _require_test(test_id)
    test, questions = _definition(test_id)
    return audit_test(test, questions)  # type: ignore[arg-type]


@app.post("/tests/{test_id}/migrate-options")
def migrate_test_options(test_id: str, rollback: bool = Query(False, description="Re-encode fields into option text")):
    _require_test(test_id)
    rows = storage.list_questions(test_id)
    message = rollback_options(rows) if rollback else migrate_options(rows)
    storage.replace_questions(test_id, rows)
    log.info("option migration test=%s rollback=%s: %s", test_id, rollback, message)
    return {"message": message}

# ---- Response lifecycle ----
@app.post("/tests/{test_id}/start")
def start_test(test_id: str, req: StartReq):
    _require_test(test_id)
    record, created = storage.start_response(req.user_id, test_id)
    return {"created": created, "response": record}


@app.post("/responses/{response_id}/submit")
def submit_responses(response_id: str, payload: SubmitReq = Body(...)):
    record = _require_response(response_id)
    if record.get("userId") != payload.user_id:
        raise HTTPException(403, "not authorized to submit this test response")

    answers = [_dump(a) for a in payload.answers]
    test, questions = _definition(record["testId"])
    score, results = submission_result(test, questions, parse_responses(answers))
    updates: dict[str, t.Any] = {
        "completed": True,
        "completedAt": storage.now_ms(),
        "answers": answers,
        "results": results,
        "score": score,
    }
    storage.patch_response(response_id, updates)
    log.info("submit response=%s answers=%d score=%s", response_id, len(answers), score)

    if test is not None:
        storage.log_event({
            "type": "test_completed",
            "userId": payload.user_id,
            "userEmail": payload.user_email,
            "entityId": test.id,
            "entityName": test.title,
            "details": f"{len(answers)} questions answered",
            "status": "success",
        })
    return {"responseId": response_id, "results": results}


@app.post("/responses/{response_id}/analyze")
def analyze_response(response_id: str):
    record = _require_response(response_id)
    test, questions = _definition(record["testId"])
    if test is None:
        raise HTTPException(404, "test not found")

    result = analyze(test, questions, parse_responses(record.get("answers") or []))
    results = result.to_dict()
    storage.patch_response(response_id, {
        "completed": True,
        "completedAt": storage.now_ms(),
        "results": results,
    })
    log.info(
        "analyze response=%s best=%s recommended=%s",
        response_id,
        results.get("bestMatch", {}).get("field"),
        results["recommendedFields"],
    )
    out = {
        "recommendedFields": results["recommendedFields"],
        "strengths": results["strengths"],
        "summary": results["summary"],
    }
    if "bestMatch" in results:
        out["bestMatch"] = results["bestMatch"]
    return out


@app.get("/responses/{response_id}")
def get_response(response_id: str):
    return _require_response(response_id)


def _stored_results(response_id: str) -> dict[str, t.Any]:
    record = _require_response(response_id)
    results = record.get("results")
    if not results:
        raise HTTPException(404, "results not available")
    return results


@app.get("/responses/{response_id}/report/html", response_class=HTMLResponse)
def report_html(response_id: str):
    results = _stored_results(response_id)
    return render_report_html(results, response_id=response_id)


@app.get("/responses/{response_id}/scores.json")
def scores_json(response_id: str):
    if not config.RESULTS_EXPORT_ENABLED:
        raise HTTPException(404, "results export disabled")
    results = _stored_results(response_id)
    return {"response_id": response_id, **scores_to_json(results)}


@app.get("/responses/{response_id}/scores.csv")
def scores_csv(response_id: str):
    if not config.RESULTS_EXPORT_ENABLED:
        raise HTTPException(404, "results export disabled")
    results = _stored_results(response_id)
    filename = f"{response_id}_scores.csv"
    return Response(
        content=scores_to_csv(results),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename=\"{filename}\""},
    )


@app.get("/users/{user_id}/responses")
def list_user_responses(user_id: str):
    return {"responses": storage.list_responses_for_user(user_id)}


@app.get("/students/{student_id}/responses")
def list_student_responses(student_id: str):
    out = []
    for record in storage.list_responses_for_user(student_id):
        test = storage.get_test(record.get("testId", ""))
        out.append({**record, "testTitle": (test or {}).get("title") or "Unknown Test"})
    return {"responses": out}

# ---- System events ----
@app.post("/events")
def log_event(req: EventIn):
    return storage.log_event(_dump(req))


@app.get("/events/recent")
def recent_events(limit: int | None = Query(None, ge=1)):
    return {"events": storage.recent_events(limit or config.EVENTS_RECENT_LIMIT)}


@app.get("/events")
def list_events():
    return {"events": storage.all_events()}
