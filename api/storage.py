"""Utility helpers for persisting tests, questions, response records and
system events.

Each collection is one JSON document on disk keyed by record id. Writes go
through a temp file and ``replace`` so a reader never sees a half-written
collection, and every read-modify-write holds the module lock.
"""

from __future__ import annotations

import json
import os
import threading
import time
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple


DATA_ROOT = Path(os.getenv("DATA_DIR", "data")).resolve()
TESTS_PATH = DATA_ROOT / "tests.json"
QUESTIONS_PATH = DATA_ROOT / "questions.json"
RESPONSES_PATH = DATA_ROOT / "responses.json"
EVENTS_PATH = DATA_ROOT / "events.json"

_LOCK = threading.Lock()


def _read_json(path: Path, default: Any) -> Any:
    if not path.exists():
        return default
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError:
        return default


def _write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
    tmp.replace(path)


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def now_ms() -> int:
    return int(time.time() * 1000)


def _new_id() -> str:
    return str(uuid.uuid4())


# ---- tests ----
def create_test(payload: Dict[str, Any]) -> Dict[str, Any]:
    record = dict(payload)
    record["id"] = _new_id()
    record["createdAt"] = utcnow_iso()
    with _LOCK:
        tests: Dict[str, Dict[str, Any]] = _read_json(TESTS_PATH, {})
        tests[record["id"]] = record
        _write_json(TESTS_PATH, tests)
    return record


def get_test(test_id: str) -> Optional[Dict[str, Any]]:
    tests: Dict[str, Dict[str, Any]] = _read_json(TESTS_PATH, {})
    return tests.get(test_id)


def update_test(test_id: str, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    with _LOCK:
        tests: Dict[str, Dict[str, Any]] = _read_json(TESTS_PATH, {})
        if test_id not in tests:
            return None
        tests[test_id].update({k: v for k, v in updates.items() if k != "id"})
        _write_json(TESTS_PATH, tests)
        return tests[test_id]


def delete_test(test_id: str) -> bool:
    with _LOCK:
        tests: Dict[str, Dict[str, Any]] = _read_json(TESTS_PATH, {})
        if test_id not in tests:
            return False
        tests.pop(test_id, None)
        _write_json(TESTS_PATH, tests)

        questions: Dict[str, Dict[str, Any]] = _read_json(QUESTIONS_PATH, {})
        kept = {qid: q for qid, q in questions.items() if q.get("testId") != test_id}
        if len(kept) != len(questions):
            _write_json(QUESTIONS_PATH, kept)
    return True


def list_tests(active_only: bool = False) -> List[Dict[str, Any]]:
    tests: Dict[str, Dict[str, Any]] = _read_json(TESTS_PATH, {})
    out = [t for t in tests.values() if t.get("active") or not active_only]
    out.sort(key=lambda t: t.get("createdAt", ""))
    return out


def count_tests() -> int:
    return len(_read_json(TESTS_PATH, {}))


# ---- questions ----
def add_question(test_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    record = dict(payload)
    record["id"] = _new_id()
    record["testId"] = test_id
    with _LOCK:
        questions: Dict[str, Dict[str, Any]] = _read_json(QUESTIONS_PATH, {})
        record["orderIndex"] = sum(1 for q in questions.values() if q.get("testId") == test_id)
        questions[record["id"]] = record
        _write_json(QUESTIONS_PATH, questions)
    return record


def delete_question(question_id: str) -> bool:
    with _LOCK:
        questions: Dict[str, Dict[str, Any]] = _read_json(QUESTIONS_PATH, {})
        if question_id not in questions:
            return False
        questions.pop(question_id, None)
        _write_json(QUESTIONS_PATH, questions)
    return True


def list_questions(test_id: str) -> List[Dict[str, Any]]:
    questions: Dict[str, Dict[str, Any]] = _read_json(QUESTIONS_PATH, {})
    out = [q for q in questions.values() if q.get("testId") == test_id]
    out.sort(key=lambda q: q.get("orderIndex", 0))
    return out


def replace_questions(test_id: str, rows: List[Dict[str, Any]]) -> None:
    """Overwrite the stored questions of one test with ``rows`` (same ids)."""
    with _LOCK:
        questions: Dict[str, Dict[str, Any]] = _read_json(QUESTIONS_PATH, {})
        for row in rows:
            if questions.get(row.get("id"), {}).get("testId") == test_id:
                questions[row["id"]] = row
        _write_json(QUESTIONS_PATH, questions)


def all_questions() -> List[Dict[str, Any]]:
    return list(_read_json(QUESTIONS_PATH, {}).values())


# ---- response records ----
def start_response(user_id: str, test_id: str) -> Tuple[Dict[str, Any], bool]:
    """Return the in-progress record for (user, test), creating one if needed."""
    with _LOCK:
        responses: Dict[str, Dict[str, Any]] = _read_json(RESPONSES_PATH, {})
        for record in responses.values():
            if record.get("userId") == user_id and record.get("testId") == test_id and not record.get("completed"):
                return record, False
        record = {
            "id": _new_id(),
            "userId": user_id,
            "testId": test_id,
            "completed": False,
            "startedAt": now_ms(),
            "answers": [],
        }
        responses[record["id"]] = record
        _write_json(RESPONSES_PATH, responses)
    return record, True


def get_response(response_id: str) -> Optional[Dict[str, Any]]:
    responses: Dict[str, Dict[str, Any]] = _read_json(RESPONSES_PATH, {})
    return responses.get(response_id)


def patch_response(response_id: str, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Overwrite the given keys of one record; last write wins."""
    with _LOCK:
        responses: Dict[str, Dict[str, Any]] = _read_json(RESPONSES_PATH, {})
        if response_id not in responses:
            return None
        responses[response_id].update(updates)
        _write_json(RESPONSES_PATH, responses)
        return responses[response_id]


def list_responses_for_user(user_id: str) -> List[Dict[str, Any]]:
    responses: Dict[str, Dict[str, Any]] = _read_json(RESPONSES_PATH, {})
    out = [r for r in responses.values() if r.get("userId") == user_id]
    out.sort(key=lambda r: r.get("startedAt", 0), reverse=True)
    return out


# ---- system events ----
def log_event(payload: Dict[str, Any]) -> Dict[str, Any]:
    record = {k: v for k, v in payload.items() if v is not None}
    record["id"] = _new_id()
    record["timestamp"] = now_ms()
    with _LOCK:
        events: List[Dict[str, Any]] = _read_json(EVENTS_PATH, [])
        events.append(record)
        _write_json(EVENTS_PATH, events)
    return record


def all_events() -> List[Dict[str, Any]]:
    events: List[Dict[str, Any]] = _read_json(EVENTS_PATH, [])
    # newest first; equal timestamps keep reverse insertion order
    return list(reversed(events))


def recent_events(limit: int) -> List[Dict[str, Any]]:
    return all_events()[: max(0, int(limit))]
