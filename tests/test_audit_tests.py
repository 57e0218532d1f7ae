from __future__ import annotations

from pathlib import Path

import career_core.audit_tests as audit_tests
from career_core.bank import load_bank
from tests.conftest import build_question, build_test


def test_packaged_bank_is_clean():
    summary = audit_tests.audit_bank(load_bank())
    assert summary["warnings"] == []


def test_audit_flags_definition_problems(tmp_path):
    test = build_test(["Engineering", "Medicine"])
    questions = [
        build_question("q1", [("a", 1, ["Engineering", "Law"]), ("a", 1, [])], correct="z"),
        build_question("q2", []),
    ]

    summary = audit_tests.audit_test(test, questions)
    joined = "\n".join(summary["warnings"])

    assert "undeclared field 'Law'" in joined
    assert "repeats option value 'a'" in joined
    assert "sets correctAnswer on a 'Career Interest' test" in joined
    assert "correctAnswer 'z' matches no option" in joined
    assert "t1/q2 has no options" in joined
    assert "field 'Medicine' is not reachable" in joined
    assert summary["coverage"] == {"Engineering": 1, "Medicine": 0}
    assert summary["totals"]["keyed"] == 1

    outfile = tmp_path / "test_audit.json"
    text = audit_tests.write_summary(summary, path=outfile)
    assert outfile.read_text(encoding="utf-8").strip() == text


def test_audit_flags_missing_fields():
    summary = audit_tests.audit_test(build_test([]), [])
    assert summary["warnings"] == ["t1 declares no career fields"]


def test_skills_tests_may_carry_answers():
    test = build_test(["Finance"], category="Skills")
    questions = [build_question("q1", [("a", 1, ["Finance"]), ("b", 1, [])], correct="a")]
    assert audit_tests.audit_test(test, questions)["warnings"] == []


def test_skills_question_without_answer_is_flagged():
    test = build_test(["Finance"], category="Skills Assessment")
    questions = [build_question("q1", [("a", 1, ["Finance"]), ("b", 1, [])])]
    assert audit_tests.audit_test(test, questions)["warnings"] == [
        "t1/q1 has no correctAnswer on a 'Skills Assessment' test"
    ]


def test_main_returns_warning_exit(monkeypatch, capsys):
    bank = [(build_test([]), [])]
    monkeypatch.setattr(audit_tests, "load_bank", lambda: bank)

    exit_code = audit_tests.main([])
    captured = capsys.readouterr()

    assert exit_code == 2
    assert "declares no career fields" in captured.out
    assert Path("/tmp/test_audit.json").exists()
