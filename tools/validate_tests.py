from __future__ import annotations
from collections import Counter
import os
from career_core.bank import load_bank
from career_core.scoring import declared_fields

# Configurable targets; defaults match the packaged bank
TARGETS = {
    "questions_min": int(os.getenv("TARGET_QUESTIONS_MIN", 2)),
    "options_per_field_min": int(os.getenv("TARGET_OPTIONS_PER_FIELD_MIN", 1)),
}

def main():
    print(f"Targets per test: ≥{TARGETS['questions_min']} questions, "
          f"≥{TARGETS['options_per_field_min']} option(s) per career field.\n")

    for test, questions in load_bank():
        fields = declared_fields(test)
        per_field = Counter(f for q in questions for o in q.options for f in o.career_fields)
        by_type = Counter(q.type for q in questions)
        keyed = sum(1 for q in questions if q.correct_answer is not None)

        print(f"{test.id}: {len(questions)} questions ({dict(by_type)}) keyed={keyed} category={test.category}")
        for f in fields:
            print(f"  {f:<24} options {per_field.get(f, 0):2d}")

        need_q = max(0, TARGETS["questions_min"] - len(questions))
        thin = [f for f in fields if per_field.get(f, 0) < TARGETS["options_per_field_min"]]
        if need_q or thin:
            print(f"  → Add: questions {need_q}, options for {', '.join(thin) or '-'}\n")
        else:
            print("  ✓ Meets targets\n")

if __name__ == "__main__":
    main()
