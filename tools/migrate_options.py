# tools/migrate_options.py
from __future__ import annotations
import argparse, json
from pathlib import Path
from career_core.bank import migrate_options, rollback_options

def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Move '#FIELDS:a,b' option suffixes into careerFields (or back).")
    ap.add_argument("path", help="questions JSON: a list of questions or an {id: question} map")
    ap.add_argument("--rollback", action="store_true", help="re-encode careerFields into option text")
    ap.add_argument("--dry-run", action="store_true")
    args = ap.parse_args(argv)

    p = Path(args.path)
    data = json.loads(p.read_text(encoding="utf-8"))
    rows = list(data.values()) if isinstance(data, dict) else data
    message = rollback_options(rows) if args.rollback else migrate_options(rows)
    if not args.dry_run:
        p.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")
    print(message)
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
