"""Helpers to export the per-field score table of a result in JSON/CSV formats."""
from __future__ import annotations

from typing import Any, Dict, List, Mapping
import csv
import io

_FIELDS: tuple[str, ...] = (
    "field",
    "rank",
    "raw_score",
    "response_count",
    "normalized_score",
    "relative_score",
    "confidence_score",
)


def _num(mapping: Any, key: str) -> float:
    if not isinstance(mapping, Mapping):
        return 0.0
    try:
        return float(mapping.get(key, 0.0))
    except (TypeError, ValueError):
        return 0.0


def field_rows(results: Mapping[str, Any]) -> List[Dict[str, Any]]:
    """One row per field, in ranked order, from a persisted ``results`` object."""

    details = results.get("details") or {}
    ranked = list(details.get("allFields") or [])
    for name in details.get("aptitudeScores") or {}:
        if name not in ranked:
            ranked.append(name)

    rows: List[Dict[str, Any]] = []
    for idx, name in enumerate(ranked, start=1):
        rows.append(
            {
                "field": str(name),
                "rank": idx,
                "raw_score": _num(details.get("aptitudeScores"), name),
                "response_count": int(_num(details.get("responseCounts"), name)),
                "normalized_score": round(_num(details.get("normalizedScores"), name), 4),
                "relative_score": round(_num(details.get("relativeScores"), name), 4),
                "confidence_score": round(_num(details.get("confidenceScores"), name), 4),
            }
        )
    return rows


def to_json(results: Mapping[str, Any]) -> Dict[str, Any]:
    """Return a JSON-safe payload for score export."""

    return {"fields": field_rows(results)}


def to_csv(results: Mapping[str, Any]) -> str:
    """Render the score table as CSV with a fixed header."""

    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=_FIELDS)
    writer.writeheader()
    for row in field_rows(results):
        writer.writerow(row)
    return buf.getvalue()


__all__ = ["field_rows", "to_json", "to_csv"]
