from __future__ import annotations
import os


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


# Confidence blend: relative alignment vs. response coverage.
CONFIDENCE_SCORE_WEIGHT: float = 0.7
CONFIDENCE_COVERAGE_WEIGHT: float = 0.3

SIGNIFICANT_THRESHOLD: float = 50.0

LEVEL_VERY_HIGH: float = 85.0
LEVEL_HIGH: float = 70.0
LEVEL_LOW: float = 40.0

FALLBACK_TOP_N: int = 3
STRENGTHS_MAX: int = 3
INSIGHT_STRENGTHS: int = 2
PLACEHOLDER_STRENGTH: str = "General Aptitude"

DEFAULT_OPTION_SCORE: float = 1.0

SKILLS_CATEGORIES: tuple[str, ...] = ("Skills", "Skills Assessment")

SUBMIT_STRENGTHS: tuple[str, ...] = ("Analytical thinking", "Problem solving")

RESULTS_EXPORT_ENABLED: bool = True

DEBUG_TRACE: bool = False
TRACE_FIELDS: tuple[str, ...] = (
    "field",
    "raw",
    "responses",
    "normalized",
    "relative",
    "confidence",
)

EVENTS_RECENT_LIMIT: int = 10

# // env overrides for staging/ops; defaults match the production results.
CONFIDENCE_SCORE_WEIGHT = _env_float("CONFIDENCE_SCORE_WEIGHT", CONFIDENCE_SCORE_WEIGHT)
CONFIDENCE_COVERAGE_WEIGHT = _env_float("CONFIDENCE_COVERAGE_WEIGHT", CONFIDENCE_COVERAGE_WEIGHT)
SIGNIFICANT_THRESHOLD = _env_float("SIGNIFICANT_THRESHOLD", SIGNIFICANT_THRESHOLD)
LEVEL_VERY_HIGH = _env_float("LEVEL_VERY_HIGH", LEVEL_VERY_HIGH)
LEVEL_HIGH = _env_float("LEVEL_HIGH", LEVEL_HIGH)
LEVEL_LOW = _env_float("LEVEL_LOW", LEVEL_LOW)
FALLBACK_TOP_N = _env_int("FALLBACK_TOP_N", FALLBACK_TOP_N)
STRENGTHS_MAX = _env_int("STRENGTHS_MAX", STRENGTHS_MAX)
RESULTS_EXPORT_ENABLED = _env_bool("RESULTS_EXPORT_ENABLED", RESULTS_EXPORT_ENABLED)
DEBUG_TRACE = _env_bool("DEBUG_TRACE", False)
EVENTS_RECENT_LIMIT = _env_int("EVENTS_RECENT_LIMIT", EVENTS_RECENT_LIMIT)
