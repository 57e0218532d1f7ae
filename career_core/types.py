from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Literal
QuestionType = Literal["multiple-choice","true-false","scale"]
ConfidenceLevel = Literal["Very High","High","Medium","Low"]
@dataclass
class Option:
    text: str; value: str
    score: Optional[float] = None
    career_fields: List[str] = field(default_factory=list)
@dataclass
class Question:
    id: str; test_id: str; text: str
    type: QuestionType = "multiple-choice"
    options: List[Option] = field(default_factory=list)
    correct_answer: Optional[str] = None
    order_index: int = 0

    def option_for(self, value: str) -> Optional[Option]:
        return next((o for o in self.options if o.value == value), None)
@dataclass
class AptitudeTest:
    id: str; title: str
    description: str = ""
    category: str = "Career Interest"
    difficulty: str = "Medium"
    active: bool = True
    career_fields: List[str] = field(default_factory=list)
    time_limit: Optional[int] = None
    image_url: Optional[str] = None
    created_by: Optional[str] = None
@dataclass
class Response:
    question_id: str; response: str
@dataclass
class FieldTotals:
    raw_score: Dict[str, float]
    response_count: Dict[str, int]
@dataclass
class BestMatch:
    field: str
    confidence_score: int
    confidence_level: ConfidenceLevel

    def to_dict(self) -> Dict[str, Any]:
        return {
            "field": self.field,
            "confidenceScore": self.confidence_score,
            "confidenceLevel": self.confidence_level,
        }
@dataclass
class ResultSet:
    """Finalized recommendation for one response record.

    ``to_dict`` yields the persisted ``results`` object; its key names and
    nesting are read by other parts of the application and must not drift.
    """
    summary: str
    recommended_fields: List[str]
    strengths: List[str]
    best_match: Optional[BestMatch]
    aptitude_scores: Dict[str, float] = field(default_factory=dict)
    normalized_scores: Dict[str, float] = field(default_factory=dict)
    relative_scores: Dict[str, float] = field(default_factory=dict)
    confidence_scores: Dict[str, float] = field(default_factory=dict)
    response_counts: Dict[str, int] = field(default_factory=dict)
    insights: List[str] = field(default_factory=list)
    all_fields: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        details: Dict[str, Any] = {
            "aptitudeScores": dict(self.aptitude_scores),
            "normalizedScores": dict(self.normalized_scores),
            "relativeScores": dict(self.relative_scores),
            "confidenceScores": dict(self.confidence_scores),
            "responseCounts": dict(self.response_counts),
            "insights": list(self.insights),
            "allFields": list(self.all_fields),
        }
        out: Dict[str, Any] = {
            "summary": self.summary,
            "recommendedFields": list(self.recommended_fields),
            "strengths": list(self.strengths),
        }
        if self.best_match is not None:
            out["bestMatch"] = self.best_match.to_dict()
            details["bestMatch"] = self.best_match.to_dict()
        out["details"] = details
        return out
