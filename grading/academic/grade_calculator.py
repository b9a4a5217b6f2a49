from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional


@dataclass(frozen=True)
class GradeRecord:
    student_id: str
    course_id: str
    category: str
    score: float
    max_score: float
    weight: float = 1.0
    date: Optional[datetime] = None
    exam_id: Optional[str] = None
    late: bool = False
    excused: bool = False
    feedback: str = ""
    id: str = ""

    @property
    def percentage(self) -> float:
        return _safe_percentage(self.score, self.max_score)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "GradeRecord":
        weight = payload.get("weight")
        return cls(
            student_id=str(payload.get("student_id") or payload.get("studentId") or ""),
            course_id=str(payload.get("course_id") or payload.get("courseId") or ""),
            category=str(payload.get("category") or ""),
            score=float(payload.get("score", 0) or 0),
            max_score=float(payload.get("max_score", payload.get("maxScore", 0)) or 0),
            weight=1.0 if weight is None else float(weight),
            date=payload.get("date"),
            exam_id=payload.get("exam_id") or payload.get("examId"),
            late=bool(payload.get("late", False)),
            excused=bool(payload.get("excused", False)),
            feedback=str(payload.get("feedback") or ""),
            id=str(payload.get("id") or ""),
        )


@dataclass(frozen=True)
class GradeCategory:
    id: str
    course_id: str
    name: str
    weight: float
    description: str = ""

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "GradeCategory":
        return cls(
            id=str(payload.get("id") or payload.get("name") or ""),
            course_id=str(payload.get("course_id") or payload.get("courseId") or ""),
            name=str(payload.get("name") or ""),
            weight=float(payload.get("weight", 0) or 0),
            description=str(payload.get("description") or ""),
        )


@dataclass(frozen=True)
class GradePolicy:
    """
    Late/excused handling. The defaults leave the arithmetic untouched; both
    knobs are opt-in until an institution confirms its rule.
    """

    late_penalty_pct: float = 0.0
    drop_excused: bool = False


@dataclass(frozen=True)
class CourseGradeBreakdown:
    percentage: float
    breakdown: Dict[str, float] = field(default_factory=dict)
    included_weight: float = 0.0


def _safe_percentage(score: Any, max_score: Any) -> float:
    try:
        s = float(score or 0)
        m = float(max_score or 0)
    except (TypeError, ValueError):
        return 0.0
    if m <= 0:
        return 0.0
    return s / m * 100.0


def _norm_category(name: Any) -> str:
    return str(name or "").strip().lower()


def _record_percentage(record: GradeRecord, policy: GradePolicy) -> float:
    pct = record.percentage
    if record.late and policy.late_penalty_pct > 0:
        pct = pct * (1.0 - policy.late_penalty_pct / 100.0)
    return pct


def calculate_category_percentage(records: Iterable[GradeRecord], policy: GradePolicy | None = None) -> float:
    policy = policy or GradePolicy()
    rows = list(records or [])
    if not rows:
        return 0.0
    return sum(_record_percentage(r, policy) for r in rows) / len(rows)


def group_records_by_category(
    records: Iterable[GradeRecord],
    policy: GradePolicy | None = None,
) -> Dict[str, List[GradeRecord]]:
    policy = policy or GradePolicy()
    grouped: Dict[str, List[GradeRecord]] = defaultdict(list)
    for rec in records or []:
        if rec.excused and policy.drop_excused:
            continue
        grouped[_norm_category(rec.category)].append(rec)
    return dict(grouped)


def compute_course_percentage(
    records: Iterable[GradeRecord],
    categories: Iterable[GradeCategory],
    *,
    policy: GradePolicy | None = None,
) -> CourseGradeBreakdown:
    """
    Weighted course percentage over the categories that have recorded work.

    ``breakdown`` maps category id -> category percentage for the included
    categories only. No recorded work at all yields 0.
    """
    grouped = group_records_by_category(records, policy)

    breakdown: Dict[str, float] = {}
    weighted_sum = 0.0
    weight_sum = 0.0
    for cat in categories or []:
        cat_records = grouped.get(_norm_category(cat.name)) or []
        if not cat_records:
            continue
        cat_pct = calculate_category_percentage(cat_records, policy)
        cat_weight = max(float(cat.weight or 0), 0.0)
        breakdown[cat.id] = cat_pct
        weighted_sum += cat_pct * cat_weight
        weight_sum += cat_weight

    percentage = weighted_sum / weight_sum if weight_sum > 0 else 0.0
    return CourseGradeBreakdown(percentage=percentage, breakdown=breakdown, included_weight=weight_sum)


def category_weight_total(categories: Iterable[GradeCategory]) -> float:
    return sum(float(c.weight or 0) for c in categories or [])
