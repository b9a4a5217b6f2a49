"""
Gradebook Analytics
===================

Summaries shown next to exam results and course gradebooks: exam statistics,
letter-grade distribution, per-category performance and class pass rates.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from .grade_calculator import GradeRecord
from .grade_scale import DEFAULT_GRADE_SCALE, GradeScale, resolve_letter


def _status_value(status: Any) -> str:
    return str(getattr(status, "value", status) or "")


def exam_result_stats(sessions: Iterable[Any]) -> Optional[Dict[str, Any]]:
    """
    Statistics over graded submissions of one exam.

    Only sessions that are graded and carry a score count as completed.
    Returns None when nothing has been graded yet.
    """
    rows = list(sessions or [])
    completed = [
        s for s in rows
        if _status_value(getattr(s, "status", "")) == "graded" and getattr(s, "score", None) is not None
    ]
    if not completed:
        return None

    pcts = pd.Series(
        [
            (float(s.score) / float(s.max_score) * 100.0) if float(s.max_score or 0) > 0 else 0.0
            for s in completed
        ],
        dtype="float64",
    )
    return {
        "total_submissions": len(rows),
        "completed_submissions": len(completed),
        "average": round(float(pcts.mean()), 2),
        "highest": round(float(pcts.max()), 2),
        "lowest": round(float(pcts.min()), 2),
    }


def grade_distribution(percentages: Iterable[float], scale: GradeScale | None = None) -> Dict[str, int]:
    scale = scale or DEFAULT_GRADE_SCALE
    letters: List[str] = [resolve_letter(p, scale).letter for p in percentages or []]
    counts = pd.Series(letters, dtype="object").value_counts()
    return {letter: int(counts.get(letter, 0)) for letter in scale.letters}


def category_analytics(records: Iterable[GradeRecord]) -> List[Dict[str, Any]]:
    rows = [{"category": str(r.category or "").strip().lower(), "pct": r.percentage} for r in records or []]
    if not rows:
        return []
    df = pd.DataFrame(rows)
    grouped = df.groupby("category")["pct"].agg(["count", "mean", "max", "min"]).reset_index()
    grouped = grouped.sort_values("category")
    return [
        {
            "category": row["category"],
            "count": int(row["count"]),
            "average": round(float(row["mean"]), 2),
            "highest": round(float(row["max"]), 2),
            "lowest": round(float(row["min"]), 2),
        }
        for _, row in grouped.iterrows()
    ]


def class_summary(percentages: Iterable[float], *, passing_percentage: float = 60.0) -> Dict[str, Any]:
    series = pd.Series(list(percentages or []), dtype="float64")
    if series.empty:
        return {"students": 0, "class_average": 0.0, "passing_rate": 0.0}
    passing = int((series >= float(passing_percentage)).sum())
    return {
        "students": int(series.size),
        "class_average": round(float(series.mean()), 2),
        "passing_rate": round(passing / int(series.size) * 100.0, 2),
    }
