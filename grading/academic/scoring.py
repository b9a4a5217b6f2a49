"""Score aggregation for exam sessions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping

from grading.services.shared.errors import SessionStateError, ValidationError

from .grade_calculator import GradeRecord
from .questions import Exam, Question


@dataclass(frozen=True)
class ScoreResult:
    score: float
    max_score: float
    has_manual_grading: bool
    question_scores: Dict[str, float] = field(default_factory=dict)

    @property
    def autograded(self) -> bool:
        return not self.has_manual_grading

    @property
    def percentage(self) -> float:
        if self.max_score <= 0:
            return 0.0
        return self.score / self.max_score * 100.0


def is_blank_answer(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def answer_matches(question: Question, value: Any) -> bool:
    if is_blank_answer(value):
        return False
    expected = question.correct_answer
    # True == 1 in Python; a boolean answer only matches a boolean key.
    if isinstance(value, bool) != isinstance(expected, bool):
        return False
    return value == expected


def score_answers(questions: Iterable[Question], answers: Mapping[str, Any] | None) -> ScoreResult:
    answers = answers or {}
    score = 0.0
    max_score = 0.0
    has_manual = False
    per_question: Dict[str, float] = {}

    for q in questions:
        max_score += float(q.points)
        value = answers.get(q.id)
        if q.is_objective:
            earned = float(q.points) if answer_matches(q, value) else 0.0
            score += earned
            per_question[q.id] = earned
        else:
            per_question[q.id] = 0.0
            if not is_blank_answer(value):
                has_manual = True

    return ScoreResult(
        score=score,
        max_score=max_score,
        has_manual_grading=has_manual,
        question_scores=per_question,
    )


def validate_manual_scores(exam: Exam, manual_scores: Mapping[str, Any]) -> Dict[str, float]:
    cleaned: Dict[str, float] = {}
    for qid, raw in (manual_scores or {}).items():
        q = exam.question(qid)
        if q is None:
            raise ValidationError(f"Unknown question id: {qid}")
        if q.is_objective:
            raise ValidationError(f"Question {qid} is auto-graded and cannot be scored manually.")
        try:
            value = float(raw)
        except (TypeError, ValueError):
            raise ValidationError(f"Score for question {qid} must be a number.") from None
        if value < 0 or value > float(q.points):
            raise ValidationError(f"Score for question {qid} must be between 0 and {q.points:g}.")
        cleaned[q.id] = value
    return cleaned


def apply_manual_scores(auto: ScoreResult, manual_scores: Mapping[str, float]) -> ScoreResult:
    per_question = dict(auto.question_scores)
    for qid, value in (manual_scores or {}).items():
        per_question[qid] = float(value)
    return ScoreResult(
        score=sum(per_question.values()),
        max_score=auto.max_score,
        has_manual_grading=auto.has_manual_grading,
        question_scores=per_question,
    )


def build_grade_record(
    session: Any,
    exam: Exam,
    *,
    course_id: str = "",
    category: str = "exam",
    weight: float = 1.0,
    feedback: str = "",
) -> GradeRecord:
    """Turn a graded exam session into the grade record the gradebook stores."""
    status = getattr(session, "status", None)
    status = getattr(status, "value", status)
    if status != "graded" or getattr(session, "score", None) is None:
        raise SessionStateError(f"Session {getattr(session, 'id', '-')} is not graded yet.")
    return GradeRecord(
        student_id=str(session.student_id),
        course_id=course_id or exam.course_id,
        category=category,
        score=float(session.score),
        max_score=float(session.max_score if session.max_score is not None else exam.total_points),
        weight=weight,
        date=getattr(session, "graded_at", None) or getattr(session, "submit_time", None),
        exam_id=exam.id,
        feedback=feedback,
    )
