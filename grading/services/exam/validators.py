"""Exam session validators."""

from __future__ import annotations

from typing import Any

from grading.academic.questions import Exam
from grading.services.shared.errors import PermissionDeniedError, SessionStateError, ValidationError

from .session import SessionStatus


def validate_exam_for_start(exam: Exam, *, previous_attempts: int = 0) -> None:
    if exam is None:
        raise ValidationError("Exam not found.")
    if not exam.questions:
        raise ValidationError("Cannot start an exam with no questions.")
    if exam.duration_seconds <= 0:
        raise ValidationError("Exam duration must be positive.")
    if int(previous_attempts or 0) >= int(exam.attempts):
        raise ValidationError(f"No attempts left for exam {exam.id} (allowed: {exam.attempts}).")


def validate_question_id(exam: Exam, question_id: Any) -> str:
    q = exam.question(str(question_id))
    if q is None:
        raise ValidationError(f"Unknown question id: {question_id}")
    return q.id


def validate_grader(actor: Any) -> None:
    if actor is None or not bool(getattr(actor, "is_staff", False)):
        raise PermissionDeniedError("Only instructors can grade exam submissions.")


def validate_session_for_grading(session: Any, exam: Exam) -> None:
    if str(session.exam_id) != str(exam.id):
        raise ValidationError(f"Session {session.id} does not belong to exam {exam.id}.")
    if session.status is SessionStatus.GRADED:
        raise SessionStateError(f"Session {session.id} is already graded.")
    if session.status is not SessionStatus.SUBMITTED:
        raise SessionStateError(f"Session {session.id} has not been submitted.")
