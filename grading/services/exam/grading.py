"""Instructor grading of submitted exam sessions."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Mapping

from django.utils import timezone

from grading.academic.questions import Exam
from grading.academic.scoring import apply_manual_scores, is_blank_answer, score_answers, validate_manual_scores
from grading.services.shared.errors import ValidationError

from . import logging_utils as logu
from .session import ExamSession, SessionStatus
from .validators import validate_grader, validate_session_for_grading

logger = logging.getLogger(__name__)


def pending_manual_questions(session: ExamSession, exam: Exam) -> list[str]:
    return [
        q.id for q in exam.questions
        if not q.is_objective and not is_blank_answer(session.answers.get(q.id))
    ]


def grade_session(
    session: ExamSession,
    exam: Exam,
    scores: Mapping[str, Any],
    *,
    actor: Any,
    feedback: Mapping[str, str] | None = None,
    clock: Callable[[], datetime] | None = None,
) -> ExamSession:
    """
    Finalise a submitted session with instructor scores for its subjective
    questions. Every answered subjective question must be scored; unanswered
    ones may be left out and count as 0.
    """
    validate_grader(actor)
    validate_session_for_grading(session, exam)
    cleaned = validate_manual_scores(exam, scores)

    missing = [qid for qid in pending_manual_questions(session, exam) if qid not in cleaned]
    if missing:
        raise ValidationError(f"Missing scores for questions: {', '.join(missing)}")

    result = apply_manual_scores(score_answers(exam.questions, session.answers), cleaned)

    session.manual_scores = dict(cleaned)
    session.feedback = {
        str(k): str(v)
        for k, v in (feedback or {}).items()
        if exam.question(k) is not None and str(v or "").strip()
    }
    session.score = result.score
    session.max_score = result.max_score
    session.status = SessionStatus.GRADED
    session.graded_by = str(getattr(actor, "id", "") or "")
    session.graded_at = (clock or timezone.now)()

    logu.log_session_graded(logger, session, grader=session.graded_by, manual_questions=len(cleaned))
    return session
