"""
Exam session state machine.

in-progress -> submitted -> graded, or in-progress -> graded directly when
every answered question can be auto-scored. A runner owns exactly one session
and one countdown; an external scheduler calls ``tick()`` once per second.
"""

from __future__ import annotations

import logging
import random
import threading
import uuid
from datetime import datetime
from typing import Any, Callable, List, Optional

from django.utils import timezone

from grading.academic.questions import Exam, Question
from grading.academic.scoring import is_blank_answer, score_answers
from grading.services.shared.dto import CountdownPayload, ProgressPayload

from . import logging_utils as logu
from .session import Countdown, ExamSession, SessionStatus, format_remaining
from .validators import validate_exam_for_start, validate_question_id

logger = logging.getLogger(__name__)

OnSubmit = Callable[[ExamSession], None]


class ExamSessionRunner:
    def __init__(
        self,
        exam: Exam,
        session: ExamSession,
        *,
        on_submit: OnSubmit | None = None,
        clock: Callable[[], datetime] | None = None,
        time_warning_seconds: int = 300,
    ):
        self.exam = exam
        self.session = session
        self.countdown = Countdown(exam.duration_seconds)
        self.time_warning_seconds = int(time_warning_seconds)
        self._on_submit = on_submit
        self._clock = clock or timezone.now
        self._lock = threading.Lock()
        self._submitting = False
        self._closed = False

    @classmethod
    def start(
        cls,
        exam: Exam,
        student_id: str,
        *,
        attempt: int | None = None,
        previous_attempts: int = 0,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] | None = None,
        on_submit: OnSubmit | None = None,
        session_id: str | None = None,
        time_warning_seconds: int = 300,
    ) -> "ExamSessionRunner":
        validate_exam_for_start(exam, previous_attempts=previous_attempts)
        clock = clock or timezone.now

        order = [q.id for q in exam.questions]
        if exam.randomize_questions:
            (rng or random.Random()).shuffle(order)

        session = ExamSession(
            id=session_id or uuid.uuid4().hex,
            exam_id=exam.id,
            student_id=str(student_id),
            attempt=int(attempt if attempt is not None else int(previous_attempts or 0) + 1),
            start_time=clock(),
            question_order=tuple(order),
        )
        runner = cls(
            exam,
            session,
            on_submit=on_submit,
            clock=clock,
            time_warning_seconds=time_warning_seconds,
        )
        logu.log_session_start(logger, session, duration_s=exam.duration_seconds, randomized=exam.randomize_questions)
        return runner

    # ----- read side -----

    @property
    def is_active(self) -> bool:
        return self.session.is_in_progress and not self._submitting and not self._closed

    @property
    def seconds_remaining(self) -> int:
        return self.countdown.seconds_remaining

    @property
    def remaining_display(self) -> str:
        return format_remaining(self.countdown.seconds_remaining)

    @property
    def time_warning(self) -> bool:
        return self.is_active and self.countdown.seconds_remaining < self.time_warning_seconds

    def ordered_questions(self) -> List[Question]:
        return [q for q in (self.exam.question(qid) for qid in self.session.question_order) if q is not None]

    def answered_count(self) -> int:
        return sum(
            1 for q in self.exam.questions
            if not is_blank_answer(self.session.answers.get(q.id))
        )

    def progress(self) -> ProgressPayload:
        total = len(self.exam.questions)
        answered = self.answered_count()
        return {
            "answered": answered,
            "total": total,
            "percent": (answered / total * 100.0) if total else 0.0,
        }

    def countdown_payload(self) -> CountdownPayload:
        return {
            "seconds_remaining": self.countdown.seconds_remaining,
            "display": self.remaining_display,
            "warning": self.time_warning,
        }

    # ----- transitions -----

    def answer(self, question_id: Any, value: Any) -> bool:
        qid = validate_question_id(self.exam, question_id)
        if not self.is_active:
            logu.log_guard_noop(logger, self.session, "answer", self.session.status.value)
            return False
        if is_blank_answer(value):
            self.session.answers.pop(qid, None)
        else:
            self.session.answers[qid] = value
        return True

    def tick(self) -> bool:
        """One-second step. Returns True when this tick triggered the auto-submit."""
        if not self._lock.acquire(blocking=False):
            logu.log_guard_noop(logger, self.session, "tick", "busy")
            return False
        try:
            if not self.is_active:
                return False
            expired = self.countdown.tick()
        finally:
            self._lock.release()

        if not expired:
            return False
        logu.log_timer_expired(logger, self.session)
        return self.submit(manual=False) is not None

    def submit(self, manual: bool = True) -> Optional[ExamSession]:
        """
        Score and close the session. A call made while another submit is under
        way, or after the session left in-progress, is a no-op returning None.
        A submit that lands during a tick waits for the tick to finish.
        """
        with self._lock:
            if self._submitting or self._closed or not self.session.is_in_progress:
                logu.log_guard_noop(logger, self.session, "submit", "not_in_progress")
                return None
            self._submitting = True
            session = self.session
            try:
                result = score_answers(self.exam.questions, session.answers)
                submit_time = self._clock()
            except Exception:
                # session untouched and the countdown keeps running
                self._submitting = False
                raise

            session.time_spent = self.countdown.elapsed
            session.submit_time = submit_time
            session.score = result.score
            session.max_score = result.max_score
            session.autograded = result.autograded
            if result.has_manual_grading:
                session.status = SessionStatus.SUBMITTED
            else:
                session.status = SessionStatus.GRADED
                session.graded_at = submit_time
            self.countdown.cancel()

        logu.log_session_submitted(logger, session, manual=manual)
        if self._on_submit is not None:
            self._on_submit(session)
        return session

    def cancel(self) -> None:
        """Student left without submitting: stop the timer, keep no record."""
        remaining = self.countdown.seconds_remaining
        self.countdown.cancel()
        if self.session.is_in_progress and not self._submitting and not self._closed:
            self._closed = True
            logu.log_session_cancelled(logger, self.session, seconds_remaining=remaining)
