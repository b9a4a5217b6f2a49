"""Exam session record and its per-session countdown."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class SessionStatus(str, Enum):
    IN_PROGRESS = "in-progress"
    SUBMITTED = "submitted"
    GRADED = "graded"


class Countdown:
    """One-second countdown owned by a single exam session."""

    def __init__(self, total_seconds: int):
        self.total_seconds = max(int(total_seconds), 0)
        self.seconds_remaining = self.total_seconds
        self.cancelled = False

    @property
    def active(self) -> bool:
        return not self.cancelled and self.seconds_remaining > 0

    @property
    def elapsed(self) -> int:
        return self.total_seconds - self.seconds_remaining

    def tick(self) -> bool:
        """Advance one second. True only on the tick that reaches zero."""
        if not self.active:
            return False
        self.seconds_remaining -= 1
        return self.seconds_remaining == 0

    def cancel(self) -> None:
        self.cancelled = True


def format_remaining(seconds: int) -> str:
    s = max(int(seconds or 0), 0)
    hours, rest = divmod(s, 3600)
    minutes, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


@dataclass
class ExamSession:
    id: str
    exam_id: str
    student_id: str
    attempt: int
    start_time: datetime
    question_order: Tuple[str, ...] = ()
    answers: Dict[str, Any] = field(default_factory=dict)
    status: SessionStatus = SessionStatus.IN_PROGRESS
    submit_time: Optional[datetime] = None
    time_spent: int = 0
    score: Optional[float] = None
    max_score: Optional[float] = None
    autograded: bool = False
    manual_scores: Dict[str, float] = field(default_factory=dict)
    feedback: Dict[str, str] = field(default_factory=dict)
    graded_by: str = ""
    graded_at: Optional[datetime] = None

    @property
    def is_in_progress(self) -> bool:
        return self.status is SessionStatus.IN_PROGRESS

    def to_payload(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "examId": self.exam_id,
            "studentId": self.student_id,
            "attempt": self.attempt,
            "answers": dict(self.answers),
            "questionOrder": list(self.question_order),
            "startTime": self.start_time.isoformat() if self.start_time else None,
            "submitTime": self.submit_time.isoformat() if self.submit_time else None,
            "timeSpent": self.time_spent,
            "status": self.status.value,
            "score": self.score,
            "maxScore": self.max_score,
            "autograded": self.autograded,
            "manualScores": dict(self.manual_scores),
            "feedback": dict(self.feedback),
            "gradedBy": self.graded_by or None,
            "gradedAt": self.graded_at.isoformat() if self.graded_at else None,
        }
