from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, TypedDict


class ProgressPayload(TypedDict):
    answered: int
    total: int
    percent: float


class CountdownPayload(TypedDict):
    seconds_remaining: int
    display: str
    warning: bool


class ScorePayload(TypedDict):
    score: float
    max_score: float
    autograded: bool
    question_scores: Dict[str, float]


@dataclass(slots=True)
class Actor:
    id: str
    role: str = "student"

    @property
    def is_staff(self) -> bool:
        return str(self.role or "").strip().lower() in {"admin", "instructor"}


@dataclass(slots=True)
class SubmissionResult:
    session_id: str
    status: str
    manual: bool
    time_spent: int
    score: float
    max_score: float

    @classmethod
    def from_session(cls, session: Any, *, manual: bool) -> "SubmissionResult":
        return cls(
            session_id=str(session.id),
            status=str(getattr(session.status, "value", session.status)),
            manual=bool(manual),
            time_spent=int(session.time_spent or 0),
            score=float(session.score or 0),
            max_score=float(session.max_score or 0),
        )
