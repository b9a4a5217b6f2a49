"""Question and exam definitions consumed by the session runner and scorer."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
import json
from typing import Any, Dict, Iterable, List, Optional, Tuple

from grading.services.shared.errors import ValidationError


class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "multiple-choice"
    TRUE_FALSE = "true-false"
    SHORT_ANSWER = "short-answer"
    ESSAY = "essay"

    @property
    def is_objective(self) -> bool:
        return self in (QuestionType.MULTIPLE_CHOICE, QuestionType.TRUE_FALSE)

    @classmethod
    def parse(cls, raw: Any) -> "QuestionType":
        key = str(getattr(raw, "value", raw) or "").strip().lower().replace("_", "-")
        try:
            return cls(key)
        except ValueError:
            raise ValidationError(f"Unknown question type: {raw!r}") from None


TRUE_FALSE_OPTIONS: Tuple[str, ...] = ("True", "False")


def _parse_options(raw: Any) -> Tuple[str, ...]:
    # Options arrive either as a list or as a serialized blob from the store.
    if raw is None:
        return ()
    if isinstance(raw, (list, tuple)):
        return tuple(str(o) for o in raw)
    txt = str(raw).strip()
    if not txt:
        return ()
    if txt.startswith("["):
        try:
            loaded = json.loads(txt)
        except ValueError:
            raise ValidationError("Question options are not valid JSON.") from None
        if not isinstance(loaded, list):
            raise ValidationError("Question options must be a list.")
        return tuple(str(o) for o in loaded)
    return tuple(line.strip() for line in txt.splitlines() if line.strip())


@dataclass(frozen=True)
class Question:
    id: str
    type: QuestionType
    prompt: str
    points: float
    required: bool = False
    options: Tuple[str, ...] = ()
    correct_answer: Any = None

    def __post_init__(self) -> None:
        if not str(self.id or "").strip():
            raise ValidationError("Question id is required.")
        try:
            points = float(self.points)
        except (TypeError, ValueError):
            raise ValidationError(f"Question {self.id}: points must be a number.") from None
        if points <= 0:
            raise ValidationError(f"Question {self.id}: points must be positive.")
        object.__setattr__(self, "points", points)
        object.__setattr__(self, "options", tuple(self.options))

        if self.type.is_objective:
            if len(self.options) < 2:
                raise ValidationError(f"Question {self.id}: choice questions need at least 2 options.")
            if self.correct_answer is None:
                raise ValidationError(f"Question {self.id}: choice questions need a correct answer.")
        elif self.correct_answer is not None:
            raise ValidationError(f"Question {self.id}: {self.type.value} questions carry no correct answer.")

    @property
    def is_objective(self) -> bool:
        return self.type.is_objective

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Question":
        qtype = QuestionType.parse(payload.get("type"))
        options = _parse_options(payload.get("options"))
        if qtype is QuestionType.TRUE_FALSE and not options:
            options = TRUE_FALSE_OPTIONS

        correct = payload.get("correct_answer", payload.get("correctAnswer"))
        if not qtype.is_objective:
            correct = None

        return cls(
            id=str(payload.get("id") or "").strip(),
            type=qtype,
            prompt=str(payload.get("prompt") or payload.get("question") or ""),
            points=payload.get("points", 1),
            required=bool(payload.get("required", False)),
            options=options,
            correct_answer=correct,
        )


@dataclass(frozen=True)
class Exam:
    id: str
    title: str
    questions: Tuple[Question, ...] = ()
    duration_minutes: int = 60
    randomize_questions: bool = False
    show_results: bool = True
    attempts: int = 1
    course_id: str = ""
    instructions: str = ""
    _index: Dict[str, Question] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "questions", tuple(self.questions))
        if int(self.duration_minutes or 0) <= 0:
            raise ValidationError(f"Exam {self.id}: duration must be positive.")
        if int(self.attempts or 0) < 1:
            raise ValidationError(f"Exam {self.id}: at least one attempt must be allowed.")

        index: Dict[str, Question] = {}
        for q in self.questions:
            if q.id in index:
                raise ValidationError(f"Exam {self.id}: duplicate question id {q.id}.")
            index[q.id] = q
        object.__setattr__(self, "_index", index)

    @property
    def total_points(self) -> float:
        return sum(float(q.points) for q in self.questions)

    @property
    def duration_seconds(self) -> int:
        return int(self.duration_minutes) * 60

    def question(self, question_id: str) -> Optional[Question]:
        return self._index.get(str(question_id))

    def with_questions(self, questions: Iterable[Question]) -> "Exam":
        return replace(self, questions=tuple(questions))

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Exam":
        questions: List[Question] = [Question.from_payload(q) for q in payload.get("questions") or []]
        return cls(
            id=str(payload.get("id") or ""),
            title=str(payload.get("title") or payload.get("name") or ""),
            questions=tuple(questions),
            duration_minutes=int(payload.get("duration_minutes", payload.get("duration", 60)) or 0),
            randomize_questions=bool(payload.get("randomize_questions", payload.get("randomizeQuestions", False))),
            show_results=bool(payload.get("show_results", payload.get("showResults", True))),
            attempts=int(payload.get("attempts", 1) or 0),
            course_id=str(payload.get("course_id") or payload.get("courseId") or ""),
            instructions=str(payload.get("instructions") or ""),
        )
