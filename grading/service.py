# grading/service.py
import logging
import random
from typing import Any, Dict, Iterable, Optional

from .academic.grade_calculator import GradeCategory, GradePolicy, GradeRecord
from .academic.grade_scale import (
    GradeScale,
    LetterGrade,
    calculate_gpa,
    calculate_semester_gpa,
    resolve_letter as _resolve_letter,
)
from .academic.questions import Exam
from .academic.scoring import apply_manual_scores, build_grade_record, score_answers
from .academic.transcript import (
    CourseGradeResult,
    Transcript,
    build_course_result,
    generate_transcript as _generate_transcript,
)
from .config.settings import GradingSettings, get_grading_settings
from .services.exam.grading import grade_session
from .services.exam.scheduler import SessionScheduler
from .services.exam.session import ExamSession
from .services.exam.state_machine import ExamSessionRunner, OnSubmit
from .services.shared.dto import ScorePayload, SubmissionResult


logger = logging.getLogger(__name__)

__all__ = [
    "build_scheduler",
    "start_session",
    "answer",
    "tick",
    "submit",
    "cancel_session",
    "session_progress",
    "score_session",
    "grade_session",
    "record_exam_grade",
    "compute_course_grade",
    "resolve_letter",
    "calculate_gpa",
    "calculate_semester_gpa",
    "generate_transcript",
]


# =========================
# Exam sessions
# =========================
def build_scheduler(settings: Optional[GradingSettings] = None) -> SessionScheduler:
    cfg = settings or get_grading_settings()
    return SessionScheduler(interval_s=cfg.tick_seconds)


def start_session(
    exam: Exam,
    student_id: str,
    *,
    previous_attempts: int = 0,
    scheduler: Optional[SessionScheduler] = None,
    on_submit: Optional[OnSubmit] = None,
    rng: Optional[random.Random] = None,
    settings: Optional[GradingSettings] = None,
    **kwargs: Any,
) -> ExamSessionRunner:
    """
    Start a student's attempt and, when a scheduler is given, hand its
    countdown to that scheduler.
    """
    cfg = settings or get_grading_settings()
    runner = ExamSessionRunner.start(
        exam,
        student_id,
        previous_attempts=previous_attempts,
        rng=rng,
        on_submit=on_submit,
        time_warning_seconds=cfg.time_warning_seconds,
        **kwargs,
    )
    if scheduler is not None:
        scheduler.register(runner)
    return runner


def answer(runner: ExamSessionRunner, question_id: str, value: Any) -> bool:
    return runner.answer(question_id, value)


def tick(runner: ExamSessionRunner) -> bool:
    return runner.tick()


def submit(runner: ExamSessionRunner, manual: bool = True) -> Optional[SubmissionResult]:
    session = runner.submit(manual=manual)
    if session is None:
        return None
    return SubmissionResult.from_session(session, manual=manual)


def cancel_session(runner: ExamSessionRunner, scheduler: Optional[SessionScheduler] = None) -> None:
    runner.cancel()
    if scheduler is not None:
        scheduler.unregister(runner.session.id)


def session_progress(runner: ExamSessionRunner) -> Dict[str, Any]:
    out: Dict[str, Any] = dict(runner.progress())
    out.update(runner.countdown_payload())
    out["status"] = runner.session.status.value
    return out


def score_session(exam: Exam, session: ExamSession) -> ScorePayload:
    """Current score of a session, including any instructor scores already given."""
    result = score_answers(exam.questions, session.answers)
    if session.manual_scores:
        result = apply_manual_scores(result, session.manual_scores)
    return {
        "score": result.score,
        "max_score": result.max_score,
        "autograded": result.autograded,
        "question_scores": dict(result.question_scores),
    }


def record_exam_grade(session: ExamSession, exam: Exam, **kwargs: Any) -> GradeRecord:
    return build_grade_record(session, exam, **kwargs)


# =========================
# Gradebook & transcripts
# =========================
def compute_course_grade(
    student_id: str,
    course_id: str,
    records: Iterable[GradeRecord],
    categories: Iterable[GradeCategory],
    *,
    semester: str,
    year: int,
    credits: float,
    course_name: str = "",
    is_complete: bool = False,
    final_letter_grade: Optional[str] = None,
    scale: Optional[GradeScale] = None,
    policy: Optional[GradePolicy] = None,
    settings: Optional[GradingSettings] = None,
) -> CourseGradeResult:
    cfg = settings or get_grading_settings()
    return build_course_result(
        student_id,
        course_id,
        records,
        categories,
        scale or cfg.grade_scale,
        semester=semester,
        year=year,
        credits=credits,
        course_name=course_name,
        is_complete=is_complete,
        final_letter_grade=final_letter_grade,
        policy=policy or cfg.policy,
    )


def resolve_letter(
    percentage: float,
    scale: Optional[GradeScale] = None,
    *,
    settings: Optional[GradingSettings] = None,
) -> LetterGrade:
    if scale is None:
        scale = (settings or get_grading_settings()).grade_scale
    return _resolve_letter(percentage, scale)


def generate_transcript(
    student_id: str,
    results: Iterable[CourseGradeResult],
    *,
    generated_by: str = "",
    settings: Optional[GradingSettings] = None,
    **kwargs: Any,
) -> Transcript:
    cfg = settings or get_grading_settings()
    transcript = _generate_transcript(
        student_id,
        results,
        thresholds=cfg.standing_thresholds,
        semester_order=cfg.semester_order,
        generated_by=generated_by,
        **kwargs,
    )
    logger.info(
        " TRANSCRIPT_GENERATED student=%s terms=%s credits=%s gpa=%.2f standing=%s",
        transcript.student_id,
        len(transcript.terms),
        transcript.total_credits,
        transcript.cumulative_gpa,
        transcript.academic_standing,
    )
    return transcript

