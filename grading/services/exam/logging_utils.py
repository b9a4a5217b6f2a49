from typing import Any


def _extra(session: Any) -> dict:
    return {
        "session_id": getattr(session, "id", "-"),
        "student_id": getattr(session, "student_id", "-"),
        "exam_id": getattr(session, "exam_id", "-"),
        "status": str(getattr(getattr(session, "status", None), "value", "-")),
    }


def log_session_start(logger: Any, session: Any, *, duration_s: int, randomized: bool) -> None:
    logger.info(
        " EXAM_SESSION_START session=%s exam=%s student=%s attempt=%s duration_s=%s randomized=%s",
        session.id,
        session.exam_id,
        session.student_id,
        session.attempt,
        duration_s,
        randomized,
        extra=_extra(session),
    )


def log_guard_noop(logger: Any, session: Any, action: str, reason: str) -> None:
    logger.debug(" EXAM_SESSION_NOOP session=%s action=%s reason=%s", session.id, action, reason, extra=_extra(session))


def log_timer_expired(logger: Any, session: Any) -> None:
    logger.warning(" EXAM_TIMER_EXPIRED session=%s auto_submit=1", session.id, extra=_extra(session))


def log_session_submitted(logger: Any, session: Any, *, manual: bool) -> None:
    logger.info(
        " EXAM_SESSION_SUBMITTED session=%s status=%s manual=%s time_spent_s=%s score=%s/%s autograded=%s",
        session.id,
        session.status.value,
        int(bool(manual)),
        session.time_spent,
        session.score,
        session.max_score,
        session.autograded,
        extra=_extra(session),
    )


def log_session_cancelled(logger: Any, session: Any, *, seconds_remaining: int) -> None:
    logger.info(
        " EXAM_SESSION_CANCELLED session=%s seconds_remaining=%s",
        session.id,
        seconds_remaining,
        extra=_extra(session),
    )


def log_session_graded(logger: Any, session: Any, *, grader: str, manual_questions: int) -> None:
    logger.info(
        " EXAM_SESSION_GRADED session=%s grader=%s manual_questions=%s score=%s/%s",
        session.id,
        grader or "-",
        manual_questions,
        session.score,
        session.max_score,
        extra=_extra(session),
    )
