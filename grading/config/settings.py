from __future__ import annotations

from dataclasses import dataclass, field
import logging
import os
from pathlib import Path
from typing import Tuple

import yaml

from grading.academic.grade_calculator import GradePolicy
from grading.academic.grade_scale import DEFAULT_GRADE_SCALE, GradeScale
from grading.academic.transcript import (
    DEFAULT_SEMESTER_ORDER,
    DEFAULT_STANDING_THRESHOLDS,
    StandingThreshold,
)
from grading.services.shared.errors import ValidationError

logger = logging.getLogger(__name__)


def _env_bool(name: str, default: bool = False) -> bool:
    val = str(os.environ.get(name, "1" if default else "0")).strip().lower()
    return val in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    try:
        return int(str(os.environ.get(name, str(default))).strip())
    except Exception:
        return int(default)


def _env_float(name: str, default: float) -> float:
    try:
        return float(str(os.environ.get(name, str(default))).strip())
    except Exception:
        return float(default)


def _env_str(name: str, default: str = "") -> str:
    return str(os.environ.get(name, default))


def parse_semester_order(raw: str) -> Tuple[str, ...]:
    names = [p.strip() for p in str(raw or "").split(",")]
    names = [n for n in names if n]
    return tuple(names) or DEFAULT_SEMESTER_ORDER


def parse_standing_thresholds(raw: str) -> Tuple[StandingThreshold, ...]:
    """
    Parse ``"3.75:Dean's List,2.0:Satisfactory,0:Academic Probation"``.

    Any malformed entry makes the whole value fall back to the defaults so a
    half-parsed ladder never reaches the transcript builder.
    """
    txt = str(raw or "").strip()
    if not txt:
        return DEFAULT_STANDING_THRESHOLDS
    out = []
    for part in txt.split(","):
        min_gpa, sep, label = part.partition(":")
        if not sep or not label.strip():
            logger.warning(" GRADING_SETTINGS_INVALID key=GRADING_STANDING_THRESHOLDS entry=%r", part)
            return DEFAULT_STANDING_THRESHOLDS
        try:
            out.append(StandingThreshold(min_gpa=float(min_gpa), label=label.strip()))
        except ValueError:
            logger.warning(" GRADING_SETTINGS_INVALID key=GRADING_STANDING_THRESHOLDS entry=%r", part)
            return DEFAULT_STANDING_THRESHOLDS
    return tuple(sorted(out, key=lambda t: t.min_gpa, reverse=True))


def load_grade_scale_file(path: str) -> GradeScale:
    p = Path(path)
    with p.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValidationError(f"Invalid grade scale file: {p}")
    return GradeScale.from_payload(data)


@dataclass(frozen=True)
class GradingSettings:
    grade_scale: GradeScale = DEFAULT_GRADE_SCALE
    standing_thresholds: Tuple[StandingThreshold, ...] = DEFAULT_STANDING_THRESHOLDS
    semester_order: Tuple[str, ...] = DEFAULT_SEMESTER_ORDER
    policy: GradePolicy = field(default_factory=GradePolicy)

    passing_percentage: float = 60.0
    time_warning_seconds: int = 300
    tick_seconds: float = 1.0


def get_grading_settings() -> GradingSettings:
    scale = DEFAULT_GRADE_SCALE
    scale_file = _env_str("GRADING_SCALE_FILE").strip()
    if scale_file:
        scale = load_grade_scale_file(scale_file)

    return GradingSettings(
        grade_scale=scale,
        standing_thresholds=parse_standing_thresholds(_env_str("GRADING_STANDING_THRESHOLDS")),
        semester_order=parse_semester_order(_env_str("GRADING_SEMESTER_ORDER")),
        policy=GradePolicy(
            late_penalty_pct=max(min(_env_float("GRADING_LATE_PENALTY_PCT", 0.0), 100.0), 0.0),
            drop_excused=_env_bool("GRADING_DROP_EXCUSED", default=False),
        ),
        passing_percentage=max(min(_env_float("GRADING_PASSING_PERCENTAGE", 60.0), 100.0), 0.0),
        time_warning_seconds=max(_env_int("GRADING_TIME_WARNING_SECONDS", 300), 0),
        tick_seconds=max(_env_float("GRADING_TICK_SECONDS", 1.0), 0.05),
    )
