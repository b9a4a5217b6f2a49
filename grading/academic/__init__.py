"""Academic domain modules for exam scoring, course grades and transcripts."""

from .questions import Exam, Question, QuestionType
from .scoring import ScoreResult, score_answers, build_grade_record
from .grade_calculator import (
    GradeCategory,
    GradePolicy,
    GradeRecord,
    compute_course_percentage,
)
from .grade_scale import (
    DEFAULT_GRADE_SCALE,
    GradeBand,
    GradeScale,
    resolve_letter,
    calculate_gpa,
    calculate_credit_weighted_gpa,
    calculate_semester_gpa,
)
from .transcript import (
    CourseGradeResult,
    StandingThreshold,
    Transcript,
    build_course_result,
    generate_transcript,
    resolve_academic_standing,
)

__all__ = [
    "Exam",
    "Question",
    "QuestionType",
    "ScoreResult",
    "score_answers",
    "build_grade_record",
    "GradeCategory",
    "GradePolicy",
    "GradeRecord",
    "compute_course_percentage",
    "DEFAULT_GRADE_SCALE",
    "GradeBand",
    "GradeScale",
    "resolve_letter",
    "calculate_gpa",
    "calculate_credit_weighted_gpa",
    "calculate_semester_gpa",
    "CourseGradeResult",
    "StandingThreshold",
    "Transcript",
    "build_course_result",
    "generate_transcript",
    "resolve_academic_standing",
]
