from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple
import uuid

from django.utils import timezone

from .grade_calculator import GradeCategory, GradePolicy, GradeRecord, compute_course_percentage
from .grade_scale import GradeScale, calculate_credit_weighted_gpa, resolve_letter

DEFAULT_SEMESTER_ORDER: Tuple[str, ...] = ("Spring", "Summer", "Fall", "Winter")


@dataclass(frozen=True)
class StandingThreshold:
    min_gpa: float
    label: str


DEFAULT_STANDING_THRESHOLDS: Tuple[StandingThreshold, ...] = (
    StandingThreshold(3.75, "Dean's List"),
    StandingThreshold(3.5, "High Honors"),
    StandingThreshold(3.0, "Honors"),
    StandingThreshold(2.5, "Good Standing"),
    StandingThreshold(2.0, "Satisfactory"),
    StandingThreshold(0.0, "Academic Probation"),
)


@dataclass(frozen=True)
class CourseGradeResult:
    student_id: str
    course_id: str
    semester: str
    year: int
    credits: float
    percentage: float
    letter_grade: str
    gpa: float
    is_complete: bool = False
    final_letter_grade: Optional[str] = None
    course_name: str = ""

    @property
    def display_letter(self) -> str:
        return self.final_letter_grade or self.letter_grade

    def with_override(self, final_letter_grade: Optional[str]) -> "CourseGradeResult":
        return replace(self, final_letter_grade=final_letter_grade or None)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "studentId": self.student_id,
            "courseId": self.course_id,
            "courseName": self.course_name,
            "semester": self.semester,
            "year": self.year,
            "credits": self.credits,
            "percentage": self.percentage,
            "letterGrade": self.letter_grade,
            "finalLetterGrade": self.final_letter_grade,
            "gpa": self.gpa,
            "isComplete": self.is_complete,
        }

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "CourseGradeResult":
        return cls(
            student_id=str(payload.get("student_id") or payload.get("studentId") or ""),
            course_id=str(payload.get("course_id") or payload.get("courseId") or ""),
            semester=str(payload.get("semester") or ""),
            year=int(payload.get("year") or 0),
            credits=float(payload.get("credits", 0) or 0),
            percentage=float(payload.get("percentage", 0) or 0),
            letter_grade=str(payload.get("letter_grade") or payload.get("letterGrade") or ""),
            gpa=float(payload.get("gpa", 0) or 0),
            is_complete=bool(payload.get("is_complete", payload.get("isComplete", False))),
            final_letter_grade=payload.get("final_letter_grade") or payload.get("finalLetterGrade") or None,
            course_name=str(payload.get("course_name") or payload.get("courseName") or ""),
        )


@dataclass(frozen=True)
class TermSummary:
    semester: str
    year: int
    courses: Tuple[CourseGradeResult, ...]
    semester_gpa: float
    semester_credits: float


@dataclass(frozen=True)
class Transcript:
    id: str
    student_id: str
    generated_at: datetime
    generated_by: str
    terms: Tuple[TermSummary, ...]
    cumulative_gpa: float
    total_credits: float
    academic_standing: str

    def to_payload(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "studentId": self.student_id,
            "generatedDate": self.generated_at.isoformat(),
            "generatedBy": self.generated_by,
            "semesters": [
                {
                    "semester": t.semester,
                    "year": t.year,
                    "courses": [c.to_payload() for c in t.courses],
                    "semesterGPA": t.semester_gpa,
                    "semesterCredits": t.semester_credits,
                }
                for t in self.terms
            ],
            "cumulativeGPA": self.cumulative_gpa,
            "totalCredits": self.total_credits,
            "academicStanding": self.academic_standing,
        }


def resolve_academic_standing(gpa: float, thresholds: Sequence[StandingThreshold] | None = None) -> str:
    ladder = sorted(thresholds or DEFAULT_STANDING_THRESHOLDS, key=lambda t: t.min_gpa, reverse=True)
    g = float(gpa or 0)
    for t in ladder:
        if g >= t.min_gpa:
            return t.label
    return ladder[-1].label


def _term_sort_key(semester_order: Sequence[str]) -> Callable[[Tuple[str, int]], Tuple[int, int, str]]:
    ordinals = {str(s).strip().lower(): idx for idx, s in enumerate(semester_order)}
    unknown = len(ordinals)

    def _key(term: Tuple[str, int]) -> Tuple[int, int, str]:
        semester, year = term
        return (int(year), ordinals.get(str(semester).strip().lower(), unknown), str(semester))

    return _key


def _course_sort_key(result: CourseGradeResult) -> Tuple[str, str]:
    return ((result.course_name or result.course_id).lower(), result.course_id)


def group_by_term(results: Iterable[CourseGradeResult]) -> Dict[Tuple[str, int], List[CourseGradeResult]]:
    grouped: Dict[Tuple[str, int], List[CourseGradeResult]] = OrderedDict()
    for r in results or []:
        grouped.setdefault((r.semester, int(r.year)), []).append(r)
    return grouped


def build_term_summaries(
    results: Iterable[CourseGradeResult],
    *,
    semester_order: Sequence[str] | None = None,
) -> Tuple[TermSummary, ...]:
    grouped = group_by_term(results)
    sort_key = _term_sort_key(semester_order or DEFAULT_SEMESTER_ORDER)

    terms = []
    for (semester, year) in sorted(grouped.keys(), key=sort_key):
        courses = tuple(sorted(grouped[(semester, year)], key=_course_sort_key))
        terms.append(
            TermSummary(
                semester=semester,
                year=year,
                courses=courses,
                semester_gpa=calculate_credit_weighted_gpa(courses),
                semester_credits=sum(float(c.credits or 0) for c in courses),
            )
        )
    return tuple(terms)


def generate_transcript(
    student_id: str,
    results: Iterable[CourseGradeResult],
    *,
    thresholds: Sequence[StandingThreshold] | None = None,
    semester_order: Sequence[str] | None = None,
    generated_by: str = "",
    clock: Callable[[], datetime] | None = None,
    transcript_id: str | None = None,
) -> Transcript:
    """
    Build a new transcript for one student.

    Results for other students are ignored. Cumulative GPA is credit-weighted
    across every included course regardless of term. The same inputs always
    give the same GPA figures and standing.
    """
    own = [r for r in results or [] if str(r.student_id) == str(student_id)]
    terms = build_term_summaries(own, semester_order=semester_order)
    cumulative = calculate_credit_weighted_gpa(own)
    now = (clock or timezone.now)()

    return Transcript(
        id=transcript_id or uuid.uuid4().hex,
        student_id=str(student_id),
        generated_at=now,
        generated_by=str(generated_by or ""),
        terms=terms,
        cumulative_gpa=cumulative,
        total_credits=sum(float(r.credits or 0) for r in own),
        academic_standing=resolve_academic_standing(cumulative, thresholds),
    )


def build_course_result(
    student_id: str,
    course_id: str,
    records: Iterable[GradeRecord],
    categories: Iterable[GradeCategory],
    scale: GradeScale | None = None,
    *,
    semester: str,
    year: int,
    credits: float,
    course_name: str = "",
    is_complete: bool = False,
    final_letter_grade: str | None = None,
    policy: GradePolicy | None = None,
) -> CourseGradeResult:
    own = [
        r for r in records or []
        if str(r.student_id) == str(student_id) and str(r.course_id) == str(course_id)
    ]
    breakdown = compute_course_percentage(own, categories, policy=policy)
    percentage = round(breakdown.percentage, 2)
    letter = resolve_letter(percentage, scale)
    return CourseGradeResult(
        student_id=str(student_id),
        course_id=str(course_id),
        semester=semester,
        year=int(year),
        credits=float(credits),
        percentage=percentage,
        letter_grade=letter.letter,
        gpa=letter.gpa_points,
        is_complete=bool(is_complete),
        final_letter_grade=final_letter_grade or None,
        course_name=course_name,
    )
