"""Letter-grade resolution and GPA arithmetic."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Tuple

from grading.services.shared.errors import ValidationError

# Bands use whole-number bounds (B is 80-89, A is 90-100); a band owns every
# percentage from its min up to the next band's min.
MAX_BAND_GAP = 1.0


@dataclass(frozen=True)
class GradeBand:
    letter: str
    min_percentage: float
    max_percentage: float
    gpa_points: float


@dataclass(frozen=True)
class LetterGrade:
    letter: str
    gpa_points: float


def _validate_bands(bands: Tuple[GradeBand, ...]) -> None:
    if not bands:
        raise ValidationError("Grade scale needs at least one band.")

    seen = set()
    for b in bands:
        if not str(b.letter or "").strip():
            raise ValidationError("Grade band letter is required.")
        if b.letter in seen:
            raise ValidationError(f"Duplicate grade letter: {b.letter}")
        seen.add(b.letter)
        if b.min_percentage > b.max_percentage:
            raise ValidationError(f"Band {b.letter}: min is above max.")

    # bands are stored highest first
    for upper, lower in zip(bands, bands[1:]):
        if lower.max_percentage >= upper.min_percentage:
            raise ValidationError(f"Bands {upper.letter} and {lower.letter} overlap.")
        if upper.min_percentage - lower.max_percentage > MAX_BAND_GAP:
            raise ValidationError(f"Gap between bands {lower.letter} and {upper.letter}.")

    if bands[0].max_percentage < 100:
        raise ValidationError(f"Top band {bands[0].letter} must reach 100.")
    if bands[-1].min_percentage > 0:
        raise ValidationError(f"Lowest band {bands[-1].letter} must start at 0.")


@dataclass(frozen=True)
class GradeScale:
    name: str
    bands: Tuple[GradeBand, ...]
    id: str = ""

    def __post_init__(self) -> None:
        ordered = tuple(sorted(self.bands, key=lambda b: b.min_percentage, reverse=True))
        _validate_bands(ordered)
        object.__setattr__(self, "bands", ordered)

    @property
    def letters(self) -> List[str]:
        return [b.letter for b in self.bands]

    @property
    def lowest(self) -> GradeBand:
        return self.bands[-1]

    def band_for_letter(self, letter: str) -> GradeBand | None:
        key = str(letter or "").strip().upper()
        for b in self.bands:
            if b.letter.upper() == key:
                return b
        return None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "GradeScale":
        rows = payload.get("scale") or payload.get("bands") or []
        if not isinstance(rows, list):
            raise ValidationError("Grade scale bands must be a list.")
        bands = []
        for row in rows:
            try:
                bands.append(
                    GradeBand(
                        letter=str(row.get("letter") or "").strip(),
                        min_percentage=float(row.get("min_percentage", row.get("minPercentage"))),
                        max_percentage=float(row.get("max_percentage", row.get("maxPercentage"))),
                        gpa_points=float(row.get("gpa_points", row.get("gpaPoints"))),
                    )
                )
            except (AttributeError, TypeError, ValueError):
                raise ValidationError(f"Invalid grade band: {row!r}") from None
        return cls(
            name=str(payload.get("name") or "custom"),
            bands=tuple(bands),
            id=str(payload.get("id") or ""),
        )


DEFAULT_GRADE_SCALE = GradeScale(
    name="Standard 4.0",
    id="default",
    bands=(
        GradeBand("A", 90, 100, 4.0),
        GradeBand("B", 80, 89, 3.0),
        GradeBand("C", 70, 79, 2.0),
        GradeBand("D", 60, 69, 1.0),
        GradeBand("F", 0, 59, 0.0),
    ),
)


def resolve_letter(percentage: float, scale: GradeScale | None = None) -> LetterGrade:
    scale = scale or DEFAULT_GRADE_SCALE
    try:
        p = float(percentage)
    except (TypeError, ValueError):
        p = -1.0

    for idx, band in enumerate(scale.bands):
        if idx == 0:
            hit = band.min_percentage <= p <= band.max_percentage
        else:
            hit = band.min_percentage <= p < scale.bands[idx - 1].min_percentage
        if hit:
            return LetterGrade(letter=band.letter, gpa_points=band.gpa_points)

    low = scale.lowest
    return LetterGrade(letter=low.letter, gpa_points=low.gpa_points)


def calculate_gpa(results: Iterable[Any]) -> float:
    rows = list(results or [])
    if not rows:
        return 0.0
    return sum(float(r.gpa or 0) for r in rows) / len(rows)


def calculate_credit_weighted_gpa(results: Iterable[Any]) -> float:
    points = 0.0
    credits = 0.0
    for r in results or []:
        c = float(r.credits or 0)
        points += float(r.gpa or 0) * c
        credits += c
    if credits <= 0:
        return 0.0
    return points / credits


def calculate_semester_gpa(results: Iterable[Any], semester: str, year: int) -> float:
    term = [r for r in results or [] if r.semester == semester and int(r.year) == int(year)]
    return calculate_credit_weighted_gpa(term)
