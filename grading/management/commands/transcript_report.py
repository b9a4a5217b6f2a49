from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

import pandas as pd
import yaml
from django.core.management.base import BaseCommand, CommandError

from grading.academic.transcript import CourseGradeResult, Transcript
from grading.service import generate_transcript
from grading.services.shared.errors import ServiceError


def _load_results(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise CommandError(f"File not found: {path}")
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise CommandError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict) or not isinstance(data.get("results"), list):
        raise CommandError(f"{path} must contain a 'results' list.")
    return data


def transcript_frame(transcript: Transcript) -> pd.DataFrame:
    rows: List[Dict[str, Any]] = []
    for term in transcript.terms:
        for c in term.courses:
            rows.append(
                {
                    "term": f"{term.semester} {term.year}",
                    "course": c.course_name or c.course_id,
                    "credits": c.credits,
                    "grade": c.display_letter,
                    "gpa_points": round(float(c.gpa), 2),
                }
            )
    return pd.DataFrame(rows, columns=["term", "course", "credits", "grade", "gpa_points"])


class Command(BaseCommand):
    help = "Generate a student transcript from course grade results stored in a YAML file."

    def add_arguments(self, parser):
        parser.add_argument("path", type=str, help="YAML file with a 'results' list")
        parser.add_argument("--student", type=str, default="", help="Student id (default: file's student_id)")
        parser.add_argument("--format", type=str, default="table", choices=["table", "json", "csv"])
        parser.add_argument("--generated-by", type=str, default="", help="Id recorded as the transcript author")

    def handle(self, *args, **options):
        data = _load_results(Path(options["path"]))
        student_id = str(options.get("student") or data.get("student_id") or "").strip()
        if not student_id:
            raise CommandError("No student id given (use --student or set student_id in the file).")

        try:
            results = [CourseGradeResult.from_payload(row) for row in data["results"] if isinstance(row, dict)]
            transcript = generate_transcript(
                student_id,
                results,
                generated_by=str(options.get("generated_by") or ""),
            )
        except (ServiceError, TypeError, ValueError) as exc:
            raise CommandError(f"Could not build transcript: {exc}") from exc

        fmt = options.get("format") or "table"
        if fmt == "json":
            self.stdout.write(json.dumps(transcript.to_payload(), indent=2))
            return

        df = transcript_frame(transcript)
        if fmt == "csv":
            self.stdout.write(df.to_csv(index=False))
            return

        self.stdout.write(f"Transcript for student {transcript.student_id}")
        if df.empty:
            self.stdout.write("No course results.")
        else:
            self.stdout.write(df.to_string(index=False))
        for term in transcript.terms:
            self.stdout.write(
                f"{term.semester} {term.year}: GPA {term.semester_gpa:.2f} credits {term.semester_credits:g}"
            )
        self.stdout.write(
            f"Cumulative GPA: {transcript.cumulative_gpa:.2f} | "
            f"Total credits: {transcript.total_credits:g} | "
            f"Standing: {transcript.academic_standing}"
        )
