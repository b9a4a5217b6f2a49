import json
import os
import tempfile
from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import SimpleTestCase

from grading.test.utils.fixture_loader import TRANSCRIPT_CASES


class TranscriptReportCommandTests(SimpleTestCase):
    def _write(self, content):
        with tempfile.NamedTemporaryFile("w", suffix=".yaml", delete=False, encoding="utf-8") as f:
            f.write(content)
        self.addCleanup(os.remove, f.name)
        return f.name

    def test_table_report(self):
        out = StringIO()
        call_command("transcript_report", str(TRANSCRIPT_CASES), stdout=out)
        text = out.getvalue()
        self.assertIn("Transcript for student s1", text)
        self.assertIn("Calculus", text)
        self.assertIn("C+", text)
        self.assertIn("Fall 2023: GPA 3.43 credits 7", text)
        self.assertIn("Cumulative GPA: 3.17 | Total credits: 12 | Standing: Honors", text)

    def test_json_report_for_other_student(self):
        out = StringIO()
        call_command("transcript_report", str(TRANSCRIPT_CASES), student="s2", format="json", stdout=out)
        payload = json.loads(out.getvalue())
        self.assertEqual(payload["studentId"], "s2")
        self.assertEqual(payload["cumulativeGPA"], 0.0)
        self.assertEqual(payload["academicStanding"], "Academic Probation")

    def test_csv_report(self):
        out = StringIO()
        call_command("transcript_report", str(TRANSCRIPT_CASES), format="csv", stdout=out)
        lines = out.getvalue().strip().splitlines()
        self.assertEqual(lines[0], "term,course,credits,grade,gpa_points")
        self.assertEqual(len(lines), 5)
        self.assertTrue(lines[1].startswith("Spring 2023,Algebra"))

    def test_student_without_results(self):
        out = StringIO()
        call_command("transcript_report", str(TRANSCRIPT_CASES), student="nobody", stdout=out)
        self.assertIn("No course results.", out.getvalue())

    def test_missing_file(self):
        with self.assertRaises(CommandError):
            call_command("transcript_report", "/nonexistent/results.yaml", stdout=StringIO())

    def test_file_without_results(self):
        path = self._write("student_id: s1\n")
        with self.assertRaises(CommandError):
            call_command("transcript_report", path, stdout=StringIO())

    def test_missing_student_id(self):
        path = self._write("results: []\n")
        with self.assertRaises(CommandError):
            call_command("transcript_report", path, stdout=StringIO())
