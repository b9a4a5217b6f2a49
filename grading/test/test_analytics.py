from types import SimpleNamespace

from django.test import SimpleTestCase

from grading.academic.analytics import category_analytics, class_summary, exam_result_stats, grade_distribution
from grading.academic.grade_calculator import GradeRecord
from grading.services.exam.session import SessionStatus


def _session(status, score, max_score=10):
    return SimpleNamespace(status=status, score=score, max_score=max_score)


class ExamResultStatsTests(SimpleTestCase):
    def test_stats_over_graded_sessions(self):
        stats = exam_result_stats(
            [
                _session(SessionStatus.GRADED, 8),
                _session("graded", 6),
                _session(SessionStatus.SUBMITTED, 2),
                _session(SessionStatus.IN_PROGRESS, None),
            ]
        )
        self.assertEqual(stats["total_submissions"], 4)
        self.assertEqual(stats["completed_submissions"], 2)
        self.assertEqual(stats["average"], 70.0)
        self.assertEqual(stats["highest"], 80.0)
        self.assertEqual(stats["lowest"], 60.0)

    def test_no_graded_sessions(self):
        self.assertIsNone(exam_result_stats([_session(SessionStatus.SUBMITTED, 5)]))
        self.assertIsNone(exam_result_stats([]))


class DistributionTests(SimpleTestCase):
    def test_grade_distribution_counts_every_letter(self):
        dist = grade_distribution([95, 85, 82, 40])
        self.assertEqual(dist, {"A": 1, "B": 2, "C": 0, "D": 0, "F": 1})
        self.assertEqual(list(dist), ["A", "B", "C", "D", "F"])

    def test_empty_distribution(self):
        self.assertEqual(grade_distribution([]), {"A": 0, "B": 0, "C": 0, "D": 0, "F": 0})

    def test_category_analytics(self):
        records = [
            GradeRecord(student_id="a", course_id="c", category="Quiz", score=8, max_score=10),
            GradeRecord(student_id="b", course_id="c", category="quiz", score=6, max_score=10),
            GradeRecord(student_id="a", course_id="c", category="exam", score=45, max_score=50),
        ]
        rows = category_analytics(records)
        self.assertEqual([r["category"] for r in rows], ["exam", "quiz"])
        quiz = rows[1]
        self.assertEqual(quiz["count"], 2)
        self.assertEqual(quiz["average"], 70.0)
        self.assertEqual(quiz["highest"], 80.0)
        self.assertEqual(quiz["lowest"], 60.0)
        self.assertEqual(category_analytics([]), [])

    def test_class_summary(self):
        summary = class_summary([90, 50, 70])
        self.assertEqual(summary, {"students": 3, "class_average": 70.0, "passing_rate": 66.67})
        self.assertEqual(class_summary([90, 50], passing_percentage=40)["passing_rate"], 100.0)
        self.assertEqual(class_summary([]), {"students": 0, "class_average": 0.0, "passing_rate": 0.0})
