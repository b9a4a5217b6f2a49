from datetime import datetime, timezone as dt_timezone

from django.test import SimpleTestCase

from grading.academic.questions import Exam, Question, QuestionType
from grading.academic.scoring import (
    answer_matches,
    apply_manual_scores,
    build_grade_record,
    score_answers,
    validate_manual_scores,
)
from grading.services.exam.session import ExamSession, SessionStatus
from grading.services.shared.errors import SessionStateError, ValidationError


def _exam():
    return Exam(
        id="e1",
        title="Midterm",
        course_id="c1",
        questions=(
            Question(id="mc", type=QuestionType.MULTIPLE_CHOICE, prompt="?", points=2, options=("a", "b"), correct_answer="a"),
            Question(id="tf", type=QuestionType.TRUE_FALSE, prompt="?", points=1, options=("True", "False"), correct_answer=True),
            Question(id="sa", type=QuestionType.SHORT_ANSWER, prompt="?", points=3),
            Question(id="es", type=QuestionType.ESSAY, prompt="?", points=4),
        ),
    )


class ScoreAnswersTests(SimpleTestCase):
    def test_all_objective_correct(self):
        exam = _exam()
        res = score_answers(exam.questions, {"mc": "a", "tf": True})
        self.assertEqual(res.score, 3.0)
        self.assertEqual(res.max_score, 10.0)
        self.assertFalse(res.has_manual_grading)
        self.assertTrue(res.autograded)
        self.assertEqual(res.question_scores["mc"], 2.0)

    def test_wrong_and_missing_answers_score_zero(self):
        res = score_answers(_exam().questions, {"mc": "b"})
        self.assertEqual(res.score, 0.0)
        self.assertEqual(res.max_score, 10.0)

    def test_answered_subjective_needs_manual_grading(self):
        res = score_answers(_exam().questions, {"mc": "a", "es": "A long essay"})
        self.assertTrue(res.has_manual_grading)
        self.assertFalse(res.autograded)
        self.assertEqual(res.score, 2.0)

    def test_blank_subjective_answer_does_not_need_grading(self):
        res = score_answers(_exam().questions, {"sa": "   ", "es": None})
        self.assertFalse(res.has_manual_grading)

    def test_boolean_answer_does_not_match_integer_key(self):
        q = Question(id="q", type=QuestionType.MULTIPLE_CHOICE, prompt="?", points=1, options=("0", "1"), correct_answer=1)
        self.assertFalse(answer_matches(q, True))
        self.assertTrue(answer_matches(q, 1))

    def test_score_stays_within_bounds(self):
        exam = _exam()
        answer_sets = [
            {},
            {"mc": "a"},
            {"mc": "b", "tf": False},
            {"mc": "a", "tf": True, "sa": "x", "es": "y"},
            {"unknown": "a"},
        ]
        for answers in answer_sets:
            res = score_answers(exam.questions, answers)
            self.assertGreaterEqual(res.score, 0.0)
            self.assertLessEqual(res.score, res.max_score)
            self.assertEqual(res.max_score, exam.total_points)


class ManualScoreTests(SimpleTestCase):
    def test_validate_manual_scores(self):
        cleaned = validate_manual_scores(_exam(), {"es": "3.5", "sa": 0})
        self.assertEqual(cleaned, {"es": 3.5, "sa": 0.0})

    def test_out_of_range_score_rejected(self):
        with self.assertRaises(ValidationError):
            validate_manual_scores(_exam(), {"es": 5})
        with self.assertRaises(ValidationError):
            validate_manual_scores(_exam(), {"es": -1})

    def test_objective_and_unknown_questions_rejected(self):
        with self.assertRaises(ValidationError):
            validate_manual_scores(_exam(), {"mc": 1})
        with self.assertRaises(ValidationError):
            validate_manual_scores(_exam(), {"nope": 1})
        with self.assertRaises(ValidationError):
            validate_manual_scores(_exam(), {"es": "high"})

    def test_apply_manual_scores_adds_to_auto_score(self):
        auto = score_answers(_exam().questions, {"mc": "a", "es": "essay"})
        res = apply_manual_scores(auto, {"es": 3})
        self.assertEqual(res.score, 5.0)
        self.assertEqual(res.max_score, 10.0)
        self.assertAlmostEqual(res.percentage, 50.0)


class GradeRecordTests(SimpleTestCase):
    def _session(self, status):
        return ExamSession(
            id="s1",
            exam_id="e1",
            student_id="stu",
            attempt=1,
            start_time=datetime(2024, 1, 1, 9, 0, tzinfo=dt_timezone.utc),
            status=status,
            score=7.0,
            max_score=10.0,
            graded_at=datetime(2024, 1, 2, 9, 0, tzinfo=dt_timezone.utc),
        )

    def test_graded_session_becomes_record(self):
        rec = build_grade_record(self._session(SessionStatus.GRADED), _exam(), category="midterm", weight=2)
        self.assertEqual(rec.student_id, "stu")
        self.assertEqual(rec.course_id, "c1")
        self.assertEqual(rec.category, "midterm")
        self.assertEqual(rec.exam_id, "e1")
        self.assertEqual(rec.weight, 2)
        self.assertAlmostEqual(rec.percentage, 70.0)

    def test_ungraded_session_rejected(self):
        with self.assertRaises(SessionStateError):
            build_grade_record(self._session(SessionStatus.SUBMITTED), _exam())
