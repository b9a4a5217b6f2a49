from django.test import SimpleTestCase

from grading.academic.grade_calculator import (
    GradeCategory,
    GradePolicy,
    GradeRecord,
    calculate_category_percentage,
    category_weight_total,
    compute_course_percentage,
    group_records_by_category,
)


def _rec(category, score, max_score=100, weight=1.0, **kwargs):
    return GradeRecord(
        student_id="stu-1",
        course_id="c1",
        category=category,
        score=score,
        max_score=max_score,
        weight=weight,
        **kwargs,
    )


CATEGORIES = [
    GradeCategory(id="cat-quiz", course_id="c1", name="quiz", weight=40),
    GradeCategory(id="cat-exam", course_id="c1", name="exam", weight=60),
]


class CategoryPercentageTests(SimpleTestCase):
    def test_category_is_plain_mean_of_record_percentages(self):
        pct = calculate_category_percentage([_rec("quiz", 100, weight=1), _rec("quiz", 60, weight=3)])
        self.assertAlmostEqual(pct, 80.0)

    def test_record_weights_do_not_change_course_percentage(self):
        cats = [GradeCategory(id="q", course_id="c1", name="quiz", weight=100)]
        res = compute_course_percentage([_rec("quiz", 100, weight=1), _rec("quiz", 60, weight=3)], cats)
        self.assertAlmostEqual(res.percentage, 80.0)

    def test_mixed_max_scores_average_percentages(self):
        pct = calculate_category_percentage([_rec("quiz", 5, max_score=10), _rec("quiz", 45, max_score=50, weight=0)])
        self.assertAlmostEqual(pct, 70.0)

    def test_zero_max_score_counts_as_zero(self):
        rec = _rec("quiz", 5, max_score=0)
        self.assertEqual(rec.percentage, 0.0)
        self.assertEqual(calculate_category_percentage([rec]), 0.0)

    def test_empty_category(self):
        self.assertEqual(calculate_category_percentage([]), 0.0)


class CoursePercentageTests(SimpleTestCase):
    def test_quiz_and_exam_weighting(self):
        res = compute_course_percentage([_rec("quiz", 80), _rec("exam", 90)], CATEGORIES)
        self.assertAlmostEqual(res.percentage, 86.0)
        self.assertAlmostEqual(res.breakdown["cat-quiz"], 80.0)
        self.assertAlmostEqual(res.breakdown["cat-exam"], 90.0)
        self.assertEqual(res.included_weight, 100.0)

    def test_no_grades_gives_zero(self):
        res = compute_course_percentage([], CATEGORIES)
        self.assertEqual(res.percentage, 0.0)
        self.assertEqual(res.breakdown, {})

    def test_category_without_grades_is_excluded(self):
        res = compute_course_percentage([_rec("quiz", 80)], CATEGORIES)
        self.assertAlmostEqual(res.percentage, 80.0)
        self.assertNotIn("cat-exam", res.breakdown)
        self.assertEqual(res.included_weight, 40.0)

    def test_weights_need_not_sum_to_100(self):
        cats = [
            GradeCategory(id="q", course_id="c1", name="quiz", weight=1),
            GradeCategory(id="e", course_id="c1", name="exam", weight=1),
        ]
        res = compute_course_percentage([_rec("quiz", 80), _rec("exam", 90)], cats)
        self.assertAlmostEqual(res.percentage, 85.0)
        self.assertEqual(category_weight_total(cats), 2.0)

    def test_category_names_match_case_insensitively(self):
        cats = [GradeCategory(id="q", course_id="c1", name="Quiz", weight=100)]
        res = compute_course_percentage([_rec(" QUIZ ", 70)], cats)
        self.assertAlmostEqual(res.percentage, 70.0)

    def test_records_for_unknown_categories_are_ignored(self):
        res = compute_course_percentage([_rec("quiz", 80), _rec("bonus", 100)], CATEGORIES)
        self.assertAlmostEqual(res.percentage, 80.0)


class GradePolicyTests(SimpleTestCase):
    def test_flags_do_not_change_default_arithmetic(self):
        records = [_rec("quiz", 80, late=True), _rec("exam", 90), _rec("exam", 0, excused=True)]
        res = compute_course_percentage(records, CATEGORIES)
        self.assertAlmostEqual(res.breakdown["cat-quiz"], 80.0)
        self.assertAlmostEqual(res.breakdown["cat-exam"], 45.0)

    def test_late_penalty_and_dropped_excused(self):
        policy = GradePolicy(late_penalty_pct=10, drop_excused=True)
        records = [_rec("quiz", 80, late=True), _rec("exam", 90), _rec("exam", 0, excused=True)]
        res = compute_course_percentage(records, CATEGORIES, policy=policy)
        self.assertAlmostEqual(res.breakdown["cat-quiz"], 72.0)
        self.assertAlmostEqual(res.breakdown["cat-exam"], 90.0)

    def test_group_records_by_category(self):
        grouped = group_records_by_category(
            [_rec("Quiz", 1), _rec("quiz", 2), _rec("exam", 3, excused=True)],
            GradePolicy(drop_excused=True),
        )
        self.assertEqual(sorted(grouped), ["quiz"])
        self.assertEqual(len(grouped["quiz"]), 2)

    def test_record_from_payload(self):
        rec = GradeRecord.from_payload(
            {"studentId": "s", "courseId": "c", "category": "quiz", "score": 9, "maxScore": 10, "weight": None, "late": True}
        )
        self.assertEqual(rec.weight, 1.0)
        self.assertTrue(rec.late)
        self.assertAlmostEqual(rec.percentage, 90.0)
