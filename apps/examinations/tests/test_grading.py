from django.test import TestCase, override_settings

from apps.examinations.grading_service import ExactMatchGrader, GradingService
from apps.examinations.models import Question, StudentAnswer

from .base import SchoolFixturesMixin


class ExactMatchGraderTestCase(SchoolFixturesMixin, TestCase):
    """Per-question grading."""

    def setUp(self):
        self.grader = ExactMatchGrader()
        self.exam = self.make_exam()

    def test_multiple_choice_exact_match(self):
        question = self.make_question(self.exam, 1, correct_answer='B')
        self.assertTrue(self.grader.grade_answer(question, 'B'))
        self.assertFalse(self.grader.grade_answer(question, 'C'))

    def test_matching_is_case_and_whitespace_sensitive(self):
        question = self.make_question(
            self.exam, 1, correct_answer='True',
            question_type=Question.QuestionType.TRUE_FALSE,
        )
        self.assertTrue(self.grader.grade_answer(question, 'True'))
        self.assertFalse(self.grader.grade_answer(question, 'true'))
        self.assertFalse(self.grader.grade_answer(question, ' True'))

    def test_no_selection_is_ungraded(self):
        question = self.make_question(self.exam, 1, correct_answer='A')
        self.assertIsNone(self.grader.grade_answer(question, None))

    def test_free_text_questions_are_not_auto_graded(self):
        short = self.make_question(
            self.exam, 1, correct_answer='Mitochondria',
            question_type=Question.QuestionType.SHORT_ANSWER,
        )
        essay = self.make_question(
            self.exam, 2, correct_answer='Anything',
            question_type=Question.QuestionType.ESSAY,
        )
        self.assertIsNone(self.grader.grade_answer(short, 'Mitochondria'))
        self.assertIsNone(self.grader.grade_answer(essay, 'Anything'))


class GradingServiceTestCase(SchoolFixturesMixin, TestCase):
    """Attempt-level aggregation."""

    def setUp(self):
        self.exam = self.make_exam()
        self.student = self.make_student()
        self.attempt = self.make_attempt(self.exam, self.student)

    def _answer(self, question, selected, is_correct, is_marked=False):
        return StudentAnswer.objects.create(
            student_exam=self.attempt,
            question=question,
            selected_answer=selected,
            is_correct=is_correct,
            is_marked=is_marked,
        )

    def test_half_marks(self):
        q1 = self.make_question(self.exam, 1, correct_answer='A', points=5)
        q2 = self.make_question(self.exam, 2, correct_answer='B', points=5)
        answers = [self._answer(q1, 'A', True)]

        summary = GradingService.summarize([q1, q2], answers)

        self.assertEqual(summary.total_points, 10)
        self.assertEqual(summary.earned_points, 5)
        self.assertEqual(summary.answered_count, 1)
        self.assertEqual(summary.score, 50.0)

    def test_zero_total_points_scores_zero(self):
        q1 = self.make_question(self.exam, 1, correct_answer='A', points=0)
        answers = [self._answer(q1, 'A', True)]

        summary = GradingService.summarize([q1], answers)

        self.assertEqual(summary.total_points, 0)
        self.assertEqual(summary.score, 0.0)

    def test_ungraded_answers_earn_nothing_but_count_in_total(self):
        q1 = self.make_question(
            self.exam, 1, correct_answer='x', points=4,
            question_type=Question.QuestionType.ESSAY,
        )
        q2 = self.make_question(self.exam, 2, correct_answer='A', points=6)
        answers = [
            self._answer(q1, 'x', None, is_marked=True),
            self._answer(q2, 'A', True),
        ]

        summary = GradingService.summarize([q1, q2], answers)

        self.assertEqual(summary.earned_points, 6)
        self.assertEqual(summary.marked_count, 1)
        self.assertEqual(summary.score, 60.0)

    def test_pass_threshold_is_inclusive(self):
        self.assertTrue(GradingService.is_passed(50.0, 50))
        self.assertFalse(GradingService.is_passed(49.99, 50))

    def test_no_passmark_means_no_verdict(self):
        self.assertIsNone(GradingService.is_passed(100.0, None))

    @override_settings(GRADER_TYPE='does-not-exist')
    def test_unknown_grader_type_falls_back_to_exact(self):
        with self.assertLogs('apps.examinations.grading_service', level='WARNING'):
            service = GradingService()
        self.assertIsInstance(service.grader, ExactMatchGrader)
