from django.test import TestCase

from apps.examinations import exam_service
from apps.examinations.errors import (
    AlreadyExists,
    BusinessRuleViolation,
    Forbidden,
    NotFound,
    ValidationFailed,
)
from apps.examinations.models import Exam, Question

from .base import SchoolFixturesMixin


class ExamAuthoringTestCase(SchoolFixturesMixin, TestCase):

    def setUp(self):
        self.admin = self.make_admin()
        self.grade = self.make_grade()
        self.subject = self.make_subject(grade=self.grade)
        self.teacher = self.make_teacher()
        self.assign(self.teacher, subject=self.subject, grade=self.grade)
        self.student = self.make_student()
        self.enroll(self.student, self.grade)

    def _exam_data(self, **overrides):
        data = {
            'title': 'Algebra Quiz',
            'subject': self.subject.id,
            'grade': self.grade.id,
            'duration_minutes': 45,
            'passmark': 60,
        }
        data.update(overrides)
        return data

    def test_teacher_creates_draft_exam(self):
        exam = exam_service.create_exam(self.teacher, self._exam_data())

        self.assertEqual(exam.status, Exam.Status.DRAFT)
        self.assertEqual(exam.created_by, self.teacher)
        self.assertEqual(exam.passmark, 60)

    def test_teacher_without_assignment_cannot_create(self):
        outsider = self.make_teacher()
        with self.assertRaises(Forbidden):
            exam_service.create_exam(outsider, self._exam_data())
        self.assertFalse(Exam.objects.exists())

    def test_invalid_duration(self):
        with self.assertRaises(ValidationFailed) as ctx:
            exam_service.create_exam(self.teacher, self._exam_data(duration_minutes=0))
        self.assertEqual(ctx.exception.path, ['duration_minutes'])

    def test_passmark_is_a_percentage(self):
        with self.assertRaises(ValidationFailed):
            exam_service.create_exam(self.teacher, self._exam_data(passmark=120))

    def test_end_date_must_follow_start_date(self):
        with self.assertRaises(ValidationFailed):
            exam_service.create_exam(self.teacher, self._exam_data(
                start_date='2026-05-02T09:00:00Z',
                end_date='2026-05-01T09:00:00Z',
            ))

    def test_unknown_subject(self):
        with self.assertRaises(ValidationFailed):
            exam_service.create_exam(self.teacher, self._exam_data(subject=999999))

    def test_publish_requires_questions(self):
        exam = exam_service.create_exam(self.teacher, self._exam_data())
        with self.assertRaises(ValidationFailed):
            exam_service.publish_exam(self.teacher, exam.id)

        self.make_question(exam, 1)
        exam = exam_service.publish_exam(self.teacher, exam.id)
        self.assertEqual(exam.status, Exam.Status.PUBLISHED)

    def test_archived_exam_cannot_be_republished(self):
        exam = self.make_exam(subject=self.subject, created_by=self.teacher)
        self.make_question(exam, 1)
        exam_service.archive_exam(self.teacher, exam.id)
        with self.assertRaises(BusinessRuleViolation):
            exam_service.publish_exam(self.teacher, exam.id)

    def test_subject_and_grade_frozen_once_attempted(self):
        exam = self.make_exam(subject=self.subject, created_by=self.teacher)
        self.make_attempt(exam, self.student)
        other_subject = self.make_subject(grade=self.grade)

        with self.assertRaises(BusinessRuleViolation):
            exam_service.update_exam(self.admin, exam.id, {'subject': other_subject.id})

        exam = exam_service.update_exam(self.teacher, exam.id, {'title': 'Renamed'})
        self.assertEqual(exam.title, 'Renamed')

    def test_teacher_cannot_move_exam_outside_assignments(self):
        exam = self.make_exam(subject=self.subject, created_by=self.teacher, status=Exam.Status.DRAFT)
        foreign_subject = self.make_subject(grade=self.grade)

        with self.assertRaises(Forbidden):
            exam_service.update_exam(self.teacher, exam.id, {'subject': foreign_subject.id})
        exam.refresh_from_db()
        self.assertEqual(exam.subject, self.subject)

        exam = exam_service.update_exam(self.admin, exam.id, {'subject': foreign_subject.id})
        self.assertEqual(exam.subject, foreign_subject)

    def test_exam_with_attempts_cannot_be_deleted(self):
        exam = self.make_exam(subject=self.subject, created_by=self.teacher)
        self.make_attempt(exam, self.student)
        with self.assertRaises(BusinessRuleViolation):
            exam_service.delete_exam(self.teacher, exam.id)

    def test_delete_removes_questions(self):
        exam = self.make_exam(subject=self.subject, created_by=self.teacher, status=Exam.Status.DRAFT)
        self.make_question(exam, 1)
        exam_service.delete_exam(self.teacher, exam.id)
        self.assertFalse(Exam.objects.filter(pk=exam.pk).exists())
        self.assertFalse(Question.objects.exists())

    def test_only_creator_or_admin_can_delete(self):
        exam = self.make_exam(subject=self.subject, created_by=self.teacher)
        colleague = self.make_teacher()
        self.assign(colleague, subject=self.subject)
        with self.assertRaises(Forbidden):
            exam_service.delete_exam(colleague, exam.id)
        with self.assertRaises(Forbidden):
            exam_service.archive_exam(colleague, exam.id)

    def test_student_cannot_see_draft(self):
        exam = self.make_exam(subject=self.subject, created_by=self.teacher, status=Exam.Status.DRAFT)
        with self.assertRaises(Forbidden):
            exam_service.get_exam(self.student, exam.id)
        with self.assertRaises(NotFound):
            exam_service.get_exam(self.student, 999999)

    def test_list_filters_and_search(self):
        algebra = self.make_exam(subject=self.subject, created_by=self.teacher, title='Algebra')
        self.make_exam(subject=self.subject, created_by=self.teacher, title='Geometry',
                       status=Exam.Status.DRAFT)

        self.assertEqual(list(exam_service.list_exams(self.student)), [algebra])
        self.assertEqual(
            list(exam_service.list_exams(self.teacher, search='alg')), [algebra]
        )
        self.assertEqual(
            exam_service.list_exams(self.teacher, status=Exam.Status.DRAFT).count(), 1
        )
        titles = [e.title for e in exam_service.list_exams(self.teacher, sort_field='TITLE', direction='DESC')]
        self.assertEqual(titles, ['Geometry', 'Algebra'])


class QuestionAuthoringTestCase(SchoolFixturesMixin, TestCase):

    def setUp(self):
        self.grade = self.make_grade()
        self.subject = self.make_subject(grade=self.grade)
        self.teacher = self.make_teacher()
        self.assign(self.teacher, subject=self.subject, grade=self.grade)
        self.exam = self.make_exam(
            subject=self.subject, created_by=self.teacher, status=Exam.Status.DRAFT
        )

    def _question_data(self, **overrides):
        data = {
            'question_number': 1,
            'text': 'Pick B',
            'question_type': Question.QuestionType.MULTIPLE_CHOICE,
            'options': ['A', 'B', 'C'],
            'correct_answer': 'B',
            'points': 2,
        }
        data.update(overrides)
        return data

    def test_create_question(self):
        question = exam_service.create_question(self.teacher, self.exam.id, self._question_data())
        self.assertEqual(question.exam, self.exam)
        self.assertEqual(question.options, ['A', 'B', 'C'])

    def test_multiple_choice_needs_options(self):
        with self.assertRaises(ValidationFailed) as ctx:
            exam_service.create_question(self.teacher, self.exam.id, self._question_data(options=None))
        self.assertEqual(ctx.exception.path, ['options'])

    def test_correct_answer_must_be_an_option(self):
        with self.assertRaises(ValidationFailed):
            exam_service.create_question(
                self.teacher, self.exam.id, self._question_data(correct_answer='Z')
            )

    def test_question_numbers_are_unique_per_exam(self):
        exam_service.create_question(self.teacher, self.exam.id, self._question_data())
        with self.assertRaises(AlreadyExists):
            exam_service.create_question(self.teacher, self.exam.id, self._question_data())

    def test_renumbering_onto_a_taken_number(self):
        exam_service.create_question(self.teacher, self.exam.id, self._question_data())
        second = exam_service.create_question(
            self.teacher, self.exam.id, self._question_data(question_number=2)
        )
        with self.assertRaises(AlreadyExists):
            exam_service.update_question(self.teacher, second.id, {'question_number': 1})

        updated = exam_service.update_question(self.teacher, second.id, {'text': 'Pick B again'})
        self.assertEqual(updated.text, 'Pick B again')

    def test_questions_frozen_after_publish(self):
        question = exam_service.create_question(self.teacher, self.exam.id, self._question_data())
        exam_service.publish_exam(self.teacher, self.exam.id)

        with self.assertRaises(BusinessRuleViolation):
            exam_service.create_question(
                self.teacher, self.exam.id, self._question_data(question_number=2)
            )
        with self.assertRaises(BusinessRuleViolation):
            exam_service.update_question(self.teacher, question.id, {'text': 'Changed'})
        with self.assertRaises(BusinessRuleViolation):
            exam_service.delete_question(self.teacher, question.id)

    def test_outsider_cannot_add_questions(self):
        outsider = self.make_teacher()
        with self.assertRaises(Forbidden):
            exam_service.create_question(outsider, self.exam.id, self._question_data())

    def test_listing_is_ordered_by_number(self):
        self.make_question(self.exam, 2)
        self.make_question(self.exam, 1)
        numbers = [q.question_number for q in exam_service.list_exam_questions(self.teacher, self.exam.id)]
        self.assertEqual(numbers, [1, 2])
