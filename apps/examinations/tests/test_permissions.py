from django.contrib.auth.models import AnonymousUser
from django.test import TestCase

from apps.examinations.errors import Forbidden, Unauthorized
from apps.examinations.models import Exam, Notification, Question
from apps.examinations.permissions import (
    Action,
    authorize,
    can,
    visible_attempts,
    visible_exams,
    visible_users,
)

from .base import SchoolFixturesMixin


class PolicyTestCase(SchoolFixturesMixin, TestCase):
    """Role rules evaluated by the central policy."""

    def setUp(self):
        self.admin = self.make_admin()
        self.grade = self.make_grade()
        self.subject = self.make_subject(grade=self.grade)
        self.teacher = self.make_teacher()
        self.assign(self.teacher, subject=self.subject, grade=self.grade)
        self.other_teacher = self.make_teacher()
        self.student = self.make_student()
        self.enroll(self.student, self.grade)
        self.exam = self.make_exam(subject=self.subject, created_by=self.teacher)

    def test_anonymous_callers_are_unauthorized(self):
        with self.assertRaises(Unauthorized):
            authorize(AnonymousUser(), Action.VIEW_DIRECTORY)
        with self.assertRaises(Unauthorized):
            authorize(None, Action.VIEW_EXAM, self.exam)
        self.assertFalse(can(AnonymousUser(), Action.VIEW_DIRECTORY))

    def test_admin_only_actions(self):
        for action in (Action.MANAGE_USERS, Action.MANAGE_GRADES,
                       Action.MANAGE_SUBJECTS, Action.ASSIGN_TEACHER):
            self.assertTrue(can(self.admin, action))
            self.assertFalse(can(self.teacher, action))
            self.assertFalse(can(self.student, action))

    def test_failed_rule_raises_forbidden(self):
        with self.assertRaises(Forbidden) as ctx:
            authorize(self.student, Action.MANAGE_GRADES)
        self.assertEqual(ctx.exception.message, 'Only administrators can manage grades')

    def test_exam_creation_requires_subject_and_grade_assignment(self):
        self.assertTrue(can(self.teacher, Action.CREATE_EXAM, Exam(subject=self.subject, grade=self.grade)))

        other_grade = self.make_grade()
        self.assertFalse(can(self.teacher, Action.CREATE_EXAM, Exam(subject=self.subject, grade=other_grade)))
        self.assertFalse(can(self.other_teacher, Action.CREATE_EXAM, Exam(subject=self.subject, grade=self.grade)))
        self.assertTrue(can(self.admin, Action.CREATE_EXAM, Exam(subject=self.subject, grade=other_grade)))

    def test_exam_editing(self):
        self.assertTrue(can(self.teacher, Action.EDIT_EXAM, self.exam))
        self.assertTrue(can(self.admin, Action.EDIT_EXAM, self.exam))
        self.assertFalse(can(self.other_teacher, Action.EDIT_EXAM, self.exam))
        self.assertFalse(can(self.student, Action.EDIT_EXAM, self.exam))

        self.assign(self.other_teacher, subject=self.subject)
        self.assertTrue(can(self.other_teacher, Action.EDIT_EXAM, self.exam))
        self.assertFalse(can(self.other_teacher, Action.DELETE_EXAM, self.exam))

    def test_students_only_see_published_exams_of_their_grade(self):
        self.assertTrue(can(self.student, Action.VIEW_EXAM, self.exam))

        self.exam.status = Exam.Status.DRAFT
        self.assertFalse(can(self.student, Action.VIEW_EXAM, self.exam))

        outsider = self.make_student()
        self.exam.status = Exam.Status.PUBLISHED
        self.assertFalse(can(outsider, Action.VIEW_EXAM, self.exam))

    def test_questions_need_an_attempt_for_students(self):
        question = self.make_question(self.exam, 1)
        self.assertTrue(can(self.teacher, Action.VIEW_QUESTION, question))
        self.assertFalse(can(self.student, Action.VIEW_QUESTION, question))

        self.make_attempt(self.exam, self.student)
        question = Question.objects.get(pk=question.pk)
        self.assertTrue(can(self.student, Action.VIEW_QUESTION, question))

    def test_enrollment_requires_teaching_the_grade(self):
        self.assertTrue(can(self.teacher, Action.ENROLL_STUDENT, self.grade))
        self.assertFalse(can(self.other_teacher, Action.ENROLL_STUDENT, self.grade))
        self.assertFalse(can(self.student, Action.ENROLL_STUDENT, self.grade))

    def test_attempt_actions(self):
        attempt = self.make_attempt(self.exam, self.student)

        self.assertTrue(can(self.student, Action.SUBMIT_ATTEMPT, attempt))
        self.assertFalse(can(self.admin, Action.SUBMIT_ATTEMPT, attempt))
        self.assertTrue(can(self.admin, Action.VIEW_ATTEMPT, attempt))
        self.assertTrue(can(self.teacher, Action.VIEW_ATTEMPT, attempt))
        self.assertFalse(can(self.other_teacher, Action.VIEW_ATTEMPT, attempt))
        self.assertTrue(can(self.teacher, Action.REVIEW_ATTEMPT, attempt))
        self.assertFalse(can(self.student, Action.REVIEW_ATTEMPT, attempt))

    def test_notifications_belong_to_their_recipient(self):
        notification = Notification.objects.create(user=self.student, title='t', message='m')
        self.assertTrue(can(self.student, Action.MANAGE_NOTIFICATION, notification))
        self.assertFalse(can(self.admin, Action.MANAGE_NOTIFICATION, notification))

    def test_user_profile_rules(self):
        self.assertTrue(can(self.student, Action.UPDATE_USER, self.student))
        self.assertFalse(can(self.student, Action.UPDATE_USER, self.teacher))
        self.assertTrue(can(self.admin, Action.UPDATE_USER, self.teacher))
        self.assertTrue(can(self.teacher, Action.VIEW_USER, self.student))
        self.assertFalse(can(self.student, Action.VIEW_USER, self.teacher))


class CollectionScopingTestCase(SchoolFixturesMixin, TestCase):
    """visible_* querysets follow the same rules as single-object checks."""

    def setUp(self):
        self.admin = self.make_admin()
        self.grade = self.make_grade()
        self.subject = self.make_subject(grade=self.grade)
        self.teacher = self.make_teacher()
        self.assign(self.teacher, subject=self.subject, grade=self.grade)
        self.student = self.make_student()
        self.enroll(self.student, self.grade)

        self.published = self.make_exam(subject=self.subject, created_by=self.teacher)
        self.draft = self.make_exam(
            subject=self.subject, created_by=self.teacher, status=Exam.Status.DRAFT
        )
        self.unrelated = self.make_exam()

    def test_admin_sees_everything(self):
        self.assertEqual(visible_exams(self.admin).count(), 3)

    def test_teacher_sees_exams_they_teach(self):
        self.assertEqual(
            set(visible_exams(self.teacher)), {self.published, self.draft}
        )

    def test_student_sees_published_exams_of_their_grades(self):
        self.assertEqual(list(visible_exams(self.student)), [self.published])

    def test_anonymous_caller_cannot_list(self):
        with self.assertRaises(Unauthorized):
            visible_exams(AnonymousUser())

    def test_attempt_scoping(self):
        attempt = self.make_attempt(self.published, self.student)
        other_attempt = self.make_attempt(self.unrelated, self.make_student())

        self.assertEqual(list(visible_attempts(self.student)), [attempt])
        self.assertEqual(list(visible_attempts(self.teacher)), [attempt])
        self.assertEqual(set(visible_attempts(self.admin)), {attempt, other_attempt})

    def test_students_cannot_list_users(self):
        with self.assertRaises(Forbidden):
            visible_users(self.student)
        self.assertGreaterEqual(visible_users(self.teacher).count(), 3)
