"""Shared fixtures for the examinations test suite."""
from datetime import timedelta
from itertools import count

from django.utils import timezone

from apps.examinations.attempt_service import ExamAttemptService
from apps.examinations.models import (
    Exam,
    Grade,
    Question,
    StudentExam,
    StudentGrade,
    Subject,
    TeacherGrade,
    TeacherSubject,
    User,
)

_sequence = count(1)


class FrozenClock:
    """Callable clock the attempt service can be driven with."""

    def __init__(self, now=None):
        self.now = now or timezone.now()

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)
        return self.now


class SchoolFixturesMixin:
    """Builders for the school directory, exams and attempts."""

    def make_user(self, role=User.Role.STUDENT, **kwargs):
        n = next(_sequence)
        defaults = {
            'username': f'{role.lower()}{n}',
            'email': f'{role.lower()}{n}@school.test',
            'first_name': role.title(),
            'last_name': f'User{n}',
            'role': role,
        }
        defaults.update(kwargs)
        return User.objects.create_user(password='testpass123', **defaults)

    def make_admin(self, **kwargs):
        return self.make_user(User.Role.ADMIN, **kwargs)

    def make_teacher(self, **kwargs):
        return self.make_user(User.Role.TEACHER, **kwargs)

    def make_student(self, **kwargs):
        return self.make_user(User.Role.STUDENT, **kwargs)

    def make_grade(self, **kwargs):
        n = next(_sequence)
        defaults = {'name': f'Grade {n}', 'academic_year': '2025/2026'}
        defaults.update(kwargs)
        return Grade.objects.create(**defaults)

    def make_subject(self, grade=None, **kwargs):
        n = next(_sequence)
        defaults = {'name': f'Subject {n}', 'code': f'SUB-{n}'}
        defaults.update(kwargs)
        return Subject.objects.create(grade=grade or self.make_grade(), **defaults)

    def assign(self, teacher, subject=None, grade=None):
        if subject is not None:
            TeacherSubject.objects.create(teacher=teacher, subject=subject)
        if grade is not None:
            TeacherGrade.objects.create(teacher=teacher, grade=grade)

    def enroll(self, student, grade):
        return StudentGrade.objects.create(student=student, grade=grade)

    def make_exam(self, subject=None, grade=None, created_by=None, **kwargs):
        subject = subject or self.make_subject()
        defaults = {
            'title': 'Sample Exam',
            'duration_minutes': 30,
            'status': Exam.Status.PUBLISHED,
        }
        defaults.update(kwargs)
        return Exam.objects.create(
            subject=subject,
            grade=grade or subject.grade,
            created_by=created_by or self.make_teacher(),
            **defaults
        )

    def make_question(self, exam, number, correct_answer='A', points=1,
                      question_type=Question.QuestionType.MULTIPLE_CHOICE, **kwargs):
        options = kwargs.pop('options', None)
        if options is None and question_type == Question.QuestionType.MULTIPLE_CHOICE:
            options = ['A', 'B', 'C', 'D']
        return Question.objects.create(
            exam=exam,
            question_number=number,
            text=f'Question {number}',
            question_type=question_type,
            options=options,
            correct_answer=correct_answer,
            points=points,
            **kwargs
        )

    def make_attempt(self, exam, student, start_time=None, **kwargs):
        return StudentExam.objects.create(
            exam=exam,
            student=student,
            start_time=start_time or timezone.now(),
            **kwargs
        )


class ExamScenarioMixin(SchoolFixturesMixin):
    """
    A published 5 + 5 point exam with a 50% passmark, its creator (who
    teaches the subject and grade) and an enrolled student.
    """

    def setUp(self):
        super().setUp()
        self.clock = FrozenClock()
        self.service = ExamAttemptService(clock=self.clock)

        self.grade = self.make_grade()
        self.subject = self.make_subject(grade=self.grade)
        self.teacher = self.make_teacher()
        self.assign(self.teacher, subject=self.subject, grade=self.grade)
        self.student = self.make_student()
        self.enroll(self.student, self.grade)

        self.exam = self.make_exam(
            subject=self.subject,
            created_by=self.teacher,
            passmark=50,
            duration_minutes=30,
        )
        self.q1 = self.make_question(self.exam, 1, correct_answer='A', points=5)
        self.q2 = self.make_question(self.exam, 2, correct_answer='B', points=5)
