from django.core.management.base import BaseCommand
from django.db import transaction
from rest_framework.authtoken.models import Token

from apps.examinations.models import (
    Exam,
    Grade,
    Question,
    StudentGrade,
    Subject,
    TeacherGrade,
    TeacherSubject,
    User,
)

SAMPLE_PASSWORD = 'testpass123'


class Command(BaseCommand):
    help = 'Creates sample school data for exercising the GraphQL API'

    def _user(self, username, role, first_name, last_name, **extra):
        user, created = User.objects.get_or_create(
            username=username,
            defaults={
                'email': f'{username}@school.test',
                'first_name': first_name,
                'last_name': last_name,
                'role': role,
                **extra,
            },
        )
        if created:
            user.set_password(SAMPLE_PASSWORD)
            user.save()
            self.stdout.write(self.style.SUCCESS(f'Created {role.lower()}: {username}'))
        token, _ = Token.objects.get_or_create(user=user)
        return user, token

    @transaction.atomic
    def handle(self, *args, **kwargs):
        self.stdout.write('Creating sample data...')

        admin, admin_token = self._user(
            'admin1', User.Role.ADMIN, 'Ada', 'Okafor', is_staff=True, is_superuser=True
        )
        teacher, teacher_token = self._user('teacher1', User.Role.TEACHER, 'Tunde', 'Bello')
        student, student_token = self._user('student1', User.Role.STUDENT, 'Alice', 'Johnson')

        grade, _ = Grade.objects.get_or_create(
            name='Grade 10',
            defaults={'description': 'Senior secondary, first year', 'academic_year': '2025/2026'},
        )
        subject, _ = Subject.objects.get_or_create(
            code='BIO-10',
            defaults={'name': 'Biology', 'grade': grade},
        )

        TeacherSubject.objects.get_or_create(teacher=teacher, subject=subject)
        TeacherGrade.objects.get_or_create(teacher=teacher, grade=grade)
        StudentGrade.objects.get_or_create(student=student, grade=grade)

        if not Exam.objects.filter(title='Biology Midterm', subject=subject).exists():
            exam = Exam.objects.create(
                title='Biology Midterm',
                subject=subject,
                grade=grade,
                created_by=teacher,
                duration_minutes=60,
                passmark=50,
                instructions='Answer all questions. Objective questions are marked automatically.',
            )

            Question.objects.create(
                exam=exam,
                question_number=1,
                text='Photosynthesis occurs in which organelle?',
                question_type=Question.QuestionType.MULTIPLE_CHOICE,
                options=['Nucleus', 'Chloroplast', 'Mitochondrion', 'Ribosome'],
                correct_answer='Chloroplast',
                points=5,
                difficulty_level=Question.Difficulty.EASY,
            )

            Question.objects.create(
                exam=exam,
                question_number=2,
                text='DNA replication is semi-conservative.',
                question_type=Question.QuestionType.TRUE_FALSE,
                options=['True', 'False'],
                correct_answer='True',
                points=5,
                difficulty_level=Question.Difficulty.MEDIUM,
            )

            Question.objects.create(
                exam=exam,
                question_number=3,
                text='Explain the importance of photosynthesis to life on Earth.',
                question_type=Question.QuestionType.ESSAY,
                correct_answer='Produces glucose and the oxygen aerobic organisms need.',
                points=10,
                difficulty_level=Question.Difficulty.HARD,
            )

            exam.status = Exam.Status.PUBLISHED
            exam.save(update_fields=['status'])
            self.stdout.write(self.style.SUCCESS('Created published Biology exam with 3 questions'))

        self.stdout.write(self.style.SUCCESS('Sample data created successfully!'))
        self.stdout.write(f'Password for all sample users: {SAMPLE_PASSWORD}')
        for label, token in (('admin1', admin_token), ('teacher1', teacher_token), ('student1', student_token)):
            self.stdout.write(f'  {label}: Authorization: Bearer {token.key}')
