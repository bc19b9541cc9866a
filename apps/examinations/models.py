from django.db import models
from django.contrib.auth.models import AbstractUser
from django.core.validators import MinValueValidator, MaxValueValidator
from django.utils import timezone


class User(AbstractUser):
    class Role(models.TextChoices):
        ADMIN = 'ADMIN', 'Admin'
        TEACHER = 'TEACHER', 'Teacher'
        STUDENT = 'STUDENT', 'Student'

    class Status(models.TextChoices):
        ACTIVE = 'ACTIVE', 'Active'
        INACTIVE = 'INACTIVE', 'Inactive'
        SUSPENDED = 'SUSPENDED', 'Suspended'

    # AbstractUser already has first_name and last_name
    email = models.EmailField(unique=True)
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.STUDENT)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ACTIVE)
    phone_number = models.CharField(max_length=30, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'users'
        indexes = [
            models.Index(fields=['role'], name='users_role_idx'),
        ]

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_admin(self):
        return self.role == self.Role.ADMIN

    @property
    def is_teacher(self):
        return self.role == self.Role.TEACHER

    @property
    def is_student(self):
        return self.role == self.Role.STUDENT


class Grade(models.Model):
    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True)
    academic_year = models.CharField(max_length=20, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'grades'
        ordering = ['name']

    def __str__(self):
        return self.name


class Subject(models.Model):
    name = models.CharField(max_length=100)
    code = models.CharField(max_length=20, unique=True)
    description = models.TextField(blank=True)
    grade = models.ForeignKey(
        Grade,
        on_delete=models.PROTECT,
        related_name='subjects'
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'subjects'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.code} - {self.name}"


class TeacherSubject(models.Model):
    teacher = models.ForeignKey(User, on_delete=models.CASCADE, related_name='teacher_subjects')
    subject = models.ForeignKey(Subject, on_delete=models.CASCADE, related_name='teacher_subjects')
    assigned_at = models.DateTimeField(default=timezone.now)
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = 'teacher_subjects'
        constraints = [
            models.UniqueConstraint(fields=['teacher', 'subject'], name='unique_teacher_subject')
        ]


class TeacherGrade(models.Model):
    teacher = models.ForeignKey(User, on_delete=models.CASCADE, related_name='teacher_grades')
    grade = models.ForeignKey(Grade, on_delete=models.CASCADE, related_name='teacher_grades')
    assigned_at = models.DateTimeField(default=timezone.now)
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = 'teacher_grades'
        constraints = [
            models.UniqueConstraint(fields=['teacher', 'grade'], name='unique_teacher_grade')
        ]


class StudentGrade(models.Model):
    student = models.ForeignKey(User, on_delete=models.CASCADE, related_name='student_grades')
    grade = models.ForeignKey(Grade, on_delete=models.CASCADE, related_name='student_grades')
    enrolled_at = models.DateTimeField(default=timezone.now)
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = 'student_grades'
        constraints = [
            models.UniqueConstraint(fields=['student', 'grade'], name='unique_student_grade')
        ]


class Exam(models.Model):
    class Status(models.TextChoices):
        DRAFT = 'DRAFT', 'Draft'
        PUBLISHED = 'PUBLISHED', 'Published'
        ARCHIVED = 'ARCHIVED', 'Archived'

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    subject = models.ForeignKey(Subject, on_delete=models.PROTECT, related_name='exams')
    grade = models.ForeignKey(Grade, on_delete=models.PROTECT, related_name='exams')
    created_by = models.ForeignKey(User, on_delete=models.PROTECT, related_name='created_exams')
    duration_minutes = models.IntegerField(validators=[MinValueValidator(1)])
    passmark = models.FloatField(
        null=True,
        blank=True,
        validators=[MinValueValidator(0), MaxValueValidator(100)]
    )
    shuffle_questions = models.BooleanField(default=False)
    allow_review = models.BooleanField(default=True)
    show_results = models.BooleanField(default=True)
    start_date = models.DateTimeField(null=True, blank=True)
    end_date = models.DateTimeField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.DRAFT)
    instructions = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'exams'
        ordering = ['created_at']
        indexes = [
            models.Index(fields=['status'], name='exams_status_idx'),
            models.Index(fields=['subject', 'grade'], name='exams_subject_grade_idx'),
        ]

    def __str__(self):
        return f"{self.subject.code} - {self.title}"

    @property
    def is_published(self):
        return self.status == self.Status.PUBLISHED

    @property
    def is_draft(self):
        return self.status == self.Status.DRAFT


class Question(models.Model):
    class QuestionType(models.TextChoices):
        MULTIPLE_CHOICE = 'MULTIPLE_CHOICE', 'Multiple Choice'
        TRUE_FALSE = 'TRUE_FALSE', 'True/False'
        SHORT_ANSWER = 'SHORT_ANSWER', 'Short Answer'
        ESSAY = 'ESSAY', 'Essay'

    class Difficulty(models.TextChoices):
        EASY = 'EASY', 'Easy'
        MEDIUM = 'MEDIUM', 'Medium'
        HARD = 'HARD', 'Hard'

    exam = models.ForeignKey(
        Exam,
        on_delete=models.CASCADE,
        related_name='questions'
    )
    question_number = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    text = models.TextField()
    question_type = models.CharField(max_length=20, choices=QuestionType.choices)
    options = models.JSONField(null=True, blank=True)
    correct_answer = models.TextField()
    points = models.IntegerField(default=1, validators=[MinValueValidator(0)])
    difficulty_level = models.CharField(max_length=10, choices=Difficulty.choices, blank=True)
    feedback = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'questions'
        ordering = ['exam', 'question_number']
        constraints = [
            models.UniqueConstraint(
                fields=['exam', 'question_number'],
                name='unique_exam_question_number'
            )
        ]

    def __str__(self):
        return f"Q{self.question_number}: {self.text[:50]}"


class StudentExam(models.Model):
    """
    One student's attempt at an exam.

    Score and pass flag are written once when the attempt is finalized.
    The unique constraint limits every student to a single attempt per exam.
    """
    class Status(models.TextChoices):
        IN_PROGRESS = 'IN_PROGRESS', 'In Progress'
        COMPLETED = 'COMPLETED', 'Completed'
        GRADED = 'GRADED', 'Graded'

    exam = models.ForeignKey(
        Exam,
        on_delete=models.PROTECT,
        related_name='student_exams'
    )
    student = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='student_exams'
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.IN_PROGRESS
    )
    start_time = models.DateTimeField(default=timezone.now)
    end_time = models.DateTimeField(null=True, blank=True)
    time_spent = models.PositiveIntegerField(null=True, blank=True)
    score = models.FloatField(default=0)
    is_passed = models.BooleanField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'student_exams'
        ordering = ['-start_time']
        constraints = [
            models.UniqueConstraint(
                fields=['exam', 'student'],
                name='unique_student_exam_attempt'
            )
        ]
        indexes = [
            models.Index(fields=['student', '-start_time'], name='attempts_student_start_idx'),
            models.Index(fields=['status'], name='attempts_status_idx'),
        ]

    def __str__(self):
        return f"{self.student.username} - {self.exam.title}"

    @property
    def is_in_progress(self):
        return self.status == self.Status.IN_PROGRESS


class StudentAnswer(models.Model):
    """
    A student's current response to one question within an attempt.
    Resubmitting the same question updates this row in place.
    """
    student_exam = models.ForeignKey(
        StudentExam,
        on_delete=models.CASCADE,
        related_name='answers'
    )
    question = models.ForeignKey(
        Question,
        on_delete=models.CASCADE,
        related_name='student_answers'
    )
    selected_answer = models.TextField(null=True, blank=True)
    is_correct = models.BooleanField(null=True, blank=True)
    is_marked = models.BooleanField(default=False)
    time_taken = models.PositiveIntegerField(null=True, blank=True)
    answered_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'student_answers'
        constraints = [
            models.UniqueConstraint(
                fields=['student_exam', 'question'],
                name='unique_attempt_question_answer'
            )
        ]

    def __str__(self):
        return f"Answer to Q{self.question.question_number} in attempt {self.student_exam_id}"


class Notification(models.Model):
    class NotificationType(models.TextChoices):
        INFO = 'INFO', 'Info'
        SUCCESS = 'SUCCESS', 'Success'
        WARNING = 'WARNING', 'Warning'

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='notifications')
    title = models.CharField(max_length=255)
    message = models.TextField()
    notification_type = models.CharField(
        max_length=10,
        choices=NotificationType.choices,
        default=NotificationType.INFO
    )
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'notifications'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', 'is_read'], name='notifications_unread_idx'),
        ]

    def __str__(self):
        return f"{self.user.username}: {self.title}"
