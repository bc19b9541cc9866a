"""
GraphQL object types.

Resolvers hand Django model instances straight to these types; every
model-backed type declares `is_type_of` so result unions can tell a model
instance apart from an Error.
"""
import enum
from datetime import datetime
from typing import List, Optional

import strawberry
from django.db.models import Avg, Count, Q, Sum
from strawberry.scalars import JSON

from ..errors import ErrorCode
from ..models import (
    Exam,
    Grade,
    Notification,
    Question,
    StudentAnswer,
    StudentExam,
    Subject,
    User,
)
from ..permissions import Action, can, is_authenticated

# ==============================================
# ENUMS
# ==============================================

ErrorCodeEnum = strawberry.enum(ErrorCode, name='ErrorCode')


@strawberry.enum
class UserRole(enum.Enum):
    ADMIN = 'ADMIN'
    TEACHER = 'TEACHER'
    STUDENT = 'STUDENT'


@strawberry.enum
class UserStatus(enum.Enum):
    ACTIVE = 'ACTIVE'
    INACTIVE = 'INACTIVE'
    SUSPENDED = 'SUSPENDED'


@strawberry.enum
class ExamStatus(enum.Enum):
    DRAFT = 'DRAFT'
    PUBLISHED = 'PUBLISHED'
    ARCHIVED = 'ARCHIVED'


@strawberry.enum(name='QuestionType')
class QuestionKind(enum.Enum):
    MULTIPLE_CHOICE = 'MULTIPLE_CHOICE'
    TRUE_FALSE = 'TRUE_FALSE'
    SHORT_ANSWER = 'SHORT_ANSWER'
    ESSAY = 'ESSAY'


@strawberry.enum
class DifficultyLevel(enum.Enum):
    EASY = 'EASY'
    MEDIUM = 'MEDIUM'
    HARD = 'HARD'


@strawberry.enum
class ExamAttemptStatus(enum.Enum):
    IN_PROGRESS = 'IN_PROGRESS'
    COMPLETED = 'COMPLETED'
    GRADED = 'GRADED'


@strawberry.enum(name='NotificationType')
class NotificationKind(enum.Enum):
    INFO = 'INFO'
    SUCCESS = 'SUCCESS'
    WARNING = 'WARNING'


FINALIZED_ATTEMPT_STATUSES = [StudentExam.Status.COMPLETED, StudentExam.Status.GRADED]


# ==============================================
# ENVELOPE TYPES
# ==============================================

@strawberry.type(name='Error')
class ErrorType:
    code: ErrorCodeEnum
    message: str
    path: Optional[List[str]] = None
    details: Optional[JSON] = None


@strawberry.type
class Success:
    success: bool = True
    message: Optional[str] = None


# ==============================================
# DIRECTORY
# ==============================================

@strawberry.type(name='User')
class UserType:
    id: strawberry.ID
    username: str
    email: str
    first_name: str
    last_name: str
    phone_number: str
    is_active: bool
    created_at: datetime

    @classmethod
    def is_type_of(cls, obj, info):
        return isinstance(obj, User)

    @strawberry.field
    def full_name(self) -> str:
        return self.full_name

    @strawberry.field
    def role(self) -> UserRole:
        return UserRole(self.role)

    @strawberry.field
    def status(self) -> UserStatus:
        return UserStatus(self.status)

    @strawberry.field
    def assigned_subjects(self) -> List['SubjectType']:
        return list(Subject.objects.filter(
            teacher_subjects__teacher=self, teacher_subjects__is_active=True
        ).select_related('grade'))

    @strawberry.field
    def assigned_grades(self) -> List['GradeType']:
        return list(Grade.objects.filter(
            teacher_grades__teacher=self, teacher_grades__is_active=True
        ))

    @strawberry.field
    def enrolled_grades(self) -> List['GradeType']:
        return list(Grade.objects.filter(
            student_grades__student=self, student_grades__is_active=True
        ))


@strawberry.type(name='Grade')
class GradeType:
    id: strawberry.ID
    name: str
    description: str
    academic_year: str
    is_active: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def is_type_of(cls, obj, info):
        return isinstance(obj, Grade)

    @strawberry.field
    def subjects(self) -> List['SubjectType']:
        return list(self.subjects.all())


@strawberry.type(name='Subject')
class SubjectType:
    id: strawberry.ID
    name: str
    code: str
    description: str
    grade: GradeType
    is_active: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def is_type_of(cls, obj, info):
        return isinstance(obj, Subject)


# ==============================================
# EXAMS
# ==============================================

@strawberry.type(name='Exam')
class ExamType:
    id: strawberry.ID
    title: str
    description: str
    subject: SubjectType
    grade: GradeType
    created_by: UserType
    duration_minutes: int
    passmark: Optional[float]
    shuffle_questions: bool
    allow_review: bool
    show_results: bool
    start_date: Optional[datetime]
    end_date: Optional[datetime]
    instructions: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def is_type_of(cls, obj, info):
        return isinstance(obj, Exam)

    @strawberry.field
    def status(self) -> ExamStatus:
        return ExamStatus(self.status)

    @strawberry.field
    def question_count(self) -> int:
        return self.questions.count()

    @strawberry.field
    def total_points(self) -> int:
        return self.questions.aggregate(total=Sum('points'))['total'] or 0

    @strawberry.field
    def average_score(self) -> Optional[float]:
        return self.student_exams.filter(
            status__in=FINALIZED_ATTEMPT_STATUSES
        ).aggregate(average=Avg('score'))['average']

    @strawberry.field
    def pass_rate(self) -> Optional[float]:
        stats = self.student_exams.filter(status__in=FINALIZED_ATTEMPT_STATUSES).aggregate(
            finished=Count('id'),
            passed=Count('id', filter=Q(is_passed=True)),
        )
        if not stats['finished']:
            return None
        return stats['passed'] / stats['finished'] * 100


@strawberry.type(name='Question')
class QuestionType:
    id: strawberry.ID
    exam: ExamType
    question_number: int
    text: str
    options: Optional[List[str]]
    points: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def is_type_of(cls, obj, info):
        return isinstance(obj, Question)

    @strawberry.field
    def question_type(self) -> QuestionKind:
        return QuestionKind(self.question_type)

    @strawberry.field
    def difficulty_level(self) -> Optional[DifficultyLevel]:
        return DifficultyLevel(self.difficulty_level) if self.difficulty_level else None

    @strawberry.field
    def correct_answer(self, info: strawberry.Info) -> Optional[str]:
        return self.correct_answer if answers_revealed(info.context.caller, self) else None

    @strawberry.field
    def feedback(self, info: strawberry.Info) -> Optional[str]:
        return self.feedback if answers_revealed(info.context.caller, self) else None


def answers_revealed(caller, question):
    """
    Staff who can edit the exam always see answers. Students only see them
    once their own attempt is finished and the exam shows results.
    """
    if not is_authenticated(caller):
        return False
    exam = question.exam
    if can(caller, Action.EDIT_EXAM, exam):
        return True
    if not exam.show_results:
        return False
    return StudentExam.objects.filter(
        exam=exam, student=caller, status__in=FINALIZED_ATTEMPT_STATUSES
    ).exists()


# ==============================================
# ATTEMPTS
# ==============================================

@strawberry.type(name='StudentAnswer')
class StudentAnswerType:
    id: strawberry.ID
    question: QuestionType
    selected_answer: Optional[str]
    is_marked: bool
    time_taken: Optional[int]
    answered_at: datetime

    @classmethod
    def is_type_of(cls, obj, info):
        return isinstance(obj, StudentAnswer)

    @strawberry.field
    def is_correct(self, info: strawberry.Info) -> Optional[bool]:
        return self.is_correct if answers_revealed(info.context.caller, self.question) else None


@strawberry.type(name='StudentExam')
class StudentExamType:
    id: strawberry.ID
    exam: ExamType
    student: UserType
    start_time: datetime
    end_time: Optional[datetime]
    time_spent: Optional[int]
    score: float
    is_passed: Optional[bool]

    @classmethod
    def is_type_of(cls, obj, info):
        return isinstance(obj, StudentExam)

    @strawberry.field
    def status(self) -> ExamAttemptStatus:
        return ExamAttemptStatus(self.status)

    @strawberry.field
    def answers(self) -> List[StudentAnswerType]:
        return list(self.answers.select_related('question', 'question__exam'))

    @strawberry.field
    def remaining_time(self, info: strawberry.Info) -> int:
        return info.context.attempts.remaining_seconds(self)

    @strawberry.field
    def answered_count(self) -> int:
        return self.answers.count()

    @strawberry.field
    def marked_count(self) -> int:
        return self.answers.filter(is_marked=True).count()

    @strawberry.field
    def progress(self) -> float:
        total = self.exam.questions.count()
        if total == 0:
            return 0.0
        return self.answers.count() / total * 100


@strawberry.type(name='Notification')
class NotificationType:
    id: strawberry.ID
    title: str
    message: str
    is_read: bool
    created_at: datetime

    @classmethod
    def is_type_of(cls, obj, info):
        return isinstance(obj, Notification)

    @strawberry.field
    def notification_type(self) -> NotificationKind:
        return NotificationKind(self.notification_type)


# ==============================================
# CONNECTIONS
# ==============================================

@strawberry.type
class PageInfo:
    has_next_page: bool
    has_previous_page: bool
    start_cursor: Optional[str]
    end_cursor: Optional[str]


@strawberry.type
class UserEdge:
    node: UserType
    cursor: str


@strawberry.type
class UserConnection:
    edges: List[UserEdge]
    page_info: PageInfo
    total_count: int


@strawberry.type
class GradeEdge:
    node: GradeType
    cursor: str


@strawberry.type
class GradeConnection:
    edges: List[GradeEdge]
    page_info: PageInfo
    total_count: int


@strawberry.type
class SubjectEdge:
    node: SubjectType
    cursor: str


@strawberry.type
class SubjectConnection:
    edges: List[SubjectEdge]
    page_info: PageInfo
    total_count: int


@strawberry.type
class ExamEdge:
    node: ExamType
    cursor: str


@strawberry.type
class ExamConnection:
    edges: List[ExamEdge]
    page_info: PageInfo
    total_count: int


@strawberry.type
class StudentExamEdge:
    node: StudentExamType
    cursor: str


@strawberry.type
class StudentExamConnection:
    edges: List[StudentExamEdge]
    page_info: PageInfo
    total_count: int


@strawberry.type
class QuestionList:
    items: List[QuestionType]


@strawberry.type
class NotificationList:
    items: List[NotificationType]
    unread_count: int


def build_connection(connection_cls, edge_cls, page):
    return connection_cls(
        edges=[
            edge_cls(node=item, cursor=cursor)
            for item, cursor in zip(page.items, page.cursors)
        ],
        page_info=PageInfo(
            has_next_page=page.has_next_page,
            has_previous_page=page.has_previous_page,
            start_cursor=page.start_cursor,
            end_cursor=page.end_cursor,
        ),
        total_count=page.total_count,
    )
