import dataclasses
import enum
from datetime import datetime
from typing import List, Optional

import strawberry

from .types import (
    DifficultyLevel,
    ExamStatus,
    QuestionKind,
    UserRole,
    UserStatus,
)


def input_data(obj, renames=None):
    """
    Collect the fields a client actually sent into serializer data.
    UNSET fields are dropped so partial updates leave them untouched.
    """
    renames = renames or {}
    data = {}
    for field in dataclasses.fields(obj):
        value = getattr(obj, field.name)
        if value is strawberry.UNSET:
            continue
        if isinstance(value, enum.Enum):
            value = value.value
        data[renames.get(field.name, field.name)] = value
    return data


# ==============================================
# PAGINATION & SORTING
# ==============================================

@strawberry.input
class PaginationInput:
    first: Optional[int] = None
    after: Optional[str] = None
    last: Optional[int] = None
    before: Optional[str] = None


@strawberry.enum
class SortDirection(enum.Enum):
    ASC = 'ASC'
    DESC = 'DESC'


@strawberry.enum
class UserSortField(enum.Enum):
    FIRST_NAME = 'FIRST_NAME'
    LAST_NAME = 'LAST_NAME'
    EMAIL = 'EMAIL'
    CREATED_AT = 'CREATED_AT'
    ROLE = 'ROLE'
    STATUS = 'STATUS'


@strawberry.enum
class GradeSortField(enum.Enum):
    NAME = 'NAME'
    ACADEMIC_YEAR = 'ACADEMIC_YEAR'
    CREATED_AT = 'CREATED_AT'


@strawberry.enum
class SubjectSortField(enum.Enum):
    CODE = 'CODE'
    NAME = 'NAME'
    GRADE_NAME = 'GRADE_NAME'
    CREATED_AT = 'CREATED_AT'


@strawberry.enum
class ExamSortField(enum.Enum):
    TITLE = 'TITLE'
    CREATED_AT = 'CREATED_AT'
    START_DATE = 'START_DATE'
    END_DATE = 'END_DATE'
    STATUS = 'STATUS'


@strawberry.input
class UserSortInput:
    field: UserSortField
    direction: SortDirection = SortDirection.ASC


@strawberry.input
class GradeSortInput:
    field: GradeSortField
    direction: SortDirection = SortDirection.ASC


@strawberry.input
class SubjectSortInput:
    field: SubjectSortField
    direction: SortDirection = SortDirection.ASC


@strawberry.input
class ExamSortInput:
    field: ExamSortField
    direction: SortDirection = SortDirection.ASC


# ==============================================
# FILTERS
# ==============================================

@strawberry.input
class UserFilterInput:
    role: Optional[UserRole] = None
    status: Optional[UserStatus] = None
    search: Optional[str] = None


@strawberry.input
class GradeFilterInput:
    is_active: Optional[bool] = None
    search: Optional[str] = None


@strawberry.input
class SubjectFilterInput:
    is_active: Optional[bool] = None
    grade_id: Optional[strawberry.ID] = None
    search: Optional[str] = None


@strawberry.input
class ExamFilterInput:
    subject_id: Optional[strawberry.ID] = None
    grade_id: Optional[strawberry.ID] = None
    status: Optional[ExamStatus] = None
    created_by_id: Optional[strawberry.ID] = None
    start_date_from: Optional[datetime] = None
    start_date_to: Optional[datetime] = None
    search: Optional[str] = None


# ==============================================
# USERS
# ==============================================

@strawberry.input
class CreateUserInput:
    username: str
    email: str
    password: str
    first_name: str = ''
    last_name: str = ''
    role: UserRole = UserRole.STUDENT
    status: Optional[UserStatus] = strawberry.UNSET
    phone_number: Optional[str] = strawberry.UNSET


@strawberry.input
class UpdateUserInput:
    username: Optional[str] = strawberry.UNSET
    email: Optional[str] = strawberry.UNSET
    password: Optional[str] = strawberry.UNSET
    first_name: Optional[str] = strawberry.UNSET
    last_name: Optional[str] = strawberry.UNSET
    role: Optional[UserRole] = strawberry.UNSET
    status: Optional[UserStatus] = strawberry.UNSET
    phone_number: Optional[str] = strawberry.UNSET


# ==============================================
# GRADES & SUBJECTS
# ==============================================

@strawberry.input
class CreateGradeInput:
    name: str
    description: str = ''
    academic_year: str = ''
    is_active: bool = True


@strawberry.input
class UpdateGradeInput:
    name: Optional[str] = strawberry.UNSET
    description: Optional[str] = strawberry.UNSET
    academic_year: Optional[str] = strawberry.UNSET
    is_active: Optional[bool] = strawberry.UNSET


@strawberry.input
class CreateSubjectInput:
    name: str
    code: str
    grade_id: strawberry.ID
    description: str = ''
    is_active: bool = True


@strawberry.input
class UpdateSubjectInput:
    name: Optional[str] = strawberry.UNSET
    code: Optional[str] = strawberry.UNSET
    grade_id: Optional[strawberry.ID] = strawberry.UNSET
    description: Optional[str] = strawberry.UNSET
    is_active: Optional[bool] = strawberry.UNSET


@strawberry.input
class AssignTeacherInput:
    teacher_id: strawberry.ID
    subject_ids: List[strawberry.ID]
    grade_ids: List[strawberry.ID]


SUBJECT_RENAMES = {'grade_id': 'grade'}


# ==============================================
# EXAMS & QUESTIONS
# ==============================================

@strawberry.input
class CreateExamInput:
    title: str
    subject_id: strawberry.ID
    grade_id: strawberry.ID
    duration_minutes: int
    description: str = ''
    passmark: Optional[float] = None
    shuffle_questions: bool = False
    allow_review: bool = True
    show_results: bool = True
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    instructions: str = ''


@strawberry.input
class UpdateExamInput:
    title: Optional[str] = strawberry.UNSET
    subject_id: Optional[strawberry.ID] = strawberry.UNSET
    grade_id: Optional[strawberry.ID] = strawberry.UNSET
    duration_minutes: Optional[int] = strawberry.UNSET
    description: Optional[str] = strawberry.UNSET
    passmark: Optional[float] = strawberry.UNSET
    shuffle_questions: Optional[bool] = strawberry.UNSET
    allow_review: Optional[bool] = strawberry.UNSET
    show_results: Optional[bool] = strawberry.UNSET
    start_date: Optional[datetime] = strawberry.UNSET
    end_date: Optional[datetime] = strawberry.UNSET
    instructions: Optional[str] = strawberry.UNSET


EXAM_RENAMES = {'subject_id': 'subject', 'grade_id': 'grade'}


@strawberry.input
class CreateQuestionInput:
    question_number: int
    text: str
    question_type: QuestionKind
    correct_answer: str
    options: Optional[List[str]] = None
    points: int = 1
    difficulty_level: Optional[DifficultyLevel] = strawberry.UNSET
    feedback: str = ''


@strawberry.input
class UpdateQuestionInput:
    question_number: Optional[int] = strawberry.UNSET
    text: Optional[str] = strawberry.UNSET
    question_type: Optional[QuestionKind] = strawberry.UNSET
    correct_answer: Optional[str] = strawberry.UNSET
    options: Optional[List[str]] = strawberry.UNSET
    points: Optional[int] = strawberry.UNSET
    difficulty_level: Optional[DifficultyLevel] = strawberry.UNSET
    feedback: Optional[str] = strawberry.UNSET


# ==============================================
# ATTEMPTS
# ==============================================

@strawberry.input
class SubmitAnswerInput:
    student_exam_id: strawberry.ID
    question_id: strawberry.ID
    selected_answer: Optional[str] = None
    is_marked: Optional[bool] = None
    time_taken: Optional[int] = None


@strawberry.input
class AnswerInput:
    question_id: strawberry.ID
    selected_answer: Optional[str] = None
    is_marked: Optional[bool] = None
    time_taken: Optional[int] = None


@strawberry.input
class SubmitExamInput:
    student_exam_id: strawberry.ID
    answers: Optional[List[AnswerInput]] = None
