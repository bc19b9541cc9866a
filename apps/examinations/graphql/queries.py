from typing import Optional

import strawberry

from .. import exam_service, notifications, school_service
from ..pagination import paginate
from ..permissions import require_authenticated
from .inputs import (
    ExamFilterInput,
    ExamSortInput,
    GradeFilterInput,
    GradeSortInput,
    PaginationInput,
    SubjectFilterInput,
    SubjectSortInput,
    UserFilterInput,
    UserSortInput,
)
from .results import (
    ExamConnectionResult,
    ExamResult,
    GradeConnectionResult,
    GradeResult,
    NotificationListResult,
    QuestionListResult,
    QuestionResult,
    StudentExamConnectionResult,
    StudentExamResult,
    SubjectConnectionResult,
    SubjectResult,
    UserConnectionResult,
    UserResult,
    envelope,
)
from .types import (
    ExamConnection,
    ExamEdge,
    GradeConnection,
    GradeEdge,
    NotificationList,
    QuestionList,
    StudentExamConnection,
    StudentExamEdge,
    SubjectConnection,
    SubjectEdge,
    UserConnection,
    UserEdge,
    build_connection,
)


def _page(queryset, pagination):
    pagination = pagination or PaginationInput()
    return paginate(
        queryset,
        first=pagination.first,
        after=pagination.after,
        last=pagination.last,
        before=pagination.before,
    )


def _sort_args(sort):
    if sort is None:
        return {}
    return {'sort_field': sort.field.value, 'direction': sort.direction.value}


def _enum_value(value):
    return value.value if value is not None else None


@strawberry.type
class Query:
    # ==============================================
    # USERS
    # ==============================================

    @strawberry.field
    @envelope
    def me(self, info: strawberry.Info) -> UserResult:
        return require_authenticated(info.context.caller)

    @strawberry.field
    @envelope
    def user(self, info: strawberry.Info, id: strawberry.ID) -> UserResult:
        return school_service.get_user(info.context.caller, id)

    @strawberry.field
    @envelope
    def users(
        self,
        info: strawberry.Info,
        filter: Optional[UserFilterInput] = None,
        sort: Optional[UserSortInput] = None,
        pagination: Optional[PaginationInput] = None,
    ) -> UserConnectionResult:
        filter = filter or UserFilterInput()
        queryset = school_service.list_users(
            info.context.caller,
            role=_enum_value(filter.role),
            status=_enum_value(filter.status),
            search=filter.search,
            **_sort_args(sort),
        )
        return build_connection(UserConnection, UserEdge, _page(queryset, pagination))

    # ==============================================
    # GRADES & SUBJECTS
    # ==============================================

    @strawberry.field
    @envelope
    def grade(self, info: strawberry.Info, id: strawberry.ID) -> GradeResult:
        return school_service.get_grade(info.context.caller, id)

    @strawberry.field
    @envelope
    def grades(
        self,
        info: strawberry.Info,
        filter: Optional[GradeFilterInput] = None,
        sort: Optional[GradeSortInput] = None,
        pagination: Optional[PaginationInput] = None,
    ) -> GradeConnectionResult:
        filter = filter or GradeFilterInput()
        queryset = school_service.list_grades(
            info.context.caller,
            is_active=filter.is_active,
            search=filter.search,
            **_sort_args(sort),
        )
        return build_connection(GradeConnection, GradeEdge, _page(queryset, pagination))

    @strawberry.field
    @envelope
    def subject(self, info: strawberry.Info, id: strawberry.ID) -> SubjectResult:
        return school_service.get_subject(info.context.caller, id)

    @strawberry.field
    @envelope
    def subject_by_code(self, info: strawberry.Info, code: str) -> SubjectResult:
        return school_service.get_subject_by_code(info.context.caller, code)

    @strawberry.field
    @envelope
    def subjects(
        self,
        info: strawberry.Info,
        filter: Optional[SubjectFilterInput] = None,
        sort: Optional[SubjectSortInput] = None,
        pagination: Optional[PaginationInput] = None,
    ) -> SubjectConnectionResult:
        filter = filter or SubjectFilterInput()
        queryset = school_service.list_subjects(
            info.context.caller,
            is_active=filter.is_active,
            grade_id=filter.grade_id,
            search=filter.search,
            **_sort_args(sort),
        )
        return build_connection(SubjectConnection, SubjectEdge, _page(queryset, pagination))

    # ==============================================
    # EXAMS & QUESTIONS
    # ==============================================

    @strawberry.field
    @envelope
    def exam(self, info: strawberry.Info, id: strawberry.ID) -> ExamResult:
        return exam_service.get_exam(info.context.caller, id)

    @strawberry.field
    @envelope
    def exams(
        self,
        info: strawberry.Info,
        filter: Optional[ExamFilterInput] = None,
        sort: Optional[ExamSortInput] = None,
        pagination: Optional[PaginationInput] = None,
    ) -> ExamConnectionResult:
        filter = filter or ExamFilterInput()
        queryset = exam_service.list_exams(
            info.context.caller,
            subject_id=filter.subject_id,
            grade_id=filter.grade_id,
            status=_enum_value(filter.status),
            created_by_id=filter.created_by_id,
            start_date_from=filter.start_date_from,
            start_date_to=filter.start_date_to,
            search=filter.search,
            **_sort_args(sort),
        )
        return build_connection(ExamConnection, ExamEdge, _page(queryset, pagination))

    @strawberry.field
    @envelope
    def question(self, info: strawberry.Info, id: strawberry.ID) -> QuestionResult:
        return exam_service.get_question(info.context.caller, id)

    @strawberry.field
    @envelope
    def exam_questions(self, info: strawberry.Info, exam_id: strawberry.ID) -> QuestionListResult:
        questions = exam_service.list_exam_questions(info.context.caller, exam_id)
        return QuestionList(items=list(questions))

    # ==============================================
    # ATTEMPTS
    # ==============================================

    @strawberry.field
    @envelope
    def student_exam(self, info: strawberry.Info, id: strawberry.ID) -> StudentExamResult:
        return info.context.attempts.get_attempt(info.context.caller, id)

    @strawberry.field
    @envelope
    def student_exams(
        self,
        info: strawberry.Info,
        exam_id: Optional[strawberry.ID] = None,
        pagination: Optional[PaginationInput] = None,
    ) -> StudentExamConnectionResult:
        queryset = info.context.attempts.list_attempts(info.context.caller, exam_id=exam_id)
        return build_connection(
            StudentExamConnection, StudentExamEdge, _page(queryset.order_by('-start_time', 'pk'), pagination)
        )

    # ==============================================
    # NOTIFICATIONS
    # ==============================================

    @strawberry.field
    @envelope
    def notifications(self, info: strawberry.Info, unread_only: bool = False) -> NotificationListResult:
        queryset = notifications.list_notifications(info.context.caller, unread_only=unread_only)
        items = list(queryset)
        unread_count = notifications.list_notifications(info.context.caller, unread_only=True).count()
        return NotificationList(items=items, unread_count=unread_count)
