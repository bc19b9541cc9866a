"""
Result unions and the boundary that fills them.

Every query and mutation returns `<Payload> | Error`. Resolvers are wrapped
with `envelope`, which turns a ServiceError into an Error value and any other
exception into a logged INTERNAL_ERROR that reveals nothing of the cause.
"""
import functools
import logging
from typing import Annotated, Union

import strawberry

from ..errors import ErrorCode, ServiceError
from .types import (
    ErrorType,
    ExamConnection,
    ExamType,
    GradeConnection,
    GradeType,
    NotificationList,
    NotificationType,
    QuestionList,
    QuestionType,
    StudentAnswerType,
    StudentExamConnection,
    StudentExamType,
    SubjectConnection,
    SubjectType,
    Success,
    UserConnection,
    UserType,
)

logger = logging.getLogger('apps.examinations')

INTERNAL_ERROR_MESSAGE = 'An internal error occurred'

UserResult = Annotated[Union[UserType, ErrorType], strawberry.union('UserResult')]
UserConnectionResult = Annotated[
    Union[UserConnection, ErrorType], strawberry.union('UserConnectionResult')
]
GradeResult = Annotated[Union[GradeType, ErrorType], strawberry.union('GradeResult')]
GradeConnectionResult = Annotated[
    Union[GradeConnection, ErrorType], strawberry.union('GradeConnectionResult')
]
SubjectResult = Annotated[Union[SubjectType, ErrorType], strawberry.union('SubjectResult')]
SubjectConnectionResult = Annotated[
    Union[SubjectConnection, ErrorType], strawberry.union('SubjectConnectionResult')
]
ExamResult = Annotated[Union[ExamType, ErrorType], strawberry.union('ExamResult')]
ExamConnectionResult = Annotated[
    Union[ExamConnection, ErrorType], strawberry.union('ExamConnectionResult')
]
QuestionResult = Annotated[Union[QuestionType, ErrorType], strawberry.union('QuestionResult')]
QuestionListResult = Annotated[
    Union[QuestionList, ErrorType], strawberry.union('QuestionListResult')
]
StudentExamResult = Annotated[
    Union[StudentExamType, ErrorType], strawberry.union('StudentExamResult')
]
StudentExamConnectionResult = Annotated[
    Union[StudentExamConnection, ErrorType], strawberry.union('StudentExamConnectionResult')
]
StudentAnswerResult = Annotated[
    Union[StudentAnswerType, ErrorType], strawberry.union('StudentAnswerResult')
]
NotificationResult = Annotated[
    Union[NotificationType, ErrorType], strawberry.union('NotificationResult')
]
NotificationListResult = Annotated[
    Union[NotificationList, ErrorType], strawberry.union('NotificationListResult')
]
OperationResult = Annotated[Union[Success, ErrorType], strawberry.union('OperationResult')]


def to_error(exc):
    return ErrorType(
        code=exc.code,
        message=exc.message,
        path=exc.path,
        details=exc.details,
    )


def envelope(resolver):
    """Convert exceptions raised by a resolver into an Error result."""

    @functools.wraps(resolver)
    def wrapper(*args, **kwargs):
        try:
            return resolver(*args, **kwargs)
        except ServiceError as exc:
            return to_error(exc)
        except Exception:
            logger.exception("Unhandled error in %s", resolver.__name__)
            return ErrorType(code=ErrorCode.INTERNAL_ERROR, message=INTERNAL_ERROR_MESSAGE)

    return wrapper
