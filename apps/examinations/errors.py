"""
Typed failures raised by the service layer.

Services raise these for every expected failure; the GraphQL boundary turns
them into the `Error` member of each operation's result union. Anything that
is not a ServiceError is treated as an internal fault.
"""
import enum


class ErrorCode(str, enum.Enum):
    UNAUTHORIZED = 'UNAUTHORIZED'
    FORBIDDEN = 'FORBIDDEN'
    NOT_FOUND = 'NOT_FOUND'
    ALREADY_EXISTS = 'ALREADY_EXISTS'
    VALIDATION_ERROR = 'VALIDATION_ERROR'
    BUSINESS_RULE_VIOLATION = 'BUSINESS_RULE_VIOLATION'
    INTERNAL_ERROR = 'INTERNAL_ERROR'
    TIME_EXPIRED = 'TIME_EXPIRED'
    EXAM_ALREADY_COMPLETED = 'EXAM_ALREADY_COMPLETED'
    QUESTION_NOT_IN_EXAM = 'QUESTION_NOT_IN_EXAM'


class ServiceError(Exception):
    code = ErrorCode.INTERNAL_ERROR
    default_message = 'An internal error occurred'

    def __init__(self, message=None, path=None, details=None):
        self.message = message or self.default_message
        self.path = path
        self.details = details
        super().__init__(self.message)


class Unauthorized(ServiceError):
    code = ErrorCode.UNAUTHORIZED
    default_message = 'You must be logged in to perform this action'


class Forbidden(ServiceError):
    code = ErrorCode.FORBIDDEN
    default_message = 'You do not have permission to perform this action'


class NotFound(ServiceError):
    code = ErrorCode.NOT_FOUND
    default_message = 'Resource not found'


class AlreadyExists(ServiceError):
    code = ErrorCode.ALREADY_EXISTS
    default_message = 'Resource already exists'


class ValidationFailed(ServiceError):
    code = ErrorCode.VALIDATION_ERROR
    default_message = 'Invalid input'


class BusinessRuleViolation(ServiceError):
    code = ErrorCode.BUSINESS_RULE_VIOLATION
    default_message = 'This action is not allowed in the current state'


class TimeExpired(ServiceError):
    code = ErrorCode.TIME_EXPIRED
    default_message = 'Time has expired for this exam'


class ExamAlreadyCompleted(ServiceError):
    code = ErrorCode.EXAM_ALREADY_COMPLETED
    default_message = 'This exam has already been submitted'


class QuestionNotInExam(ServiceError):
    code = ErrorCode.QUESTION_NOT_IN_EXAM
    default_message = 'This question does not belong to the exam'


def raise_for_serializer(serializer):
    """
    Run DRF validation and translate failures into service errors.
    Uniqueness failures become ALREADY_EXISTS, everything else VALIDATION_ERROR.
    """
    if serializer.is_valid():
        return serializer.validated_data

    errors = serializer.errors
    flattened = {field: list(_flatten(details)) for field, details in errors.items()}
    for field, details in flattened.items():
        for detail in details:
            if getattr(detail, 'code', None) == 'unique':
                raise AlreadyExists(str(detail), path=[field])

    field, details = next(iter(flattened.items()))
    raise ValidationFailed(
        f"{field}: {details[0]}" if details else f"{field}: invalid value",
        path=[field],
        details={name: [str(d) for d in items] for name, items in flattened.items()},
    )


def _flatten(details):
    if isinstance(details, dict):
        for value in details.values():
            yield from _flatten(value)
    elif isinstance(details, (list, tuple)):
        for value in details:
            yield from _flatten(value)
    else:
        yield details


def get_object_or_not_found(queryset, pk, label):
    """Like django's get_object_or_404, but raises NotFound for the GraphQL boundary."""
    try:
        return queryset.get(pk=int(pk))
    except (queryset.model.DoesNotExist, TypeError, ValueError):
        raise NotFound(f"{label} with ID {pk} not found")
