"""
Central authorization policy.

Every operation asks one question: may this caller perform this action on
this resource? Rules live in a single table keyed by Action so the GraphQL
resolvers and services never re-implement role checks. Collection queries
are scoped by the visible_* helpers, which follow the same rules.

Roles are flat. ADMIN bypasses ownership checks everywhere except on the
attempt-writing actions, which belong to the student taking the exam.
"""
import enum
import logging

from django.db.models import Q

from .errors import Forbidden, Unauthorized
from .models import Exam, StudentExam, StudentGrade, TeacherGrade, TeacherSubject, User

logger = logging.getLogger(__name__)


class Action(str, enum.Enum):
    VIEW_DIRECTORY = 'view_directory'
    LIST_USERS = 'list_users'
    VIEW_USER = 'view_user'
    UPDATE_USER = 'update_user'
    MANAGE_USERS = 'manage_users'
    MANAGE_GRADES = 'manage_grades'
    MANAGE_SUBJECTS = 'manage_subjects'
    ASSIGN_TEACHER = 'assign_teacher'
    ENROLL_STUDENT = 'enroll_student'
    CREATE_EXAM = 'create_exam'
    VIEW_EXAM = 'view_exam'
    EDIT_EXAM = 'edit_exam'
    DELETE_EXAM = 'delete_exam'
    VIEW_QUESTION = 'view_question'
    START_ATTEMPT = 'start_attempt'
    SUBMIT_ATTEMPT = 'submit_attempt'
    VIEW_ATTEMPT = 'view_attempt'
    REVIEW_ATTEMPT = 'review_attempt'
    MANAGE_NOTIFICATION = 'manage_notification'


# ==============================================
# ASSIGNMENT LOOKUPS
# ==============================================

def teaches_subject(user, subject_id):
    return TeacherSubject.objects.filter(
        teacher=user, subject_id=subject_id, is_active=True
    ).exists()


def teaches_grade(user, grade_id):
    return TeacherGrade.objects.filter(
        teacher=user, grade_id=grade_id, is_active=True
    ).exists()


def is_enrolled(user, grade_id):
    return StudentGrade.objects.filter(
        student=user, grade_id=grade_id, is_active=True
    ).exists()


# ==============================================
# RULES
# ==============================================

def _admin_only(user, resource):
    return user.is_admin


def _staff(user, resource):
    return user.is_admin or user.is_teacher


def _self_or_admin(user, target):
    return user.is_admin or user.pk == target.pk


def _view_user(user, target):
    return _staff(user, target) or user.pk == target.pk


def _enroll_student(user, grade):
    if user.is_admin:
        return True
    return user.is_teacher and teaches_grade(user, grade.pk)


def _create_exam(user, exam):
    if user.is_admin:
        return True
    return (
        user.is_teacher
        and teaches_subject(user, exam.subject_id)
        and teaches_grade(user, exam.grade_id)
    )


def _view_exam(user, exam):
    if user.is_admin:
        return True
    if user.is_teacher:
        return (
            exam.created_by_id == user.pk
            or teaches_subject(user, exam.subject_id)
            or teaches_grade(user, exam.grade_id)
        )
    return exam.is_published and is_enrolled(user, exam.grade_id)


def _edit_exam(user, exam):
    if user.is_admin:
        return True
    if not user.is_teacher:
        return False
    return exam.created_by_id == user.pk or teaches_subject(user, exam.subject_id)


def _delete_exam(user, exam):
    return user.is_admin or exam.created_by_id == user.pk


def _view_question(user, question):
    exam = question.exam
    if _edit_exam(user, exam):
        return True
    if not user.is_student or not _view_exam(user, exam):
        return False
    return StudentExam.objects.filter(student=user, exam=exam).exists()


def _start_attempt(user, exam):
    return user.is_student and is_enrolled(user, exam.grade_id)


def _owns_attempt(user, attempt):
    return attempt.student_id == user.pk


def _view_attempt(user, attempt):
    if _owns_attempt(user, attempt) or user.is_admin:
        return True
    return user.is_teacher and _view_exam(user, attempt.exam)


def _review_attempt(user, attempt):
    return _edit_exam(user, attempt.exam)


def _owns_notification(user, notification):
    return notification.user_id == user.pk


RULES = {
    Action.VIEW_DIRECTORY: lambda user, resource: True,
    Action.LIST_USERS: _staff,
    Action.VIEW_USER: _view_user,
    Action.UPDATE_USER: _self_or_admin,
    Action.MANAGE_USERS: _admin_only,
    Action.MANAGE_GRADES: _admin_only,
    Action.MANAGE_SUBJECTS: _admin_only,
    Action.ASSIGN_TEACHER: _admin_only,
    Action.ENROLL_STUDENT: _enroll_student,
    Action.CREATE_EXAM: _create_exam,
    Action.VIEW_EXAM: _view_exam,
    Action.EDIT_EXAM: _edit_exam,
    Action.DELETE_EXAM: _delete_exam,
    Action.VIEW_QUESTION: _view_question,
    Action.START_ATTEMPT: _start_attempt,
    Action.SUBMIT_ATTEMPT: _owns_attempt,
    Action.VIEW_ATTEMPT: _view_attempt,
    Action.REVIEW_ATTEMPT: _review_attempt,
    Action.MANAGE_NOTIFICATION: _owns_notification,
}

DENIAL_MESSAGES = {
    Action.LIST_USERS: 'Only administrators and teachers can list users',
    Action.UPDATE_USER: 'You can only update your own profile or must be an administrator',
    Action.MANAGE_USERS: 'Only administrators can manage users',
    Action.MANAGE_GRADES: 'Only administrators can manage grades',
    Action.MANAGE_SUBJECTS: 'Only administrators can manage subjects',
    Action.ASSIGN_TEACHER: 'Only administrators can assign teachers',
    Action.ENROLL_STUDENT: 'Teachers can only enroll students in grades they teach',
    Action.CREATE_EXAM: 'You can only create exams for subjects and grades you teach',
    Action.VIEW_EXAM: 'You do not have access to this exam',
    Action.EDIT_EXAM: 'You can only modify exams you created or whose subject you teach',
    Action.DELETE_EXAM: 'Only the exam creator or an administrator can do this',
    Action.VIEW_QUESTION: 'You do not have access to this question',
    Action.START_ATTEMPT: 'Only students enrolled in the exam grade can start this exam',
    Action.SUBMIT_ATTEMPT: 'You are not authorized to submit answers for this exam',
    Action.VIEW_ATTEMPT: 'You do not have access to this exam attempt',
    Action.REVIEW_ATTEMPT: 'You can only review attempts for exams you manage',
}


def is_authenticated(caller):
    return caller is not None and caller.is_authenticated


def require_authenticated(caller):
    if not is_authenticated(caller):
        raise Unauthorized()
    return caller


def can(caller, action, resource=None):
    if not is_authenticated(caller):
        return False
    return bool(RULES[action](caller, resource))


def authorize(caller, action, resource=None):
    """Raise Unauthorized/Forbidden unless the caller may perform the action."""
    require_authenticated(caller)
    if not RULES[action](caller, resource):
        logger.info(
            "Denied %s for user %s (%s) on %r",
            action.value, caller.pk, caller.role, resource,
        )
        raise Forbidden(DENIAL_MESSAGES.get(action))
    return caller


# ==============================================
# COLLECTION SCOPING
# ==============================================

def visible_exams(caller, queryset=None):
    queryset = Exam.objects.all() if queryset is None else queryset
    require_authenticated(caller)

    if caller.is_admin:
        return queryset
    if caller.is_teacher:
        subject_ids = TeacherSubject.objects.filter(
            teacher=caller, is_active=True
        ).values('subject_id')
        grade_ids = TeacherGrade.objects.filter(
            teacher=caller, is_active=True
        ).values('grade_id')
        return queryset.filter(
            Q(created_by=caller) | Q(subject_id__in=subject_ids) | Q(grade_id__in=grade_ids)
        )
    grade_ids = StudentGrade.objects.filter(
        student=caller, is_active=True
    ).values('grade_id')
    return queryset.filter(status=Exam.Status.PUBLISHED, grade_id__in=grade_ids)


def visible_attempts(caller, queryset=None):
    queryset = StudentExam.objects.all() if queryset is None else queryset
    require_authenticated(caller)

    if caller.is_admin:
        return queryset
    if caller.is_teacher:
        return queryset.filter(exam__in=visible_exams(caller))
    return queryset.filter(student=caller)


def visible_users(caller, queryset=None):
    authorize(caller, Action.LIST_USERS)
    return User.objects.all() if queryset is None else queryset
