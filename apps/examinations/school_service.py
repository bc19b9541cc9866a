"""
Directory management: users, grades, subjects, teacher assignments and
student enrollment. Plain role-gated CRUD over the ORM.
"""
import logging

from django.db import transaction
from django.db.models import Q

from .errors import (
    AlreadyExists,
    BusinessRuleViolation,
    Forbidden,
    NotFound,
    get_object_or_not_found,
    raise_for_serializer,
)
from .models import Grade, StudentGrade, Subject, TeacherGrade, TeacherSubject, User
from .pagination import order_queryset
from .permissions import Action, authorize, require_authenticated, visible_users
from .serializers import GradeSerializer, SubjectSerializer, UserWriteSerializer

logger = logging.getLogger(__name__)

USER_SORT_FIELDS = {
    'FIRST_NAME': 'first_name',
    'LAST_NAME': 'last_name',
    'EMAIL': 'email',
    'CREATED_AT': 'created_at',
    'ROLE': 'role',
    'STATUS': 'status',
}

GRADE_SORT_FIELDS = {
    'NAME': 'name',
    'ACADEMIC_YEAR': 'academic_year',
    'CREATED_AT': 'created_at',
}

SUBJECT_SORT_FIELDS = {
    'CODE': 'code',
    'NAME': 'name',
    'GRADE_NAME': 'grade__name',
    'CREATED_AT': 'created_at',
}


# ==============================================
# USERS
# ==============================================

def get_user(caller, user_id):
    require_authenticated(caller)
    user = get_object_or_not_found(User.objects.all(), user_id, 'User')
    authorize(caller, Action.VIEW_USER, user)
    return user


def list_users(caller, role=None, status=None, search=None, sort_field=None, direction='ASC'):
    queryset = visible_users(caller)
    if role:
        queryset = queryset.filter(role=role)
    if status:
        queryset = queryset.filter(status=status)
    if search:
        queryset = queryset.filter(
            Q(first_name__icontains=search)
            | Q(last_name__icontains=search)
            | Q(email__icontains=search)
        )
    return order_queryset(queryset, USER_SORT_FIELDS, sort_field, direction, default=['last_name'])


def create_user(caller, data):
    authorize(caller, Action.MANAGE_USERS)
    serializer = UserWriteSerializer(data=data)
    raise_for_serializer(serializer)
    user = serializer.save()
    logger.info("User %s created %s account %s", caller.pk, user.role, user.pk)
    return user


def update_user(caller, user_id, data):
    require_authenticated(caller)
    user = get_object_or_not_found(User.objects.all(), user_id, 'User')
    authorize(caller, Action.UPDATE_USER, user)

    if ('role' in data or 'status' in data) and not caller.is_admin:
        raise Forbidden('Only administrators can change roles or account status')

    serializer = UserWriteSerializer(user, data=data, partial=True)
    raise_for_serializer(serializer)
    return serializer.save()


def delete_user(caller, user_id):
    authorize(caller, Action.MANAGE_USERS)
    user = get_object_or_not_found(User.objects.all(), user_id, 'User')

    if user.pk == caller.pk:
        raise BusinessRuleViolation('You cannot delete your own account')
    if user.created_exams.exists():
        raise BusinessRuleViolation('Cannot delete a user who has created exams')

    user.delete()
    logger.info("User %s deleted account %s", caller.pk, user_id)
    return True


# ==============================================
# GRADES
# ==============================================

def get_grade(caller, grade_id):
    authorize(caller, Action.VIEW_DIRECTORY)
    return get_object_or_not_found(Grade.objects.all(), grade_id, 'Grade')


def list_grades(caller, is_active=None, search=None, sort_field=None, direction='ASC'):
    authorize(caller, Action.VIEW_DIRECTORY)
    queryset = Grade.objects.all()
    if is_active is not None:
        queryset = queryset.filter(is_active=is_active)
    if search:
        queryset = queryset.filter(Q(name__icontains=search) | Q(description__icontains=search))
    return order_queryset(queryset, GRADE_SORT_FIELDS, sort_field, direction, default=['name'])


def create_grade(caller, data):
    authorize(caller, Action.MANAGE_GRADES)
    serializer = GradeSerializer(data=data)
    raise_for_serializer(serializer)
    return serializer.save()


def update_grade(caller, grade_id, data):
    authorize(caller, Action.MANAGE_GRADES)
    grade = get_object_or_not_found(Grade.objects.all(), grade_id, 'Grade')
    serializer = GradeSerializer(grade, data=data, partial=True)
    raise_for_serializer(serializer)
    return serializer.save()


def delete_grade(caller, grade_id):
    authorize(caller, Action.MANAGE_GRADES)
    grade = get_object_or_not_found(Grade.objects.all(), grade_id, 'Grade')

    in_use = (
        grade.student_grades.exists()
        or grade.teacher_grades.exists()
        or grade.exams.exists()
        or grade.subjects.exists()
    )
    if in_use:
        raise BusinessRuleViolation(
            'Cannot delete a grade that has students, teachers, subjects or exams'
        )

    grade.delete()
    return True


# ==============================================
# SUBJECTS
# ==============================================

def get_subject(caller, subject_id):
    authorize(caller, Action.VIEW_DIRECTORY)
    return get_object_or_not_found(Subject.objects.select_related('grade'), subject_id, 'Subject')


def get_subject_by_code(caller, code):
    authorize(caller, Action.VIEW_DIRECTORY)
    try:
        return Subject.objects.select_related('grade').get(code=code)
    except Subject.DoesNotExist:
        raise NotFound('Subject not found', path=['subjectByCode'])


def list_subjects(caller, is_active=None, search=None, grade_id=None, sort_field=None, direction='ASC'):
    authorize(caller, Action.VIEW_DIRECTORY)
    queryset = Subject.objects.select_related('grade')
    if is_active is not None:
        queryset = queryset.filter(is_active=is_active)
    if grade_id is not None:
        queryset = queryset.filter(grade_id=grade_id)
    if search:
        queryset = queryset.filter(
            Q(code__icontains=search)
            | Q(name__icontains=search)
            | Q(description__icontains=search)
            | Q(grade__name__icontains=search)
        )
    return order_queryset(queryset, SUBJECT_SORT_FIELDS, sort_field, direction, default=['-created_at'])


def create_subject(caller, data):
    authorize(caller, Action.MANAGE_SUBJECTS)
    serializer = SubjectSerializer(data=data)
    raise_for_serializer(serializer)
    return serializer.save()


def update_subject(caller, subject_id, data):
    authorize(caller, Action.MANAGE_SUBJECTS)
    subject = get_object_or_not_found(Subject.objects.all(), subject_id, 'Subject')
    serializer = SubjectSerializer(subject, data=data, partial=True)
    raise_for_serializer(serializer)
    return serializer.save()


def delete_subject(caller, subject_id):
    authorize(caller, Action.MANAGE_SUBJECTS)
    subject = get_object_or_not_found(Subject.objects.all(), subject_id, 'Subject')
    if subject.exams.exists():
        raise BusinessRuleViolation('Cannot delete a subject that has exams')
    subject.delete()
    return True


# ==============================================
# ASSIGNMENTS
# ==============================================

def _missing_ids(model, wanted):
    found = set(model.objects.filter(pk__in=wanted).values_list('pk', flat=True))
    return sorted(wanted - found)


def assign_teacher(caller, teacher_id, subject_ids, grade_ids):
    """
    Replace a teacher's subject and grade assignments.
    Old rows are removed and new ones created atomically.
    """
    authorize(caller, Action.ASSIGN_TEACHER)
    teacher = get_object_or_not_found(User.objects.all(), teacher_id, 'Teacher')
    if not teacher.is_teacher:
        raise BusinessRuleViolation(f"User {teacher_id} is not a teacher", path=['teacherId'])

    try:
        subject_pks = {int(pk) for pk in subject_ids}
        grade_pks = {int(pk) for pk in grade_ids}
    except (TypeError, ValueError):
        raise NotFound('Subjects or grades not found')

    missing_subjects = _missing_ids(Subject, subject_pks)
    missing_grades = _missing_ids(Grade, grade_pks)
    if missing_subjects:
        raise NotFound(
            f"Subjects not found: {', '.join(map(str, missing_subjects))}",
            path=['subjectIds'],
        )
    if missing_grades:
        raise NotFound(
            f"Grades not found: {', '.join(map(str, missing_grades))}",
            path=['gradeIds'],
        )

    with transaction.atomic():
        TeacherSubject.objects.filter(teacher=teacher).delete()
        TeacherGrade.objects.filter(teacher=teacher).delete()
        TeacherSubject.objects.bulk_create(
            TeacherSubject(teacher=teacher, subject_id=pk) for pk in subject_pks
        )
        TeacherGrade.objects.bulk_create(
            TeacherGrade(teacher=teacher, grade_id=pk) for pk in grade_pks
        )

    logger.info(
        "Teacher %s assigned to subjects %s and grades %s",
        teacher.pk, sorted(subject_pks), sorted(grade_pks),
    )
    return teacher


def enroll_student(caller, student_id, grade_id):
    require_authenticated(caller)
    grade = get_object_or_not_found(Grade.objects.all(), grade_id, 'Grade')
    authorize(caller, Action.ENROLL_STUDENT, grade)

    student = get_object_or_not_found(User.objects.all(), student_id, 'Student')
    if not student.is_student:
        raise BusinessRuleViolation('User is not a student')

    if StudentGrade.objects.filter(student=student, grade=grade).exists():
        raise AlreadyExists('Student is already enrolled in this grade')

    StudentGrade.objects.create(student=student, grade=grade)
    logger.info("Student %s enrolled in grade %s", student.pk, grade.pk)
    return student
