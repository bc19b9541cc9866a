"""
Exam and question authoring.

Exams move DRAFT -> PUBLISHED -> ARCHIVED. Questions can only change while
their exam is a draft, and an exam's subject and grade are frozen once any
student has started it.
"""
import logging

from django.db import transaction
from django.db.models import Q

from .errors import (
    AlreadyExists,
    BusinessRuleViolation,
    ValidationFailed,
    get_object_or_not_found,
    raise_for_serializer,
)
from .models import Exam, Question
from .pagination import order_queryset
from .permissions import Action, authorize, require_authenticated, visible_exams
from .serializers import ExamWriteSerializer, QuestionWriteSerializer

logger = logging.getLogger(__name__)

EXAM_SORT_FIELDS = {
    'TITLE': 'title',
    'CREATED_AT': 'created_at',
    'START_DATE': 'start_date',
    'END_DATE': 'end_date',
    'STATUS': 'status',
}


def _get_exam(exam_id):
    return get_object_or_not_found(
        Exam.objects.select_related('subject', 'grade', 'created_by'), exam_id, 'Exam'
    )


def _get_question(question_id):
    return get_object_or_not_found(
        Question.objects.select_related('exam'), question_id, 'Question'
    )


# ==============================================
# EXAMS
# ==============================================

def get_exam(caller, exam_id):
    require_authenticated(caller)
    exam = _get_exam(exam_id)
    authorize(caller, Action.VIEW_EXAM, exam)
    return exam


def list_exams(caller, subject_id=None, grade_id=None, status=None, created_by_id=None,
               start_date_from=None, start_date_to=None, search=None,
               sort_field=None, direction='ASC'):
    queryset = visible_exams(caller).select_related('subject', 'grade', 'created_by')

    if subject_id is not None:
        queryset = queryset.filter(subject_id=subject_id)
    if grade_id is not None:
        queryset = queryset.filter(grade_id=grade_id)
    if status:
        queryset = queryset.filter(status=status)
    if created_by_id is not None:
        queryset = queryset.filter(created_by_id=created_by_id)
    if start_date_from:
        queryset = queryset.filter(start_date__gte=start_date_from)
    if start_date_to:
        queryset = queryset.filter(start_date__lte=start_date_to)
    if search:
        queryset = queryset.filter(Q(title__icontains=search) | Q(description__icontains=search))

    return order_queryset(queryset, EXAM_SORT_FIELDS, sort_field, direction, default=['created_at'])


def create_exam(caller, data):
    require_authenticated(caller)
    serializer = ExamWriteSerializer(data=data)
    validated = raise_for_serializer(serializer)

    authorize(caller, Action.CREATE_EXAM, Exam(
        subject=validated['subject'],
        grade=validated['grade'],
        created_by=caller,
    ))

    exam = serializer.save(created_by=caller, status=Exam.Status.DRAFT)
    logger.info("User %s created exam %s", caller.pk, exam.pk)
    return exam


def update_exam(caller, exam_id, data):
    require_authenticated(caller)
    exam = _get_exam(exam_id)
    authorize(caller, Action.EDIT_EXAM, exam)

    moves_exam = (
        ('subject' in data and str(data['subject']) != str(exam.subject_id))
        or ('grade' in data and str(data['grade']) != str(exam.grade_id))
    )
    if moves_exam and exam.student_exams.exists():
        raise BusinessRuleViolation(
            'Cannot change subject or grade after students have started the exam'
        )

    serializer = ExamWriteSerializer(exam, data=data, partial=True)
    validated = raise_for_serializer(serializer)

    if moves_exam:
        # The new placement must be one the caller could create an exam in
        authorize(caller, Action.CREATE_EXAM, Exam(
            subject=validated.get('subject', exam.subject),
            grade=validated.get('grade', exam.grade),
            created_by=exam.created_by,
        ))

    return serializer.save()


def publish_exam(caller, exam_id):
    require_authenticated(caller)
    exam = _get_exam(exam_id)
    authorize(caller, Action.EDIT_EXAM, exam)

    if exam.status == Exam.Status.ARCHIVED:
        raise BusinessRuleViolation('Archived exams cannot be published again')
    if not exam.questions.exists():
        raise ValidationFailed('Cannot publish an exam with no questions')

    exam.status = Exam.Status.PUBLISHED
    exam.save(update_fields=['status', 'updated_at'])
    logger.info("Exam %s published by user %s", exam.pk, caller.pk)
    return exam


def archive_exam(caller, exam_id):
    require_authenticated(caller)
    exam = _get_exam(exam_id)
    authorize(caller, Action.DELETE_EXAM, exam)

    exam.status = Exam.Status.ARCHIVED
    exam.save(update_fields=['status', 'updated_at'])
    logger.info("Exam %s archived by user %s", exam.pk, caller.pk)
    return exam


def delete_exam(caller, exam_id):
    require_authenticated(caller)
    exam = _get_exam(exam_id)
    authorize(caller, Action.DELETE_EXAM, exam)

    if exam.student_exams.exists():
        raise BusinessRuleViolation('Cannot delete an exam that students have already started')

    with transaction.atomic():
        exam.questions.all().delete()
        exam.delete()
    logger.info("Exam %s deleted by user %s", exam_id, caller.pk)
    return True


# ==============================================
# QUESTIONS
# ==============================================

def _ensure_draft(exam, verb):
    if not exam.is_draft:
        raise BusinessRuleViolation(f"Questions can only be {verb} exams in draft status")


def _ensure_number_free(exam, question_number, exclude_pk=None):
    clash = Question.objects.filter(exam=exam, question_number=question_number)
    if exclude_pk is not None:
        clash = clash.exclude(pk=exclude_pk)
    if clash.exists():
        raise AlreadyExists(
            f"Question number {question_number} already exists for this exam",
            path=['questionNumber'],
        )


def get_question(caller, question_id):
    require_authenticated(caller)
    question = _get_question(question_id)
    authorize(caller, Action.VIEW_QUESTION, question)
    return question


def list_exam_questions(caller, exam_id):
    require_authenticated(caller)
    exam = _get_exam(exam_id)
    probe = Question(exam=exam)
    authorize(caller, Action.VIEW_QUESTION, probe)
    return exam.questions.order_by('question_number')


def create_question(caller, exam_id, data):
    require_authenticated(caller)
    exam = _get_exam(exam_id)
    authorize(caller, Action.EDIT_EXAM, exam)
    _ensure_draft(exam, 'added to')

    serializer = QuestionWriteSerializer(data=data)
    validated = raise_for_serializer(serializer)
    _ensure_number_free(exam, validated['question_number'])

    question = serializer.save(exam=exam)
    logger.debug("Question %s added to exam %s", question.pk, exam.pk)
    return question


def update_question(caller, question_id, data):
    require_authenticated(caller)
    question = _get_question(question_id)
    authorize(caller, Action.EDIT_EXAM, question.exam)
    _ensure_draft(question.exam, 'updated for')

    serializer = QuestionWriteSerializer(question, data=data, partial=True)
    validated = raise_for_serializer(serializer)
    if 'question_number' in validated:
        _ensure_number_free(question.exam, validated['question_number'], exclude_pk=question.pk)

    return serializer.save()


def delete_question(caller, question_id):
    require_authenticated(caller)
    question = _get_question(question_id)
    authorize(caller, Action.EDIT_EXAM, question.exam)
    _ensure_draft(question.exam, 'deleted for')

    question.delete()
    return True
