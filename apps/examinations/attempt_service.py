"""
Exam attempt lifecycle.

    IN_PROGRESS --submit_exam / expire--> COMPLETED --review_attempt--> GRADED

Time limits are enforced lazily: there is no background timer. The first
write that arrives after an attempt's duration has elapsed runs the expiry
transition (which finalizes and scores the attempt) and is then rejected
with TIME_EXPIRED. Finalization commits before the rejection is raised.
"""
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from django.db import transaction
from django.utils import timezone

from .errors import (
    AlreadyExists,
    BusinessRuleViolation,
    ExamAlreadyCompleted,
    Forbidden,
    QuestionNotInExam,
    TimeExpired,
    ValidationFailed,
    get_object_or_not_found,
)
from .grading_service import GradingService
from .models import Exam, Question, StudentAnswer, StudentExam
from .notifications import notify_attempt_completed
from .permissions import Action, authorize, require_authenticated, visible_attempts

logger = logging.getLogger(__name__)


@dataclass
class AnswerSubmission:
    question_id: str
    selected_answer: Optional[str] = None
    is_marked: Optional[bool] = None
    time_taken: Optional[int] = None


class ExamAttemptService:
    def __init__(self, grading_service=None, clock=timezone.now):
        self.grading = grading_service or GradingService()
        self.clock = clock

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def start_attempt(self, caller, exam_id):
        require_authenticated(caller)
        if not caller.is_student:
            raise Forbidden('Only students can start exams')
        exam = get_object_or_not_found(Exam.objects.all(), exam_id, 'Exam')
        authorize(caller, Action.START_ATTEMPT, exam)

        if not exam.is_published:
            raise BusinessRuleViolation('Only published exams can be started')

        now = self.clock()
        if exam.start_date and now < exam.start_date:
            raise BusinessRuleViolation('This exam is not open yet')
        if exam.end_date and now > exam.end_date:
            raise BusinessRuleViolation('This exam has closed')

        attempt, created = StudentExam.objects.get_or_create(
            exam=exam,
            student=caller,
            defaults={
                'status': StudentExam.Status.IN_PROGRESS,
                'start_time': now,
                'score': 0,
            },
        )
        if not created:
            raise AlreadyExists('You have already started this exam')

        logger.info("Student %s started exam %s (attempt %s)", caller.pk, exam.pk, attempt.pk)
        return attempt

    def submit_answer(self, caller, attempt_id, question_id,
                      selected_answer=None, is_marked=None, time_taken=None):
        require_authenticated(caller)
        attempt = self._get_attempt(attempt_id)
        authorize(caller, Action.SUBMIT_ATTEMPT, attempt)

        if not attempt.is_in_progress:
            raise ExamAlreadyCompleted('Cannot submit answers for an exam that is not in progress')

        question = get_object_or_not_found(Question.objects.all(), question_id, 'Question')
        if question.exam_id != attempt.exam_id:
            raise QuestionNotInExam()

        now = self.clock()
        if self.is_expired(attempt, now):
            self.expire(attempt, now)
            raise TimeExpired()

        if not attempt.exam.is_published:
            raise BusinessRuleViolation('Answers can only be submitted for published exams')

        _validate_time_taken(time_taken)
        return self._upsert_answer(attempt, question, selected_answer, is_marked, time_taken, now)

    def submit_exam(self, caller, attempt_id, answers=None):
        require_authenticated(caller)
        attempt = self._get_attempt(attempt_id)
        authorize(caller, Action.SUBMIT_ATTEMPT, attempt)

        if not attempt.is_in_progress:
            raise ExamAlreadyCompleted()

        now = self.clock()
        if self.is_expired(attempt, now):
            self.expire(attempt, now)
            raise TimeExpired()

        answers = answers or []
        questions = {question.pk: question for question in attempt.exam.questions.all()}
        resolved = []
        for submission in answers:
            try:
                question = questions[int(submission.question_id)]
            except (KeyError, TypeError, ValueError):
                raise QuestionNotInExam('One or more questions do not belong to this exam')
            _validate_time_taken(submission.time_taken)
            resolved.append((question, submission))

        question_ids = [question.pk for question, _ in resolved]
        if len(question_ids) != len(set(question_ids)):
            raise ValidationFailed('Each question can only be answered once per submission', path=['answers'])

        with transaction.atomic():
            for question, submission in resolved:
                self._upsert_answer(
                    attempt,
                    question,
                    submission.selected_answer,
                    submission.is_marked,
                    submission.time_taken,
                    now,
                )
            return self._finalize(attempt.pk, now)

    def expire(self, attempt, now=None):
        """Close an attempt whose time budget ran out."""
        now = now or self.clock()
        logger.info("Attempt %s exceeded its time limit, finalizing", attempt.pk)
        return self._finalize(attempt.pk, now)

    def review_attempt(self, caller, attempt_id):
        require_authenticated(caller)
        attempt = self._get_attempt(attempt_id)
        authorize(caller, Action.REVIEW_ATTEMPT, attempt)

        if attempt.status != StudentExam.Status.COMPLETED:
            raise BusinessRuleViolation('Only completed attempts can be marked as graded')

        attempt.status = StudentExam.Status.GRADED
        attempt.save(update_fields=['status'])
        logger.info("Attempt %s marked as graded by user %s", attempt.pk, caller.pk)
        return attempt

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_attempt(self, caller, attempt_id):
        require_authenticated(caller)
        attempt = self._get_attempt(attempt_id)
        authorize(caller, Action.VIEW_ATTEMPT, attempt)
        return attempt

    def list_attempts(self, caller, exam_id=None):
        queryset = visible_attempts(caller).select_related('exam', 'student')
        if exam_id is not None:
            queryset = queryset.filter(exam_id=exam_id)
        return queryset

    def is_expired(self, attempt, now=None):
        now = now or self.clock()
        return now - attempt.start_time > timedelta(minutes=attempt.exam.duration_minutes)

    def remaining_seconds(self, attempt, now=None):
        if not attempt.is_in_progress:
            return 0
        now = now or self.clock()
        deadline = attempt.start_time + timedelta(minutes=attempt.exam.duration_minutes)
        return max(0, int((deadline - now).total_seconds()))

    def summarize(self, attempt):
        return self.grading.summarize(
            list(attempt.exam.questions.all()),
            list(attempt.answers.all()),
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _get_attempt(self, attempt_id):
        queryset = StudentExam.objects.select_related('exam', 'exam__created_by', 'student')
        return get_object_or_not_found(queryset, attempt_id, 'Student exam')

    def _upsert_answer(self, attempt, question, selected_answer, is_marked, time_taken, now):
        answer, created = StudentAnswer.objects.get_or_create(
            student_exam=attempt,
            question=question,
            defaults={
                'selected_answer': selected_answer,
                'is_correct': self.grading.grade_answer(question, selected_answer),
                'is_marked': bool(is_marked),
                'time_taken': time_taken,
                'answered_at': now,
            },
        )
        if created:
            return answer

        # Omitted fields keep their stored values
        if selected_answer is not None:
            answer.selected_answer = selected_answer
            answer.is_correct = self.grading.grade_answer(question, selected_answer)
        if is_marked is not None:
            answer.is_marked = is_marked
        if time_taken is not None:
            answer.time_taken = time_taken
        answer.answered_at = now
        answer.save()
        return answer

    def _finalize(self, attempt_id, now):
        with transaction.atomic():
            attempt = StudentExam.objects.select_for_update().get(pk=attempt_id)
            if not attempt.is_in_progress:
                raise ExamAlreadyCompleted()

            exam = attempt.exam
            summary = self.grading.summarize(
                list(exam.questions.all()),
                list(attempt.answers.all()),
            )

            attempt.end_time = now
            attempt.time_spent = max(0, int((now - attempt.start_time).total_seconds()))
            attempt.score = summary.score
            attempt.is_passed = self.grading.is_passed(summary.score, exam.passmark)
            attempt.status = StudentExam.Status.COMPLETED
            attempt.save(update_fields=['end_time', 'time_spent', 'score', 'is_passed', 'status'])

            notify_attempt_completed(attempt)

        logger.info(
            "Attempt %s completed: %s/%s points (%.2f%%), passed=%s",
            attempt.pk, summary.earned_points, summary.total_points, attempt.score, attempt.is_passed,
        )
        return attempt


def _validate_time_taken(time_taken):
    if time_taken is not None and time_taken < 0:
        raise ValidationFailed('timeTaken cannot be negative', path=['timeTaken'])
