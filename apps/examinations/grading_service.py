"""
Grading service with Strategy Pattern implementation.

Architecture:
- BaseGrader: Abstract interface for per-question grading strategies
- ExactMatchGrader: Objective questions graded by exact string comparison
- GradingService: Aggregates per-question results into an attempt score

Only objective question types are auto-gradable. Everything else is left
ungraded (None) and contributes nothing to the earned points.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from django.conf import settings

from .models import Question

logger = logging.getLogger(__name__)

AUTO_GRADABLE_TYPES = frozenset({
    Question.QuestionType.MULTIPLE_CHOICE,
    Question.QuestionType.TRUE_FALSE,
})


def is_auto_gradable(question):
    return question.question_type in AUTO_GRADABLE_TYPES


class BaseGrader(ABC):
    """Strategy interface for grading a single answer."""

    @abstractmethod
    def grade_answer(self, question, selected_answer):
        """
        Returns True/False when the answer can be graded automatically,
        None when it cannot (unsupported type or no answer given).
        """


class ExactMatchGrader(BaseGrader):
    """For multiple choice and true/false - strict matching against the stored answer."""

    def grade_answer(self, question, selected_answer):
        if selected_answer is None or not is_auto_gradable(question):
            return None
        return selected_answer == question.correct_answer


GRADERS = {
    'exact': ExactMatchGrader,
}


@dataclass(frozen=True)
class ScoreSummary:
    total_points: int
    earned_points: int
    answered_count: int
    marked_count: int
    score: float


class GradingService:
    """
    Orchestrates grading with strategy selection.
    Configurable via settings.GRADER_TYPE.
    """

    def __init__(self, grader_type=None):
        grader_type = grader_type or getattr(settings, 'GRADER_TYPE', 'exact')
        try:
            self.grader = GRADERS[grader_type]()
        except KeyError:
            logger.warning("Unknown GRADER_TYPE %r, falling back to exact matching", grader_type)
            self.grader = ExactMatchGrader()

    def grade_answer(self, question, selected_answer):
        return self.grader.grade_answer(question, selected_answer)

    @staticmethod
    def summarize(questions, answers):
        """
        Tally an attempt.

        Every question counts toward the denominator; only answers whose
        correctness is exactly True earn their question's points.
        """
        answers_by_question = {answer.question_id: answer for answer in answers}

        total_points = 0
        earned_points = 0
        answered_count = 0
        for question in questions:
            total_points += question.points
            answer = answers_by_question.get(question.id)
            if answer is None:
                continue
            answered_count += 1
            if answer.is_correct is True:
                earned_points += question.points

        score = (earned_points / total_points) * 100 if total_points > 0 else 0.0

        return ScoreSummary(
            total_points=total_points,
            earned_points=earned_points,
            answered_count=answered_count,
            marked_count=sum(1 for answer in answers if answer.is_marked),
            score=score,
        )

    @staticmethod
    def is_passed(score, passmark):
        if passmark is None:
            return None
        return score >= passmark
