import strawberry

from .. import exam_service, notifications, school_service
from ..attempt_service import AnswerSubmission
from .inputs import (
    EXAM_RENAMES,
    SUBJECT_RENAMES,
    AssignTeacherInput,
    CreateExamInput,
    CreateGradeInput,
    CreateQuestionInput,
    CreateSubjectInput,
    CreateUserInput,
    SubmitAnswerInput,
    SubmitExamInput,
    UpdateExamInput,
    UpdateGradeInput,
    UpdateQuestionInput,
    UpdateSubjectInput,
    UpdateUserInput,
    input_data,
)
from .results import (
    ExamResult,
    GradeResult,
    NotificationResult,
    OperationResult,
    QuestionResult,
    StudentAnswerResult,
    StudentExamResult,
    SubjectResult,
    UserResult,
    envelope,
)
from .types import Success


def _question_data(input):
    data = input_data(input)
    # Model stores "no difficulty" as an empty string
    if 'difficulty_level' in data and data['difficulty_level'] is None:
        data['difficulty_level'] = ''
    return data


@strawberry.type
class Mutation:
    # ==============================================
    # USERS
    # ==============================================

    @strawberry.mutation
    @envelope
    def create_user(self, info: strawberry.Info, input: CreateUserInput) -> UserResult:
        return school_service.create_user(info.context.caller, input_data(input))

    @strawberry.mutation
    @envelope
    def update_user(self, info: strawberry.Info, id: strawberry.ID, input: UpdateUserInput) -> UserResult:
        return school_service.update_user(info.context.caller, id, input_data(input))

    @strawberry.mutation
    @envelope
    def delete_user(self, info: strawberry.Info, id: strawberry.ID) -> OperationResult:
        school_service.delete_user(info.context.caller, id)
        return Success(message='User deleted successfully')

    # ==============================================
    # GRADES & SUBJECTS
    # ==============================================

    @strawberry.mutation
    @envelope
    def create_grade(self, info: strawberry.Info, input: CreateGradeInput) -> GradeResult:
        return school_service.create_grade(info.context.caller, input_data(input))

    @strawberry.mutation
    @envelope
    def update_grade(self, info: strawberry.Info, id: strawberry.ID, input: UpdateGradeInput) -> GradeResult:
        return school_service.update_grade(info.context.caller, id, input_data(input))

    @strawberry.mutation
    @envelope
    def delete_grade(self, info: strawberry.Info, id: strawberry.ID) -> OperationResult:
        school_service.delete_grade(info.context.caller, id)
        return Success(message='Grade deleted successfully')

    @strawberry.mutation
    @envelope
    def create_subject(self, info: strawberry.Info, input: CreateSubjectInput) -> SubjectResult:
        return school_service.create_subject(
            info.context.caller, input_data(input, SUBJECT_RENAMES)
        )

    @strawberry.mutation
    @envelope
    def update_subject(self, info: strawberry.Info, id: strawberry.ID, input: UpdateSubjectInput) -> SubjectResult:
        return school_service.update_subject(
            info.context.caller, id, input_data(input, SUBJECT_RENAMES)
        )

    @strawberry.mutation
    @envelope
    def delete_subject(self, info: strawberry.Info, id: strawberry.ID) -> OperationResult:
        school_service.delete_subject(info.context.caller, id)
        return Success(message='Subject deleted successfully')

    @strawberry.mutation
    @envelope
    def assign_teacher(self, info: strawberry.Info, input: AssignTeacherInput) -> OperationResult:
        school_service.assign_teacher(
            info.context.caller, input.teacher_id, input.subject_ids, input.grade_ids
        )
        return Success(message='Teacher assignments updated successfully')

    @strawberry.mutation
    @envelope
    def enroll_student(self, info: strawberry.Info, student_id: strawberry.ID,
                       grade_id: strawberry.ID) -> OperationResult:
        school_service.enroll_student(info.context.caller, student_id, grade_id)
        return Success(message='Student enrolled successfully')

    # ==============================================
    # EXAMS
    # ==============================================

    @strawberry.mutation
    @envelope
    def create_exam(self, info: strawberry.Info, input: CreateExamInput) -> ExamResult:
        return exam_service.create_exam(info.context.caller, input_data(input, EXAM_RENAMES))

    @strawberry.mutation
    @envelope
    def update_exam(self, info: strawberry.Info, id: strawberry.ID, input: UpdateExamInput) -> ExamResult:
        return exam_service.update_exam(info.context.caller, id, input_data(input, EXAM_RENAMES))

    @strawberry.mutation
    @envelope
    def delete_exam(self, info: strawberry.Info, id: strawberry.ID) -> OperationResult:
        exam_service.delete_exam(info.context.caller, id)
        return Success(message='Exam deleted successfully')

    @strawberry.mutation
    @envelope
    def publish_exam(self, info: strawberry.Info, id: strawberry.ID) -> ExamResult:
        return exam_service.publish_exam(info.context.caller, id)

    @strawberry.mutation
    @envelope
    def archive_exam(self, info: strawberry.Info, id: strawberry.ID) -> ExamResult:
        return exam_service.archive_exam(info.context.caller, id)

    # ==============================================
    # QUESTIONS
    # ==============================================

    @strawberry.mutation
    @envelope
    def create_question(self, info: strawberry.Info, exam_id: strawberry.ID,
                        input: CreateQuestionInput) -> QuestionResult:
        return exam_service.create_question(info.context.caller, exam_id, _question_data(input))

    @strawberry.mutation
    @envelope
    def update_question(self, info: strawberry.Info, id: strawberry.ID,
                        input: UpdateQuestionInput) -> QuestionResult:
        return exam_service.update_question(info.context.caller, id, _question_data(input))

    @strawberry.mutation
    @envelope
    def delete_question(self, info: strawberry.Info, id: strawberry.ID) -> OperationResult:
        exam_service.delete_question(info.context.caller, id)
        return Success(message='Question deleted successfully')

    # ==============================================
    # ATTEMPTS
    # ==============================================

    @strawberry.mutation
    @envelope
    def start_exam(self, info: strawberry.Info, exam_id: strawberry.ID) -> StudentExamResult:
        return info.context.attempts.start_attempt(info.context.caller, exam_id)

    @strawberry.mutation
    @envelope
    def submit_answer(self, info: strawberry.Info, input: SubmitAnswerInput) -> StudentAnswerResult:
        return info.context.attempts.submit_answer(
            info.context.caller,
            input.student_exam_id,
            input.question_id,
            selected_answer=input.selected_answer,
            is_marked=input.is_marked,
            time_taken=input.time_taken,
        )

    @strawberry.mutation
    @envelope
    def submit_exam(self, info: strawberry.Info, input: SubmitExamInput) -> StudentExamResult:
        answers = [
            AnswerSubmission(
                question_id=answer.question_id,
                selected_answer=answer.selected_answer,
                is_marked=answer.is_marked,
                time_taken=answer.time_taken,
            )
            for answer in input.answers or []
        ]
        return info.context.attempts.submit_exam(info.context.caller, input.student_exam_id, answers)

    @strawberry.mutation
    @envelope
    def review_attempt(self, info: strawberry.Info, student_exam_id: strawberry.ID) -> StudentExamResult:
        return info.context.attempts.review_attempt(info.context.caller, student_exam_id)

    # ==============================================
    # NOTIFICATIONS
    # ==============================================

    @strawberry.mutation
    @envelope
    def mark_notification_read(self, info: strawberry.Info, id: strawberry.ID) -> NotificationResult:
        return notifications.mark_read(info.context.caller, id)
