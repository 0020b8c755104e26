import logging
import uuid
from decimal import ROUND_HALF_UP, Decimal

from django.db import transaction
from django.utils import timezone

from apps.courses.models import Course
from apps.enrollments.models import Enrollment
from apps.users.permissions import is_admin_user

from .gate import AssessmentRequirements, AssignmentOutcome, QuizOutcome
from .models import (
    Assignment,
    AssignmentSubmission,
    Quiz,
    QuizAnswer,
    QuizAttempt,
    QuizQuestion,
)

logger = logging.getLogger(__name__)


class AssessmentError(Exception):
    pass


class AssessmentGateService:
    """Reads the assessment facts the completion gate needs."""

    @staticmethod
    def get_requirements(course: Course) -> AssessmentRequirements:
        return AssessmentRequirements(
            has_quiz=Quiz.objects.filter(course=course, is_required=True).exists(),
            has_assignment=Assignment.objects.filter(
                course=course, is_required=True
            ).exists(),
        )

    @staticmethod
    def get_quiz_outcome(enrollment: Enrollment) -> QuizOutcome:
        # Any passing attempt counts; later failures never revoke a pass
        attempts = QuizAttempt.objects.filter(
            enrollment=enrollment, quiz__course_id=enrollment.course_id
        )
        return QuizOutcome(
            passed=attempts.filter(passed=True).exists(),
            awaiting_grading=attempts.filter(passed__isnull=True).exists(),
        )

    @staticmethod
    def get_assignment_outcome(enrollment: Enrollment) -> AssignmentOutcome:
        status = (
            AssignmentSubmission.objects.filter(
                enrollment=enrollment, assignment__course_id=enrollment.course_id
            )
            .values_list("status", flat=True)
            .first()
        )
        return AssignmentOutcome(status=status)


def _parse_id(value, label: str) -> str:
    try:
        return str(uuid.UUID(str(value)))
    except (TypeError, ValueError):
        raise AssessmentError(f"Invalid {label} id: {value!r}")


def score_percentage(earned_points: int, total_points: int) -> Decimal:
    """Points-weighted score, rounded half up to two decimals."""
    if total_points <= 0:
        return Decimal("0.00")
    return (Decimal(earned_points) * 100 / Decimal(total_points)).quantize(
        Decimal("0.01"), rounding=ROUND_HALF_UP
    )


class QuizService:
    """Grades quiz attempts from the learner's answers."""

    @staticmethod
    def submit_attempt(enrollment: Enrollment, answers: dict) -> QuizAttempt:
        """
        Stores an attempt for ``answers`` ({question_id: option_id or text}).

        Choice questions are graded against the stored correct options. If
        the quiz has short-answer questions the attempt waits for an
        instructor (``passed`` stays ``None``). A pass re-evaluates the
        enrollment, which may complete the course.
        """
        from apps.enrollments.services import CompletionService

        if not isinstance(answers, dict):
            raise AssessmentError("Answers must map question ids to responses.")
        try:
            quiz = Quiz.objects.get(course_id=enrollment.course_id)
        except Quiz.DoesNotExist:
            raise AssessmentError(f"Course {enrollment.course_id} has no quiz.")

        questions = list(
            quiz.questions.prefetch_related("options").order_by("order", "created_at")
        )
        if not questions:
            raise AssessmentError(f"Quiz {quiz.id} has no questions.")

        responses = {_parse_id(key, "question"): value for key, value in answers.items()}
        unknown = set(responses) - {str(question.id) for question in questions}
        if unknown:
            raise AssessmentError(
                f"Question(s) {', '.join(sorted(unknown))} are not part of quiz {quiz.id}."
            )

        now = timezone.now()
        rows = []
        for question in questions:
            response = responses.get(str(question.id))
            response = "" if response is None else str(response).strip()
            if question.question_type == QuizQuestion.QuestionType.SHORT_ANSWER:
                rows.append(QuizAnswer(question=question, text_answer=response))
                continue

            selected = None
            if response:
                option_id = _parse_id(response, "option")
                selected = next(
                    (option for option in question.options.all() if str(option.id) == option_id),
                    None,
                )
                if selected is None:
                    raise AssessmentError(
                        f"Option {option_id} does not belong to question {question.id}."
                    )
            is_correct = bool(selected and selected.is_correct)
            rows.append(
                QuizAnswer(
                    question=question,
                    selected_option=selected,
                    is_correct=is_correct,
                    points_earned=question.points if is_correct else 0,
                    graded_at=now,
                )
            )

        awaiting_grading = any(row.is_correct is None for row in rows)
        score, passed = None, None
        if not awaiting_grading:
            score = score_percentage(
                sum(row.points_earned for row in rows),
                sum(question.points for question in questions),
            )
            passed = score >= Decimal(quiz.passing_percentage)

        with transaction.atomic():
            attempt = QuizAttempt.objects.create(
                quiz=quiz,
                enrollment=enrollment,
                score_percentage=score,
                passed=passed,
                completed_at=now,
                graded_at=None if awaiting_grading else now,
            )
            for row in rows:
                row.attempt = attempt
            QuizAnswer.objects.bulk_create(rows)

        if awaiting_grading:
            logger.info(f"Quiz attempt {attempt.id} for E:{enrollment.id} awaits grading")
        else:
            logger.info(
                f"Quiz attempt {attempt.id} recorded for E:{enrollment.id}: {score}% "
                f"({'passed' if passed else 'failed'}, pass mark {quiz.passing_percentage}%)"
            )

        if passed:
            CompletionService.evaluate(enrollment)
        return attempt

    @staticmethod
    def grade_answers(attempt: QuizAttempt, grader, grades: dict) -> QuizAttempt:
        """
        Marks short answers correct or incorrect ({answer_id: bool}). Once
        every answer is graded the attempt gets its score and outcome; a pass
        re-evaluates the enrollment.
        """
        from apps.enrollments.services import CompletionService

        if not grades:
            raise AssessmentError("No grades given.")

        now = timezone.now()
        with transaction.atomic():
            attempt = (
                QuizAttempt.objects.select_for_update()
                .select_related("quiz", "enrollment")
                .get(pk=attempt.pk)
            )
            if not attempt.awaiting_grading:
                raise AssessmentError(f"Quiz attempt {attempt.id} is already graded.")

            answers = {
                str(answer.id): answer
                for answer in attempt.answers.select_related("question")
            }
            for answer_id, correct in grades.items():
                answer = answers.get(_parse_id(answer_id, "answer"))
                if (
                    answer is None
                    or answer.question.question_type != QuizQuestion.QuestionType.SHORT_ANSWER
                ):
                    raise AssessmentError(
                        f"Answer {answer_id} is not a short answer of attempt {attempt.id}."
                    )
                answer.is_correct = bool(correct)
                answer.points_earned = answer.question.points if correct else 0
                answer.graded_by = grader
                answer.graded_at = now
                answer.save(
                    update_fields=[
                        "is_correct", "points_earned", "graded_by", "graded_at", "updated_at",
                    ]
                )

            if all(answer.is_correct is not None for answer in answers.values()):
                attempt.score_percentage = score_percentage(
                    sum(answer.points_earned for answer in answers.values()),
                    sum(answer.question.points for answer in answers.values()),
                )
                attempt.passed = attempt.score_percentage >= Decimal(
                    attempt.quiz.passing_percentage
                )
                attempt.graded_at = now
                attempt.save(
                    update_fields=["score_percentage", "passed", "graded_at", "updated_at"]
                )
                logger.info(
                    f"Quiz attempt {attempt.id} graded by {getattr(grader, 'id', None)}: "
                    f"{attempt.score_percentage}% ({'passed' if attempt.passed else 'failed'})"
                )

        if attempt.passed:
            CompletionService.evaluate(attempt.enrollment)
        return attempt

    @staticmethod
    def attempts_awaiting_grading(user):
        """Attempts with ungraded short answers in courses ``user`` may grade."""
        queryset = QuizAttempt.objects.filter(passed__isnull=True).select_related(
            "quiz__course", "enrollment__user"
        )
        if not is_admin_user(user):
            queryset = queryset.filter(quiz__course__instructor=user)
        return queryset.order_by("completed_at")


class AssignmentService:
    """Handles assignment submission and instructor review."""

    @staticmethod
    def submit(
        enrollment: Enrollment, text_content: str = "", file_url: str | None = None
    ) -> AssignmentSubmission:
        """
        Creates or resubmits the enrollment's single submission. Resubmission
        is allowed only after a rejection; an approved submission is final.
        """
        try:
            assignment = Assignment.objects.get(course_id=enrollment.course_id)
        except Assignment.DoesNotExist:
            raise AssessmentError(f"Course {enrollment.course_id} has no assignment.")

        text_content = (text_content or "").strip()
        if text_content and not assignment.allow_text:
            raise AssessmentError("This assignment does not accept text submissions.")
        if file_url and not assignment.allow_file:
            raise AssessmentError("This assignment does not accept file submissions.")
        if not text_content and not file_url:
            raise AssessmentError("A submission needs text content or a file.")

        now = timezone.now()
        with transaction.atomic():
            submission, created = AssignmentSubmission.objects.select_for_update().get_or_create(
                enrollment=enrollment,
                defaults={
                    "assignment": assignment,
                    "text_content": text_content,
                    "file_url": file_url,
                    "submitted_at": now,
                },
            )
            if not created:
                if submission.status != AssignmentSubmission.Status.REJECTED:
                    raise AssessmentError(
                        f"Submission {submission.id} is {submission.status} and cannot be resubmitted."
                    )
                submission.text_content = text_content
                submission.file_url = file_url
                submission.status = AssignmentSubmission.Status.PENDING
                submission.submitted_at = now
                submission.reviewed_by = None
                submission.reviewed_at = None
                submission.feedback = ""
                submission.save()

        logger.info(
            f"Assignment submission {submission.id} {'created' if created else 'resubmitted'} for E:{enrollment.id}"
        )
        transaction.on_commit(lambda: AssignmentService.notify_submitted(submission))
        return submission

    @staticmethod
    def review(
        submission: AssignmentSubmission, reviewer, approved: bool, feedback: str = ""
    ) -> AssignmentSubmission:
        """
        Approves or rejects a pending submission. Approval re-evaluates the
        enrollment, which may complete the course.
        """
        from apps.enrollments.services import CompletionService

        new_status = (
            AssignmentSubmission.Status.APPROVED
            if approved
            else AssignmentSubmission.Status.REJECTED
        )
        now = timezone.now()
        with transaction.atomic():
            updated = AssignmentSubmission.objects.filter(
                pk=submission.pk, status=AssignmentSubmission.Status.PENDING
            ).update(
                status=new_status,
                reviewed_by=reviewer,
                reviewed_at=now,
                feedback=feedback or "",
                updated_at=now,
            )
        if not updated:
            submission.refresh_from_db()
            raise AssessmentError(
                f"Submission {submission.id} is {submission.status} and cannot be reviewed."
            )
        submission.refresh_from_db()
        logger.info(
            f"Submission {submission.id} {new_status} by reviewer {getattr(reviewer, 'id', None)}"
        )

        transaction.on_commit(lambda: AssignmentService.notify_reviewed(submission))
        if approved:
            CompletionService.evaluate(submission.enrollment)
        return submission

    @staticmethod
    def pending_for_reviewer(user):
        """Submissions waiting on review for courses ``user`` may review."""
        queryset = AssignmentSubmission.objects.filter(
            status=AssignmentSubmission.Status.PENDING
        ).select_related("assignment__course", "enrollment__user")
        if not is_admin_user(user):
            queryset = queryset.filter(assignment__course__instructor=user)
        return queryset.order_by("submitted_at")

    @staticmethod
    def notify_submitted(submission: AssignmentSubmission):
        """Tell the course instructor a submission is waiting."""
        from apps.notifications.models import NotificationType
        from apps.notifications.services import NotificationService

        course = submission.assignment.course
        instructor = course.instructor
        if instructor is None:
            return
        learner = submission.enrollment.user
        try:
            content = NotificationService.generate_content_for_type(
                NotificationType.ASSIGNMENT_SUBMITTED,
                {
                    "user_name": instructor.display_name,
                    "student_name": learner.display_name,
                    "assignment_title": submission.assignment.title,
                    "course_name": course.title,
                },
            )
            NotificationService.create_notification(
                user=instructor,
                notification_type=NotificationType.ASSIGNMENT_SUBMITTED,
                subject=content["subject"],
                message=content["message"],
                payload={"submission_id": str(submission.id), "course_id": str(course.id)},
            )
        except Exception as e:
            logger.error(f"Failed to notify instructor of submission {submission.id}: {e}", exc_info=True)

    @staticmethod
    def notify_reviewed(submission: AssignmentSubmission):
        """Tell the learner the outcome of their review."""
        from apps.notifications.models import NotificationType
        from apps.notifications.services import NotificationService

        learner = submission.enrollment.user
        course = submission.assignment.course
        try:
            content = NotificationService.generate_content_for_type(
                NotificationType.ASSIGNMENT_REVIEWED,
                {
                    "user_name": learner.display_name,
                    "assignment_title": submission.assignment.title,
                    "course_name": course.title,
                    "review_status": submission.get_status_display().lower(),
                },
            )
            NotificationService.create_notification(
                user=learner,
                notification_type=NotificationType.ASSIGNMENT_REVIEWED,
                subject=content["subject"],
                message=content["message"],
                payload={
                    "submission_id": str(submission.id),
                    "status": submission.status,
                    "course_id": str(course.id),
                },
            )
        except Exception as e:
            logger.error(f"Failed to notify learner of review {submission.id}: {e}", exc_info=True)
