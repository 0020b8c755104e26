import logging
import secrets
from dataclasses import dataclass
from functools import partial

from django.conf import settings
from django.db import IntegrityError, models, transaction
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.courses import drip
from apps.courses.models import ContentItem, Course

from .models import Certificate, CourseCompletion, Enrollment, LessonProgress
from .progress import ProgressSummary, compute_progress, resume_target

logger = logging.getLogger(__name__)

CERTIFICATE_NUMBER_ATTEMPTS = 5


class ProgressError(Exception):
    pass


class ContentNotInCourseError(ProgressError):
    pass


class ContentLockedError(ProgressError):
    pass


class CertificateError(Exception):
    pass


class EnrollmentState(models.TextChoices):
    IN_PROGRESS = "IN_PROGRESS", _("In progress")
    LESSONS_COMPLETE = "LESSONS_COMPLETE", _("Lessons complete")
    ASSESSMENTS_PENDING = "ASSESSMENTS_PENDING", _("Assessments pending review")
    COMPLETED = "COMPLETED", _("Completed")  # Terminal, course issues no certificate
    CERTIFIED = "CERTIFIED", _("Certified")  # Terminal


@dataclass
class CompletionResult:
    state: str
    progress: ProgressSummary
    gate_met: bool
    completion: CourseCompletion | None = None
    certificate: Certificate | None = None
    certificate_created: bool = False


@dataclass
class LessonCompletion:
    progress: LessonProgress
    newly_completed: bool
    result: CompletionResult | None = None  # Set only when this call flipped the row


class ProgressTrackerService:
    """Service for recording and measuring lesson progress."""

    @staticmethod
    def get_progress_map(enrollment: Enrollment) -> dict:
        """Maps content item id -> True for every completed lesson."""
        return {
            item_id: True
            for item_id in LessonProgress.objects.filter(
                enrollment=enrollment, completed=True
            ).values_list("content_item_id", flat=True)
        }

    @staticmethod
    def calculate_progress(enrollment: Enrollment) -> ProgressSummary:
        """Progress from LessonProgress rows against the course's current items."""
        content_items = list(enrollment.course.ordered_content_items())
        progress_map = ProgressTrackerService.get_progress_map(enrollment)
        return compute_progress(content_items, progress_map)

    @staticmethod
    def refresh_progress_cache(enrollment: Enrollment, summary: ProgressSummary):
        """Writes the denormalized percentage only when it changed."""
        Enrollment.objects.filter(pk=enrollment.pk).exclude(
            progress_percent=summary.percent
        ).update(progress_percent=summary.percent, updated_at=timezone.now())
        enrollment.progress_percent = summary.percent

    @staticmethod
    def validate_content_item(enrollment: Enrollment, content_item: ContentItem, now=None):
        """Rejects items outside the enrollment's course or still locked by drip."""
        if not enrollment or not content_item:
            raise ValueError("Enrollment and ContentItem must be provided.")
        if content_item.section.course_id != enrollment.course_id:
            raise ContentNotInCourseError(
                f"ContentItem {content_item.id} does not belong to the course of enrollment {enrollment.id}."
            )
        if not drip.is_available(enrollment.course, content_item, enrollment, now):
            raise ContentLockedError(
                f"ContentItem {content_item.id} is not yet available for enrollment {enrollment.id}."
            )

    @staticmethod
    def mark_complete(
        enrollment: Enrollment, content_item: ContentItem, now=None
    ) -> tuple[LessonProgress, bool]:
        """Idempotently marks a lesson complete. Returns (progress, newly_completed)."""
        completion = ProgressTrackerService.complete_lesson(enrollment, content_item, now)
        return completion.progress, completion.newly_completed

    @staticmethod
    def complete_lesson(
        enrollment: Enrollment, content_item: ContentItem, now=None
    ) -> LessonCompletion:
        """
        Only the call that actually flips the row re-evaluates the course and
        carries the evaluation back; repeated or concurrent calls for the
        same lesson return the stored row unchanged and trigger nothing.
        """
        now = now or timezone.now()
        ProgressTrackerService.validate_content_item(enrollment, content_item, now)

        with transaction.atomic():
            progress, created = LessonProgress.objects.get_or_create(
                enrollment=enrollment,
                content_item=content_item,
                defaults={"completed": True, "completed_at": now},
            )
            newly_completed = created
            if not created and not progress.completed:
                # Conditional update: a concurrent writer that already flipped the row wins
                newly_completed = bool(
                    LessonProgress.objects.filter(pk=progress.pk, completed=False).update(
                        completed=True, completed_at=now, updated_at=now
                    )
                )
                progress.refresh_from_db()

        if not newly_completed:
            logger.debug(
                f"Lesson already completed E:{enrollment.id} C:{content_item.id}, nothing to do."
            )
            return LessonCompletion(progress=progress, newly_completed=False)

        logger.info(f"Lesson completed E:{enrollment.id} C:{content_item.id}")
        result = CompletionService.evaluate(enrollment, now=now)
        return LessonCompletion(progress=progress, newly_completed=True, result=result)


class CompletionService:
    """
    The single evaluate-and-issue operation. Every trigger path (lesson
    completion, quiz pass, assignment approval, course open/sync) calls
    ``evaluate``; it is safe to call any number of times from any number of
    concurrent requests.
    """

    @staticmethod
    def evaluate(enrollment: Enrollment, now=None) -> CompletionResult:
        from apps.assessments.gate import is_combined_condition_met
        from apps.assessments.services import AssessmentGateService

        now = now or timezone.now()
        course = enrollment.course

        summary = ProgressTrackerService.calculate_progress(enrollment)
        ProgressTrackerService.refresh_progress_cache(enrollment, summary)

        requirements = AssessmentGateService.get_requirements(course)
        quiz_outcome = AssessmentGateService.get_quiz_outcome(enrollment)
        assignment_outcome = AssessmentGateService.get_assignment_outcome(enrollment)
        gate_met = is_combined_condition_met(
            requirements, summary, quiz_outcome, assignment_outcome
        )

        completion = CourseCompletion.objects.filter(enrollment=enrollment).first()
        if gate_met and completion is None:
            completion, _created = CompletionService.record_completion(enrollment, now)

        certificate, certificate_created = CertificateService.issue_if_eligible(
            enrollment, gate_met=completion is not None, now=now
        )

        if certificate is not None:
            state = EnrollmentState.CERTIFIED
        elif completion is not None:
            state = EnrollmentState.COMPLETED
        elif summary.percent < 100:
            state = EnrollmentState.IN_PROGRESS
        elif (requirements.has_assignment and assignment_outcome.awaiting_review) or (
            requirements.has_quiz and not quiz_outcome.passed and quiz_outcome.awaiting_grading
        ):
            state = EnrollmentState.ASSESSMENTS_PENDING
        else:
            state = EnrollmentState.LESSONS_COMPLETE

        logger.debug(
            f"Completion check E:{enrollment.id}: "
            f"Content: {summary.completed_count}/{summary.total_count}, "
            f"Quiz: {quiz_outcome.passed} (required: {requirements.has_quiz}), "
            f"Assignment: {assignment_outcome.status} (required: {requirements.has_assignment}). "
            f"State: {state}"
        )
        return CompletionResult(
            state=state,
            progress=summary,
            gate_met=gate_met,
            completion=completion,
            certificate=certificate,
            certificate_created=certificate_created,
        )

    @staticmethod
    def record_completion(enrollment: Enrollment, now=None) -> tuple[CourseCompletion, bool]:
        """Creates the CourseCompletion row once; a racing duplicate is a no-op."""
        try:
            with transaction.atomic():
                completion = CourseCompletion.objects.create(
                    enrollment=enrollment, completed_at=now or timezone.now()
                )
        except IntegrityError:
            logger.info(f"Completion for enrollment {enrollment.id} already recorded.")
            return CourseCompletion.objects.get(enrollment=enrollment), False

        logger.info(
            f"Enrollment {enrollment.id} completed course {enrollment.course_id}."
        )
        transaction.on_commit(partial(NotificationService.notify_course_completion, enrollment))
        return completion, True


class CertificateService:
    """Service for issuing and verifying certificates."""

    @staticmethod
    def generate_certificate_number(issued_at=None) -> str:
        """Random, non-sequential and human-readable, e.g. CERT-2026-9F1C0A7B44E2."""
        issued_at = issued_at or timezone.now()
        prefix = getattr(settings, "CERTIFICATE_NUMBER_PREFIX", "CERT")
        return f"{prefix}-{issued_at:%Y}-{secrets.token_hex(6).upper()}"

    @staticmethod
    def get_existing_certificate(enrollment: Enrollment) -> Certificate | None:
        return Certificate.objects.filter(enrollment=enrollment).first()

    @staticmethod
    def issue_if_eligible(
        enrollment: Enrollment, gate_met: bool, now=None
    ) -> tuple[Certificate | None, bool]:
        """
        Creates the enrollment's certificate exactly once. Returns
        (certificate, created). A certificate created concurrently by another
        request is returned with created=False rather than raising.
        """
        if not gate_met:
            return None, False

        course: Course = enrollment.course
        if not course.certificate_enabled:
            logger.debug(
                f"Course {course.id} does not issue certificates; E:{enrollment.id} is complete without one."
            )
            return None, False

        existing = CertificateService.get_existing_certificate(enrollment)
        if existing is not None:
            return existing, False

        issued_at = now or timezone.now()
        for _attempt in range(CERTIFICATE_NUMBER_ATTEMPTS):
            try:
                with transaction.atomic():
                    certificate = Certificate.objects.create(
                        enrollment=enrollment,
                        user_id=enrollment.user_id,
                        course=course,
                        certificate_number=CertificateService.generate_certificate_number(
                            issued_at
                        ),
                        issued_at=issued_at,
                    )
            except IntegrityError:
                existing = Certificate.objects.filter(enrollment=enrollment).first()
                if existing is not None:
                    logger.info(
                        f"Certificate {existing.certificate_number} already issued for enrollment {enrollment.id}."
                    )
                    return existing, False
                logger.warning(
                    f"Certificate number collision for enrollment {enrollment.id}, retrying."
                )
                continue

            logger.info(
                f"Certificate {certificate.certificate_number} created for user {enrollment.user_id}, course {course.id}"
            )
            transaction.on_commit(
                partial(NotificationService.notify_certificate_issued, certificate)
            )
            return certificate, True

        raise CertificateError(
            f"Could not allocate a unique certificate number for enrollment {enrollment.id}."
        )

    @staticmethod
    def verify_certificate(certificate_number: str) -> Certificate | None:
        """Finds a certificate by its public number."""
        if not certificate_number:
            return None
        return (
            Certificate.objects.select_related("user", "course")
            .filter(certificate_number=certificate_number.strip())
            .first()
        )


class CourseOutlineService:
    """Builds the learner-facing (or author preview) view of a course."""

    @staticmethod
    def build(course: Course, enrollment: Enrollment | None = None, now=None, preview=False) -> dict:
        """
        Sections with per-item availability and completion, overall progress
        and the item to resume at. ``preview`` shows everything as available
        and is reserved for the course's own author.
        """
        now = now or timezone.now()
        content_items = list(course.ordered_content_items())

        if preview or enrollment is None:
            availability = {item.id: True for item in content_items}
            progress_map = {}
        else:
            availability = drip.availability_map(course, content_items, enrollment, now)
            progress_map = ProgressTrackerService.get_progress_map(enrollment)

        summary = compute_progress(content_items, progress_map)
        target = resume_target(content_items, progress_map, availability)

        sections = []
        by_section = {}
        for section in course.sections.all().order_by("order", "created_at"):
            entry = {
                "id": section.id,
                "title": section.title,
                "order": section.order,
                "items": [],
            }
            by_section[section.id] = entry
            sections.append(entry)

        for item in content_items:
            available = availability[item.id]
            days_left = 0
            if not available:
                days_left = drip.days_until_available(course, item, enrollment, now)
            by_section[item.section_id]["items"].append(
                {
                    "id": item.id,
                    "title": item.title,
                    "content_type": item.content_type,
                    "order": item.order,
                    "drip_delay_days": item.drip_delay_days,
                    "available": available,
                    "completed": progress_map.get(item.id, False),
                    "days_until_available": days_left,
                }
            )

        return {
            "course_id": course.id,
            "course_title": course.title,
            "preview": preview,
            "sections": sections,
            "progress": summary,
            "resume_content_id": target.id if target else None,
            "next_release_date": drip.next_release_date(course, now),
        }


class NotificationService:
    """Service for triggering enrollment-related notifications using the notifications app."""

    @staticmethod
    def notify_course_completion(enrollment: Enrollment):
        """Tell the learner, and any mentor waiting on this course, that it was completed."""
        from apps.mentorship.services import MentorshipService
        from apps.notifications.models import NotificationType
        from apps.notifications.services import NotificationService as ActualNotificationService

        user = enrollment.user
        course = enrollment.course
        try:
            content = ActualNotificationService.generate_content_for_type(
                NotificationType.COURSE_COMPLETION,
                {"user_name": user.display_name, "course_name": course.title},
            )
            ActualNotificationService.create_notification(
                user=user,
                notification_type=NotificationType.COURSE_COMPLETION,
                subject=content["subject"],
                message=content["message"],
                payload={"course_id": str(course.id), "enrollment_id": str(enrollment.id)},
            )
            logger.info(f"Sent course completion notification for user {user.id} in course {course.id}")
        except Exception as e:
            logger.error(f"Failed to send course completion notification E:{enrollment.id}: {e}", exc_info=True)

        for request in MentorshipService.requests_waiting_on_course(user, course):
            try:
                mentor = request.mentor
                content = ActualNotificationService.generate_content_for_type(
                    NotificationType.MENTEE_COURSE_COMPLETED,
                    {
                        "user_name": mentor.display_name,
                        "student_name": user.display_name,
                        "course_name": course.title,
                    },
                )
                ActualNotificationService.create_notification(
                    user=mentor,
                    notification_type=NotificationType.MENTEE_COURSE_COMPLETED,
                    subject=content["subject"],
                    message=content["message"],
                    payload={
                        "mentorship_request_id": str(request.id),
                        "student_id": str(user.id),
                        "course_id": str(course.id),
                    },
                )
                logger.info(f"Notified mentor {mentor.id} of completion by {user.id} in course {course.id}")
            except Exception as e:
                logger.error(
                    f"Failed to notify mentor for request {request.id} E:{enrollment.id}: {e}",
                    exc_info=True,
                )

    @staticmethod
    def notify_certificate_issued(certificate: Certificate):
        """Send notification when a certificate is issued to a user."""
        from apps.notifications.models import NotificationType
        from apps.notifications.services import NotificationService as ActualNotificationService

        try:
            content = ActualNotificationService.generate_content_for_type(
                NotificationType.CERTIFICATE_ISSUED,
                {
                    "user_name": certificate.user.display_name,
                    "course_name": certificate.course.title,
                    "certificate_number": certificate.certificate_number,
                    "issued_at": f"{certificate.issued_at:%B %d, %Y}",
                },
            )
            ActualNotificationService.create_notification(
                user=certificate.user,
                notification_type=NotificationType.CERTIFICATE_ISSUED,
                subject=content["subject"],
                message=content["message"],
                action_url=certificate.verification_url,
                payload={
                    "certificate_number": certificate.certificate_number,
                    "course_id": str(certificate.course_id),
                    "issued_at": certificate.issued_at.isoformat(),
                },
            )
            logger.info(f"Sent certificate issued notification for user {certificate.user_id} in course {certificate.course_id}")
        except Exception as e:
            logger.error(f"Failed to send certificate notification C:{certificate.id}: {e}", exc_info=True)
