import logging
import uuid
from typing import Any, Dict, List

from django.conf import settings
from django.core.mail import send_mail
from django.utils import timezone

from .models import DeliveryMethod, Notification, NotificationType
from .tasks import send_notification_task  # Celery task

logger = logging.getLogger(__name__)


class NotificationError(Exception):
    pass


class NotificationService:
    """Service for creating and sending notifications."""

    @staticmethod
    def create_notification(
        user,
        notification_type: NotificationType | str,
        subject: str,
        message: str,
        action_url: str | None = None,
        payload: Dict[str, Any] | None = None,
        trigger_send: bool = True,
        delivery_methods: List[DeliveryMethod | str] | None = None,
    ) -> Notification:
        """Creates a Notification record and optionally triggers sending."""
        if not user or not notification_type or not message:
            raise NotificationError(
                "Missing required arguments for create_notification (user, type, message)."
            )

        type_str = (
            notification_type.value
            if isinstance(notification_type, NotificationType)
            else notification_type
        )
        if type_str not in NotificationType.values:
            raise NotificationError(f"Invalid notification_type: {type_str}")

        methods = [
            DeliveryMethod(m).value
            for m in (delivery_methods or [DeliveryMethod.EMAIL, DeliveryMethod.IN_APP])
        ]

        notification = Notification.objects.create(
            recipient=user,
            notification_type=type_str,
            subject=subject,
            message=message,
            action_url=action_url,
            payload=payload or {},
            delivery_methods=methods,
            status=Notification.Status.PENDING,
        )
        logger.info(
            f"Created notification {notification.id} for user {user.id}, type {type_str}, methods: {methods}"
        )

        if trigger_send:
            # Trigger async task to handle actual sending
            send_notification_task.delay(str(notification.id))

        return notification

    @staticmethod
    def send_notification(notification_id: uuid.UUID):
        """
        Attempts to send a notification via its configured delivery methods.
        Called by the Celery task.
        """
        try:
            notification = Notification.objects.select_related("recipient").get(
                pk=notification_id
            )
        except Notification.DoesNotExist:
            logger.error(f"Notification {notification_id} not found for sending.")
            return

        if notification.status != Notification.Status.PENDING:
            logger.warning(
                f"Notification {notification_id} not in PENDING state (status: {notification.status}). Skipping send."
            )
            return

        success = False
        errors = []
        for method_str in notification.delivery_methods:
            try:
                method = DeliveryMethod(method_str)
                if method == DeliveryMethod.EMAIL:
                    sent = EmailService.send_email_notification(notification)
                else:
                    sent = True  # In-app notifications are the stored row itself
                if sent:
                    success = True
            except Exception as e:
                error_msg = f"Error sending notification {notification.id} via {method_str}: {e}"
                logger.error(error_msg, exc_info=True)
                errors.append(error_msg)

        if success:
            notification.status = Notification.Status.SENT
            notification.sent_at = timezone.now()
            notification.fail_reason = None
        else:
            notification.status = Notification.Status.FAILED
            notification.fail_reason = (
                "\n".join(errors)
                if errors
                else "All delivery methods failed without specific error."
            )
        notification.save(update_fields=["status", "sent_at", "fail_reason", "updated_at"])

    @staticmethod
    def generate_content_for_type(
        notification_type: NotificationType | str, context: Dict[str, Any]
    ) -> Dict[str, str]:
        """Generates subject and message based on type and context data."""
        type_str = (
            notification_type.value
            if isinstance(notification_type, NotificationType)
            else notification_type
        )
        user_name = context.get("user_name", "Learner")
        course_name = context.get("course_name", "the course")
        certificate_number = context.get("certificate_number", "")
        issued_at = context.get("issued_at", "")
        student_name = context.get("student_name", "A student")
        assignment_title = context.get("assignment_title", "the assignment")
        review_status = context.get("review_status", "reviewed")

        subject = f"Academy Notification: {NotificationType(type_str).label}"
        message = "You have a new notification."

        if type_str == NotificationType.COURSE_COMPLETION:
            subject = f"Congratulations on completing {course_name}!"
            message = f"Hi {user_name},\n\nWell done! You have successfully completed the course: {course_name}."
        elif type_str == NotificationType.CERTIFICATE_ISSUED:
            subject = f"Your certificate for {course_name}"
            message = (
                f"Hi {user_name},\n\nYour certificate for completing {course_name} was issued on {issued_at}.\n\n"
                f"Certificate number: {certificate_number}"
            )
        elif type_str == NotificationType.MENTEE_COURSE_COMPLETED:
            subject = f'{student_name} completed "{course_name}" - Review their mentorship request'
            message = (
                f"Hi {user_name},\n\n{student_name} has successfully completed the course you recommended: {course_name}.\n\n"
                "They previously applied to join your mentorship cohort. You can now reconsider their request."
            )
        elif type_str == NotificationType.ASSIGNMENT_SUBMITTED:
            subject = f"New submission for {assignment_title}"
            message = f"Hi {user_name},\n\n{student_name} submitted '{assignment_title}' in {course_name} and is waiting for your review."
        elif type_str == NotificationType.ASSIGNMENT_REVIEWED:
            subject = f"Your submission for {assignment_title} was {review_status}"
            message = f"Hi {user_name},\n\nYour submission for '{assignment_title}' in {course_name} was {review_status}."

        return {"subject": subject, "message": message}


class EmailService:
    """Handles sending email notifications."""

    @staticmethod
    def send_email_notification(notification: Notification) -> bool:
        """Sends the notification content via email."""
        recipient = notification.recipient
        if not recipient.email:
            logger.warning(
                f"Cannot send email for notification {notification.id}: Recipient {recipient.id} has no email address."
            )
            return False

        subject = (
            notification.subject
            or f"Academy Notification ({notification.get_notification_type_display()})"
        )
        body = notification.message
        if notification.action_url:
            body = f"{body}\n\n{notification.action_url}"

        sent_count = send_mail(
            subject=subject,
            message=body,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient.email],
            fail_silently=False,
        )
        if sent_count:
            logger.info(f"Email sent for notification {notification.id} to {recipient.email}")
        return bool(sent_count)
