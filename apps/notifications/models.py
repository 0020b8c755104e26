from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.common.models import TimestampedModel
from apps.users.models import User


class NotificationType(models.TextChoices):
    COURSE_COMPLETION = "COURSE_COMPLETION", _("Course Completion")
    CERTIFICATE_ISSUED = "CERTIFICATE_ISSUED", _("Certificate Issued")
    MENTEE_COURSE_COMPLETED = "MENTEE_COURSE_COMPLETED", _("Mentee Completed Course")
    ASSIGNMENT_SUBMITTED = "ASSIGNMENT_SUBMITTED", _("Assignment Submitted")
    ASSIGNMENT_REVIEWED = "ASSIGNMENT_REVIEWED", _("Assignment Reviewed")


class DeliveryMethod(models.TextChoices):
    EMAIL = "EMAIL", _("Email")
    IN_APP = "IN_APP", _("In-App")


class Notification(TimestampedModel):
    """Represents a notification sent or scheduled to be sent to a user."""

    class Status(models.TextChoices):
        PENDING = "PENDING", _("Pending")
        SENT = "SENT", _("Sent")
        FAILED = "FAILED", _("Failed")
        READ = "READ", _("Read")  # Applicable mainly for IN_APP

    recipient = models.ForeignKey(
        User, on_delete=models.CASCADE, related_name="notifications"
    )
    notification_type = models.CharField(
        max_length=50, choices=NotificationType.choices
    )
    status = models.CharField(
        max_length=15, choices=Status.choices, default=Status.PENDING, db_index=True
    )

    subject = models.CharField(max_length=255, blank=True)
    message = models.TextField(help_text="The main content of the notification.")
    action_url = models.URLField(max_length=2048, blank=True, null=True)
    # Structured payload for the event (certificate number, course id ...)
    payload = models.JSONField(default=dict, blank=True)

    delivery_methods = models.JSONField(
        default=list, help_text="List of methods attempted (e.g., ['EMAIL', 'IN_APP'])"
    )
    sent_at = models.DateTimeField(null=True, blank=True)
    read_at = models.DateTimeField(null=True, blank=True)
    fail_reason = models.TextField(blank=True, null=True)

    def __str__(self):
        return f"Notification for {self.recipient.email} ({self.get_notification_type_display()})"

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["recipient", "status"], name="notif_recipient_status_idx"
            ),
        ]
