from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.common.models import TimestampedModel
from apps.courses.models import Course
from apps.users.models import User


class MentorshipRequest(TimestampedModel):
    """A learner's application to join a mentor's cohort."""

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        COURSE_REQUIRED = "course_required", _("Course required first")
        ACCEPTED = "accepted", _("Accepted")
        DECLINED = "declined", _("Declined")

    student = models.ForeignKey(
        User, on_delete=models.CASCADE, related_name="mentorship_requests"
    )
    mentor = models.ForeignKey(
        User, on_delete=models.CASCADE, related_name="mentee_requests"
    )
    course_to_complete = models.ForeignKey(
        Course,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="mentorship_requests",
        help_text="Course the mentor asked the learner to finish first",
    )
    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.PENDING, db_index=True
    )
    reason_for_mentor = models.TextField(blank=True)
    mentor_response = models.TextField(blank=True)
    responded_at = models.DateTimeField(null=True, blank=True)

    def __str__(self):
        return f"{self.student.email} -> {self.mentor.email} [{self.status}]"

    class Meta:
        ordering = ["-created_at"]
