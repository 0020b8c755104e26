from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.common.models import TimestampedModel
from apps.courses.models import ContentItem, Course
from apps.users.models import User


class Enrollment(TimestampedModel):
    """
    Binds one learner to one course. ``enrolled_at`` anchors every drip
    calculation; ``progress_percent`` is a display cache only.
    """

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="enrollments")
    course = models.ForeignKey(
        Course, on_delete=models.CASCADE, related_name="enrollments"
    )
    enrolled_at = models.DateTimeField(default=timezone.now)
    progress_percent = models.PositiveIntegerField(
        default=0,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
        help_text="Cached course completion percentage (display only)",
    )

    def __str__(self):
        return f"{self.user.email} enrolled in {self.course.title}"

    class Meta:
        ordering = ["-enrolled_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["user", "course"], name="unique_enrollment_per_learner"
            ),
        ]


class LessonProgress(TimestampedModel):
    """Completion record of one ContentItem for one Enrollment. Write-once-true."""

    enrollment = models.ForeignKey(
        Enrollment, on_delete=models.CASCADE, related_name="lesson_progress"
    )
    content_item = models.ForeignKey(
        ContentItem, on_delete=models.CASCADE, related_name="+"
    )
    completed = models.BooleanField(default=False, db_index=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    def __str__(self):
        state = "done" if self.completed else "open"
        return f"Progress [{state}]: {self.enrollment_id} / {self.content_item_id}"

    class Meta:
        ordering = ["enrollment", "content_item__section__order", "content_item__order"]
        constraints = [
            models.UniqueConstraint(
                fields=["enrollment", "content_item"],
                name="unique_lesson_progress_per_item",
            ),
        ]


class CourseCompletion(TimestampedModel):
    """
    The durable fact that an enrollment reached the combined completion
    condition (all lessons plus required assessments). At most one per
    enrollment; exists with or without a certificate.
    """

    enrollment = models.OneToOneField(
        Enrollment, on_delete=models.CASCADE, related_name="completion"
    )
    completed_at = models.DateTimeField(default=timezone.now)

    def __str__(self):
        return f"Completion of {self.enrollment_id} at {self.completed_at:%Y-%m-%d}"


class Certificate(TimestampedModel):
    """Represents a certificate issued for a completed Enrollment."""

    enrollment = models.OneToOneField(
        Enrollment, on_delete=models.PROTECT, related_name="certificate"
    )
    user = models.ForeignKey(
        User, on_delete=models.PROTECT, related_name="certificates"
    )  # Denormalized for easy lookup
    course = models.ForeignKey(
        Course, on_delete=models.PROTECT, related_name="certificates"
    )  # Denormalized
    certificate_number = models.CharField(
        max_length=64,
        unique=True,
        db_index=True,
        help_text=_("Public, non-sequential verification number"),
    )
    issued_at = models.DateTimeField(default=timezone.now)

    def __str__(self):
        return f"Certificate {self.certificate_number} for {self.user.email} - {self.course.title}"

    @property
    def verification_url(self):
        from django.conf import settings

        return f"{settings.SITE_URL.rstrip('/')}/certificate/{self.certificate_number}"

    class Meta:
        ordering = ["-issued_at"]
