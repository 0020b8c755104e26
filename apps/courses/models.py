from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.common.models import OrderedModel, TimestampedModel
from apps.users.models import User


class Course(TimestampedModel):
    """Represents a course in the academy."""

    class Status(models.TextChoices):
        DRAFT = "DRAFT", _("Draft")
        PUBLISHED = "PUBLISHED", _("Published")
        ARCHIVED = "ARCHIVED", _("Archived")

    class DripScheduleType(models.TextChoices):
        NONE = "none", _("No schedule")  # Per-item delays only
        WEEK = "week", _("Weekly release day")

    class ReleaseDay(models.IntegerChoices):
        SUNDAY = 0, _("Sunday")
        MONDAY = 1, _("Monday")
        TUESDAY = 2, _("Tuesday")
        WEDNESDAY = 3, _("Wednesday")
        THURSDAY = 4, _("Thursday")
        FRIDAY = 5, _("Friday")
        SATURDAY = 6, _("Saturday")

    title = models.CharField(max_length=255)
    slug = models.SlugField(
        max_length=255,
        unique=True,
        db_index=True,
        help_text="Unique identifier for the course URL",
    )
    description = models.TextField(blank=True)
    instructor = models.ForeignKey(
        User,
        related_name="courses_authored",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        limit_choices_to={"role__in": [User.Role.INSTRUCTOR, User.Role.ADMIN]},
    )
    status = models.CharField(
        max_length=10, choices=Status.choices, default=Status.DRAFT, db_index=True
    )

    # --- Drip policy ---
    drip_enabled = models.BooleanField(
        default=False, help_text="Release content items relative to enrollment time"
    )
    drip_schedule_type = models.CharField(
        max_length=10,
        choices=DripScheduleType.choices,
        default=DripScheduleType.WEEK,
    )
    drip_release_day = models.PositiveSmallIntegerField(
        choices=ReleaseDay.choices,
        null=True,
        blank=True,
        default=ReleaseDay.WEDNESDAY,
        validators=[MinValueValidator(0), MaxValueValidator(6)],
        help_text="Weekday new content is announced (weekly schedules only)",
    )

    certificate_enabled = models.BooleanField(
        default=True, help_text="Issue a certificate when the course is completed"
    )

    def __str__(self):
        return self.title

    def save(self, *args, **kwargs):
        from apps.common.utils import generate_unique_slug

        if not self.slug:
            self.slug = generate_unique_slug(self, source_field="title")
        super().save(*args, **kwargs)

    def ordered_content_items(self):
        """All content items of the course in section order, then item order."""
        return (
            ContentItem.objects.filter(section__course=self)
            .select_related("section")
            .order_by("section__order", "section__created_at", "order", "created_at")
        )

    class Meta:
        ordering = ["title"]


class Section(OrderedModel):
    """Groups content items inside a course. Purely organizational."""

    course = models.ForeignKey(
        Course, related_name="sections", on_delete=models.CASCADE
    )
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)

    def __str__(self):
        return f"{self.title} (Course: {self.course.title})"

    class Meta:
        ordering = ["course", "order", "created_at"]


class ContentItem(OrderedModel):
    """A single lesson inside a Section."""

    class ContentType(models.TextChoices):
        TEXT = "TEXT", _("Text")
        VIDEO = "VIDEO", _("Video")
        AUDIO = "AUDIO", _("Audio")
        FILE = "FILE", _("File")

    section = models.ForeignKey(
        Section, related_name="content_items", on_delete=models.CASCADE
    )
    title = models.CharField(max_length=255)
    content_type = models.CharField(
        max_length=10, choices=ContentType.choices, default=ContentType.TEXT
    )
    duration_minutes = models.PositiveIntegerField(null=True, blank=True)
    drip_delay_days = models.PositiveIntegerField(
        default=0,
        validators=[MinValueValidator(0)],
        help_text="Days after enrollment before the item unlocks (drip courses)",
    )

    def __str__(self):
        return f"{self.title} ({self.get_content_type_display()})"

    @property
    def course(self):
        return self.section.course

    class Meta:
        ordering = ["section", "order", "created_at"]
