from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.common.models import OrderedModel, TimestampedModel
from apps.courses.models import Course
from apps.enrollments.models import Enrollment
from apps.users.models import User


class Quiz(TimestampedModel):
    """The end-of-course quiz. A course has at most one."""

    course = models.OneToOneField(Course, related_name="quiz", on_delete=models.CASCADE)
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    passing_percentage = models.PositiveIntegerField(
        default=70,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
        help_text="Minimum percentage score required to pass.",
    )
    time_limit_minutes = models.PositiveIntegerField(
        null=True, blank=True, help_text="Time limit in minutes. Blank for no limit."
    )
    is_required = models.BooleanField(
        default=True, help_text="Passing is required for course completion"
    )

    def __str__(self):
        return f"{self.title} (Quiz for {self.course.title})"

    class Meta:
        verbose_name_plural = "quizzes"
        ordering = ["course__title"]


class QuizQuestion(OrderedModel):
    """A question on the course quiz. Choice questions are graded automatically."""

    class QuestionType(models.TextChoices):
        MULTIPLE_CHOICE = "multiple_choice", _("Multiple choice")
        SHORT_ANSWER = "short_answer", _("Short answer")  # Graded by the instructor

    quiz = models.ForeignKey(Quiz, related_name="questions", on_delete=models.CASCADE)
    text = models.TextField()
    question_type = models.CharField(
        max_length=20, choices=QuestionType.choices, default=QuestionType.MULTIPLE_CHOICE
    )
    points = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])

    def __str__(self):
        return f"Q{self.order} of {self.quiz.title}"

    class Meta:
        ordering = ["quiz", "order", "created_at"]


class QuizOption(OrderedModel):
    question = models.ForeignKey(
        QuizQuestion, related_name="options", on_delete=models.CASCADE
    )
    text = models.CharField(max_length=500)
    is_correct = models.BooleanField(default=False)

    def __str__(self):
        return self.text

    class Meta:
        ordering = ["question", "order", "created_at"]


class QuizAttempt(TimestampedModel):
    """
    One submitted attempt. ``passed`` is computed on the server from the
    stored answers and stays ``None`` while short answers await grading.
    Only ``passed`` matters for gating.
    """

    quiz = models.ForeignKey(Quiz, related_name="attempts", on_delete=models.CASCADE)
    enrollment = models.ForeignKey(
        Enrollment, related_name="quiz_attempts", on_delete=models.CASCADE
    )
    score_percentage = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("100"))],
    )
    passed = models.BooleanField(null=True, blank=True, default=None, db_index=True)
    completed_at = models.DateTimeField(default=timezone.now)
    graded_at = models.DateTimeField(null=True, blank=True)

    @property
    def awaiting_grading(self) -> bool:
        return self.passed is None

    def __str__(self):
        if self.passed is None:
            return f"Attempt on {self.quiz.title}: awaiting grading"
        outcome = "passed" if self.passed else "failed"
        return f"Attempt on {self.quiz.title}: {self.score_percentage}% ({outcome})"

    class Meta:
        ordering = ["enrollment", "-completed_at"]


class QuizAnswer(TimestampedModel):
    """The learner's answer to one question within an attempt."""

    attempt = models.ForeignKey(
        QuizAttempt, related_name="answers", on_delete=models.CASCADE
    )
    question = models.ForeignKey(
        QuizQuestion, related_name="answers", on_delete=models.CASCADE
    )
    selected_option = models.ForeignKey(
        QuizOption, related_name="+", on_delete=models.SET_NULL, null=True, blank=True
    )
    text_answer = models.TextField(blank=True)
    is_correct = models.BooleanField(null=True, blank=True, default=None)  # None until graded
    points_earned = models.PositiveIntegerField(default=0)
    graded_by = models.ForeignKey(
        User,
        related_name="graded_quiz_answers",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
    )
    graded_at = models.DateTimeField(null=True, blank=True)

    def __str__(self):
        return f"Answer to {self.question_id} in attempt {self.attempt_id}"

    class Meta:
        ordering = ["attempt", "question__order"]
        constraints = [
            models.UniqueConstraint(
                fields=["attempt", "question"], name="unique_answer_per_question"
            ),
        ]


class Assignment(TimestampedModel):
    """The course assignment, reviewed by an instructor. A course has at most one."""

    course = models.OneToOneField(
        Course, related_name="assignment", on_delete=models.CASCADE
    )
    title = models.CharField(max_length=255)
    instructions = models.TextField(blank=True)
    allow_text = models.BooleanField(default=True)
    allow_file = models.BooleanField(default=True)
    is_required = models.BooleanField(
        default=True, help_text="Approval is required for course completion"
    )

    def __str__(self):
        return f"{self.title} (Assignment for {self.course.title})"

    class Meta:
        ordering = ["course__title"]


class AssignmentSubmission(TimestampedModel):
    """A learner's submission; one per enrollment, resubmitted after rejection."""

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending review")
        APPROVED = "approved", _("Approved")  # Terminal
        REJECTED = "rejected", _("Rejected")  # Learner may resubmit

    assignment = models.ForeignKey(
        Assignment, related_name="submissions", on_delete=models.CASCADE
    )
    enrollment = models.OneToOneField(
        Enrollment, related_name="assignment_submission", on_delete=models.CASCADE
    )
    status = models.CharField(
        max_length=10, choices=Status.choices, default=Status.PENDING, db_index=True
    )
    text_content = models.TextField(blank=True)
    file_url = models.URLField(max_length=2048, blank=True, null=True)
    submitted_at = models.DateTimeField(default=timezone.now)
    reviewed_by = models.ForeignKey(
        User,
        related_name="reviewed_submissions",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
    )
    reviewed_at = models.DateTimeField(null=True, blank=True)
    feedback = models.TextField(blank=True)

    def __str__(self):
        return f"Submission for {self.assignment.title} [{self.status}]"

    class Meta:
        ordering = ["-submitted_at"]
