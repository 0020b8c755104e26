from django.contrib import admin

from .models import (
    Assignment,
    AssignmentSubmission,
    Quiz,
    QuizAnswer,
    QuizAttempt,
    QuizOption,
    QuizQuestion,
)


class QuizQuestionInline(admin.TabularInline):
    model = QuizQuestion
    extra = 1
    fields = ("order", "text", "question_type", "points")
    show_change_link = True


class QuizOptionInline(admin.TabularInline):
    model = QuizOption
    extra = 2
    fields = ("order", "text", "is_correct")


@admin.register(Quiz)
class QuizAdmin(admin.ModelAdmin):
    list_display = ("title", "course", "passing_percentage", "is_required")
    list_filter = ("is_required", "course")
    search_fields = ("title", "course__title")
    list_select_related = ("course",)
    inlines = [QuizQuestionInline]


@admin.register(QuizQuestion)
class QuizQuestionAdmin(admin.ModelAdmin):
    list_display = ("text", "quiz", "question_type", "points", "order")
    list_filter = ("question_type", "quiz__course")
    search_fields = ("text", "quiz__title")
    list_select_related = ("quiz",)
    inlines = [QuizOptionInline]


class QuizAnswerInline(admin.TabularInline):
    model = QuizAnswer
    extra = 0
    can_delete = False
    fields = ("question", "selected_option", "text_answer", "is_correct", "points_earned", "graded_by")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(QuizAttempt)
class QuizAttemptAdmin(admin.ModelAdmin):
    list_display = ("quiz", "user_email", "score_percentage", "passed", "completed_at", "graded_at")
    list_filter = ("passed", "quiz__course")
    search_fields = ("enrollment__user__email", "quiz__title")
    list_select_related = ("quiz", "enrollment__user")
    # Scores come from QuizService so completion is re-evaluated
    readonly_fields = ("quiz", "enrollment", "score_percentage", "passed", "completed_at", "graded_at")
    inlines = [QuizAnswerInline]

    def user_email(self, obj):
        return obj.enrollment.user.email

    user_email.admin_order_field = "enrollment__user__email"


@admin.register(Assignment)
class AssignmentAdmin(admin.ModelAdmin):
    list_display = ("title", "course", "allow_text", "allow_file", "is_required")
    list_filter = ("is_required", "course")
    search_fields = ("title", "course__title")
    list_select_related = ("course",)


@admin.register(AssignmentSubmission)
class AssignmentSubmissionAdmin(admin.ModelAdmin):
    list_display = ("assignment", "user_email", "status", "submitted_at", "reviewed_by")
    list_filter = ("status", "assignment__course")
    search_fields = ("enrollment__user__email", "assignment__title")
    list_select_related = ("assignment", "enrollment__user", "reviewed_by")
    # Reviews go through AssignmentService so completion is re-evaluated
    readonly_fields = ("assignment", "enrollment", "status", "reviewed_by", "reviewed_at")

    def user_email(self, obj):
        return obj.enrollment.user.email

    user_email.admin_order_field = "enrollment__user__email"
