from django.contrib import admin

from .models import Certificate, CourseCompletion, Enrollment, LessonProgress


class LessonProgressInline(admin.TabularInline):
    model = LessonProgress
    extra = 0
    readonly_fields = ("content_item", "completed", "completed_at")
    can_delete = False
    show_change_link = True


@admin.register(Enrollment)
class EnrollmentAdmin(admin.ModelAdmin):
    list_display = ("user", "course", "enrolled_at", "progress_percent")
    list_filter = ("course",)
    search_fields = ("user__email", "course__title")
    list_select_related = ("user", "course")
    readonly_fields = ("progress_percent",)  # Cache maintained by services
    inlines = [LessonProgressInline]


@admin.register(LessonProgress)
class LessonProgressAdmin(admin.ModelAdmin):
    list_display = (
        "user_email",
        "content_item_title",
        "course_title",
        "completed",
        "completed_at",
    )
    list_filter = ("completed", "enrollment__course", "content_item__content_type")
    search_fields = (
        "enrollment__user__email",
        "content_item__title",
        "enrollment__course__title",
    )
    list_select_related = ("enrollment__user", "enrollment__course", "content_item")
    readonly_fields = ("enrollment", "content_item", "completed", "completed_at")

    def user_email(self, obj):
        return obj.enrollment.user.email

    user_email.admin_order_field = "enrollment__user__email"

    def content_item_title(self, obj):
        return obj.content_item.title

    content_item_title.admin_order_field = "content_item__title"

    def course_title(self, obj):
        return obj.enrollment.course.title

    course_title.admin_order_field = "enrollment__course__title"


@admin.register(CourseCompletion)
class CourseCompletionAdmin(admin.ModelAdmin):
    list_display = ("enrollment", "completed_at")
    list_select_related = ("enrollment__user", "enrollment__course")
    search_fields = ("enrollment__user__email", "enrollment__course__title")
    readonly_fields = ("enrollment", "completed_at")


@admin.register(Certificate)
class CertificateAdmin(admin.ModelAdmin):
    list_display = ("certificate_number", "user", "course", "issued_at")
    list_filter = ("course",)
    search_fields = ("user__email", "course__title", "certificate_number")
    list_select_related = ("user", "course", "enrollment")
    readonly_fields = (
        "enrollment",
        "user",
        "course",
        "issued_at",
        "certificate_number",
    )  # Certificates are immutable once issued
