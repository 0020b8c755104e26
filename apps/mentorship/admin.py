from django.contrib import admin

from .models import MentorshipRequest


@admin.register(MentorshipRequest)
class MentorshipRequestAdmin(admin.ModelAdmin):
    list_display = ("student", "mentor", "course_to_complete", "status", "created_at")
    list_filter = ("status",)
    search_fields = ("student__email", "mentor__email", "course_to_complete__title")
    list_select_related = ("student", "mentor", "course_to_complete")
