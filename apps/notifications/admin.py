from django.contrib import admin

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = (
        "recipient",
        "notification_type",
        "status",
        "subject",
        "sent_at",
        "created_at",
    )
    list_filter = ("notification_type", "status")
    search_fields = ("recipient__email", "subject", "message")
    list_select_related = ("recipient",)
    readonly_fields = ("sent_at", "read_at", "fail_reason", "delivery_methods", "payload")
