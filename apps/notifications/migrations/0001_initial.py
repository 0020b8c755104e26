import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Notification",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "notification_type",
                    models.CharField(
                        choices=[
                            ("COURSE_COMPLETION", "Course Completion"),
                            ("CERTIFICATE_ISSUED", "Certificate Issued"),
                            ("MENTEE_COURSE_COMPLETED", "Mentee Completed Course"),
                            ("ASSIGNMENT_SUBMITTED", "Assignment Submitted"),
                            ("ASSIGNMENT_REVIEWED", "Assignment Reviewed"),
                        ],
                        max_length=50,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("PENDING", "Pending"),
                            ("SENT", "Sent"),
                            ("FAILED", "Failed"),
                            ("READ", "Read"),
                        ],
                        db_index=True,
                        default="PENDING",
                        max_length=15,
                    ),
                ),
                ("subject", models.CharField(blank=True, max_length=255)),
                (
                    "message",
                    models.TextField(help_text="The main content of the notification."),
                ),
                ("action_url", models.URLField(blank=True, max_length=2048, null=True)),
                ("payload", models.JSONField(blank=True, default=dict)),
                (
                    "delivery_methods",
                    models.JSONField(
                        default=list,
                        help_text="List of methods attempted (e.g., ['EMAIL', 'IN_APP'])",
                    ),
                ),
                ("sent_at", models.DateTimeField(blank=True, null=True)),
                ("read_at", models.DateTimeField(blank=True, null=True)),
                ("fail_reason", models.TextField(blank=True, null=True)),
                (
                    "recipient",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="notifications",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["recipient", "status"], name="notif_recipient_status_idx"
                    )
                ],
            },
        ),
    ]
