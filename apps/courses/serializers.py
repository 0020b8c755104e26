from rest_framework import serializers

from apps.users.serializers import UserBasicSerializer

from .models import Course


class CourseSerializer(serializers.ModelSerializer):
    instructor = UserBasicSerializer(read_only=True)

    class Meta:
        model = Course
        fields = (
            "id",
            "title",
            "slug",
            "description",
            "instructor",
            "status",
            "drip_enabled",
            "drip_schedule_type",
            "drip_release_day",
            "certificate_enabled",
        )
        read_only_fields = fields


# --- Outline (read-only, built by CourseOutlineService) ---


class OutlineItemSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    title = serializers.CharField()
    content_type = serializers.CharField()
    order = serializers.IntegerField()
    drip_delay_days = serializers.IntegerField()
    available = serializers.BooleanField()
    completed = serializers.BooleanField()
    days_until_available = serializers.IntegerField()


class OutlineSectionSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    title = serializers.CharField()
    order = serializers.IntegerField()
    items = OutlineItemSerializer(many=True)


class ProgressSummarySerializer(serializers.Serializer):
    percent = serializers.IntegerField()
    completed_count = serializers.IntegerField()
    total_count = serializers.IntegerField()


class CourseOutlineSerializer(serializers.Serializer):
    course_id = serializers.UUIDField()
    course_title = serializers.CharField()
    preview = serializers.BooleanField()
    sections = OutlineSectionSerializer(many=True)
    progress = ProgressSummarySerializer()
    resume_content_id = serializers.UUIDField(allow_null=True)
    next_release_date = serializers.DateField(allow_null=True)
