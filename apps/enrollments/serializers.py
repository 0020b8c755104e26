from rest_framework import serializers

from apps.courses.serializers import (
    CourseOutlineSerializer,
    CourseSerializer,
    ProgressSummarySerializer,
)

from .models import Certificate, Enrollment, LessonProgress
from .services import EnrollmentState


class CertificateSerializer(serializers.ModelSerializer):
    course_title = serializers.CharField(source="course.title", read_only=True)
    verification_url = serializers.CharField(read_only=True)

    class Meta:
        model = Certificate
        fields = (
            "id",
            "certificate_number",
            "course",
            "course_title",
            "issued_at",
            "verification_url",
        )
        read_only_fields = fields


class CertificateVerificationSerializer(serializers.Serializer):
    """Public view of a certificate: enough to confirm it, nothing more."""

    valid = serializers.BooleanField()
    certificate_number = serializers.CharField()
    learner_name = serializers.CharField()
    course_title = serializers.CharField()
    issued_at = serializers.DateTimeField()


class EnrollmentSerializer(serializers.ModelSerializer):
    course = CourseSerializer(read_only=True)
    certificate = serializers.SerializerMethodField()

    class Meta:
        model = Enrollment
        fields = (
            "id",
            "course",
            "enrolled_at",
            "progress_percent",
            "certificate",
            "created_at",
        )
        read_only_fields = fields  # Enrollments are managed via services

    def get_certificate(self, obj) -> dict | None:
        certificate = Certificate.objects.filter(enrollment=obj).first()
        return CertificateSerializer(certificate).data if certificate else None


class LessonProgressSerializer(serializers.ModelSerializer):
    class Meta:
        model = LessonProgress
        fields = ("id", "content_item", "completed", "completed_at")
        read_only_fields = fields


class EnrollmentOutlineSerializer(CourseOutlineSerializer):
    enrollment_id = serializers.UUIDField()
    state = serializers.ChoiceField(choices=EnrollmentState.choices)
    certificate = CertificateSerializer(allow_null=True)


class LessonCompletionSerializer(serializers.Serializer):
    progress = LessonProgressSerializer()
    newly_completed = serializers.BooleanField()
    state = serializers.ChoiceField(choices=EnrollmentState.choices)
    progress_percent = serializers.IntegerField()
    certificate = CertificateSerializer(allow_null=True)


class CompletionStatusSerializer(serializers.Serializer):
    state = serializers.ChoiceField(choices=EnrollmentState.choices)
    progress = ProgressSummarySerializer()
    gate_met = serializers.BooleanField()
    completed_at = serializers.DateTimeField(allow_null=True)
    certificate = CertificateSerializer(allow_null=True)
