import logging
import uuid

from django.shortcuts import get_object_or_404
from django.utils import timezone
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import (
    OpenApiExample,
    OpenApiParameter,
    OpenApiResponse,
    extend_schema,
)
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.courses.models import ContentItem
from apps.courses.permissions import is_course_owner

from .models import Certificate, Enrollment
from .serializers import (
    CertificateSerializer,
    CertificateVerificationSerializer,
    CompletionStatusSerializer,
    EnrollmentOutlineSerializer,
    EnrollmentSerializer,
    LessonCompletionSerializer,
)
from .services import (
    CertificateService,
    CompletionService,
    ContentLockedError,
    ContentNotInCourseError,
    CourseOutlineService,
    ProgressError,
    ProgressTrackerService,
)

logger = logging.getLogger(__name__)

UUID_PATTERN = "[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}"


def get_enrollment_for_user(user, enrollment_id, allow_course_owner=False) -> Enrollment:
    """The enrollment if ``user`` is its learner (or, optionally, the course owner)."""
    enrollment = get_object_or_404(
        Enrollment.objects.select_related("user", "course"), pk=enrollment_id
    )
    if enrollment.user_id == user.id:
        return enrollment
    if allow_course_owner and is_course_owner(user, enrollment.course):
        return enrollment
    raise PermissionDenied("You do not have access to this enrollment.")


def completion_payload(result) -> dict:
    return {
        "state": result.state,
        "progress": result.progress,
        "gate_met": result.gate_met,
        "completed_at": result.completion.completed_at if result.completion else None,
        "certificate": result.certificate,
    }


# --- Enrollment Views ---


@extend_schema(tags=["Enrollments"])
class EnrollmentViewSet(viewsets.ReadOnlyModelViewSet):
    """Lists the current user's enrollments."""

    serializer_class = EnrollmentSerializer
    lookup_value_regex = UUID_PATTERN
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(
        parameters=[
            OpenApiParameter(name="course_id", description="Filter by Course UUID", required=False, type=OpenApiTypes.UUID),
        ]
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return Enrollment.objects.none()
        queryset = Enrollment.objects.filter(user=self.request.user)
        course_id_filter = self.request.query_params.get("course_id")
        if course_id_filter:
            try:
                queryset = queryset.filter(course_id=uuid.UUID(course_id_filter))
            except ValueError:
                return Enrollment.objects.none()
        return queryset.select_related("course", "course__instructor").order_by("-enrolled_at")

    @extend_schema(
        summary="Course Outline",
        description=(
            "Sections and content items with drip availability and completion, "
            "overall progress, the item to resume at and the certificate if issued. "
            "Opening the outline re-checks completion."
        ),
        responses={200: EnrollmentOutlineSerializer, 403: OpenApiTypes.OBJECT, 404: OpenApiTypes.OBJECT},
    )
    @action(detail=True, methods=["get"], url_path="outline")
    def outline(self, request, pk=None):
        enrollment = get_enrollment_for_user(request.user, pk, allow_course_owner=True)
        now = timezone.now()
        result = CompletionService.evaluate(enrollment, now=now)
        outline = CourseOutlineService.build(enrollment.course, enrollment, now=now)
        outline.update(
            {
                "enrollment_id": enrollment.id,
                "state": result.state,
                "certificate": result.certificate,
            }
        )
        return Response(EnrollmentOutlineSerializer(outline).data)

    @extend_schema(
        summary="Mark Lesson Complete",
        parameters=[
            OpenApiParameter(name="content_item_id", required=True, type=OpenApiTypes.UUID, location=OpenApiParameter.PATH),
        ],
        request=None,
        responses={
            200: LessonCompletionSerializer,
            400: OpenApiTypes.OBJECT,
            403: OpenApiTypes.OBJECT,
            404: OpenApiTypes.OBJECT,
        },
    )
    @action(
        detail=True,
        methods=["post"],
        url_path=rf"content/(?P<content_item_id>{UUID_PATTERN})/complete",
    )
    def complete_content(self, request, pk=None, content_item_id=None):
        enrollment = get_enrollment_for_user(request.user, pk)
        content_item = get_object_or_404(
            ContentItem.objects.select_related("section"), pk=content_item_id
        )
        try:
            completion = ProgressTrackerService.complete_lesson(enrollment, content_item)
        except ContentNotInCourseError as e:
            return Response({"detail": str(e)}, status=status.HTTP_404_NOT_FOUND)
        except ContentLockedError as e:
            return Response({"detail": str(e)}, status=status.HTTP_403_FORBIDDEN)
        except ProgressError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        # A repeated completion evaluated nothing, so read the current state
        result = completion.result or CompletionService.evaluate(enrollment)
        data = {
            "progress": completion.progress,
            "newly_completed": completion.newly_completed,
            "state": result.state,
            "progress_percent": result.progress.percent,
            "certificate": result.certificate,
        }
        return Response(LessonCompletionSerializer(data).data, status=status.HTTP_200_OK)

    @extend_schema(
        summary="Re-check Completion",
        description="Idempotent re-evaluation of the completion gate; issues the certificate if it is due.",
        request=None,
        responses={200: CompletionStatusSerializer, 403: OpenApiTypes.OBJECT, 404: OpenApiTypes.OBJECT},
    )
    @action(detail=True, methods=["post"], url_path="sync")
    def sync(self, request, pk=None):
        enrollment = get_enrollment_for_user(request.user, pk)
        result = CompletionService.evaluate(enrollment)
        logger.info(f"Completion sync for E:{enrollment.id}: {result.state}")
        return Response(CompletionStatusSerializer(completion_payload(result)).data)


# --- Certificate Views ---


@extend_schema(tags=["Certificates"])
class CertificateViewSet(viewsets.ReadOnlyModelViewSet):
    """Lists certificates for the current user."""

    serializer_class = CertificateSerializer
    lookup_value_regex = UUID_PATTERN
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return Certificate.objects.none()

        # Users can only see their own certificates
        return (
            Certificate.objects.filter(user=self.request.user)
            .select_related("course")
            .order_by("-issued_at")
        )


@extend_schema(
    tags=["Certificates"],
    summary="Verify Certificate",
    description="Public lookup of a certificate by its number.",
    parameters=[
        OpenApiParameter(name="certificate_number", required=True, type=OpenApiTypes.STR, location=OpenApiParameter.PATH),
    ],
    responses={
        200: OpenApiResponse(
            response=CertificateVerificationSerializer,
            description="Certificate is valid",
            examples=[
                OpenApiExample(
                    "Valid Certificate",
                    value={
                        "valid": True,
                        "certificate_number": "CERT-2026-9F1C0A7B44E2",
                        "learner_name": "Jane Doe",
                        "course_title": "Introduction to Python",
                        "issued_at": "2026-01-15T10:30:00Z",
                    },
                )
            ],
        ),
        404: OpenApiResponse(
            description="Certificate not found",
            examples=[OpenApiExample("Not Found", value={"valid": False, "detail": "Certificate not found"})],
        ),
    },
)
class CertificateVerifyView(APIView):
    permission_classes = [permissions.AllowAny]  # Anyone can verify a certificate
    authentication_classes = []

    def get(self, request, certificate_number, format=None):
        certificate = CertificateService.verify_certificate(certificate_number)
        if certificate is None:
            return Response(
                {"valid": False, "detail": "Certificate not found"},
                status=status.HTTP_404_NOT_FOUND,
            )
        data = {
            "valid": True,
            "certificate_number": certificate.certificate_number,
            "learner_name": certificate.user.display_name,
            "course_title": certificate.course.title,
            "issued_at": certificate.issued_at,
        }
        return Response(CertificateVerificationSerializer(data).data)
