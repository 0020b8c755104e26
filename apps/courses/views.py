import logging

from django.shortcuts import get_object_or_404
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import permissions
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import Course
from .permissions import IsCourseInstructorOrAdmin
from .serializers import CourseOutlineSerializer

logger = logging.getLogger(__name__)


@extend_schema(
    tags=["Courses"],
    summary="Preview Course Outline",
    description="Author preview: every content item is shown as available, drip delays are ignored.",
    parameters=[
        OpenApiParameter(name="course_id", required=True, type=OpenApiTypes.UUID, location=OpenApiParameter.PATH)
    ],
    responses={200: CourseOutlineSerializer, 403: OpenApiTypes.OBJECT, 404: OpenApiTypes.OBJECT},
)
class CoursePreviewView(APIView):
    permission_classes = [permissions.IsAuthenticated, IsCourseInstructorOrAdmin]

    def get(self, request, course_id, format=None):
        from apps.enrollments.services import CourseOutlineService

        course = get_object_or_404(Course, pk=course_id)
        self.check_object_permissions(request, course)
        outline = CourseOutlineService.build(course, preview=True)
        logger.debug(f"Preview of course {course.id} requested by {request.user.id}")
        return Response(CourseOutlineSerializer(outline).data)
