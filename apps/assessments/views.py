import logging

from django.shortcuts import get_object_or_404
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import generics, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.enrollments.views import get_enrollment_for_user
from apps.users.permissions import IsInstructorOrAdmin

from .models import AssignmentSubmission, Quiz, QuizAttempt
from .permissions import CanReviewAssessment
from .serializers import (
    AssignmentReviewSerializer,
    AssignmentSubmissionCreateSerializer,
    AssignmentSubmissionSerializer,
    QuizAttemptCreateSerializer,
    QuizAttemptSerializer,
    QuizGradeSerializer,
    QuizSerializer,
)
from .services import AssessmentError, AssignmentService, QuizService

logger = logging.getLogger(__name__)

ENROLLMENT_PARAMETER = OpenApiParameter(
    name="enrollment_id", required=True, type=OpenApiTypes.UUID, location=OpenApiParameter.PATH
)


@extend_schema(
    tags=["Assessments"],
    summary="Course Quiz",
    description="The quiz of the enrollment's course, without the correct answers.",
    parameters=[ENROLLMENT_PARAMETER],
    responses={200: QuizSerializer, 403: OpenApiTypes.OBJECT, 404: OpenApiTypes.OBJECT},
)
class QuizDetailView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, enrollment_id, format=None):
        enrollment = get_enrollment_for_user(request.user, enrollment_id)
        quiz = get_object_or_404(
            Quiz.objects.prefetch_related("questions__options"), course_id=enrollment.course_id
        )
        return Response(QuizSerializer(quiz).data)


@extend_schema(
    tags=["Assessments"],
    summary="Submit Quiz Attempt",
    description="Grades the answers on the server. Attempts with short answers wait for the instructor.",
    parameters=[ENROLLMENT_PARAMETER],
    request=QuizAttemptCreateSerializer,
    responses={201: QuizAttemptSerializer, 400: OpenApiTypes.OBJECT, 403: OpenApiTypes.OBJECT, 404: OpenApiTypes.OBJECT},
)
class QuizAttemptCreateView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, enrollment_id, format=None):
        enrollment = get_enrollment_for_user(request.user, enrollment_id)
        serializer = QuizAttemptCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        try:
            attempt = QuizService.submit_attempt(enrollment, serializer.validated_data["answers"])
        except AssessmentError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(QuizAttemptSerializer(attempt).data, status=status.HTTP_201_CREATED)


@extend_schema(
    tags=["Assessments"],
    summary="Quiz Attempts Awaiting Grading",
    description="Attempts with short answers in courses the current instructor teaches.",
)
class PendingQuizAttemptListView(generics.ListAPIView):
    serializer_class = QuizAttemptSerializer
    permission_classes = [permissions.IsAuthenticated, IsInstructorOrAdmin]

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return QuizAttempt.objects.none()
        return QuizService.attempts_awaiting_grading(self.request.user).prefetch_related(
            "answers__question"
        )


@extend_schema(
    tags=["Assessments"],
    summary="Grade Quiz Attempt",
    parameters=[
        OpenApiParameter(name="attempt_id", required=True, type=OpenApiTypes.UUID, location=OpenApiParameter.PATH)
    ],
    request=QuizGradeSerializer,
    responses={200: QuizAttemptSerializer, 400: OpenApiTypes.OBJECT, 403: OpenApiTypes.OBJECT, 404: OpenApiTypes.OBJECT},
)
class QuizAttemptGradeView(APIView):
    permission_classes = [permissions.IsAuthenticated, CanReviewAssessment]

    def post(self, request, attempt_id, format=None):
        attempt = get_object_or_404(
            QuizAttempt.objects.select_related("quiz__course", "enrollment"), pk=attempt_id
        )
        self.check_object_permissions(request, attempt)
        serializer = QuizGradeSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        try:
            attempt = QuizService.grade_answers(
                attempt, grader=request.user, grades=serializer.validated_data["grades"]
            )
        except AssessmentError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(QuizAttemptSerializer(attempt).data)


@extend_schema(
    tags=["Assessments"],
    summary="Submit Assignment",
    description="Creates the submission, or resubmits after a rejection.",
    parameters=[ENROLLMENT_PARAMETER],
    request=AssignmentSubmissionCreateSerializer,
    responses={201: AssignmentSubmissionSerializer, 400: OpenApiTypes.OBJECT, 403: OpenApiTypes.OBJECT, 404: OpenApiTypes.OBJECT},
)
class AssignmentSubmitView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, enrollment_id, format=None):
        enrollment = get_enrollment_for_user(request.user, enrollment_id)
        serializer = AssignmentSubmissionCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        try:
            submission = AssignmentService.submit(
                enrollment,
                text_content=serializer.validated_data["text_content"],
                file_url=serializer.validated_data["file_url"],
            )
        except AssessmentError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(
            AssignmentSubmissionSerializer(submission).data, status=status.HTTP_201_CREATED
        )


@extend_schema(
    tags=["Assessments"],
    summary="Pending Submissions",
    description="Submissions awaiting review in courses the current instructor teaches.",
)
class PendingSubmissionListView(generics.ListAPIView):
    serializer_class = AssignmentSubmissionSerializer
    permission_classes = [permissions.IsAuthenticated, IsInstructorOrAdmin]

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return AssignmentSubmission.objects.none()
        return AssignmentService.pending_for_reviewer(self.request.user)


@extend_schema(
    tags=["Assessments"],
    summary="Review Submission",
    parameters=[
        OpenApiParameter(name="submission_id", required=True, type=OpenApiTypes.UUID, location=OpenApiParameter.PATH)
    ],
    request=AssignmentReviewSerializer,
    responses={200: AssignmentSubmissionSerializer, 400: OpenApiTypes.OBJECT, 403: OpenApiTypes.OBJECT, 404: OpenApiTypes.OBJECT},
)
class AssignmentReviewView(APIView):
    permission_classes = [permissions.IsAuthenticated, CanReviewAssessment]

    def post(self, request, submission_id, format=None):
        submission = get_object_or_404(
            AssignmentSubmission.objects.select_related("assignment__course", "enrollment"),
            pk=submission_id,
        )
        self.check_object_permissions(request, submission)
        serializer = AssignmentReviewSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        try:
            submission = AssignmentService.review(
                submission,
                reviewer=request.user,
                approved=serializer.validated_data["approved"],
                feedback=serializer.validated_data["feedback"],
            )
        except AssessmentError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(AssignmentSubmissionSerializer(submission).data)
