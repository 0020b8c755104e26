from rest_framework import permissions

from apps.courses.permissions import is_course_owner

from .models import QuizAttempt


class CanReviewAssessment(permissions.BasePermission):
    """The instructor of the course a submission or quiz attempt belongs to, or an admin."""

    def has_object_permission(self, request, view, obj):
        # Object 'obj' here is an AssignmentSubmission or a QuizAttempt
        if isinstance(obj, QuizAttempt):
            return is_course_owner(request.user, obj.quiz.course)
        return is_course_owner(request.user, obj.assignment.course)
