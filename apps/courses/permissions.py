from rest_framework import permissions

from apps.users.permissions import is_admin_user


def is_course_owner(user, course) -> bool:
    """The course instructor (author) or an admin."""
    if not user or not user.is_authenticated:
        return False
    return course.instructor_id == user.id or is_admin_user(user)


class IsCourseInstructorOrAdmin(permissions.BasePermission):
    """
    Allows access only to the instructor listed on the course or an admin user.
    Works for Course objects and anything exposing a ``course`` attribute.
    """

    def has_object_permission(self, request, view, obj):
        course = getattr(obj, "course", obj)
        return is_course_owner(request.user, course)
