from rest_framework import permissions

from apps.users.models import User


def is_admin_user(user) -> bool:
    """
    Check if user has admin privileges.

    Admin privileges are granted to superusers, users with the ADMIN role
    and Django staff users.
    """
    if not user or not getattr(user, "is_authenticated", False):
        return False
    return user.is_superuser or user.role == User.Role.ADMIN or user.is_staff


class IsInstructorOrAdmin(permissions.BasePermission):
    """Allows access only to Admins or Instructors."""

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return is_admin_user(user) or user.role == User.Role.INSTRUCTOR
