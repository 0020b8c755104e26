"""Tests for role based permission helpers."""

from types import SimpleNamespace

from django.contrib.auth.models import AnonymousUser
from django.test import TestCase

from apps.courses.models import Course
from apps.courses.permissions import IsCourseInstructorOrAdmin, is_course_owner
from apps.users.models import User
from apps.users.permissions import IsInstructorOrAdmin, is_admin_user


class RolePermissionTests(TestCase):
    def setUp(self):
        self.learner = User.objects.create_user(email="learner@example.com", password="pass12345")
        self.instructor = User.objects.create_user(
            email="instructor@example.com", password="pass12345", role=User.Role.INSTRUCTOR
        )
        self.admin = User.objects.create_user(
            email="admin@example.com", password="pass12345", role=User.Role.ADMIN
        )
        self.staff = User.objects.create_user(
            email="staff@example.com", password="pass12345", is_staff=True
        )

    def test_is_admin_user(self):
        self.assertTrue(is_admin_user(self.admin))
        self.assertTrue(is_admin_user(self.staff))
        self.assertFalse(is_admin_user(self.instructor))
        self.assertFalse(is_admin_user(AnonymousUser()))
        self.assertFalse(is_admin_user(None))

    def test_instructor_or_admin(self):
        permission = IsInstructorOrAdmin()
        for user, expected in (
            (self.learner, False),
            (self.instructor, True),
            (self.admin, True),
            (AnonymousUser(), False),
        ):
            with self.subTest(user=user):
                request = SimpleNamespace(user=user)
                self.assertEqual(permission.has_permission(request, None), expected)

    def test_course_owner(self):
        course = Course.objects.create(title="Owned", instructor=self.instructor)
        other = User.objects.create_user(
            email="other@example.com", password="pass12345", role=User.Role.INSTRUCTOR
        )
        self.assertTrue(is_course_owner(self.instructor, course))
        self.assertTrue(is_course_owner(self.admin, course))
        self.assertFalse(is_course_owner(other, course))
        self.assertFalse(is_course_owner(self.learner, course))

        # Objects exposing ``course`` resolve to their course
        permission = IsCourseInstructorOrAdmin()
        wrapped = SimpleNamespace(course=course)
        self.assertTrue(
            permission.has_object_permission(SimpleNamespace(user=self.instructor), None, wrapped)
        )
        self.assertFalse(
            permission.has_object_permission(SimpleNamespace(user=other), None, wrapped)
        )


class UserManagerTests(TestCase):
    def test_create_user_requires_email(self):
        with self.assertRaises(ValueError):
            User.objects.create_user(email="", password="pass12345")

    def test_superuser_is_admin(self):
        user = User.objects.create_superuser(email="root@example.com", password="pass12345")
        self.assertEqual(user.role, User.Role.ADMIN)
        self.assertTrue(is_admin_user(user))

    def test_full_name(self):
        user = User.objects.create_user(
            email="ada@example.com", password="pass12345", first_name="Ada", last_name="Lovelace"
        )
        self.assertEqual(user.full_name, "Ada Lovelace")
        self.assertEqual(User(email="x@example.com").display_name, "x@example.com")
