from django.test import TestCase

from apps.courses.models import Course
from apps.mentorship.models import MentorshipRequest
from apps.mentorship.services import MentorshipService
from apps.users.models import User


class MentorshipServiceTests(TestCase):
    def setUp(self):
        self.student = User.objects.create_user(email="student@example.com", password="testpass123")
        self.mentor = User.objects.create_user(
            email="mentor@example.com", password="testpass123", role=User.Role.INSTRUCTOR
        )
        self.course = Course.objects.create(title="Prerequisite")

    def test_only_course_required_requests_for_that_course(self):
        waiting = MentorshipRequest.objects.create(
            student=self.student,
            mentor=self.mentor,
            course_to_complete=self.course,
            status=MentorshipRequest.Status.COURSE_REQUIRED,
        )
        MentorshipRequest.objects.create(
            student=self.student,
            mentor=self.mentor,
            course_to_complete=self.course,
            status=MentorshipRequest.Status.DECLINED,
        )
        MentorshipRequest.objects.create(
            student=self.student,
            mentor=self.mentor,
            course_to_complete=Course.objects.create(title="Other"),
            status=MentorshipRequest.Status.COURSE_REQUIRED,
        )

        result = list(MentorshipService.requests_waiting_on_course(self.student, self.course))
        self.assertEqual(result, [waiting])

    def test_other_students_are_ignored(self):
        other = User.objects.create_user(email="other@example.com", password="testpass123")
        MentorshipRequest.objects.create(
            student=other,
            mentor=self.mentor,
            course_to_complete=self.course,
            status=MentorshipRequest.Status.COURSE_REQUIRED,
        )
        self.assertFalse(
            MentorshipService.requests_waiting_on_course(self.student, self.course).exists()
        )
