"""
Tests for Assessment views.
Tests cover enrollment ownership, server-side quiz grading, instructor-only
review and the review queues.
"""

from unittest.mock import patch

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.assessments.models import Assignment, AssignmentSubmission, QuizAttempt, QuizQuestion
from apps.assessments.tests.factories import answer_sheet, build_quiz
from apps.courses.models import ContentItem, Course, Section
from apps.enrollments.models import Certificate, CourseCompletion, Enrollment, LessonProgress
from apps.users.models import User


@patch("apps.notifications.services.send_notification_task")
class AssessmentViewTests(APITestCase):
    """Base test case with common setup for assessment tests."""

    def setUp(self):
        self.instructor = User.objects.create_user(
            email="instructor@test.com",
            password="testpass123",
            first_name="Instructor",
            last_name="User",
            role=User.Role.INSTRUCTOR,
        )
        self.other_instructor = User.objects.create_user(
            email="other@test.com", password="testpass123", role=User.Role.INSTRUCTOR
        )
        self.learner = User.objects.create_user(
            email="learner@test.com",
            password="testpass123",
            first_name="Learner",
            last_name="User",
        )
        self.course = Course.objects.create(title="Test Course", instructor=self.instructor)
        section = Section.objects.create(course=self.course, title="Only section")
        self.item = ContentItem.objects.create(section=section, title="Only lesson")
        self.quiz = build_quiz(self.course, title="Final Quiz")
        self.assignment = Assignment.objects.create(course=self.course, title="Capstone")
        self.enrollment = Enrollment.objects.create(user=self.learner, course=self.course)

    def quiz_url(self, enrollment=None):
        return reverse(
            "assessments:quiz-attempt-create",
            kwargs={"enrollment_id": (enrollment or self.enrollment).id},
        )

    def submit_url(self):
        return reverse(
            "assessments:assignment-submit", kwargs={"enrollment_id": self.enrollment.id}
        )

    def review_url(self, submission):
        return reverse("assessments:submission-review", kwargs={"submission_id": submission.id})

    def grade_url(self, attempt):
        return reverse("assessments:quiz-attempt-grade", kwargs={"attempt_id": attempt.id})

    def complete_lesson(self):
        LessonProgress.objects.create(
            enrollment=self.enrollment, content_item=self.item, completed=True
        )

    def test_quiz_detail_hides_correct_options(self, mock_task):
        self.client.force_authenticate(user=self.learner)
        response = self.client.get(
            reverse("assessments:quiz-detail", kwargs={"enrollment_id": self.enrollment.id})
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data["questions"]), 10)
        option = response.data["questions"][0]["options"][0]
        self.assertEqual(set(option), {"id", "text", "order"})

    def test_learner_submits_quiz_answers(self, mock_task):
        self.client.force_authenticate(user=self.learner)
        response = self.client.post(
            self.quiz_url(), {"answers": answer_sheet(self.quiz, correct=8)}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data["passed"])
        self.assertEqual(response.data["score_percentage"], "80.00")
        self.assertEqual(len(response.data["answers"]), 10)

    def test_learner_cannot_report_own_score(self, mock_task):
        self.assignment.delete()
        self.quiz.passing_percentage = 90
        self.quiz.save()
        self.complete_lesson()
        self.client.force_authenticate(user=self.learner)

        response = self.client.post(self.quiz_url(), {"score_percentage": "100"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        # A claimed score or outcome next to real answers is ignored
        response = self.client.post(
            self.quiz_url(),
            {"answers": answer_sheet(self.quiz, correct=1), "score_percentage": "100", "passed": True},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertFalse(response.data["passed"])
        self.assertEqual(response.data["score_percentage"], "10.00")

        self.assertFalse(QuizAttempt.objects.filter(passed=True).exists())
        self.assertFalse(CourseCompletion.objects.filter(enrollment=self.enrollment).exists())
        self.assertFalse(Certificate.objects.filter(enrollment=self.enrollment).exists())

    def test_passing_answers_certify_without_assignment(self, mock_task):
        self.assignment.delete()
        self.complete_lesson()
        self.client.force_authenticate(user=self.learner)
        response = self.client.post(
            self.quiz_url(), {"answers": answer_sheet(self.quiz, correct=10)}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(Certificate.objects.filter(enrollment=self.enrollment).exists())

    def test_invalid_option_returns_400(self, mock_task):
        first, second = self.quiz.questions.order_by("order")[:2]
        self.client.force_authenticate(user=self.learner)
        response = self.client.post(
            self.quiz_url(),
            {"answers": {str(first.id): str(second.options.get(is_correct=True).id)}},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(QuizAttempt.objects.exists())

    def test_other_user_cannot_use_enrollment(self, mock_task):
        self.client.force_authenticate(user=self.other_instructor)
        response = self.client.post(
            self.quiz_url(), {"answers": answer_sheet(self.quiz, correct=10)}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_unauthenticated_rejected(self, mock_task):
        response = self.client.post(self.quiz_url(), {"answers": {}}, format="json")
        self.assertIn(
            response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN)
        )

    def test_course_without_quiz_returns_400(self, mock_task):
        answers = answer_sheet(self.quiz, correct=10)
        self.quiz.delete()
        self.client.force_authenticate(user=self.learner)
        response = self.client.post(self.quiz_url(), {"answers": answers}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_instructor_grades_short_answer(self, mock_task):
        self.assignment.delete()
        self.complete_lesson()
        QuizQuestion.objects.create(
            quiz=self.quiz,
            text="Explain",
            question_type=QuizQuestion.QuestionType.SHORT_ANSWER,
            order=10,
        )
        self.client.force_authenticate(user=self.learner)
        response = self.client.post(
            self.quiz_url(), {"answers": answer_sheet(self.quiz, correct=10)}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(response.data["passed"])
        self.assertTrue(response.data["awaiting_grading"])
        self.assertFalse(Certificate.objects.exists())

        attempt = QuizAttempt.objects.get()
        short_answer = attempt.answers.get(
            question__question_type=QuizQuestion.QuestionType.SHORT_ANSWER
        )
        grades = {"grades": {str(short_answer.id): True}}
        for user in (self.learner, self.other_instructor):
            self.client.force_authenticate(user=user)
            response = self.client.post(self.grade_url(attempt), grades, format="json")
            self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.instructor)
        pending = self.client.get(reverse("assessments:quiz-attempt-pending-list"))
        self.assertEqual(pending.data["count"], 1)
        response = self.client.post(self.grade_url(attempt), grades, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["passed"])
        self.assertTrue(Certificate.objects.filter(enrollment=self.enrollment).exists())

    def test_submit_and_resubmit_rules(self, mock_task):
        self.client.force_authenticate(user=self.learner)
        response = self.client.post(self.submit_url(), {"text_content": "My work"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["status"], AssignmentSubmission.Status.PENDING)

        response = self.client.post(self.submit_url(), {"text_content": "Again"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_empty_submission_rejected(self, mock_task):
        self.client.force_authenticate(user=self.learner)
        response = self.client.post(self.submit_url(), {}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_pending_queue(self, mock_task):
        AssignmentSubmission.objects.create(
            assignment=self.assignment, enrollment=self.enrollment, text_content="Work"
        )
        url = reverse("assessments:submission-pending-list")

        self.client.force_authenticate(user=self.instructor)
        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 1)

        self.client.force_authenticate(user=self.other_instructor)
        self.assertEqual(self.client.get(url).data["count"], 0)

        self.client.force_authenticate(user=self.learner)
        self.assertEqual(self.client.get(url).status_code, status.HTTP_403_FORBIDDEN)

    def test_only_course_instructor_reviews(self, mock_task):
        submission = AssignmentSubmission.objects.create(
            assignment=self.assignment, enrollment=self.enrollment, text_content="Work"
        )
        for user in (self.learner, self.other_instructor):
            self.client.force_authenticate(user=user)
            response = self.client.post(self.review_url(submission), {"approved": True}, format="json")
            self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        submission.refresh_from_db()
        self.assertEqual(submission.status, AssignmentSubmission.Status.PENDING)

    def test_approval_completes_course_without_learner_action(self, mock_task):
        self.complete_lesson()
        self.client.force_authenticate(user=self.learner)
        self.client.post(
            self.quiz_url(), {"answers": answer_sheet(self.quiz, correct=10)}, format="json"
        )
        self.client.post(self.submit_url(), {"text_content": "Work"}, format="json")
        self.assertFalse(Certificate.objects.exists())

        submission = AssignmentSubmission.objects.get(enrollment=self.enrollment)
        self.client.force_authenticate(user=self.instructor)
        response = self.client.post(
            self.review_url(submission), {"approved": True, "feedback": "Great"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], AssignmentSubmission.Status.APPROVED)
        self.assertTrue(Certificate.objects.filter(enrollment=self.enrollment).exists())

    def test_reviewing_twice_returns_400(self, mock_task):
        submission = AssignmentSubmission.objects.create(
            assignment=self.assignment, enrollment=self.enrollment, text_content="Work"
        )
        self.client.force_authenticate(user=self.instructor)
        self.client.post(self.review_url(submission), {"approved": False}, format="json")
        response = self.client.post(self.review_url(submission), {"approved": True}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
