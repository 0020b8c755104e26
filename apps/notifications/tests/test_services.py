"""Tests for notifications app services."""

import uuid
from unittest.mock import patch

from django.core import mail
from django.test import TestCase, override_settings

from apps.notifications.models import DeliveryMethod, Notification, NotificationType
from apps.notifications.services import (
    EmailService,
    NotificationError,
    NotificationService,
)
from apps.notifications.tasks import send_notification_task
from apps.users.models import User


class NotificationServiceTests(TestCase):
    """Tests for the NotificationService class."""

    def setUp(self):
        self.user = User.objects.create_user(
            email="learner@example.com",
            password="testpass123",
            first_name="Test",
            last_name="Learner",
        )

    @patch("apps.notifications.services.send_notification_task")
    def test_create_notification_success(self, mock_task):
        notification = NotificationService.create_notification(
            user=self.user,
            notification_type=NotificationType.CERTIFICATE_ISSUED,
            subject="Your certificate",
            message="Congratulations",
            action_url="https://academy.example.com/certificate/CERT-2026-ABC",
            payload={"certificate_number": "CERT-2026-ABC"},
        )

        self.assertEqual(notification.recipient, self.user)
        self.assertEqual(notification.notification_type, NotificationType.CERTIFICATE_ISSUED)
        self.assertEqual(notification.status, Notification.Status.PENDING)
        self.assertEqual(notification.payload["certificate_number"], "CERT-2026-ABC")
        self.assertIn("EMAIL", notification.delivery_methods)
        self.assertIn("IN_APP", notification.delivery_methods)
        mock_task.delay.assert_called_once_with(str(notification.id))

    @patch("apps.notifications.services.send_notification_task")
    def test_create_notification_no_trigger_send(self, mock_task):
        NotificationService.create_notification(
            user=self.user,
            notification_type=NotificationType.COURSE_COMPLETION,
            subject="Done",
            message="Course completed",
            trigger_send=False,
            delivery_methods=[DeliveryMethod.IN_APP],
        )
        mock_task.delay.assert_not_called()

    def test_create_notification_missing_required_args(self):
        for kwargs in (
            {"user": None, "notification_type": NotificationType.COURSE_COMPLETION, "message": "x"},
            {"user": self.user, "notification_type": None, "message": "x"},
            {"user": self.user, "notification_type": NotificationType.COURSE_COMPLETION, "message": ""},
        ):
            with self.subTest(kwargs=kwargs):
                with self.assertRaises(NotificationError):
                    NotificationService.create_notification(subject="Test", **kwargs)
        self.assertFalse(Notification.objects.exists())

    def test_create_notification_invalid_type(self):
        with self.assertRaises(NotificationError):
            NotificationService.create_notification(
                user=self.user,
                notification_type="INVALID_TYPE",
                subject="Test",
                message="Test message",
            )

    def test_send_notification_delivers_email(self):
        notification = Notification.objects.create(
            recipient=self.user,
            notification_type=NotificationType.COURSE_COMPLETION,
            subject="Well done",
            message="You finished the course",
            action_url="https://academy.example.com/courses/1",
            delivery_methods=["EMAIL"],
        )
        NotificationService.send_notification(notification.id)

        notification.refresh_from_db()
        self.assertEqual(notification.status, Notification.Status.SENT)
        self.assertIsNotNone(notification.sent_at)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].subject, "Well done")
        self.assertIn("https://academy.example.com/courses/1", mail.outbox[0].body)

    def test_send_notification_not_found(self):
        # Logged, not raised
        NotificationService.send_notification(uuid.uuid4())

    def test_send_notification_not_pending(self):
        notification = Notification.objects.create(
            recipient=self.user,
            notification_type=NotificationType.COURSE_COMPLETION,
            message="Test message",
            delivery_methods=["EMAIL"],
            status=Notification.Status.SENT,
        )
        with patch.object(EmailService, "send_email_notification") as mock:
            NotificationService.send_notification(notification.id)
            mock.assert_not_called()

    def test_send_notification_all_methods_fail(self):
        notification = Notification.objects.create(
            recipient=self.user,
            notification_type=NotificationType.COURSE_COMPLETION,
            message="Test message",
            delivery_methods=["EMAIL"],
        )
        with patch.object(
            EmailService, "send_email_notification", side_effect=Exception("SMTP error")
        ):
            NotificationService.send_notification(notification.id)

        notification.refresh_from_db()
        self.assertEqual(notification.status, Notification.Status.FAILED)
        self.assertIn("SMTP error", notification.fail_reason)

    def test_generate_content_for_certificate(self):
        content = NotificationService.generate_content_for_type(
            NotificationType.CERTIFICATE_ISSUED,
            {
                "user_name": "Test Learner",
                "course_name": "Python Basics",
                "certificate_number": "CERT-2026-ABC",
                "issued_at": "March 01, 2026",
            },
        )
        self.assertEqual(content["subject"], "Your certificate for Python Basics")
        self.assertIn("CERT-2026-ABC", content["message"])
        self.assertIn("March 01, 2026", content["message"])

    def test_generate_content_for_mentee_completion(self):
        content = NotificationService.generate_content_for_type(
            "MENTEE_COURSE_COMPLETED",
            {"user_name": "Mentor", "student_name": "Lee", "course_name": "Python Basics"},
        )
        self.assertIn("Lee", content["subject"])
        self.assertIn("Python Basics", content["message"])


class EmailServiceTests(TestCase):
    """Tests for the EmailService class."""

    def setUp(self):
        self.user = User.objects.create_user(email="learner@example.com", password="testpass123")

    @override_settings(DEFAULT_FROM_EMAIL="noreply@academy.example.com")
    @patch("apps.notifications.services.send_mail")
    def test_send_email_notification_success(self, mock_send_mail):
        notification = Notification.objects.create(
            recipient=self.user,
            notification_type=NotificationType.COURSE_COMPLETION,
            subject="Test Subject",
            message="Test message body",
            delivery_methods=["EMAIL"],
        )
        mock_send_mail.return_value = 1

        self.assertTrue(EmailService.send_email_notification(notification))
        call_args = mock_send_mail.call_args
        self.assertEqual(call_args.kwargs["subject"], "Test Subject")
        self.assertEqual(call_args.kwargs["from_email"], "noreply@academy.example.com")
        self.assertEqual(call_args.kwargs["recipient_list"], [self.user.email])

    def test_send_email_notification_no_email(self):
        self.user.email = ""
        self.user.save()
        notification = Notification.objects.create(
            recipient=self.user,
            notification_type=NotificationType.COURSE_COMPLETION,
            message="Test message",
            delivery_methods=["EMAIL"],
        )
        self.assertFalse(EmailService.send_email_notification(notification))


class SendNotificationTaskTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(email="learner@example.com", password="testpass123")

    def test_task_sends_pending_notification(self):
        notification = Notification.objects.create(
            recipient=self.user,
            notification_type=NotificationType.COURSE_COMPLETION,
            subject="Hi",
            message="Body",
            delivery_methods=["EMAIL"],
        )
        send_notification_task.apply(args=[str(notification.id)])
        notification.refresh_from_db()
        self.assertEqual(notification.status, Notification.Status.SENT)
