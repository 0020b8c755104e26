import logging

from .models import MentorshipRequest

logger = logging.getLogger(__name__)


class MentorshipService:
    """Queries used when a learner's course completion affects mentorships."""

    @staticmethod
    def requests_waiting_on_course(student, course):
        """Mentorship requests parked until ``student`` completes ``course``."""
        return MentorshipRequest.objects.filter(
            student=student,
            course_to_complete=course,
            status=MentorshipRequest.Status.COURSE_REQUIRED,
        ).select_related("mentor")
