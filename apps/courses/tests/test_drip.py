"""Tests for drip content scheduling."""

from datetime import date, datetime, timedelta
from datetime import timezone as dt_timezone

from django.test import SimpleTestCase, override_settings

from apps.courses import drip
from apps.courses.drip import DripScheduleError
from apps.courses.models import ContentItem, Course
from apps.enrollments.models import Enrollment

UTC = dt_timezone.utc

# 2026-10-19 is a Monday
MONDAY = datetime(2026, 10, 19, 15, 30, tzinfo=UTC)


def make_course(**kwargs):
    defaults = {
        "title": "Drip Course",
        "drip_enabled": True,
        "drip_schedule_type": Course.DripScheduleType.WEEK,
        "drip_release_day": Course.ReleaseDay.WEDNESDAY,
    }
    defaults.update(kwargs)
    return Course(**defaults)


class IsAvailableTests(SimpleTestCase):
    """Tests for drip.is_available."""

    def setUp(self):
        self.course = make_course()
        self.enrollment = Enrollment(enrolled_at=MONDAY)
        self.item = ContentItem(title="Week 1", drip_delay_days=3)

    def test_drip_disabled_is_always_available(self):
        course = make_course(drip_enabled=False)
        self.assertTrue(drip.is_available(course, self.item, self.enrollment, MONDAY))

    def test_schedule_type_none_is_always_available(self):
        course = make_course(drip_schedule_type=Course.DripScheduleType.NONE)
        self.assertTrue(drip.is_available(course, self.item, self.enrollment, MONDAY))

    def test_zero_delay_available_on_enrollment_day(self):
        item = ContentItem(title="Intro", drip_delay_days=0)
        self.assertTrue(drip.is_available(self.course, item, self.enrollment, MONDAY))

    def test_monday_enrollment_with_three_day_delay(self):
        """Locked Monday to Wednesday, unlocked from Thursday on."""
        for offset in (0, 1, 2):
            with self.subTest(day=offset):
                now = MONDAY + timedelta(days=offset)
                self.assertFalse(
                    drip.is_available(self.course, self.item, self.enrollment, now)
                )
        for offset in (3, 4, 10, 100):
            with self.subTest(day=offset):
                now = MONDAY + timedelta(days=offset)
                self.assertTrue(
                    drip.is_available(self.course, self.item, self.enrollment, now)
                )

    def test_calendar_days_ignore_wall_clock_time(self):
        """Thursday just after midnight counts as three days after a Monday afternoon."""
        thursday_early = datetime(2026, 10, 22, 0, 5, tzinfo=UTC)
        self.assertTrue(
            drip.is_available(self.course, self.item, self.enrollment, thursday_early)
        )
        wednesday_late = datetime(2026, 10, 21, 23, 59, tzinfo=UTC)
        self.assertFalse(
            drip.is_available(self.course, self.item, self.enrollment, wednesday_late)
        )

    @override_settings(TIME_ZONE="America/New_York")
    def test_days_use_project_time_zone(self):
        # 02:00 UTC Tuesday is still Monday evening in New York
        enrollment = Enrollment(enrolled_at=datetime(2026, 10, 20, 2, 0, tzinfo=UTC))
        item = ContentItem(title="Next day", drip_delay_days=1)
        monday_night_ny = datetime(2026, 10, 20, 3, 0, tzinfo=UTC)
        tuesday_ny = datetime(2026, 10, 20, 14, 0, tzinfo=UTC)
        self.assertFalse(drip.is_available(self.course, item, enrollment, monday_night_ny))
        self.assertTrue(drip.is_available(self.course, item, enrollment, tuesday_ny))

    def test_availability_is_monotonic(self):
        for delay in (0, 1, 3, 7, 14):
            item = ContentItem(title=f"Delay {delay}", drip_delay_days=delay)
            seen_available = False
            for hours in range(0, 24 * 20, 5):
                now = MONDAY + timedelta(hours=hours)
                available = drip.is_available(self.course, item, self.enrollment, now)
                if seen_available:
                    self.assertTrue(available, f"delay={delay} relocked at +{hours}h")
                seen_available = seen_available or available
            self.assertTrue(seen_available)

    def test_negative_delay_raises(self):
        item = ContentItem(title="Broken", drip_delay_days=-1)
        with self.assertRaises(DripScheduleError):
            drip.is_available(self.course, item, self.enrollment, MONDAY)

    def test_naive_enrollment_time_raises(self):
        enrollment = Enrollment(enrolled_at=datetime(2026, 10, 19, 9, 0))
        with self.assertRaises(DripScheduleError):
            drip.is_available(self.course, self.item, enrollment, MONDAY)

    def test_missing_enrollment_time_raises(self):
        enrollment = Enrollment()
        enrollment.enrolled_at = None
        with self.assertRaises(DripScheduleError):
            drip.is_available(self.course, self.item, enrollment, MONDAY)


class DaysUntilAvailableTests(SimpleTestCase):
    def test_counts_down_to_zero(self):
        course = make_course()
        enrollment = Enrollment(enrolled_at=MONDAY)
        item = ContentItem(title="Week 1", drip_delay_days=3)
        expected = [3, 2, 1, 0, 0]
        for offset, remaining in enumerate(expected):
            with self.subTest(day=offset):
                now = MONDAY + timedelta(days=offset)
                self.assertEqual(
                    drip.days_until_available(course, item, enrollment, now), remaining
                )


class NextReleaseDateTests(SimpleTestCase):
    """Tests for drip.next_release_date."""

    def test_next_wednesday_from_monday(self):
        course = make_course()
        self.assertEqual(drip.next_release_date(course, MONDAY), date(2026, 10, 21))

    def test_release_day_today_advances_a_week(self):
        course = make_course()
        wednesday = MONDAY + timedelta(days=2)
        self.assertEqual(drip.next_release_date(course, wednesday), date(2026, 10, 28))

    def test_sunday_is_zero(self):
        course = make_course(drip_release_day=Course.ReleaseDay.SUNDAY)
        self.assertEqual(drip.next_release_date(course, MONDAY), date(2026, 10, 25))

    def test_saturday_release_from_saturday(self):
        course = make_course(drip_release_day=Course.ReleaseDay.SATURDAY)
        saturday = datetime(2026, 10, 24, 8, 0, tzinfo=UTC)
        self.assertEqual(drip.next_release_date(course, saturday), date(2026, 10, 31))

    def test_none_without_weekly_schedule(self):
        self.assertIsNone(drip.next_release_date(make_course(drip_enabled=False), MONDAY))
        self.assertIsNone(
            drip.next_release_date(
                make_course(drip_schedule_type=Course.DripScheduleType.NONE), MONDAY
            )
        )
        self.assertIsNone(drip.next_release_date(make_course(drip_release_day=None), MONDAY))

    def test_invalid_release_day_raises(self):
        with self.assertRaises(DripScheduleError):
            drip.next_release_date(make_course(drip_release_day=9), MONDAY)

    def test_release_day_does_not_gate_availability(self):
        """Items unlock on their delay even when that is not the release day."""
        course = make_course(drip_release_day=Course.ReleaseDay.SUNDAY)
        enrollment = Enrollment(enrolled_at=MONDAY)
        item = ContentItem(title="Tuesday unlock", drip_delay_days=1)
        tuesday = MONDAY + timedelta(days=1)
        self.assertTrue(drip.is_available(course, item, enrollment, tuesday))
