"""
Drip content scheduling.

Pure functions of (course drip policy, item delay, enrollment time, now); they
never touch the database. Day arithmetic uses calendar dates in the project
time zone, so an item with a 3 day delay unlocks at the start of the third
day after enrollment regardless of the enrollment's wall-clock time.

Course owners previewing their own course bypass these checks in the caller.
"""

import logging
from datetime import date, datetime, timedelta

from django.utils import timezone

logger = logging.getLogger(__name__)

DAYS_PER_WEEK = 7


class DripScheduleError(ValueError):
    """Raised for malformed scheduling input (negative delays, bad timestamps)."""


def _local_date(value: datetime, label: str) -> date:
    if not isinstance(value, datetime):
        raise DripScheduleError(f"{label} must be a datetime, got {value!r}")
    if timezone.is_naive(value):
        raise DripScheduleError(f"{label} must be timezone-aware, got {value!r}")
    return timezone.localtime(value).date()


def _delay_days(content_item) -> int:
    delay = content_item.drip_delay_days
    if delay is None:
        return 0
    if delay < 0:
        raise DripScheduleError(
            f"Content item {content_item.pk} has a negative drip delay ({delay})."
        )
    return delay


def is_drip_active(course) -> bool:
    """Whether per-item delays apply for this course at all."""
    from apps.courses.models import Course

    return bool(course.drip_enabled) and (
        course.drip_schedule_type != Course.DripScheduleType.NONE
    )


def days_between(start: datetime, end: datetime) -> int:
    """Whole calendar days from ``start`` to ``end`` (negative if end is earlier)."""
    return (_local_date(end, "end") - _local_date(start, "start")).days


def is_available(course, content_item, enrollment, now: datetime | None = None) -> bool:
    """Whether ``content_item`` is unlocked for ``enrollment`` at ``now``."""
    delay = _delay_days(content_item)
    if not is_drip_active(course):
        return True
    now = now or timezone.now()
    return days_between(enrollment.enrolled_at, now) >= delay


def days_until_available(
    course, content_item, enrollment, now: datetime | None = None
) -> int:
    """Remaining whole days before the item unlocks; 0 once available."""
    if is_available(course, content_item, enrollment, now):
        return 0
    now = now or timezone.now()
    return _delay_days(content_item) - days_between(enrollment.enrolled_at, now)


def next_release_date(course, now: datetime | None = None) -> date | None:
    """
    Next weekly release date strictly after ``now``'s date.

    Informational only; it never affects ``is_available``. Release days use
    0 = Sunday ... 6 = Saturday. If today is the release day the next one is a
    full week away.
    """
    from apps.courses.models import Course

    if not course.drip_enabled or course.drip_schedule_type != Course.DripScheduleType.WEEK:
        return None
    release_day = course.drip_release_day
    if release_day is None:
        return None
    if not 0 <= release_day < DAYS_PER_WEEK:
        raise DripScheduleError(f"Invalid release day {release_day} for course {course.pk}")

    today = _local_date(now or timezone.now(), "now")
    # date.weekday() is Monday=0; shift to Sunday=0
    today_index = (today.weekday() + 1) % DAYS_PER_WEEK
    days_ahead = (release_day - today_index) % DAYS_PER_WEEK or DAYS_PER_WEEK
    return today + timedelta(days=days_ahead)


def availability_map(course, content_items, enrollment, now: datetime | None = None) -> dict:
    """Maps content item id -> availability for every item given."""
    now = now or timezone.now()
    return {
        item.id: is_available(course, item, enrollment, now) for item in content_items
    }
