"""
Reminder due-state and recurrence rules.

A reminder's stored schedule is just a fire time, a recurrence flag, an
optional pattern name and a completion flag.  ``RecurrenceEngine``
derives everything else from those fields:

* whether the reminder is due at a given instant;
* the next ``horizon_count`` occurrences of a recurring reminder;
* whether a schedule submitted by a client is acceptable.

All functions are pure.  The current time is always passed in by the
caller, never read from the clock here.

Calendar steps (months, years) use ``dateutil.relativedelta`` and are
anchored on the original fire time, so the day of month is kept where
it exists and clamped to the month end otherwise
(Jan 31 -> Feb 29 -> Mar 31 -> Apr 30).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import ClassVar, Optional

from dateutil.relativedelta import relativedelta

from .exceptions import InvalidScheduleError


class RecurrencePattern(str, Enum):
    DAILY = "Daily"
    WEEKLY = "Weekly"
    MONTHLY = "Monthly"
    YEARLY = "Yearly"

    @classmethod
    def parse(cls, value: Optional[str]) -> "RecurrencePattern":
        """Return the pattern named by ``value`` (case-insensitive).

        Raises ``InvalidScheduleError`` for empty or unknown names.
        """
        if isinstance(value, cls):
            return value
        name = (value or "").strip().lower()
        if not name:
            raise InvalidScheduleError("A recurring reminder requires a recurrence pattern")
        for pattern in cls:
            if pattern.value.lower() == name:
                return pattern
        raise InvalidScheduleError(f"Unrecognized recurrence pattern {value!r}")


class ReminderState(str, Enum):
    SCHEDULED = "scheduled"
    DUE = "due"
    COMPLETED = "completed"


@dataclass(frozen=True)
class ScheduleCheck:
    ok: bool
    reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.ok

    def raise_for_error(self) -> None:
        if not self.ok:
            raise InvalidScheduleError(self.reason or "Invalid schedule")


def as_utc(value: datetime) -> datetime:
    """Convert ``value`` to an aware UTC datetime; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class RecurrenceEngine:
    """Pure scheduling rules for reminders."""

    STEPS: ClassVar[dict[RecurrencePattern, relativedelta]] = {
        RecurrencePattern.DAILY: relativedelta(days=1),
        RecurrencePattern.WEEKLY: relativedelta(weeks=1),
        RecurrencePattern.MONTHLY: relativedelta(months=1),
        RecurrencePattern.YEARLY: relativedelta(years=1),
    }

    @staticmethod
    def compute_is_due(fire_at: datetime, is_completed: bool, now: datetime) -> bool:
        return fire_at <= now and not is_completed

    @classmethod
    def state(cls, fire_at: datetime, is_completed: bool, now: datetime) -> ReminderState:
        if is_completed:
            return ReminderState.COMPLETED
        if cls.compute_is_due(fire_at, is_completed, now):
            return ReminderState.DUE
        return ReminderState.SCHEDULED

    @classmethod
    def compute_next_occurrences(
        cls,
        fire_at: datetime,
        is_recurring: bool,
        pattern: Optional[str],
        horizon_count: int,
    ) -> list[datetime]:
        """Return the ``horizon_count`` occurrences following ``fire_at``.

        Non-recurring reminders have no further occurrences, whatever
        their pattern says.  The k-th occurrence is ``fire_at`` plus k
        steps, computed from ``fire_at`` rather than from the previous
        occurrence so that month-end clamping does not drift.
        """
        if horizon_count < 0:
            raise ValueError("horizon_count must not be negative")
        if not is_recurring:
            return []
        step = cls.STEPS[RecurrencePattern.parse(pattern)]
        return [fire_at + step * k for k in range(1, horizon_count + 1)]

    @staticmethod
    def validate_schedule(
        fire_at: Optional[datetime],
        is_recurring: bool,
        pattern: Optional[str],
    ) -> ScheduleCheck:
        if fire_at is None:
            return ScheduleCheck(False, "A reminder requires a fire time")
        if not is_recurring:
            # A leftover pattern on a one-off reminder is ignored.
            return ScheduleCheck(True)
        try:
            RecurrencePattern.parse(pattern)
        except InvalidScheduleError as exc:
            return ScheduleCheck(False, exc.message)
        return ScheduleCheck(True)

    @staticmethod
    def normalize_pattern(is_recurring: bool, pattern: Optional[str]) -> Optional[str]:
        """Canonical pattern name for storage.

        Only called after ``validate_schedule`` succeeded.  Patterns on
        one-off reminders are stored untouched.
        """
        if is_recurring:
            return RecurrencePattern.parse(pattern).value
        return pattern
