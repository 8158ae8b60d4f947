from datetime import datetime, timedelta, timezone

import pytest

from pet_minder_api.app.core.exceptions import InvalidScheduleError
from pet_minder_api.app.core.recurrence import (
    RecurrenceEngine,
    RecurrencePattern,
    ReminderState,
    as_utc,
)


def test_monthly_clamps_to_month_end_without_drift() -> None:
    occurrences = RecurrenceEngine.compute_next_occurrences(
        datetime(2024, 1, 31, 9, 0), True, "Monthly", 3
    )
    assert occurrences == [
        datetime(2024, 2, 29, 9, 0),
        datetime(2024, 3, 31, 9, 0),
        datetime(2024, 4, 30, 9, 0),
    ]


def test_weekly_occurrences() -> None:
    occurrences = RecurrenceEngine.compute_next_occurrences(
        datetime(2024, 6, 1, 8, 0), True, "Weekly", 3
    )
    assert occurrences == [
        datetime(2024, 6, 8, 8, 0),
        datetime(2024, 6, 15, 8, 0),
        datetime(2024, 6, 22, 8, 0),
    ]


def test_daily_occurrences_cross_month_boundary() -> None:
    occurrences = RecurrenceEngine.compute_next_occurrences(
        datetime(2024, 2, 28, 7, 30), True, "daily", 2
    )
    assert occurrences == [datetime(2024, 2, 29, 7, 30), datetime(2024, 3, 1, 7, 30)]


def test_yearly_from_leap_day() -> None:
    occurrences = RecurrenceEngine.compute_next_occurrences(
        datetime(2024, 2, 29, 12, 0), True, RecurrencePattern.YEARLY, 4
    )
    assert occurrences == [
        datetime(2025, 2, 28, 12, 0),
        datetime(2026, 2, 28, 12, 0),
        datetime(2027, 2, 28, 12, 0),
        datetime(2028, 2, 29, 12, 0),
    ]


def test_occurrences_are_strictly_increasing_and_after_fire_time() -> None:
    fire_at = datetime(2023, 8, 31, 23, 59, tzinfo=timezone.utc)
    for pattern in RecurrencePattern:
        occurrences = RecurrenceEngine.compute_next_occurrences(fire_at, True, pattern.value, 12)
        assert len(occurrences) == 12
        assert all(later > earlier for earlier, later in zip([fire_at] + occurrences, occurrences))


def test_non_recurring_has_no_occurrences_even_with_pattern() -> None:
    fire_at = datetime(2024, 1, 1, 9, 0)
    assert RecurrenceEngine.compute_next_occurrences(fire_at, False, None, 5) == []
    assert RecurrenceEngine.compute_next_occurrences(fire_at, False, "Fortnightly", 5) == []


def test_zero_horizon() -> None:
    assert RecurrenceEngine.compute_next_occurrences(datetime(2024, 1, 1), True, "Daily", 0) == []


def test_negative_horizon_is_rejected() -> None:
    with pytest.raises(ValueError):
        RecurrenceEngine.compute_next_occurrences(datetime(2024, 1, 1), True, "Daily", -1)


def test_unknown_pattern_on_recurring_reminder_raises() -> None:
    with pytest.raises(InvalidScheduleError):
        RecurrenceEngine.compute_next_occurrences(datetime(2024, 1, 1), True, "Fortnightly", 2)


@pytest.mark.parametrize(
    "fire_at, is_recurring, pattern, ok",
    [
        (datetime(2024, 1, 1), False, None, True),
        (datetime(2024, 1, 1), False, "Fortnightly", True),
        (datetime(2024, 1, 1), True, "Monthly", True),
        (datetime(2024, 1, 1), True, "  weekly ", True),
        (datetime(2024, 1, 1), True, None, False),
        (datetime(2024, 1, 1), True, "", False),
        (datetime(2024, 1, 1), True, "Fortnightly", False),
        (None, False, None, False),
    ],
)
def test_validate_schedule(fire_at, is_recurring, pattern, ok) -> None:
    check = RecurrenceEngine.validate_schedule(fire_at, is_recurring, pattern)
    assert bool(check) is ok
    if ok:
        check.raise_for_error()
    else:
        assert check.reason
        with pytest.raises(InvalidScheduleError):
            check.raise_for_error()


def test_normalize_pattern() -> None:
    assert RecurrenceEngine.normalize_pattern(True, "monthly") == "Monthly"
    assert RecurrenceEngine.normalize_pattern(False, "whatever") == "whatever"
    assert RecurrenceEngine.normalize_pattern(False, None) is None


def test_is_due_at_and_after_fire_time() -> None:
    fire_at = datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)

    assert not RecurrenceEngine.compute_is_due(fire_at, False, fire_at - timedelta(seconds=1))
    assert RecurrenceEngine.compute_is_due(fire_at, False, fire_at)
    # Once due, a reminder stays due until it is completed.
    for hours in (1, 24, 24 * 365):
        assert RecurrenceEngine.compute_is_due(fire_at, False, fire_at + timedelta(hours=hours))


def test_completed_is_never_due() -> None:
    fire_at = datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)
    assert not RecurrenceEngine.compute_is_due(fire_at, True, fire_at + timedelta(days=3))


def test_state() -> None:
    fire_at = datetime(2024, 5, 1, 10, 0)
    assert RecurrenceEngine.state(fire_at, False, datetime(2024, 4, 30)) is ReminderState.SCHEDULED
    assert RecurrenceEngine.state(fire_at, False, datetime(2024, 5, 2)) is ReminderState.DUE
    assert RecurrenceEngine.state(fire_at, True, datetime(2024, 5, 2)) is ReminderState.COMPLETED


def test_as_utc() -> None:
    naive = datetime(2024, 3, 10, 12, 0)
    assert as_utc(naive) == datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)

    offset = timezone(timedelta(hours=2))
    converted = as_utc(datetime(2024, 3, 10, 12, 0, tzinfo=offset))
    assert converted.tzinfo is timezone.utc
    assert converted.hour == 10


def test_pattern_parse_is_case_insensitive() -> None:
    assert RecurrencePattern.parse("WEEKLY") is RecurrencePattern.WEEKLY
    assert RecurrencePattern.parse(RecurrencePattern.DAILY) is RecurrencePattern.DAILY
    with pytest.raises(InvalidScheduleError):
        RecurrencePattern.parse(None)
