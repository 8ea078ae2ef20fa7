"""
Tests for the savings estimate.
"""
from datetime import datetime, timedelta, timezone

import pytest

from regretless.services.domain import HabitEvent, Mood, Trigger
from regretless.services.habit_log import HabitLog
from regretless.services.savings import SavingsProfile, estimate_savings, format_currency

NOW = datetime(2026, 3, 12, 12, tzinfo=timezone.utc)


def _event(when: datetime) -> HabitEvent:
    return HabitEvent(when, 3, Trigger.social, Mood.neutral, 6)


class TestEstimateSavings:
    def test_two_weeks_clean(self):
        profile = SavingsProfile(
            join_date=NOW - timedelta(days=14),
            weekly_spending=20.0,
            vaping_frequency=10,
            days_per_week=7,
        )
        estimate = estimate_savings(profile, HabitLog(), now=NOW)
        assert estimate.current_savings == pytest.approx(40.0)
        assert estimate.yearly_projection == pytest.approx(1040.0)

    def test_zero_profile_uses_defaults(self):
        profile = SavingsProfile(join_date=NOW - timedelta(days=14))
        estimate = estimate_savings(profile, HabitLog(), now=NOW)
        assert estimate.current_savings == pytest.approx(40.0)
        assert estimate.yearly_projection == pytest.approx(1040.0)

    def test_sessions_reduce_savings(self):
        profile = SavingsProfile(
            join_date=NOW - timedelta(days=14),
            weekly_spending=20.0,
            vaping_frequency=10,
            days_per_week=7,
        )
        log = HabitLog([_event(NOW - timedelta(days=1)) for _ in range(70)])
        estimate = estimate_savings(profile, log, now=NOW)
        assert estimate.current_savings == pytest.approx(20.0)
        assert estimate.yearly_projection == pytest.approx(520.0)

    def test_sessions_before_start_are_ignored(self):
        profile = SavingsProfile(
            join_date=NOW - timedelta(days=30),
            plan_start_date=NOW - timedelta(days=14),
            weekly_spending=20.0,
            vaping_frequency=10,
            days_per_week=7,
        )
        log = HabitLog([_event(NOW - timedelta(days=20))])
        estimate = estimate_savings(profile, log, now=NOW)
        assert estimate.current_savings == pytest.approx(40.0)

    def test_first_week_counts_as_one_week(self):
        profile = SavingsProfile(join_date=NOW - timedelta(days=2), weekly_spending=35.0,
                                 vaping_frequency=5, days_per_week=7)
        estimate = estimate_savings(profile, HabitLog(), now=NOW)
        assert estimate.current_savings == pytest.approx(35.0)

    def test_never_negative(self):
        profile = SavingsProfile(join_date=NOW - timedelta(days=7), weekly_spending=20.0,
                                 vaping_frequency=1, days_per_week=1)
        log = HabitLog([_event(NOW - timedelta(hours=1)) for _ in range(5)])
        estimate = estimate_savings(profile, log, now=NOW)
        assert estimate.current_savings == 0.0
        assert estimate.yearly_projection == 0.0


class TestFormatCurrency:
    def test_whole_units_with_grouping(self):
        assert format_currency(1040.0) == "$1,040"
        assert format_currency(39.6) == "$40"
        assert format_currency(0) == "$0"

    def test_symbol(self):
        assert format_currency(12.0, symbol="€") == "€12"
