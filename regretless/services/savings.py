"""
Savings estimate: money not spent because the user vapes less than the
baseline they reported at onboarding.

    sessions_per_week = frequency * days_per_week
    weeks_active      = max(1, whole_days(start, now) / 7)
    expected_sessions = sessions_per_week * weeks_active
    cost_per_session  = weekly_spending / sessions_per_week     (0 if no sessions)
    current_savings   = max(0, (expected_sessions - actual) * cost_per_session)
    reduction_rate    = (expected_sessions - actual) / expected_sessions   (0 if none)
    yearly_projection = max(0, weekly_spending * 52 * reduction_rate)

No rounding here; format_currency() is for display only.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import NamedTuple, Optional

from regretless.services.habit_log import HabitLog

DEFAULT_WEEKLY_SPENDING = 20.0
DEFAULT_FREQUENCY = 10
DEFAULT_DAYS_PER_WEEK = 7
WEEKS_PER_YEAR = 52


@dataclass
class SavingsProfile:
    join_date: datetime
    weekly_spending: float = 0.0
    vaping_frequency: int = 0       # sessions per vaping day before quitting
    days_per_week: int = 0          # vaping days per week before quitting
    plan_start_date: Optional[datetime] = None

    @property
    def start_date(self) -> datetime:
        return self.plan_start_date or self.join_date


class SavingsEstimate(NamedTuple):
    current_savings: float
    yearly_projection: float


def _aware(ts: datetime) -> datetime:
    return ts if ts.tzinfo is not None else ts.replace(tzinfo=timezone.utc)


def estimate_savings(
    profile: SavingsProfile,
    habit_log: HabitLog,
    now: Optional[datetime] = None,
) -> SavingsEstimate:
    now = _aware(now or datetime.now(tz=timezone.utc))
    start = _aware(profile.start_date)

    weekly_spending = profile.weekly_spending if profile.weekly_spending > 0 else DEFAULT_WEEKLY_SPENDING
    frequency = profile.vaping_frequency if profile.vaping_frequency > 0 else DEFAULT_FREQUENCY
    days_per_week = profile.days_per_week if profile.days_per_week > 0 else DEFAULT_DAYS_PER_WEEK

    sessions_per_week = float(frequency * days_per_week)
    weeks_active = max(1.0, (now - start).days / 7.0)
    expected_sessions = sessions_per_week * weeks_active
    cost_per_session = weekly_spending / sessions_per_week if sessions_per_week > 0 else 0.0

    actual_sessions = float(habit_log.count_since(start))

    expected_cost = expected_sessions * cost_per_session
    actual_cost = actual_sessions * cost_per_session
    current_savings = expected_cost - actual_cost

    reduction_rate = (
        (expected_sessions - actual_sessions) / expected_sessions
        if expected_sessions > 0 else 0.0
    )
    yearly_projection = weekly_spending * WEEKS_PER_YEAR * reduction_rate

    return SavingsEstimate(max(0.0, current_savings), max(0.0, yearly_projection))


def format_currency(amount: float, symbol: str = "$") -> str:
    """Whole-unit display string, e.g. 1040.0 -> "$1,040"."""
    return f"{symbol}{round(amount):,}"
