"""
ProgressLedger — the authoritative in-memory record of one user's points,
milestones, unlocked rewards and logged sessions.

Invariants
----------
  * balance == sum(t.amount for t in transactions), always. Milestone
    bonuses get their own "Achievement Unlocked" transaction.
  * milestone titles are unique; the list keeps earn order.
  * a reward id enters the unlocked set once and never leaves it.

Every mutation goes through a method here. After a mutation the milestone
engine runs once; bonuses it awards do not trigger a second pass in the
same call (the next mutation picks up anything they made reachable).

Not thread-safe: callers serialize mutations per user
(see ProgressService).
"""
from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Callable, Iterable, Optional

from regretless.core.errors import (
    AlreadyUnlockedError,
    InsufficientPointsError,
    InvalidAmountError,
)
from regretless.services import milestone_engine
from regretless.services.domain import (
    EngagementKind,
    HabitEvent,
    Milestone,
    Mood,
    PointReason,
    PointTransaction,
    ProgressCounters,
    Reward,
    Trigger,
    utcnow,
)
from regretless.services.habit_log import HabitLog

logger = logging.getLogger(__name__)


class ProgressLedger:
    def __init__(
        self,
        transactions: Iterable[PointTransaction] = (),
        milestones: Iterable[Milestone] = (),
        unlocked_reward_ids: Iterable[str] = (),
        habit_log: Optional[HabitLog] = None,
        comment_count: int = 0,
        like_count: int = 0,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._clock = clock
        self._transactions: list[PointTransaction] = list(transactions)
        self._balance = sum(t.amount for t in self._transactions)

        self._milestones: list[Milestone] = []
        for m in milestones:
            if m.title not in self.earned_titles:
                self._milestones.append(m)

        self._unlocked: list[str] = []
        for reward_id in unlocked_reward_ids:
            if reward_id not in self._unlocked:
                self._unlocked.append(reward_id)

        self._habit_log = habit_log if habit_log is not None else HabitLog()
        self._comment_count = comment_count
        self._like_count = like_count

        self._streak_days = 0
        self._daily_count = 0
        self._weekly_count = 0
        self._refresh_derived_counts()

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def balance(self) -> int:
        return self._balance

    @property
    def transactions(self) -> tuple[PointTransaction, ...]:
        return tuple(self._transactions)

    @property
    def milestones(self) -> tuple[Milestone, ...]:
        return tuple(self._milestones)

    @property
    def earned_titles(self) -> frozenset[str]:
        return frozenset(m.title for m in self._milestones)

    @property
    def unlocked_reward_ids(self) -> tuple[str, ...]:
        return tuple(self._unlocked)

    @property
    def habit_log(self) -> HabitLog:
        return self._habit_log

    @property
    def streak_days(self) -> int:
        return self._streak_days

    @property
    def daily_count(self) -> int:
        return self._daily_count

    @property
    def weekly_count(self) -> int:
        return self._weekly_count

    @property
    def comment_count(self) -> int:
        return self._comment_count

    @property
    def like_count(self) -> int:
        return self._like_count

    @property
    def counters(self) -> ProgressCounters:
        return ProgressCounters(
            event_count=len(self._habit_log),
            streak_days=self._streak_days,
            point_balance=self._balance,
            comment_count=self._comment_count,
            like_count=self._like_count,
        )

    def trigger_breakdown(self) -> dict[Trigger, int]:
        return self._habit_log.trigger_breakdown()

    def mood_breakdown(self) -> dict[Mood, int]:
        return self._habit_log.mood_breakdown()

    def is_unlocked(self, reward_id: str) -> bool:
        return reward_id in self._unlocked

    def unlocked_rewards(self, catalog: Iterable[Reward]) -> list[Reward]:
        return [r for r in catalog if r.id in self._unlocked]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def award_points(
        self,
        amount: int,
        reason: PointReason,
        description: Optional[str] = None,
    ) -> list[Milestone]:
        """Credit `amount` points, then return any milestones this earned."""
        if amount <= 0:
            logger.warning("Rejected point award of %s (%s)", amount, reason.value)
            raise InvalidAmountError(amount)
        self._record(amount, reason, description or reason.default_description)
        logger.info("Awarded %s points for %s", amount, reason.value)
        return self._check_milestones()

    def log_habit_event(self, event: HabitEvent) -> list[Milestone]:
        self._habit_log.append(event)
        self._refresh_derived_counts()
        return self._check_milestones()

    def record_engagement(self, kind: EngagementKind) -> list[Milestone]:
        if kind == EngagementKind.comment:
            self._comment_count += 1
        else:
            self._like_count += 1
        return self._check_milestones()

    def purchase_reward(self, reward: Reward) -> PointTransaction:
        if reward.id in self._unlocked:
            raise AlreadyUnlockedError(reward.id)
        if self._balance < reward.point_cost:
            raise InsufficientPointsError(reward.id, reward.point_cost, self._balance)

        txn = self._record(
            -reward.point_cost,
            PointReason.reward_purchased,
            f"Purchased: {reward.title}",
        )
        self._unlocked.append(reward.id)
        logger.info("Unlocked reward %s for %s points", reward.id, reward.point_cost)
        return txn

    # ------------------------------------------------------------------
    # History queries
    # ------------------------------------------------------------------

    def _window_start(self, days: int) -> datetime:
        today = self._clock().astimezone(timezone.utc).date()
        return datetime.combine(today, time.min, tzinfo=timezone.utc) - timedelta(days=days)

    def get_recent_transactions(self, days: int = 7) -> list[PointTransaction]:
        """Transactions since midnight `days` days ago, newest first."""
        start = self._window_start(days)
        recent = [t for t in self._transactions if _aware(t.timestamp) >= start]
        return sorted(recent, key=lambda t: _aware(t.timestamp), reverse=True)

    def total_for_period(self, days: int) -> int:
        return sum(t.amount for t in self.get_recent_transactions(days))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _record(self, amount: int, reason: PointReason, description: str) -> PointTransaction:
        txn = PointTransaction(
            timestamp=self._clock(),
            amount=amount,
            reason=reason,
            description=description,
        )
        self._transactions.append(txn)
        self._balance += amount
        return txn

    def _refresh_derived_counts(self) -> None:
        today: date = self._clock().astimezone(timezone.utc).date()
        self._streak_days = self._habit_log.consecutive_event_free_days_ending_today(today)
        self._daily_count = self._habit_log.count_on_date(today)
        self._weekly_count = self._habit_log.count_this_week(today)

    def _check_milestones(self) -> list[Milestone]:
        earned = milestone_engine.evaluate(
            self.counters, self.earned_titles, now=self._clock()
        )
        for milestone in earned:
            self._milestones.append(milestone)
            self._record(
                milestone.points_awarded,
                PointReason.achievement_unlocked,
                f"Milestone achieved: {milestone.title}",
            )
            logger.info(
                "Milestone '%s' earned (+%s points)", milestone.title, milestone.points_awarded
            )
        return earned


def _aware(ts: datetime) -> datetime:
    return ts if ts.tzinfo is not None else ts.replace(tzinfo=timezone.utc)
