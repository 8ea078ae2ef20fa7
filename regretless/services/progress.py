"""
Progress service: rebuilds a user's ProgressLedger from the document store,
runs one ledger operation, and writes back what changed.

Public API
----------
register(user_id, ...)                 -> UserRecord
load(user_id)                          -> (UserRecord, ProgressLedger)
award(user_id, amount, reason, desc)   -> AwardResult
award_activity(user_id, activity)      -> AwardResult
log_session(user_id, event)            -> AwardResult
record_engagement(user_id, kind)       -> AwardResult
unlock_reward(user_id, reward_id)      -> UnlockResult
recent_transactions / period_total / savings / milestone_progress
update_daily_goal / update_avatar

Writes
------
A mutation appends its new transactions, milestones and sessions to their
subcollections and merges the derived user fields (totalPointsEarned,
streakDays, unlockedRewards, commentCount, likeCount) in one commit.
A failed commit raises PersistenceError; nothing is retried here.

Mutations for the same user are serialized with a per-process lock so two
requests cannot both read the same balance and spend it.
"""
from __future__ import annotations

import hashlib
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterator, Optional

from regretless.core.errors import (
    PersistenceError,
    UnknownActivityError,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from regretless.schemas.documents import (
    MILESTONES,
    POINT_TRANSACTIONS,
    USER_COLLECTION,
    VAPING_SESSIONS,
    MilestoneRecord,
    PointTransactionRecord,
    UserRecord,
    VapingSessionRecord,
    decode,
)
from regretless.services import milestone_engine
from regretless.services.blobs import LocalBlobStore
from regretless.services.documents import SqlDocumentStore
from regretless.services.domain import (
    EngagementKind,
    HabitEvent,
    Milestone,
    PointReason,
    PointTransaction,
    Reward,
    utcnow,
)
from regretless.services.habit_log import HabitLog
from regretless.services.ledger import ProgressLedger
from regretless.services.reward_catalog import DEFAULT_CATALOG, find_reward
from regretless.services.savings import SavingsEstimate, SavingsProfile, estimate_savings

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Point values for app activities
# ---------------------------------------------------------------------------

SESSION_LOGGED_POINTS = 5

ACTIVITY_AWARDS: dict[str, tuple[int, PointReason, str]] = {
    "breathing-exercise":  (15, PointReason.app_usage, "Completing a breathing exercise"),
    "educational-content": (10, PointReason.app_usage, "Learning about vaping"),
    "distraction-game":    (20, PointReason.app_usage, "Completing a distraction game"),
    "gratitude-journal":   (15, PointReason.app_usage, "Completing a gratitude journal entry"),
    "mindful-break":       (15, PointReason.app_usage, "Taking a 5-minute break"),
    "affirmations":        (10, PointReason.app_usage, "Reading affirmations"),
    "story-shared":        (25, PointReason.story_shared, "Sharing your story"),
}

ENGAGEMENT_AWARDS: dict[EngagementKind, tuple[int, str]] = {
    EngagementKind.like:    (5, "Engaging with the community"),
    EngagementKind.comment: (10, "Commenting on a story"),
}

DEFAULT_DAILY_GOAL = 10
MAX_DERIVED_DAILY_GOAL = 20


def avatar_token(user_id: str) -> str:
    """Filesystem-safe, stable blob name for a user's profile picture."""
    return hashlib.sha256(user_id.encode("utf-8")).hexdigest()[:32]


def daily_goal_for(user: UserRecord) -> int:
    """Explicit goal, else the onboarding frequency capped at 20, else 10."""
    if user.daily_vaping_goal is not None:
        return user.daily_vaping_goal
    if user.vaping_frequency > 0:
        return min(user.vaping_frequency, MAX_DERIVED_DAILY_GOAL)
    return DEFAULT_DAILY_GOAL


# ---------------------------------------------------------------------------
# Per-user write serialization
# ---------------------------------------------------------------------------

# Fixed pool; users that hash to the same stripe share a lock.
LOCK_STRIPES = 64
_locks: tuple[threading.Lock, ...] = tuple(threading.Lock() for _ in range(LOCK_STRIPES))


def _user_lock(user_id: str) -> threading.Lock:
    return _locks[hash(user_id) % LOCK_STRIPES]


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class AwardResult:
    points_awarded: int               # excludes milestone bonuses
    balance: int
    milestones: list[Milestone] = field(default_factory=list)
    streak_days: int = 0


@dataclass
class UnlockResult:
    reward: Reward
    transaction: PointTransaction
    balance: int


@dataclass
class _Marks:
    transactions: int
    milestones: int
    sessions: int


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class ProgressService:
    def __init__(
        self,
        store: SqlDocumentStore,
        catalog: tuple[Reward, ...] = DEFAULT_CATALOG,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.catalog = catalog
        self.clock = clock

    # --- profile ---

    def register(
        self,
        user_id: str,
        username: str,
        weekly_spending: float = 0.0,
        vaping_frequency: int = 0,
        days_per_week_vaping: int = 0,
        plan_start_date: Optional[datetime] = None,
        daily_vaping_goal: Optional[int] = None,
    ) -> UserRecord:
        if self.store.get_user_document(user_id) is not None:
            raise UserAlreadyExistsError(user_id)
        user = UserRecord(
            username=username,
            join_date=self.clock(),
            plan_start_date=plan_start_date,
            weekly_spending=weekly_spending,
            vaping_frequency=vaping_frequency,
            days_per_week_vaping=days_per_week_vaping,
            daily_vaping_goal=daily_vaping_goal,
            streak_days=1,
        )
        if not self.store.create_user_document(user_id, user.to_fields()):
            raise PersistenceError("profile")
        logger.info("Registered user %s", user_id)
        return user

    def get_user(self, user_id: str) -> UserRecord:
        fields = self.store.get_user_document(user_id)
        if fields is None:
            raise UserNotFoundError(user_id)
        return decode(UserRecord, fields, USER_COLLECTION, user_id)

    def update_daily_goal(self, user_id: str, goal: int) -> int:
        self.get_user(user_id)
        if not self.store.update_user_fields(user_id, {"dailyVapingGoal": goal}):
            raise PersistenceError("daily goal")
        logger.info("User %s set daily goal to %s", user_id, goal)
        return goal

    def update_avatar(
        self, user_id: str, data: bytes, extension: str, blobs: LocalBlobStore
    ) -> str:
        self.get_user(user_id)
        url = blobs.upload(data, f"profile_images/{avatar_token(user_id)}.{extension}")
        if not self.store.update_user_fields(user_id, {"profileImageURL": url}):
            raise PersistenceError("profile picture")
        return url

    # --- ledger load / save ---

    def load(self, user_id: str) -> tuple[UserRecord, ProgressLedger]:
        user = self.get_user(user_id)
        transactions = [
            decode(PointTransactionRecord, f, POINT_TRANSACTIONS, doc_id).to_domain(doc_id)
            for doc_id, f in self.store.list_subcollection(user_id, POINT_TRANSACTIONS)
        ]
        milestones = [
            decode(MilestoneRecord, f, MILESTONES, doc_id).to_domain(doc_id)
            for doc_id, f in self.store.list_subcollection(user_id, MILESTONES)
        ]
        events = [
            decode(VapingSessionRecord, f, VAPING_SESSIONS, doc_id).to_domain(doc_id)
            for doc_id, f in self.store.list_subcollection(user_id, VAPING_SESSIONS)
        ]

        # Profiles written before transactions were recorded carry a total
        # with no history behind it.
        carried = user.total_points_earned - sum(t.amount for t in transactions)
        if carried:
            transactions.insert(0, PointTransaction(
                timestamp=user.join_date,
                amount=carried,
                reason=PointReason.opening_balance,
                description=PointReason.opening_balance.default_description,
            ))

        ledger = ProgressLedger(
            transactions=transactions,
            milestones=milestones,
            unlocked_reward_ids=user.unlocked_rewards,
            habit_log=HabitLog(events),
            comment_count=user.comment_count,
            like_count=user.like_count,
            clock=self.clock,
        )
        return user, ledger

    @contextmanager
    def _mutate(self, user_id: str) -> Iterator[ProgressLedger]:
        with _user_lock(user_id):
            _, ledger = self.load(user_id)
            marks = _Marks(
                transactions=len(ledger.transactions),
                milestones=len(ledger.milestones),
                sessions=len(ledger.habit_log),
            )
            yield ledger
            self._save(user_id, ledger, marks)

    def _save(self, user_id: str, ledger: ProgressLedger, marks: _Marks) -> None:
        appends: list[tuple[str, str, dict]] = []
        for t in ledger.transactions[marks.transactions:]:
            appends.append((POINT_TRANSACTIONS, t.id, PointTransactionRecord.from_domain(t).to_fields()))
        for m in ledger.milestones[marks.milestones:]:
            appends.append((MILESTONES, m.id, MilestoneRecord.from_domain(m).to_fields()))
        for e in ledger.habit_log.events[marks.sessions:]:
            appends.append((VAPING_SESSIONS, e.id, VapingSessionRecord.from_domain(e).to_fields()))

        fields = {
            "totalPointsEarned": ledger.balance,
            "streakDays": ledger.streak_days,
            "unlockedRewards": list(ledger.unlocked_reward_ids),
            "commentCount": ledger.comment_count,
            "likeCount": ledger.like_count,
        }
        if not self.store.apply(user_id, fields, appends):
            raise PersistenceError("progress")

    # --- mutations ---

    def award(
        self,
        user_id: str,
        amount: int,
        reason: PointReason,
        description: Optional[str] = None,
    ) -> AwardResult:
        with self._mutate(user_id) as ledger:
            earned = ledger.award_points(amount, reason, description)
        return AwardResult(
            points_awarded=amount,
            balance=ledger.balance,
            milestones=earned,
            streak_days=ledger.streak_days,
        )

    def award_activity(self, user_id: str, activity: str) -> AwardResult:
        if activity not in ACTIVITY_AWARDS:
            raise UnknownActivityError(activity)
        amount, reason, description = ACTIVITY_AWARDS[activity]
        return self.award(user_id, amount, reason, description)

    def log_session(self, user_id: str, event: HabitEvent) -> AwardResult:
        with self._mutate(user_id) as ledger:
            earned = ledger.log_habit_event(event)
            earned += ledger.award_points(
                SESSION_LOGGED_POINTS, PointReason.session_logged, "Tracking a session"
            )
        return AwardResult(
            points_awarded=SESSION_LOGGED_POINTS,
            balance=ledger.balance,
            milestones=earned,
            streak_days=ledger.streak_days,
        )

    def record_engagement(self, user_id: str, kind: EngagementKind) -> AwardResult:
        amount, description = ENGAGEMENT_AWARDS[kind]
        with self._mutate(user_id) as ledger:
            earned = ledger.record_engagement(kind)
            earned += ledger.award_points(amount, PointReason.community_engagement, description)
        return AwardResult(
            points_awarded=amount,
            balance=ledger.balance,
            milestones=earned,
            streak_days=ledger.streak_days,
        )

    def unlock_reward(self, user_id: str, reward_id: str) -> UnlockResult:
        reward = find_reward(reward_id, self.catalog)
        with self._mutate(user_id) as ledger:
            txn = ledger.purchase_reward(reward)
        return UnlockResult(reward=reward, transaction=txn, balance=ledger.balance)

    # --- reads ---

    def rewards(self, user_id: str) -> tuple[ProgressLedger, tuple[Reward, ...]]:
        _, ledger = self.load(user_id)
        return ledger, self.catalog

    def sessions(self, user_id: str) -> list[HabitEvent]:
        _, ledger = self.load(user_id)
        return sorted(ledger.habit_log, key=lambda e: e.timestamp, reverse=True)

    def recent_transactions(self, user_id: str, days: int) -> list[PointTransaction]:
        _, ledger = self.load(user_id)
        return ledger.get_recent_transactions(days)

    def period_total(self, user_id: str, days: int) -> int:
        _, ledger = self.load(user_id)
        return ledger.total_for_period(days)

    def savings(self, user_id: str) -> SavingsEstimate:
        user, ledger = self.load(user_id)
        profile = SavingsProfile(
            join_date=user.join_date,
            weekly_spending=user.weekly_spending,
            vaping_frequency=user.vaping_frequency,
            days_per_week=user.days_per_week_vaping,
            plan_start_date=user.plan_start_date,
        )
        return estimate_savings(profile, ledger.habit_log, now=self.clock())

    def milestone_progress(self, user_id: str) -> list[milestone_engine.MilestoneProgress]:
        _, ledger = self.load(user_id)
        return milestone_engine.milestone_progress(ledger.counters, ledger.earned_titles)
