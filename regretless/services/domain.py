"""
Domain types for the progress ledger.

Plain dataclasses and str-enums only (no ORM, no Pydantic) so the ledger
rules can run and be tested without a database or a request.
"""
from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional


INTENSITY_RANGE = (1, 5)
CRAVING_RANGE = (1, 10)


def utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Enumerations (values are what gets persisted)
# ---------------------------------------------------------------------------

class Trigger(str, enum.Enum):
    stress = "Stress or anxiety"
    social = "Social situations"
    boredom = "Boredom"
    after_meals = "After meals"
    alcohol = "When drinking alcohol"
    morning = "Morning routine"
    concentration = "To aid concentration"


class Mood(str, enum.Enum):
    anxious = "Anxious"
    stressed = "Stressed"
    bored = "Bored"
    happy = "Happy"
    sad = "Sad"
    angry = "Angry"
    neutral = "Neutral"


class PointReason(str, enum.Enum):
    session_logged = "Session Logged"
    daily_streak = "Daily Streak"
    streak_milestone = "Streak Milestone"
    goal_completed = "Goal Completed"
    story_shared = "Story Shared"
    community_engagement = "Community Engagement"
    achievement_unlocked = "Achievement Unlocked"
    reward_purchased = "Reward Purchased"
    app_usage = "App Usage"
    opening_balance = "Opening Balance"

    @property
    def default_description(self) -> str:
        return _REASON_DESCRIPTIONS[self]


# Reasons a client may name on a direct award. The rest are written only by
# the ledger action they describe.
CLIENT_AWARD_REASONS = frozenset({
    PointReason.app_usage,
    PointReason.goal_completed,
    PointReason.daily_streak,
    PointReason.streak_milestone,
})

_REASON_DESCRIPTIONS = {
    PointReason.session_logged: "Logged a vaping session",
    PointReason.daily_streak: "Daily streak maintained",
    PointReason.streak_milestone: "Reached a streak milestone",
    PointReason.goal_completed: "Completed a daily goal",
    PointReason.story_shared: "Shared a story with the community",
    PointReason.community_engagement: "Engaged with the community",
    PointReason.achievement_unlocked: "Unlocked an achievement",
    PointReason.reward_purchased: "Purchased a reward",
    PointReason.app_usage: "Used the app features",
    PointReason.opening_balance: "Balance carried over from an earlier version",
}


class RewardCategory(str, enum.Enum):
    all = "all"
    themes = "themes"
    avatars = "avatars"
    features = "features"
    boosters = "boosters"


class EngagementKind(str, enum.Enum):
    comment = "comment"
    like = "like"


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class HabitEvent:
    """One logged vaping session."""
    timestamp: datetime
    intensity: int            # 1-5
    trigger: Trigger
    mood: Mood
    craving_level: int        # 1-10
    notes: Optional[str] = None
    location: Optional[str] = None
    duration_seconds: Optional[float] = None
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        lo, hi = INTENSITY_RANGE
        if not lo <= self.intensity <= hi:
            raise ValueError(f"intensity must be within {lo}-{hi}, got {self.intensity}")
        lo, hi = CRAVING_RANGE
        if not lo <= self.craving_level <= hi:
            raise ValueError(f"craving_level must be within {lo}-{hi}, got {self.craving_level}")


@dataclass(frozen=True)
class PointTransaction:
    timestamp: datetime
    amount: int               # positive = award, negative = spend
    reason: PointReason
    description: str
    id: str = field(default_factory=new_id)


@dataclass(frozen=True)
class Milestone:
    title: str                # unique per user
    description: str
    points_awarded: int
    date_achieved: datetime
    icon_name: str
    id: str = field(default_factory=new_id)


@dataclass(frozen=True)
class Reward:
    id: str
    title: str
    description: str
    point_cost: int
    icon_name: str
    # Explicit category; None falls back to title keyword matching.
    category: Optional[RewardCategory] = None


@dataclass(frozen=True)
class ProgressCounters:
    """Snapshot of every counter a milestone rule can look at."""
    event_count: int = 0
    streak_days: int = 0
    point_balance: int = 0
    comment_count: int = 0
    like_count: int = 0
