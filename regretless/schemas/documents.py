"""
Typed decode/encode of stored documents.

Stored field names are camelCase (the mobile client's names). Every record
read from the document store goes through one of these models; a record
that does not validate raises MalformedRecordError instead of being
skipped or patched with defaults. Only fields listed with a default here
may be absent.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from regretless.core.errors import MalformedRecordError
from regretless.services.domain import (
    CRAVING_RANGE,
    INTENSITY_RANGE,
    HabitEvent,
    Milestone,
    Mood,
    PointReason,
    PointTransaction,
    Trigger,
)

USER_COLLECTION = "users"
MILESTONES = "milestones"
POINT_TRANSACTIONS = "pointTransactions"
VAPING_SESSIONS = "vapingSessions"


def _utc(ts: datetime) -> datetime:
    """Stored timestamps without an offset are UTC."""
    return ts if ts.tzinfo is not None else ts.replace(tzinfo=timezone.utc)


class _Document(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_fields(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class UserRecord(_Document):
    username: str
    join_date: datetime = Field(alias="joinDate")
    plan_start_date: Optional[datetime] = Field(default=None, alias="planStartDate")
    total_points_earned: int = Field(default=0, alias="totalPointsEarned")
    streak_days: int = Field(default=0, alias="streakDays")
    unlocked_rewards: list[str] = Field(default_factory=list, alias="unlockedRewards")
    daily_vaping_goal: Optional[int] = Field(default=None, alias="dailyVapingGoal")
    weekly_spending: float = Field(default=0.0, alias="weeklySpending")
    vaping_frequency: int = Field(default=0, alias="vapingFrequency")
    days_per_week_vaping: int = Field(default=0, alias="daysPerWeekVaping")
    comment_count: int = Field(default=0, ge=0, alias="commentCount")
    like_count: int = Field(default=0, ge=0, alias="likeCount")
    profile_image_url: Optional[str] = Field(default=None, alias="profileImageURL")


class MilestoneRecord(_Document):
    title: str
    description: str
    points_awarded: int = Field(alias="pointsAwarded")
    date_achieved: datetime = Field(alias="dateAchieved")
    icon_name: str = Field(alias="iconName")

    def to_domain(self, document_id: str) -> Milestone:
        return Milestone(
            id=document_id,
            title=self.title,
            description=self.description,
            points_awarded=self.points_awarded,
            date_achieved=_utc(self.date_achieved),
            icon_name=self.icon_name,
        )

    @classmethod
    def from_domain(cls, m: Milestone) -> "MilestoneRecord":
        return cls(
            title=m.title,
            description=m.description,
            points_awarded=m.points_awarded,
            date_achieved=m.date_achieved,
            icon_name=m.icon_name,
        )


class PointTransactionRecord(_Document):
    amount: int
    reason: PointReason
    description: str
    timestamp: datetime

    def to_domain(self, document_id: str) -> PointTransaction:
        return PointTransaction(
            id=document_id,
            timestamp=_utc(self.timestamp),
            amount=self.amount,
            reason=self.reason,
            description=self.description,
        )

    @classmethod
    def from_domain(cls, t: PointTransaction) -> "PointTransactionRecord":
        return cls(
            amount=t.amount,
            reason=t.reason,
            description=t.description,
            timestamp=t.timestamp,
        )


class VapingSessionRecord(_Document):
    date: datetime
    intensity: int = Field(ge=INTENSITY_RANGE[0], le=INTENSITY_RANGE[1])
    trigger: Trigger
    mood: Mood
    craving_level: int = Field(alias="cravingLevel", ge=CRAVING_RANGE[0], le=CRAVING_RANGE[1])
    notes: Optional[str] = None
    location: Optional[str] = None
    duration: Optional[float] = None

    def to_domain(self, document_id: str) -> HabitEvent:
        return HabitEvent(
            id=document_id,
            timestamp=_utc(self.date),
            intensity=self.intensity,
            trigger=self.trigger,
            mood=self.mood,
            craving_level=self.craving_level,
            notes=self.notes,
            location=self.location,
            duration_seconds=self.duration,
        )

    @classmethod
    def from_domain(cls, e: HabitEvent) -> "VapingSessionRecord":
        return cls(
            date=e.timestamp,
            intensity=e.intensity,
            trigger=e.trigger,
            mood=e.mood,
            craving_level=e.craving_level,
            notes=e.notes,
            location=e.location,
            duration=e.duration_seconds,
        )


RecordT = TypeVar("RecordT", bound=_Document)


def decode(model: type[RecordT], fields: dict[str, Any], collection: str, document_id: str) -> RecordT:
    """Validate stored fields or fail closed with MalformedRecordError."""
    try:
        return model.model_validate(fields)
    except ValidationError as exc:
        errors = [
            f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}"
            for err in exc.errors()
        ]
        raise MalformedRecordError(collection, document_id, errors) from exc
