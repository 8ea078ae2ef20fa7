"""
Progress request/response schemas.

GET  /progress                         -> ProgressResponse
POST /progress/points                  -> AwardRequest / AwardResponse
GET  /progress/transactions            -> TransactionListResponse
GET  /progress/transactions/total      -> PeriodTotalResponse
GET  /progress/milestones              -> MilestoneProgressListResponse
GET  /progress/savings                 -> SavingsResponse
"""
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from regretless.schemas.common import MilestoneOut
from regretless.services.domain import CLIENT_AWARD_REASONS, PointReason


class AwardRequest(BaseModel):
    amount: int = Field(..., description="Points to award. Must be positive.", examples=[15])
    reason: PointReason = Field(default=PointReason.app_usage, examples=["App Usage"])
    description: Optional[str] = Field(default=None, max_length=200)

    @field_validator("reason")
    @classmethod
    def reason_is_client_awardable(cls, v: PointReason) -> PointReason:
        if v not in CLIENT_AWARD_REASONS:
            allowed = ", ".join(sorted(r.value for r in CLIENT_AWARD_REASONS))
            raise ValueError(f"reason must be one of: {allowed}")
        return v


class TransactionOut(BaseModel):
    id: str
    timestamp: str
    amount: int
    reason: str
    description: str


class TransactionListResponse(BaseModel):
    days: int
    total: int
    items: list[TransactionOut]


class PeriodTotalResponse(BaseModel):
    days: int
    total: int


class ProgressResponse(BaseModel):
    balance: int
    streak_days: int
    daily_count: int
    weekly_count: int
    daily_vaping_goal: int
    comment_count: int
    like_count: int
    milestones: list[MilestoneOut]
    unlocked_rewards: list[str]
    trigger_breakdown: dict[str, int]
    mood_breakdown: dict[str, int]


class MilestoneProgressOut(BaseModel):
    title: str
    description: str
    icon_name: str
    points: int
    current: int
    target: int
    earned: bool


class MilestoneProgressListResponse(BaseModel):
    items: list[MilestoneProgressOut]


class SavingsResponse(BaseModel):
    current_savings: float
    yearly_projection: float
    current_display: str
    yearly_display: str
