"""
Profile request/response schemas.

POST /profile              -> RegisterRequest / ProfileResponse
PUT  /profile/daily-goal   -> DailyGoalRequest / DailyGoalResponse
PUT  /profile/avatar       -> AvatarResponse
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=64, examples=["RecoveryJourney"])
    weekly_spending: float = Field(default=0.0, ge=0, description="Money spent on vaping per week.")
    vaping_frequency: int = Field(default=0, ge=0, description="Sessions per vaping day.")
    days_per_week_vaping: int = Field(default=0, ge=0, le=7)
    plan_start_date: Optional[datetime] = Field(
        default=None, description="Cessation plan start. Defaults to the join date for savings."
    )
    daily_vaping_goal: Optional[int] = Field(default=None, ge=0)

    @field_validator("username")
    @classmethod
    def username_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("username must not be blank")
        return v.strip()


class ProfileResponse(BaseModel):
    user_id: str
    username: str
    join_date: str
    plan_start_date: Optional[str] = None
    daily_vaping_goal: int
    weekly_spending: float
    vaping_frequency: int
    days_per_week_vaping: int
    profile_image_url: Optional[str] = None


class DailyGoalRequest(BaseModel):
    daily_vaping_goal: int = Field(..., ge=0, le=100)


class DailyGoalResponse(BaseModel):
    daily_vaping_goal: int


class AvatarResponse(BaseModel):
    profile_image_url: str
