"""
Session (habit event) schemas.

POST /sessions -> SessionCreate / SessionLoggedResponse
GET  /sessions -> SessionListResponse
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from regretless.schemas.common import MilestoneOut
from regretless.services.domain import Mood, Trigger


class SessionCreate(BaseModel):
    timestamp: Optional[datetime] = Field(
        default=None, description="When the session happened. Defaults to now (UTC)."
    )
    intensity: int = Field(..., ge=1, le=5)
    trigger: Trigger = Field(..., examples=["Stress or anxiety"])
    mood: Mood = Field(..., examples=["Anxious"])
    craving_level: int = Field(..., ge=1, le=10)
    notes: Optional[str] = Field(default=None, max_length=2000)
    location: Optional[str] = Field(default=None, max_length=200)
    duration_seconds: Optional[float] = Field(default=None, ge=0)


class SessionOut(BaseModel):
    id: str
    timestamp: str
    intensity: int
    trigger: str
    mood: str
    craving_level: int
    notes: Optional[str] = None
    location: Optional[str] = None
    duration_seconds: Optional[float] = None


class SessionLoggedResponse(BaseModel):
    session: SessionOut
    points_awarded: int
    balance: int
    streak_days: int
    milestones: list[MilestoneOut]


class SessionListResponse(BaseModel):
    total: int
    items: list[SessionOut]
