"""
Shared schema primitives used across the API.
"""
from typing import Any, Optional
from pydantic import BaseModel

from regretless.services.domain import Milestone


class ErrorResponse(BaseModel):
    """Standard error envelope returned for all 4xx/5xx responses."""
    code: str
    message: str
    details: Optional[dict[str, Any]] = None


class MilestoneOut(BaseModel):
    id: str
    title: str
    description: str
    points_awarded: int
    date_achieved: str
    icon_name: str

    @classmethod
    def from_domain(cls, m: Milestone) -> "MilestoneOut":
        return cls(
            id=m.id,
            title=m.title,
            description=m.description,
            points_awarded=m.points_awarded,
            date_achieved=m.date_achieved.isoformat(),
            icon_name=m.icon_name,
        )


class AwardResponse(BaseModel):
    points_awarded: int
    balance: int
    milestones: list[MilestoneOut]
