"""
Reward shop schemas.

GET  /rewards                     -> RewardListResponse
POST /rewards/{reward_id}/unlock  -> UnlockResponse
"""
from pydantic import BaseModel


class RewardOut(BaseModel):
    id: str
    title: str
    description: str
    point_cost: int
    icon_name: str
    category: str
    is_unlocked: bool
    can_afford: bool


class RewardListResponse(BaseModel):
    balance: int
    total: int
    items: list[RewardOut]


class UnlockResponse(BaseModel):
    reward: RewardOut
    points_spent: int
    balance: int
