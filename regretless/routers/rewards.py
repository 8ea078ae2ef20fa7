"""
Reward shop router.

GET  /rewards?category=&search=     — catalog with unlock/afford flags
POST /rewards/{reward_id}/unlock    — spend points on a reward
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from regretless.schemas.common import ErrorResponse
from regretless.schemas.rewards import RewardListResponse, RewardOut, UnlockResponse
from regretless.services.domain import Reward, RewardCategory
from regretless.services.progress import ProgressService
from regretless.services.reward_catalog import category_for_reward, filter_rewards
from regretless.routers.deps import get_progress_service, require_user_id

router = APIRouter(prefix="/rewards", tags=["rewards"])


def _reward_to_response(reward: Reward, balance: int, unlocked: bool) -> RewardOut:
    return RewardOut(
        id=reward.id,
        title=reward.title,
        description=reward.description,
        point_cost=reward.point_cost,
        icon_name=reward.icon_name,
        category=category_for_reward(reward).value,
        is_unlocked=unlocked,
        can_afford=balance >= reward.point_cost,
    )


@router.get("", response_model=RewardListResponse, summary="Browse the reward catalog")
def list_rewards(
    category: RewardCategory = Query(default=RewardCategory.all),
    search: str = Query(default="", max_length=100, description="Matches title or description."),
    user_id: str = Depends(require_user_id),
    service: ProgressService = Depends(get_progress_service),
):
    ledger, catalog = service.rewards(user_id)
    items = [
        _reward_to_response(r, ledger.balance, ledger.is_unlocked(r.id))
        for r in filter_rewards(catalog, category, search)
    ]
    return RewardListResponse(balance=ledger.balance, total=len(items), items=items)


@router.post(
    "/{reward_id}/unlock",
    response_model=UnlockResponse,
    summary="Unlock a reward",
    responses={
        404: {"model": ErrorResponse, "description": "Unknown reward id (REWARD_NOT_FOUND)."},
        409: {"model": ErrorResponse, "description": "ALREADY_UNLOCKED or INSUFFICIENT_POINTS."},
    },
)
def unlock_reward(
    reward_id: str,
    user_id: str = Depends(require_user_id),
    service: ProgressService = Depends(get_progress_service),
):
    result = service.unlock_reward(user_id, reward_id)
    return UnlockResponse(
        reward=_reward_to_response(result.reward, result.balance, unlocked=True),
        points_spent=-result.transaction.amount,
        balance=result.balance,
    )
