"""
Progress router.

GET  /progress                           — balance, streak, counts, breakdowns
POST /progress/points                    — award points for an in-app action
POST /progress/activities/{activity}     — award the fixed points for a known activity
GET  /progress/transactions?days=7       — point history, newest first
GET  /progress/transactions/total?days=7 — net points over the window
GET  /progress/milestones                — every milestone with progress toward it
GET  /progress/savings                   — money saved so far and the yearly projection
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from regretless.schemas.common import AwardResponse, ErrorResponse, MilestoneOut
from regretless.schemas.progress import (
    AwardRequest,
    MilestoneProgressListResponse,
    MilestoneProgressOut,
    PeriodTotalResponse,
    ProgressResponse,
    SavingsResponse,
    TransactionListResponse,
    TransactionOut,
)
from regretless.services.domain import PointTransaction
from regretless.services.progress import (
    AwardResult,
    ProgressService,
    daily_goal_for,
)
from regretless.services.savings import format_currency
from regretless.routers.deps import get_progress_service, require_user_id

router = APIRouter(prefix="/progress", tags=["progress"])


# ---------------------------------------------------------------------------
# Serialization helpers
# ---------------------------------------------------------------------------

def _transaction_to_response(t: PointTransaction) -> TransactionOut:
    return TransactionOut(
        id=t.id,
        timestamp=t.timestamp.isoformat(),
        amount=t.amount,
        reason=t.reason.value,
        description=t.description,
    )


def award_to_response(result: AwardResult) -> AwardResponse:
    return AwardResponse(
        points_awarded=result.points_awarded,
        balance=result.balance,
        milestones=[MilestoneOut.from_domain(m) for m in result.milestones],
    )


# ---------------------------------------------------------------------------
# GET /progress
# ---------------------------------------------------------------------------

@router.get(
    "",
    response_model=ProgressResponse,
    summary="Current balance, streak and session counts",
    responses={404: {"model": ErrorResponse, "description": "No profile for this user."}},
)
def read_progress(
    user_id: str = Depends(require_user_id),
    service: ProgressService = Depends(get_progress_service),
):
    user, ledger = service.load(user_id)
    return ProgressResponse(
        balance=ledger.balance,
        streak_days=ledger.streak_days,
        daily_count=ledger.daily_count,
        weekly_count=ledger.weekly_count,
        daily_vaping_goal=daily_goal_for(user),
        comment_count=ledger.comment_count,
        like_count=ledger.like_count,
        milestones=[MilestoneOut.from_domain(m) for m in ledger.milestones],
        unlocked_rewards=list(ledger.unlocked_reward_ids),
        trigger_breakdown={t.value: n for t, n in ledger.trigger_breakdown().items()},
        mood_breakdown={m.value: n for m, n in ledger.mood_breakdown().items()},
    )


# ---------------------------------------------------------------------------
# Awards
# ---------------------------------------------------------------------------

@router.post(
    "/points",
    response_model=AwardResponse,
    summary="Award points",
    responses={
        422: {"model": ErrorResponse, "description": "Amount is zero or negative (INVALID_AMOUNT)."},
    },
)
def award_points(
    payload: AwardRequest,
    user_id: str = Depends(require_user_id),
    service: ProgressService = Depends(get_progress_service),
):
    """
    Credits `amount` points and runs the milestone check. Any milestones
    earned are returned; their bonuses are already included in `balance`.
    """
    result = service.award(user_id, payload.amount, payload.reason, payload.description)
    return award_to_response(result)


@router.post(
    "/activities/{activity}",
    response_model=AwardResponse,
    summary="Award points for a completed activity",
    responses={404: {"model": ErrorResponse, "description": "Unknown activity (UNKNOWN_ACTIVITY)."}},
)
def complete_activity(
    activity: str,
    user_id: str = Depends(require_user_id),
    service: ProgressService = Depends(get_progress_service),
):
    """
    Known activities: breathing-exercise, educational-content,
    distraction-game, gratitude-journal, mindful-break, affirmations,
    story-shared.
    """
    return award_to_response(service.award_activity(user_id, activity))


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------

@router.get(
    "/transactions",
    response_model=TransactionListResponse,
    summary="Point history for the last N days (newest first)",
)
def list_transactions(
    days: int = Query(default=7, ge=0, le=3650, description="Window in calendar days."),
    user_id: str = Depends(require_user_id),
    service: ProgressService = Depends(get_progress_service),
):
    items = service.recent_transactions(user_id, days)
    return TransactionListResponse(
        days=days,
        total=len(items),
        items=[_transaction_to_response(t) for t in items],
    )


@router.get(
    "/transactions/total",
    response_model=PeriodTotalResponse,
    summary="Net points over the last N days",
)
def transactions_total(
    days: int = Query(default=7, ge=0, le=3650),
    user_id: str = Depends(require_user_id),
    service: ProgressService = Depends(get_progress_service),
):
    return PeriodTotalResponse(days=days, total=service.period_total(user_id, days))


# ---------------------------------------------------------------------------
# Milestones and savings
# ---------------------------------------------------------------------------

@router.get(
    "/milestones",
    response_model=MilestoneProgressListResponse,
    summary="Every milestone with current progress",
)
def list_milestone_progress(
    user_id: str = Depends(require_user_id),
    service: ProgressService = Depends(get_progress_service),
):
    items = [
        MilestoneProgressOut(
            title=p.rule.title,
            description=p.rule.description,
            icon_name=p.rule.icon_name,
            points=p.rule.points,
            current=p.current,
            target=p.target,
            earned=p.earned,
        )
        for p in service.milestone_progress(user_id)
    ]
    return MilestoneProgressListResponse(items=items)


@router.get("/savings", response_model=SavingsResponse, summary="Estimated money saved")
def read_savings(
    user_id: str = Depends(require_user_id),
    service: ProgressService = Depends(get_progress_service),
):
    estimate = service.savings(user_id)
    return SavingsResponse(
        current_savings=estimate.current_savings,
        yearly_projection=estimate.yearly_projection,
        current_display=format_currency(estimate.current_savings),
        yearly_display=format_currency(estimate.yearly_projection),
    )
