"""
Sessions router.

POST /sessions   — log a vaping session (+5 points, refreshes streak and counts)
GET  /sessions   — list logged sessions, newest first
"""
from __future__ import annotations

from datetime import timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from regretless.schemas.common import ErrorResponse, MilestoneOut
from regretless.schemas.sessions import (
    SessionCreate,
    SessionListResponse,
    SessionLoggedResponse,
    SessionOut,
)
from regretless.services.domain import HabitEvent
from regretless.services.progress import ProgressService
from regretless.routers.deps import get_progress_service, require_user_id

router = APIRouter(prefix="/sessions", tags=["sessions"])


def _session_to_response(e: HabitEvent) -> SessionOut:
    return SessionOut(
        id=e.id,
        timestamp=e.timestamp.isoformat(),
        intensity=e.intensity,
        trigger=e.trigger.value,
        mood=e.mood.value,
        craving_level=e.craving_level,
        notes=e.notes,
        location=e.location,
        duration_seconds=e.duration_seconds,
    )


@router.post(
    "",
    response_model=SessionLoggedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Log a vaping session",
    responses={404: {"model": ErrorResponse, "description": "No profile for this user."}},
)
def log_session(
    payload: SessionCreate,
    user_id: str = Depends(require_user_id),
    service: ProgressService = Depends(get_progress_service),
):
    """
    Records the session, refreshes the streak and daily/weekly counts, then
    awards 5 points for tracking. Timestamps without an offset are read as UTC.
    """
    timestamp = payload.timestamp or service.clock()
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)

    event = HabitEvent(
        timestamp=timestamp,
        intensity=payload.intensity,
        trigger=payload.trigger,
        mood=payload.mood,
        craving_level=payload.craving_level,
        notes=payload.notes,
        location=payload.location,
        duration_seconds=payload.duration_seconds,
    )
    result = service.log_session(user_id, event)
    return SessionLoggedResponse(
        session=_session_to_response(event),
        points_awarded=result.points_awarded,
        balance=result.balance,
        streak_days=result.streak_days,
        milestones=[MilestoneOut.from_domain(m) for m in result.milestones],
    )


@router.get("", response_model=SessionListResponse, summary="List logged sessions (newest first)")
def list_sessions(
    limit: Optional[int] = Query(default=None, ge=1, le=1000),
    user_id: str = Depends(require_user_id),
    service: ProgressService = Depends(get_progress_service),
):
    events = service.sessions(user_id)
    if limit is not None:
        events = events[:limit]
    return SessionListResponse(
        total=len(events),
        items=[_session_to_response(e) for e in events],
    )
