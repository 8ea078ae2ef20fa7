"""
Community engagement router.

POST /engagement/like      — +5 points, counts toward "Community Supporter"
POST /engagement/comment   — +10 points, counts toward "Supportive Friend"
"""
from fastapi import APIRouter, Depends

from regretless.schemas.common import AwardResponse
from regretless.services.domain import EngagementKind
from regretless.services.progress import ProgressService
from regretless.routers.deps import get_progress_service, require_user_id
from regretless.routers.progress import award_to_response

router = APIRouter(prefix="/engagement", tags=["engagement"])


@router.post("/{kind}", response_model=AwardResponse, summary="Record a like or comment")
def record_engagement(
    kind: EngagementKind,
    user_id: str = Depends(require_user_id),
    service: ProgressService = Depends(get_progress_service),
):
    return award_to_response(service.record_engagement(user_id, kind))
