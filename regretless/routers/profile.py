"""
Profile router.

POST /profile              — create the caller's profile (onboarding answers)
GET  /profile              — read it back
PUT  /profile/daily-goal   — change the daily session goal
PUT  /profile/avatar       — upload a profile picture (raw image body)
"""
from fastapi import APIRouter, Depends, Request, status

from regretless.core.config import settings
from regretless.core.errors import BlobTooLargeError, UnsupportedMediaTypeError
from regretless.schemas.common import ErrorResponse
from regretless.schemas.documents import UserRecord
from regretless.schemas.profile import (
    AvatarResponse,
    DailyGoalRequest,
    DailyGoalResponse,
    ProfileResponse,
    RegisterRequest,
)
from regretless.services.blobs import LocalBlobStore
from regretless.services.progress import ProgressService, daily_goal_for
from regretless.routers.deps import get_blob_store, get_progress_service, require_user_id

router = APIRouter(prefix="/profile", tags=["profile"])

_IMAGE_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}


def _profile_to_response(user_id: str, user: UserRecord) -> ProfileResponse:
    return ProfileResponse(
        user_id=user_id,
        username=user.username,
        join_date=user.join_date.isoformat(),
        plan_start_date=user.plan_start_date.isoformat() if user.plan_start_date else None,
        daily_vaping_goal=daily_goal_for(user),
        weekly_spending=user.weekly_spending,
        vaping_frequency=user.vaping_frequency,
        days_per_week_vaping=user.days_per_week_vaping,
        profile_image_url=user.profile_image_url,
    )


@router.post(
    "",
    response_model=ProfileResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create the caller's profile",
    responses={409: {"model": ErrorResponse, "description": "Profile already exists."}},
)
def create_profile(
    payload: RegisterRequest,
    user_id: str = Depends(require_user_id),
    service: ProgressService = Depends(get_progress_service),
):
    user = service.register(
        user_id=user_id,
        username=payload.username,
        weekly_spending=payload.weekly_spending,
        vaping_frequency=payload.vaping_frequency,
        days_per_week_vaping=payload.days_per_week_vaping,
        plan_start_date=payload.plan_start_date,
        daily_vaping_goal=payload.daily_vaping_goal,
    )
    return _profile_to_response(user_id, user)


@router.get("", response_model=ProfileResponse, summary="Read the caller's profile")
def read_profile(
    user_id: str = Depends(require_user_id),
    service: ProgressService = Depends(get_progress_service),
):
    return _profile_to_response(user_id, service.get_user(user_id))


@router.put("/daily-goal", response_model=DailyGoalResponse, summary="Set the daily session goal")
def update_daily_goal(
    payload: DailyGoalRequest,
    user_id: str = Depends(require_user_id),
    service: ProgressService = Depends(get_progress_service),
):
    goal = service.update_daily_goal(user_id, payload.daily_vaping_goal)
    return DailyGoalResponse(daily_vaping_goal=goal)


async def _read_avatar_body(request: Request) -> tuple[bytes, str]:
    """Raw image body and its file extension, checked against type and size."""
    content_type = request.headers.get("content-type", "").split(";")[0].strip()
    extension = _IMAGE_EXTENSIONS.get(content_type)
    if extension is None:
        raise UnsupportedMediaTypeError(content_type, sorted(_IMAGE_EXTENSIONS))
    data = await request.body()
    if len(data) > settings.MAX_AVATAR_BYTES:
        raise BlobTooLargeError(settings.MAX_AVATAR_BYTES, len(data))
    return data, extension


@router.put(
    "/avatar",
    response_model=AvatarResponse,
    summary="Upload a profile picture",
    responses={
        413: {"model": ErrorResponse, "description": "Image larger than MAX_AVATAR_BYTES."},
        415: {"model": ErrorResponse, "description": "Unsupported image type."},
    },
)
def upload_avatar(
    user_id: str = Depends(require_user_id),
    upload: tuple[bytes, str] = Depends(_read_avatar_body),
    service: ProgressService = Depends(get_progress_service),
    blobs: LocalBlobStore = Depends(get_blob_store),
):
    """
    Send the image bytes as the request body with a `Content-Type` of
    `image/jpeg`, `image/png` or `image/webp`.
    """
    data, extension = upload
    url = service.update_avatar(user_id, data, extension, blobs)
    return AvatarResponse(profile_image_url=url)
