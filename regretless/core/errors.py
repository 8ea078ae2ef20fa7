"""
Custom exception hierarchy for the RegretLess API.

Rule: every error has a machine-readable `code` string so clients can
branch on it without parsing English messages. Ledger rules raise these
directly; the HTTP layer only maps them onto responses.
"""
from __future__ import annotations

import logging
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exception classes
# ---------------------------------------------------------------------------

class RegretLessException(Exception):
    """Base class for all application-level errors."""
    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class InvalidAmountError(RegretLessException):
    http_status = 422
    code = "INVALID_AMOUNT"

    def __init__(self, amount: int):
        super().__init__(
            message=f"Point awards must be positive. Received {amount}.",
            details={"amount": amount},
        )


class InsufficientPointsError(RegretLessException):
    http_status = status.HTTP_409_CONFLICT
    code = "INSUFFICIENT_POINTS"

    def __init__(self, reward_id: str, cost: int, balance: int):
        super().__init__(
            message="Not enough points to unlock this reward.",
            details={"reward_id": reward_id, "cost": cost, "balance": balance},
        )


class AlreadyUnlockedError(RegretLessException):
    http_status = status.HTTP_409_CONFLICT
    code = "ALREADY_UNLOCKED"

    def __init__(self, reward_id: str):
        super().__init__(
            message="This reward is already unlocked.",
            details={"reward_id": reward_id},
        )


class RewardNotFoundError(RegretLessException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "REWARD_NOT_FOUND"

    def __init__(self, reward_id: str):
        super().__init__(
            message=f"Reward {reward_id} not found.",
            details={"reward_id": reward_id},
        )


class UnknownActivityError(RegretLessException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "UNKNOWN_ACTIVITY"

    def __init__(self, activity: str):
        super().__init__(
            message=f"Unknown activity '{activity}'.",
            details={"activity": activity},
        )


class UserNotFoundError(RegretLessException):
    http_status = status.HTTP_404_NOT_FOUND
    code = "USER_NOT_FOUND"

    def __init__(self, user_id: str):
        super().__init__(
            message="User profile not found.",
            details={"user_id": user_id},
        )


class UserAlreadyExistsError(RegretLessException):
    http_status = status.HTTP_409_CONFLICT
    code = "USER_ALREADY_EXISTS"

    def __init__(self, user_id: str):
        super().__init__(
            message="A profile already exists for this user.",
            details={"user_id": user_id},
        )


class MalformedRecordError(RegretLessException):
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "MALFORMED_RECORD"

    def __init__(self, collection: str, document_id: str, errors: list[str]):
        super().__init__(
            message=f"Stored {collection} record {document_id} could not be decoded.",
            details={
                "collection": collection,
                "document_id": document_id,
                "errors": errors,
            },
        )


class UnauthenticatedError(RegretLessException):
    http_status = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHENTICATED"

    def __init__(self, header: str):
        super().__init__(
            message="No authenticated user on this request.",
            details={"header": header},
        )


class PersistenceError(RegretLessException):
    http_status = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "PERSISTENCE_ERROR"

    def __init__(self, operation: str):
        super().__init__(
            message=f"Could not persist {operation}. Try again later.",
            details={"operation": operation},
        )


class BlobTooLargeError(RegretLessException):
    http_status = 413
    code = "BLOB_TOO_LARGE"

    def __init__(self, max_bytes: int, received: int):
        super().__init__(
            message=f"Upload exceeds maximum size of {max_bytes} bytes. Received {received}.",
            details={"max_bytes": max_bytes, "received": received},
        )


class UnsupportedMediaTypeError(RegretLessException):
    http_status = status.HTTP_415_UNSUPPORTED_MEDIA_TYPE
    code = "UNSUPPORTED_MEDIA_TYPE"

    def __init__(self, content_type: str, allowed: list[str]):
        super().__init__(
            message=f"Unsupported content type '{content_type}'.",
            details={"content_type": content_type, "allowed": allowed},
        )


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

async def regretless_exception_handler(
    request: Request, exc: RegretLessException
) -> JSONResponse:
    if exc.http_status >= 500:
        logger.error("%s %s -> %s: %s", request.method, request.url.path, exc.code, exc.message)
    else:
        logger.info("%s %s -> %s", request.method, request.url.path, exc.code)
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_dict(),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return structured 422 with machine-readable field errors."""
    field_errors = []
    for error in exc.errors():
        field_errors.append({
            "field": ".".join(str(loc) for loc in error["loc"] if loc != "body"),
            "message": error["msg"],
            "type": error["type"],
        })
    return JSONResponse(
        status_code=422,
        content={
            "code": "VALIDATION_ERROR",
            "message": "Request validation failed.",
            "details": {"errors": field_errors},
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        },
    )
