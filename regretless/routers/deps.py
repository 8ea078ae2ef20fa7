"""
Request-scoped dependencies: who is calling, and the service wired to
this request's DB session.
"""
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from regretless.core.config import settings
from regretless.core.errors import UnauthenticatedError
from regretless.db.base import get_db
from regretless.services.blobs import LocalBlobStore
from regretless.services.documents import SqlDocumentStore
from regretless.services.progress import ProgressService


class HeaderIdentity:
    """Identity provider: the user id forwarded by the auth gateway."""

    def __init__(self, request: Request, header: str = settings.USER_ID_HEADER):
        self.request = request
        self.header = header

    def current_user_id(self) -> Optional[str]:
        value = self.request.headers.get(self.header, "").strip()
        return value or None


def require_user_id(request: Request) -> str:
    user_id = HeaderIdentity(request).current_user_id()
    if user_id is None:
        raise UnauthenticatedError(settings.USER_ID_HEADER)
    return user_id


def get_progress_service(db: Session = Depends(get_db)) -> ProgressService:
    return ProgressService(SqlDocumentStore(db))


def get_blob_store() -> LocalBlobStore:
    return LocalBlobStore()
