"""
Blob store for uploaded binary content (profile pictures).

upload(data, path) -> URL. Files land under BLOB_ROOT; the URL is
BLOB_BASE_URL + "/" + path, served by whatever fronts the API.
"""
from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath

from regretless.core.config import settings

logger = logging.getLogger(__name__)


class LocalBlobStore:
    def __init__(self, root: str | Path | None = None, base_url: str | None = None):
        self.root = Path(root or settings.BLOB_ROOT)
        self.base_url = (base_url if base_url is not None else settings.BLOB_BASE_URL).rstrip("/")

    def upload(self, data: bytes, path: str) -> str:
        rel = PurePosixPath(path)
        if rel.is_absolute() or ".." in rel.parts:
            raise ValueError(f"Blob path must be relative without '..': {path}")
        target = self.root.joinpath(*rel.parts)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        logger.info("Stored blob %s (%s bytes)", rel, len(data))
        return f"{self.base_url}/{rel}"
