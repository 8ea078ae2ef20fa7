"""
Document store on top of SQLAlchemy.

Contract (what the rest of the app relies on):
  get_user_document(user_id)                        -> dict | None
  create_user_document(user_id, fields)             -> bool
  update_user_fields(user_id, fields)               -> bool   (merge, not replace)
  append_subcollection_document(user_id, collection, fields, document_id=None) -> bool
  list_subcollection(user_id, collection)           -> [(document_id, fields)]

Writes return False on failure (after rollback + log) rather than raising;
the caller decides what a failed write means. A True return means the row
is committed.
"""
from __future__ import annotations

import json
import logging
import uuid
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from regretless.models.document import SubcollectionDocument, UserDocument

logger = logging.getLogger(__name__)


class SqlDocumentStore:
    def __init__(self, db: Session):
        self.db = db

    # --- reads ---

    def get_user_document(self, user_id: str) -> Optional[dict[str, Any]]:
        row = self.db.get(UserDocument, user_id)
        if row is None:
            return None
        return json.loads(row.fields or "{}")

    def list_subcollection(self, user_id: str, collection: str) -> list[tuple[str, dict[str, Any]]]:
        rows = (
            self.db.query(SubcollectionDocument)
            .filter(
                SubcollectionDocument.user_id == user_id,
                SubcollectionDocument.collection == collection,
            )
            .order_by(SubcollectionDocument.id.asc())
            .all()
        )
        return [(r.document_id, json.loads(r.fields or "{}")) for r in rows]

    # --- writes ---

    def create_user_document(self, user_id: str, fields: dict[str, Any]) -> bool:
        self.db.add(UserDocument(user_id=user_id, fields=json.dumps(fields, default=str)))
        return self._commit("create user document", user_id)

    def update_user_fields(self, user_id: str, fields: dict[str, Any]) -> bool:
        row = self.db.get(UserDocument, user_id)
        if row is None:
            logger.warning("update_user_fields: no document for user %s", user_id)
            return False
        merged = json.loads(row.fields or "{}")
        merged.update(fields)
        row.fields = json.dumps(merged, default=str)
        return self._commit("update user fields", user_id)

    def append_subcollection_document(
        self,
        user_id: str,
        collection: str,
        fields: dict[str, Any],
        document_id: Optional[str] = None,
    ) -> bool:
        self.db.add(SubcollectionDocument(
            user_id=user_id,
            collection=collection,
            document_id=document_id or str(uuid.uuid4()),
            fields=json.dumps(fields, default=str),
        ))
        return self._commit(f"append {collection}", user_id)

    def apply(
        self,
        user_id: str,
        fields: dict[str, Any],
        appends: list[tuple[str, str, dict[str, Any]]],
    ) -> bool:
        """
        Merge `fields` into the user document and append every
        (collection, document_id, fields) in one commit.
        """
        row = self.db.get(UserDocument, user_id)
        if row is None:
            logger.warning("apply: no document for user %s", user_id)
            return False
        merged = json.loads(row.fields or "{}")
        merged.update(fields)
        row.fields = json.dumps(merged, default=str)
        for collection, document_id, doc_fields in appends:
            self.db.add(SubcollectionDocument(
                user_id=user_id,
                collection=collection,
                document_id=document_id,
                fields=json.dumps(doc_fields, default=str),
            ))
        return self._commit("apply ledger changes", user_id)

    def _commit(self, operation: str, user_id: str) -> bool:
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.warning("Document store %s failed for user %s: %s", operation, user_id, exc)
            return False
        return True
