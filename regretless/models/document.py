"""
Document store tables.

The app talks to its backend as a key-value document store: one document
per user plus append-only subcollections under it (milestones,
pointTransactions, vapingSessions). Fields are stored as a JSON-encoded
dict in a Text column; decoding into typed records
happens in app code, not here.
"""
from datetime import datetime
from sqlalchemy import Integer, String, Text, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from regretless.db.base import Base


class UserDocument(Base):
    __tablename__ = "user_documents"

    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    fields: Mapped[str] = mapped_column(
        Text, nullable=False, default="{}",
        comment="JSON-encoded dict of top-level user fields",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class SubcollectionDocument(Base):
    __tablename__ = "subcollection_documents"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "collection", "document_id", name="uq_subcollection_document"
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("user_documents.user_id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    collection: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    document_id: Mapped[str] = mapped_column(String(64), nullable=False)
    fields: Mapped[str] = mapped_column(Text, nullable=False, default="{}")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
