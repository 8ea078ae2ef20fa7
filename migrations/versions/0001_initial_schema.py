"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- user_documents ---
    op.create_table(
        "user_documents",
        sa.Column("user_id", sa.String(128), nullable=False),
        sa.Column("fields", sa.Text(), nullable=False, server_default="{}",
                  comment="JSON-encoded dict of top-level user fields"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("user_id"),
    )

    # --- subcollection_documents (milestones, pointTransactions, vapingSessions) ---
    op.create_table(
        "subcollection_documents",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(128), nullable=False),
        sa.Column("collection", sa.String(64), nullable=False),
        sa.Column("document_id", sa.String(64), nullable=False),
        sa.Column("fields", sa.Text(), nullable=False, server_default="{}"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["user_documents.user_id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "collection", "document_id", name="uq_subcollection_document"),
    )
    op.create_index("ix_subcollection_documents_id", "subcollection_documents", ["id"])
    op.create_index("ix_subcollection_documents_user_id", "subcollection_documents", ["user_id"])
    op.create_index("ix_subcollection_documents_collection", "subcollection_documents", ["collection"])


def downgrade() -> None:
    op.drop_index("ix_subcollection_documents_collection", table_name="subcollection_documents")
    op.drop_index("ix_subcollection_documents_user_id", table_name="subcollection_documents")
    op.drop_index("ix_subcollection_documents_id", table_name="subcollection_documents")
    op.drop_table("subcollection_documents")
    op.drop_table("user_documents")
