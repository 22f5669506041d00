"""Create subscribers table.

Revision ID: 002
Revises: 001
Create Date: 2026-10-18
"""
from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "subscribers",
        sa.Column("id", sa.UUID(), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("project_id", sa.UUID(), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(16), nullable=True),
        sa.Column("notify_by", postgresql.ARRAY(sa.String(20)), nullable=False),
        sa.Column("notify_on", postgresql.ARRAY(sa.String(40)), nullable=False),
        sa.Column("verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("verification_token", sa.String(64), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("project_id", "email", name="uq_subscribers_project_email"),
        sa.UniqueConstraint("verification_token", name="uq_subscribers_verification_token"),
    )
    op.create_index("ix_subscribers_project_id", "subscribers", ["project_id"])


def downgrade() -> None:
    op.drop_index("ix_subscribers_project_id", table_name="subscribers")
    op.drop_table("subscribers")
