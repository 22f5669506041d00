"""Create users, projects, components, incidents and uptime tables.

Revision ID: 001
Revises: None
Create Date: 2026-10-18
"""
from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_role = postgresql.ENUM("platform_admin", "owner", name="userrole", create_type=False)
component_status = postgresql.ENUM(
    "operational", "degraded", "partial_outage", "major_outage", "maintenance",
    name="componentstatus",
    create_type=False,
)
incident_status = postgresql.ENUM(
    "investigating", "identified", "monitoring", "resolved", name="incidentstatus", create_type=False
)
incident_impact = postgresql.ENUM("none", "minor", "major", "critical", name="incidentimpact", create_type=False)
uptime_status = postgresql.ENUM("up", "down", "unknown", name="uptimestatus", create_type=False)

ENUMS = (user_role, component_status, incident_status, incident_impact, uptime_status)


def upgrade() -> None:
    bind = op.get_bind()
    for enum_type in ENUMS:
        enum_type.create(bind, checkfirst=True)

    # ── users ────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", sa.UUID(), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("role", user_role, nullable=False, server_default="owner"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # ── projects ─────────────────────────────────────────────
    op.create_table(
        "projects",
        sa.Column("id", sa.UUID(), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("user_id", sa.UUID(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("custom_domain", sa.String(255), nullable=True),
        sa.Column("branding", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_projects_slug", "projects", ["slug"], unique=True)
    op.create_index("ix_projects_user_id", "projects", ["user_id"])

    # ── components ───────────────────────────────────────────
    op.create_table(
        "components",
        sa.Column("id", sa.UUID(), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("project_id", sa.UUID(), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", component_status, nullable=False, server_default="operational"),
        sa.Column("position", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_components_project_id", "components", ["project_id"])
    op.create_index("ix_components_project_position", "components", ["project_id", "position"])

    # ── incidents ────────────────────────────────────────────
    # affected_components has no FK: ids of deleted components are kept.
    op.create_table(
        "incidents",
        sa.Column("id", sa.UUID(), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("project_id", sa.UUID(), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("status", incident_status, nullable=False, server_default="investigating"),
        sa.Column("impact", incident_impact, nullable=False, server_default="minor"),
        sa.Column("affected_components", postgresql.ARRAY(sa.UUID()), nullable=False, server_default="{}"),
        sa.Column("start_time", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_incidents_project_created", "incidents", ["project_id", "created_at"])
    op.create_index("ix_incidents_status", "incidents", ["status"])

    op.create_table(
        "incident_updates",
        sa.Column("id", sa.UUID(), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("incident_id", sa.UUID(), sa.ForeignKey("incidents.id", ondelete="CASCADE"), nullable=False),
        sa.Column("status", incident_status, nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_incident_updates_incident_id", "incident_updates", ["incident_id"])

    # ── uptime ───────────────────────────────────────────────
    op.create_table(
        "uptime_checks",
        sa.Column("id", sa.UUID(), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("project_id", sa.UUID(), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False),
        sa.Column("component_id", sa.UUID(), sa.ForeignKey("components.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("url", sa.String(2048), nullable=False),
        sa.Column("method", sa.String(10), nullable=False, server_default="GET"),
        sa.Column("timeout", sa.Integer(), nullable=False, server_default="30"),
        sa.Column("interval", sa.Integer(), nullable=False, server_default="300"),
        sa.Column("expected_status_codes", postgresql.ARRAY(sa.Integer()), nullable=False, server_default="{200}"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_status", uptime_status, nullable=False, server_default="unknown"),
        sa.Column("last_checked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_uptime_checks_project_id", "uptime_checks", ["project_id"])
    op.create_index("ix_uptime_checks_component_id", "uptime_checks", ["component_id"])

    op.create_table(
        "uptime_logs",
        sa.Column("id", sa.UUID(), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column(
            "uptime_check_id", sa.UUID(), sa.ForeignKey("uptime_checks.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("success", sa.Boolean(), nullable=False),
        sa.Column("response_time", sa.Integer(), nullable=True),
        sa.Column("status_code", sa.Integer(), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("checked_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_uptime_logs_check_checked_at", "uptime_logs", ["uptime_check_id", "checked_at"])


def downgrade() -> None:
    op.drop_table("uptime_logs")
    op.drop_table("uptime_checks")
    op.drop_table("incident_updates")
    op.drop_table("incidents")
    op.drop_table("components")
    op.drop_table("projects")
    op.drop_table("users")

    bind = op.get_bind()
    for enum_type in reversed(ENUMS):
        enum_type.drop(bind, checkfirst=True)
