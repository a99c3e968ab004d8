"""initial schema

Revision ID: 0001_initial
Revises: 
Create Date: 2026-10-18 10:00:00
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    schedule_category = postgresql.ENUM("work", "personal", "meeting", "reminder", name="schedule_category", create_type=False)
    schedule_priority = postgresql.ENUM("high", "medium", "low", name="schedule_priority", create_type=False)
    ai_provider_kind = postgresql.ENUM("openai", "deepseek", "mock", name="ai_provider_kind", create_type=False)

    bind = op.get_bind()
    postgresql.ENUM("work", "personal", "meeting", "reminder", name="schedule_category").create(bind, checkfirst=True)
    postgresql.ENUM("high", "medium", "low", name="schedule_priority").create(bind, checkfirst=True)
    postgresql.ENUM("openai", "deepseek", "mock", name="ai_provider_kind").create(bind, checkfirst=True)

    op.create_table(
        "user_schedules",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("owner_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("category", schedule_category, nullable=False, server_default=sa.text("'work'")),
        sa.Column("priority", schedule_priority, nullable=False, server_default=sa.text("'medium'")),
        sa.Column("is_important", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("is_urgent", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("location", sa.String(length=255), nullable=True),
        sa.Column("attendees", sa.String(length=512), nullable=True),
        sa.Column("timezone", sa.String(length=64), nullable=True),
        sa.Column("metadata", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("end_time > start_time", name="ck_user_schedules_end_after_start"),
    )
    op.create_index("ix_user_schedules_owner_id", "user_schedules", ["owner_id"], unique=False)
    op.create_index("ix_user_schedules_owner_start", "user_schedules", ["owner_id", "start_time"], unique=False)
    op.create_index("ix_user_schedules_owner_category", "user_schedules", ["owner_id", "category"], unique=False)

    op.create_table(
        "ai_providers",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("kind", ai_provider_kind, nullable=False),
        sa.Column("name", sa.String(length=64), nullable=False),
        sa.Column("base_url", sa.String(length=255), nullable=True),
        sa.Column("api_key", sa.String(length=512), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "ai_models",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("provider_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("ai_providers.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("model", sa.String(length=128), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_ai_models_provider_id", "ai_models", ["provider_id"], unique=False)
    op.create_index("ix_ai_models_active_order", "ai_models", ["is_active", "sort_order"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_ai_models_active_order", table_name="ai_models")
    op.drop_index("ix_ai_models_provider_id", table_name="ai_models")
    op.drop_table("ai_models")

    op.drop_table("ai_providers")

    op.drop_index("ix_user_schedules_owner_category", table_name="user_schedules")
    op.drop_index("ix_user_schedules_owner_start", table_name="user_schedules")
    op.drop_index("ix_user_schedules_owner_id", table_name="user_schedules")
    op.drop_table("user_schedules")

    bind = op.get_bind()
    postgresql.ENUM(name="ai_provider_kind").drop(bind, checkfirst=True)
    postgresql.ENUM(name="schedule_priority").drop(bind, checkfirst=True)
    postgresql.ENUM(name="schedule_category").drop(bind, checkfirst=True)
