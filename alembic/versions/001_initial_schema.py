"""Initial schema for SolarWise.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-17
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Users (profiles are created by the auth service)
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True, index=True),
        sa.Column("username", sa.String(100), nullable=False, unique=True),
        sa.Column("full_name", sa.String(255)),
        sa.Column("auth_method", sa.String(20), nullable=False, server_default="traditional"),
        sa.Column("is_verified", sa.Boolean, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean, server_default=sa.true()),
        sa.Column("address", postgresql.JSONB, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # Bounded per-user recommendation log
    op.create_table(
        "recommendation_history",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("request_id", sa.String(64), nullable=False, unique=True),
        sa.Column("total_wattage", sa.Float, nullable=False),
        sa.Column("daily_consumption", sa.String(32), nullable=False),
        sa.Column("appliances", postgresql.JSONB, nullable=False),
        sa.Column("location", postgresql.JSONB, nullable=False),
        sa.Column("solar_conditions", postgresql.JSONB, nullable=False),
        sa.Column("recommended_system", postgresql.JSONB, nullable=False),
        sa.Column("ai_model", sa.String(100), nullable=False),
        sa.Column("processing_time_ms", sa.Integer, nullable=False),
        sa.Column("price_per_watt", sa.Float),
        sa.Column("requested_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index(
        "ix_recommendation_history_user_id", "recommendation_history", ["user_id"]
    )


def downgrade() -> None:
    op.drop_index("ix_recommendation_history_user_id", table_name="recommendation_history")
    op.drop_table("recommendation_history")
    op.drop_table("users")
