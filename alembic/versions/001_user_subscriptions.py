"""user subscriptions

Revision ID: 001
Revises:
Create Date: 2026-10-16

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Reads are limited to the owner; writes only through the service role
RLS_POLICIES = (
    "ALTER TABLE user_subscriptions ENABLE ROW LEVEL SECURITY",
    'CREATE POLICY "Users can view their own subscription" ON user_subscriptions '
    "FOR SELECT USING (auth.uid()::text = user_id)",
    'CREATE POLICY "Only server can insert subscriptions" ON user_subscriptions '
    "FOR INSERT WITH CHECK (false)",
    'CREATE POLICY "Only server can update subscriptions" ON user_subscriptions '
    "FOR UPDATE USING (false)",
    'CREATE POLICY "Only server can delete subscriptions" ON user_subscriptions '
    "FOR DELETE USING (false)",
)


def _has_auth_schema(bind) -> bool:
    return bind.execute(
        sa.text("SELECT 1 FROM pg_namespace WHERE nspname = 'auth'")
    ).first() is not None


def upgrade() -> None:
    op.create_table(
        "user_subscriptions",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("plan_id", sa.String(100), nullable=False),
        sa.Column("tier", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("current_period_start", sa.DateTime(timezone=True), nullable=False),
        sa.Column("current_period_end", sa.DateTime(timezone=True), nullable=False),
        sa.Column("cancel_at_period_end", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "tier IN ('free', 'basic', 'pro', 'enterprise')",
            name="ck_user_subscriptions_tier",
        ),
        sa.CheckConstraint(
            "status IN ('active', 'canceled', 'past_due', 'trialing', 'incomplete')",
            name="ck_user_subscriptions_status",
        ),
    )
    op.create_index("ix_user_subscriptions_user_id", "user_subscriptions", ["user_id"], unique=True)

    bind = op.get_bind()
    if bind.dialect.name == "postgresql" and _has_auth_schema(bind):
        for statement in RLS_POLICIES:
            op.execute(statement)


def downgrade() -> None:
    op.drop_index("ix_user_subscriptions_user_id", table_name="user_subscriptions")
    op.drop_table("user_subscriptions")
