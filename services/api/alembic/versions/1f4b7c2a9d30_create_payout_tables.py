"""create_payout_tables

Revision ID: 1f4b7c2a9d30
Revises:
Create Date: 2025-04-01
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "1f4b7c2a9d30"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # tourism_guides / sponsor_stores already exist (owned by the marketplace app).
    op.create_table(
        "payout_settings",
        sa.Column("key", sa.String(length=100), nullable=False),
        sa.Column("value_json", sa.Text(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("key"),
    )

    op.create_table(
        "contributions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("store_id", sa.String(length=64), nullable=False),
        sa.Column("guide_id", sa.String(length=64), nullable=False),
        sa.Column("month", sa.String(length=7), nullable=False),
        sa.Column("type", sa.String(length=10), nullable=False),
        sa.Column("base_points", sa.Float(), nullable=False, server_default="0"),
        sa.Column("evidence_url", sa.Text(), nullable=True),
        sa.Column("memo", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["guide_id"], ["tourism_guides.id"]),
        sa.ForeignKeyConstraint(["store_id"], ["sponsor_stores.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_contributions_store_id"), "contributions", ["store_id"], unique=False)
    op.create_index(op.f("ix_contributions_guide_id"), "contributions", ["guide_id"], unique=False)
    op.create_index(op.f("ix_contributions_month"), "contributions", ["month"], unique=False)
    op.create_index(
        "ix_contributions_month_guide_store",
        "contributions",
        ["month", "guide_id", "store_id"],
        unique=False,
    )

    op.create_table(
        "store_founders",
        sa.Column("store_id", sa.String(length=64), nullable=False),
        sa.Column("guide_id", sa.String(length=64), nullable=False),
        sa.Column("assigned_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["guide_id"], ["tourism_guides.id"]),
        sa.ForeignKeyConstraint(["store_id"], ["sponsor_stores.id"]),
        sa.PrimaryKeyConstraint("store_id"),
    )
    op.create_index(op.f("ix_store_founders_guide_id"), "store_founders", ["guide_id"], unique=False)

    op.create_table(
        "monthly_guide_scores",
        sa.Column("guide_id", sa.String(length=64), nullable=False),
        sa.Column("month", sa.String(length=7), nullable=False),
        sa.Column("monthly_score", sa.Float(), nullable=False, server_default="0"),
        sa.Column("avg3_score", sa.Float(), nullable=False, server_default="0"),
        sa.Column("rank_score", sa.Float(), nullable=False, server_default="0"),
        sa.Column("rank", sa.String(length=1), nullable=False, server_default="C"),
        sa.Column("locked", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["guide_id"], ["tourism_guides.id"]),
        sa.PrimaryKeyConstraint("guide_id", "month"),
    )
    op.create_index(op.f("ix_monthly_guide_scores_month"), "monthly_guide_scores", ["month"], unique=False)
    op.create_index(op.f("ix_monthly_guide_scores_rank_score"), "monthly_guide_scores", ["rank_score"], unique=False)

    op.create_table(
        "payouts",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("guide_id", sa.String(length=64), nullable=False),
        sa.Column("store_id", sa.String(length=64), nullable=False),
        sa.Column("month", sa.String(length=7), nullable=False),
        sa.Column("type", sa.String(length=20), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("details_json", sa.Text(), nullable=True),
        sa.Column("locked", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["guide_id"], ["tourism_guides.id"]),
        sa.ForeignKeyConstraint(["store_id"], ["sponsor_stores.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_payouts_guide_id"), "payouts", ["guide_id"], unique=False)
    op.create_index(op.f("ix_payouts_store_id"), "payouts", ["store_id"], unique=False)
    op.create_index(op.f("ix_payouts_month"), "payouts", ["month"], unique=False)

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("month", sa.String(length=7), nullable=False),
        sa.Column("action", sa.String(length=20), nullable=False),
        sa.Column("user", sa.String(length=100), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_audit_logs_month"), "audit_logs", ["month"], unique=False)

    op.create_table(
        "month_locks",
        sa.Column("month", sa.String(length=7), nullable=False),
        sa.Column("locked", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("locked_by", sa.String(length=100), nullable=True),
        sa.Column("locked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("calculated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("month"),
    )


def downgrade() -> None:
    op.drop_table("month_locks")
    op.drop_index(op.f("ix_audit_logs_month"), table_name="audit_logs")
    op.drop_table("audit_logs")
    op.drop_index(op.f("ix_payouts_month"), table_name="payouts")
    op.drop_index(op.f("ix_payouts_store_id"), table_name="payouts")
    op.drop_index(op.f("ix_payouts_guide_id"), table_name="payouts")
    op.drop_table("payouts")
    op.drop_index(op.f("ix_monthly_guide_scores_rank_score"), table_name="monthly_guide_scores")
    op.drop_index(op.f("ix_monthly_guide_scores_month"), table_name="monthly_guide_scores")
    op.drop_table("monthly_guide_scores")
    op.drop_index(op.f("ix_store_founders_guide_id"), table_name="store_founders")
    op.drop_table("store_founders")
    op.drop_index("ix_contributions_month_guide_store", table_name="contributions")
    op.drop_index(op.f("ix_contributions_month"), table_name="contributions")
    op.drop_index(op.f("ix_contributions_guide_id"), table_name="contributions")
    op.drop_index(op.f("ix_contributions_store_id"), table_name="contributions")
    op.drop_table("contributions")
    op.drop_table("payout_settings")
