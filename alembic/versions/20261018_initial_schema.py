"""Initial FinScope schema"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261018_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_id", "users", ["id"], unique=False)
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "financial_analyses",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("monthly_income", sa.Float(), nullable=False),
        sa.Column("monthly_expenses", sa.Float(), nullable=False),
        sa.Column("debt_amount", sa.Float(), nullable=False),
        sa.Column("credit_score", sa.Integer(), nullable=False),
        sa.Column("financial_score", sa.Integer(), nullable=False),
        sa.Column("credit_utilization", sa.Float(), nullable=True),
        sa.Column("debt_to_income_ratio", sa.Float(), nullable=True),
        sa.Column("monthly_available", sa.Float(), nullable=True),
        sa.Column("recommendations", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "month", "year", name="uq_financial_analyses_user_month_year"),
    )
    op.create_index("ix_financial_analyses_id", "financial_analyses", ["id"], unique=False)
    op.create_index("ix_financial_analyses_user_id", "financial_analyses", ["user_id"], unique=False)

    op.create_table(
        "receipts",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("file_path", sa.String(), nullable=False),
        sa.Column("file_name", sa.String(), nullable=False),
        sa.Column("amount", sa.Float(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("upload_date", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("file_path"),
    )
    op.create_index("ix_receipts_id", "receipts", ["id"], unique=False)
    op.create_index("ix_receipts_user_period", "receipts", ["user_id", "year", "month"], unique=False)

    op.create_table(
        "user_portfolios",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("investment_goal", sa.String(), nullable=False),
        sa.Column("risk_appetite", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "investment_goal", name="uq_user_portfolios_user_goal"),
    )
    op.create_index("ix_user_portfolios_id", "user_portfolios", ["id"], unique=False)

    op.create_table(
        "trades",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("portfolio_id", sa.Integer(), nullable=True),
        sa.Column("symbol", sa.String(), nullable=False),
        sa.Column("asset_name", sa.String(), nullable=True),
        sa.Column("trade_type", sa.String(), nullable=False),
        sa.Column("quantity", sa.Float(), nullable=False),
        sa.Column("entry_price", sa.Float(), nullable=False),
        sa.Column("exit_price", sa.Float(), nullable=True),
        sa.Column("entry_date", sa.DateTime(), nullable=True),
        sa.Column("exit_date", sa.DateTime(), nullable=True),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("pnl", sa.Float(), nullable=True),
        sa.Column("pnl_percent", sa.Float(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["portfolio_id"], ["user_portfolios.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_trades_id", "trades", ["id"], unique=False)
    op.create_index("ix_trades_user_status", "trades", ["user_id", "status"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_trades_user_status", table_name="trades")
    op.drop_index("ix_trades_id", table_name="trades")
    op.drop_table("trades")
    op.drop_index("ix_user_portfolios_id", table_name="user_portfolios")
    op.drop_table("user_portfolios")
    op.drop_index("ix_receipts_user_period", table_name="receipts")
    op.drop_index("ix_receipts_id", table_name="receipts")
    op.drop_table("receipts")
    op.drop_index("ix_financial_analyses_user_id", table_name="financial_analyses")
    op.drop_index("ix_financial_analyses_id", table_name="financial_analyses")
    op.drop_table("financial_analyses")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_index("ix_users_id", table_name="users")
    op.drop_table("users")
