"""baseline schema for product requests

Revision ID: 0001_baseline
Revises:
Create Date: 2026-10-19

users, product_requests, offers, transactions. product_requests and offers
reference each other, so the selected-offer foreign key is added last.
"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "0001_baseline"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("role", sa.String(20), nullable=False, server_default="User"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "product_requests",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(36), nullable=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("desc", sa.Text(), nullable=True),
        sa.Column("category", sa.String(50), nullable=False),
        sa.Column("budget", sa.Numeric(12, 2), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("images", sa.JSON(), nullable=False),
        sa.Column("selected_offer_id", sa.Integer(), nullable=True),
        sa.Column("delivery_status", sa.String(30), nullable=False, server_default="Opening"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="SET NULL"),
    )
    op.create_index("ix_product_requests_user_id", "product_requests", ["user_id"])
    op.create_index("ix_product_requests_category", "product_requests", ["category"])
    op.create_index("ix_product_requests_delivery_status", "product_requests", ["delivery_status"])

    op.create_table(
        "offers",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("product_request_id", sa.Integer(), nullable=False),
        sa.Column("offer_date", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["product_request_id"], ["product_requests.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_offers_user_id", "offers", ["user_id"])
    op.create_index("ix_offers_product_request_id", "offers", ["product_request_id"])

    op.create_table(
        "transactions",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("product_request_id", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default="THB"),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["product_request_id"], ["product_requests.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_transactions_user_id", "transactions", ["user_id"])
    op.create_index("ix_transactions_product_request_id", "transactions", ["product_request_id"])

    with op.batch_alter_table("product_requests") as batch_op:
        batch_op.create_foreign_key(
            "fk_product_requests_selected_offer_id", "offers", ["selected_offer_id"], ["id"]
        )


def downgrade() -> None:
    with op.batch_alter_table("product_requests") as batch_op:
        batch_op.drop_constraint("fk_product_requests_selected_offer_id", type_="foreignkey")
    op.drop_table("transactions")
    op.drop_table("offers")
    op.drop_table("product_requests")
    op.drop_table("users")
