"""init

Revision ID: 0001_init
Revises:
Create Date: 2026-10-17
"""

from alembic import op
import sqlalchemy as sa


revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None


def _inspector():
    from sqlalchemy import inspect as sa_inspect
    return sa_inspect(op.get_bind())


def upgrade() -> None:
    inspector = _inspector()
    existing_tables = set(inspector.get_table_names())

    def existing_indexes(table: str) -> set[str]:
        if table not in existing_tables:
            return set()
        return {idx["name"] for idx in inspector.get_indexes(table)}

    if "users" not in existing_tables:
        op.create_table(
            "users",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("email", sa.String(), nullable=False),
            sa.Column("password_hash", sa.String(), nullable=False),
            sa.Column("phone_number", sa.String(), nullable=False),
            sa.Column("credits", sa.Integer(), nullable=False, server_default="1"),
            sa.Column("first_post_used", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)")),
            sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)")),
            sa.CheckConstraint("credits >= 0", name="ck_users_credits_non_negative"),
        )
    idxs = existing_indexes("users")
    if "ix_users_id" not in idxs:
        op.create_index("ix_users_id", "users", ["id"])
    if "ix_users_email" not in idxs:
        op.create_index("ix_users_email", "users", ["email"], unique=True)

    if "posts" not in existing_tables:
        op.create_table(
            "posts",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
            sa.Column("title", sa.String(), nullable=False),
            sa.Column("description", sa.Text(), nullable=False),
            sa.Column("price", sa.Numeric(10, 2), nullable=True),
            sa.Column("image_path", sa.String(), nullable=True),
            sa.Column("posted_at", sa.DateTime(timezone=True), nullable=False),
            sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
            sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        )
    idxs = existing_indexes("posts")
    if "ix_posts_id" not in idxs:
        op.create_index("ix_posts_id", "posts", ["id"])
    if "ix_posts_user_id" not in idxs:
        op.create_index("ix_posts_user_id", "posts", ["user_id"])
    if "ix_posts_posted_at" not in idxs:
        op.create_index("ix_posts_posted_at", "posts", ["posted_at"])
    if "ix_posts_expires_at" not in idxs:
        op.create_index("ix_posts_expires_at", "posts", ["expires_at"])

    if "credit_purchases" not in existing_tables:
        op.create_table(
            "credit_purchases",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
            sa.Column("credits_purchased", sa.Integer(), nullable=False),
            sa.Column("amount_paid", sa.Numeric(10, 2), nullable=False),
            sa.Column("payment_method", sa.String(), nullable=False),
            sa.Column("transaction_id", sa.String(), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)")),
        )
    idxs = existing_indexes("credit_purchases")
    if "ix_credit_purchases_id" not in idxs:
        op.create_index("ix_credit_purchases_id", "credit_purchases", ["id"])
    if "ix_credit_purchases_user_id" not in idxs:
        op.create_index("ix_credit_purchases_user_id", "credit_purchases", ["user_id"])
    if "ix_credit_purchases_payment_method" not in idxs:
        op.create_index("ix_credit_purchases_payment_method", "credit_purchases", ["payment_method"])
    if "ix_credit_purchases_transaction_id" not in idxs:
        op.create_index("ix_credit_purchases_transaction_id", "credit_purchases", ["transaction_id"], unique=True)
    if "ix_credit_purchases_created_at" not in idxs:
        op.create_index("ix_credit_purchases_created_at", "credit_purchases", ["created_at"])


def downgrade() -> None:
    op.drop_table("credit_purchases")
    op.drop_table("posts")
    op.drop_table("users")
