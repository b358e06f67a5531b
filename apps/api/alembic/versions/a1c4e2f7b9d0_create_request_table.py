"""Create request table

Revision ID: a1c4e2f7b9d0
Revises:
Create Date: 2026-10-18 10:00:00.000000

- request: work-order rows for the board (soft delete, just-upload, work-done flags)
- check_marks: JSON list of {x, y} points over the manuscript image
"""

from alembic import op
import sqlalchemy as sa


revision = "a1c4e2f7b9d0"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "request",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("company", sa.String(length=200), nullable=False),
        sa.Column("program", sa.String(length=200), nullable=False),
        sa.Column("pickup_date", sa.Date(), nullable=True),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("image_url", sa.String(length=1024), nullable=True),
        sa.Column("is_urgent", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_just_upload", sa.Boolean(), nullable=True, server_default=sa.false()),
        sa.Column("is_work_done", sa.Boolean(), nullable=True, server_default=sa.false()),
        sa.Column("creator", sa.String(length=50), nullable=True),
        sa.Column("check_marks", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_request_is_deleted_created_at", "request", ["is_deleted", "created_at"])


def downgrade() -> None:
    op.drop_index("ix_request_is_deleted_created_at", table_name="request")
    op.drop_table("request")
