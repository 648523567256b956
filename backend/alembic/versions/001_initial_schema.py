"""Initial schema: users, groups, facilities, bookings with approval state columns.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ACTIVE_BOOKING_CLAUSE = "status != 'REJECTED' AND cancellation_status != 'APPROVED_BY_FM'"


def _timestamps():
    return (
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )


def upgrade() -> None:
    op.create_table(
        "groups",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False, unique=True),
        *_timestamps(),
    )
    op.create_index("ix_groups_id", "groups", ["id"])

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("employee_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("image", sa.String(1024), nullable=True),
        sa.Column("role", sa.String(32), nullable=False, server_default=sa.text("'EMPLOYEE'")),
        sa.Column("group_id", sa.Integer(), sa.ForeignKey("groups.id"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_employee_id", "users", ["employee_id"], unique=True)
    op.create_index("ix_users_group_id", "users", ["group_id"])

    op.create_table(
        "facilities",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False),
        sa.Column("icon", sa.String(1024), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("manager_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True, unique=True),
        *_timestamps(),
    )
    op.create_index("ix_facilities_id", "facilities", ["id"])
    op.create_index("ix_facilities_slug", "facilities", ["slug"], unique=True)

    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("purpose", sa.String(1000), nullable=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("color", sa.String(32), nullable=True),
        sa.Column("status", sa.String(32), nullable=False, server_default=sa.text("'PENDING'")),
        sa.Column("cancellation_status", sa.String(32), nullable=False, server_default=sa.text("'NONE'")),
        sa.Column("requested_by_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("facility_id", sa.Integer(), sa.ForeignKey("facilities.id"), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("end_time > start_time", name="check_booking_time_range"),
    )
    op.create_index("ix_bookings_id", "bookings", ["id"])
    op.create_index("ix_bookings_requested_by_id", "bookings", ["requested_by_id"])
    op.create_index("ix_bookings_facility_id", "bookings", ["facility_id"])
    # Dashboard badges count by (facility, status) and (facility, cancellation_status)
    op.create_index("ix_bookings_facility_status", "bookings", ["facility_id", "status"])
    op.create_index("ix_bookings_facility_cancellation", "bookings", ["facility_id", "cancellation_status"])
    # One active booking per facility start time; rejected and cancelled rows free the slot
    op.create_index(
        "uq_bookings_facility_start_active",
        "bookings",
        ["facility_id", "start_time"],
        unique=True,
        postgresql_where=sa.text(ACTIVE_BOOKING_CLAUSE),
    )


def downgrade() -> None:
    op.drop_table("bookings")
    op.drop_table("facilities")
    op.drop_table("users")
    op.drop_table("groups")
