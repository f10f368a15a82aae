"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 10:00:00

"""
from alembic import op
import sqlalchemy as sa


revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("first_name", sa.Text(), nullable=False),
        sa.Column("last_name", sa.Text()),
        sa.Column("email", sa.Text(), nullable=False, unique=True),
        sa.Column("phone_no", sa.Text()),
        sa.Column("gender", sa.Enum("male", "female", "other", name="user_gender")),
        sa.Column("date_of_birth", sa.Date()),
        sa.Column("nationality", sa.Text()),
        sa.Column("passport_no", sa.Text()),
        sa.Column("passport_expiry", sa.Date()),
        sa.Column("is_active", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
    )

    op.create_table(
        "services",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("category", sa.Text(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("fees", sa.Text(), nullable=False, server_default=sa.text("'{}'")),
        sa.Column("required_documents", sa.Text(), nullable=False, server_default=sa.text("'[]'")),
        sa.Column("processing_time", sa.Text()),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("is_active", sa.Integer(), nullable=False, server_default=sa.text("1")),
    )

    op.create_table(
        "verification_centers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("address", sa.Text()),
        sa.Column("city", sa.Text(), nullable=False),
        sa.Column("state", sa.Text()),
        sa.Column("country", sa.Text(), nullable=False),
        sa.Column("postal_code", sa.Text()),
        sa.Column("phone", sa.Text()),
        sa.Column("email", sa.Text()),
        sa.Column("latitude", sa.Float()),
        sa.Column("longitude", sa.Float()),
        sa.Column("operating_hours", sa.Text(), nullable=False, server_default=sa.text("'{}'")),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("is_active", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
    )

    op.create_table(
        "center_services",
        sa.Column("center_id", sa.Integer(), sa.ForeignKey("verification_centers.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("service_id", sa.Integer(), sa.ForeignKey("services.id", ondelete="CASCADE"), primary_key=True),
    )

    op.create_table(
        "counters",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("center_id", sa.Integer(), sa.ForeignKey("verification_centers.id", ondelete="CASCADE"), nullable=False),
        sa.Column("counter_name", sa.Text(), nullable=False),
        sa.Column("is_active", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.UniqueConstraint("center_id", "counter_name"),
    )

    op.create_table(
        "counter_services",
        sa.Column("counter_id", sa.Integer(), sa.ForeignKey("counters.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("service_id", sa.Integer(), sa.ForeignKey("services.id", ondelete="CASCADE"), primary_key=True),
    )

    op.create_table(
        "time_slots",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
    )

    op.create_table(
        "appointments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("booked_by", sa.Integer(), sa.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("booked_for_service", sa.Integer(), sa.ForeignKey("services.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("at_counter", sa.Integer(), sa.ForeignKey("counters.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("appointment_date", sa.Date(), nullable=False),
        sa.Column("slot_id", sa.Integer(), sa.ForeignKey("time_slots.id", ondelete="RESTRICT"), nullable=False),
        sa.Column(
            "appointment_status",
            sa.Enum("scheduled", "completed", "cancelled", "no-show", name="appointment_status"),
            nullable=False,
            server_default=sa.text("'scheduled'"),
        ),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
    )
    op.create_index(
        "ix_appointments_capacity",
        "appointments",
        ["at_counter", "appointment_date", "slot_id", "appointment_status"],
    )

    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("booked_date", sa.Date(), nullable=False),
        sa.Column("booked_slot", sa.Integer(), sa.ForeignKey("time_slots.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("appointment_id", sa.Integer(), sa.ForeignKey("appointments.id", ondelete="RESTRICT"), nullable=False, unique=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
    )

    op.create_table(
        "system_config",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("config_key", sa.Text(), nullable=False, unique=True),
        sa.Column("config_value", sa.Text(), nullable=False, server_default=sa.text("'{}'")),
        sa.Column("is_public", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
    )

    op.create_table(
        "admin_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("actor_id", sa.Integer(), nullable=False),
        sa.Column("actor_type", sa.Text(), nullable=False, server_default=sa.text("'admin'")),
        sa.Column("action", sa.Text(), nullable=False),
        sa.Column("details", sa.Text()),
        sa.Column("resource_type", sa.Text()),
        sa.Column("resource_id", sa.Text()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
    )


def downgrade():
    op.drop_table("admin_logs")
    op.drop_table("system_config")
    op.drop_table("bookings")
    op.drop_index("ix_appointments_capacity", table_name="appointments")
    op.drop_table("appointments")
    op.drop_table("time_slots")
    op.drop_table("counter_services")
    op.drop_table("counters")
    op.drop_table("center_services")
    op.drop_table("verification_centers")
    op.drop_table("services")
    op.drop_table("users")
