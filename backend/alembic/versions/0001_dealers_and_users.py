"""Dealers and users with role hierarchy.

Revision ID: 0001
Revises: (none)
Create Date: 2026-10-19
"""

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

from alembic import op
import sqlalchemy as sa

# Enum labels are the Python member names (SQLAlchemy's default for SAEnum).
dealer_status = sa.Enum("ACTIVE", "PENDING", "SUSPENDED", name="dealerstatus")
user_role = sa.Enum(
    "SUPER_ADMIN", "ADMIN", "DEALER_ADMIN", "DEALER_USER", "READONLY", name="userrole"
)
user_status = sa.Enum("ACTIVE", "INACTIVE", name="userstatus")


def upgrade() -> None:
    op.create_table(
        "dealers",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("code", sa.String(20), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("status", dealer_status, server_default="PENDING"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_dealers_code", "dealers", ["code"], unique=True)

    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("role", user_role, server_default="DEALER_USER"),
        sa.Column("status", user_status, server_default="ACTIVE"),
        sa.Column("dealer_id", sa.String(36), sa.ForeignKey("dealers.id")),
        sa.Column("created_by", sa.String(36)),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_dealer_id", "users", ["dealer_id"])


def downgrade() -> None:
    op.drop_index("ix_users_dealer_id", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    op.drop_index("ix_dealers_code", table_name="dealers")
    op.drop_table("dealers")
    user_status.drop(op.get_bind(), checkfirst=True)
    user_role.drop(op.get_bind(), checkfirst=True)
    dealer_status.drop(op.get_bind(), checkfirst=True)
