"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-19

Creates the tenant root and every tenant-owned table:
- tenant
- user, agent_office, broker_application, license
- listing, qr_code, inspection_event, audit_log
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _owned_columns() -> list[sa.Column]:
    """Columns every tenant-owned table starts with."""
    return [
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("tenant_id", sa.String(64), sa.ForeignKey("tenant.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    """Create all tables."""
    op.create_table(
        "tenant",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("slug", sa.String(64), nullable=False, unique=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        "user",
        *_owned_columns(),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=True),
        sa.Column("role", sa.String(32), nullable=False),
        sa.UniqueConstraint("tenant_id", "email", name="uq_user_tenant_email"),
    )

    op.create_table(
        "agent_office",
        *_owned_columns(),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("address", sa.Text(), nullable=True),
    )

    op.create_table(
        "broker_application",
        *_owned_columns(),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("user.id"), nullable=True),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("documents", sa.JSON(), nullable=True),
    )

    op.create_table(
        "license",
        *_owned_columns(),
        sa.Column("number", sa.String(64), nullable=False),
        sa.Column("holder_name", sa.Text(), nullable=True),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("tenant_id", "number", name="uq_license_tenant_number"),
    )

    op.create_table(
        "listing",
        *_owned_columns(),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("price_cents", sa.Integer(), nullable=True),
        sa.Column("broker_id", sa.String(36), sa.ForeignKey("user.id"), nullable=True),
    )
    op.create_index("idx_listing_tenant_status", "listing", ["tenant_id", "status"])

    op.create_table(
        "qr_code",
        *_owned_columns(),
        sa.Column("code", sa.String(128), nullable=False),
        sa.Column("license_id", sa.String(36), sa.ForeignKey("license.id"), nullable=True),
        sa.Column("status", sa.String(32), nullable=False),
        sa.UniqueConstraint("tenant_id", "code", name="uq_qr_code_tenant_code"),
    )

    op.create_table(
        "inspection_event",
        *_owned_columns(),
        sa.Column("qr_code_id", sa.String(36), sa.ForeignKey("qr_code.id"), nullable=True),
        sa.Column("inspector_id", sa.String(36), sa.ForeignKey("user.id"), nullable=True),
        sa.Column("result", sa.String(32), nullable=False),
        sa.Column("location", sa.JSON(), nullable=True),
    )

    op.create_table(
        "audit_log",
        *_owned_columns(),
        sa.Column("actor_id", sa.String(36), nullable=True),
        sa.Column("action", sa.String(64), nullable=False),
        sa.Column("entity_type", sa.String(64), nullable=True),
        sa.Column("entity_id", sa.String(36), nullable=True),
        sa.Column("details", sa.JSON(), nullable=True),
    )

    for table in (
        "user",
        "agent_office",
        "broker_application",
        "license",
        "listing",
        "qr_code",
        "inspection_event",
        "audit_log",
    ):
        op.create_index(f"ix_{table}_tenant_id", table, ["tenant_id"])


def downgrade() -> None:
    """Drop all tables."""
    for table in (
        "audit_log",
        "inspection_event",
        "qr_code",
        "listing",
        "license",
        "broker_application",
        "agent_office",
        "user",
        "tenant",
    ):
        op.drop_table(table)
