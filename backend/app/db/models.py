"""SQLAlchemy ORM models for the shared-schema brokerage store.

Every tenant-owned table carries a non-nullable tenant_id that also takes part
in any uniqueness constraint meant to be per-tenant.
"""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func


def _new_id() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class Tenant(Base):
    """Tenant table - one customer organization, the isolation boundary."""

    __tablename__ = "tenant"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    slug: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class TenantOwnedMixin:
    """Columns shared by every tenant-owned table."""

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    tenant_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("tenant.id"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class User(TenantOwnedMixin, Base):
    """User table - tenant-scoped accounts."""

    __tablename__ = "user"
    __table_args__ = (UniqueConstraint("tenant_id", "email", name="uq_user_tenant_email"),)

    email: Mapped[str] = mapped_column(Text, nullable=False)
    name: Mapped[str | None] = mapped_column(Text, nullable=True)
    role: Mapped[str] = mapped_column(String(32), nullable=False, default="AGENT")


class AgentOffice(TenantOwnedMixin, Base):
    """Agent office table - physical branch of a tenant."""

    __tablename__ = "agent_office"

    name: Mapped[str] = mapped_column(Text, nullable=False)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)


class BrokerApplication(TenantOwnedMixin, Base):
    """Broker application table - onboarding requests awaiting review."""

    __tablename__ = "broker_application"

    user_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("user.id"), nullable=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="PENDING")
    documents: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)


class License(TenantOwnedMixin, Base):
    """License table - broker licenses, numbered uniquely within a tenant."""

    __tablename__ = "license"
    __table_args__ = (UniqueConstraint("tenant_id", "number", name="uq_license_tenant_number"),)

    number: Mapped[str] = mapped_column(String(64), nullable=False)
    holder_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="ACTIVE")
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class Listing(TenantOwnedMixin, Base):
    """Listing table - properties published by brokers."""

    __tablename__ = "listing"
    __table_args__ = (Index("idx_listing_tenant_status", "tenant_id", "status"),)

    title: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="DRAFT")
    price_cents: Mapped[int | None] = mapped_column(Integer, nullable=True)
    broker_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("user.id"), nullable=True)


class QrCode(TenantOwnedMixin, Base):
    """QR code table - verification codes printed on license badges."""

    __tablename__ = "qr_code"
    __table_args__ = (UniqueConstraint("tenant_id", "code", name="uq_qr_code_tenant_code"),)

    code: Mapped[str] = mapped_column(String(128), nullable=False)
    license_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("license.id"), nullable=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="ACTIVE")


class InspectionEvent(TenantOwnedMixin, Base):
    """Inspection event table - scans recorded by field inspectors."""

    __tablename__ = "inspection_event"

    qr_code_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("qr_code.id"), nullable=True)
    inspector_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("user.id"), nullable=True)
    result: Mapped[str] = mapped_column(String(32), nullable=False)
    location: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)


class AuditLog(TenantOwnedMixin, Base):
    """Audit log table - append-only record of sensitive actions."""

    __tablename__ = "audit_log"

    actor_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    action: Mapped[str] = mapped_column(String(64), nullable=False)
    entity_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    entity_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    details: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)


# Collection name -> model for every tenant-owned entity.
TENANT_OWNED_MODELS: dict[str, type[Base]] = {
    "user": User,
    "agent_office": AgentOffice,
    "broker_application": BrokerApplication,
    "license": License,
    "listing": Listing,
    "qr_code": QrCode,
    "inspection_event": InspectionEvent,
    "audit_log": AuditLog,
}

# Collections the store can serve, including the tenant root.
COLLECTIONS: dict[str, type[Base]] = {"tenant": Tenant, **TENANT_OWNED_MODELS}
