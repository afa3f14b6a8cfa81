"""
Embedded database engine, session factory, and base model class.

This module backs local storage mode. It sets up SQLAlchemy 2.0 with
async support over aiosqlite:

  - engine: The async engine for settings.DATABASE_URL
  - AsyncSessionLocal: Factory for creating async sessions
  - Base: Declarative base class that all ORM models inherit from
  - TenantRecordMixin: Columns every Budgeteer table shares

Unlike the hosted database, the embedded schema declares no foreign-key
or unique constraints. Integrity in local mode comes entirely from the
validation layer in budgeteer.validation.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from budgeteer.config import settings


engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
)

# expire_on_commit=False keeps attributes readable after commit without
# a lazy load, which would fail in async context.
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""
    pass


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TenantRecordMixin:
    """
    Identity, tenancy, soft-delete flag and audit columns.

    Column names are lowercase and unseparated to match the hosted
    schema, so rows read from any backend share the same keys.
    """

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)

    # Isolation boundary: every query is scoped by tenant
    tenantid: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)

    # Soft-delete flag; rows are never physically removed
    isdeleted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Audit columns
    createdat: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        nullable=False,
    )
    createdby: Mapped[str | None] = mapped_column(String(100), nullable=True)
    updatedat: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    updatedby: Mapped[str | None] = mapped_column(String(100), nullable=True)
