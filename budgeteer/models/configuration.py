"""Configuration model — per-tenant key/value settings scoped by table."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from budgeteer.database import Base, TenantRecordMixin


class Configuration(TenantRecordMixin, Base):
    __tablename__ = "configurations"

    key: Mapped[str] = mapped_column(String(100), nullable=False)

    # The table the setting applies to
    table: Mapped[str] = mapped_column(String(100), nullable=False)

    type: Mapped[str] = mapped_column(String(20), nullable=False, default="string")
    value: Mapped[str | None] = mapped_column(String(1000), nullable=True)
