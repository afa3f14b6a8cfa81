"""
Recurring model — a scheduled transaction template.

`recurrencerule` holds an RRULE string (e.g. "FREQ=MONTHLY;BYMONTHDAY=1").
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, String
from sqlalchemy.orm import Mapped, mapped_column

from budgeteer.database import Base, TenantRecordMixin


class Recurring(TenantRecordMixin, Base):
    __tablename__ = "recurrings"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)

    amount: Mapped[float | None] = mapped_column(Float, nullable=True)

    # -> accounts.id (required)
    sourceaccountid: Mapped[str] = mapped_column(String(36), nullable=False, index=True)

    # -> transactioncategories.id (optional)
    categoryid: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)

    recurrencerule: Mapped[str] = mapped_column(String(255), nullable=False)
    nextoccurrencedate: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    isactive: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
