"""
Transaction model — a single money movement on an account.

Transfers are stored as two rows that reference each other:

  - row A: accountid = source, transferaccountid = destination, transferid = B
  - row B: accountid = destination, transferaccountid = source, transferid = A

`transferid` is the only self-referential link in the schema.
"""

from datetime import datetime

from sqlalchemy import DateTime, Float, String
from sqlalchemy.orm import Mapped, mapped_column

from budgeteer.database import Base, TenantRecordMixin


class Transaction(TenantRecordMixin, Base):
    __tablename__ = "transactions"

    name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Signed amount: negative for money out
    amount: Mapped[float] = mapped_column(Float, nullable=False, default=0)

    # "Income", "Expense", "Transfer", "Adjustment", "Initial"
    type: Mapped[str] = mapped_column(String(20), nullable=False, default="Expense")

    date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # -> accounts.id (required)
    accountid: Mapped[str] = mapped_column(String(36), nullable=False, index=True)

    # -> transactioncategories.id (required)
    categoryid: Mapped[str] = mapped_column(String(36), nullable=False, index=True)

    # -> accounts.id, set on both legs of a transfer
    transferaccountid: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)

    # -> transactions.id, the other leg of a transfer
    transferid: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
