"""TransactionGroup model — top-level grouping of transaction categories."""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from budgeteer.database import Base, TenantRecordMixin


class TransactionGroup(TenantRecordMixin, Base):
    __tablename__ = "transactiongroups"

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    # "Income", "Expense", "Transfer", ...
    type: Mapped[str] = mapped_column(String(20), nullable=False, default="Expense")

    budgetamount: Mapped[float] = mapped_column(nullable=False, default=0)
    displayorder: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
