"""TransactionCategory model — a category inside a TransactionGroup."""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from budgeteer.database import Base, TenantRecordMixin


class TransactionCategory(TenantRecordMixin, Base):
    __tablename__ = "transactioncategories"

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    # -> transactiongroups.id (required)
    groupid: Mapped[str] = mapped_column(String(36), nullable=False, index=True)

    budgetamount: Mapped[float] = mapped_column(nullable=False, default=0)
    displayorder: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
