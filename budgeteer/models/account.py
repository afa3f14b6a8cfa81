"""
Account model — a money container (checking, cash, credit card, ...).

Every account belongs to an AccountCategory via `categoryid`. That link
is a plain column here: the embedded database has no FK engine, so the
validation layer checks it before every write.
"""

from sqlalchemy import Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from budgeteer.database import Base, TenantRecordMixin


class Account(TenantRecordMixin, Base):
    __tablename__ = "accounts"

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    balance: Mapped[float] = mapped_column(Float, nullable=False, default=0)

    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")

    # -> accountcategories.id (required)
    categoryid: Mapped[str] = mapped_column(String(36), nullable=False, index=True)

    owner: Mapped[str | None] = mapped_column(String(100), nullable=True)
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)
    displayorder: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
