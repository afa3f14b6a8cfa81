"""
AccountCategory model — groups accounts into Asset or Liability buckets.

Category names are unique per tenant (enforced by the validation layer).
"""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from budgeteer.database import Base, TenantRecordMixin


class AccountCategory(TenantRecordMixin, Base):
    __tablename__ = "accountcategories"

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    # "Asset" or "Liability"
    type: Mapped[str] = mapped_column(String(20), nullable=False, default="Asset")

    displayorder: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
