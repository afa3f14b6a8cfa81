"""
SQLAlchemy ORM models for the embedded (local mode) database.

All models are imported here so that Base.metadata knows every table
and other modules can import from budgeteer.models directly.
"""

from budgeteer.models.account_category import AccountCategory  # noqa: F401
from budgeteer.models.account import Account  # noqa: F401
from budgeteer.models.transaction_group import TransactionGroup  # noqa: F401
from budgeteer.models.transaction_category import TransactionCategory  # noqa: F401
from budgeteer.models.transaction import Transaction  # noqa: F401
from budgeteer.models.recurring import Recurring  # noqa: F401
from budgeteer.models.configuration import Configuration  # noqa: F401
