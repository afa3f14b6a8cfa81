"""
Local-mode provider over the embedded SQLite database.

Reads go through SQLAlchemy's async ORM (aiosqlite driver). Each call
opens its own short-lived session, so the provider can be shared by
every caller without holding a connection between validations.
"""

from sqlalchemy import inspect, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from budgeteer.database import AsyncSessionLocal, Base
from budgeteer.models import (
    Account,
    AccountCategory,
    Configuration,
    Recurring,
    Transaction,
    TransactionCategory,
    TransactionGroup,
)
from budgeteer.validation.liveness import Record
from budgeteer.validation.providers.base import DataProvider
from budgeteer.validation.schema import Entity


MODELS: dict[Entity, type[Base]] = {
    Entity.ACCOUNT_CATEGORIES: AccountCategory,
    Entity.ACCOUNTS: Account,
    Entity.TRANSACTION_GROUPS: TransactionGroup,
    Entity.TRANSACTION_CATEGORIES: TransactionCategory,
    Entity.TRANSACTIONS: Transaction,
    Entity.RECURRINGS: Recurring,
    Entity.CONFIGURATIONS: Configuration,
}


def row_to_dict(row: Base) -> dict:
    """Column attributes of an ORM instance as a plain dict."""
    return {attr.key: getattr(row, attr.key) for attr in inspect(row).mapper.column_attrs}


class LocalDataProvider(DataProvider):

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None):
        self.session_factory = session_factory or AsyncSessionLocal

    async def _fetch_tenant_rows(self, entity: Entity, tenant_id: str) -> list[Record]:
        model = MODELS[entity]
        async with self.session_factory() as session:
            result = await session.execute(
                select(model)
                .where((model.tenantid == tenant_id) | (model.tenantid.is_(None)))
                .where(model.isdeleted.is_(False))
            )
            return [row_to_dict(row) for row in result.scalars().all()]

    async def fetch_by_id(self, entity: Entity, record_id: str) -> Record | None:
        model = MODELS[Entity(entity)]
        async with self.session_factory() as session:
            result = await session.execute(select(model).where(model.id == record_id))
            row = result.scalar_one_or_none()
            return row_to_dict(row) if row is not None else None
