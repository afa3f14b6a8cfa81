"""
Data provider contract.

A data provider is the read-only window the validation core has onto a
storage backend. Each backend implements two primitives:

  - _fetch_tenant_rows(entity, tenant_id): rows for a tenant
  - fetch_by_id(entity, id): one raw row, deleted or not, or None

The base class turns the first into `fetch_all`, which always applies the
liveness filter, so no backend can hand the validator a deleted or
foreign-tenant row through a bulk read. By-id lookups stay raw so the
validator can tell "missing" from "deleted" from "someone else's".

The named per-entity methods (get_accounts, get_account_by_id, ...) are
defined once here in terms of the primitives.

Providers never write and never classify backend errors: a network or
driver failure propagates to the caller unchanged.
"""

from abc import ABC, abstractmethod

from budgeteer.validation.liveness import Record, live_rows
from budgeteer.validation.schema import Entity


class DataProvider(ABC):

    @abstractmethod
    async def _fetch_tenant_rows(self, entity: Entity, tenant_id: str) -> list[Record]:
        """Rows of `entity` for a tenant; may already be liveness-filtered."""

    @abstractmethod
    async def fetch_by_id(self, entity: Entity, record_id: str) -> Record | None:
        """The raw row with this id, including soft-deleted rows, or None."""

    async def fetch_all(self, entity: Entity, tenant_id: str) -> list[Record]:
        """Live rows of `entity` for a tenant."""
        rows = await self._fetch_tenant_rows(Entity(entity), tenant_id)
        return live_rows(rows, tenant_id)

    # --- Bulk reads -------------------------------------------------------

    async def get_account_categories(self, tenant_id: str) -> list[Record]:
        return await self.fetch_all(Entity.ACCOUNT_CATEGORIES, tenant_id)

    async def get_accounts(self, tenant_id: str) -> list[Record]:
        return await self.fetch_all(Entity.ACCOUNTS, tenant_id)

    async def get_transactions(self, tenant_id: str) -> list[Record]:
        return await self.fetch_all(Entity.TRANSACTIONS, tenant_id)

    async def get_transaction_categories(self, tenant_id: str) -> list[Record]:
        return await self.fetch_all(Entity.TRANSACTION_CATEGORIES, tenant_id)

    async def get_transaction_groups(self, tenant_id: str) -> list[Record]:
        return await self.fetch_all(Entity.TRANSACTION_GROUPS, tenant_id)

    async def get_recurrings(self, tenant_id: str) -> list[Record]:
        return await self.fetch_all(Entity.RECURRINGS, tenant_id)

    async def get_configurations(self, tenant_id: str) -> list[Record]:
        return await self.fetch_all(Entity.CONFIGURATIONS, tenant_id)

    # --- Single-record reads ----------------------------------------------

    async def get_account_category_by_id(self, record_id: str) -> Record | None:
        return await self.fetch_by_id(Entity.ACCOUNT_CATEGORIES, record_id)

    async def get_account_by_id(self, record_id: str) -> Record | None:
        return await self.fetch_by_id(Entity.ACCOUNTS, record_id)

    async def get_transaction_by_id(self, record_id: str) -> Record | None:
        return await self.fetch_by_id(Entity.TRANSACTIONS, record_id)

    async def get_transaction_category_by_id(self, record_id: str) -> Record | None:
        return await self.fetch_by_id(Entity.TRANSACTION_CATEGORIES, record_id)

    async def get_transaction_group_by_id(self, record_id: str) -> Record | None:
        return await self.fetch_by_id(Entity.TRANSACTION_GROUPS, record_id)

    async def get_recurring_by_id(self, record_id: str) -> Record | None:
        return await self.fetch_by_id(Entity.RECURRINGS, record_id)

    async def get_configuration_by_id(self, record_id: str) -> Record | None:
        return await self.fetch_by_id(Entity.CONFIGURATIONS, record_id)
