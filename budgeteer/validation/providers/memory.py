"""
Demo-mode provider over an in-memory store.

The demo store is a set of plain row lists, one per entity, with no
constraint engine of any kind. Reads are synchronous list scans exposed
as coroutines so the validator treats every backend the same way.
Returned rows are shallow copies: callers can't mutate the store through
a read.
"""

from budgeteer.validation.liveness import Record
from budgeteer.validation.providers.base import DataProvider
from budgeteer.validation.schema import Entity


class MemoryStore:
    """Row lists keyed by entity."""

    def __init__(self, rows: dict[Entity, list[dict]] | None = None):
        self._tables: dict[Entity, list[dict]] = {entity: [] for entity in Entity}
        for entity, entity_rows in (rows or {}).items():
            self._tables[Entity(entity)].extend(entity_rows)

    def rows(self, entity: Entity) -> list[dict]:
        return self._tables[Entity(entity)]

    def find(self, entity: Entity, record_id: str) -> dict | None:
        for row in self._tables[Entity(entity)]:
            if row.get("id") == record_id:
                return row
        return None

    def add(self, entity: Entity, row: dict) -> dict:
        self._tables[Entity(entity)].append(row)
        return row

    def clear(self) -> None:
        for entity_rows in self._tables.values():
            entity_rows.clear()


# Process-wide demo store used when no store is injected
demo_store = MemoryStore()


class MockDataProvider(DataProvider):

    def __init__(self, store: MemoryStore | None = None):
        self.store = store if store is not None else demo_store

    async def _fetch_tenant_rows(self, entity: Entity, tenant_id: str) -> list[Record]:
        return [dict(row) for row in self.store.rows(entity)]

    async def fetch_by_id(self, entity: Entity, record_id: str) -> Record | None:
        row = self.store.find(entity, record_id)
        return dict(row) if row is not None else None
