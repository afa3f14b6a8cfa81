"""Repository over the in-memory demo store."""

from budgeteer.validation.liveness import Record
from budgeteer.validation.providers.memory import MockDataProvider
from budgeteer.validation.schema import Entity
from budgeteer.validation.service import ValidationService
from budgeteer.repositories.base import RecordRepository, WriteLocks


class MemoryRepository(RecordRepository):

    def __init__(
        self,
        provider: MockDataProvider,
        service: ValidationService | None = None,
        locks: WriteLocks | None = None,
    ):
        super().__init__(provider, service, locks)
        self.store = provider.store

    async def _insert(self, entity: Entity, row: dict) -> Record:
        self.store.add(entity, row)
        return dict(row)

    async def _patch(self, entity: Entity, record_id: str, changes: dict) -> Record:
        row = self.store.find(entity, record_id)
        row.update(changes)
        return dict(row)
