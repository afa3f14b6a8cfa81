"""Repository over the embedded SQLite database."""

from datetime import datetime

from sqlalchemy import DateTime, inspect

from budgeteer.validation.liveness import Record
from budgeteer.validation.providers.local import MODELS, LocalDataProvider, row_to_dict
from budgeteer.validation.schema import Entity
from budgeteer.validation.service import ValidationService
from budgeteer.repositories.base import RecordRepository, WriteLocks


def _column_values(model, values: dict) -> dict:
    """Keep only mapped columns; parse ISO strings sent for DateTime columns."""
    columns = inspect(model).columns
    result = {}
    for key, value in values.items():
        column = columns.get(key)
        if column is None:
            continue
        if isinstance(value, str) and isinstance(column.type, DateTime):
            value = datetime.fromisoformat(value)
        result[key] = value
    return result


class SqlRepository(RecordRepository):

    def __init__(
        self,
        provider: LocalDataProvider,
        service: ValidationService | None = None,
        locks: WriteLocks | None = None,
    ):
        super().__init__(provider, service, locks)
        self.session_factory = provider.session_factory

    async def _insert(self, entity: Entity, row: dict) -> Record:
        model = MODELS[entity]
        instance = model(**_column_values(model, row))
        async with self.session_factory() as session:
            session.add(instance)
            await session.commit()
            return row_to_dict(instance)

    async def _patch(self, entity: Entity, record_id: str, changes: dict) -> Record:
        model = MODELS[Entity(entity)]
        async with self.session_factory() as session:
            instance = await session.get(model, record_id)
            for key, value in _column_values(model, changes).items():
                setattr(instance, key, value)
            await session.commit()
            return row_to_dict(instance)
