"""
Repository over the hosted Supabase database (PostgREST over httpx).

The hosted schema enforces FKs and unique constraints itself, so writes
are not serialized locally; validation still runs first so every storage
mode reports violations with the same exceptions.
"""

from fastapi.encoders import jsonable_encoder

from budgeteer.validation.liveness import Record
from budgeteer.validation.providers.supabase import SupabaseDataProvider
from budgeteer.validation.schema import Entity
from budgeteer.validation.service import ValidationService
from budgeteer.repositories.base import RecordRepository, WriteLocks

RETURN_REPRESENTATION = {"Prefer": "return=representation"}


class SupabaseRepository(RecordRepository):

    serialize_writes = False

    def __init__(
        self,
        provider: SupabaseDataProvider,
        service: ValidationService | None = None,
        locks: WriteLocks | None = None,
    ):
        super().__init__(provider, service, locks)
        self.client = provider.client

    async def _insert(self, entity: Entity, row: dict) -> Record:
        response = await self.client.post(
            f"/{entity.value}",
            json=jsonable_encoder(row),
            headers=RETURN_REPRESENTATION,
        )
        response.raise_for_status()
        return response.json()[0]

    async def _patch(self, entity: Entity, record_id: str, changes: dict) -> Record:
        response = await self.client.patch(
            f"/{Entity(entity).value}",
            params={"id": f"eq.{record_id}"},
            json=jsonable_encoder(changes),
            headers=RETURN_REPRESENTATION,
        )
        response.raise_for_status()
        return response.json()[0]
