"""
CRUD repositories that write through the validation layer.

A repository pairs one backend's write path with a ValidationService
reading from that same backend, so validation can never consult a
different store than the one being written. Every write validates
strictly before touching storage; a failed validation leaves no partial
state.

Write serialization:
  Validation is check-then-act: "no account named Checking exists" is
  only true until someone else inserts one. The demo store and the
  embedded database have no locking of their own, so their repositories
  hold a per-tenant asyncio.Lock across validate-and-write. The hosted
  backend enforces constraints natively and is not locked here.

Deletes are always soft: the row's isdeleted flag is set.
"""

import asyncio
import contextlib
import logging
import uuid
from abc import ABC, abstractmethod
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Mapping

from budgeteer.exceptions import RecordNotFoundError
from budgeteer.schemas.cascade import CascadeDeleteOptions, CascadeDeleteResult, DeleteOperation
from budgeteer.validation.liveness import Record, is_live
from budgeteer.validation.providers.base import DataProvider
from budgeteer.validation.schema import Entity, foreign_keys_for
from budgeteer.validation.service import ValidationService

logger = logging.getLogger(__name__)

# Fields callers may not set through create/update
PROTECTED_FIELDS = frozenset({"id", "tenantid", "isdeleted", "createdat", "createdby", "updatedat", "updatedby"})


# Per-tenant write locks, shared by every repository over one provider
WriteLocks = defaultdict[str, asyncio.Lock]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RecordRepository(ABC):

    # Hold a per-tenant lock across validate-then-write
    serialize_writes = True

    def __init__(
        self,
        provider: DataProvider,
        service: ValidationService | None = None,
        locks: WriteLocks | None = None,
    ):
        self.provider = provider
        self.service = service or ValidationService.for_provider(provider)
        self._locks: WriteLocks = locks if locks is not None else defaultdict(asyncio.Lock)

    # --- Backend write primitives ------------------------------------------

    @abstractmethod
    async def _insert(self, entity: Entity, row: dict) -> Record:
        """Store a complete new row and return it."""

    @abstractmethod
    async def _patch(self, entity: Entity, record_id: str, changes: dict) -> Record:
        """Apply `changes` to an existing row and return the updated row."""

    # --- Reads ---------------------------------------------------------------

    async def list_records(self, entity: Entity, tenant_id: str) -> list[Record]:
        return await self.provider.fetch_all(Entity(entity), tenant_id)

    async def get(self, entity: Entity, record_id: str, tenant_id: str) -> Record | None:
        record = await self.provider.fetch_by_id(Entity(entity), record_id)
        return record if is_live(record, tenant_id) else None

    async def _require(self, entity: Entity, record_id: str, tenant_id: str) -> Record:
        record = await self.get(entity, record_id, tenant_id)
        if record is None:
            raise RecordNotFoundError(Entity(entity).value, record_id)
        return record

    def _write_lock(self, tenant_id: str):
        if self.serialize_writes:
            return self._locks[tenant_id]
        return contextlib.nullcontext()

    # --- Writes --------------------------------------------------------------

    async def create(
        self,
        entity: Entity,
        record: Mapping[str, Any],
        tenant_id: str,
        user_id: str | None = None,
    ) -> Record:
        entity = Entity(entity)
        values = {key: value for key, value in record.items() if key not in PROTECTED_FIELDS}
        # A new row has no previous value to keep: a missing required FK is a None FK
        for fk in foreign_keys_for(entity):
            if not fk.nullable:
                values.setdefault(fk.field, None)

        async with self._write_lock(tenant_id):
            await self.service.validate_create(entity, values, tenant_id)
            row = {
                **values,
                "id": str(uuid.uuid4()),
                "tenantid": tenant_id,
                "isdeleted": False,
                "createdat": _utcnow(),
                "createdby": user_id,
            }
            created = await self._insert(entity, row)

        logger.debug("Created %s:%s for tenant %s", entity.value, created["id"], tenant_id)
        return created

    async def update(
        self,
        entity: Entity,
        record_id: str,
        changes: Mapping[str, Any],
        tenant_id: str,
        user_id: str | None = None,
    ) -> Record:
        entity = Entity(entity)
        values = {key: value for key, value in changes.items() if key not in PROTECTED_FIELDS}

        async with self._write_lock(tenant_id):
            await self._require(entity, record_id, tenant_id)
            await self.service.validate_update(entity, values, record_id, tenant_id)
            updated = await self._patch(
                entity,
                record_id,
                {**values, "updatedat": _utcnow(), "updatedby": user_id},
            )

        logger.debug("Updated %s:%s for tenant %s", entity.value, record_id, tenant_id)
        return updated

    async def delete(
        self,
        entity: Entity,
        record_id: str,
        tenant_id: str,
        cascade: bool = False,
        user_id: str | None = None,
        max_depth: int | None = None,
    ) -> CascadeDeleteResult:
        """
        Soft-delete a record, and its dependents when `cascade` is set.

        Without cascade, live dependents raise CascadeDeleteError. With
        cascade, a plan cut short by the depth limit is returned with
        success=False and nothing is written.
        """
        entity = Entity(entity)
        overrides = {"cascade": cascade, "user_id": user_id}
        if max_depth is not None:
            overrides["max_depth"] = max_depth
        options = CascadeDeleteOptions(**overrides)

        async with self._write_lock(tenant_id):
            await self._require(entity, record_id, tenant_id)
            if cascade:
                plan = await self.service.cascade_delete(entity, record_id, tenant_id, options)
                if not plan.success:
                    logger.warning("Refusing partial cascade delete of %s:%s", entity.value, record_id)
                    return plan
            else:
                await self.service.validate_delete(entity, record_id, tenant_id)
                plan = CascadeDeleteResult(operations=[DeleteOperation(entity=entity, id=record_id)])

            for operation in plan.operations:
                await self._patch(
                    operation.entity,
                    operation.id,
                    {"isdeleted": True, "updatedat": _utcnow(), "updatedby": user_id},
                )

        logger.info(
            "Soft-deleted %s:%s for tenant %s (%d records)",
            entity.value, record_id, tenant_id, len(plan.operations),
        )
        return plan
