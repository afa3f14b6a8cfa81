"""
Referential integrity validator.

Re-implements, in application code, the checks a relational database
would run on insert, update and delete:

  - Foreign keys: every FK field the caller is setting must point at a
    live record of the target entity in the same tenant.
  - Unique scopes: no other live record in the tenant may share the
    values of a unique field group.
  - Delete safety: a record can't be soft-deleted while live records
    still reference it (unless the caller cascades).

Partial-update semantics:
  Only keys present in the record dict are checked. A key that is absent
  means "not changing this field" and is skipped. A key explicitly set to
  None on a nullable FK clears the reference and is valid without any
  lookup. None on a required FK is a violation.

The validator is stateless apart from its provider; every call is
independent and performs only reads.
"""

import logging
from typing import Any, Mapping

from budgeteer.exceptions import (
    CascadeDeleteError,
    ConstraintViolationError,
    ReferentialIntegrityError,
)
from budgeteer.validation.dependents import find_dependents
from budgeteer.validation.liveness import is_live
from budgeteer.validation.providers.base import DataProvider
from budgeteer.validation.schema import (
    Entity,
    ForeignKey,
    UniqueConstraint,
    foreign_keys_for,
    unique_constraints_for,
)

logger = logging.getLogger(__name__)


class ReferentialIntegrityValidator:

    def __init__(self, data_provider: DataProvider):
        self.data_provider = data_provider

    # -----------------------------------------------------------------------
    # Foreign keys
    # -----------------------------------------------------------------------

    async def validate_foreign_keys(
        self,
        entity: Entity,
        record: Mapping[str, Any],
        tenant_id: str,
    ) -> None:
        """
        Check every FK field present in `record`.

        Raises:
            ReferentialIntegrityError: If a referenced record is missing,
                soft-deleted, or belongs to another tenant.
        """
        entity = Entity(entity)
        for fk in foreign_keys_for(entity):
            if fk.field not in record:
                continue
            value = record[fk.field]
            if value is None and fk.nullable:
                continue
            await self._validate_reference(entity, fk, value, tenant_id)

    async def _validate_reference(
        self,
        entity: Entity,
        fk: ForeignKey,
        value: Any,
        tenant_id: str,
    ) -> None:
        referenced = None
        if value is not None:
            referenced = await self.data_provider.fetch_by_id(fk.target, value)

        if not is_live(referenced, tenant_id):
            logger.info(
                "Rejected %s.%s=%r: no live %s record for tenant %s",
                entity.value, fk.field, value, fk.target.value, tenant_id,
            )
            raise ReferentialIntegrityError(entity.value, fk.field, value, fk.target.value)

    # -----------------------------------------------------------------------
    # Unique constraints
    # -----------------------------------------------------------------------

    async def validate_unique_constraints(
        self,
        entity: Entity,
        record: Mapping[str, Any],
        tenant_id: str,
        exclude_id: str | None = None,
    ) -> None:
        """
        Check every unique scope whose fields are all present in `record`.

        `exclude_id` is the id of the record being updated; it never
        collides with itself.

        Raises:
            ConstraintViolationError: If another live record in the tenant
                has the same values for every field in a scope.
        """
        entity = Entity(entity)
        for constraint in unique_constraints_for(entity):
            await self._validate_unique_constraint(entity, record, constraint, tenant_id, exclude_id)

    async def _validate_unique_constraint(
        self,
        entity: Entity,
        record: Mapping[str, Any],
        constraint: UniqueConstraint,
        tenant_id: str,
        exclude_id: str | None,
    ) -> None:
        if any(field not in record for field in constraint.fields):
            return

        values = {field: record[field] for field in constraint.fields}
        existing_rows = await self.data_provider.fetch_all(entity, tenant_id)

        for existing in existing_rows:
            if exclude_id is not None and existing.get("id") == exclude_id:
                continue
            if all(existing.get(field) == value for field, value in values.items()):
                field_values = ", ".join(f"{field}='{value}'" for field, value in values.items())
                logger.info("Rejected %s write: %s violates %s", entity.value, field_values, constraint.name)
                raise ConstraintViolationError(
                    f"Unique constraint violation: {field_values} already exists",
                    constraint.name,
                    entity.value,
                )

    # -----------------------------------------------------------------------
    # Delete safety
    # -----------------------------------------------------------------------

    async def validate_cascade_delete(
        self,
        entity: Entity,
        record_id: str,
        tenant_id: str,
    ) -> None:
        """
        Refuse a non-cascading delete while live dependents exist.

        Dependents are checked in schema order; the first non-empty group
        is reported (e.g. an account's transactions before its recurrings).

        Raises:
            CascadeDeleteError: With the first blocking entity and its count.
        """
        entity = Entity(entity)
        groups = await find_dependents(self.data_provider, entity, record_id, tenant_id)
        if groups:
            blocker = groups[0]
            logger.info(
                "Rejected delete of %s:%s: %d live %s depend on it",
                entity.value, record_id, len(blocker.ids), blocker.entity.value,
            )
            raise CascadeDeleteError(entity.value, record_id, blocker.entity.value, len(blocker.ids))

    # -----------------------------------------------------------------------
    # Composite checks
    # -----------------------------------------------------------------------

    async def validate_create(
        self,
        entity: Entity,
        record: Mapping[str, Any],
        tenant_id: str,
    ) -> None:
        await self.validate_foreign_keys(entity, record, tenant_id)
        await self.validate_unique_constraints(entity, record, tenant_id)

    async def validate_update(
        self,
        entity: Entity,
        record: Mapping[str, Any],
        record_id: str,
        tenant_id: str,
    ) -> None:
        await self.validate_foreign_keys(entity, record, tenant_id)
        await self.validate_unique_constraints(entity, record, tenant_id, exclude_id=record_id)

    async def validate_delete(
        self,
        entity: Entity,
        record_id: str,
        tenant_id: str,
    ) -> None:
        await self.validate_cascade_delete(entity, record_id, tenant_id)
