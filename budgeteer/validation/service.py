"""
Validation service: the facade CRUD code calls before writing.

    await validation_service.validate_create(Entity.ACCOUNTS, record, tenant_id)
    await validation_service.validate_update(Entity.ACCOUNTS, changes, account_id, tenant_id)
    await validation_service.validate_delete(Entity.ACCOUNTS, account_id, tenant_id)

Each call raises one of the budgeteer.exceptions integrity errors, or a
backend error from the provider, and returns None when the write may go
ahead.

Lifecycle:
  The service lazily builds one validator and one cascade manager bound
  to the provider its factory resolves. It remembers which storage mode
  that provider belongs to and rebinds automatically when the factory
  reports a different mode, so a mode switch never leaves a validator
  reading from the old backend. reset_validator() forces a rebuild and
  also clears the factory's provider cache.

`validation_service` is the process-wide default instance. Code that
wants an isolated service (tests, tools, a second backend) constructs
its own with ValidationService(factory) or ValidationService.for_provider().
"""

import logging
from typing import Any, Mapping, Sequence

from budgeteer.schemas.cascade import (
    CascadeDeleteResult,
    CascadeValidation,
    DeleteSafety,
    DependentGroup,
    PreviewItem,
)
from budgeteer.schemas.validation import BatchError, BatchValidationResult
from budgeteer.exceptions import DataIntegrityError
from budgeteer.storage_mode import StorageMode
from budgeteer.validation.cascade import CascadeDeleteManager, OptionsLike
from budgeteer.validation.factory import DataProviderFactory
from budgeteer.validation.providers.base import DataProvider
from budgeteer.validation.schema import Entity
from budgeteer.validation.validator import ReferentialIntegrityValidator

logger = logging.getLogger(__name__)


class ValidationService:

    def __init__(self, factory: DataProviderFactory | None = None):
        self.factory = factory or DataProviderFactory()
        self._validator: ReferentialIntegrityValidator | None = None
        self._cascade_manager: CascadeDeleteManager | None = None
        self._bound_mode: StorageMode | None = None

    @classmethod
    def for_provider(cls, provider: DataProvider) -> "ValidationService":
        """A service permanently bound to one provider, whatever the mode."""
        return cls(DataProviderFactory(builders={mode: (lambda: provider) for mode in StorageMode}))

    # -----------------------------------------------------------------------
    # Lifecycle
    # -----------------------------------------------------------------------

    def _bind(self) -> None:
        mode = self.factory.current_mode()
        if self._validator is not None and mode == self._bound_mode:
            return
        if self._bound_mode is not None and mode != self._bound_mode:
            logger.info("Storage mode changed to %s; rebinding validators", mode.value)
        provider = self.factory.get_provider()
        self._validator = ReferentialIntegrityValidator(provider)
        self._cascade_manager = CascadeDeleteManager(provider)
        self._bound_mode = mode

    @property
    def validator(self) -> ReferentialIntegrityValidator:
        self._bind()
        return self._validator

    @property
    def cascade_manager(self) -> CascadeDeleteManager:
        self._bind()
        return self._cascade_manager

    @property
    def data_provider(self) -> DataProvider:
        return self.validator.data_provider

    def reset_validator(self) -> None:
        """Drop the validator, the cascade manager and all cached providers."""
        self._validator = None
        self._cascade_manager = None
        self._bound_mode = None
        self.factory.reset_providers()

    # -----------------------------------------------------------------------
    # Validation
    # -----------------------------------------------------------------------

    async def validate_create(self, entity: Entity, record: Mapping[str, Any], tenant_id: str) -> None:
        await self.validator.validate_create(entity, record, tenant_id)

    async def validate_update(
        self,
        entity: Entity,
        record: Mapping[str, Any],
        record_id: str,
        tenant_id: str,
    ) -> None:
        await self.validator.validate_update(entity, record, record_id, tenant_id)

    async def validate_delete(self, entity: Entity, record_id: str, tenant_id: str) -> None:
        await self.validator.validate_delete(entity, record_id, tenant_id)

    async def validate_foreign_keys(self, entity: Entity, record: Mapping[str, Any], tenant_id: str) -> None:
        await self.validator.validate_foreign_keys(entity, record, tenant_id)

    async def validate_unique_constraints(
        self,
        entity: Entity,
        record: Mapping[str, Any],
        tenant_id: str,
        exclude_id: str | None = None,
    ) -> None:
        await self.validator.validate_unique_constraints(entity, record, tenant_id, exclude_id)

    async def validate_cascade_delete(self, entity: Entity, record_id: str, tenant_id: str) -> None:
        await self.validator.validate_cascade_delete(entity, record_id, tenant_id)

    # -----------------------------------------------------------------------
    # Cascade helpers
    # -----------------------------------------------------------------------

    async def get_dependent_records(self, entity: Entity, record_id: str, tenant_id: str) -> list[DependentGroup]:
        return await self.cascade_manager.get_dependent_records(entity, record_id, tenant_id)

    async def get_cascade_delete_preview(
        self,
        entity: Entity,
        record_id: str,
        tenant_id: str,
        options: OptionsLike = None,
    ) -> list[PreviewItem]:
        return await self.cascade_manager.get_cascade_delete_preview(entity, record_id, tenant_id, options)

    async def cascade_delete(
        self,
        entity: Entity,
        record_id: str,
        tenant_id: str,
        options: OptionsLike = None,
    ) -> CascadeDeleteResult:
        return await self.cascade_manager.cascade_delete(entity, record_id, tenant_id, options)

    async def can_delete_safely(self, entity: Entity, record_id: str, tenant_id: str) -> DeleteSafety:
        return await self.cascade_manager.can_delete_safely(entity, record_id, tenant_id)

    async def check_cascade_delete(
        self,
        entity: Entity,
        record_id: str,
        tenant_id: str,
        options: OptionsLike = None,
    ) -> CascadeValidation:
        return await self.cascade_manager.validate_cascade_delete(entity, record_id, tenant_id, options)

    # -----------------------------------------------------------------------
    # Batch validation
    # -----------------------------------------------------------------------
    # Integrity errors are collected per index; backend errors still propagate.

    async def validate_batch_create(
        self,
        entity: Entity,
        records: Sequence[Mapping[str, Any]],
        tenant_id: str,
    ) -> BatchValidationResult:
        errors = []
        for index, record in enumerate(records):
            try:
                await self.validate_create(entity, record, tenant_id)
            except DataIntegrityError as exc:
                errors.append(BatchError(index=index, error=exc))
        return BatchValidationResult(success=not errors, errors=errors)

    async def validate_batch_update(
        self,
        entity: Entity,
        updates: Sequence[tuple[str, Mapping[str, Any]]],
        tenant_id: str,
    ) -> BatchValidationResult:
        """`updates` is a sequence of (record_id, changes) pairs."""
        errors = []
        for index, (record_id, record) in enumerate(updates):
            try:
                await self.validate_update(entity, record, record_id, tenant_id)
            except DataIntegrityError as exc:
                errors.append(BatchError(index=index, error=exc))
        return BatchValidationResult(success=not errors, errors=errors)

    async def validate_batch_delete(
        self,
        entity: Entity,
        record_ids: Sequence[str],
        tenant_id: str,
    ) -> BatchValidationResult:
        errors = []
        for index, record_id in enumerate(record_ids):
            try:
                await self.validate_delete(entity, record_id, tenant_id)
            except DataIntegrityError as exc:
                errors.append(BatchError(index=index, error=exc))
        return BatchValidationResult(success=not errors, errors=errors)


# Process-wide default instance
validation_service = ValidationService()


def get_validation_service() -> ValidationService:
    """FastAPI dependency returning the process-wide validation service."""
    return validation_service
