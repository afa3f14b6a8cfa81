"""
Tests for storage-mode selection, the provider factory, and the
validation service facade.

These tests verify:
  - The factory builds one provider per mode and caches it
  - get_provider_for_mode always builds fresh; unknown modes are rejected
  - A storage-mode switch rebinds the service to the new backend
  - reset_validator drops the bound validator and the provider cache
  - Batch helpers collect integrity errors per index, and only those
  - The validated_* decorators run the wrapped function only on success
"""

import httpx
import pytest

from budgeteer.exceptions import (
    CascadeDeleteError,
    ConstraintViolationError,
    ReferentialIntegrityError,
)
from budgeteer.storage_mode import StorageMode, StorageModeManager
from budgeteer.validation.factory import DataProviderFactory
from budgeteer.validation.helpers import validated_create, validated_delete, validated_update
from budgeteer.validation.providers import (
    LocalDataProvider,
    MemoryStore,
    MockDataProvider,
    SupabaseDataProvider,
)
from budgeteer.validation.providers.memory import demo_store
from budgeteer.validation.schema import Entity
from budgeteer.validation.service import (
    ValidationService,
    get_validation_service,
    validation_service,
)

from tests.conftest import TENANT


def _counting_builder(provider_class, calls):
    def build():
        calls.append(provider_class)
        return provider_class(MemoryStore())
    return build


class TestStorageModeManager:

    def test_switch_notifies_listeners(self):
        manager = StorageModeManager(StorageMode.DEMO)
        seen = []
        manager.subscribe(lambda old, new: seen.append((old, new)))

        manager.switch(StorageMode.LOCAL)

        assert manager.mode == StorageMode.LOCAL
        assert seen == [(StorageMode.DEMO, StorageMode.LOCAL)]

    def test_switch_to_same_mode_is_silent(self):
        manager = StorageModeManager(StorageMode.DEMO)
        seen = []
        manager.subscribe(lambda old, new: seen.append((old, new)))

        manager.switch("demo")

        assert seen == []

    def test_unknown_mode_rejected(self):
        with pytest.raises(ValueError):
            StorageModeManager(StorageMode.DEMO).switch("offline")


class TestDataProviderFactory:

    def test_provider_is_cached_per_mode(self):
        calls = []
        factory = DataProviderFactory(
            mode_resolver=lambda: StorageMode.DEMO,
            builders={StorageMode.DEMO: _counting_builder(MockDataProvider, calls)},
        )

        assert factory.get_provider() is factory.get_provider()
        assert len(calls) == 1

    def test_mode_switch_selects_other_provider(self):
        manager = StorageModeManager(StorageMode.DEMO)
        demo, local = MockDataProvider(MemoryStore()), MockDataProvider(MemoryStore())
        factory = DataProviderFactory(
            mode_resolver=lambda: manager.mode,
            builders={StorageMode.DEMO: lambda: demo, StorageMode.LOCAL: lambda: local},
        )

        assert factory.get_provider() is demo
        manager.switch(StorageMode.LOCAL)
        assert factory.get_provider() is local
        assert factory.current_mode() == StorageMode.LOCAL

    def test_reset_providers_rebuilds(self):
        calls = []
        factory = DataProviderFactory(
            mode_resolver=lambda: StorageMode.DEMO,
            builders={StorageMode.DEMO: _counting_builder(MockDataProvider, calls)},
        )
        first = factory.get_provider()

        factory.reset_providers()

        assert factory.get_provider() is not first
        assert len(calls) == 2

    def test_provider_for_mode_is_never_cached(self):
        factory = DataProviderFactory(mode_resolver=lambda: StorageMode.DEMO)

        assert factory.get_provider_for_mode(StorageMode.DEMO) is not factory.get_provider_for_mode(StorageMode.DEMO)

    def test_default_builders(self):
        factory = DataProviderFactory()

        demo = factory.get_provider_for_mode(StorageMode.DEMO)
        local = factory.get_provider_for_mode(StorageMode.LOCAL)

        assert isinstance(demo, MockDataProvider)
        assert demo.store is demo_store
        assert isinstance(local, LocalDataProvider)

    def test_cloud_without_url_fails(self, monkeypatch):
        from budgeteer.config import settings
        monkeypatch.setattr(settings, "SUPABASE_URL", "")

        with pytest.raises(ValueError):
            DataProviderFactory().get_provider_for_mode(StorageMode.CLOUD)

    def test_cloud_builder_uses_settings(self, monkeypatch):
        from budgeteer.config import settings
        monkeypatch.setattr(settings, "SUPABASE_URL", "https://example.supabase.co")

        provider = DataProviderFactory().get_provider_for_mode("cloud")

        assert isinstance(provider, SupabaseDataProvider)

    def test_unknown_mode_rejected(self):
        with pytest.raises(ValueError):
            DataProviderFactory().get_provider_for_mode("offline")


class TestServiceBinding:

    async def test_mode_switch_rebinds_validator(self, store):
        """After a switch the service reads from the new backend without a reset."""
        manager = StorageModeManager(StorageMode.DEMO)
        seeded, empty = MockDataProvider(store), MockDataProvider(MemoryStore())
        service = ValidationService(DataProviderFactory(
            mode_resolver=lambda: manager.mode,
            builders={StorageMode.DEMO: lambda: seeded, StorageMode.LOCAL: lambda: empty},
        ))
        record = {"name": "Brokerage", "categoryid": "cat-assets"}

        await service.validate_create(Entity.ACCOUNTS, record, TENANT)
        assert service.data_provider is seeded

        manager.switch(StorageMode.LOCAL)

        assert service.data_provider is empty
        with pytest.raises(ReferentialIntegrityError):
            await service.validate_create(Entity.ACCOUNTS, record, TENANT)

    def test_validator_is_reused_while_mode_is_stable(self, service):
        assert service.validator is service.validator
        assert service.cascade_manager is service.cascade_manager

    def test_reset_validator_rebuilds_everything(self):
        calls = []
        service = ValidationService(DataProviderFactory(
            mode_resolver=lambda: StorageMode.DEMO,
            builders={StorageMode.DEMO: _counting_builder(MockDataProvider, calls)},
        ))
        first = service.validator

        service.reset_validator()

        assert service.validator is not first
        assert len(calls) == 2

    def test_for_provider_ignores_mode(self, provider):
        service = ValidationService.for_provider(provider)

        assert service.data_provider is provider
        assert service.factory.get_provider_for_mode(StorageMode.CLOUD) is provider

    def test_default_service_dependency(self):
        assert get_validation_service() is validation_service


class TestServiceOperations:
    """The facade forwards to the validator and cascade manager."""

    async def test_forwarded_checks(self, service):
        await service.validate_foreign_keys(Entity.ACCOUNTS, {"categoryid": "cat-assets"}, TENANT)
        await service.validate_unique_constraints(
            Entity.ACCOUNTS, {"name": "Checking"}, TENANT, exclude_id="acc-checking"
        )
        with pytest.raises(CascadeDeleteError):
            await service.validate_cascade_delete(Entity.ACCOUNTS, "acc-checking", TENANT)

    async def test_forwarded_cascade_helpers(self, service):
        groups = await service.get_dependent_records(Entity.ACCOUNTS, "acc-savings", TENANT)
        safety = await service.can_delete_safely(Entity.ACCOUNTS, "acc-savings", TENANT)
        preview = await service.get_cascade_delete_preview(Entity.ACCOUNTS, "acc-savings", TENANT)
        plan = await service.cascade_delete(Entity.ACCOUNTS, "acc-savings", TENANT)
        check = await service.check_cascade_delete(Entity.ACCOUNTS, "acc-savings", TENANT, {"cascade": False})

        assert groups[0].ids == ["tx-out", "tx-in"]
        assert safety.can_delete is False
        assert preview[0].id == "acc-savings"
        assert plan.operations[-1].id == "acc-savings"
        assert check.valid is False


class TestBatchValidation:

    async def test_batch_create_collects_errors_by_index(self, service):
        result = await service.validate_batch_create(
            Entity.ACCOUNTS,
            [
                {"name": "Brokerage", "categoryid": "cat-assets"},
                {"name": "Card", "categoryid": "nope"},
                {"name": "Checking", "categoryid": "cat-assets"},
            ],
            TENANT,
        )

        assert result.success is False
        assert [e.index for e in result.errors] == [1, 2]
        assert isinstance(result.errors[0].error, ReferentialIntegrityError)
        assert isinstance(result.errors[1].error, ConstraintViolationError)

    async def test_batch_create_all_valid(self, service):
        result = await service.validate_batch_create(
            Entity.TRANSACTION_GROUPS, [{"name": "Income"}, {"name": "Bills"}], TENANT
        )

        assert result.success is True
        assert result.errors == []

    async def test_batch_update(self, service):
        result = await service.validate_batch_update(
            Entity.ACCOUNTS,
            [("acc-checking", {"name": "Savings"}), ("acc-savings", {"name": "Savings"})],
            TENANT,
        )

        assert [e.index for e in result.errors] == [0]

    async def test_batch_delete(self, service):
        result = await service.validate_batch_delete(
            Entity.TRANSACTION_GROUPS, ["grp-empty", "grp-expenses"], TENANT
        )

        assert [e.index for e in result.errors] == [1]
        assert isinstance(result.errors[0].error, CascadeDeleteError)

    async def test_backend_errors_abort_the_batch(self, postgrest, supabase_provider):
        postgrest.fail_with = 500
        service = ValidationService.for_provider(supabase_provider)

        with pytest.raises(httpx.HTTPStatusError):
            await service.validate_batch_create(
                Entity.ACCOUNTS, [{"name": "Brokerage", "categoryid": "cat-assets"}], TENANT
            )


class TestDecorators:

    async def test_create_runs_after_validation(self, service):
        calls = []

        @validated_create(Entity.ACCOUNTS, service=service)
        async def create_account(record, tenant_id):
            calls.append(record["name"])
            return "created"

        assert await create_account({"name": "Brokerage", "categoryid": "cat-assets"}, TENANT) == "created"
        assert calls == ["Brokerage"]

    async def test_create_blocked_by_invalid_record(self, service):
        calls = []

        @validated_create(Entity.ACCOUNTS, service=service)
        async def create_account(record, tenant_id):
            calls.append(record)

        with pytest.raises(ReferentialIntegrityError):
            await create_account({"name": "Brokerage", "categoryid": "nope"}, TENANT)
        assert calls == []

    async def test_update_passes_extra_arguments(self, service):
        @validated_update(Entity.ACCOUNTS, service=service)
        async def update_account(record, record_id, tenant_id, user_id=None):
            return record_id, user_id

        assert await update_account({"name": "Main"}, "acc-checking", TENANT, user_id="u1") == ("acc-checking", "u1")

    async def test_update_blocked_by_duplicate(self, service):
        @validated_update(Entity.ACCOUNTS, service=service)
        async def update_account(record, record_id, tenant_id):
            raise AssertionError("should not run")

        with pytest.raises(ConstraintViolationError):
            await update_account({"name": "Savings"}, "acc-checking", TENANT)

    async def test_delete_blocked_by_dependents(self, service):
        @validated_delete(Entity.ACCOUNTS, service=service)
        async def delete_account(record_id, tenant_id):
            raise AssertionError("should not run")

        with pytest.raises(CascadeDeleteError):
            await delete_account("acc-checking", TENANT)

    async def test_wrapper_keeps_function_name(self, service):
        @validated_delete(Entity.TRANSACTION_GROUPS, service=service)
        async def delete_group(record_id, tenant_id):
            return record_id

        assert delete_group.__name__ == "delete_group"
        assert await delete_group("grp-empty", TENANT) == "grp-empty"
