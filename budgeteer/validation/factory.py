"""
Data provider factory.

Resolves the active storage mode and returns the provider for it,
building each provider at most once per factory. The mode is read from a
resolver callable on every call, so a mode switch is picked up on the next
get_provider() without any reset. reset_providers() still drops cached
instances, e.g. after the demo store or the database URL is replaced.
"""

import logging
from typing import Callable, Mapping

from budgeteer.config import settings
from budgeteer.storage_mode import StorageMode, StorageModeManager
from budgeteer.validation.providers.base import DataProvider

logger = logging.getLogger(__name__)

ProviderBuilder = Callable[[], DataProvider]


# Process-wide active mode, seeded from configuration
mode_manager = StorageModeManager(settings.STORAGE_MODE)


def _build_mock() -> DataProvider:
    from budgeteer.validation.providers.memory import MockDataProvider
    return MockDataProvider()


def _build_supabase() -> DataProvider:
    from budgeteer.validation.providers.supabase import SupabaseDataProvider
    return SupabaseDataProvider()


def _build_local() -> DataProvider:
    from budgeteer.validation.providers.local import LocalDataProvider
    return LocalDataProvider()


DEFAULT_BUILDERS: Mapping[StorageMode, ProviderBuilder] = {
    StorageMode.DEMO: _build_mock,
    StorageMode.CLOUD: _build_supabase,
    StorageMode.LOCAL: _build_local,
}


class DataProviderFactory:
    """Selects and memoizes one DataProvider per storage mode."""

    def __init__(
        self,
        mode_resolver: Callable[[], StorageMode] | None = None,
        builders: Mapping[StorageMode, ProviderBuilder] | None = None,
    ):
        self._mode_resolver = mode_resolver or (lambda: mode_manager.mode)
        self._builders = dict(DEFAULT_BUILDERS)
        if builders:
            self._builders.update(builders)
        self._providers: dict[StorageMode, DataProvider] = {}

    def current_mode(self) -> StorageMode:
        return StorageMode(self._mode_resolver())

    def get_provider(self) -> DataProvider:
        mode = self.current_mode()
        provider = self._providers.get(mode)
        if provider is None:
            provider = self.get_provider_for_mode(mode)
            self._providers[mode] = provider
            logger.info("Created %s data provider", mode.value)
        return provider

    def get_provider_for_mode(self, mode: StorageMode) -> DataProvider:
        """Build a fresh, uncached provider for `mode`."""
        match StorageMode(mode):
            case StorageMode.DEMO:
                builder = self._builders[StorageMode.DEMO]
            case StorageMode.CLOUD:
                builder = self._builders[StorageMode.CLOUD]
            case StorageMode.LOCAL:
                builder = self._builders[StorageMode.LOCAL]
            case _:
                raise ValueError(f"Unknown storage mode: {mode}")
        return builder()

    def reset_providers(self) -> None:
        self._providers.clear()
        logger.info("Data provider cache cleared")
