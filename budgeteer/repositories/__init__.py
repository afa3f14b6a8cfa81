"""
CRUD repositories, one per storage backend.

repository_for() builds the repository matching a data provider. The
per-tenant write locks are kept per provider (weakly, so a discarded
provider takes its locks with it) and handed to every repository over
that provider, so all callers of one backend serialize on the same locks.
"""

import asyncio
import weakref
from collections import defaultdict

from budgeteer.repositories.base import RecordRepository, WriteLocks
from budgeteer.repositories.memory import MemoryRepository
from budgeteer.repositories.sql import SqlRepository
from budgeteer.repositories.supabase import SupabaseRepository
from budgeteer.validation.providers import (
    DataProvider,
    LocalDataProvider,
    MockDataProvider,
    SupabaseDataProvider,
)
from budgeteer.validation.service import ValidationService

_write_locks: "weakref.WeakKeyDictionary[DataProvider, WriteLocks]" = weakref.WeakKeyDictionary()


def _locks_for(provider: DataProvider) -> WriteLocks:
    locks = _write_locks.get(provider)
    if locks is None:
        locks = _write_locks[provider] = defaultdict(asyncio.Lock)
    return locks


def repository_for(provider: DataProvider, service: ValidationService | None = None) -> RecordRepository:
    if isinstance(provider, MockDataProvider):
        repository_class = MemoryRepository
    elif isinstance(provider, LocalDataProvider):
        repository_class = SqlRepository
    elif isinstance(provider, SupabaseDataProvider):
        repository_class = SupabaseRepository
    else:
        raise TypeError(f"No repository for provider {type(provider).__name__}")

    return repository_class(provider, service, _locks_for(provider))


__all__ = [
    "MemoryRepository",
    "RecordRepository",
    "SqlRepository",
    "SupabaseRepository",
    "repository_for",
]
