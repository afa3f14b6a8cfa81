"""Read-only data providers, one per storage backend."""

from budgeteer.validation.providers.base import DataProvider  # noqa: F401
from budgeteer.validation.providers.memory import MemoryStore, MockDataProvider  # noqa: F401
from budgeteer.validation.providers.local import LocalDataProvider  # noqa: F401
from budgeteer.validation.providers.supabase import SupabaseDataProvider  # noqa: F401
