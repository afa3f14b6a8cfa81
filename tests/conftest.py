"""
Test fixtures for the Budgeteer validation suite.

This module provides shared fixtures used across all test files:

  - store: A fresh in-memory store seeded with one small ledger per test
  - provider / validator / manager / service: The validation core bound
    to that store (demo mode)
  - any_provider: The same seed data behind each of the three backends
    (demo store, embedded SQLite, hosted PostgREST) — tests using it run
    once per backend
  - any_repository: A CRUD repository over each backend
  - client: Async HTTP test client for the records API

Key design decisions:
  - Local mode uses in-memory SQLite (sqlite+aiosqlite://) with a
    StaticPool so every session sees the same database.
  - Cloud mode uses httpx.MockTransport in front of FakePostgrest, a tiny
    PostgREST imitation over a MemoryStore, so no network is involved.
  - The API client overrides get_validation_service, the same way the
    application would inject a differently-configured service.

Seed ledger (tenant "tenant-a" unless noted):

    accountcategories: cat-assets "Assets", cat-liabilities "Liabilities",
                       cat-retired (soft-deleted), cat-foreign (tenant-b)
    accounts:          acc-checking, acc-savings (both in cat-assets),
                       acc-foreign (tenant-b)
    transactiongroups: grp-expenses, grp-empty
    transactioncategories: tc-groceries, tc-rent (both in grp-expenses)
    transactions:      tx-groceries on acc-checking;
                       transfer pair tx-out (acc-checking -> acc-savings)
                       and tx-in, each pointing at the other via transferid
    recurrings:        rec-rent (acc-checking, tc-rent)
    configurations:    cfg-currency (key "currency", table "accounts")
"""

import json

import httpx
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from budgeteer.database import Base
from budgeteer.main import app
from budgeteer.repositories import MemoryRepository, SqlRepository, SupabaseRepository
from budgeteer.validation.cascade import CascadeDeleteManager
from budgeteer.validation.providers import (
    LocalDataProvider,
    MemoryStore,
    MockDataProvider,
    SupabaseDataProvider,
)
from budgeteer.validation.providers.local import MODELS
from budgeteer.validation.schema import Entity
from budgeteer.validation.service import ValidationService, get_validation_service
from budgeteer.validation.validator import ReferentialIntegrityValidator


TENANT = "tenant-a"
OTHER_TENANT = "tenant-b"

TEST_DATABASE_URL = "sqlite+aiosqlite://"
TEST_SUPABASE_URL = "http://supabase.test"


def row(id: str, tenant: str | None = TENANT, deleted: bool = False, **fields) -> dict:
    return {"id": id, "tenantid": tenant, "isdeleted": deleted, **fields}


def seed_rows() -> dict[Entity, list[dict]]:
    return {
        Entity.ACCOUNT_CATEGORIES: [
            row("cat-assets", name="Assets", type="Asset"),
            row("cat-liabilities", name="Liabilities", type="Liability"),
            row("cat-retired", deleted=True, name="Retired", type="Asset"),
            row("cat-foreign", tenant=OTHER_TENANT, name="Assets", type="Asset"),
        ],
        Entity.ACCOUNTS: [
            row("acc-checking", name="Checking", balance=1200, categoryid="cat-assets"),
            row("acc-savings", name="Savings", balance=5000, categoryid="cat-assets"),
            row("acc-foreign", tenant=OTHER_TENANT, name="Checking", balance=0, categoryid="cat-foreign"),
        ],
        Entity.TRANSACTION_GROUPS: [
            row("grp-expenses", name="Expenses", type="Expense"),
            row("grp-empty", name="Savings Goals", type="Expense"),
        ],
        Entity.TRANSACTION_CATEGORIES: [
            row("tc-groceries", name="Groceries", groupid="grp-expenses"),
            row("tc-rent", name="Rent", groupid="grp-expenses"),
        ],
        Entity.TRANSACTIONS: [
            row(
                "tx-groceries", name="Weekly shop", amount=-85.5,
                accountid="acc-checking", categoryid="tc-groceries",
            ),
            row(
                "tx-out", description="Move to savings", amount=-200,
                accountid="acc-checking", categoryid="tc-groceries",
                transferaccountid="acc-savings", transferid="tx-in",
            ),
            row(
                "tx-in", description="Move to savings", amount=200,
                accountid="acc-savings", categoryid="tc-groceries",
                transferaccountid="acc-checking", transferid="tx-out",
            ),
        ],
        Entity.RECURRINGS: [
            row(
                "rec-rent", name="Rent", amount=-1500, sourceaccountid="acc-checking",
                categoryid="tc-rent", recurrencerule="FREQ=MONTHLY;BYMONTHDAY=1",
            ),
        ],
        Entity.CONFIGURATIONS: [
            row("cfg-currency", key="currency", table="accounts", value="USD"),
        ],
    }


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------

class CountingProvider(MockDataProvider):
    """MockDataProvider that records every by-id lookup."""

    def __init__(self, store: MemoryStore):
        super().__init__(store)
        self.lookups: list[tuple[Entity, str]] = []

    async def fetch_by_id(self, entity, record_id):
        self.lookups.append((entity, record_id))
        return await super().fetch_by_id(entity, record_id)


def _as_param(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


def _holds(row: dict, key: str, expression: str) -> bool:
    """eq.<value> or is.null against one column; values may be double-quoted."""
    _operator, _, value = expression.partition(".")
    return _as_param(row.get(key)) == value.strip('"')


def _matches(row: dict, filters: dict[str, str]) -> bool:
    for key, expression in filters.items():
        if key == "or":
            alternatives = [part.partition(".") for part in expression.strip("()").split(",")]
            if not any(_holds(row, column, rest) for column, _, rest in alternatives):
                return False
        elif not _holds(row, key, expression):
            return False
    return True


class FakePostgrest:
    """
    Minimal PostgREST over a MemoryStore: GET/POST/PATCH on /rest/v1/<table>
    with eq., is.null and or=(...) filters. Set `fail_with` to make every
    request return that status.
    """

    def __init__(self, store: MemoryStore):
        self.store = store
        self.requests: list[httpx.Request] = []
        self.fail_with: int | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            return httpx.Response(self.fail_with, json={"message": "unavailable"})

        entity = Entity(request.url.path.rsplit("/", 1)[-1])
        filters = {key: value for key, value in request.url.params.items() if key != "select"}
        rows = [r for r in self.store.rows(entity) if _matches(r, filters)]

        if request.method == "GET":
            return httpx.Response(200, json=rows)
        if request.method == "POST":
            new_row = json.loads(request.content)
            self.store.add(entity, new_row)
            return httpx.Response(201, json=[new_row])
        if request.method == "PATCH":
            changes = json.loads(request.content)
            for r in rows:
                r.update(changes)
            return httpx.Response(200, json=rows)
        return httpx.Response(405)


# ---------------------------------------------------------------------------
# Demo-mode core
# ---------------------------------------------------------------------------

@pytest.fixture
def store():
    return MemoryStore(seed_rows())


@pytest.fixture
def provider(store):
    return MockDataProvider(store)


@pytest.fixture
def counting_provider(store):
    return CountingProvider(store)


@pytest.fixture
def validator(provider):
    return ReferentialIntegrityValidator(provider)


@pytest.fixture
def manager(provider):
    return CascadeDeleteManager(provider)


@pytest.fixture
def service(provider):
    return ValidationService.for_provider(provider)


@pytest.fixture
def shared_category(store):
    """
    A tenant-less account category, visible to every tenant.

    Request it before any backend fixture so the embedded database is
    seeded with it.
    """
    return store.add(Entity.ACCOUNT_CATEGORIES, row("cat-shared", tenant=None, name="Shared", type="Asset"))


# ---------------------------------------------------------------------------
# Embedded (local mode) database
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def session_factory(store):
    """In-memory SQLite with every table, seeded from the store's rows."""
    engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        for entity, model in MODELS.items():
            columns = {attr.key for attr in inspect(model).column_attrs}
            for seed in store.rows(entity):
                session.add(model(**{k: v for k, v in seed.items() if k in columns}))
        await session.commit()

    yield factory

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def local_provider(session_factory):
    return LocalDataProvider(session_factory)


# ---------------------------------------------------------------------------
# Hosted (cloud mode) database
# ---------------------------------------------------------------------------

@pytest.fixture
def postgrest(store):
    return FakePostgrest(store)


@pytest_asyncio.fixture
async def supabase_client(postgrest):
    async with AsyncClient(
        base_url=f"{TEST_SUPABASE_URL}/rest/v1",
        transport=httpx.MockTransport(postgrest),
    ) as client:
        yield client


@pytest.fixture
def supabase_provider(supabase_client):
    return SupabaseDataProvider(supabase_client)


# ---------------------------------------------------------------------------
# Backend-parametrized fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(params=["demo", "local", "cloud"])
def backend(request):
    return request.param


@pytest.fixture
def any_provider(backend, request):
    fixture_name = {
        "demo": "provider",
        "local": "local_provider",
        "cloud": "supabase_provider",
    }[backend]
    return request.getfixturevalue(fixture_name)


@pytest.fixture
def any_repository(backend, any_provider):
    repository_class = {
        "demo": MemoryRepository,
        "local": SqlRepository,
        "cloud": SupabaseRepository,
    }[backend]
    return repository_class(any_provider)


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def client(service):
    """Async HTTP test client with the demo-mode service injected."""
    app.dependency_overrides[get_validation_service] = lambda: service

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"X-Tenant-ID": TENANT},
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
