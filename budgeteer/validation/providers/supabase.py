"""
Cloud-mode provider over the hosted Supabase database.

Reads use Supabase's PostgREST interface over httpx:

    GET /rest/v1/accounts?select=*&or=(tenantid.eq."<tenant>",tenantid.is.null)&isdeleted=eq.false
    GET /rest/v1/accounts?select=*&id=eq.<id>

Rows without a tenant are shared and match every tenant, as in the other
backends. The tenant id is double-quoted so reserved characters in it
can't break the or-filter.

A non-2xx response raises httpx.HTTPStatusError from raise_for_status();
transport failures raise httpx.TransportError subclasses. Neither is
caught here.
"""

import httpx

from budgeteer.config import settings
from budgeteer.validation.liveness import Record
from budgeteer.validation.providers.base import DataProvider
from budgeteer.validation.schema import Entity


def build_supabase_client(
    url: str | None = None,
    api_key: str | None = None,
    timeout: float | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create an AsyncClient pointed at the PostgREST root of a project."""
    url = url if url is not None else settings.SUPABASE_URL
    api_key = api_key if api_key is not None else settings.SUPABASE_ANON_KEY
    if not url:
        raise ValueError("SUPABASE_URL must be set to use cloud storage mode")
    return httpx.AsyncClient(
        base_url=f"{url.rstrip('/')}/rest/v1",
        headers={
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
        },
        timeout=timeout if timeout is not None else settings.SUPABASE_TIMEOUT_SECONDS,
        transport=transport,
    )


class SupabaseDataProvider(DataProvider):

    def __init__(self, client: httpx.AsyncClient | None = None):
        self.client = client if client is not None else build_supabase_client()

    async def _select(self, entity: Entity, params: dict[str, str]) -> list[Record]:
        response = await self.client.get(f"/{entity.value}", params={"select": "*", **params})
        response.raise_for_status()
        return response.json() or []

    async def _fetch_tenant_rows(self, entity: Entity, tenant_id: str) -> list[Record]:
        return await self._select(
            entity,
            {"or": f'(tenantid.eq."{tenant_id}",tenantid.is.null)', "isdeleted": "eq.false"},
        )

    async def fetch_by_id(self, entity: Entity, record_id: str) -> Record | None:
        rows = await self._select(Entity(entity), {"id": f"eq.{record_id}"})
        return rows[0] if rows else None

    async def aclose(self) -> None:
        await self.client.aclose()
