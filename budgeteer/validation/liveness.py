"""
Row visibility.

A record is live for a tenant when it is not soft-deleted and either
belongs to that tenant or carries no tenant at all (shared rows). Every
data provider filters its fetch-all results through `live_rows`, and the
validator checks by-id lookups with `is_live`.
"""

from typing import Any, Iterable, Mapping

Record = Mapping[str, Any]


def is_live(record: Record | None, tenant_id: str) -> bool:
    if record is None:
        return False
    if record.get("isdeleted"):
        return False
    owner = record.get("tenantid")
    return owner is None or owner == tenant_id


def live_rows(rows: Iterable[Record], tenant_id: str) -> list[Record]:
    return [row for row in rows if is_live(row, tenant_id)]
