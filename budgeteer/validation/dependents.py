"""One-level dependent lookup shared by the validator and the cascade manager."""

from budgeteer.schemas.cascade import DependentGroup
from budgeteer.validation.providers.base import DataProvider
from budgeteer.validation.schema import Entity, dependents_of


async def find_dependents(
    provider: DataProvider,
    entity: Entity,
    record_id: str,
    tenant_id: str,
) -> list[DependentGroup]:
    """
    Return the live records that reference `entity:record_id` directly,
    grouped by dependent entity. Empty groups are omitted.

    A record never counts as its own dependent, so a transfer leg whose
    transferid points at itself does not block its own delete.
    """
    groups: list[DependentGroup] = []
    for dependent in dependents_of(entity):
        rows = await provider.fetch_all(dependent.entity, tenant_id)
        ids = [
            row["id"]
            for row in rows
            if not (dependent.entity == entity and row.get("id") == record_id)
            and any(row.get(field) == record_id for field in dependent.fields)
        ]
        if ids:
            groups.append(DependentGroup(entity=dependent.entity, ids=ids))
    return groups
