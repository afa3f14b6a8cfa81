"""
Cascade delete manager.

Answers "what depends on this record?" and plans cascading soft deletes:

  - get_dependent_records: direct (one-level) dependents
  - get_cascade_delete_preview: every record a cascade would touch,
    root first, breadth-first
  - cascade_delete: the same walk turned into an ordered list of delete
    operations, deepest dependents first and the root last
  - can_delete_safely: whether a plain (non-cascading) delete would pass

The manager never writes. Only the storage-mode-specific CRUD code knows
how to soft-delete a row in its backend, so it receives the plan and
applies it. Nothing here is atomic: the plan is applied row by row.

Walk termination:
  Every (entity, id) pair is visited at most once, so the two legs of a
  transfer (each referencing the other through transferid) and diamond
  shapes (a transaction reachable from an account both directly and via
  its transfer partner) are expanded once. The walk also stops at
  max_depth; for cascade_delete each record cut off by the limit is
  reported in `errors` and the plan returned is partial.
"""

import logging
from collections import deque
from typing import Any, Mapping

from budgeteer.exceptions import CascadeDeleteError
from budgeteer.schemas.cascade import (
    Blocker,
    CascadeDeleteOptions,
    CascadeDeleteResult,
    CascadeValidation,
    DeleteOperation,
    DeleteSafety,
    DependentGroup,
    PreviewItem,
)
from budgeteer.validation.dependents import find_dependents
from budgeteer.validation.liveness import Record
from budgeteer.validation.providers.base import DataProvider
from budgeteer.validation.schema import Entity

logger = logging.getLogger(__name__)

OptionsLike = CascadeDeleteOptions | Mapping[str, Any] | None


def _resolve_options(options: OptionsLike) -> CascadeDeleteOptions:
    if options is None:
        return CascadeDeleteOptions()
    if isinstance(options, CascadeDeleteOptions):
        return options
    return CascadeDeleteOptions(**options)


def _display_name(entity: Entity, record: Record | None) -> str | None:
    if record is None:
        return None
    if entity == Entity.TRANSACTIONS:
        return record.get("name") or record.get("description")
    if entity == Entity.CONFIGURATIONS:
        return record.get("key")
    return record.get("name")


class CascadeDeleteManager:

    def __init__(self, data_provider: DataProvider):
        self.data_provider = data_provider

    async def get_dependent_records(
        self,
        entity: Entity,
        record_id: str,
        tenant_id: str,
    ) -> list[DependentGroup]:
        return await find_dependents(self.data_provider, Entity(entity), record_id, tenant_id)

    async def can_delete_safely(
        self,
        entity: Entity,
        record_id: str,
        tenant_id: str,
    ) -> DeleteSafety:
        groups = await self.get_dependent_records(entity, record_id, tenant_id)
        blockers = [Blocker(entity=group.entity, count=len(group.ids)) for group in groups if group.ids]
        return DeleteSafety(can_delete=not blockers, blockers=blockers)

    async def _walk(
        self,
        entity: Entity,
        record_id: str,
        tenant_id: str,
        options: CascadeDeleteOptions,
    ) -> tuple[list[tuple[Entity, str, int]], list[str]]:
        """
        Breadth-first walk from the root over live dependents.

        Returns the visited (entity, id, depth) nodes in visit order and
        one message per record the depth limit cut off.
        """
        nodes: list[tuple[Entity, str, int]] = []
        errors: list[str] = []
        visited: set[str] = set()
        truncated: set[str] = set()
        queue = deque([(Entity(entity), record_id, 0)])

        while queue:
            current, current_id, depth = queue.popleft()
            key = f"{current.value}:{current_id}"
            if key in visited:
                continue
            if depth >= options.max_depth:
                if key not in truncated:
                    truncated.add(key)
                    errors.append(f"Maximum cascade depth ({options.max_depth}) reached for {key}")
                continue
            visited.add(key)
            nodes.append((current, current_id, depth))

            if options.cascade:
                for group in await find_dependents(self.data_provider, current, current_id, tenant_id):
                    for dependent_id in group.ids:
                        queue.append((group.entity, dependent_id, depth + 1))

        return nodes, errors

    async def get_cascade_delete_preview(
        self,
        entity: Entity,
        record_id: str,
        tenant_id: str,
        options: OptionsLike = None,
    ) -> list[PreviewItem]:
        """List every record a cascade delete would affect, root first."""
        opts = _resolve_options(options)
        nodes, _ = await self._walk(entity, record_id, tenant_id, opts)

        preview = []
        for node_entity, node_id, _depth in nodes:
            record = await self.data_provider.fetch_by_id(node_entity, node_id)
            preview.append(PreviewItem(entity=node_entity, id=node_id, name=_display_name(node_entity, record)))
        return preview

    async def cascade_delete(
        self,
        entity: Entity,
        record_id: str,
        tenant_id: str,
        options: OptionsLike = None,
    ) -> CascadeDeleteResult:
        """
        Plan a cascading soft delete.

        With `cascade=False` the plan is the root alone, and only if it
        has no live dependents.

        Raises:
            CascadeDeleteError: If cascade is off and live dependents exist.
        """
        entity = Entity(entity)
        opts = _resolve_options(options)

        if not opts.cascade:
            groups = await self.get_dependent_records(entity, record_id, tenant_id)
            if groups:
                raise CascadeDeleteError(entity.value, record_id, groups[0].entity.value, len(groups[0].ids))

        nodes, errors = await self._walk(entity, record_id, tenant_id, opts)

        # Stable sort keeps discovery order within a level
        ordered = sorted(nodes, key=lambda node: node[2], reverse=True)
        result = CascadeDeleteResult(
            success=not errors,
            operations=[DeleteOperation(entity=e, id=i, depth=d) for e, i, d in ordered],
            errors=errors,
        )

        if errors:
            logger.warning(
                "Cascade plan for %s:%s is partial (%d records beyond max depth %d)",
                entity.value, record_id, len(errors), opts.max_depth,
            )
        logger.info(
            "Planned cascade delete of %s:%s for user %s: %d operations",
            entity.value, record_id, opts.user_id or "-", len(result.operations),
        )
        return result

    async def validate_cascade_delete(
        self,
        entity: Entity,
        record_id: str,
        tenant_id: str,
        options: OptionsLike = None,
    ) -> CascadeValidation:
        """
        Pre-flight check for a delete.

        The root must exist, be undeleted and belong to the tenant; the
        first of those that fails is the only issue reported. When
        cascading is off, each blocking dependent group adds an issue.
        """
        entity = Entity(entity)
        opts = _resolve_options(options)
        key = f"{entity.value}:{record_id}"

        record = await self.data_provider.fetch_by_id(entity, record_id)
        if record is None:
            return CascadeValidation(valid=False, issues=[f"Record {key} does not exist"])
        if record.get("isdeleted"):
            return CascadeValidation(valid=False, issues=[f"Record {key} is already deleted"])
        if record.get("tenantid") not in (None, tenant_id):
            return CascadeValidation(
                valid=False,
                issues=[f"Record {key} does not belong to tenant {tenant_id}"],
            )

        issues = []
        if not opts.cascade:
            for group in await self.get_dependent_records(entity, record_id, tenant_id):
                issues.append(f"Cannot delete: {len(group.ids)} dependent records in {group.entity.value}")

        return CascadeValidation(valid=not issues, issues=issues)
