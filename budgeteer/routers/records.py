"""
Records router — generic CRUD over every Budgeteer entity.

Each endpoint is keyed by the entity's table name, and the tenant comes
from the X-Tenant-ID header (authentication is handled upstream):

    GET    /records/{entity}                          — List live records
    GET    /records/{entity}/{id}                     — Get one live record
    POST   /records/{entity}                          — Create (validated)
    PATCH  /records/{entity}/{id}                     — Update (validated)
    DELETE /records/{entity}/{id}?cascade=            — Soft delete
    GET    /records/{entity}/{id}/dependents          — Direct dependents
    GET    /records/{entity}/{id}/can-delete          — Non-cascading check
    GET    /records/{entity}/{id}/delete-preview      — Cascade preview

Writes go through the repository for the active storage mode, which
validates before writing. Integrity errors are turned into 409/422
responses by the handlers in budgeteer.exceptions.

The intended delete flow for a record with dependents:
  1. DELETE without cascade -> 409 cascade_delete
  2. GET delete-preview, show the affected records to the user
  3. DELETE with cascade=true once the user confirms
"""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Header, Query, status
from fastapi.responses import JSONResponse

from budgeteer.exceptions import RecordNotFoundError
from budgeteer.repositories import RecordRepository, repository_for
from budgeteer.schemas.cascade import (
    CascadeDeleteOptions,
    CascadeDeleteResult,
    DeleteSafety,
    DependentGroup,
    PreviewItem,
)
from budgeteer.validation.schema import Entity
from budgeteer.validation.service import ValidationService, get_validation_service

router = APIRouter()

TenantId = Annotated[str, Header(alias="X-Tenant-ID")]
UserId = Annotated[str | None, Header(alias="X-User-ID")]


def get_repository(
    service: ValidationService = Depends(get_validation_service),
) -> RecordRepository:
    """Repository for whatever backend the validation service is bound to."""
    return repository_for(service.data_provider, service)


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------

@router.get("/{entity}", summary="List live records")
async def list_records(
    entity: Entity,
    tenant_id: TenantId,
    repository: RecordRepository = Depends(get_repository),
) -> list[dict[str, Any]]:
    return await repository.list_records(entity, tenant_id)


@router.get("/{entity}/{record_id}", summary="Get a record")
async def get_record(
    entity: Entity,
    record_id: str,
    tenant_id: TenantId,
    repository: RecordRepository = Depends(get_repository),
) -> dict[str, Any]:
    record = await repository.get(entity, record_id, tenant_id)
    if record is None:
        raise RecordNotFoundError(entity.value, record_id)
    return record


@router.post(
    "/{entity}",
    status_code=status.HTTP_201_CREATED,
    summary="Create a record",
)
async def create_record(
    entity: Entity,
    tenant_id: TenantId,
    record: dict[str, Any] = Body(...),
    user_id: UserId = None,
    repository: RecordRepository = Depends(get_repository),
) -> dict[str, Any]:
    """
    Create a record after FK and uniqueness validation.

    Returns 422 if a foreign key doesn't resolve, 409 on a unique-scope
    collision.
    """
    return await repository.create(entity, record, tenant_id, user_id=user_id)


@router.patch("/{entity}/{record_id}", summary="Update a record")
async def update_record(
    entity: Entity,
    record_id: str,
    tenant_id: TenantId,
    changes: dict[str, Any] = Body(...),
    user_id: UserId = None,
    repository: RecordRepository = Depends(get_repository),
) -> dict[str, Any]:
    """Apply a partial update. Only the fields sent are validated."""
    return await repository.update(entity, record_id, changes, tenant_id, user_id=user_id)


@router.delete(
    "/{entity}/{record_id}",
    response_model=CascadeDeleteResult,
    summary="Soft-delete a record",
)
async def delete_record(
    entity: Entity,
    record_id: str,
    tenant_id: TenantId,
    cascade: bool = False,
    max_depth: int | None = Query(default=None, ge=0),
    user_id: UserId = None,
    repository: RecordRepository = Depends(get_repository),
):
    """
    Soft-delete a record.

    Without cascade, returns 409 if live dependents exist. With cascade,
    returns 409 and the partial plan (nothing deleted) if the dependency
    graph is deeper than max_depth.
    """
    result = await repository.delete(
        entity, record_id, tenant_id,
        cascade=cascade, user_id=user_id, max_depth=max_depth,
    )
    if not result.success:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={
                "detail": "Cascade delete exceeds the maximum depth",
                "error_type": "cascade_depth_exceeded",
                **result.model_dump(mode="json"),
            },
        )
    return result


# ---------------------------------------------------------------------------
# Delete planning
# ---------------------------------------------------------------------------

@router.get(
    "/{entity}/{record_id}/dependents",
    response_model=list[DependentGroup],
    summary="List direct dependents",
)
async def get_dependents(
    entity: Entity,
    record_id: str,
    tenant_id: TenantId,
    service: ValidationService = Depends(get_validation_service),
):
    return await service.get_dependent_records(entity, record_id, tenant_id)


@router.get(
    "/{entity}/{record_id}/can-delete",
    response_model=DeleteSafety,
    summary="Check whether a plain delete would succeed",
)
async def can_delete(
    entity: Entity,
    record_id: str,
    tenant_id: TenantId,
    service: ValidationService = Depends(get_validation_service),
):
    return await service.can_delete_safely(entity, record_id, tenant_id)


@router.get(
    "/{entity}/{record_id}/delete-preview",
    response_model=list[PreviewItem],
    summary="Preview a cascade delete",
)
async def delete_preview(
    entity: Entity,
    record_id: str,
    tenant_id: TenantId,
    max_depth: int | None = Query(default=None, ge=0),
    service: ValidationService = Depends(get_validation_service),
):
    options = CascadeDeleteOptions() if max_depth is None else CascadeDeleteOptions(max_depth=max_depth)
    return await service.get_cascade_delete_preview(entity, record_id, tenant_id, options)
