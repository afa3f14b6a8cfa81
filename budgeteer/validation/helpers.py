"""
Decorators that put validation in front of CRUD callables.

    @validated_create(Entity.ACCOUNTS)
    async def create_account(record, tenant_id):
        ...

    @validated_update(Entity.ACCOUNTS)
    async def update_account(record, record_id, tenant_id):
        ...

    @validated_delete(Entity.ACCOUNTS)
    async def delete_account(record_id, tenant_id):
        ...

The wrapped function runs only if validation passes. Pass `service=` to
validate through a specific ValidationService instead of the default.
"""

import functools
from typing import Any, Awaitable, Callable

from budgeteer.validation.schema import Entity
from budgeteer.validation.service import ValidationService, validation_service

AsyncCallable = Callable[..., Awaitable[Any]]


def _service(service: ValidationService | None) -> ValidationService:
    return service if service is not None else validation_service


def validated_create(entity: Entity, service: ValidationService | None = None):
    def decorator(func: AsyncCallable) -> AsyncCallable:
        @functools.wraps(func)
        async def wrapper(record, tenant_id, *args, **kwargs):
            await _service(service).validate_create(entity, record, tenant_id)
            return await func(record, tenant_id, *args, **kwargs)
        return wrapper
    return decorator


def validated_update(entity: Entity, service: ValidationService | None = None):
    def decorator(func: AsyncCallable) -> AsyncCallable:
        @functools.wraps(func)
        async def wrapper(record, record_id, tenant_id, *args, **kwargs):
            await _service(service).validate_update(entity, record, record_id, tenant_id)
            return await func(record, record_id, tenant_id, *args, **kwargs)
        return wrapper
    return decorator


def validated_delete(entity: Entity, service: ValidationService | None = None):
    def decorator(func: AsyncCallable) -> AsyncCallable:
        @functools.wraps(func)
        async def wrapper(record_id, tenant_id, *args, **kwargs):
            await _service(service).validate_delete(entity, record_id, tenant_id)
            return await func(record_id, tenant_id, *args, **kwargs)
        return wrapper
    return decorator
