"""
Referential-integrity and cascade-delete validation.

The hosted database enforces foreign keys and unique constraints
natively; the demo store and embedded database do not. This package
re-implements those constraints in application code, identically for
all three, behind a single facade:

    from budgeteer.validation.service import validation_service

    await validation_service.validate_create(Entity.ACCOUNTS, record, tenant_id)

Modules:
  - schema: relationships and unique scopes as data
  - providers: read-only adapters, one per backend
  - factory: selects the provider for the active storage mode
  - validator: FK, uniqueness and delete-safety checks
  - cascade: dependent discovery, previews and cascade plans
  - service: the facade CRUD code calls
  - helpers: decorators around CRUD callables
"""
