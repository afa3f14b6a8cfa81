"""
Pydantic schemas for delete checks, cascade previews and cascade plans.

These are the values the validation core hands back to CRUD callers and
the HTTP layer. Entity fields serialize as their table names
(e.g. "accounts").
"""

from pydantic import BaseModel, Field

from budgeteer.config import settings
from budgeteer.validation.schema import Entity


class CascadeDeleteOptions(BaseModel):
    """Options accepted by the cascade preview and cascade delete."""
    # Informational: every delete in Budgeteer is a soft delete
    soft_delete: bool = True
    cascade: bool = True
    max_depth: int = Field(default_factory=lambda: settings.CASCADE_MAX_DEPTH, ge=0)
    user_id: str | None = None


class DependentGroup(BaseModel):
    """Live records of one entity that reference a given record."""
    entity: Entity
    ids: list[str]


class PreviewItem(BaseModel):
    """One record a cascade delete would affect."""
    entity: Entity
    id: str
    name: str | None = None


class DeleteOperation(BaseModel):
    """A single soft delete the caller should apply, in plan order."""
    entity: Entity
    id: str
    depth: int = 0


class CascadeDeleteResult(BaseModel):
    """
    Outcome of planning a cascade delete.

    `operations` lists dependents before the records they depend on, with
    the root last. `errors` holds non-fatal problems such as the depth
    limit cutting the walk short; when it is non-empty the plan is partial
    and `success` is False.
    """
    success: bool = True
    operations: list[DeleteOperation] = []
    errors: list[str] = []


class Blocker(BaseModel):
    entity: Entity
    count: int


class DeleteSafety(BaseModel):
    """Whether a record can be deleted without cascading."""
    can_delete: bool
    blockers: list[Blocker] = []


class CascadeValidation(BaseModel):
    valid: bool
    issues: list[str] = []
