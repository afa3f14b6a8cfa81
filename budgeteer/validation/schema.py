"""
Schema descriptor: relationships and unique scopes as data.

The hosted database expresses these rules as DDL. The demo store and the
embedded database have no constraint engine, so the same rules live here
and the validator/cascade manager interpret them for every backend.

Everything is keyed by the closed `Entity` enum. `DEPENDENTS` is derived
from `FOREIGN_KEYS`, so adding a foreign key automatically teaches the
delete checks and the cascade walker about the new dependency.
"""

import enum
from dataclasses import dataclass
from types import MappingProxyType


class Entity(str, enum.Enum):
    ACCOUNT_CATEGORIES = "accountcategories"
    ACCOUNTS = "accounts"
    TRANSACTION_GROUPS = "transactiongroups"
    TRANSACTION_CATEGORIES = "transactioncategories"
    TRANSACTIONS = "transactions"
    RECURRINGS = "recurrings"
    CONFIGURATIONS = "configurations"


@dataclass(frozen=True)
class ForeignKey:
    field: str
    target: Entity
    target_field: str = "id"
    nullable: bool = False


@dataclass(frozen=True)
class UniqueConstraint:
    """
    A unique scope. The tenant is always part of the scope implicitly;
    `fields` lists the remaining columns.
    """

    name: str
    fields: tuple[str, ...]


@dataclass(frozen=True)
class Dependent:
    """Records of `entity` reference the owner through any of `fields`."""

    entity: Entity
    fields: tuple[str, ...]


FOREIGN_KEYS: MappingProxyType = MappingProxyType({
    Entity.ACCOUNT_CATEGORIES: (),
    Entity.ACCOUNTS: (
        ForeignKey("categoryid", Entity.ACCOUNT_CATEGORIES),
    ),
    Entity.TRANSACTION_GROUPS: (),
    Entity.TRANSACTION_CATEGORIES: (
        ForeignKey("groupid", Entity.TRANSACTION_GROUPS),
    ),
    Entity.TRANSACTIONS: (
        ForeignKey("accountid", Entity.ACCOUNTS),
        ForeignKey("categoryid", Entity.TRANSACTION_CATEGORIES),
        ForeignKey("transferaccountid", Entity.ACCOUNTS, nullable=True),
        ForeignKey("transferid", Entity.TRANSACTIONS, nullable=True),
    ),
    Entity.RECURRINGS: (
        ForeignKey("sourceaccountid", Entity.ACCOUNTS),
        ForeignKey("categoryid", Entity.TRANSACTION_CATEGORIES, nullable=True),
    ),
    Entity.CONFIGURATIONS: (),
})

UNIQUE_CONSTRAINTS: MappingProxyType = MappingProxyType({
    Entity.ACCOUNT_CATEGORIES: (
        UniqueConstraint("unique_account_category_name_per_tenant", ("name",)),
    ),
    Entity.ACCOUNTS: (
        UniqueConstraint("unique_account_name_per_tenant", ("name",)),
    ),
    Entity.TRANSACTION_GROUPS: (
        UniqueConstraint("unique_transaction_group_name_per_tenant", ("name",)),
    ),
    Entity.TRANSACTION_CATEGORIES: (
        UniqueConstraint("unique_transaction_category_name_per_tenant", ("name",)),
    ),
    Entity.TRANSACTIONS: (),
    Entity.RECURRINGS: (),
    Entity.CONFIGURATIONS: (
        UniqueConstraint("unique_configuration_key_per_table_tenant", ("key", "table")),
    ),
})


def _build_dependents() -> MappingProxyType:
    dependents: dict[Entity, list[Dependent]] = {entity: [] for entity in Entity}
    for source in Entity:
        by_target: dict[Entity, list[str]] = {}
        for fk in FOREIGN_KEYS[source]:
            by_target.setdefault(fk.target, []).append(fk.field)
        for target, fields in by_target.items():
            dependents[target].append(Dependent(source, tuple(fields)))
    return MappingProxyType({entity: tuple(deps) for entity, deps in dependents.items()})


# Reverse of FOREIGN_KEYS, in declaration order:
#   accounts -> transactions (accountid, transferaccountid), recurrings (sourceaccountid)
DEPENDENTS: MappingProxyType = _build_dependents()


def foreign_keys_for(entity: Entity) -> tuple[ForeignKey, ...]:
    return FOREIGN_KEYS[Entity(entity)]


def unique_constraints_for(entity: Entity) -> tuple[UniqueConstraint, ...]:
    return UNIQUE_CONSTRAINTS[Entity(entity)]


def dependents_of(entity: Entity) -> tuple[Dependent, ...]:
    return DEPENDENTS[Entity(entity)]
