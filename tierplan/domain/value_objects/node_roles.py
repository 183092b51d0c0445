"""
Node Role Value Objects

Architectural Intent:
- A topology element describes its capabilities either as an explicit node
  roles list or as the legacy per-role booleans, never both
- Modelled as a two-variant union (NodeRoles | NodeTypes) held in a single
  field, so an element cannot carry both representations at once
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Optional, Union

MASTER_ROLE = "master"
INGEST_ROLE = "ingest"
ML_ROLE = "ml"
DATA_ROLE = "data"
DATA_ROLE_PREFIX = "data_"

# Legacy node-type flag -> role it stands for.
LEGACY_FLAGS = ("data", "master", "ingest", "ml")


def is_data_role(role: str) -> bool:
    return role == DATA_ROLE or role.startswith(DATA_ROLE_PREFIX)


@dataclass(frozen=True)
class NodeRoles:
    """Explicit capability roles of a tier, kept sorted for stable output."""
    roles: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "roles", tuple(sorted(set(self.roles))))

    @staticmethod
    def of(roles: Iterable[str]) -> "NodeRoles":
        return NodeRoles(tuple(roles))

    def has(self, role: str) -> bool:
        return role in self.roles

    @property
    def has_data_role(self) -> bool:
        return any(is_data_role(r) for r in self.roles)

    def without(self, role: str) -> "NodeRoles":
        return NodeRoles(tuple(r for r in self.roles if r != role))

    def to_node_types(self) -> "NodeTypes":
        return NodeTypes(
            data=self.has_data_role,
            master=self.has(MASTER_ROLE),
            ingest=self.has(INGEST_ROLE),
            ml=self.has(ML_ROLE),
        )


@dataclass(frozen=True)
class NodeTypes:
    """Legacy per-role booleans; None means the flag is not set."""
    data: Optional[bool] = None
    master: Optional[bool] = None
    ingest: Optional[bool] = None
    ml: Optional[bool] = None

    def flag(self, name: str) -> Optional[bool]:
        return getattr(self, name)

    @property
    def is_empty(self) -> bool:
        return all(self.flag(name) is None for name in LEGACY_FLAGS)


RoleAssignment = Union[NodeRoles, NodeTypes]
