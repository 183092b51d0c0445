"""
Node Role Resolver

Architectural Intent:
- Computes the capability roles of a data tier from either an explicit role
  list or the legacy node-type booleans
- The representation produced is decided once per pass by behavior_for();
  the resolver never emits both representations

Domain Logic:
- NODE_ROLES mode: a non-empty explicit role list is taken verbatim.
  Otherwise the template's roles are kept and each legacy boolean that is set
  adds (true) or removes (false) the matching role; unset booleans keep the
  template's choice for that role
- NODE_TYPES mode: explicit role lists are ignored (not an error); the
  template's booleans, overlaid with the booleans that are set, are returned
"""

from __future__ import annotations
import logging
from typing import Iterable, Optional

from tierplan.domain.value_objects.node_roles import (
    DATA_ROLE,
    INGEST_ROLE,
    LEGACY_FLAGS,
    MASTER_ROLE,
    ML_ROLE,
    NodeRoles,
    NodeTypes,
    RoleAssignment,
    is_data_role,
)
from tierplan.domain.value_objects.stack_version import (
    NODE_ROLES_MINIMUM_VERSION,
    NodeRoleMode,
    StackVersion,
    behavior_for,
)

logger = logging.getLogger(__name__)

_CANONICAL_ROLE = {
    "data": DATA_ROLE,
    "master": MASTER_ROLE,
    "ingest": INGEST_ROLE,
    "ml": ML_ROLE,
}


def _belongs_to(flag: str, role: str) -> bool:
    if flag == "data":
        return is_data_role(role)
    return role == _CANONICAL_ROLE[flag]


def _roles_from_types(node_types: NodeTypes) -> set[str]:
    return {_CANONICAL_ROLE[f] for f in LEGACY_FLAGS if node_types.flag(f)}


class NodeRoleResolver:
    """Resolves the role representation of a topology element."""

    def __init__(self, threshold: StackVersion = NODE_ROLES_MINIMUM_VERSION):
        self._threshold = threshold

    def mode_for(
        self, version: str, previous_version: Optional[str] = None
    ) -> NodeRoleMode:
        return behavior_for(version, previous_version, self._threshold)

    def resolve(
        self,
        version: str,
        explicit_roles: Optional[Iterable[str]] = None,
        node_types: Optional[NodeTypes] = None,
        template: Optional[RoleAssignment] = None,
        previous_version: Optional[str] = None,
    ) -> Optional[RoleAssignment]:
        mode = self.mode_for(version, previous_version)
        return self.resolve_for_mode(mode, explicit_roles, node_types, template)

    def resolve_for_mode(
        self,
        mode: NodeRoleMode,
        explicit_roles: Optional[Iterable[str]] = None,
        node_types: Optional[NodeTypes] = None,
        template: Optional[RoleAssignment] = None,
    ) -> Optional[RoleAssignment]:
        roles = tuple(explicit_roles) if explicit_roles is not None else ()
        if mode is NodeRoleMode.NODE_ROLES:
            return self._as_node_roles(roles, node_types, template)

        if roles:
            logger.debug(
                "Ignoring explicit node_roles %s: version uses legacy node types",
                list(roles),
            )
        return self._as_node_types(node_types, template)

    def _as_node_roles(
        self,
        explicit_roles: tuple[str, ...],
        node_types: Optional[NodeTypes],
        template: Optional[RoleAssignment],
    ) -> Optional[NodeRoles]:
        if explicit_roles:
            return NodeRoles.of(explicit_roles)

        if isinstance(template, NodeRoles):
            roles = set(template.roles)
        elif isinstance(template, NodeTypes):
            roles = _roles_from_types(template)
        else:
            roles = set()

        if node_types is not None:
            for flag in LEGACY_FLAGS:
                value = node_types.flag(flag)
                if value is None:
                    continue
                if value:
                    if not any(_belongs_to(flag, r) for r in roles):
                        roles.add(_CANONICAL_ROLE[flag])
                else:
                    roles = {r for r in roles if not _belongs_to(flag, r)}

        if not roles and template is None:
            return None
        return NodeRoles.of(roles)

    def _as_node_types(
        self,
        node_types: Optional[NodeTypes],
        template: Optional[RoleAssignment],
    ) -> Optional[NodeTypes]:
        if isinstance(template, NodeTypes):
            base = template
        elif isinstance(template, NodeRoles):
            base = template.to_node_types()
        else:
            base = NodeTypes()

        if node_types is not None:
            base = NodeTypes(
                **{
                    flag: node_types.flag(flag)
                    if node_types.flag(flag) is not None
                    else base.flag(flag)
                    for flag in LEGACY_FLAGS
                }
            )

        if base.is_empty:
            return None
        return base
