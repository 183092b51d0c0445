"""
Component Defaulting Rules

Architectural Intent:
- Per-component clamps applied to template-derived topology elements so the
  defaults sent to the platform respect its minimum sizes and zone counts
- Minimums and clamp styles are carried in an injected ResolutionPolicy
  instead of module-level constants, so every policy variant is testable

Domain Logic:
- UI/dashboard (kibana): template size is capped at the minimum and the zone
  count at one; the smallest footprint is the default
- Agent/ingest gateways (apm, integrations_server): sizes below the minimum
  are raised to it; zone count is raised to one
- Search front-end (enterprise_search): sizes below the minimum, or exactly
  zero, are raised to it; zone count is raised to one
- Data-processing tiers (elasticsearch): template values pass through
- Rules look at one element at a time and never at its siblings
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum, auto
from typing import Iterable, Mapping

from tierplan.domain.entities.topology import ComponentKind, TopologyElement
from tierplan.domain.value_objects.stack_version import (
    NODE_ROLES_MINIMUM_VERSION,
    StackVersion,
)
from tierplan.domain.value_objects.topology_size import DEFAULT_SIZE_RESOURCE

MINIMUM_ZONE_COUNT = 1
MINIMUM_KIBANA_SIZE = 1024
MINIMUM_APM_SIZE = 512
MINIMUM_INTEGRATIONS_SERVER_SIZE = 1024
MINIMUM_ENTERPRISE_SEARCH_SIZE = 2048


class SizeClamp(Enum):
    NONE = auto()
    RAISE_BELOW_MINIMUM = auto()
    RAISE_BELOW_MINIMUM_OR_ZERO = auto()
    CAP_AT_MINIMUM = auto()


@dataclass(frozen=True)
class ComponentPolicy:
    minimum_size: int = 0
    size_clamp: SizeClamp = SizeClamp.NONE
    # 0 disables the floor.
    minimum_zone_count: int = MINIMUM_ZONE_COUNT
    single_zone: bool = False
    # Unreferenced template elements stay in the resolved plan.
    keep_unreferenced_tiers: bool = False
    default_size_resource: str = DEFAULT_SIZE_RESOURCE


@dataclass(frozen=True)
class ResolutionPolicy:
    components: Mapping[ComponentKind, ComponentPolicy] = field(default_factory=dict)
    node_roles_minimum_version: StackVersion = NODE_ROLES_MINIMUM_VERSION

    def for_component(self, kind: ComponentKind) -> ComponentPolicy:
        return self.components.get(kind, ComponentPolicy())


def default_policy(
    kibana_minimum_size: int = MINIMUM_KIBANA_SIZE,
    apm_minimum_size: int = MINIMUM_APM_SIZE,
    integrations_server_minimum_size: int = MINIMUM_INTEGRATIONS_SERVER_SIZE,
    enterprise_search_minimum_size: int = MINIMUM_ENTERPRISE_SEARCH_SIZE,
    minimum_zone_count: int = MINIMUM_ZONE_COUNT,
    default_size_resource: str = DEFAULT_SIZE_RESOURCE,
    node_roles_minimum_version: StackVersion = NODE_ROLES_MINIMUM_VERSION,
) -> ResolutionPolicy:
    """Build the platform's standard policy, optionally with adjusted minimums."""
    return ResolutionPolicy(
        components={
            ComponentKind.ELASTICSEARCH: ComponentPolicy(
                minimum_zone_count=0,
                keep_unreferenced_tiers=True,
                default_size_resource=default_size_resource,
            ),
            ComponentKind.KIBANA: ComponentPolicy(
                minimum_size=kibana_minimum_size,
                size_clamp=SizeClamp.CAP_AT_MINIMUM,
                minimum_zone_count=minimum_zone_count,
                single_zone=True,
                default_size_resource=default_size_resource,
            ),
            ComponentKind.APM: ComponentPolicy(
                minimum_size=apm_minimum_size,
                size_clamp=SizeClamp.RAISE_BELOW_MINIMUM,
                minimum_zone_count=minimum_zone_count,
                default_size_resource=default_size_resource,
            ),
            ComponentKind.INTEGRATIONS_SERVER: ComponentPolicy(
                minimum_size=integrations_server_minimum_size,
                size_clamp=SizeClamp.RAISE_BELOW_MINIMUM,
                minimum_zone_count=minimum_zone_count,
                default_size_resource=default_size_resource,
            ),
            ComponentKind.ENTERPRISE_SEARCH: ComponentPolicy(
                minimum_size=enterprise_search_minimum_size,
                size_clamp=SizeClamp.RAISE_BELOW_MINIMUM_OR_ZERO,
                minimum_zone_count=minimum_zone_count,
                default_size_resource=default_size_resource,
            ),
        },
        node_roles_minimum_version=node_roles_minimum_version,
    )


def _clamped_size(value: int, policy: ComponentPolicy) -> int:
    clamp = policy.size_clamp
    if clamp is SizeClamp.RAISE_BELOW_MINIMUM and value < policy.minimum_size:
        return policy.minimum_size
    if clamp is SizeClamp.RAISE_BELOW_MINIMUM_OR_ZERO and (
        value < policy.minimum_size or value == 0
    ):
        return policy.minimum_size
    if clamp is SizeClamp.CAP_AT_MINIMUM and value > policy.minimum_size:
        return policy.minimum_size
    return value


def apply_defaulting_rules(
    element: TopologyElement, policy: ComponentPolicy
) -> TopologyElement:
    """Clamp a single template element's size and zone count."""
    size = _clamped_size(element.size.value, policy)

    zone_count = element.zone_count
    if policy.minimum_zone_count and zone_count < policy.minimum_zone_count:
        zone_count = policy.minimum_zone_count
    if policy.single_zone and zone_count > max(policy.minimum_zone_count, 1):
        zone_count = max(policy.minimum_zone_count, 1)

    if size == element.size.value and zone_count == element.zone_count:
        return element
    return replace(
        element,
        size=replace(element.size, value=size),
        zone_count=zone_count,
    )


def default_topology(
    elements: Iterable[TopologyElement], policy: ComponentPolicy
) -> tuple[TopologyElement, ...]:
    return tuple(apply_defaulting_rules(e, policy) for e in elements)
