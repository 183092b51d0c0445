"""
Topology Entities

Architectural Intent:
- Resolved shapes (TopologyElement, ResolvedComponentPlan) produced by the
  expander and read back by the projector
- Declarative shapes (UserTopologyOverride, ComponentOverride) supplied by the
  caller, where every field is optional and None always means "not set"
- All entities are frozen; each resolution or projection call builds fresh
  instances and nothing is shared between calls

Design Decisions:
- Size and zone count of a TopologyElement are validated on construction
- Role information lives in a single NodeRoles | NodeTypes field
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional

from tierplan.domain.errors import InvalidTopologySize, InvalidZoneCount
from tierplan.domain.value_objects.node_roles import RoleAssignment
from tierplan.domain.value_objects.topology_size import TopologySize


class ComponentKind(Enum):
    ELASTICSEARCH = "elasticsearch"
    KIBANA = "kibana"
    APM = "apm"
    INTEGRATIONS_SERVER = "integrations_server"
    ENTERPRISE_SEARCH = "enterprise_search"

    @property
    def matches_by_tier_id(self) -> bool:
        """Data tiers are keyed by tier id, every other component by instance configuration."""
        return self is ComponentKind.ELASTICSEARCH


@dataclass(frozen=True)
class ComponentSettings:
    """Resolved free-form settings of a component or of one data tier."""
    user_settings_json: Optional[dict[str, Any]] = None
    user_settings_override_json: Optional[dict[str, Any]] = None
    user_settings_yaml: Optional[str] = None
    user_settings_override_yaml: Optional[str] = None
    plugins: tuple[str, ...] = ()
    docker_image: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not (
            self.user_settings_json
            or self.user_settings_override_json
            or self.user_settings_yaml
            or self.user_settings_override_yaml
            or self.plugins
            or self.docker_image
        )


@dataclass(frozen=True)
class TopologyElement:
    """
    Fully resolved sizing, roles and settings of one tier or instance configuration.
    """
    size: TopologySize
    zone_count: int
    id: str = ""
    instance_configuration_id: str = ""
    roles: Optional[RoleAssignment] = None
    autoscaling_min: Optional[TopologySize] = None
    autoscaling_max: Optional[TopologySize] = None
    autoscaling_policy_override: Optional[dict[str, Any]] = None
    settings: ComponentSettings = field(default_factory=ComponentSettings)

    def __post_init__(self) -> None:
        if self.size.value < 0:
            raise InvalidTopologySize(self.identifier, self.size.value)
        if self.zone_count < 0:
            raise InvalidZoneCount(self.identifier, self.zone_count)

    @property
    def identifier(self) -> str:
        return self.id or self.instance_configuration_id


@dataclass(frozen=True)
class AutoscalingOverride:
    min_size: Optional[str] = None
    min_size_resource: Optional[str] = None
    max_size: Optional[str] = None
    max_size_resource: Optional[str] = None
    policy_override_json: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return all(
            v is None
            for v in (
                self.min_size,
                self.min_size_resource,
                self.max_size,
                self.max_size_resource,
                self.policy_override_json,
            )
        )


@dataclass(frozen=True)
class SettingsOverride:
    user_settings_json: Optional[str] = None
    user_settings_override_json: Optional[str] = None
    user_settings_yaml: Optional[str] = None
    user_settings_override_yaml: Optional[str] = None
    plugins: Optional[tuple[str, ...]] = None
    docker_image: Optional[str] = None


@dataclass(frozen=True)
class UserTopologyOverride:
    """
    Partial topology element declared by the caller. Every field is optional.
    """
    id: Optional[str] = None
    instance_configuration_id: Optional[str] = None
    size: Optional[str] = None
    size_resource: Optional[str] = None
    zone_count: Optional[int] = None
    node_roles: Optional[tuple[str, ...]] = None
    node_type_data: Optional[bool] = None
    node_type_master: Optional[bool] = None
    node_type_ingest: Optional[bool] = None
    node_type_ml: Optional[bool] = None
    autoscaling: Optional[AutoscalingOverride] = None
    config: Optional[SettingsOverride] = None

    @property
    def identifier(self) -> Optional[str]:
        return self.id or self.instance_configuration_id

    @property
    def has_node_types(self) -> bool:
        return any(
            v is not None
            for v in (
                self.node_type_data,
                self.node_type_master,
                self.node_type_ingest,
                self.node_type_ml,
            )
        )


@dataclass(frozen=True)
class ComponentOverride:
    """Declarative configuration of one component (None topology = use template)."""
    ref_id: Optional[str] = None
    region: Optional[str] = None
    elasticsearch_cluster_ref_id: Optional[str] = None
    topology: Optional[tuple[UserTopologyOverride, ...]] = None
    config: Optional[SettingsOverride] = None
    autoscale: Optional[bool] = None

    def tier(self, tier_id: str) -> Optional[UserTopologyOverride]:
        for t in self.topology or ():
            if t.id == tier_id:
                return t
        return None

    def with_tier(self, override: UserTopologyOverride) -> "ComponentOverride":
        """Return a copy with the tier of the same id replaced (or appended)."""
        tiers = [t for t in (self.topology or ()) if t.id != override.id]
        tiers.append(override)
        return replace(self, topology=tuple(tiers))


@dataclass(frozen=True)
class ResolvedComponentPlan:
    """
    Component-level payload handed to the platform submission layer.
    """
    kind: ComponentKind
    topology: tuple[TopologyElement, ...]
    settings: ComponentSettings = field(default_factory=ComponentSettings)
    ref_id: Optional[str] = None
    region: Optional[str] = None
    version: Optional[str] = None
    elasticsearch_cluster_ref_id: Optional[str] = None
    template_id: Optional[str] = None
    autoscaling_enabled: Optional[bool] = None

    def element(self, identifier: str) -> Optional[TopologyElement]:
        for e in self.topology:
            if e.identifier == identifier:
                return e
        return None


@dataclass(frozen=True)
class LiveComponentState:
    """Current platform state of a component as read back for a refresh."""
    kind: ComponentKind
    plan: Optional[ResolvedComponentPlan] = None
    status: str = "started"

    @property
    def is_stopped(self) -> bool:
        return self.status.lower() == "stopped"
