"""
Topology Expander

Architectural Intent:
- Merges a caller's partial ComponentOverride with a deployment template's
  defaults into a fully resolved ResolvedComponentPlan
- Pure and synchronous: no I/O, no memoization; every call builds fresh
  elements from fresh inputs
- Minimums, zone floors and the role-migration threshold arrive through the
  injected ResolutionPolicy

Domain Logic:
- Defaulting rules are applied to the template elements first; a value the
  caller sets explicitly is taken as given
- No topology overrides: the defaulted template elements are returned
- With overrides: each one is matched to a template element and overlaid
  (size, zone count, roles, autoscaling, settings). Unreferenced template
  elements are dropped, except for data tiers, which are always carried so
  that disabled tiers stay visible to the dedicated-tier controller
- Roles are produced in the single representation chosen by behavior_for()
- When a non-zero master-only or ingest-only tier exists, that role is taken
  off the data tier that also carries master
"""

from __future__ import annotations
from dataclasses import replace
import json
import logging
from typing import Any, Optional

from tierplan.domain.entities.deployment_template import DeploymentTemplate
from tierplan.domain.entities.topology import (
    AutoscalingOverride,
    ComponentKind,
    ComponentOverride,
    ComponentSettings,
    ResolvedComponentPlan,
    SettingsOverride,
    TopologyElement,
    UserTopologyOverride,
)
from tierplan.domain.errors import (
    InvalidSettingsJSON,
    InvalidTopologySize,
    InvalidZoneCount,
)
from tierplan.domain.services.defaulting_rules import (
    ComponentPolicy,
    ResolutionPolicy,
    default_policy,
    default_topology,
)
from tierplan.domain.services.node_role_resolver import NodeRoleResolver
from tierplan.domain.services.topology_matcher import TopologyMatcher
from tierplan.domain.value_objects.node_roles import (
    DATA_ROLE_PREFIX,
    INGEST_ROLE,
    MASTER_ROLE,
    NodeRoles,
    NodeTypes,
)
from tierplan.domain.value_objects.stack_version import NodeRoleMode
from tierplan.domain.value_objects.topology_size import TopologySize, parse_size

logger = logging.getLogger(__name__)

DEFAULT_ELASTICSEARCH_REF_ID = "main-elasticsearch"


def default_ref_id(kind: ComponentKind) -> str:
    return "main-" + kind.value.replace("_", "-")


def decode_settings_json(field_name: str, raw: str) -> dict[str, Any]:
    """Decode a free-form JSON settings blob, which must hold an object."""
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as e:
        raise InvalidSettingsJSON(field_name, str(e)) from e
    if not isinstance(value, dict):
        raise InvalidSettingsJSON(
            field_name, f"expected a JSON object, got {type(value).__name__}"
        )
    return value


def overlay_settings(
    base: ComponentSettings,
    override: Optional[SettingsOverride],
    field_prefix: str = "config",
) -> ComponentSettings:
    """Replace each settings field the override sets; empty JSON strings are unset."""
    if override is None:
        return base

    changes: dict[str, Any] = {}
    for name in ("user_settings_json", "user_settings_override_json"):
        raw = getattr(override, name)
        if raw:
            changes[name] = decode_settings_json(f"{field_prefix}.{name}", raw)
    for name in ("user_settings_yaml", "user_settings_override_yaml", "docker_image"):
        value = getattr(override, name)
        if value is not None:
            changes[name] = value
    if override.plugins is not None:
        changes["plugins"] = tuple(sorted(set(override.plugins)))

    return replace(base, **changes) if changes else base


class TopologyExpander:
    """
    Resolves one component at a time against a deployment template.
    """

    def __init__(
        self,
        policy: Optional[ResolutionPolicy] = None,
        role_resolver: Optional[NodeRoleResolver] = None,
        matcher: Optional[TopologyMatcher] = None,
    ):
        self._policy = policy or default_policy()
        self._roles = role_resolver or NodeRoleResolver(
            self._policy.node_roles_minimum_version
        )
        self._matcher = matcher or TopologyMatcher()

    def mode_for(
        self, version: Optional[str], previous_version: Optional[str] = None
    ) -> NodeRoleMode:
        # Without a version the current representation is produced.
        if not version:
            return NodeRoleMode.NODE_ROLES
        return self._roles.mode_for(version, previous_version)

    def expand(
        self,
        template: DeploymentTemplate,
        kind: ComponentKind,
        override: Optional[ComponentOverride] = None,
        version: Optional[str] = None,
        previous_version: Optional[str] = None,
    ) -> ResolvedComponentPlan:
        """
        Resolve a component's topology and settings.

        Raises:
            UnsupportedComponentForTemplate: template has no topology for kind
            UnmatchedTopologyIdentifier, AmbiguousTopologyOverride: matching failed
            InvalidSizeFormat, InvalidTopologySize, InvalidZoneCount,
            InvalidSettingsJSON: an override value is malformed
        """
        component = template.component(kind)
        policy = self._policy.for_component(kind)
        mode = self.mode_for(version, previous_version)
        override = override or ComponentOverride()

        base = default_topology(component.topology, policy)
        if not override.topology:
            topology = tuple(self._normalize_roles(kind, mode, e) for e in base)
        else:
            topology = self._expand_overrides(kind, mode, policy, override.topology, base)

        if kind is ComponentKind.ELASTICSEARCH and mode is NodeRoleMode.NODE_ROLES:
            topology = prune_dedicated_tier_roles(topology)

        logger.debug(
            "Expanded %s: %d topology element(s) in %s mode",
            kind.value,
            len(topology),
            mode.name,
            extra={"component": kind.value},
        )
        return ResolvedComponentPlan(
            kind=kind,
            topology=topology,
            settings=overlay_settings(component.settings, override.config),
            ref_id=override.ref_id or component.ref_id or default_ref_id(kind),
            region=override.region,
            version=version,
            elasticsearch_cluster_ref_id=self._cluster_ref_id(kind, override),
            template_id=template.id,
            autoscaling_enabled=override.autoscale,
        )

    def _cluster_ref_id(
        self, kind: ComponentKind, override: ComponentOverride
    ) -> Optional[str]:
        if kind is ComponentKind.ELASTICSEARCH:
            return None
        return override.elasticsearch_cluster_ref_id or DEFAULT_ELASTICSEARCH_REF_ID

    def _expand_overrides(
        self,
        kind: ComponentKind,
        mode: NodeRoleMode,
        policy: ComponentPolicy,
        overrides: tuple[UserTopologyOverride, ...],
        base: tuple[TopologyElement, ...],
    ) -> tuple[TopologyElement, ...]:
        pairs = self._matcher.match_all(kind, overrides, base)
        overlaid = [
            (element, self._overlay(kind, mode, policy, override, element))
            for override, element in pairs
        ]

        if not policy.keep_unreferenced_tiers:
            return tuple(resolved for _, resolved in overlaid)

        by_element = {id(element): resolved for element, resolved in overlaid}
        return tuple(
            by_element.get(id(e)) or self._normalize_roles(kind, mode, e)
            for e in base
        )

    def _normalize_roles(
        self, kind: ComponentKind, mode: NodeRoleMode, element: TopologyElement
    ) -> TopologyElement:
        if not kind.matches_by_tier_id or element.roles is None:
            return element
        roles = self._roles.resolve_for_mode(mode, template=element.roles)
        return element if roles == element.roles else replace(element, roles=roles)

    def _overlay(
        self,
        kind: ComponentKind,
        mode: NodeRoleMode,
        policy: ComponentPolicy,
        override: UserTopologyOverride,
        element: TopologyElement,
    ) -> TopologyElement:
        identifier = element.identifier

        size = element.size
        if override.size is not None:
            value = parse_size(override.size)
            if value < 0:
                raise InvalidTopologySize(identifier, value)
            size = TopologySize(value, override.size_resource or size.resource)
        elif override.size_resource:
            size = TopologySize(size.value, override.size_resource)

        zone_count = element.zone_count
        if override.zone_count is not None:
            if override.zone_count < 1:
                raise InvalidZoneCount(identifier, override.zone_count)
            zone_count = override.zone_count

        roles = element.roles
        if kind.matches_by_tier_id:
            node_types = None
            if override.has_node_types:
                node_types = NodeTypes(
                    data=override.node_type_data,
                    master=override.node_type_master,
                    ingest=override.node_type_ingest,
                    ml=override.node_type_ml,
                )
            roles = self._roles.resolve_for_mode(
                mode, override.node_roles, node_types, element.roles
            )

        # A tier matched by id may move to another hardware profile.
        instance_configuration_id = element.instance_configuration_id
        if kind.matches_by_tier_id and override.id and override.instance_configuration_id:
            instance_configuration_id = override.instance_configuration_id

        resolved = replace(
            element,
            instance_configuration_id=instance_configuration_id,
            size=size,
            zone_count=zone_count,
            roles=roles,
            settings=overlay_settings(
                element.settings, override.config, f"{identifier}.config"
            ),
        )
        return self._overlay_autoscaling(
            resolved, override.autoscaling, policy.default_size_resource
        )

    def _overlay_autoscaling(
        self,
        element: TopologyElement,
        autoscaling: Optional[AutoscalingOverride],
        default_resource: str,
    ) -> TopologyElement:
        if autoscaling is None or autoscaling.is_empty:
            return element

        identifier = element.identifier

        maximum = element.autoscaling_max
        if autoscaling.max_size is not None:
            resource = autoscaling.max_size_resource or (
                maximum.resource if maximum else default_resource
            )
            maximum = TopologySize(_bound(identifier, autoscaling.max_size), resource)
        elif autoscaling.max_size_resource and maximum is not None:
            maximum = replace(maximum, resource=autoscaling.max_size_resource)

        if autoscaling.min_size is not None:
            resource = autoscaling.min_size_resource or (
                maximum.resource if maximum else default_resource
            )
            minimum = TopologySize(_bound(identifier, autoscaling.min_size), resource)
        else:
            minimum = element.autoscaling_min
            if (
                minimum is not None
                and maximum is not None
                and minimum.resource != maximum.resource
            ):
                logger.debug(
                    "Dropping autoscaling minimum of %s: resource %s does not match %s",
                    identifier,
                    minimum.resource,
                    maximum.resource,
                    extra={"tier": identifier},
                )
                minimum = None

        policy_override = element.autoscaling_policy_override
        if autoscaling.policy_override_json:
            policy_override = decode_settings_json(
                f"{identifier}.autoscaling.policy_override_json",
                autoscaling.policy_override_json,
            )

        return replace(
            element,
            autoscaling_min=minimum,
            autoscaling_max=maximum,
            autoscaling_policy_override=policy_override,
        )


def _bound(identifier: str, raw: str) -> int:
    value = parse_size(raw)
    if value < 0:
        raise InvalidTopologySize(identifier, value)
    return value


def prune_dedicated_tier_roles(
    topology: tuple[TopologyElement, ...],
) -> tuple[TopologyElement, ...]:
    """Drop master/ingest from the data tier when a dedicated tier provides them."""
    data_tier: Optional[TopologyElement] = None
    has_master_tier = False
    has_ingest_tier = False

    for element in topology:
        if not isinstance(element.roles, NodeRoles) or element.size.value <= 0:
            continue
        roles = element.roles
        has_data = any(r.startswith(DATA_ROLE_PREFIX) for r in roles.roles)
        if not has_data and roles.has(MASTER_ROLE):
            has_master_tier = True
        if not has_data and roles.has(INGEST_ROLE):
            has_ingest_tier = True
        if has_data and roles.has(MASTER_ROLE):
            data_tier = element

    if data_tier is None or not (has_master_tier or has_ingest_tier):
        return topology

    roles = data_tier.roles
    if has_ingest_tier:
        roles = roles.without(INGEST_ROLE)
    if has_master_tier:
        roles = roles.without(MASTER_ROLE)
    logger.debug(
        "Dedicated tier present: %s now carries roles %s",
        data_tier.identifier,
        list(roles.roles),
        extra={
            "component": ComponentKind.ELASTICSEARCH.value,
            "tier": data_tier.identifier,
        },
    )
    return tuple(
        replace(e, roles=roles) if e is data_tier else e for e in topology
    )
