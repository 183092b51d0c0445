"""
Topology Projector

Architectural Intent:
- Inverse of the TopologyExpander: turns live plan state back into the
  declarative override shape so refresh/diff cycles compare like with like
- Left inverse of expansion for every value expansion can produce

Domain Logic:
- Zombie suppression: elements with zero size never appear in the output
- Size is written in "g" form only for the component's default resource
- Roles mirror whichever representation the plan carries; the other one is
  never synthesized
- Settings that are all empty project to None rather than an empty object
- Data tiers are emitted sorted by tier id
- Components without a plan, or whose status is "stopped", are skipped
"""

from __future__ import annotations
import json
import logging
from typing import Iterable, Optional

from tierplan.domain.entities.topology import (
    AutoscalingOverride,
    ComponentKind,
    ComponentOverride,
    ComponentSettings,
    LiveComponentState,
    ResolvedComponentPlan,
    SettingsOverride,
    TopologyElement,
    UserTopologyOverride,
)
from tierplan.domain.services.defaulting_rules import ResolutionPolicy, default_policy
from tierplan.domain.value_objects.node_roles import NodeRoles, NodeTypes
from tierplan.domain.value_objects.topology_size import format_size

logger = logging.getLogger(__name__)


def _encode_json(value: Optional[dict]) -> Optional[str]:
    if not value:
        return None
    return json.dumps(value, sort_keys=True, separators=(",", ":"))


def project_settings(settings: ComponentSettings) -> Optional[SettingsOverride]:
    if settings.is_empty:
        return None
    return SettingsOverride(
        user_settings_json=_encode_json(settings.user_settings_json),
        user_settings_override_json=_encode_json(settings.user_settings_override_json),
        user_settings_yaml=settings.user_settings_yaml or None,
        user_settings_override_yaml=settings.user_settings_override_yaml or None,
        plugins=tuple(settings.plugins) or None,
        docker_image=settings.docker_image or None,
    )


def project_autoscaling(element: TopologyElement) -> Optional[AutoscalingOverride]:
    autoscaling = AutoscalingOverride(
        min_size=format_size(element.autoscaling_min.value)
        if element.autoscaling_min is not None
        else None,
        min_size_resource=element.autoscaling_min.resource
        if element.autoscaling_min is not None
        else None,
        max_size=format_size(element.autoscaling_max.value)
        if element.autoscaling_max is not None
        else None,
        max_size_resource=element.autoscaling_max.resource
        if element.autoscaling_max is not None
        else None,
        policy_override_json=_encode_json(element.autoscaling_policy_override),
    )
    return None if autoscaling.is_empty else autoscaling


class TopologyProjector:
    """Projects resolved or live plans into declarative overrides."""

    def __init__(self, policy: Optional[ResolutionPolicy] = None):
        self._policy = policy or default_policy()

    def project_element(
        self, kind: ComponentKind, element: TopologyElement
    ) -> Optional[UserTopologyOverride]:
        if element.size.is_zero:
            return None

        default_resource = self._policy.for_component(kind).default_size_resource
        size = None
        if element.size.resource == default_resource:
            size = format_size(element.size.value)

        node_roles = None
        node_types = NodeTypes()
        if isinstance(element.roles, NodeRoles):
            node_roles = element.roles.roles
        elif isinstance(element.roles, NodeTypes):
            node_types = element.roles

        return UserTopologyOverride(
            id=(element.id or None) if kind.matches_by_tier_id else None,
            instance_configuration_id=element.instance_configuration_id or None,
            size=size,
            zone_count=element.zone_count,
            node_roles=node_roles,
            node_type_data=node_types.data,
            node_type_master=node_types.master,
            node_type_ingest=node_types.ingest,
            node_type_ml=node_types.ml,
            autoscaling=project_autoscaling(element),
            config=project_settings(element.settings),
        )

    def project_topology(
        self, plan: ResolvedComponentPlan
    ) -> tuple[UserTopologyOverride, ...]:
        elements: Iterable[TopologyElement] = plan.topology
        if plan.kind.matches_by_tier_id:
            elements = sorted(elements, key=lambda e: e.id)

        projected = []
        for element in elements:
            override = self.project_element(plan.kind, element)
            if override is None:
                logger.debug(
                    "Suppressing zero-size %s element %s",
                    plan.kind.value,
                    element.identifier,
                    extra={"component": plan.kind.value, "tier": element.identifier},
                )
                continue
            projected.append(override)
        return tuple(projected)

    def project_component(self, plan: ResolvedComponentPlan) -> ComponentOverride:
        topology = self.project_topology(plan)
        return ComponentOverride(
            ref_id=plan.ref_id,
            region=plan.region,
            elasticsearch_cluster_ref_id=plan.elasticsearch_cluster_ref_id,
            topology=topology or None,
            config=project_settings(plan.settings),
            autoscale=plan.autoscaling_enabled,
        )

    def project_deployment(
        self, states: Iterable[LiveComponentState]
    ) -> dict[ComponentKind, ComponentOverride]:
        projected: dict[ComponentKind, ComponentOverride] = {}
        for state in states:
            if state.plan is None or state.is_stopped:
                logger.debug(
                    "Skipping %s: no running plan (status %s)",
                    state.kind.value,
                    state.status,
                    extra={"component": state.kind.value},
                )
                continue
            projected[state.kind] = self.project_component(state.plan)
        return projected
