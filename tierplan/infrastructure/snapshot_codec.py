"""
Snapshot Codec

Architectural Intent:
- Converts the plain JSON documents the CLI reads (template, user config,
  live state) into domain objects, and resolved plans or projected overrides
  back into plain dicts
- The only place that knows the document layout; domain services never see
  raw dicts

Document Layout:
- Components are keyed by kind name ("elasticsearch", "kibana", "apm",
  "integrations_server", "enterprise_search")
- Template and state sizes are either raw base units (8192), a size string
  ("8g") or a {"value", "resource"} object
- User config topology is a list of elements or a mapping of tier id to
  element; "memory_per_node" is accepted in place of "size"
- node_type_* flags accept booleans or the strings "true"/"false"
"""

from __future__ import annotations
import json
import logging
from typing import Any, Mapping, Optional

from tierplan.domain.entities.deployment_template import (
    DeploymentTemplate,
    DiscreteSizes,
    InstanceConfiguration,
    TemplateComponent,
)
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
from tierplan.domain.errors import InvalidNodeType, InvalidSettingsJSON
from tierplan.domain.value_objects.node_roles import NodeRoles, NodeTypes, RoleAssignment
from tierplan.domain.value_objects.topology_size import (
    DEFAULT_SIZE_RESOURCE,
    TopologySize,
    parse_size,
)

logger = logging.getLogger(__name__)

_SETTINGS_JSON_FIELDS = ("user_settings_json", "user_settings_override_json")
_SETTINGS_TEXT_FIELDS = ("user_settings_yaml", "user_settings_override_yaml", "docker_image")
_NODE_TYPE_FIELDS = ("data", "master", "ingest", "ml")
_COMPONENT_NAMES = frozenset(k.value for k in ComponentKind)


class SnapshotFormatError(ValueError):
    """A snapshot document does not have the expected layout."""


def _components(document: Mapping[str, Any]) -> dict[ComponentKind, Any]:
    """Component bodies keyed by kind; other top-level keys are not components."""
    components = {}
    for name, body in document.items():
        if name not in _COMPONENT_NAMES:
            if isinstance(body, dict):
                logger.debug("Ignoring non-component key %r", name)
            continue
        components[ComponentKind(name)] = body
    return components


def _size(raw: Any, resource: Optional[str] = None) -> TopologySize:
    if isinstance(raw, dict):
        return TopologySize(
            int(raw.get("value", 0)), raw.get("resource") or DEFAULT_SIZE_RESOURCE
        )
    resource = resource or DEFAULT_SIZE_RESOURCE
    if raw is None:
        return TopologySize(0, resource)
    if isinstance(raw, bool):
        raise SnapshotFormatError(f"invalid size {raw!r}")
    if isinstance(raw, int):
        return TopologySize(raw, resource)
    return TopologySize(parse_size(str(raw)), resource)


def _optional_size(raw: Any, resource: Optional[str] = None) -> Optional[TopologySize]:
    if raw is None:
        return None
    return _size(raw, resource)


def _json_object(field_name: str, raw: Any) -> Optional[dict[str, Any]]:
    if raw is None or raw == "":
        return None
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            raise InvalidSettingsJSON(field_name, str(e)) from e
    if not isinstance(raw, dict):
        raise InvalidSettingsJSON(
            field_name, f"expected a JSON object, got {type(raw).__name__}"
        )
    return raw


def _json_text(raw: Any) -> Optional[str]:
    if raw is None:
        return None
    if isinstance(raw, str):
        return raw
    return json.dumps(raw, sort_keys=True, separators=(",", ":"))


def _bool_flag(field_name: str, raw: Any) -> Optional[bool]:
    if raw is None or raw == "":
        return None
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str) and raw.lower() in ("true", "false"):
        return raw.lower() == "true"
    raise InvalidNodeType(field_name, raw)


def _drop_none(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


# ---------------------------------------------------------------------------
# Template / state documents
# ---------------------------------------------------------------------------


def decode_settings(raw: Optional[Mapping[str, Any]], field_prefix: str = "config") -> ComponentSettings:
    if not raw:
        return ComponentSettings()
    return ComponentSettings(
        user_settings_json=_json_object(
            f"{field_prefix}.user_settings_json", raw.get("user_settings_json")
        ),
        user_settings_override_json=_json_object(
            f"{field_prefix}.user_settings_override_json",
            raw.get("user_settings_override_json"),
        ),
        user_settings_yaml=raw.get("user_settings_yaml") or None,
        user_settings_override_yaml=raw.get("user_settings_override_yaml") or None,
        plugins=tuple(sorted(set(raw.get("plugins") or ()))),
        docker_image=raw.get("docker_image") or None,
    )


def _roles(raw: Mapping[str, Any]) -> Optional[RoleAssignment]:
    if raw.get("node_roles") is not None:
        return NodeRoles.of(raw["node_roles"])
    node_type = raw.get("node_type")
    if isinstance(node_type, dict):
        types = NodeTypes(
            **{
                flag: _bool_flag(f"node_type_{flag}", node_type.get(flag))
                for flag in _NODE_TYPE_FIELDS
            }
        )
        return None if types.is_empty else types
    return None


def decode_element(raw: Mapping[str, Any]) -> TopologyElement:
    autoscaling = raw.get("autoscaling") or {}
    identifier = raw.get("id") or raw.get("instance_configuration_id") or ""
    return TopologyElement(
        id=raw.get("id") or "",
        instance_configuration_id=raw.get("instance_configuration_id") or "",
        size=_size(raw.get("size"), raw.get("size_resource")),
        zone_count=int(raw.get("zone_count") or 0),
        roles=_roles(raw),
        autoscaling_min=_optional_size(
            autoscaling.get("min_size", autoscaling.get("min")),
            autoscaling.get("min_size_resource"),
        ),
        autoscaling_max=_optional_size(
            autoscaling.get("max_size", autoscaling.get("max")),
            autoscaling.get("max_size_resource"),
        ),
        autoscaling_policy_override=_json_object(
            f"{identifier}.autoscaling.policy_override_json",
            autoscaling.get("policy_override_json", autoscaling.get("policy_override")),
        ),
        settings=decode_settings(raw.get("config"), f"{identifier}.config"),
    )


def decode_instance_configuration(raw: Mapping[str, Any]) -> InstanceConfiguration:
    if not raw.get("id"):
        raise SnapshotFormatError("instance configuration has no id")
    sizes = raw.get("discrete_sizes")
    discrete = None
    if sizes is not None:
        discrete = DiscreteSizes(
            sizes=tuple(int(s) for s in sizes.get("sizes") or ()),
            default_size=int(sizes.get("default_size") or 0),
            resource=sizes.get("resource") or DEFAULT_SIZE_RESOURCE,
        )
    return InstanceConfiguration(
        id=raw["id"],
        discrete_sizes=discrete,
        max_zones=int(raw.get("max_zones") or 0),
        name=raw.get("name", ""),
    )


def decode_instance_configurations(raw: Any) -> tuple[InstanceConfiguration, ...]:
    if isinstance(raw, dict):
        raw = raw.get("instance_configurations") or []
    return tuple(decode_instance_configuration(ic) for ic in raw or ())


def decode_template(document: Mapping[str, Any]) -> DeploymentTemplate:
    if "id" not in document:
        raise SnapshotFormatError("deployment template document has no id")

    components = {}
    for kind in ComponentKind:
        body = document.get(kind.value)
        if body is None:
            continue
        components[kind] = TemplateComponent(
            kind=kind,
            topology=tuple(decode_element(e) for e in body.get("topology") or ()),
            settings=decode_settings(body.get("config")),
            ref_id=body.get("ref_id"),
            dedicated_masters_threshold=int(body.get("dedicated_masters_threshold") or 0),
        )

    return DeploymentTemplate(
        id=document["id"],
        components=components,
        instance_configurations=decode_instance_configurations(
            document.get("instance_configurations")
        ),
        name=document.get("name", ""),
    )


def decode_plan(kind: ComponentKind, raw: Mapping[str, Any]) -> ResolvedComponentPlan:
    return ResolvedComponentPlan(
        kind=kind,
        topology=tuple(decode_element(e) for e in raw.get("topology") or ()),
        settings=decode_settings(raw.get("config")),
        ref_id=raw.get("ref_id"),
        region=raw.get("region"),
        version=raw.get("version"),
        elasticsearch_cluster_ref_id=raw.get("elasticsearch_cluster_ref_id"),
        template_id=raw.get("template_id"),
        autoscaling_enabled=raw.get("autoscale"),
    )


def decode_state(document: Mapping[str, Any]) -> tuple[LiveComponentState, ...]:
    states = []
    for kind, body in _components(document).items():
        body = body or {}
        plan = body.get("plan")
        states.append(
            LiveComponentState(
                kind=kind,
                plan=decode_plan(kind, plan) if plan is not None else None,
                status=body.get("status") or "started",
            )
        )
    return tuple(states)


# ---------------------------------------------------------------------------
# User config documents
# ---------------------------------------------------------------------------


def decode_settings_override(raw: Optional[Mapping[str, Any]]) -> Optional[SettingsOverride]:
    if raw is None:
        return None
    plugins = raw.get("plugins")
    return SettingsOverride(
        user_settings_json=_json_text(raw.get("user_settings_json")),
        user_settings_override_json=_json_text(raw.get("user_settings_override_json")),
        user_settings_yaml=raw.get("user_settings_yaml"),
        user_settings_override_yaml=raw.get("user_settings_override_yaml"),
        plugins=tuple(plugins) if plugins is not None else None,
        docker_image=raw.get("docker_image"),
    )


def decode_autoscaling_override(raw: Optional[Mapping[str, Any]]) -> Optional[AutoscalingOverride]:
    if raw is None:
        return None
    return AutoscalingOverride(
        min_size=raw.get("min_size"),
        min_size_resource=raw.get("min_size_resource"),
        max_size=raw.get("max_size"),
        max_size_resource=raw.get("max_size_resource"),
        policy_override_json=_json_text(raw.get("policy_override_json")),
    )


def decode_topology_override(
    raw: Mapping[str, Any], tier_id: Optional[str] = None
) -> UserTopologyOverride:
    size = raw.get("size")
    if size is None:
        size = raw.get("memory_per_node")
    zone_count = raw.get("zone_count")
    node_roles = raw.get("node_roles")
    return UserTopologyOverride(
        id=raw.get("id") or tier_id,
        instance_configuration_id=raw.get("instance_configuration_id"),
        size=str(size) if size is not None else None,
        size_resource=raw.get("size_resource"),
        zone_count=int(zone_count) if zone_count is not None else None,
        node_roles=tuple(node_roles) if node_roles is not None else None,
        node_type_data=_bool_flag("node_type_data", raw.get("node_type_data")),
        node_type_master=_bool_flag("node_type_master", raw.get("node_type_master")),
        node_type_ingest=_bool_flag("node_type_ingest", raw.get("node_type_ingest")),
        node_type_ml=_bool_flag("node_type_ml", raw.get("node_type_ml")),
        autoscaling=decode_autoscaling_override(raw.get("autoscaling")),
        config=decode_settings_override(raw.get("config")),
    )


def decode_component_override(raw: Mapping[str, Any]) -> ComponentOverride:
    topology = raw.get("topology")
    tiers = None
    if isinstance(topology, dict):
        tiers = tuple(
            decode_topology_override(body or {}, tier_id)
            for tier_id, body in sorted(topology.items())
        )
    elif topology is not None:
        tiers = tuple(decode_topology_override(t) for t in topology)

    return ComponentOverride(
        ref_id=raw.get("ref_id"),
        region=raw.get("region"),
        elasticsearch_cluster_ref_id=raw.get("elasticsearch_cluster_ref_id"),
        topology=tiers,
        config=decode_settings_override(raw.get("config")),
        autoscale=_bool_flag("autoscale", raw.get("autoscale")),
    )


def decode_config(document: Mapping[str, Any]) -> dict[ComponentKind, ComponentOverride]:
    return {
        kind: decode_component_override(body or {})
        for kind, body in _components(document).items()
    }


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def encode_settings(settings: ComponentSettings) -> Optional[dict[str, Any]]:
    if settings.is_empty:
        return None
    return _drop_none(
        {
            "user_settings_json": settings.user_settings_json or None,
            "user_settings_override_json": settings.user_settings_override_json or None,
            "user_settings_yaml": settings.user_settings_yaml,
            "user_settings_override_yaml": settings.user_settings_override_yaml,
            "plugins": list(settings.plugins) or None,
            "docker_image": settings.docker_image,
        }
    )


def _encode_size(size: Optional[TopologySize]) -> Optional[dict[str, Any]]:
    if size is None:
        return None
    return {"value": size.value, "resource": size.resource}


def encode_element(element: TopologyElement) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": element.id or None,
        "instance_configuration_id": element.instance_configuration_id or None,
        "size": _encode_size(element.size),
        "zone_count": element.zone_count,
    }
    if isinstance(element.roles, NodeRoles):
        data["node_roles"] = list(element.roles.roles)
    elif isinstance(element.roles, NodeTypes):
        data["node_type"] = _drop_none(
            {flag: element.roles.flag(flag) for flag in _NODE_TYPE_FIELDS}
        )

    autoscaling = _drop_none(
        {
            "min": _encode_size(element.autoscaling_min),
            "max": _encode_size(element.autoscaling_max),
            "policy_override": element.autoscaling_policy_override or None,
        }
    )
    data["autoscaling"] = autoscaling or None
    data["config"] = encode_settings(element.settings)
    return _drop_none(data)


def encode_plan(plan: ResolvedComponentPlan) -> dict[str, Any]:
    return _drop_none(
        {
            "ref_id": plan.ref_id,
            "region": plan.region,
            "version": plan.version,
            "template_id": plan.template_id,
            "elasticsearch_cluster_ref_id": plan.elasticsearch_cluster_ref_id,
            "autoscale": plan.autoscaling_enabled,
            "config": encode_settings(plan.settings),
            "topology": [encode_element(e) for e in plan.topology],
        }
    )


def encode_plans(plans: Mapping[ComponentKind, ResolvedComponentPlan]) -> dict[str, Any]:
    return {kind.value: encode_plan(plan) for kind, plan in plans.items()}


def encode_settings_override(config: Optional[SettingsOverride]) -> Optional[dict[str, Any]]:
    if config is None:
        return None
    data = _drop_none(
        {
            "user_settings_json": config.user_settings_json,
            "user_settings_override_json": config.user_settings_override_json,
            "user_settings_yaml": config.user_settings_yaml,
            "user_settings_override_yaml": config.user_settings_override_yaml,
            "plugins": list(config.plugins) if config.plugins is not None else None,
            "docker_image": config.docker_image,
        }
    )
    return data or None


def encode_topology_override(override: UserTopologyOverride) -> dict[str, Any]:
    autoscaling = None
    if override.autoscaling is not None and not override.autoscaling.is_empty:
        a = override.autoscaling
        autoscaling = _drop_none(
            {
                "min_size": a.min_size,
                "min_size_resource": a.min_size_resource,
                "max_size": a.max_size,
                "max_size_resource": a.max_size_resource,
                "policy_override_json": a.policy_override_json,
            }
        )
    return _drop_none(
        {
            "id": override.id,
            "instance_configuration_id": override.instance_configuration_id,
            "size": override.size,
            "size_resource": override.size_resource,
            "zone_count": override.zone_count,
            "node_roles": list(override.node_roles)
            if override.node_roles is not None
            else None,
            "node_type_data": override.node_type_data,
            "node_type_master": override.node_type_master,
            "node_type_ingest": override.node_type_ingest,
            "node_type_ml": override.node_type_ml,
            "autoscaling": autoscaling,
            "config": encode_settings_override(override.config),
        }
    )


def encode_component_override(override: ComponentOverride) -> dict[str, Any]:
    return _drop_none(
        {
            "ref_id": override.ref_id,
            "region": override.region,
            "elasticsearch_cluster_ref_id": override.elasticsearch_cluster_ref_id,
            "autoscale": override.autoscale,
            "config": encode_settings_override(override.config),
            "topology": [encode_topology_override(t) for t in override.topology]
            if override.topology is not None
            else None,
        }
    )
