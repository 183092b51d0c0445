"""Global test configuration.

Provides deployment template fixtures shared by the domain, application,
presentation and integration tests.
"""

from dataclasses import replace

import pytest

from tierplan.domain.entities.deployment_template import (
    DeploymentTemplate,
    DiscreteSizes,
    InstanceConfiguration,
    TemplateComponent,
)
from tierplan.domain.entities.topology import ComponentKind, TopologyElement
from tierplan.domain.value_objects.node_roles import NodeRoles, NodeTypes
from tierplan.domain.value_objects.topology_size import TopologySize

_STANDARD_SIZES = (1024, 2048, 4096, 8192, 15360, 29696, 59392)


def _ic(ic_id: str, default_size: int, max_zones: int = 3) -> InstanceConfiguration:
    return InstanceConfiguration(
        id=ic_id,
        discrete_sizes=DiscreteSizes(_STANDARD_SIZES, default_size),
        max_zones=max_zones,
    )


INSTANCE_CONFIGURATIONS = (
    _ic("aws.data.highio.i3", 8192),
    _ic("aws.data.highstorage.d3", 4096),
    _ic("aws.master.r5d", 4096),
    _ic("aws.coordinating.m5d", 2048),
    _ic("aws.ml.m5d", 1024),
    _ic("aws.kibana.r5d", 1024),
    _ic("aws.apm.r5d", 512, max_zones=2),
    _ic("aws.integrationsserver.r5d", 1024),
    _ic("aws.enterprisesearch.m5d", 2048),
)


def _tier(tier_id, ic_id, size, zones, roles, **kwargs) -> TopologyElement:
    return TopologyElement(
        id=tier_id,
        instance_configuration_id=ic_id,
        size=TopologySize(size),
        zone_count=zones,
        roles=roles,
        **kwargs,
    )


def build_template(
    threshold: int = 6,
    master_size: int = 0,
    legacy_roles: bool = False,
) -> DeploymentTemplate:
    if legacy_roles:
        hot_roles = NodeTypes(data=True, master=True, ingest=True, ml=False)
        warm_roles = NodeTypes(data=True, master=False, ingest=False, ml=False)
        master_roles = NodeTypes(data=False, master=True, ingest=False, ml=False)
        coordinating_roles = NodeTypes(data=False, master=False, ingest=True, ml=False)
        ml_roles = NodeTypes(data=False, master=False, ingest=False, ml=True)
    else:
        hot_roles = NodeRoles.of(
            ["master", "ingest", "transform", "data_hot", "remote_cluster_client", "data_content"]
        )
        warm_roles = NodeRoles.of(["data_warm", "remote_cluster_client"])
        master_roles = NodeRoles.of(["master"])
        coordinating_roles = NodeRoles.of(["ingest", "remote_cluster_client"])
        ml_roles = NodeRoles.of(["ml", "remote_cluster_client"])

    elasticsearch = TemplateComponent(
        kind=ComponentKind.ELASTICSEARCH,
        dedicated_masters_threshold=threshold,
        topology=(
            _tier(
                "hot_content", "aws.data.highio.i3", 8192, 2, hot_roles,
                autoscaling_max=TopologySize(118784),
            ),
            _tier(
                "warm", "aws.data.highstorage.d3", 0, 2, warm_roles,
                autoscaling_max=TopologySize(15 * 1024 * 1024, "storage"),
            ),
            _tier("master", "aws.master.r5d", master_size, 3, master_roles),
            _tier("coordinating", "aws.coordinating.m5d", 0, 2, coordinating_roles),
            _tier(
                "ml", "aws.ml.m5d", 0, 1, ml_roles,
                autoscaling_min=TopologySize(0),
                autoscaling_max=TopologySize(61440),
            ),
        ),
    )

    def single(kind, ic_id, size, zones):
        return TemplateComponent(
            kind=kind,
            topology=(
                TopologyElement(
                    instance_configuration_id=ic_id,
                    size=TopologySize(size),
                    zone_count=zones,
                ),
            ),
        )

    return DeploymentTemplate(
        id="aws-io-optimized-v2",
        name="I/O Optimized",
        components={
            ComponentKind.ELASTICSEARCH: elasticsearch,
            ComponentKind.KIBANA: single(ComponentKind.KIBANA, "aws.kibana.r5d", 1024, 1),
            ComponentKind.APM: single(ComponentKind.APM, "aws.apm.r5d", 512, 1),
            ComponentKind.INTEGRATIONS_SERVER: single(
                ComponentKind.INTEGRATIONS_SERVER, "aws.integrationsserver.r5d", 1024, 1
            ),
            ComponentKind.ENTERPRISE_SEARCH: single(
                ComponentKind.ENTERPRISE_SEARCH, "aws.enterprisesearch.m5d", 2048, 2
            ),
        },
        instance_configurations=INSTANCE_CONFIGURATIONS,
    )


@pytest.fixture
def template() -> DeploymentTemplate:
    return build_template()


@pytest.fixture
def legacy_template() -> DeploymentTemplate:
    return build_template(legacy_roles=True)


@pytest.fixture
def make_template():
    return build_template


@pytest.fixture
def without_component():
    """Return a copy of a template without the given component."""

    def _without(template: DeploymentTemplate, kind: ComponentKind) -> DeploymentTemplate:
        components = {k: v for k, v in template.components.items() if k is not kind}
        return replace(template, components=components)

    return _without


@pytest.fixture
def template_document() -> dict:
    """The standard template as a JSON document."""
    return {
        "id": "aws-io-optimized-v2",
        "name": "I/O Optimized",
        "instance_configurations": [
            {
                "id": ic.id,
                "max_zones": ic.max_zones,
                "discrete_sizes": {
                    "sizes": list(ic.discrete_sizes.sizes),
                    "default_size": ic.discrete_sizes.default_size,
                    "resource": "memory",
                },
            }
            for ic in INSTANCE_CONFIGURATIONS
        ],
        "elasticsearch": {
            "dedicated_masters_threshold": 6,
            "topology": [
                {
                    "id": "hot_content",
                    "instance_configuration_id": "aws.data.highio.i3",
                    "size": "8g",
                    "zone_count": 2,
                    "node_roles": [
                        "master", "ingest", "transform", "data_hot",
                        "remote_cluster_client", "data_content",
                    ],
                    "autoscaling": {"max_size": "116g"},
                },
                {
                    "id": "warm",
                    "instance_configuration_id": "aws.data.highstorage.d3",
                    "size": 0,
                    "zone_count": 2,
                    "node_roles": ["data_warm", "remote_cluster_client"],
                },
                {
                    "id": "master",
                    "instance_configuration_id": "aws.master.r5d",
                    "size": 0,
                    "zone_count": 3,
                    "node_roles": ["master"],
                },
                {
                    "id": "coordinating",
                    "instance_configuration_id": "aws.coordinating.m5d",
                    "size": 0,
                    "zone_count": 2,
                    "node_roles": ["ingest", "remote_cluster_client"],
                },
            ],
        },
        "kibana": {
            "topology": [
                {"instance_configuration_id": "aws.kibana.r5d", "size": 1024, "zone_count": 1}
            ]
        },
        "apm": {
            "topology": [
                {"instance_configuration_id": "aws.apm.r5d", "size": "0.5g", "zone_count": 1}
            ]
        },
    }
