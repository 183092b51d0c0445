"""
Resolution DTOs

Architectural Intent:
- Data Transfer Objects for the resolve and project use case boundaries
- Input validation at the application boundary
"""

from dataclasses import dataclass, field
from typing import Mapping, Optional

from tierplan.domain.entities.deployment_template import (
    DeploymentTemplate,
    InstanceConfiguration,
)
from tierplan.domain.entities.topology import (
    ComponentKind,
    ComponentOverride,
    LiveComponentState,
    ResolvedComponentPlan,
)
from tierplan.domain.services.dedicated_tier_controller import DedicatedTierDecision


@dataclass(frozen=True)
class ResolveDeploymentRequest:
    template: DeploymentTemplate
    components: Mapping[ComponentKind, ComponentOverride]
    version: Optional[str] = None
    previous_version: Optional[str] = None
    # Planned data-processing override from an earlier pass, if any.
    planned_elasticsearch: Optional[ComponentOverride] = None
    instance_configurations: tuple[InstanceConfiguration, ...] = ()
    migrate_to_latest_hardware: bool = False

    def __post_init__(self) -> None:
        if self.template is None:
            raise ValueError("template cannot be empty")
        if ComponentKind.ELASTICSEARCH not in self.components:
            raise ValueError("components must include elasticsearch")


@dataclass(frozen=True)
class ResolveDeploymentResponse:
    plans: Mapping[ComponentKind, ResolvedComponentPlan]
    dedicated_tier: Optional[DedicatedTierDecision] = None


@dataclass(frozen=True)
class ProjectDeploymentRequest:
    states: tuple[LiveComponentState, ...]

    def __post_init__(self) -> None:
        if not self.states:
            raise ValueError("states cannot be empty")


@dataclass(frozen=True)
class ProjectDeploymentResponse:
    components: Mapping[ComponentKind, ComponentOverride] = field(default_factory=dict)
    version: Optional[str] = None
    deployment_template_id: Optional[str] = None

