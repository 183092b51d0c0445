"""
Deployment Template Entity

Architectural Intent:
- Read-only catalog of default topology elements per component kind and the
  instance configurations (hardware profiles) they reference
- Loaded once per resolution pass and never mutated

Design Decisions:
- Components are keyed by ComponentKind; a kind missing from the template
  means the template cannot host that component
- The dedicated-tier threshold lives on the data-processing component
  (0 disables automatic management of the coordination tier)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Mapping, Optional

from tierplan.domain.entities.topology import (
    ComponentKind,
    ComponentSettings,
    TopologyElement,
)
from tierplan.domain.errors import UnsupportedComponentForTemplate
from tierplan.domain.value_objects.topology_size import DEFAULT_SIZE_RESOURCE


@dataclass(frozen=True)
class DiscreteSizes:
    sizes: tuple[int, ...] = ()
    default_size: int = 0
    resource: str = DEFAULT_SIZE_RESOURCE

    @property
    def max_size(self) -> int:
        return max(self.sizes) if self.sizes else 0


@dataclass(frozen=True)
class InstanceConfiguration:
    """Platform metadata for a hardware profile."""
    id: str
    discrete_sizes: Optional[DiscreteSizes] = None
    max_zones: int = 0
    name: str = ""


@dataclass(frozen=True)
class TemplateComponent:
    kind: ComponentKind
    topology: tuple[TopologyElement, ...] = ()
    settings: ComponentSettings = field(default_factory=ComponentSettings)
    ref_id: Optional[str] = None
    dedicated_masters_threshold: int = 0


@dataclass(frozen=True)
class DeploymentTemplate:
    id: str
    components: Mapping[ComponentKind, TemplateComponent] = field(default_factory=dict)
    instance_configurations: tuple[InstanceConfiguration, ...] = ()
    name: str = ""

    def has_component(self, kind: ComponentKind) -> bool:
        return kind in self.components and bool(self.components[kind].topology)

    def component(self, kind: ComponentKind) -> TemplateComponent:
        if not self.has_component(kind):
            raise UnsupportedComponentForTemplate(kind.value, self.id)
        return self.components[kind]

    def instance_configuration(self, ic_id: str) -> Optional[InstanceConfiguration]:
        for ic in self.instance_configurations:
            if ic.id == ic_id:
                return ic
        return None

    def tier(self, tier_id: str) -> Optional[TopologyElement]:
        es = self.components.get(ComponentKind.ELASTICSEARCH)
        if es is None:
            return None
        for element in es.topology:
            if element.id == tier_id:
                return element
        return None

    def tier_instance_configuration(self, tier_id: str) -> Optional[InstanceConfiguration]:
        """Instance configuration the template assigns to a data tier."""
        element = self.tier(tier_id)
        if element is None:
            return None
        return self.instance_configuration(element.instance_configuration_id)

    @property
    def dedicated_masters_threshold(self) -> int:
        es = self.components.get(ComponentKind.ELASTICSEARCH)
        return es.dedicated_masters_threshold if es else 0
