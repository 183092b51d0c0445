"""
Dedicated-Tier Threshold Controller

Architectural Intent:
- Pre-resolution adjustment of the data-processing component's planned
  topology: decides whether the dedicated coordination (master) tier should
  be switched on or off from the computed cluster size
- Best-effort heuristic control loop, not a capacity planner; the platform's
  own validation may still disagree in edge cases

Domain Logic:
- Threshold comes from the template; 0 disables the controller
- A master tier present in the caller's configuration is never touched
- nodes = sum over contributing tiers of zone_count * nodes_per_zone, where
  nodes_per_zone = 1 if size < max_size (or max_size unknown), else
  size // max_size
- Below the threshold the master tier is sized to zero
- At or above it, a disabled master tier (or any master tier when migrating
  to the latest hardware) gets the instance configuration's default size and
  max zone count, preferring live metadata over the template
"""

from __future__ import annotations
from dataclasses import dataclass, replace
import logging
from typing import Optional, Sequence

from tierplan.domain.entities.deployment_template import (
    DeploymentTemplate,
    InstanceConfiguration,
)
from tierplan.domain.entities.topology import ComponentOverride, UserTopologyOverride
from tierplan.domain.value_objects.topology_size import format_size, parse_size

logger = logging.getLogger(__name__)

MASTER_TIER_ID = "master"
CONTRIBUTING_TIER_IDS = ("hot_content", "coordinating", "warm", "cold", "frozen")
DISABLED_SIZE = "0g"

_LOG_CONTEXT = {"component": "elasticsearch", "tier": MASTER_TIER_ID}


@dataclass(frozen=True)
class DedicatedTierDecision:
    enabled: bool
    size: Optional[str] = None
    zone_count: Optional[int] = None


def nodes_per_zone(size: int, max_size: int) -> int:
    if max_size == 0 or size < max_size:
        return 1
    return size // max_size


class DedicatedTierController:
    """Switches the dedicated master tier on or off based on cluster size."""

    def tier_size_and_zones(
        self,
        tier_id: str,
        planned: ComponentOverride,
        template: DeploymentTemplate,
    ) -> tuple[int, int]:
        """Planned size and zone count of a tier, falling back to the template."""
        override = planned.tier(tier_id)
        default = template.tier(tier_id)

        size = default.size.value if default is not None else 0
        zones = default.zone_count if default is not None else 0
        if override is not None and override.size is not None:
            size = parse_size(override.size)
        if override is not None and override.zone_count is not None:
            zones = override.zone_count
        return size, zones

    def count_nodes(
        self, planned: ComponentOverride, template: DeploymentTemplate
    ) -> int:
        total = 0
        for tier_id in CONTRIBUTING_TIER_IDS:
            if planned.tier(tier_id) is None:
                continue
            size, zones = self.tier_size_and_zones(tier_id, planned, template)
            ic = template.tier_instance_configuration(tier_id)
            max_size = ic.discrete_sizes.max_size if ic and ic.discrete_sizes else 0
            if size > 0 and zones > 0:
                total += zones * nodes_per_zone(size, max_size)
        return total

    def master_is_enabled(
        self, planned: ComponentOverride, template: DeploymentTemplate
    ) -> bool:
        if planned.tier(MASTER_TIER_ID) is None:
            return False
        size, zones = self.tier_size_and_zones(MASTER_TIER_ID, planned, template)
        return size > 0 and zones > 0

    def reconcile(
        self,
        configured: Optional[ComponentOverride],
        template: DeploymentTemplate,
        planned: Optional[ComponentOverride] = None,
        instance_configurations: Sequence[InstanceConfiguration] = (),
        migrate_to_latest_hardware: bool = False,
    ) -> tuple[Optional[DedicatedTierDecision], ComponentOverride]:
        """
        Adjust the planned master tier.

        Returns the decision (None when nothing was changed) and the planned
        data-processing override with the master tier adjusted.
        """
        configured = configured or ComponentOverride()
        planned = planned or configured

        if configured.tier(MASTER_TIER_ID) is not None:
            logger.debug(
                "Master tier configured explicitly, leaving it unchanged",
                extra=_LOG_CONTEXT,
            )
            return None, planned

        threshold = template.dedicated_masters_threshold
        if threshold == 0:
            return None, planned

        nodes = self.count_nodes(planned, template)
        if nodes < threshold:
            return self._disable(planned, template, nodes, threshold)

        if self.master_is_enabled(planned, template) and not migrate_to_latest_hardware:
            return None, planned

        ic = self._instance_configuration(planned, template, instance_configurations)
        if ic is None or ic.discrete_sizes is None:
            logger.debug(
                "Cannot enable master tier: no instance configuration with discrete sizes",
                extra=_LOG_CONTEXT,
            )
            return None, planned

        template_ic = template.tier_instance_configuration(MASTER_TIER_ID)
        zones = ic.max_zones or (template_ic.max_zones if template_ic else 0)
        if zones == 0:
            logger.debug(
                "Cannot enable master tier: %s declares no max zone count",
                ic.id,
                extra=_LOG_CONTEXT,
            )
            return None, planned
        size = format_size(ic.discrete_sizes.default_size)

        master = planned.tier(MASTER_TIER_ID) or UserTopologyOverride(id=MASTER_TIER_ID)
        master = replace(master, size=size, zone_count=zones)
        logger.debug(
            "Enabling master tier (%d nodes >= threshold %d): %s x %d zone(s)",
            nodes,
            threshold,
            size,
            zones,
            extra=_LOG_CONTEXT,
        )
        return DedicatedTierDecision(True, size, zones), planned.with_tier(master)

    def _disable(
        self,
        planned: ComponentOverride,
        template: DeploymentTemplate,
        nodes: int,
        threshold: int,
    ) -> tuple[Optional[DedicatedTierDecision], ComponentOverride]:
        logger.debug(
            "Disabling master tier (%d nodes < threshold %d)",
            nodes,
            threshold,
            extra=_LOG_CONTEXT,
        )
        master = planned.tier(MASTER_TIER_ID)
        default = template.tier(MASTER_TIER_ID)
        if master is None and (default is None or default.size.is_zero):
            return DedicatedTierDecision(False), planned

        master = master or UserTopologyOverride(id=MASTER_TIER_ID)
        return (
            DedicatedTierDecision(False, DISABLED_SIZE),
            planned.with_tier(replace(master, size=DISABLED_SIZE)),
        )

    def _instance_configuration(
        self,
        planned: ComponentOverride,
        template: DeploymentTemplate,
        instance_configurations: Sequence[InstanceConfiguration],
    ) -> Optional[InstanceConfiguration]:
        template_ic = template.tier_instance_configuration(MASTER_TIER_ID)

        master = planned.tier(MASTER_TIER_ID)
        ic_id = master.instance_configuration_id if master else None
        ic_id = ic_id or (template_ic.id if template_ic else None)
        for ic in instance_configurations:
            if ic.id == ic_id and ic.discrete_sizes is not None:
                return ic
        return template_ic
