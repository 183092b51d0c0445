"""
Resolve Deployment Use Case

Architectural Intent:
- Runs the dedicated-tier controller over the data-processing component,
  then expands every requested component against the template
- Components are independent of each other; each expansion gets its own
  inputs and produces its own plan
"""

import logging
from typing import Optional

from tierplan.application.dtos.resolution_dtos import (
    ResolveDeploymentRequest,
    ResolveDeploymentResponse,
)
from tierplan.domain.entities.topology import ComponentKind
from tierplan.domain.services.dedicated_tier_controller import DedicatedTierController
from tierplan.domain.services.topology_expander import TopologyExpander

logger = logging.getLogger(__name__)


class ResolveDeployment:
    def __init__(
        self,
        expander: TopologyExpander,
        controller: Optional[DedicatedTierController] = None,
    ):
        self.expander = expander
        self.controller = controller or DedicatedTierController()

    def execute(self, request: ResolveDeploymentRequest) -> ResolveDeploymentResponse:
        components = dict(request.components)

        decision, planned = self.controller.reconcile(
            components[ComponentKind.ELASTICSEARCH],
            request.template,
            planned=request.planned_elasticsearch,
            instance_configurations=request.instance_configurations,
            migrate_to_latest_hardware=request.migrate_to_latest_hardware,
        )
        components[ComponentKind.ELASTICSEARCH] = planned
        if decision is not None:
            logger.info(
                "Dedicated master tier %s",
                f"enabled at {decision.size} x {decision.zone_count} zone(s)"
                if decision.enabled
                else "disabled",
                extra={
                    "component": ComponentKind.ELASTICSEARCH.value,
                    "tier": "master",
                    "template_id": request.template.id,
                },
            )

        plans = {}
        for kind, override in components.items():
            plans[kind] = self.expander.expand(
                request.template,
                kind,
                override,
                version=request.version,
                previous_version=request.previous_version,
            )
            logger.info(
                "Resolved %s: %d topology element(s)",
                kind.value,
                len(plans[kind].topology),
                extra={"component": kind.value, "template_id": request.template.id},
            )

        return ResolveDeploymentResponse(plans=plans, dedicated_tier=decision)
