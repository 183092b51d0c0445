"""
Composition Root

Architectural Intent:
- Dependency injection composition root for the tierplan application
- Single place where configuration, domain services and use cases are wired
- No service instantiation should occur outside this module (except tests)

Design Decisions:
- Uses a simple dataclass container instead of a DI framework
- The ResolutionPolicy built from configuration is shared by the expander
  and the projector so both agree on minimums and default resources
- The plan poller is created per tracker, since the tracker adapter lives
  outside this package
"""

from dataclasses import dataclass
from typing import Optional

from tierplan.application.use_cases.project_deployment import ProjectDeployment
from tierplan.application.use_cases.resolve_deployment import ResolveDeployment
from tierplan.application.use_cases.wait_for_plan import WaitForPlan
from tierplan.domain.ports.plan_tracker_port import PlanTrackerPort
from tierplan.domain.services.dedicated_tier_controller import DedicatedTierController
from tierplan.domain.services.defaulting_rules import ResolutionPolicy
from tierplan.domain.services.node_role_resolver import NodeRoleResolver
from tierplan.domain.services.topology_expander import TopologyExpander
from tierplan.domain.services.topology_projector import TopologyProjector
from tierplan.infrastructure.config import TierplanConfig


@dataclass
class TierplanContainer:
    """DI container holding all wired dependencies."""

    config: TierplanConfig
    policy: ResolutionPolicy
    expander: TopologyExpander
    projector: TopologyProjector
    controller: DedicatedTierController
    resolve_deployment: ResolveDeployment
    project_deployment: ProjectDeployment

    def wait_for_plan(self, tracker: PlanTrackerPort) -> WaitForPlan:
        return WaitForPlan(
            tracker,
            poll_interval=self.config.poller.poll_interval_seconds,
            max_retries=self.config.poller.max_retries,
        )


def create_container(config: Optional[TierplanConfig] = None) -> TierplanContainer:
    """Create and wire all dependencies."""
    config = config or TierplanConfig()
    policy = config.resolution_policy()

    role_resolver = NodeRoleResolver(policy.node_roles_minimum_version)
    expander = TopologyExpander(policy, role_resolver)
    projector = TopologyProjector(policy)
    controller = DedicatedTierController()

    return TierplanContainer(
        config=config,
        policy=policy,
        expander=expander,
        projector=projector,
        controller=controller,
        resolve_deployment=ResolveDeployment(expander, controller),
        project_deployment=ProjectDeployment(projector),
    )
