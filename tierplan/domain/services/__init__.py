"""
Domain Services Package

Architectural Intent:
- Pure topology resolution services: matching, expansion, defaulting,
  projection and the dedicated-tier controller
"""

from tierplan.domain.services.dedicated_tier_controller import (
    DedicatedTierController,
    DedicatedTierDecision,
)
from tierplan.domain.services.defaulting_rules import (
    ComponentPolicy,
    ResolutionPolicy,
    SizeClamp,
    apply_defaulting_rules,
    default_policy,
)
from tierplan.domain.services.node_role_resolver import NodeRoleResolver
from tierplan.domain.services.topology_expander import TopologyExpander
from tierplan.domain.services.topology_matcher import TopologyMatcher
from tierplan.domain.services.topology_projector import TopologyProjector

__all__ = [
    "DedicatedTierController",
    "DedicatedTierDecision",
    "ComponentPolicy",
    "ResolutionPolicy",
    "SizeClamp",
    "apply_defaulting_rules",
    "default_policy",
    "NodeRoleResolver",
    "TopologyExpander",
    "TopologyMatcher",
    "TopologyProjector",
]
