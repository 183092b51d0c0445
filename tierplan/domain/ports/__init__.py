"""
Domain Ports Package

Architectural Intent:
- Contains port interfaces for the collaborators the core consumes
- Ports define what the domain needs, adapters implement how
"""

from tierplan.domain.ports.plan_tracker_port import PlanTrackerPort

__all__ = [
    "PlanTrackerPort",
]
