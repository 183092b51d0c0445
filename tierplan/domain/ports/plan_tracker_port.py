"""
Plan Tracker Port

Architectural Intent:
- Contract for the external status check the plan-completion poller waits on
- Implemented outside the core by whatever talks to the platform API

Design Decisions:
- Uses Protocol for structural typing (no inheritance needed)
- check() returns True once the plan has finished and raises on failure;
  the poller decides which failures are worth another attempt
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class PlanTrackerPort(Protocol):
    """Port for checking whether a submitted plan has completed."""

    async def check(self, deployment_id: str) -> bool:
        """Return True when the pending plan of a deployment has completed."""
        ...
