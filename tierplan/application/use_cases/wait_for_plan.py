"""
Wait For Plan Use Case

Architectural Intent:
- Plan-completion poller: waits on the external PlanTrackerPort at a fixed
  interval until the pending plan completes
- Failures whose message mentions a timeout, or the known partial-failure
  message, are retried a bounded number of times; any other failure is
  raised immediately
- No background task is spawned; cancelling the awaiting caller stops it
"""

import asyncio
import logging

from tierplan.domain.ports.plan_tracker_port import PlanTrackerPort

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 2.0
DEFAULT_MAX_RETRIES = 4
PARTIAL_FAILURE_MARKER = "Some instances were not stopped"


class PlanTrackingError(Exception):
    def __init__(self, deployment_id: str, last_error: Exception, attempts: int):
        self.deployment_id = deployment_id
        self.last_error = last_error
        self.attempts = attempts
        super().__init__(
            f"deployment {deployment_id}: plan did not complete after "
            f"{attempts} retries: {last_error}"
        )


def is_retryable(error: Exception) -> bool:
    message = str(error)
    return "timeout" in message.lower() or PARTIAL_FAILURE_MARKER in message


class WaitForPlan:
    def __init__(
        self,
        tracker: PlanTrackerPort,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        max_retries: int = DEFAULT_MAX_RETRIES,
    ):
        self.tracker = tracker
        self.poll_interval = poll_interval
        self.max_retries = max_retries

    async def execute(self, deployment_id: str) -> int:
        """Wait until the plan completes. Returns the number of retries used."""
        retries = 0
        while True:
            try:
                done = await self.tracker.check(deployment_id)
            except Exception as e:
                if not is_retryable(e):
                    raise
                retries += 1
                if retries > self.max_retries:
                    raise PlanTrackingError(deployment_id, e, self.max_retries) from e
                logger.warning(
                    "Plan check for %s failed (%s), retry %d/%d",
                    deployment_id,
                    e,
                    retries,
                    self.max_retries,
                    extra={"deployment_id": deployment_id},
                )
                await asyncio.sleep(self.poll_interval)
                continue

            if done:
                logger.info(
                    "Plan for %s completed",
                    deployment_id,
                    extra={"deployment_id": deployment_id},
                )
                return retries
            await asyncio.sleep(self.poll_interval)
