"""
Project Deployment Use Case

Architectural Intent:
- Refresh path: turns live platform state into the declarative shape that
  is merged back into the caller's stored configuration
"""

import logging

from tierplan.application.dtos.resolution_dtos import (
    ProjectDeploymentRequest,
    ProjectDeploymentResponse,
)
from tierplan.domain.entities.topology import ComponentKind
from tierplan.domain.services.topology_projector import TopologyProjector

logger = logging.getLogger(__name__)


class ProjectDeployment:
    def __init__(self, projector: TopologyProjector):
        self.projector = projector

    def execute(self, request: ProjectDeploymentRequest) -> ProjectDeploymentResponse:
        components = self.projector.project_deployment(request.states)

        version = None
        template_id = None
        for state in request.states:
            if state.kind is ComponentKind.ELASTICSEARCH and state.plan is not None:
                version = state.plan.version
                template_id = state.plan.template_id

        logger.info(
            "Projected %d of %d component(s)",
            len(components),
            len(request.states),
            extra={"template_id": template_id} if template_id else None,
        )
        return ProjectDeploymentResponse(
            components=components,
            version=version,
            deployment_template_id=template_id,
        )
