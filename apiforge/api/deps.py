from fastapi import Request

from ..services.deployment_service import DeploymentService
from ..services.project_service import ProjectService


def get_project_service(request: Request) -> ProjectService:
    return request.app.state.project_service


def get_deployment_service(request: Request) -> DeploymentService:
    return request.app.state.deployment_service
