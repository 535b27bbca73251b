from .deployment_service import DeploymentService
from .endpoint_service import CRUDEndpoints, EndpointService
from .model_validation_service import ModelValidationService
from .project_service import ProjectService

__all__ = [
    "CRUDEndpoints",
    "DeploymentService",
    "EndpointService",
    "ModelValidationService",
    "ProjectService",
]
