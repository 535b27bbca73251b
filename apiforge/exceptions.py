from typing import List, Optional


class ApiForgeError(Exception):
    """Base class for errors raised by the generation pipeline and deployments"""


class UnsupportedFieldTypeError(ApiForgeError):
    def __init__(self, field_type: str):
        self.field_type = field_type
        super().__init__(f"Unsupported field type: {field_type}")


class ModelValidationError(ApiForgeError):
    """Raised when a model set fails validation before generation"""

    def __init__(self, result):
        self.result = result
        messages = "; ".join(f"{e.field}: {e.message}" for e in result.errors)
        super().__init__(f"Model validation failed: {messages}")


class GenerationError(ApiForgeError):
    pass


class DeploymentError(ApiForgeError):
    pass


class UnsupportedPlatformError(DeploymentError):
    def __init__(self, platform: str):
        self.platform = platform
        super().__init__(f"Unsupported platform: {platform}")


class InvalidDeploymentConfigError(DeploymentError):
    def __init__(self, errors: List[str], warnings: Optional[List[str]] = None):
        self.errors = errors
        self.warnings = warnings or []
        super().__init__(f"Invalid configuration: {', '.join(errors)}")


class DeploymentNotFoundError(DeploymentError):
    def __init__(self, deployment_id: str):
        self.deployment_id = deployment_id
        super().__init__(f"Deployment not found: {deployment_id}")
