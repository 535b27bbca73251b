from .model import (
    Field,
    FieldType,
    Model,
    ModelMetadata,
    Relationship,
    RelationshipType,
    ValidationRule,
    ValidationRuleType,
)
from .auth import AuthConfig, AuthType, OAuthProvider, Role, SessionConfig, default_auth_config
from .project import (
    DatabaseKind,
    Endpoint,
    FileType,
    Framework,
    GeneratedFile,
    GeneratedProject,
    GenerateProjectRequest,
    GenerationOptions,
    HttpMethod,
    Language,
    Operation,
)
from .validation import ValidateModelsRequest, ValidationIssue, ValidationResult
from .deployment import (
    ConfigValidationResult,
    DeploymentLog,
    DeploymentOptions,
    DeploymentRequest,
    DeploymentState,
    DeploymentStatus,
    Environment,
    LogLevel,
    Platform,
    PlatformInfo,
)

__all__ = [
    "Field", "FieldType", "Model", "ModelMetadata", "Relationship", "RelationshipType",
    "ValidationRule", "ValidationRuleType",
    "AuthConfig", "AuthType", "OAuthProvider", "Role", "SessionConfig", "default_auth_config",
    "DatabaseKind", "Endpoint", "FileType", "Framework", "GeneratedFile", "GeneratedProject",
    "GenerateProjectRequest", "GenerationOptions", "HttpMethod", "Language", "Operation",
    "ValidateModelsRequest", "ValidationIssue", "ValidationResult",
    "ConfigValidationResult", "DeploymentLog", "DeploymentOptions", "DeploymentRequest",
    "DeploymentState", "DeploymentStatus", "Environment", "LogLevel", "Platform", "PlatformInfo",
]
