from pydantic import Field
from datetime import datetime
from typing import Any, Dict, List, Optional
import enum

from .base import CamelModel, FrozenCamelModel
from .project import GeneratedProject


class Platform(str, enum.Enum):
    AWS = "aws"
    GCP = "gcp"
    AZURE = "azure"
    VERCEL = "vercel"
    NETLIFY = "netlify"
    HEROKU = "heroku"


class Environment(str, enum.Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class DeploymentState(str, enum.Enum):
    PENDING = "pending"
    DEPLOYING = "deploying"
    SUCCESS = "success"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (DeploymentState.SUCCESS, DeploymentState.FAILED, DeploymentState.CANCELLED)


class LogLevel(str, enum.Enum):
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class DeploymentOptions(FrozenCamelModel):
    platform: str = Field(..., description="aws, gcp, azure, vercel, netlify or heroku")
    region: Optional[str] = None
    environment: str = Environment.PRODUCTION.value
    environment_variables: Dict[str, str] = Field(default_factory=dict)
    custom_domain: Optional[str] = None
    auto_scale: bool = False
    instance_type: Optional[str] = None


class DeploymentLog(CamelModel):
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    level: LogLevel = LogLevel.INFO
    message: str
    details: Optional[Any] = None


class DeploymentStatus(CamelModel):
    id: str
    project_id: str
    platform: str
    status: DeploymentState = DeploymentState.PENDING
    progress: int = 0
    message: str = ""
    url: Optional[str] = None
    logs: List[DeploymentLog] = []
    started_at: datetime = Field(default_factory=datetime.utcnow)
    completed_at: Optional[datetime] = None
    error: Optional[str] = None


class ConfigValidationResult(CamelModel):
    is_valid: bool = True
    errors: List[str] = []
    warnings: List[str] = []


class DeploymentRequest(CamelModel):
    project: GeneratedProject
    options: DeploymentOptions


class PlatformInfo(CamelModel):
    platform: str
    regions: List[str]
