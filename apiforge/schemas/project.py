from pydantic import Field, model_validator
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
import enum

from .base import CamelModel, FrozenCamelModel
from .auth import AuthConfig, AuthType
from .model import Model


class Framework(str, enum.Enum):
    FASTAPI = "fastapi"


class DatabaseKind(str, enum.Enum):
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    MONGODB = "mongodb"

    @property
    def is_relational(self) -> bool:
        return self is not DatabaseKind.MONGODB


class Language(str, enum.Enum):
    PYTHON = "python"


class Operation(str, enum.Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    LIST = "list"


class HttpMethod(str, enum.Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"


class FileType(str, enum.Enum):
    SOURCE = "source"
    CONFIG = "config"
    DOCUMENTATION = "documentation"
    TEST = "test"


class GenerationOptions(FrozenCamelModel):
    framework: Framework = Framework.FASTAPI
    database: DatabaseKind = DatabaseKind.POSTGRESQL
    authentication: AuthType = AuthType.JWT
    language: Language = Language.PYTHON
    include_tests: bool = True
    include_documentation: bool = True
    project_name: str = Field("generated-api", pattern=r"^[a-z][a-z0-9-]*$")


class Endpoint(FrozenCamelModel):
    id: str
    path: str
    method: HttpMethod
    model_name: str
    operation: Operation
    authenticated: bool
    roles: Tuple[str, ...] = ()
    description: Optional[str] = None
    auth_action: Optional[str] = None  # set only on endpoints contributed by the auth bundle


class GeneratedFile(FrozenCamelModel):
    path: str
    content: str
    type: FileType
    language: Optional[str] = None


class GeneratedProject(FrozenCamelModel):
    id: str
    name: str
    models: Tuple[Model, ...]
    endpoints: Tuple[Endpoint, ...]
    auth_config: AuthConfig
    files: Tuple[GeneratedFile, ...]
    open_api_spec: Dict[str, Any]
    deployment_config: Optional[Dict[str, str]] = None
    generation_options: GenerationOptions
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @model_validator(mode="after")
    def _check_unique_paths(self):
        seen = set()
        for generated in self.files:
            if generated.path in seen:
                raise ValueError(f"Duplicate file path: {generated.path}")
            seen.add(generated.path)
        return self

    def get_file(self, path: str) -> Optional[GeneratedFile]:
        for generated in self.files:
            if generated.path == path:
                return generated
        return None

    @property
    def uses_auth_bundle(self) -> bool:
        return self.generation_options.authentication == AuthType.JWT


class GenerateProjectRequest(CamelModel):
    models: List[Model]
    options: GenerationOptions = GenerationOptions()
    auth_config: Optional[AuthConfig] = None
    skip_validation: bool = False
