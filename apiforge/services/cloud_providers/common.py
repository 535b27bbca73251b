from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol, Sequence
import hashlib
import re

from ...schemas.deployment import ConfigValidationResult, DeploymentOptions, Environment
from ...schemas.project import GeneratedProject

DOMAIN_PATTERN = re.compile(r"^(?:[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?\.)+[a-zA-Z]{2,}$")

RECOMMENDED_ENV = ("ENVIRONMENT",)


@dataclass(frozen=True)
class RolloutStep:
    message: str
    duration: float  # seconds, before scaling
    progress: int


class CloudProvider(Protocol):
    platform: str
    regions: Sequence[str]

    def validate_config(self, options: DeploymentOptions) -> ConfigValidationResult:
        ...

    def generate_deployment_files(self, project: GeneratedProject, options: DeploymentOptions) -> Dict[str, str]:
        ...

    def rollout_steps(self, options: DeploymentOptions) -> List[RolloutStep]:
        ...

    def deployment_url(self, project: GeneratedProject, options: DeploymentOptions, deployment_id: str) -> str:
        ...


def validate_common_options(options: DeploymentOptions) -> ConfigValidationResult:
    """Checks shared by every platform: environment name, domain format, recommended variables"""
    errors: List[str] = []
    warnings: List[str] = []

    allowed = [e.value for e in Environment]
    if options.environment not in allowed:
        errors.append("Invalid environment. Must be development, staging, or production")

    if options.custom_domain and not DOMAIN_PATTERN.match(options.custom_domain):
        errors.append("Invalid custom domain format")

    for name in RECOMMENDED_ENV:
        if not options.environment_variables.get(name):
            warnings.append(f"Missing recommended environment variable: {name}")

    return ConfigValidationResult(is_valid=not errors, errors=errors, warnings=warnings)


def require_env(options: DeploymentOptions, names: Sequence[str], label: str) -> List[str]:
    return [
        f"{name} is required for {label} deployment"
        for name in names
        if not options.environment_variables.get(name)
    ]


def recommend_env(options: DeploymentOptions, name: str, message: str) -> List[str]:
    if options.environment_variables.get(name):
        return []
    return [f"{name} not provided - {message}"]


def check_region(options: DeploymentOptions, regions: Sequence[str], label: str) -> List[str]:
    if options.region and options.region not in regions:
        return [f"Invalid {label} region: {options.region}"]
    return []


def finish_validation(base: ConfigValidationResult, errors: List[str], warnings: List[str]) -> ConfigValidationResult:
    all_errors = list(base.errors) + errors
    return ConfigValidationResult(
        is_valid=not all_errors,
        errors=all_errors,
        warnings=list(base.warnings) + warnings,
    )


def sanitize_name(name: str) -> str:
    return re.sub(r"[^a-z0-9-]", "-", name.lower())


def url_suffix(deployment_id: str, length: int = 8) -> str:
    """Stable hostname suffix derived from the deployment id"""
    return hashlib.sha1(deployment_id.encode("utf-8")).hexdigest()[:length]


def custom_domain_url(options: DeploymentOptions) -> Optional[str]:
    if options.custom_domain:
        return f"https://{options.custom_domain}"
    return None


def deployment_env(project: GeneratedProject, options: DeploymentOptions) -> Dict[str, str]:
    """Environment for descriptors: the project's deployment config when present, else the user variables"""
    return dict(project.deployment_config or options.environment_variables)
