from datetime import datetime
from typing import Any, Dict, List, Optional
import asyncio
import uuid

from ..config import settings
from ..exceptions import DeploymentNotFoundError, InvalidDeploymentConfigError, UnsupportedPlatformError
from ..schemas.auth import AuthType
from ..schemas.deployment import (
    ConfigValidationResult,
    DeploymentLog,
    DeploymentOptions,
    DeploymentState,
    DeploymentStatus,
    LogLevel,
    PlatformInfo,
)
from ..schemas.project import DatabaseKind, FileType, GeneratedFile, GeneratedProject
from ..utils.logger import get_logger
from .cloud_providers import CloudProvider, build_provider_registry

APP_PORT = "8000"

FILE_LANGUAGES = {
    ".json": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".toml": "toml",
    ".py": "python",
    ".txt": "text",
}

logger = get_logger(__name__)


def append_log(record: DeploymentStatus, level: LogLevel, message: str, details: Any = None):
    record.logs.append(DeploymentLog(level=level, message=message, details=details))


def transition(record: DeploymentStatus, state: DeploymentState, message: str):
    record.status = state
    record.message = message
    if state.is_terminal:
        record.completed_at = datetime.utcnow()


def set_progress(record: DeploymentStatus, progress: int, message: str):
    """Clamp to 0..100; progress never moves backwards"""
    record.progress = max(record.progress, min(100, max(0, progress)))
    record.message = message
    append_log(record, LogLevel.INFO, message)


def file_language(path: str) -> Optional[str]:
    for suffix, language in FILE_LANGUAGES.items():
        if path.endswith(suffix):
            return language
    if path.endswith("Dockerfile"):
        return "dockerfile"
    return None


class DeploymentService:
    def __init__(self, providers: Optional[Dict[str, CloudProvider]] = None,
                 step_delay_scale: Optional[float] = None, timeout_seconds: Optional[float] = None):
        self.providers = providers if providers is not None else build_provider_registry()
        self.step_delay_scale = settings.DEPLOY_STEP_DELAY_SCALE if step_delay_scale is None else step_delay_scale
        self.timeout_seconds = settings.DEPLOY_TIMEOUT_SECONDS if timeout_seconds is None else timeout_seconds
        self._deployments: Dict[str, DeploymentStatus] = {}
        self._cancel_flags: Dict[str, asyncio.Event] = {}
        self._tasks: Dict[str, asyncio.Task] = {}
        self._lock = asyncio.Lock()

    def available_platforms(self) -> List[PlatformInfo]:
        return [PlatformInfo(platform=name, regions=list(p.regions)) for name, p in self.providers.items()]

    def get_provider(self, platform: str) -> CloudProvider:
        provider = self.providers.get(platform)
        if provider is None:
            raise UnsupportedPlatformError(platform)
        return provider

    def validate_config(self, options: DeploymentOptions) -> ConfigValidationResult:
        return self.get_provider(options.platform).validate_config(options)

    def build_deployment_config(self, project: GeneratedProject, options: DeploymentOptions) -> Dict[str, str]:
        """Environment handed to the platform; user variables win over generated ones"""
        config = {"ENVIRONMENT": options.environment, "PORT": APP_PORT}
        config.update(self._database_config(project, options))
        config.update(self._auth_config(project))
        config.update(options.environment_variables)
        return config

    def generate_deployment_files(self, project: GeneratedProject, options: DeploymentOptions) -> List[GeneratedFile]:
        provider = self.get_provider(options.platform)
        project = self._with_config(project, options)
        return [
            GeneratedFile(path=path, content=content, type=FileType.CONFIG, language=file_language(path))
            for path, content in provider.generate_deployment_files(project, options).items()
        ]

    async def deploy(self, project: GeneratedProject, options: DeploymentOptions) -> DeploymentStatus:
        """Validate, register a pending deployment and start its rollout in the background"""
        provider = self.get_provider(options.platform)
        validation = provider.validate_config(options)
        if not validation.is_valid:
            raise InvalidDeploymentConfigError(validation.errors, validation.warnings)

        project = self._with_config(project, options)
        record = DeploymentStatus(
            id=str(uuid.uuid4()),
            project_id=project.id,
            platform=options.platform,
            message="Initializing deployment...",
        )

        async with self._lock:
            self._deployments[record.id] = record
            self._cancel_flags[record.id] = asyncio.Event()
            snapshot = record.model_copy(deep=True)
            task = asyncio.create_task(self._run(record, project, options, provider, validation.warnings))
            self._tasks[record.id] = task
            task.add_done_callback(lambda _: self._tasks.pop(record.id, None))

        logger.info("deployment_started", deployment_id=record.id, platform=options.platform, project=project.name)
        return snapshot

    async def get_status(self, deployment_id: str) -> DeploymentStatus:
        async with self._lock:
            return self._get(deployment_id).model_copy(deep=True)

    async def get_logs(self, deployment_id: str) -> List[DeploymentLog]:
        async with self._lock:
            return [entry.model_copy(deep=True) for entry in self._get(deployment_id).logs]

    async def list_deployments(self, project_id: Optional[str] = None) -> List[DeploymentStatus]:
        async with self._lock:
            records = [
                record.model_copy(deep=True)
                for record in self._deployments.values()
                if project_id is None or record.project_id == project_id
            ]
        return sorted(records, key=lambda r: r.started_at)

    async def cancel(self, deployment_id: str) -> DeploymentStatus:
        """Request cancellation; honored only while the deployment is running"""
        async with self._lock:
            record = self._get(deployment_id)
            if record.status != DeploymentState.DEPLOYING:
                return record.model_copy(deep=True)
            self._cancel_flags[deployment_id].set()
            task = self._tasks.get(deployment_id)

        logger.info("deployment_cancel_requested", deployment_id=deployment_id, platform=record.platform)
        if task is not None:
            # the current step finishes before the flag is observed
            await asyncio.wait([task])
        return await self.get_status(deployment_id)

    async def delete(self, deployment_id: str):
        async with self._lock:
            record = self._deployments.pop(deployment_id, None)
            if record is None:
                raise DeploymentNotFoundError(deployment_id)
            self._cancel_flags.pop(deployment_id, None)
            task = self._tasks.pop(deployment_id, None)

        if task is not None and not task.done():
            task.cancel()
            await asyncio.wait([task])
        logger.info("deployment_deleted", deployment_id=deployment_id, platform=record.platform)

    def _get(self, deployment_id: str) -> DeploymentStatus:
        record = self._deployments.get(deployment_id)
        if record is None:
            raise DeploymentNotFoundError(deployment_id)
        return record

    def _with_config(self, project: GeneratedProject, options: DeploymentOptions) -> GeneratedProject:
        return project.model_copy(update={"deployment_config": self.build_deployment_config(project, options)})

    async def _run(self, record: DeploymentStatus, project: GeneratedProject, options: DeploymentOptions,
                   provider: CloudProvider, warnings: List[str]):
        log = logger.bind(deployment_id=record.id, platform=record.platform)
        try:
            await asyncio.wait_for(
                self._rollout(record, project, options, provider, warnings),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            error = f"Deployment timed out after {self.timeout_seconds} seconds"
            self._fail(record, error)
            log.error("deployment_timed_out", timeout=self.timeout_seconds)
        except asyncio.CancelledError:
            log.info("deployment_task_cancelled")
            raise
        except Exception as e:
            self._fail(record, str(e) or e.__class__.__name__)
            log.exception("deployment_failed", error=str(e))
        else:
            log.info("deployment_finished", status=record.status.value, url=record.url)

    async def _rollout(self, record: DeploymentStatus, project: GeneratedProject, options: DeploymentOptions,
                       provider: CloudProvider, warnings: List[str]):
        cancel_flag = self._cancel_flags[record.id]
        label = options.platform.upper()

        transition(record, DeploymentState.DEPLOYING, f"Initializing {label} deployment...")
        set_progress(record, 10, f"Initializing {label} deployment...")
        for warning in warnings:
            append_log(record, LogLevel.WARN, warning)

        files = provider.generate_deployment_files(project, options)
        append_log(record, LogLevel.INFO, f"Generated {len(files)} {label} configuration files", details=sorted(files))

        for step in provider.rollout_steps(options):
            if cancel_flag.is_set():
                self._mark_cancelled(record)
                return
            await asyncio.sleep(step.duration * self.step_delay_scale)
            set_progress(record, step.progress, step.message)

        if cancel_flag.is_set():
            self._mark_cancelled(record)
            return

        record.url = provider.deployment_url(project, options, record.id)
        record.progress = 100
        transition(record, DeploymentState.SUCCESS, "Deployment completed successfully")
        append_log(record, LogLevel.INFO, f"Deployment successful. URL: {record.url}")

    def _mark_cancelled(self, record: DeploymentStatus):
        transition(record, DeploymentState.CANCELLED, "Deployment cancelled")
        append_log(record, LogLevel.INFO, f"{record.platform.upper()} deployment cancelled by user")

    def _fail(self, record: DeploymentStatus, error: str):
        record.error = error
        transition(record, DeploymentState.FAILED, "Deployment failed")
        append_log(record, LogLevel.ERROR, f"Deployment failed: {error}")

    def _database_config(self, project: GeneratedProject, options: DeploymentOptions) -> Dict[str, str]:
        database = project.generation_options.database
        if options.platform == "vercel":
            if database == DatabaseKind.POSTGRESQL:
                return {"DATABASE_URL": "${POSTGRES_URL}"}
            if database == DatabaseKind.MYSQL:
                return {"DATABASE_URL": "${MYSQL_URL}"}
            return {}
        if options.platform == "heroku":
            if database == DatabaseKind.POSTGRESQL:
                return {"DATABASE_URL": "${DATABASE_URL}"}
            return {}
        if options.platform == "aws":
            return {
                "DATABASE_URL": "${DATABASE_URL}",
                "DB_HOST": "${RDS_HOSTNAME}",
                "DB_PORT": "${RDS_PORT}",
                "DB_NAME": "${RDS_DB_NAME}",
                "DB_USERNAME": "${RDS_USERNAME}",
                "DB_PASSWORD": "${RDS_PASSWORD}",
            }
        return {"DATABASE_URL": "${DATABASE_URL}"}

    def _auth_config(self, project: GeneratedProject) -> Dict[str, str]:
        config: Dict[str, str] = {}
        if project.auth_config.type == AuthType.JWT:
            config["JWT_SECRET"] = "${JWT_SECRET}"
            config["JWT_REFRESH_SECRET"] = "${JWT_REFRESH_SECRET}"
            config["JWT_EXPIRES_IN_MINUTES"] = "15"
        for provider in project.auth_config.providers:
            name = provider.name.value.upper()
            config[f"{name}_CLIENT_ID"] = f"${{{name}_CLIENT_ID}}"
            config[f"{name}_CLIENT_SECRET"] = f"${{{name}_CLIENT_SECRET}}"
        return config
