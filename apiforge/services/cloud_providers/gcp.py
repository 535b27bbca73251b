from typing import Dict, List

import yaml

from ...schemas.deployment import ConfigValidationResult, DeploymentOptions
from ...schemas.project import GeneratedProject
from ...utils.dockerfile import generate_dockerfile
from .common import (
    RolloutStep,
    check_region,
    custom_domain_url,
    deployment_env,
    finish_validation,
    recommend_env,
    require_env,
    validate_common_options,
)


class GCPProvider:
    platform = "gcp"
    regions = (
        "us-central1", "us-east1", "us-east4", "us-west1", "us-west2", "us-west3", "us-west4",
        "europe-west1", "europe-west2", "europe-west3", "europe-west4", "europe-west6",
        "asia-east1", "asia-east2", "asia-northeast1", "asia-northeast2", "asia-northeast3",
        "asia-south1", "asia-southeast1", "asia-southeast2",
    )

    def validate_config(self, options: DeploymentOptions) -> ConfigValidationResult:
        warnings = recommend_env(options, "GOOGLE_APPLICATION_CREDENTIALS", "using default service account")
        errors = require_env(options, ["GCP_PROJECT_ID"], "GCP")
        errors += check_region(options, self.regions, "GCP")
        return finish_validation(validate_common_options(options), errors, warnings)

    def generate_deployment_files(self, project: GeneratedProject, options: DeploymentOptions) -> Dict[str, str]:
        return {
            "app.yaml": self._app_yaml(project, options),
            "cloudbuild.yaml": self._cloudbuild(project),
            # Cloud Run and flexible App Engine listen on 8080
            "Dockerfile": generate_dockerfile(project.generation_options.framework.value, port=8080),
        }

    def rollout_steps(self, options: DeploymentOptions) -> List[RolloutStep]:
        return [
            RolloutStep("Uploading to Cloud Storage...", 2.5, 25),
            RolloutStep("Starting Cloud Build...", 4.0, 45),
            RolloutStep("Building container image...", 3.5, 65),
            RolloutStep("Deploying to App Engine...", 4.0, 85),
            RolloutStep("Configuring traffic routing...", 1.5, 95),
        ]

    def deployment_url(self, project: GeneratedProject, options: DeploymentOptions, deployment_id: str) -> str:
        url = custom_domain_url(options)
        if url:
            return url
        project_id = options.environment_variables.get("GCP_PROJECT_ID") or "project-id"
        region = options.region or "us-central1"
        return f"https://{project.name}-dot-{project_id}.{region}.r.appspot.com"

    def _app_yaml(self, project: GeneratedProject, options: DeploymentOptions) -> str:
        scaling = {"min_instances": 1, "max_instances": 10 if options.auto_scale else 1, "target_cpu_utilization": 0.6}
        config = {
            "runtime": "python311",
            "service": project.name,
            "entrypoint": "uvicorn app.main:app --host 0.0.0.0 --port $PORT",
            "env_variables": deployment_env(project, options),
            "automatic_scaling": scaling,
            "resources": {"cpu": 1, "memory_gb": 0.5},
        }
        if options.instance_type:
            config["instance_class"] = options.instance_type
        return yaml.safe_dump(config, sort_keys=False)

    def _cloudbuild(self, project: GeneratedProject) -> str:
        config = {
            "steps": [
                {"name": "python:3.11", "entrypoint": "pip", "args": ["install", "-r", "requirements.txt", "--user"]},
                {"name": "python:3.11", "entrypoint": "python", "args": ["-m", "pytest"]},
                {"name": "gcr.io/cloud-builders/gcloud", "args": ["app", "deploy"]},
            ],
            "timeout": "1200s",
        }
        return yaml.safe_dump(config, sort_keys=False)
