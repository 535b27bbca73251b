from typing import Dict, List
import json

from ...schemas.deployment import ConfigValidationResult, DeploymentOptions
from ...schemas.project import DatabaseKind, GeneratedProject
from .common import (
    RolloutStep,
    check_region,
    custom_domain_url,
    deployment_env,
    finish_validation,
    recommend_env,
    sanitize_name,
    url_suffix,
    validate_common_options,
)

ADDONS = {
    DatabaseKind.POSTGRESQL: "heroku-postgresql:mini",
    DatabaseKind.MYSQL: "jawsdb:kitefin",
}


class HerokuProvider:
    platform = "heroku"
    regions = ("us", "eu")

    def validate_config(self, options: DeploymentOptions) -> ConfigValidationResult:
        errors = check_region(options, self.regions, "Heroku")
        warnings = recommend_env(options, "HEROKU_API_KEY", "deployment may require manual authentication")
        if not options.environment_variables.get("PORT"):
            warnings.append("PORT environment variable not set - Heroku will assign one automatically")
        return finish_validation(validate_common_options(options), errors, warnings)

    def generate_deployment_files(self, project: GeneratedProject, options: DeploymentOptions) -> Dict[str, str]:
        return {
            "Procfile": "web: uvicorn app.main:app --host 0.0.0.0 --port $PORT\n",
            "app.json": json.dumps(self._app_json(project, options), indent=2),
            "runtime.txt": "python-3.11.9\n",
        }

    def rollout_steps(self, options: DeploymentOptions) -> List[RolloutStep]:
        return [
            RolloutStep("Pushing to Heroku Git repository...", 3.0, 25),
            RolloutStep("Detecting buildpack...", 1.0, 35),
            RolloutStep("Installing dependencies...", 4.0, 55),
            RolloutStep("Building application...", 3.0, 75),
            RolloutStep("Starting dynos...", 2.0, 90),
            RolloutStep("Configuring database...", 1.5, 95),
        ]

    def deployment_url(self, project: GeneratedProject, options: DeploymentOptions, deployment_id: str) -> str:
        url = custom_domain_url(options)
        if url:
            return url
        return f"https://{sanitize_name(project.name)}-{url_suffix(deployment_id, 4)}.herokuapp.com"

    def _app_json(self, project: GeneratedProject, options: DeploymentOptions) -> dict:
        app_json = {
            "name": project.name,
            "description": f"Generated API project with {len(project.models)} models",
            "keywords": ["python", "fastapi", "api", "generated"],
            "stack": "heroku-22",
            "buildpacks": [{"url": "heroku/python"}],
            "env": {
                name: {"description": f"Environment variable: {name}", "value": value}
                for name, value in deployment_env(project, options).items()
            },
            "formation": {
                "web": {"quantity": 2 if options.auto_scale else 1, "size": options.instance_type or "basic"},
            },
            "addons": [],
        }
        addon = ADDONS.get(project.generation_options.database)
        if addon:
            app_json["addons"].append(addon)
        return app_json
