from typing import Dict, List
import json

from ...schemas.deployment import ConfigValidationResult, DeploymentOptions
from ...schemas.project import GeneratedProject
from .common import (
    RolloutStep,
    custom_domain_url,
    deployment_env,
    finish_validation,
    recommend_env,
    sanitize_name,
    url_suffix,
    validate_common_options,
)

FUNCTION_HANDLER = """from mangum import Mangum

from app.main import app

handler = Mangum(app, api_gateway_base_path="/.netlify/functions/api")
"""

REDIRECTS = """# API routes
/api/* /.netlify/functions/api/:splat 200

# Everything else goes to the API as well
/* /.netlify/functions/api/:splat 200
"""


def toml_table(name: str, values: Dict[str, object]) -> str:
    lines = [f"[{name}]"]
    for key, value in values.items():
        lines.append(f"  {key} = {json.dumps(value)}")
    return "\n".join(lines) + "\n"


class NetlifyProvider:
    platform = "netlify"
    regions = ()

    def validate_config(self, options: DeploymentOptions) -> ConfigValidationResult:
        warnings = recommend_env(options, "NETLIFY_AUTH_TOKEN", "deployment may require manual authentication")
        functions_dir = options.environment_variables.get("NETLIFY_FUNCTIONS_DIRECTORY")
        if functions_dir and not functions_dir.startswith(("./", "/")):
            warnings.append("NETLIFY_FUNCTIONS_DIRECTORY should be a relative or absolute path")
        return finish_validation(validate_common_options(options), [], warnings)

    def generate_deployment_files(self, project: GeneratedProject, options: DeploymentOptions) -> Dict[str, str]:
        env = deployment_env(project, options)
        build = {
            "command": "pip install -r requirements.txt",
            "functions": "netlify/functions",
        }
        if project.generation_options.include_documentation:
            build["publish"] = "docs"
        netlify_toml = "\n".join([
            toml_table("build", build),
            toml_table("dev", {"command": "uvicorn app.main:app --reload", "port": 8000}),
            toml_table("context.production.environment", env),
            toml_table("context.deploy-preview.environment", {**env, "ENVIRONMENT": "staging"}),
        ])

        requirements = project.get_file("requirements.txt")
        base_requirements = requirements.content if requirements is not None else ""
        return {
            "netlify.toml": netlify_toml,
            "netlify/functions/api.py": FUNCTION_HANDLER,
            "_redirects": REDIRECTS,
            "requirements.txt": base_requirements + "mangum>=0.17\n",
        }

    def rollout_steps(self, options: DeploymentOptions) -> List[RolloutStep]:
        return [
            RolloutStep("Uploading to Netlify...", 2.5, 30),
            RolloutStep("Installing dependencies...", 3.5, 50),
            RolloutStep("Building application...", 3.0, 70),
            RolloutStep("Deploying to Netlify CDN...", 2.0, 85),
            RolloutStep("Setting up Netlify Functions...", 1.5, 95),
        ]

    def deployment_url(self, project: GeneratedProject, options: DeploymentOptions, deployment_id: str) -> str:
        url = custom_domain_url(options)
        if url:
            return url
        return f"https://{sanitize_name(project.name)}-{url_suffix(deployment_id, 6)}.netlify.app"
