from typing import Dict, List
import json

from ...schemas.deployment import ConfigValidationResult, DeploymentOptions
from ...schemas.project import GeneratedProject
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

ENTRYPOINT = """from app.main import app

__all__ = ["app"]
"""


class VercelProvider:
    platform = "vercel"
    regions = (
        "iad1", "dub1", "fra1", "gru1", "hkg1", "hnd1", "icn1", "kix1",
        "lax1", "lhr1", "pdx1", "sfo1", "sin1", "syd1", "bom1", "cdg1",
    )

    def validate_config(self, options: DeploymentOptions) -> ConfigValidationResult:
        errors = check_region(options, self.regions, "Vercel")
        warnings = recommend_env(options, "VERCEL_TOKEN", "deployment may require manual authentication")
        return finish_validation(validate_common_options(options), errors, warnings)

    def generate_deployment_files(self, project: GeneratedProject, options: DeploymentOptions) -> Dict[str, str]:
        config = {
            "version": 2,
            "name": project.name,
            "builds": [{"src": "api/index.py", "use": "@vercel/python"}],
            "routes": [{"src": "/(.*)", "dest": "api/index.py"}],
            "env": deployment_env(project, options),
            "regions": [options.region or "iad1"],
        }
        files = {
            "vercel.json": json.dumps(config, indent=2),
            "api/index.py": ENTRYPOINT,
        }
        requirements = project.get_file("requirements.txt")
        if requirements is not None:
            files["requirements.txt"] = requirements.content
        return files

    def rollout_steps(self, options: DeploymentOptions) -> List[RolloutStep]:
        steps = [
            RolloutStep("Preparing deployment files...", 1.0, 20),
            RolloutStep("Uploading project files...", 2.0, 30),
            RolloutStep("Installing dependencies...", 3.0, 50),
            RolloutStep("Building application...", 2.5, 70),
            RolloutStep("Deploying to Vercel edge network...", 2.0, 90),
        ]
        if options.custom_domain:
            steps.append(RolloutStep("Configuring custom domain...", 1.0, 95))
        return steps

    def deployment_url(self, project: GeneratedProject, options: DeploymentOptions, deployment_id: str) -> str:
        url = custom_domain_url(options)
        if url:
            return url
        return f"https://{sanitize_name(project.name)}-{url_suffix(deployment_id, 6)}.vercel.app"
