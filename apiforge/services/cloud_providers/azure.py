from typing import Dict, List
import json

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
    require_env,
    sanitize_name,
    validate_common_options,
)

ARM_SCHEMA = "https://schema.management.azure.com/schemas/2019-04-01"


class AzureProvider:
    platform = "azure"
    regions = (
        "East US", "East US 2", "West US", "West US 2", "West US 3", "Central US",
        "North Central US", "South Central US", "West Central US", "Canada Central",
        "Canada East", "Brazil South", "North Europe", "West Europe", "France Central",
        "Germany West Central", "UK South", "UK West", "Switzerland North", "East Asia",
        "Southeast Asia", "Australia East", "Australia Southeast", "Central India",
        "South India", "West India", "Japan East", "Japan West", "Korea Central", "Korea South",
    )

    def validate_config(self, options: DeploymentOptions) -> ConfigValidationResult:
        errors = require_env(options, ["AZURE_CLIENT_ID", "AZURE_CLIENT_SECRET", "AZURE_TENANT_ID"], "Azure")
        errors += check_region(options, self.regions, "Azure")
        return finish_validation(validate_common_options(options), errors, [])

    def generate_deployment_files(self, project: GeneratedProject, options: DeploymentOptions) -> Dict[str, str]:
        return {
            "azuredeploy.json": json.dumps(self._arm_template(project, options), indent=2),
            "azuredeploy.parameters.json": json.dumps(self._parameters(project, options), indent=2),
            "Dockerfile": generate_dockerfile(project.generation_options.framework.value, port=80),
            "azure-pipelines.yml": self._pipeline(project, options),
        }

    def rollout_steps(self, options: DeploymentOptions) -> List[RolloutStep]:
        return [
            RolloutStep("Creating resource group...", 2.0, 20),
            RolloutStep("Deploying ARM template...", 4.0, 40),
            RolloutStep("Building container image...", 3.5, 60),
            RolloutStep("Pushing to Azure Container Registry...", 3.0, 75),
            RolloutStep("Deploying to App Service...", 3.0, 90),
            RolloutStep("Configuring custom domain...", 1.5, 95),
        ]

    def deployment_url(self, project: GeneratedProject, options: DeploymentOptions, deployment_id: str) -> str:
        url = custom_domain_url(options)
        if url:
            return url
        return f"https://{sanitize_name(project.name)}.azurewebsites.net"

    def _arm_template(self, project: GeneratedProject, options: DeploymentOptions) -> dict:
        plan = "[resourceId('Microsoft.Web/serverfarms', variables('appServicePlanName'))]"
        return {
            "$schema": f"{ARM_SCHEMA}/deploymentTemplate.json#",
            "contentVersion": "1.0.0.0",
            "parameters": {
                "appName": {
                    "type": "string",
                    "defaultValue": project.name,
                    "metadata": {"description": "Name of the web app"},
                },
                "location": {
                    "type": "string",
                    "defaultValue": "[resourceGroup().location]",
                    "metadata": {"description": "Location for all resources"},
                },
                "sku": {
                    "type": "string",
                    "defaultValue": "B1",
                    "allowedValues": ["F1", "B1", "B2", "B3", "S1", "S2", "S3"],
                    "metadata": {"description": "The SKU of App Service Plan"},
                },
            },
            "variables": {
                "appServicePlanName": "[concat(parameters('appName'), '-plan')]",
                "webAppName": "[parameters('appName')]",
            },
            "resources": [
                {
                    "type": "Microsoft.Web/serverfarms",
                    "apiVersion": "2020-06-01",
                    "name": "[variables('appServicePlanName')]",
                    "location": "[parameters('location')]",
                    "sku": {"name": "[parameters('sku')]"},
                    "kind": "linux",
                    "properties": {"reserved": True},
                },
                {
                    "type": "Microsoft.Web/sites",
                    "apiVersion": "2020-06-01",
                    "name": "[variables('webAppName')]",
                    "location": "[parameters('location')]",
                    "dependsOn": [plan],
                    "kind": "app,linux,container",
                    "properties": {
                        "serverFarmId": plan,
                        "siteConfig": {
                            "linuxFxVersion": f"DOCKER|{project.name}:latest",
                            "appSettings": [
                                {"name": name, "value": value}
                                for name, value in deployment_env(project, options).items()
                            ],
                        },
                    },
                },
            ],
            "outputs": {
                "webAppUrl": {
                    "type": "string",
                    "value": "[concat('https://', reference(variables('webAppName')).defaultHostName)]",
                }
            },
        }

    def _parameters(self, project: GeneratedProject, options: DeploymentOptions) -> dict:
        sku = options.instance_type or ("B2" if options.environment == "production" else "B1")
        return {
            "$schema": f"{ARM_SCHEMA}/deploymentParameters.json#",
            "contentVersion": "1.0.0.0",
            "parameters": {
                "appName": {"value": project.name},
                "location": {"value": options.region or "East US"},
                "sku": {"value": sku},
            },
        }

    def _pipeline(self, project: GeneratedProject, options: DeploymentOptions) -> str:
        pipeline = {
            "trigger": ["main"],
            "variables": {
                "dockerRegistryServiceConnection": "azure-container-registry",
                "imageRepository": project.name,
                "containerRegistry": "myregistry.azurecr.io",
                "dockerfilePath": "$(Build.SourcesDirectory)/Dockerfile",
                "tag": "$(Build.BuildId)",
            },
            "stages": [
                {
                    "stage": "Build",
                    "displayName": "Build and push stage",
                    "jobs": [
                        {
                            "job": "Build",
                            "pool": {"vmImage": "ubuntu-latest"},
                            "steps": [
                                {
                                    "task": "Docker@2",
                                    "displayName": "Build and push an image to container registry",
                                    "inputs": {
                                        "command": "buildAndPush",
                                        "repository": "$(imageRepository)",
                                        "dockerfile": "$(dockerfilePath)",
                                        "containerRegistry": "$(dockerRegistryServiceConnection)",
                                        "tags": "$(tag)",
                                    },
                                }
                            ],
                        }
                    ],
                },
                {
                    "stage": "Deploy",
                    "displayName": "Deploy stage",
                    "dependsOn": "Build",
                    "jobs": [
                        {
                            "deployment": "Deploy",
                            "environment": f"{project.name}-{options.environment}",
                            "pool": {"vmImage": "ubuntu-latest"},
                            "strategy": {
                                "runOnce": {
                                    "deploy": {
                                        "steps": [
                                            {
                                                "task": "AzureWebAppContainer@1",
                                                "displayName": "Azure Web App on Container Deploy",
                                                "inputs": {
                                                    "azureSubscription": "azure-service-connection",
                                                    "appName": project.name,
                                                    "containers": "$(containerRegistry)/$(imageRepository):$(tag)",
                                                },
                                            }
                                        ]
                                    }
                                }
                            },
                        }
                    ],
                },
            ],
        }
        return yaml.safe_dump(pipeline, sort_keys=False)
