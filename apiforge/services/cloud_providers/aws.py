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
    require_env,
    url_suffix,
    validate_common_options,
)

CONTAINER_PORT = 8000


class AWSProvider:
    platform = "aws"
    regions = (
        "us-east-1", "us-east-2", "us-west-1", "us-west-2",
        "eu-west-1", "eu-west-2", "eu-west-3", "eu-central-1",
        "ap-southeast-1", "ap-southeast-2", "ap-northeast-1", "ap-northeast-2",
    )

    def validate_config(self, options: DeploymentOptions) -> ConfigValidationResult:
        errors = require_env(options, ["AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY"], "AWS")
        errors += check_region(options, self.regions, "AWS")
        return finish_validation(validate_common_options(options), errors, [])

    def generate_deployment_files(self, project: GeneratedProject, options: DeploymentOptions) -> Dict[str, str]:
        return {
            "cloudformation.yaml": self._cloudformation(project, options),
            "Dockerfile": generate_dockerfile(project.generation_options.framework.value, port=CONTAINER_PORT),
            "buildspec.yml": self._buildspec(project),
        }

    def rollout_steps(self, options: DeploymentOptions) -> List[RolloutStep]:
        return [
            RolloutStep("Creating CloudFormation stack...", 3.0, 25),
            RolloutStep("Building Docker image...", 4.0, 45),
            RolloutStep("Pushing to ECR repository...", 3.5, 65),
            RolloutStep("Deploying to ECS Fargate...", 4.0, 85),
            RolloutStep("Configuring load balancer...", 2.0, 95),
        ]

    def deployment_url(self, project: GeneratedProject, options: DeploymentOptions, deployment_id: str) -> str:
        url = custom_domain_url(options)
        if url:
            return url
        region = options.region or "us-east-1"
        return f"https://{project.name}-{url_suffix(deployment_id)}.{region}.elb.amazonaws.com"

    def _cloudformation(self, project: GeneratedProject, options: DeploymentOptions) -> str:
        cpu, memory = ("512", "1024") if options.instance_type == "large" else ("256", "512")
        template = {
            "AWSTemplateFormatVersion": "2010-09-09",
            "Description": f"CloudFormation template for {project.name}",
            "Parameters": {
                "Environment": {
                    "Type": "String",
                    "Default": options.environment,
                    "AllowedValues": ["development", "staging", "production"],
                },
            },
            "Resources": {
                "ECSCluster": {
                    "Type": "AWS::ECS::Cluster",
                    "Properties": {"ClusterName": f"{project.name}-cluster"},
                },
                "TaskDefinition": {
                    "Type": "AWS::ECS::TaskDefinition",
                    "Properties": {
                        "Family": project.name,
                        "Cpu": cpu,
                        "Memory": memory,
                        "NetworkMode": "awsvpc",
                        "RequiresCompatibilities": ["FARGATE"],
                        "ExecutionRoleArn": {"Ref": "ExecutionRole"},
                        "ContainerDefinitions": [
                            {
                                "Name": project.name,
                                "Image": f"{project.name}:latest",
                                "PortMappings": [{"ContainerPort": CONTAINER_PORT, "Protocol": "tcp"}],
                                "Environment": [
                                    {"Name": name, "Value": value}
                                    for name, value in deployment_env(project, options).items()
                                ],
                            }
                        ],
                    },
                },
                "ExecutionRole": {
                    "Type": "AWS::IAM::Role",
                    "Properties": {
                        "AssumeRolePolicyDocument": {
                            "Version": "2012-10-17",
                            "Statement": [
                                {
                                    "Effect": "Allow",
                                    "Principal": {"Service": "ecs-tasks.amazonaws.com"},
                                    "Action": "sts:AssumeRole",
                                }
                            ],
                        },
                        "ManagedPolicyArns": [
                            "arn:aws:iam::aws:policy/service-role/AmazonECSTaskExecutionRolePolicy",
                        ],
                    },
                },
            },
        }
        if options.auto_scale:
            template["Resources"]["ScalableTarget"] = {
                "Type": "AWS::ApplicationAutoScaling::ScalableTarget",
                "Properties": {
                    "MinCapacity": 1,
                    "MaxCapacity": 10,
                    "ScalableDimension": "ecs:service:DesiredCount",
                    "ServiceNamespace": "ecs",
                    "ResourceId": f"service/{project.name}-cluster/{project.name}",
                },
            }
        return yaml.safe_dump(template, sort_keys=False)

    def _buildspec(self, project: GeneratedProject) -> str:
        registry = "$AWS_ACCOUNT_ID.dkr.ecr.$AWS_DEFAULT_REGION.amazonaws.com"
        spec = {
            "version": 0.2,
            "phases": {
                "pre_build": {
                    "commands": [
                        "echo Logging in to Amazon ECR...",
                        "aws ecr get-login-password --region $AWS_DEFAULT_REGION"
                        f" | docker login --username AWS --password-stdin {registry}",
                    ]
                },
                "build": {
                    "commands": [
                        "echo Build started on `date`",
                        f"docker build -t {project.name} .",
                        f"docker tag {project.name}:latest {registry}/{project.name}:latest",
                    ]
                },
                "post_build": {
                    "commands": [
                        "echo Build completed on `date`",
                        f"docker push {registry}/{project.name}:latest",
                    ]
                },
            },
        }
        return yaml.safe_dump(spec, sort_keys=False)
