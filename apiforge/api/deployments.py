from fastapi import APIRouter, Depends, HTTPException, Response, status
from typing import List, Optional

from ..exceptions import DeploymentNotFoundError, InvalidDeploymentConfigError, UnsupportedPlatformError
from ..schemas import (
    ConfigValidationResult,
    DeploymentLog,
    DeploymentOptions,
    DeploymentRequest,
    DeploymentStatus,
    GeneratedFile,
    PlatformInfo,
)
from ..services.deployment_service import DeploymentService
from .deps import get_deployment_service

router = APIRouter()

def not_found(e: DeploymentNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

@router.get("/platforms", response_model=List[PlatformInfo])
async def list_platforms(service: DeploymentService = Depends(get_deployment_service)):
    """List supported platforms and their regions"""
    return service.available_platforms()

@router.post("/validate", response_model=ConfigValidationResult)
async def validate_deployment_config(
    options: DeploymentOptions,
    service: DeploymentService = Depends(get_deployment_service)
):
    """Validate deployment options for a platform"""
    try:
        return service.validate_config(options)
    except UnsupportedPlatformError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.post("/files", response_model=List[GeneratedFile])
async def preview_deployment_files(
    request: DeploymentRequest,
    service: DeploymentService = Depends(get_deployment_service)
):
    """Render the platform descriptors without deploying"""
    try:
        return service.generate_deployment_files(request.project, request.options)
    except UnsupportedPlatformError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.post("", response_model=DeploymentStatus, status_code=status.HTTP_201_CREATED)
async def start_deployment(
    request: DeploymentRequest,
    service: DeploymentService = Depends(get_deployment_service)
):
    """Start a new deployment"""
    try:
        return await service.deploy(request.project, request.options)
    except UnsupportedPlatformError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except InvalidDeploymentConfigError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": str(e), "errors": e.errors, "warnings": e.warnings}
        )

@router.get("", response_model=List[DeploymentStatus])
async def list_deployments(
    project_id: Optional[str] = None,
    service: DeploymentService = Depends(get_deployment_service)
):
    """List deployments, optionally for one project"""
    return await service.list_deployments(project_id)

@router.get("/{deployment_id}", response_model=DeploymentStatus)
async def get_deployment(
    deployment_id: str,
    service: DeploymentService = Depends(get_deployment_service)
):
    """Get deployment status"""
    try:
        return await service.get_status(deployment_id)
    except DeploymentNotFoundError as e:
        raise not_found(e)

@router.get("/{deployment_id}/logs", response_model=List[DeploymentLog])
async def get_deployment_logs(
    deployment_id: str,
    service: DeploymentService = Depends(get_deployment_service)
):
    """Get deployment logs"""
    try:
        return await service.get_logs(deployment_id)
    except DeploymentNotFoundError as e:
        raise not_found(e)

@router.post("/{deployment_id}/cancel", response_model=DeploymentStatus)
async def cancel_deployment(
    deployment_id: str,
    service: DeploymentService = Depends(get_deployment_service)
):
    """Cancel a running deployment"""
    try:
        return await service.cancel(deployment_id)
    except DeploymentNotFoundError as e:
        raise not_found(e)

@router.delete("/{deployment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_deployment(
    deployment_id: str,
    service: DeploymentService = Depends(get_deployment_service)
):
    """Delete a deployment record"""
    try:
        await service.delete(deployment_id)
    except DeploymentNotFoundError as e:
        raise not_found(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
