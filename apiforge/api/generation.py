from fastapi import APIRouter, Depends, HTTPException, status

from ..exceptions import GenerationError, ModelValidationError
from ..schemas import GeneratedProject, GenerateProjectRequest, ValidateModelsRequest, ValidationResult
from ..services.project_service import ProjectService
from .deps import get_project_service

router = APIRouter()

@router.post("/models/validate", response_model=ValidationResult)
def validate_models(
    request: ValidateModelsRequest,
    project_service: ProjectService = Depends(get_project_service)
):
    """Validate a model set without generating anything"""
    return project_service.validator.validate_models(request.models, authentication=request.authentication)

@router.post("/projects/generate", response_model=GeneratedProject)
def generate_project(
    request: GenerateProjectRequest,
    project_service: ProjectService = Depends(get_project_service)
):
    """Generate a complete project from the model set"""
    try:
        return project_service.generate_project(
            request.models,
            request.options,
            auth_config=request.auth_config,
            validate=not request.skip_validation,
        )
    except ModelValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=e.result.model_dump(by_alias=True)
        )
    except GenerationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
