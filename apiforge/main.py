from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import asyncio
import time

from .api import deployments, generation
from .config import settings
from .services.deployment_service import DeploymentService
from .services.project_service import ProjectService
from .utils.logger import get_logger, setup_logger

logger = get_logger(__name__)


def create_app(deployment_service: DeploymentService = None, project_service: ProjectService = None) -> FastAPI:
    setup_logger()

    app = FastAPI(
        title=settings.APP_NAME,
        description="Generate backend services from model definitions and stage them for deployment",
        version=settings.APP_VERSION
    )
    app.state.project_service = project_service or ProjectService()
    app.state.deployment_service = deployment_service or DeploymentService()

    @app.middleware("http")
    async def timeout_middleware(request: Request, call_next):
        timeout_seconds = settings.REQUEST_TIMEOUT_SECONDS
        start_time = time.time()

        try:
            response = await asyncio.wait_for(call_next(request), timeout=timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning("request_timed_out", path=request.url.path, timeout=timeout_seconds)
            return JSONResponse(
                status_code=408,
                content={
                    "detail": f"Request timed out after {timeout_seconds} seconds",
                    "timeout": timeout_seconds,
                    "path": str(request.url.path)
                }
            )

        response.headers["X-Process-Time"] = str(time.time() - start_time)
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(generation.router, prefix=settings.API_PREFIX, tags=["generation"])
    app.include_router(deployments.router, prefix=f"{settings.API_PREFIX}/deployments", tags=["deployments"])

    @app.get("/")
    async def root():
        return {"message": settings.APP_NAME, "version": settings.APP_VERSION}

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "timestamp": time.time()}

    return app


app = create_app()
