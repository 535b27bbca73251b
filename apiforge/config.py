from pydantic_settings import BaseSettings
from typing import List

class Settings(BaseSettings):
    # Application
    APP_NAME: str = "API Forge"
    APP_VERSION: str = "1.0.0"
    API_PREFIX: str = "/api/v1"
    CORS_ORIGINS: List[str] = ["http://localhost:5173", "http://localhost:3000"]
    REQUEST_TIMEOUT_SECONDS: int = 30

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "console"  # console or json

    # Deployments
    DEPLOY_STEP_DELAY_SCALE: float = 1.0  # multiplier applied to simulated step durations
    DEPLOY_TIMEOUT_SECONDS: float = 120.0

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
