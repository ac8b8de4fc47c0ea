from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Document defaults, used when the router's override omits them
    APP_TITLE: str = "OpenAPI Router"
    APP_VERSION: str = "1.0.0"
    OPENAPI_VERSION: str = "3.0.3"

    # Served endpoints; an empty string disables the endpoint
    OPENAPI_URL: str = "/openapi.json"
    OPENAPI_YAML_URL: str = "/openapi.yaml"
    DOCS_URL: str = "/docs"
    REDOC_URL: str = "/redocs"

    # Backend
    BACKEND_HOST: str = "0.0.0.0"
    BACKEND_PORT: int = 8000

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False  # True for production (structured JSON), False for dev (colored)

    class Config:
        env_file = ".env"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    return Settings()
