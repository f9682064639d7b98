"""
Configuration settings for the OpenShift explorer.
"""
from pydantic_settings import BaseSettings
from pydantic import Field
from typing import Optional


class Settings(BaseSettings):
    """Application settings from environment variables."""

    # Application
    APP_NAME: str = Field(default="oc-explorer", description="Application name")
    APP_ENV: str = Field(default="dev", description="Environment: dev|staging|prod")

    # HTTP Configuration
    HTTP_HOST: str = Field(default="127.0.0.1", description="Bind address")
    HTTP_PORT: int = Field(default=3001, description="Service port")
    CORS_ORIGINS: str = Field(default="*", description="Comma separated allowed origins")

    # oc Configuration
    OC_BINARY: str = Field(default="oc", description="Path or name of the oc executable")
    OC_TIMEOUT_SECS: float = Field(default=8, gt=0, description="Timeout for oc commands")
    OC_HEALTH_TIMEOUT_SECS: float = Field(default=5, gt=0, description="Timeout for oc whoami")
    LOG_TAIL_LINES: int = Field(default=100, ge=1, description="Default number of pod log lines")
    PATCH_DIR: Optional[str] = Field(default=None, description="Directory for transient patch files")

    # Dashboard Configuration
    API_BASE_URL: str = Field(default="http://127.0.0.1:3001", description="Gateway URL used by the dashboard")
    API_TIMEOUT_SECS: float = Field(default=10, gt=0, description="Dashboard request timeout")
    POLL_INTERVAL_SECS: float = Field(default=5, gt=0, description="Usage polling interval")

    # Service Configuration
    LOG_LEVEL: str = Field(default="info", description="Log level: info|debug|warning")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


# Global settings instance
settings = Settings()
