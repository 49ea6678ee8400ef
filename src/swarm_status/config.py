"""Configuration management using Pydantic Settings."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class GatewayConfig(BaseModel):
    """Connection parameters for the Docker Swarm control plane.

    Passed explicitly into ``SwarmGateway``; the gateway never reads
    process-wide settings on its own.
    """

    model_config = ConfigDict(frozen=True)

    host: str = "unix:///var/run/docker.sock"
    api_version: str = "1.33"
    headers: dict[str, str] = Field(default_factory=dict)
    timeout: int = 60


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # API Server
    api_host: str = Field(default="0.0.0.0", description="API server host (listen on all interfaces)")
    api_port: int = Field(default=8080, description="API server port")
    api_reload: bool = Field(default=False, description="Enable auto-reload in development")

    # Docker Swarm
    docker_host: str = Field(
        default="unix:///var/run/docker.sock",
        description="Docker daemon socket",
    )
    docker_api_version: str = Field(
        default="1.33",
        description="Docker Engine API version used for service and task listing",
    )
    docker_user_agent: str = Field(
        default="docker-swarm-deployment-status-cli-1.0",
        description="User-Agent header sent to the Docker daemon",
    )
    docker_timeout: int = Field(
        default=60,
        ge=1,
        description="Timeout in seconds for Docker API calls",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    def gateway_config(self) -> GatewayConfig:
        """Build the explicit gateway configuration from these settings."""
        return GatewayConfig(
            host=self.docker_host,
            api_version=self.docker_api_version,
            headers={"User-Agent": self.docker_user_agent},
            timeout=self.docker_timeout,
        )


# Global settings instance
settings = Settings()
