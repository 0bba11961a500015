from pydantic_settings import BaseSettings
from pydantic import Field, ConfigDict


class Settings(BaseSettings):
    HOST: str = "0.0.0.0"
    PORT: int = 8080

    CORS_ORIGINS: list[str] = ["*"]

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    ENGINE_CALL_TIMEOUT: float = Field(
        default=60.0,
        description="Deadline in seconds for a single engine call"
    )

    IMAGE_PULL_TIMEOUT: float = Field(
        default=900.0,
        description="Deadline in seconds for pulling and draining an image"
    )

    STOP_TIMEOUT: int = Field(
        default=10,
        description="Grace period before the engine kills a stopping container"
    )

    DEFAULT_LOG_LINES: int = 50

    model_config = ConfigDict(
        env_file=".env",
        extra="ignore",
    )
