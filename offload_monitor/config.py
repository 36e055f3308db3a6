from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_GPU_QUERY_COMMAND = (
    "nvidia-smi "
    "--query-gpu=name,memory.total,memory.used,temperature.gpu,utilization.gpu "
    "--format=csv,noheader,nounits"
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8', extra='ignore')

    # Server
    HOST: str = Field("0.0.0.0", description="Interface the server binds to")
    PORT: int = Field(3000, ge=1, le=65535, description="Port the server listens on")
    APP_ENV: str = Field("development", description="Runtime mode shown on the dashboard")

    # Accelerator probe
    GPU_QUERY_COMMAND: str = Field(DEFAULT_GPU_QUERY_COMMAND, description="Command used to query GPU metrics")
    GPU_QUERY_TIMEOUT: float = Field(5.0, gt=0, le=5, description="Timeout in seconds for the GPU query command")

    # Offload probe
    CONTAINER_MARKER_PATH: str = Field("/.dockerenv", description="File whose presence marks a container")

    # Dashboard
    DASHBOARD_REFRESH_SECONDS: int = Field(30, ge=1, description="Polling interval of the dashboard page")

    # Logging
    LOG_LEVEL: str = Field("INFO", description="Logging level")


settings = Settings()
