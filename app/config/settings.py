from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"
    log_file: str = ""

    redis_host: str
    redis_port: int = 6379
    redis_password: str = ""
    redis_db: int = 0
    queue_namespace: str = "rsmq"

    fetch_queue: str
    result_queue: str
    data_dir: Path

    queue_visibility_timeout_seconds: int = Field(default=1800, ge=1)
    queue_max_receive_count: int = Field(default=2, ge=1)
    queue_poll_interval_seconds: int = 5
    worker_concurrency: int = Field(default=1, ge=1)

    measurement_engine: str = "docker"
    measurement_image: str = "sitespeedio/sitespeed.io"
    measurement_binary: str = "sitespeed.io"
    measurement_timeout_seconds: int = 0

    storage_backend: str = "s3"
    s3_bucket: str = ""
    s3_region: str = "eu-west-1"
    s3_endpoint_url: str = ""
    storage_local_root: str = ""

    results_base_url: str = "http://results.sitespeed.io/"

    @property
    def result_root(self) -> Path:
        """Directory the measurement tool writes its result trees into."""
        return self.data_dir / "sitespeed-result"
