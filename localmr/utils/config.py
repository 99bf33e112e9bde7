from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache


class EngineSettings(BaseSettings):
    """
    Global configuration for the LocalMR engine.

    Values are loaded from environment variables prefixed with ``LOCALMR_``
    or from an ``.env`` file, and act as defaults for every ``JobConfig``
    built without explicit values.

    Attributes:
        default_chunk_size (int): Records per chunk handed to one map task.
        multi_threaded (bool): Run phases on a thread pool instead of the caller thread.
        max_workers (Optional[int]): Pool size; None sizes the pool to the CPU count.
        log_level (str): Logging level for the engine loggers.
        output_dir (str): Directory used by the CLI when no output path is given.
        enable_metrics (bool): Collect per-job Prometheus metrics.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="LOCALMR_",
        extra="ignore",
    )

    default_chunk_size: int = Field(128, gt=0, description="Records per map chunk")
    multi_threaded: bool = Field(True, description="Run tasks on a worker pool")
    max_workers: Optional[int] = Field(None, gt=0, description="Worker pool size (None = CPU count)")
    log_level: str = Field("info", description="Logging level")
    output_dir: str = Field("output", description="Default directory for job output")
    enable_metrics: bool = Field(True, description="Collect Prometheus metrics per job")


@lru_cache()
def get_settings() -> EngineSettings:
    """
    Retrieve a cached instance of the engine settings.

    Returns:
        EngineSettings: The global engine configuration.
    """
    return EngineSettings()
