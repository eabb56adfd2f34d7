"""Configuration settings for ChronoKernel."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Scheduling
    timezone: str = "UTC"
    jobs_file: str = "data/jobs.json"
    max_workers: int = 1  # >1 runs due tasks of a pass concurrently

    # Ticker (long-running mode)
    ticker_job_defaults: dict = {
        "coalesce": True,
        "max_instances": 1,
        "misfire_grace_time": 30
    }

    # Built-in task settings
    http_timeout: int = 30
    command_timeout: int = 300

    # Security
    allow_host_commands: bool = True
    allowed_commands: list = []  # Empty means all commands allowed

    # Logging
    log_level: str = "INFO"
    log_file: str = ""
    task_logger_name: str = "chronokernel.tasks"

    class Config:
        env_prefix = "CHRONOKERNEL_"
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
