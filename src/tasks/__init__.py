"""Built-in tasks and the job file loader."""

from .base import CallableTask
from .http_task import HttpTask
from .command_task import CommandTask
from .loader import JobDefinition, JobType, load_jobs, build_task, register_jobs

__all__ = [
    "CallableTask",
    "HttpTask",
    "CommandTask",
    "JobDefinition",
    "JobType",
    "load_jobs",
    "build_task",
    "register_jobs"
]
