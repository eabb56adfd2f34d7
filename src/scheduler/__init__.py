"""Cron-driven task scheduler core."""

from .cron_parser import CronExpression, parse_cron_expression, validate_cron, get_cron_description
from .errors import (
    SchedulerError,
    ScheduleParseError,
    TaskExecutionError,
    ConfigurationError,
    KernelStateError,
    TaskFailed
)
from .frequencies import Frequencies
from .task import Task, TaskOutcome
from .kernel import Kernel, TaskHandle

__all__ = [
    "CronExpression",
    "parse_cron_expression",
    "validate_cron",
    "get_cron_description",
    "SchedulerError",
    "ScheduleParseError",
    "TaskExecutionError",
    "ConfigurationError",
    "KernelStateError",
    "TaskFailed",
    "Frequencies",
    "Task",
    "TaskOutcome",
    "Kernel",
    "TaskHandle"
]
