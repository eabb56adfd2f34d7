"""Scheduler error types."""

from typing import Optional


class SchedulerError(Exception):
    """Base class for scheduler errors."""


class ScheduleParseError(SchedulerError, ValueError):
    """Raised when a cron expression cannot be parsed."""

    def __init__(self, message: str, expression: str = "", field: Optional[str] = None):
        self.expression = expression
        self.field = field
        if field:
            message = f"{field}: {message}"
        if expression:
            message = f"{message} (in '{expression}')"
        super().__init__(message)


class TaskExecutionError(SchedulerError):
    """Wraps a failure raised from a task's handle()."""

    def __init__(self, task_name: str, detail: str):
        self.task_name = task_name
        self.detail = detail
        super().__init__(f"Task '{task_name}' failed: {detail}")


class ConfigurationError(SchedulerError):
    """Fatal setup error, e.g. a missing logger or an invalid job definition."""


class KernelStateError(ConfigurationError):
    """Raised when the kernel is reconfigured while a pass is running."""


class TaskFailed(SchedulerError):
    """Raised by built-in tasks when their work did not succeed."""
