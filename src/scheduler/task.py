"""Base class for recurring tasks and the result of one execution."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Union
import logging

from .cron_parser import CronExpression
from .errors import ConfigurationError, TaskExecutionError

DEFAULT_EXPRESSION = "* * * * *"


@dataclass
class TaskOutcome:
    """Result of one task execution."""
    task_name: str
    scheduled_for: datetime
    started_at: datetime
    finished_at: datetime
    duration: float  # seconds
    success: bool
    error: Optional[str] = None
    exception: Optional[TaskExecutionError] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "task_name": self.task_name,
            "scheduled_for": self.scheduled_for.isoformat(),
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat(),
            "duration": self.duration,
            "success": self.success,
            "error": self.error
        }


class Task(ABC):
    """A unit of recurring work.

    Subclasses implement handle(). The schedule is assigned when the task is
    registered with a Kernel; until then it runs every minute.
    """

    def __init__(self, name: Optional[str] = None, logger: Optional[logging.Logger] = None):
        self.name = name or type(self).__name__
        self.logger = logger
        self.expression = CronExpression.parse(DEFAULT_EXPRESSION)
        self.last_run_at: Optional[datetime] = None
        self.last_outcome: Optional[TaskOutcome] = None

    @abstractmethod
    def handle(self) -> None:
        """Do the work. Raise to signal failure."""
        pass

    def is_due_to_run(self, instant: datetime) -> bool:
        """Check if the task is due at the given instant."""
        return self.expression.is_due(instant)

    def log(self, level: Union[str, int], message: str) -> None:
        """Forward a message to the injected logger.

        Raises:
            ConfigurationError: if the task was created without a logger
        """
        if self.logger is None:
            raise ConfigurationError(f"Logger instance is None for task '{self.name}'")

        if isinstance(level, str):
            numeric = logging.getLevelName(level.upper())
            if not isinstance(numeric, int):
                raise ConfigurationError(f"Unknown log level '{level}'")
            level = numeric

        self.logger.log(level, message)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r} '{self.expression}'>"
