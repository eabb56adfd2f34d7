"""Job definitions loaded from a JSON file at startup.

File structure::

    {
      "jobs": [
        {"name": "heartbeat", "type": "http", "schedule": "*/1 * * * *",
         "config": {"url": "https://example.com/health", "expected_status": 200}},
        {"name": "backup", "type": "command", "schedule": "0 */3 * * *",
         "config": {"command": "./backup.sh", "timeout": 600}}
      ]
    }

A bare list of jobs is accepted as well.
"""

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from scheduler import ConfigurationError, CronExpression, Kernel, Task, TaskHandle
from .command_task import CommandTask
from .http_task import HttpTask


class JobType(str, Enum):
    HTTP = "http"
    COMMAND = "command"


class JobDefinition(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    type: JobType
    schedule: str = "* * * * *"
    config: Dict[str, Any] = Field(default_factory=dict)
    enabled: bool = True

    @field_validator("schedule")
    @classmethod
    def validate_schedule(cls, value: str) -> str:
        return CronExpression.parse(value).expression


TASK_CLASSES = {
    JobType.HTTP: HttpTask,
    JobType.COMMAND: CommandTask
}


def load_jobs(path: Union[str, Path]) -> List[JobDefinition]:
    """Read and validate job definitions.

    Raises:
        ConfigurationError: if the file cannot be read, is not JSON, or holds
            an invalid job definition or schedule
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ConfigurationError(f"Jobs file not found: {path}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read jobs file {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise ConfigurationError(f"Jobs file {path} is not valid UTF-8: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Jobs file {path} is not valid JSON: {e}") from e

    if isinstance(data, dict):
        data = data.get("jobs", [])
    if not isinstance(data, list):
        raise ConfigurationError(f"Jobs file {path} must contain a list of jobs")

    try:
        return [JobDefinition.model_validate(item) for item in data]
    except ValidationError as e:
        raise ConfigurationError(f"Invalid job definition in {path}: {e}") from e


def build_task(definition: JobDefinition, logger: logging.Logger) -> Task:
    """Instantiate the task class for a definition."""
    task_class = TASK_CLASSES[definition.type]
    try:
        return task_class(name=definition.name, logger=logger, **definition.config)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid config for job '{definition.name}': {e}") from e


def register_jobs(kernel: Kernel, definitions: List[JobDefinition],
                  logger: logging.Logger) -> List[TaskHandle]:
    """Register enabled jobs with the kernel, in definition order.

    Raises:
        ScheduleParseError: if a job's schedule is malformed
        ConfigurationError: if a job's config does not fit its task type
    """
    handles = []
    for definition in definitions:
        if not definition.enabled:
            logger.info(f"Job '{definition.name}' is disabled, skipping")
            continue
        task = build_task(definition, logger)
        handles.append(kernel.add(task, definition.schedule))
    return handles
