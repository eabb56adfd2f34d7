"""Kernel: owns registered tasks and runs one scheduling pass per tick."""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .cron_parser import CronExpression, get_cron_description
from .errors import ConfigurationError, KernelStateError, TaskExecutionError
from .frequencies import Frequencies
from .task import Task, TaskOutcome

# Frequencies methods that can be called on a TaskHandle
_HELPERS = frozenset(
    name for name, value in vars(Frequencies).items()
    if callable(value) and not name.startswith("_") and name != "build"
)


def _same_minute(previous: Optional[datetime], now: datetime) -> bool:
    if previous is None:
        return False
    return previous.replace(second=0, microsecond=0) == now.replace(second=0, microsecond=0)


class TaskHandle:
    """Live reference to a registered task, used to configure its schedule.

    Every Frequencies helper is available and replaces the task's
    expression immediately::

        kernel.add(ReportTask(logger=log)).weekdays().daily_at("14:00")
    """

    def __init__(self, kernel: "Kernel", task: Task):
        self._kernel = kernel
        self._task = task

    @property
    def task(self) -> Task:
        return self._task

    @property
    def expression(self) -> CronExpression:
        return self._task.expression

    def cron(self, expression: str) -> "TaskHandle":
        """Replace the task's schedule with a raw cron expression."""
        return self._apply(Frequencies(expression))

    def _apply(self, frequencies: Frequencies) -> "TaskHandle":
        self._kernel._reschedule(self._task, frequencies.build())
        return self

    def __getattr__(self, name: str):
        if name not in _HELPERS:
            raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")
        helper = getattr(Frequencies, name)

        def apply(*args, **kwargs) -> "TaskHandle":
            current = Frequencies(self._task.expression.expression)
            return self._apply(helper(current, *args, **kwargs))

        return apply

    def __repr__(self) -> str:
        return f"<TaskHandle {self._task.name!r} '{self._task.expression}'>"


class Kernel:
    """Runs registered tasks whose schedule matches the current minute.

    Setup (add, set_time, schedule changes) must happen between passes;
    doing it while run() is executing raises KernelStateError.
    """

    def __init__(self, logger: logging.Logger, *, timezone: Optional[str] = None,
                 max_workers: int = 1):
        if logger is None:
            raise ConfigurationError("Kernel requires a logger")
        if max_workers < 1:
            raise ConfigurationError(f"max_workers must be at least 1, got {max_workers}")

        try:
            self.timezone = ZoneInfo(timezone) if timezone else None
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ConfigurationError(f"Unknown timezone '{timezone}'") from e

        self.logger = logger
        self.max_workers = max_workers
        self._tasks: List[Task] = []
        self._pinned_time: Optional[datetime] = None
        self._running = False
        self._state_lock = threading.Lock()

    @property
    def tasks(self) -> Tuple[Task, ...]:
        return tuple(self._tasks)

    @property
    def running(self) -> bool:
        return self._running

    def _ensure_idle(self, action: str):
        if self._running:
            raise KernelStateError(f"Cannot {action} while a scheduling pass is running")

    def add(self, task: Task, expression: Optional[str] = None) -> TaskHandle:
        """Register a task.

        Args:
            task: Task instance; registration order is execution order
            expression: Optional cron expression, parsed immediately

        Returns:
            A TaskHandle for further schedule configuration

        Raises:
            ScheduleParseError: if the expression is malformed
        """
        if not isinstance(task, Task):
            raise TypeError(f"Expected a Task, got {type(task).__name__}")
        self._ensure_idle("add tasks")
        if any(existing is task for existing in self._tasks):
            raise ConfigurationError(f"Task '{task.name}' is already registered")

        if expression is not None:
            task.expression = CronExpression.parse(expression)

        self._tasks.append(task)
        self.logger.debug(f"Registered task '{task.name}' ({task.expression})")
        return TaskHandle(self, task)

    def _reschedule(self, task: Task, expression: CronExpression):
        self._ensure_idle("change schedules")
        task.expression = expression
        self.logger.debug(
            f"Scheduled task '{task.name}' at '{expression}' "
            f"({get_cron_description(expression.expression)})"
        )

    def set_time(self, instant: datetime):
        """Pin "now" for subsequent passes."""
        if not isinstance(instant, datetime):
            raise TypeError(f"Expected a datetime, got {type(instant).__name__}")
        self._ensure_idle("set the time")
        self._pinned_time = instant

    def clear_time(self):
        """Go back to the wall clock."""
        self._ensure_idle("clear the time")
        self._pinned_time = None

    def _clock(self) -> datetime:
        return datetime.now(self.timezone)

    def now(self) -> datetime:
        if self._pinned_time is not None:
            return self._pinned_time
        return self._clock()

    def run(self) -> List[TaskOutcome]:
        """Execute one scheduling pass.

        Every registered task is checked against the current minute and the
        due ones are executed. A failing task is logged and recorded in its
        outcome; it never stops the pass.

        Returns:
            Outcomes of the executed tasks, in registration order
        """
        with self._state_lock:
            self._ensure_idle("start a pass")
            self._running = True

        try:
            now = self.now()
            outcomes: List[Optional[TaskOutcome]] = []
            due: List[Task] = []

            for task in self._tasks:
                try:
                    is_due = task.is_due_to_run(now)
                except Exception as e:
                    outcomes.append(self._failed(task, now, self._clock(), 0.0, e))
                    continue
                if not is_due:
                    continue
                if _same_minute(task.last_run_at, now):
                    self.logger.debug(f"Task '{task.name}' already ran at {task.last_run_at}, skipping")
                    continue
                due.append(task)
                outcomes.append(None)

            self.logger.info(
                f"Running {len(due)} of {len(self._tasks)} task(s) due at {now:%Y-%m-%d %H:%M}"
            )

            if self.max_workers > 1 and len(due) > 1:
                with ThreadPoolExecutor(max_workers=self.max_workers,
                                        thread_name_prefix="chronokernel") as pool:
                    executed = list(pool.map(lambda t: self._execute(t, now), due))
            else:
                executed = [self._execute(task, now) for task in due]
        finally:
            self._running = False

        # Slot executed outcomes back next to any due-check failures
        results = iter(executed)
        outcomes = [outcome or next(results) for outcome in outcomes]

        failed = sum(1 for outcome in outcomes if not outcome.success)
        if failed:
            self.logger.warning(f"Pass finished with {failed} failed task(s) out of {len(outcomes)}")
        else:
            self.logger.info(f"Pass finished, {len(outcomes)} task(s) succeeded")
        return outcomes

    def _execute(self, task: Task, now: datetime) -> TaskOutcome:
        """Run a single task, containing any failure."""
        task.last_run_at = now
        started_at = self._clock()
        start = time.monotonic()
        self.logger.info(f"Running task '{task.name}'")

        try:
            task.handle()
        except Exception as e:
            outcome = self._failed(task, now, started_at, time.monotonic() - start, e)
        else:
            duration = time.monotonic() - start
            outcome = TaskOutcome(
                task_name=task.name,
                scheduled_for=now,
                started_at=started_at,
                finished_at=self._clock(),
                duration=duration,
                success=True
            )
            self.logger.info(f"Task '{task.name}' completed in {duration:.3f}s")

        task.last_outcome = outcome
        return outcome

    def _failed(self, task: Task, now: datetime, started_at: datetime,
                duration: float, exc: Exception) -> TaskOutcome:
        error = TaskExecutionError(task.name, f"{type(exc).__name__}: {exc}")
        error.__cause__ = exc
        self.logger.error(str(error), exc_info=exc)

        outcome = TaskOutcome(
            task_name=task.name,
            scheduled_for=now,
            started_at=started_at,
            finished_at=self._clock(),
            duration=duration,
            success=False,
            error=error.detail,
            exception=error
        )
        task.last_outcome = outcome
        return outcome

    def status(self) -> List[Dict[str, Any]]:
        """Describe every registered task and when it is next due."""
        now = self.now()
        report = []
        for task in self._tasks:
            next_due = task.expression.next_due(now)
            last = task.last_outcome
            report.append({
                "name": task.name,
                "expression": task.expression.expression,
                "description": get_cron_description(task.expression.expression),
                "last_run_at": task.last_run_at.isoformat() if task.last_run_at else None,
                "last_success": last.success if last else None,
                "next_due": next_due.isoformat() if next_due else None
            })
        return report
