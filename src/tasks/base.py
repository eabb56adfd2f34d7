"""Task wrapping a plain callable."""

from typing import Callable, Optional
import logging

from scheduler import Task


class CallableTask(Task):
    """Runs a function on each due tick."""

    def __init__(self, func: Callable[[], object], name: Optional[str] = None,
                 logger: Optional[logging.Logger] = None):
        super().__init__(name=name or getattr(func, "__name__", None), logger=logger)
        self.func = func

    def handle(self) -> None:
        self.func()
