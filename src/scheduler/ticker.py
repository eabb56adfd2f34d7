"""Minute-aligned ticker for long-running processes, using APScheduler."""

from typing import Any, Dict, Optional
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.executors.pool import ThreadPoolExecutor
import logging

from config import settings
from .kernel import Kernel

logger = logging.getLogger(__name__)

JOB_ID = "kernel_pass"


class MinuteTicker:
    """Calls Kernel.run() at second 0 of every minute."""

    def __init__(self, kernel: Kernel, timezone: Optional[str] = None,
                 job_defaults: Optional[Dict[str, Any]] = None):
        self.kernel = kernel
        self.timezone = timezone or settings.timezone
        self.job_defaults = job_defaults or settings.ticker_job_defaults
        self.scheduler = None

    def initialize(self):
        """Create the scheduler and register the kernel pass."""
        jobstores = {
            'default': MemoryJobStore()
        }

        # One worker: passes never overlap
        executors = {
            'default': ThreadPoolExecutor(max_workers=1)
        }

        self.scheduler = BlockingScheduler(
            jobstores=jobstores,
            executors=executors,
            job_defaults=self.job_defaults,
            timezone=self.timezone
        )

        self.scheduler.add_job(
            func=self._tick,
            trigger=CronTrigger(minute="*", second=0, timezone=self.timezone),
            id=JOB_ID,
            name="Kernel pass",
            replace_existing=True
        )
        logger.info(f"Ticker initialized ({len(self.kernel.tasks)} tasks, timezone {self.timezone})")

    def _tick(self):
        try:
            self.kernel.run()
        except Exception as e:
            # A failed pass must not stop the ticker
            logger.error(f"Scheduling pass failed: {e}", exc_info=True)

    def start(self):
        """Block, running a pass every minute until shutdown()."""
        if self.scheduler is None:
            self.initialize()
        logger.info("Ticker started")
        self.scheduler.start()

    def get_status(self) -> Dict[str, Any]:
        """Get current ticker status."""
        if not self.scheduler:
            return {"running": False}

        job = self.scheduler.get_job(JOB_ID)
        next_run = getattr(job, "next_run_time", None) if job else None
        return {
            "running": self.scheduler.running,
            "next_tick": next_run.isoformat() if next_run else None,
            "timezone": str(self.scheduler.timezone),
            "tasks": self.kernel.status()
        }

    def shutdown(self):
        """Shutdown the ticker."""
        if self.scheduler and self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Ticker shut down")
