#!/usr/bin/env python3
"""Main entry point for ChronoKernel."""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo

# Add src to path
sys.path.insert(0, str(Path(__file__).parent))

from config import settings
from scheduler import ConfigurationError, Kernel, ScheduleParseError, get_cron_description
from tasks import load_jobs, register_jobs

logger = logging.getLogger(__name__)


def configure_logging():
    handlers = [logging.StreamHandler()]
    if settings.log_file:
        Path(settings.log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(settings.log_file))

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


def build_kernel(jobs_file: str, timezone: str) -> Kernel:
    """Create a kernel with every job from the jobs file registered."""
    task_logger = logging.getLogger(settings.task_logger_name)

    logger.info("Creating kernel")
    kernel = Kernel(task_logger, timezone=timezone, max_workers=settings.max_workers)

    logger.info(f"Adding tasks from {jobs_file}")
    register_jobs(kernel, load_jobs(jobs_file), task_logger)
    logger.info(f"Registered {len(kernel.tasks)} tasks")
    return kernel


def run_once(kernel: Kernel) -> int:
    """Run a single pass, for hosts that trigger the process every minute."""
    outcomes = kernel.run()
    return 1 if any(not outcome.success for outcome in outcomes) else 0


def run_daemon(kernel: Kernel, timezone: str) -> int:
    """Run a pass every minute until interrupted."""
    from scheduler.ticker import MinuteTicker

    ticker = MinuteTicker(kernel, timezone=timezone)
    try:
        ticker.start()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Shutting down ChronoKernel...")
        ticker.shutdown()
    return 0


def list_jobs(kernel: Kernel) -> int:
    for entry in kernel.status():
        print(f"{entry['name']:<30} {entry['expression']:<20} "
              f"{get_cron_description(entry['expression']):<40} next: {entry['next_due']}")
    return 0


def main(argv=None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="ChronoKernel cron task runner")
    parser.add_argument(
        "--mode",
        choices=["once", "daemon", "list"],
        default="once",
        help="Run one pass and exit, tick every minute, or list jobs (default: once)"
    )
    parser.add_argument(
        "--jobs",
        default=settings.jobs_file,
        help=f"Job definitions file (default: {settings.jobs_file})"
    )
    parser.add_argument(
        "--timezone",
        default=settings.timezone,
        help=f"Timezone for evaluating schedules (default: {settings.timezone})"
    )
    parser.add_argument(
        "--at",
        help="Evaluate schedules at this ISO timestamp instead of now"
    )

    args = parser.parse_args(argv)
    configure_logging()

    try:
        kernel = build_kernel(args.jobs, args.timezone)
        if args.at:
            instant = datetime.fromisoformat(args.at)
            if instant.tzinfo is None:
                instant = instant.replace(tzinfo=ZoneInfo(args.timezone))
            kernel.set_time(instant)
    except (ScheduleParseError, ConfigurationError) as e:
        logger.error(f"Refusing to start: {e}")
        return 2
    except ValueError as e:
        logger.error(f"Invalid --at timestamp '{args.at}': {e}")
        return 2

    try:
        if args.mode == "daemon":
            return run_daemon(kernel, args.timezone)
        if args.mode == "list":
            return list_jobs(kernel)
        return run_once(kernel)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
