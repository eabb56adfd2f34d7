"""Shell command task."""

import os
import shlex
import subprocess
from typing import Dict, List, Optional
import logging

from config import settings
from scheduler import Task, TaskFailed


class CommandTask(Task):
    """Runs a command on the host.

    A non-zero exit code or a timeout fails the task.
    """

    def __init__(self, command: str, args: Optional[List[str]] = None,
                 env: Optional[Dict[str, str]] = None,
                 working_dir: Optional[str] = None,
                 timeout: Optional[float] = None,
                 shell: bool = True,
                 name: Optional[str] = None,
                 logger: Optional[logging.Logger] = None):
        super().__init__(name=name, logger=logger)
        if not command:
            raise ValueError("Command is required for command task")
        self.command = command
        self.args = list(args or [])
        self.env = dict(env or {})
        self.working_dir = working_dir
        self.timeout = timeout if timeout is not None else settings.command_timeout
        self.shell = shell
        self.last_result: Optional[Dict[str, object]] = None

    def _validate_command(self) -> bool:
        """Validate if command is allowed to run."""
        if not settings.allow_host_commands:
            self.log("error", "Host commands are disabled in configuration")
            return False

        if settings.allowed_commands:
            cmd_parts = shlex.split(self.command)
            if cmd_parts and cmd_parts[0] not in settings.allowed_commands:
                self.log("error", f"Command '{cmd_parts[0]}' not in allowed commands list")
                return False

        return True

    def _full_command(self):
        if self.shell:
            if self.args:
                return f"{self.command} {' '.join(shlex.quote(arg) for arg in self.args)}"
            return self.command
        return shlex.split(self.command) + self.args

    def handle(self) -> None:
        if not self._validate_command():
            raise TaskFailed(f"Command not allowed: {self.command}")

        env = os.environ.copy()
        env.update(self.env)

        self.log("info", f"Executing command: {self.command}")
        if self.args:
            self.log("debug", f"Arguments: {self.args}")

        try:
            completed = subprocess.run(
                self._full_command(),
                shell=self.shell,
                capture_output=True,
                text=True,
                errors="replace",
                cwd=self.working_dir,
                env=env,
                timeout=self.timeout
            )
        except subprocess.TimeoutExpired as e:
            raise TaskFailed(f"Command timeout after {self.timeout} seconds") from e
        except OSError as e:
            raise TaskFailed(f"Command failed to start: {e}") from e

        self.last_result = {
            "exit_code": completed.returncode,
            "stdout": completed.stdout,
            "stderr": completed.stderr
        }

        if completed.returncode != 0:
            raise TaskFailed(f"Exit code: {completed.returncode}")

        self.log("info", f"Command completed successfully (exit code: {completed.returncode})")
