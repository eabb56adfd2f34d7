"""Tests for the command line entry point."""

import json
import pytest
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import main


@pytest.fixture
def jobs_file(tmp_path):
    def write(*jobs):
        path = tmp_path / "jobs.json"
        path.write_text(json.dumps({"jobs": list(jobs)}))
        return str(path)
    return write


def command_job(name, command, schedule="0 14 29 2 *"):
    return {"name": name, "type": "command", "schedule": schedule, "config": {"command": command}}


class TestMain:
    """Test CLI modes and exit codes."""

    def test_once_success(self, jobs_file):
        path = jobs_file(command_job("leap", "true"))
        assert main.main(["--mode", "once", "--jobs", path, "--timezone", "UTC",
                          "--at", "2024-02-29T14:00"]) == 0

    def test_once_with_failed_task(self, jobs_file):
        path = jobs_file(command_job("broken", "exit 3"), command_job("fine", "true"))
        assert main.main(["--jobs", path, "--at", "2024-02-29T14:00"]) == 1

    def test_invalid_schedule_refuses_to_start(self, jobs_file):
        path = jobs_file(command_job("bad", "true", schedule="5-3 * * * *"))
        assert main.main(["--jobs", path]) == 2

    def test_missing_jobs_file(self, tmp_path):
        assert main.main(["--jobs", str(tmp_path / "missing.json")]) == 2

    def test_unreadable_jobs_file(self, tmp_path):
        assert main.main(["--jobs", str(tmp_path)]) == 2

    def test_out_of_range_step_start_refuses_to_start(self, jobs_file):
        path = jobs_file(command_job("bad", "true", schedule="70/5 * * * *"))
        assert main.main(["--jobs", path]) == 2

    def test_invalid_at(self, jobs_file):
        path = jobs_file(command_job("leap", "true"))
        assert main.main(["--jobs", path, "--at", "tomorrow"]) == 2

    def test_list(self, jobs_file, capsys):
        path = jobs_file(command_job("leap", "true"))
        assert main.main(["--mode", "list", "--jobs", path, "--timezone", "UTC",
                          "--at", "2024-01-01T00:00"]) == 0

        out = capsys.readouterr().out
        assert "leap" in out
        assert "0 14 29 2 *" in out
        assert "2024-02-29T14:00:00+00:00" in out

    def test_build_kernel(self, jobs_file):
        path = jobs_file(command_job("a", "true"), command_job("b", "true", "* * * * *"))
        kernel = main.build_kernel(path, "UTC")
        assert [task.name for task in kernel.tasks] == ["a", "b"]
