"""Unit tests for SubprocessCommandRunner."""

import logging
import subprocess

import pytest

from pgkeeper.adapters.subprocess_command_runner import SubprocessCommandRunner


@pytest.mark.tier(1)
@pytest.mark.tra("Adapter.SubprocessCommandRunner")
class TestSubprocessCommandRunner:
    def test_returns_exit_status(self):
        runner = SubprocessCommandRunner()
        assert runner.run("true") == 0
        assert runner.run("exit 3") == 3

    def test_runs_through_the_shell(self, tmp_path):
        marker = tmp_path / "promoted"
        SubprocessCommandRunner().run(f"echo done > {marker}")
        assert marker.read_text().strip() == "done"

    def test_output_is_logged(self, caplog):
        with caplog.at_level(logging.INFO, logger="pgkeeper.adapters.subprocess_command_runner"):
            SubprocessCommandRunner().run("echo out; echo err >&2")

        messages = [r.getMessage() for r in caplog.records]
        assert any("stdout: out" in m for m in messages)
        assert any("stderr: err" in m for m in messages)

    def test_timeout(self):
        with pytest.raises(subprocess.TimeoutExpired):
            SubprocessCommandRunner(timeout=0.1).run("exec sleep 5")
