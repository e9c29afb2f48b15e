"""Command builder tests."""

from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

import pytest

from cmd_utils import Command, ProcessSpec
from cmd_utils.errors import ChildFailure
from cmd_utils.runtime.child_runner import IS_WINDOWS


class TestBuilder:
    """Test the fluent setters."""

    def test_is_process_spec(self):
        assert isinstance(Command("echo"), ProcessSpec)

    def test_args_accumulate(self):
        cmd = Command("echo", "a").arg("b").arg("c", "d")

        assert cmd.argv == ["echo", "a", "b", "c", "d"]

    def test_setters_return_self(self, tmp_path: Path):
        cmd = Command("echo")

        assert cmd.current_dir(tmp_path) is cmd
        assert cmd.envs({"A": "1"}) is cmd
        assert cmd.set_stdin(None) is cmd
        assert cmd.set_stdout(None) is cmd
        assert cmd.set_stderr(None) is cmd
        assert cmd.cwd == tmp_path
        assert cmd.env == {"A": "1"}

    def test_stream_setters_write_fields(self):
        """Builders sit beside the fields they set, they do not replace them."""
        cmd = (
            Command("echo", "a")
            .set_stdin(subprocess.PIPE)
            .set_stdout(subprocess.DEVNULL)
            .set_stderr(subprocess.STDOUT)
        )

        assert cmd.args == ["a"]
        assert (cmd.stdin, cmd.stdout, cmd.stderr) == (
            subprocess.PIPE,
            subprocess.DEVNULL,
            subprocess.STDOUT,
        )
        assert callable(Command.arg) and callable(Command.envs)

    def test_program_name_undecodable(self):
        assert Command(b"\xff\xfe").program_name == "unknown"


class TestForwarding:
    """Test that methods forward to the runtime functions."""

    def test_run_failure(self):
        with pytest.raises(ChildFailure) as exc_info:
            Command(sys.executable, "-c", "import sys; sys.exit(1)").run()

        assert exc_info.value.code == 1

    @pytest.mark.timeout(30)
    @pytest.mark.skipif(IS_WINDOWS, reason="POSIX-specific test")
    def test_pipe(self):
        output = Command("echo").arg("-n", "test").pipe(Command("wc").arg("-c"))

        assert output.stdout.decode().lstrip() == "5\n"

    @pytest.mark.timeout(30)
    @pytest.mark.skipif(IS_WINDOWS, reason="POSIX-specific test")
    def test_pipe_to_file(self, tmp_path: Path):
        target = tmp_path / "piped.stdout"

        Command("echo").arg("-n", "test").pipe_to_file(
            Command("wc").arg("-c"), open(target, "wb")
        )

        assert target.read_text().lstrip() == "5\n"

    def test_to_file(self, tmp_path: Path):
        stdout_path = tmp_path / "my_file.stdout"
        stderr_path = tmp_path / "my_file.stderr"

        Command(sys.executable, "-c", "print('test')").to_file(
            open(stdout_path, "w"), open(stderr_path, "w")
        )

        assert stdout_path.read_text().strip() == "test"
        assert stderr_path.read_text() == ""

    def test_env_is_applied(self, tmp_path: Path):
        target = tmp_path / "env.out"

        Command(sys.executable, "-c", "import os; print(os.environ['CMD_TEST_VAR'])").envs(
            {**os.environ, "CMD_TEST_VAR": "value_123"}
        ).to_file(open(target, "w"))

        assert target.read_text().strip() == "value_123"
