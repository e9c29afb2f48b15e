"""Fluent command builder.

cmd-utils v0.1.0

``Command`` is a ProcessSpec with chainable setters and methods that
forward to the runtime functions:

    Command("echo").arg("-n", "test").pipe(Command("wc").arg("-c"))

is equivalent to ``command_to_pipe(echo_spec, wc_spec)``.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import IO, Any

from .runtime import (
    CapturedOutput,
    ProcessSpec,
    command_pipe_to_file,
    command_spawn,
    command_to_file,
    command_to_pipe,
)
from .runtime.process_spec import StreamTarget

__all__ = ["Command"]


class Command(ProcessSpec):
    """ProcessSpec with a fluent builder interface.

    Example:
        output = Command("echo").arg("test").pipe(Command("wc").arg("-c"))
        print(output.stdout.decode())
    """

    def __init__(self, program: str | bytes | os.PathLike[str], *args: str) -> None:
        super().__init__(program=program, args=list(args))

    def arg(self, *args: str | bytes | os.PathLike[str]) -> Command:
        """Append one or more arguments."""
        self.args.extend(args)
        return self

    def set_stdin(self, target: StreamTarget) -> Command:
        self.stdin = target
        return self

    def set_stdout(self, target: StreamTarget) -> Command:
        self.stdout = target
        return self

    def set_stderr(self, target: StreamTarget) -> Command:
        self.stderr = target
        return self

    def current_dir(self, cwd: Path | str) -> Command:
        self.cwd = cwd
        return self

    def envs(self, env: Mapping[str, str]) -> Command:
        """Replace the environment (the parent's is not inherited)."""
        self.env = dict(env)
        return self

    def run(self) -> None:
        """Spawn and wait; raises ChildFailure on non-success status."""
        command_spawn(self)

    def pipe(self, piped: ProcessSpec, **options: Any) -> CapturedOutput:
        """Pipe stdout of ``self`` to stdin of ``piped``."""
        return command_to_pipe(self, piped, **options)

    def pipe_to_file(self, piped: ProcessSpec, file: IO[Any], **options: Any) -> None:
        """Pipe stdout of ``self`` to stdin of ``piped``, ``piped`` stdout to ``file``."""
        command_pipe_to_file(self, piped, file, **options)

    def to_file(self, file: IO[Any], stderr_file: IO[Any] | None = None) -> None:
        """Spawn and wait with stdout to ``file``, optional stderr to ``stderr_file``."""
        command_to_file(self, file, stderr_file)
