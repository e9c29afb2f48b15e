"""Redirect a child's output streams to files.

cmd-utils runtime module v0.1.0
"""

from __future__ import annotations

from typing import IO, Any

from .child_runner import command_spawn
from .process_spec import ProcessSpec

__all__ = ["command_to_file"]


def command_to_file(
    spec: ProcessSpec,
    file: IO[Any],
    stderr_file: IO[Any] | None = None,
) -> None:
    """Spawn, wait and send the stdout of ``spec`` to ``file``.

    The file handles are owned by the call and closed on return, success
    or failure.

    Args:
        spec: Process specification, its stdout (and stderr if
            ``stderr_file`` is given) are set to the files
        file: Receives stdout
        stderr_file: Optional, receives stderr

    Raises:
        TransportFailure: If spawning or waiting fails
        ChildFailure: If the process exits with a non-success status
    """
    try:
        if stderr_file is not None:
            spec.stderr = stderr_file
        spec.stdout = file
        command_spawn(spec)
    finally:
        file.close()
        if stderr_file is not None:
            stderr_file.close()
