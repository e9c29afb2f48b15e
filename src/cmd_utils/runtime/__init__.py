"""Runtime module for spawning, piping and redirecting child processes.

This module is the functional core: free functions operating on a
ProcessSpec. The fluent ``cmd_utils.command.Command`` layer forwards here.
"""

from __future__ import annotations

from .child_runner import check_status, command_spawn, run, spawn, terminate, wait
from .file_redirector import command_to_file
from .process_spec import CapturedOutput, ExitStatus, ProcessSpec
from .stream_relay import CAPTURE, command_pipe_to_file, command_to_pipe, relay

__all__ = [
    "CAPTURE",
    "CapturedOutput",
    "ExitStatus",
    "ProcessSpec",
    "check_status",
    "command_pipe_to_file",
    "command_spawn",
    "command_to_file",
    "command_to_pipe",
    "relay",
    "run",
    "spawn",
    "terminate",
    "wait",
]
