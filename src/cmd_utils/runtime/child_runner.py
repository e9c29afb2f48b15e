"""Single child process runner.

cmd-utils runtime module v0.1.0

This module provides:
- spawn(): start a process described by a ProcessSpec
- wait(): block until it terminates
- check_status(): classify the termination status
- command_spawn(): spawn + wait + classify in one call
- terminate(): graceful then forced termination (SIGTERM -> timeout -> SIGKILL)

Every OS error is mapped through ``transport_failure()``; a non-success
status raises ``ChildFailure``. There are no retries.
"""

from __future__ import annotations

import logging
import subprocess
import sys
from typing import Any

from ..errors import ChildFailure, transport_failure
from .process_spec import ExitStatus, ProcessSpec

__all__ = [
    "IS_WINDOWS",
    "spawn",
    "wait",
    "check_status",
    "command_spawn",
    "run",
    "terminate",
]

logger = logging.getLogger(__name__)

# Platform detection
IS_WINDOWS = sys.platform == "win32"


def spawn(spec: ProcessSpec, **overrides: Any) -> subprocess.Popen[bytes]:
    """Spawn the process described by ``spec``.

    Args:
        spec: Process specification
        **overrides: Popen kwargs taking precedence over the spec's own
            stream wiring (e.g. ``stdout=subprocess.PIPE``)

    Returns:
        The running process

    Raises:
        TransportFailure: If the OS fails to create the process
    """
    try:
        process = subprocess.Popen(spec.argv, **spec.popen_kwargs(**overrides))
    except OSError as e:
        logger.debug(f"Failed to spawn {spec.program_name}: {e}")
        raise transport_failure(e) from e

    logger.debug(f"Started subprocess pid={process.pid} argv={spec.program_name}")
    return process


def wait(process: subprocess.Popen[bytes]) -> ExitStatus:
    """Block until ``process`` terminates.

    Raises:
        TransportFailure: If waiting fails at the OS level
    """
    try:
        returncode = process.wait()
    except OSError as e:
        raise transport_failure(e) from e

    logger.debug(f"Subprocess completed pid={process.pid} returncode={returncode}")
    return ExitStatus.from_returncode(returncode)


def check_status(spec: ProcessSpec, status: ExitStatus) -> None:
    """Raise ChildFailure if ``status`` is not a success."""
    if not status.success:
        raise ChildFailure(status.child_error(spec.program_name))


def command_spawn(spec: ProcessSpec) -> None:
    """Spawn and wait for ``spec``, discarding its output.

    Output goes wherever the spec's streams point; callers needing the
    output use the stream relay or pre-configure redirection.

    Raises:
        TransportFailure: If spawning or waiting fails
        ChildFailure: If the process exits with a non-success status
    """
    process = spawn(spec)
    status = wait(process)
    check_status(spec, status)


run = command_spawn


def terminate(
    process: subprocess.Popen[bytes],
    term_timeout: float,
    kill_timeout: float,
) -> None:
    """Terminate a process gracefully, then forcefully if needed.

    Termination strategy:
    1. Send SIGTERM (terminate() on Windows)
    2. Wait up to term_timeout for graceful exit
    3. If still running, send SIGKILL (kill() on Windows)
    4. Wait up to kill_timeout for forced exit

    Never raises; failures are logged.

    Args:
        process: The process to terminate
        term_timeout: Seconds to wait after SIGTERM
        kill_timeout: Seconds to wait after SIGKILL
    """
    if process.poll() is not None:
        logger.debug(f"Subprocess already exited pid={process.pid}")
        return

    pid = process.pid
    try:
        logger.debug(f"Terminating subprocess pid={pid}")
        process.terminate()
        try:
            process.wait(timeout=term_timeout)
            logger.debug(
                f"Subprocess terminated gracefully pid={pid} "
                f"returncode={process.returncode}"
            )
            return
        except subprocess.TimeoutExpired:
            pass

        logger.debug(f"Force killing subprocess pid={pid}")
        process.kill()
        try:
            process.wait(timeout=kill_timeout)
            logger.debug(
                f"Subprocess killed pid={pid} "
                f"returncode={process.returncode}"
            )
        except subprocess.TimeoutExpired:
            logger.warning(f"Subprocess did not exit after kill pid={pid}")

    except ProcessLookupError:
        logger.debug(f"Subprocess already exited pid={pid}")
    except OSError as e:
        logger.warning(f"Error terminating subprocess pid={pid}: {e}")
