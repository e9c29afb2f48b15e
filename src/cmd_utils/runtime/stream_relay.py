"""Two-process stream relay.

cmd-utils runtime module v0.1.0

Pipes the stdout of an upstream process into the stdin of a downstream
process, line by line, and collects the downstream output in memory or
sends it to a file.

Key design points:
- Lines are split on b"\\n" (a b"\\r\\n" terminator is dropped whole) and each
  forwarded line is written followed by exactly one b"\\n"; no partial
  line is ever forwarded.
- Lines that do not decode under the configured encoding follow the line
  policy: skip (default), strict (DecodeFailure) or raw (forward bytes).
- Only the downstream status is returned; the upstream is reaped and its
  status recorded, never raised.
- If the downstream cannot be started, the upstream is terminated unless
  kill_upstream is disabled.

Known limitation: the relay is a blocking read-then-write loop on the
calling thread. When the downstream stdout is captured and the downstream
writes more than a pipe buffer before it has consumed all of its input,
both sides block. Redirect the downstream to a file for large outputs.
"""

from __future__ import annotations

import logging
import subprocess
from typing import IO, Any

from ..config import Config, LinePolicy, get_config
from ..errors import DecodeFailure, TransportFailure, broken_pipe, transport_failure
from .child_runner import spawn, terminate
from .process_spec import CapturedOutput, ExitStatus, ProcessSpec

__all__ = [
    "CAPTURE",
    "relay",
    "command_to_pipe",
    "command_pipe_to_file",
]

logger = logging.getLogger(__name__)


class _Capture:
    """Destination marker: capture downstream stdout in memory."""

    def __repr__(self) -> str:
        return "CAPTURE"


CAPTURE = _Capture()


def relay(
    upstream: ProcessSpec,
    downstream: ProcessSpec,
    destination: _Capture | IO[Any] = CAPTURE,
    *,
    line_policy: LinePolicy | None = None,
    encoding: str | None = None,
    kill_upstream: bool | None = None,
) -> CapturedOutput:
    """Pipe stdout of ``upstream`` to stdin of ``downstream``.

    Args:
        upstream: Process whose stdout is forwarded
        downstream: Process receiving the forwarded lines
        destination: CAPTURE, or a file object receiving downstream stdout
        line_policy: Handling of undecodable lines (default from config)
        encoding: Encoding lines are validated against (default from config)
        kill_upstream: Terminate upstream if downstream cannot be started
            (default from config)

    Returns:
        CapturedOutput with the downstream status; stdout is None when
        the destination is a file

    Raises:
        TransportFailure: If spawning, piping or waiting fails
        DecodeFailure: If a line does not decode under the strict policy
    """
    config = get_config()
    policy = line_policy if line_policy is not None else config.line_policy
    encoding = encoding or config.encoding
    if kill_upstream is None:
        kill_upstream = config.kill_upstream

    upstream_process = spawn(upstream, stdout=subprocess.PIPE)
    source = upstream_process.stdout
    if source is None:
        _abandon(upstream_process, kill_upstream, config)
        raise broken_pipe("could not pipe command, stdout not found")

    downstream_stdout = subprocess.PIPE if destination is CAPTURE else destination
    try:
        downstream_process = spawn(
            downstream,
            stdin=subprocess.PIPE,
            stdout=downstream_stdout,
        )
    except TransportFailure:
        _abandon(upstream_process, kill_upstream, config)
        raise

    sink = downstream_process.stdin
    if sink is None:
        _abandon(upstream_process, kill_upstream, config)
        _abandon(downstream_process, True, config)
        raise broken_pipe("could not pipe command, stdin not found")

    try:
        forwarded, skipped = _forward_lines(source, sink, policy, encoding)
    except TransportFailure:
        _abandon(upstream_process, True, config)
        _abandon(downstream_process, True, config)
        raise
    finally:
        source.close()

    logger.debug(
        f"Relay finished {upstream.program_name} -> {downstream.program_name}: "
        f"forwarded={forwarded} skipped={skipped}"
    )

    # communicate() flushes and closes stdin, which signals EOF downstream
    try:
        stdout, stderr = downstream_process.communicate()
    except OSError as e:
        _abandon(upstream_process, True, config)
        _abandon(downstream_process, True, config)
        raise broken_pipe("could not wait for pipe", e) from e

    status = ExitStatus.from_returncode(downstream_process.returncode)
    upstream_status = _reap(upstream_process, config.term_timeout)
    logger.debug(f"Relay status downstream={status} upstream={upstream_status}")

    return CapturedOutput(
        stdout=stdout,
        stderr=stderr,
        status=status,
        upstream_status=upstream_status,
    )


def command_to_pipe(
    upstream: ProcessSpec,
    downstream: ProcessSpec,
    **options: Any,
) -> CapturedOutput:
    """Pipe ``upstream`` into ``downstream`` and capture the output in memory."""
    return relay(upstream, downstream, CAPTURE, **options)


def command_pipe_to_file(
    upstream: ProcessSpec,
    downstream: ProcessSpec,
    file: IO[Any],
    **options: Any,
) -> None:
    """Pipe ``upstream`` into ``downstream``, writing downstream stdout to ``file``.

    The file is owned by the call and closed on return, success or failure.
    """
    with file:
        relay(upstream, downstream, file, **options)


def _forward_lines(
    source: IO[bytes],
    sink: IO[bytes],
    policy: LinePolicy,
    encoding: str,
) -> tuple[int, int]:
    """Copy lines from ``source`` to ``sink``.

    Returns:
        (forwarded, skipped) line counts

    Raises:
        DecodeFailure: On an undecodable line under LinePolicy.STRICT
        TransportFailure: On a write error other than a broken pipe
    """
    forwarded = 0
    skipped = 0

    for number, raw in enumerate(source, start=1):
        line = raw
        if line.endswith(b"\n"):
            line = line[:-1]
            # \r only counts as part of a \r\n terminator
            if line.endswith(b"\r"):
                line = line[:-1]

        if policy is not LinePolicy.RAW:
            try:
                line.decode(encoding)
            except UnicodeDecodeError as e:
                if policy is LinePolicy.STRICT:
                    raise DecodeFailure(e, line, number) from e
                skipped += 1
                continue

        try:
            sink.write(line + b"\n")
        except BrokenPipeError:
            # Downstream stopped reading its input
            logger.debug(f"Downstream closed its input after {forwarded} lines")
            break
        except OSError as e:
            raise transport_failure(e) from e
        forwarded += 1

    return forwarded, skipped


def _abandon(process: subprocess.Popen[bytes], kill: bool, config: Config) -> None:
    """Release a process left behind by a failed relay."""
    for stream in (process.stdin, process.stdout):
        if stream is not None:
            try:
                stream.close()
            except OSError:
                pass  # broken pipe on close of a dead process
    if kill:
        terminate(process, config.term_timeout, config.kill_timeout)
    else:
        logger.debug(f"Leaving subprocess pid={process.pid} to the OS")


def _reap(process: subprocess.Popen[bytes], timeout: float) -> ExitStatus | None:
    """Collect the upstream status without blocking indefinitely."""
    try:
        returncode = process.wait(timeout=timeout)
    except subprocess.TimeoutExpired:
        logger.debug(f"Upstream pid={process.pid} still running after relay")
        return None
    return ExitStatus.from_returncode(returncode)
