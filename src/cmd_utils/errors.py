"""Spawn error types.

cmd-utils errors v0.1.0

Every operation in cmd_utils raises a ``SpawnError``:

- ``TransportFailure``: the OS process/pipe machinery failed (spawn, wait,
  missing pipe handle). The original ``OSError`` is kept on ``.error``.
- ``ChildFailure``: the child ran but exited with a non-success status.
- ``DecodeFailure``: a relayed line could not be decoded under the strict
  line policy.

OS errors are only ever mapped through ``transport_failure()``.
"""

from __future__ import annotations

import errno
from dataclasses import dataclass

__all__ = [
    "ChildError",
    "SpawnError",
    "TransportFailure",
    "ChildFailure",
    "DecodeFailure",
    "transport_failure",
    "broken_pipe",
]


@dataclass(frozen=True)
class ChildError:
    """Child process error.

    Attributes:
        program: Name of the child program
        code: Exit code, None when the child was terminated by a signal
    """

    program: str
    code: int | None = None

    def __str__(self) -> str:
        code = "unknown" if self.code is None else str(self.code)
        return f'program "{self.program}" failed with status code {code}'


class SpawnError(Exception):
    """Base error for command spawn, wait and relay."""

    def to_os_error(self) -> OSError:
        """Cast to ``OSError`` for callers whose error channel is OSError."""
        return OSError(str(self))


class TransportFailure(SpawnError):
    """OS-level failure while spawning, waiting or piping.

    Attributes:
        error: The underlying OSError
    """

    def __init__(self, error: OSError) -> None:
        self.error = error
        super().__init__(f"command IO error {error}")

    @property
    def errno(self) -> int | None:
        return self.error.errno

    def to_os_error(self) -> OSError:
        return self.error


class ChildFailure(SpawnError):
    """Child process exited with a non-success status.

    Attributes:
        child: The ChildError describing the program and exit code
    """

    def __init__(self, child: ChildError) -> None:
        self.child = child
        super().__init__(f"child {child}")

    @property
    def program(self) -> str:
        return self.child.program

    @property
    def code(self) -> int | None:
        return self.child.code


class DecodeFailure(TransportFailure):
    """A relayed line could not be decoded (strict line policy only).

    Attributes:
        line: The raw line bytes, without the delimiter
        line_number: 1-based index of the line in the upstream output
    """

    def __init__(self, error: UnicodeDecodeError, line: bytes, line_number: int) -> None:
        self.line = line
        self.line_number = line_number
        os_error = OSError(errno.EILSEQ, f"could not decode line {line_number}: {error.reason}")
        super().__init__(os_error)
        self.__cause__ = error


def transport_failure(exc: OSError) -> TransportFailure:
    """Map an OS error into the spawn error taxonomy."""
    failure = TransportFailure(exc)
    failure.__cause__ = exc
    return failure


def broken_pipe(message: str, cause: BaseException | None = None) -> TransportFailure:
    """Build a broken-pipe classified TransportFailure."""
    failure = TransportFailure(BrokenPipeError(errno.EPIPE, message))
    if cause is not None:
        failure.__cause__ = cause
    return failure
