#!/usr/bin/env python3
"""Line emitter for relay integration testing.

This script plays either side of a relay:

- upstream: writes numbered lines to stdout
- downstream (--echo-stdin): copies stdin to stdout unchanged, byte for byte

Usage:
    python emit_lines.py [--lines N] [--prefix TEXT] [--bad-line N] [--crlf]
                         [--no-final-newline] [--stderr TEXT] [--exit-code CODE]
    python emit_lines.py --echo-stdin [--exit-code CODE]
    python emit_lines.py --read-one [--exit-code CODE]

Arguments:
    --lines: Number of lines to emit (default: 3)
    --prefix: Line prefix (default: "line")
    --bad-line: Replace line N (1-based) with invalid UTF-8 bytes
    --crlf: Terminate lines with \\r\\n
    --no-final-newline: Omit the delimiter after the last line
    --stderr: Text written to stderr before exiting
    --echo-stdin: Copy stdin to stdout instead of emitting lines
    --read-one: Read a single line from stdin, print it, and exit
    --exit-code: Exit code (default: 0)
"""

from __future__ import annotations

import argparse
import sys
from typing import NoReturn

INVALID_UTF8 = b"\xff\xfe broken \xc3\x28"


def emit(args: argparse.Namespace) -> None:
    """Emit numbered lines to stdout."""
    out = sys.stdout.buffer
    delimiter = b"\r\n" if args.crlf else b"\n"
    for number in range(1, args.lines + 1):
        if number == args.bad_line:
            line = INVALID_UTF8
        else:
            line = f"{args.prefix}{number}".encode("utf-8")
        out.write(line)
        if number < args.lines or not args.no_final_newline:
            out.write(delimiter)
    out.flush()


def main() -> NoReturn:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Line emitter for testing")
    parser.add_argument("--lines", type=int, default=3, help="Number of lines")
    parser.add_argument("--prefix", type=str, default="line", help="Line prefix")
    parser.add_argument("--bad-line", type=int, default=0, help="Line to corrupt")
    parser.add_argument("--crlf", action="store_true", help="Use CRLF delimiters")
    parser.add_argument("--no-final-newline", action="store_true", help="No final delimiter")
    parser.add_argument("--stderr", type=str, default="", help="Text for stderr")
    parser.add_argument("--echo-stdin", action="store_true", help="Copy stdin to stdout")
    parser.add_argument("--read-one", action="store_true", help="Read one line and exit")
    parser.add_argument("--exit-code", type=int, default=0, help="Exit code")

    args = parser.parse_args()

    if args.echo_stdin:
        sys.stdout.buffer.write(sys.stdin.buffer.read())
        sys.stdout.buffer.flush()
    elif args.read_one:
        sys.stdout.buffer.write(sys.stdin.buffer.readline())
        sys.stdout.buffer.flush()
    else:
        emit(args)

    if args.stderr:
        sys.stderr.write(args.stderr)
        sys.stderr.flush()

    sys.exit(args.exit_code)


if __name__ == "__main__":
    main()
