"""cmd-utils 命令行入口。

用法:
    cmd-utils run PROGRAM [ARG...]
    cmd-utils pipe [-o FILE] UPSTREAM [ARG...] :: DOWNSTREAM [ARG...]
    cmd-utils to-file --stdout FILE [--stderr FILE] PROGRAM [ARG...]

退出码:
    0   成功
    N   子进程以退出码 N 失败（未知退出码时为 1）
    127 进程启动/管道/等待失败
    2   参数错误
"""

from __future__ import annotations

import argparse
import logging
import sys

from . import __version__
from .command import Command
from .config import get_config
from .errors import ChildFailure, SpawnError, TransportFailure
from .runtime import relay

__all__ = ["build_parser", "main", "PIPE_SEPARATOR"]

logger = logging.getLogger(__name__)

# 分隔上游与下游参数的标记
PIPE_SEPARATOR = "::"

EXIT_TRANSPORT_FAILURE = 127


def build_parser() -> argparse.ArgumentParser:
    """构建命令行解析器。"""
    parser = argparse.ArgumentParser(
        prog="cmd-utils",
        description="Run, pipe and redirect child processes",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="action", required=True)

    run_parser = subparsers.add_parser("run", help="run a command and report a failed exit")
    run_parser.add_argument("command", nargs=argparse.REMAINDER, help="program and arguments")

    pipe_parser = subparsers.add_parser(
        "pipe",
        help=f"pipe stdout of one command into another ({PIPE_SEPARATOR} separates them)",
    )
    pipe_parser.add_argument("-o", "--output", help="write downstream stdout to this file")
    pipe_parser.add_argument("command", nargs=argparse.REMAINDER, help="upstream :: downstream")

    file_parser = subparsers.add_parser("to-file", help="run a command with stdout in a file")
    file_parser.add_argument("--stdout", required=True, help="file receiving stdout")
    file_parser.add_argument("--stderr", help="file receiving stderr")
    file_parser.add_argument("command", nargs=argparse.REMAINDER, help="program and arguments")

    return parser


def _strip_dashes(argv: list[str]) -> list[str]:
    """去掉 REMAINDER 前导的 "--"。"""
    if argv and argv[0] == "--":
        return argv[1:]
    return argv


def _split_pipe(argv: list[str]) -> tuple[list[str], list[str]] | None:
    """按 PIPE_SEPARATOR 拆分上游与下游参数。

    Returns:
        (upstream, downstream)，任一为空或缺少分隔符时返回 None
    """
    if PIPE_SEPARATOR not in argv:
        return None
    index = argv.index(PIPE_SEPARATOR)
    upstream, downstream = argv[:index], argv[index + 1:]
    if not upstream or not downstream:
        return None
    return upstream, downstream


def setup_logging() -> None:
    """配置日志输出。"""
    config = get_config()
    log_handlers: list[logging.Handler] = []
    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    if config.log_debug and config.log_file:
        # LOG_DEBUG 模式：输出到临时文件
        file_handler = logging.FileHandler(config.log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        log_handlers.append(file_handler)
        log_level = logging.DEBUG
    else:
        # 默认模式：输出到 stderr
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setFormatter(formatter)
        log_handlers.append(stderr_handler)
        log_level = logging.INFO

    # root logger 保持 WARNING，只对 cmd_utils 命名空间启用详细日志
    logging.basicConfig(level=logging.WARNING, handlers=log_handlers)
    logging.getLogger("cmd_utils").setLevel(log_level)


def _dispatch(args: argparse.Namespace, parser: argparse.ArgumentParser) -> int:
    """执行子命令，返回退出码。"""
    argv = _strip_dashes(args.command)

    if args.action == "pipe":
        parts = _split_pipe(argv)
        if parts is None:
            parser.error(f"pipe needs UPSTREAM {PIPE_SEPARATOR} DOWNSTREAM")
        upstream, downstream = parts
        up_cmd = Command(upstream[0], *upstream[1:])
        down_cmd = Command(downstream[0], *downstream[1:])

        if args.output:
            with open(args.output, "wb") as output_file:
                output = relay(up_cmd, down_cmd, output_file)
        else:
            output = up_cmd.pipe(down_cmd)
            if output.stdout:
                sys.stdout.buffer.write(output.stdout)
                sys.stdout.buffer.flush()
        if not output.status.success:
            return output.status.code or 1
        return 0

    if not argv:
        parser.error(f"{args.action} needs a PROGRAM")
    cmd = Command(argv[0], *argv[1:])

    if args.action == "to-file":
        stdout_file = open(args.stdout, "wb")
        try:
            stderr_file = open(args.stderr, "wb") if args.stderr else None
        except OSError:
            stdout_file.close()
            raise
        cmd.to_file(stdout_file, stderr_file)
        return 0

    cmd.run()
    return 0


def main(argv: list[str] | None = None) -> int:
    """主入口点。"""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging()
    logger.debug(f"Starting cmd-utils {args.action}: {get_config()}")

    try:
        return _dispatch(args, parser)
    except ChildFailure as e:
        logger.error(str(e))
        return e.code or 1
    except TransportFailure as e:
        logger.error(str(e))
        return EXIT_TRANSPORT_FAILURE
    except SpawnError as e:
        logger.error(str(e))
        return 1
    except OSError as e:
        # 无法打开重定向文件
        logger.error(f"could not open output file: {e}")
        return EXIT_TRANSPORT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
