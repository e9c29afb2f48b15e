"""cmd-utils - 子进程运行、管道与重定向工具。

- run: 启动并等待子进程，非零退出码抛出 ChildFailure
- pipe: 将一个进程的 stdout 逐行转发到另一个进程的 stdin
- to_file: 将子进程的 stdout/stderr 写入文件

用法:
    from cmd_utils import Command

    output = Command("echo", "test").pipe(Command("wc", "-c"))
"""

__version__ = "0.1.0"

from .command import Command
from .config import Config, LinePolicy, get_config, load_config, reload_config
from .errors import (
    ChildError,
    ChildFailure,
    DecodeFailure,
    SpawnError,
    TransportFailure,
    transport_failure,
)
from .runtime import (
    CAPTURE,
    CapturedOutput,
    ExitStatus,
    ProcessSpec,
    command_pipe_to_file,
    command_spawn,
    command_to_file,
    command_to_pipe,
    relay,
    run,
)

__all__ = [
    "__version__",
    "CAPTURE",
    "CapturedOutput",
    "ChildError",
    "ChildFailure",
    "Command",
    "Config",
    "DecodeFailure",
    "ExitStatus",
    "LinePolicy",
    "ProcessSpec",
    "SpawnError",
    "TransportFailure",
    "command_pipe_to_file",
    "command_spawn",
    "command_to_file",
    "command_to_pipe",
    "get_config",
    "load_config",
    "relay",
    "reload_config",
    "run",
    "transport_failure",
]
