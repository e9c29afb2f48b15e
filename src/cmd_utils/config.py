"""cmd-utils 环境变量配置管理。

环境变量:
    CMD_UTILS_LINE_POLICY: 管道转发时无法解码的行的处理策略
        - skip = 静默跳过 (默认)
        - strict = 抛出 DecodeFailure
        - raw = 按原始字节转发

    CMD_UTILS_ENCODING: 用于校验转发行的编码
        - 默认 utf-8
        - 未知编码回退到 utf-8

    CMD_UTILS_KILL_UPSTREAM: 下游进程启动失败时是否终止上游进程
        - true/1/yes = 终止 (默认)
        - false/0/no = 交给操作系统回收

    CMD_UTILS_TERM_TIMEOUT: 发送 SIGTERM 后的等待时间（秒）
        - 默认 2.0 秒，限制在 0.1-30 秒

    CMD_UTILS_KILL_TIMEOUT: 发送 SIGKILL 后的等待时间（秒）
        - 默认 1.0 秒，限制在 0.1-30 秒

    CMD_UTILS_LOG_DEBUG: 日志调试模式
        - true/1/yes = 开启 (日志输出到临时文件)
        - false/0/no = 关闭 (默认，日志输出到 stderr)
"""

from __future__ import annotations

import codecs
import os
import tempfile
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path

__all__ = ["Config", "LinePolicy", "load_config", "get_config", "reload_config"]

DEFAULT_ENCODING = "utf-8"
DEFAULT_TERM_TIMEOUT = 2.0
DEFAULT_KILL_TIMEOUT = 1.0


class LinePolicy(Enum):
    """无法解码的转发行的处理策略。

    - SKIP: 静默丢弃该行
    - STRICT: 终止管道并抛出 DecodeFailure
    - RAW: 不做解码校验，按原始字节转发
    """

    SKIP = "skip"
    STRICT = "strict"
    RAW = "raw"

    @classmethod
    def from_string(cls, value: str) -> "LinePolicy":
        """从字符串解析策略。

        Args:
            value: 策略字符串 (skip/strict/raw)

        Returns:
            对应的 LinePolicy 枚举值，无效值返回 SKIP
        """
        value = value.lower().strip()
        for policy in cls:
            if policy.value == value:
                return policy
        return cls.SKIP  # 默认值


def _parse_bool(value: str | None, default: bool = False) -> bool:
    """解析布尔值环境变量。"""
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


def _parse_timeout(value: str | None, default: float) -> float:
    """解析超时时间环境变量。"""
    if not value:
        return default
    try:
        timeout = float(value)
        return max(0.1, min(timeout, 30.0))  # 限制在 0.1-30 秒范围
    except ValueError:
        return default


def _parse_encoding(value: str | None) -> str:
    """解析编码环境变量，未知编码回退到 utf-8。"""
    if not value or not value.strip():
        return DEFAULT_ENCODING
    try:
        return codecs.lookup(value.strip()).name
    except LookupError:
        return DEFAULT_ENCODING


def _parse_line_policy(value: str | None) -> LinePolicy:
    """解析行处理策略环境变量。"""
    if not value:
        return LinePolicy.SKIP
    return LinePolicy.from_string(value)


@dataclass
class Config:
    """cmd-utils 配置。

    Attributes:
        line_policy: 无法解码的行的处理策略
        encoding: 转发行的编码
        kill_upstream: 下游启动失败时是否终止上游进程
        term_timeout: SIGTERM 后的等待时间（秒）
        kill_timeout: SIGKILL 后的等待时间（秒）
        log_debug: 日志调试模式（输出到临时文件）
        log_file: 日志文件路径（当 log_debug=True 时自动设置）
    """

    line_policy: LinePolicy = LinePolicy.SKIP
    encoding: str = DEFAULT_ENCODING
    kill_upstream: bool = True
    term_timeout: float = DEFAULT_TERM_TIMEOUT
    kill_timeout: float = DEFAULT_KILL_TIMEOUT
    log_debug: bool = False
    log_file: str | None = None

    def __repr__(self) -> str:
        return (
            f"Config(line_policy={self.line_policy.value}, "
            f"encoding={self.encoding}, "
            f"kill_upstream={self.kill_upstream}, "
            f"term_timeout={self.term_timeout}, "
            f"kill_timeout={self.kill_timeout}, "
            f"log_debug={self.log_debug}, "
            f"log_file={self.log_file})"
        )


def _generate_log_file_path() -> str:
    """生成日志文件路径。

    Returns:
        临时目录下的日志文件绝对路径
    """
    log_dir = Path(tempfile.gettempdir()) / "cmd-utils"
    log_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = log_dir / f"cmd_utils_debug_{timestamp}.log"

    return str(log_file.resolve())


def load_config() -> Config:
    """从环境变量加载配置。"""
    log_debug = _parse_bool(os.environ.get("CMD_UTILS_LOG_DEBUG"), default=False)
    log_file = _generate_log_file_path() if log_debug else None

    return Config(
        line_policy=_parse_line_policy(os.environ.get("CMD_UTILS_LINE_POLICY")),
        encoding=_parse_encoding(os.environ.get("CMD_UTILS_ENCODING")),
        kill_upstream=_parse_bool(os.environ.get("CMD_UTILS_KILL_UPSTREAM"), default=True),
        term_timeout=_parse_timeout(
            os.environ.get("CMD_UTILS_TERM_TIMEOUT"), DEFAULT_TERM_TIMEOUT
        ),
        kill_timeout=_parse_timeout(
            os.environ.get("CMD_UTILS_KILL_TIMEOUT"), DEFAULT_KILL_TIMEOUT
        ),
        log_debug=log_debug,
        log_file=log_file,
    )


# 全局配置实例（延迟加载）
_config: Config | None = None


def get_config() -> Config:
    """获取全局配置实例。"""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config() -> Config:
    """重新加载配置（用于测试）。"""
    global _config
    _config = load_config()
    return _config
