"""Pytest 配置和 fixtures。"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# 项目根目录
PROJECT_ROOT = Path(__file__).parent.parent

# 添加 src 目录到 Python 路径
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

# 测试用子进程脚本
FIXTURES_DIR = PROJECT_ROOT / "tests" / "fixtures"
EMIT_LINES = FIXTURES_DIR / "emit_lines.py"

CMD_UTILS_ENV = (
    "CMD_UTILS_LINE_POLICY",
    "CMD_UTILS_ENCODING",
    "CMD_UTILS_KILL_UPSTREAM",
    "CMD_UTILS_TERM_TIMEOUT",
    "CMD_UTILS_KILL_TIMEOUT",
    "CMD_UTILS_LOG_DEBUG",
)


@pytest.fixture(autouse=True)
def clean_config(monkeypatch: pytest.MonkeyPatch):
    """每个测试使用不受外部环境影响的默认配置。"""
    from cmd_utils.config import reload_config

    for name in CMD_UTILS_ENV:
        monkeypatch.delenv(name, raising=False)
    reload_config()
    yield
    reload_config()


@pytest.fixture
def emit_lines() -> list[str]:
    """运行 emit_lines.py 的 argv 前缀。"""
    return [sys.executable, str(EMIT_LINES)]
