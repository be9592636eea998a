"""Common 层模块。

最基础层，提供：
- 异常基类
- 日志系统
"""

from .exceptions import FoundationError
from .logging import (
    get_trace_id,
    log_performance,
    logger,
    set_trace_id,
    setup_logging,
)

__all__ = [
    # 异常
    "FoundationError",
    # 日志
    "get_trace_id",
    "log_performance",
    "logger",
    "set_trace_id",
    "setup_logging",
]
