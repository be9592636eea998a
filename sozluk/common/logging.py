"""日志管理器 - 统一的日志配置和管理。

提供：
- 统一的日志配置（控制台输出、按日滚动的文件、错误日志与数据库日志分类）
- 性能监控装饰器
- 链路追踪 ID 支持

注意：HTTP 请求日志中间件位于 application.middleware.logging
"""

from __future__ import annotations

from collections.abc import Callable
from contextvars import ContextVar
from functools import wraps
import os
import sys
import time
from typing import Any
import uuid

from loguru import logger

# 移除默认配置，由 setup_logging 统一配置
logger.remove()

_trace_id: ContextVar[str | None] = ContextVar("sozluk_trace_id", default=None)


def get_trace_id() -> str:
    """获取当前链路追踪ID（不存在时生成）。"""
    trace_id = _trace_id.get()
    if trace_id is None:
        trace_id = str(uuid.uuid4())
        _trace_id.set(trace_id)
    return trace_id


def set_trace_id(trace_id: str) -> None:
    """设置当前上下文的链路追踪ID。"""
    _trace_id.set(trace_id)


def _inject_trace_id(record: dict[str, Any]) -> None:
    record["extra"].setdefault("trace_id", _trace_id.get() or "-")


def setup_logging(
    log_level: str = "INFO",
    log_dir: str | None = None,
    rotation_time: str = "00:00",
    retention_days: int = 7,
    enable_console: bool = True,
) -> None:
    """设置日志配置。

    Args:
        log_level: 日志级别（DEBUG/INFO/WARNING/ERROR/CRITICAL）
        log_dir: 日志目录（为空时只输出到控制台）
        rotation_time: 每日滚动时间（默认：00:00）
        retention_days: 日志保留天数（默认：7 天）
        enable_console: 是否输出到控制台
    """
    log_level = log_level.upper()

    logger.remove()
    logger.configure(patcher=_inject_trace_id)

    console_format = (
        "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}:{function}:{line}</cyan> | "
        "{extra[trace_id]:.8} - "
        "<level>{message}</level>"
    )

    file_format = (
        "{time:YYYY-MM-DD HH:mm:ss} | "
        "{level: <8} | "
        "{name}:{function}:{line} | "
        "{extra[trace_id]} - "
        "{message}"
    )

    if enable_console:
        logger.add(
            sys.stderr,
            format=console_format,
            level=log_level,
            colorize=True,
        )

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

        logger.add(
            os.path.join(log_dir, "app_{time:YYYY-MM-DD}.log"),
            rotation=rotation_time,
            retention=f"{retention_days} days",
            level=log_level,
            format=file_format,
            encoding="utf-8",
            enqueue=True,
        )

        logger.add(
            os.path.join(log_dir, "error_{time:YYYY-MM-DD}.log"),
            rotation=rotation_time,
            retention=f"{retention_days} days",
            level="ERROR",
            format=file_format,
            encoding="utf-8",
            enqueue=True,
        )

        # 数据库与仓储操作日志
        logger.add(
            os.path.join(log_dir, "database_{time:YYYY-MM-DD}.log"),
            rotation=rotation_time,
            retention=f"{retention_days} days",
            level="DEBUG",
            format=file_format,
            encoding="utf-8",
            filter=lambda record: "database" in record["name"] or "repository" in record["name"],
            enqueue=True,
        )

    logger.info(f"日志系统初始化完成 | 级别: {log_level} | 目录: {log_dir or '-'}")


def log_performance(threshold: float = 1.0) -> Callable:
    """性能监控装饰器。

    记录协程执行时间，超过阈值时警告。

    Args:
        threshold: 警告阈值（秒）
    """
    def decorator[T](func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            start_time = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception as exc:
                duration = time.perf_counter() - start_time
                logger.error(
                    f"执行失败: {func.__module__}.{func.__qualname__} | "
                    f"耗时: {duration:.3f}s | "
                    f"异常: {type(exc).__name__}: {exc}"
                )
                raise

            duration = time.perf_counter() - start_time
            if duration > threshold:
                logger.warning(
                    f"性能警告: {func.__module__}.{func.__qualname__} 执行耗时 {duration:.3f}s "
                    f"(阈值: {threshold}s)"
                )
            else:
                logger.debug(f"性能: {func.__module__}.{func.__qualname__} 执行耗时 {duration:.3f}s")
            return result

        return wrapper
    return decorator


__all__ = [
    "get_trace_id",
    "log_performance",
    "logger",
    "set_trace_id",
    "setup_logging",
]
