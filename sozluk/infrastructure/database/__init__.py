"""数据库基础设施。

- SozlukContext / AsyncSozlukContext: 存储上下文（统一保存入口与创建时间钩子）
- DatabaseManager: 引擎、会话工厂、重试与生命周期
- DatabaseSettings: 连接配置
"""

from .context import (
    DEFER_COMMIT_KEY,
    AsyncSozlukContext,
    SozlukContext,
    create_async_context_factory,
    create_context_factory,
    keep_create_dates,
    prepare_added_entities,
)
from .manager import DatabaseManager, build_engine_kwargs, is_transient_error
from .settings import DatabaseSettings

__all__ = [
    "DEFER_COMMIT_KEY",
    "AsyncSozlukContext",
    "DatabaseManager",
    "DatabaseSettings",
    "SozlukContext",
    "build_engine_kwargs",
    "create_async_context_factory",
    "create_context_factory",
    "is_transient_error",
    "keep_create_dates",
    "prepare_added_entities",
]
