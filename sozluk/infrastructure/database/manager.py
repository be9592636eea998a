"""数据库管理器 - 单例模式实现。

提供统一的数据库连接管理、存储上下文创建、建表和健康检查功能。
瞬时连接故障的重试在这里完成（建立会话时），仓储层不做任何重试。
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import asyncpg
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlalchemy.schema import CreateSchema
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_fixed,
)

from sozluk.common.logging import logger
from sozluk.domain.models import DEFAULT_SCHEMA, Base

from .context import AsyncSozlukContext, create_async_context_factory
from .settings import DatabaseSettings


def is_sqlite(url: str) -> bool:
    return make_url(url).get_backend_name() == "sqlite"


def build_engine_kwargs(settings: DatabaseSettings) -> dict[str, Any]:
    """根据配置构建 create_engine / create_async_engine 的参数。

    SQLite 没有模式（schema）概念，通过 schema_translate_map 去掉 dbo 前缀；
    内存库使用 StaticPool 保证所有会话共享同一连接。
    """
    kwargs: dict[str, Any] = {
        "echo": settings.echo,
        "pool_pre_ping": settings.pool_pre_ping,
    }
    if is_sqlite(settings.url):
        kwargs["execution_options"] = {"schema_translate_map": {DEFAULT_SCHEMA: None}}
        database = make_url(settings.url).database
        if not database or database == ":memory:":
            kwargs["poolclass"] = StaticPool
            kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs.update(
            pool_size=settings.pool_size,
            max_overflow=settings.max_overflow,
            pool_timeout=settings.pool_timeout,
            pool_recycle=settings.pool_recycle,
        )
    return kwargs


TRANSIENT_ERRORS = (
    OperationalError,
    InterfaceError,
    asyncpg.exceptions.ConnectionDoesNotExistError,
    asyncpg.exceptions.InterfaceError,
    OSError,
)


def is_transient_error(exc: BaseException) -> bool:
    """判断是否为可重试的瞬时连接故障。

    asyncpg 建立连接失败时抛出的 OSError（如 ConnectionRefusedError）不会被
    SQLAlchemy 包装，需要单独识别。
    """
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return True
    return isinstance(exc, TRANSIENT_ERRORS)


def _log_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(f"数据库连接失败，第 {retry_state.attempt_number} 次尝试: {exc}")


class DatabaseManager:
    """数据库管理器（单例模式）。

    职责：
    1. 管理数据库引擎和连接池
    2. 提供存储上下文（AsyncSozlukContext）工厂
    3. 健康检查和瞬时故障重试
    4. 生命周期管理

    使用示例:
        db_manager = DatabaseManager.get_instance()
        await db_manager.initialize()

        async with db_manager.session() as session:
            repo = UserRepository(session)

        await db_manager.cleanup()
    """

    _instance: DatabaseManager | None = None

    def __init__(self) -> None:
        """私有构造函数，使用 get_instance() 获取实例。"""
        if DatabaseManager._instance is not None:
            raise RuntimeError("DatabaseManager 是单例类，请使用 get_instance() 获取实例")

        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSozlukContext] | None = None
        self._settings: DatabaseSettings | None = None
        self._initialized: bool = False

    @classmethod
    def get_instance(cls) -> DatabaseManager:
        """获取单例实例。"""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def settings(self) -> DatabaseSettings:
        if self._settings is None:
            raise RuntimeError("数据库管理器未初始化，请先调用 initialize()")
        return self._settings

    @property
    def engine(self) -> AsyncEngine:
        """获取数据库引擎。"""
        if self._engine is None:
            raise RuntimeError("数据库管理器未初始化，请先调用 initialize()")
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSozlukContext]:
        """获取存储上下文工厂。"""
        if self._session_factory is None:
            raise RuntimeError("数据库管理器未初始化，请先调用 initialize()")
        return self._session_factory

    async def initialize(
        self,
        settings: DatabaseSettings | None = None,
        *,
        verify: bool = True,
    ) -> None:
        """初始化数据库连接。

        Args:
            settings: 数据库配置，默认从环境变量读取
            verify: 初始化后是否执行健康检查
        """
        if self._initialized:
            logger.warning("数据库管理器已初始化，跳过重复初始化")
            return

        self._settings = settings or DatabaseSettings()
        self._engine = create_async_engine(
            self._settings.url,
            **build_engine_kwargs(self._settings),
        )
        self._session_factory = create_async_context_factory(self._engine)
        self._initialized = True

        if verify and not await self.health_check():
            logger.warning("数据库健康检查未通过，连接将在首次使用时重试")

        logger.info("数据库管理器初始化完成")

    async def health_check(self) -> bool:
        """健康检查。

        Returns:
            bool: 连接是否正常
        """
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            logger.debug("数据库健康检查通过")
            return True
        except Exception as exc:
            logger.error(f"数据库健康检查失败: {exc}")
            return False

    async def _check_session_connection(self, session: AsyncSozlukContext) -> None:
        """检查会话连接状态，瞬时故障时按配置重试。

        Raises:
            DBAPIError | OSError: 重试次数耗尽或非瞬时错误
        """
        if not self.settings.retry_on_failure:
            return

        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.settings.max_retries),
            wait=wait_fixed(self.settings.retry_delay),
            retry=retry_if_exception(is_transient_error),
            before_sleep=_log_retry,
            reraise=True,
        ):
            with attempt:
                try:
                    await session.execute(text("SELECT 1"))
                except Exception:
                    await session.rollback()
                    raise

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSozlukContext, None]:
        """获取存储上下文（上下文管理器）。

        每个逻辑请求应使用独立的存储上下文，上下文不可跨任务共享。

        Yields:
            AsyncSozlukContext: 存储上下文
        """
        session = self.session_factory()
        try:
            await self._check_session_connection(session)
            yield session
        except BaseException:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def create_all(self) -> None:
        """按模型元数据建表（服务端数据库先确保 dbo 模式存在）。"""
        async with self.engine.begin() as conn:
            if not is_sqlite(self.settings.url):
                await conn.execute(CreateSchema(DEFAULT_SCHEMA, if_not_exists=True))
            await conn.run_sync(Base.metadata.create_all)
        logger.info("数据表已创建")

    async def drop_all(self) -> None:
        """删除所有模型对应的表。"""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        logger.info("数据表已删除")

    async def cleanup(self) -> None:
        """清理资源，关闭所有连接。"""
        if self._engine is not None:
            await self._engine.dispose()
            logger.info("数据库连接已关闭")

        self._engine = None
        self._session_factory = None
        self._initialized = False

    def __repr__(self) -> str:
        status = "initialized" if self._initialized else "not initialized"
        return f"<DatabaseManager status={status}>"


__all__ = [
    "DatabaseManager",
    "build_engine_kwargs",
    "is_transient_error",
]
