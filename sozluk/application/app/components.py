"""默认组件实现。"""

from __future__ import annotations

from fastapi.middleware.cors import CORSMiddleware

from sozluk.application.app.base import Component, SozlukApp
from sozluk.application.config import BaseConfig
from sozluk.application.middleware import RequestLoggingMiddleware
from sozluk.common.logging import logger
from sozluk.infrastructure.database import DatabaseManager


class RequestLoggingComponent(Component):
    """请求日志中间件组件。"""

    name = "request_logging"

    def configure(self, app: SozlukApp, config: BaseConfig) -> None:
        app.add_middleware(
            RequestLoggingMiddleware,
            slow_threshold=config.server.slow_request_threshold,
        )
        logger.debug("请求日志中间件已启用")

    async def setup(self, app: SozlukApp, config: BaseConfig) -> None:
        pass

    async def teardown(self, app: SozlukApp) -> None:
        pass


class CORSComponent(Component):
    """CORS 中间件组件。"""

    name = "cors"

    def can_enable(self, config: BaseConfig) -> bool:
        """仅当配置了 origins 时启用。"""
        return self.enabled and bool(config.cors.origins)

    def configure(self, app: SozlukApp, config: BaseConfig) -> None:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.cors.origins,
            allow_credentials=config.cors.allow_credentials,
            allow_methods=config.cors.allow_methods,
            allow_headers=config.cors.allow_headers,
        )
        logger.debug("CORS 中间件已启用")

    async def setup(self, app: SozlukApp, config: BaseConfig) -> None:
        pass

    async def teardown(self, app: SozlukApp) -> None:
        pass


class DatabaseComponent(Component):
    """数据库组件。"""

    name = "database"

    def can_enable(self, config: BaseConfig) -> bool:
        """仅当配置了数据库 URL 时启用。"""
        return self.enabled and bool(config.database.url)

    async def setup(self, app: SozlukApp, config: BaseConfig) -> None:
        db_manager = DatabaseManager.get_instance()
        if not db_manager.initialized:
            await db_manager.initialize(config.database)

    async def teardown(self, app: SozlukApp) -> None:
        db_manager = DatabaseManager.get_instance()
        if db_manager.initialized:
            await db_manager.cleanup()


__all__ = [
    "CORSComponent",
    "DatabaseComponent",
    "RequestLoggingComponent",
]
