"""应用框架基类。

提供 SozlukApp 和 Component 基类。
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import Any, ClassVar

from fastapi import FastAPI, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException

from sozluk import __version__
from sozluk.application.config import BaseConfig
from sozluk.application.errors import global_exception_handler
from sozluk.common.exceptions import FoundationError
from sozluk.common.logging import logger, setup_logging
from sozluk.infrastructure.database import DatabaseManager


class Component(ABC):
    """应用组件基类。

    所有功能单元（中间件、数据库等）都是 Component。
    configure() 在应用构造时同步调用（中间件只能在启动前注册）；
    setup() 按 items 中的顺序调用，teardown() 反序调用。

    使用示例:
        class MyService(Component):
            name = "my_service"

            async def setup(self, app: SozlukApp, config: BaseConfig):
                pass

            async def teardown(self, app: SozlukApp):
                pass
    """

    name: str = "component"
    enabled: bool = True

    def can_enable(self, config: BaseConfig) -> bool:
        """是否可以启用此组件。"""
        return self.enabled

    def configure(self, app: SozlukApp, config: BaseConfig) -> None:
        """应用构造时调用，默认什么都不做。"""

    @abstractmethod
    async def setup(self, app: SozlukApp, config: BaseConfig) -> None:
        """组件启动时调用。"""

    @abstractmethod
    async def teardown(self, app: SozlukApp) -> None:
        """组件关闭时调用。"""


class SozlukApp(FastAPI):
    """应用框架。

    所有功能单元统一为 Component，按 items 顺序启动，反序关闭；
    有依赖关系的组件只需排在被依赖者之后。

    使用示例:
        class MyApp(SozlukApp):
            items = [
                RequestLoggingComponent,
                CORSComponent,
                DatabaseComponent,
            ]
    """

    items: ClassVar[list[type[Component] | Component]] = []

    def __init__(
        self,
        config: BaseConfig | None = None,
        *,
        title: str = "BlazorSozluk API",
        version: str = __version__,
        description: str | None = None,
        **kwargs: Any,
    ) -> None:
        if config is None:
            config = BaseConfig()
        self._config = config

        # 初始化日志（必须在其他操作之前）
        setup_logging(
            log_level=config.log.level,
            log_dir=config.log.dir,
            rotation_time=config.log.rotation_time,
            retention_days=config.log.retention_days,
        )

        self._components: dict[str, Component] = {}

        @asynccontextmanager
        async def lifespan(app: FastAPI):
            await self._on_startup()
            yield
            await self._on_shutdown()

        super().__init__(
            title=title,
            version=version,
            description=description or "",
            lifespan=lifespan,
            **kwargs,
        )

        self._register_exception_handlers()
        self._register_components()
        self.setup_routes()

    def _register_exception_handlers(self) -> None:
        # 已知异常交给 ExceptionMiddleware，其余异常兜底为 500
        for exc_class in (FoundationError, HTTPException, RequestValidationError, SQLAlchemyError):
            self.add_exception_handler(exc_class, global_exception_handler)
        self.add_exception_handler(Exception, global_exception_handler)

    def _register_components(self) -> None:
        for item in self.items:
            component = item() if isinstance(item, type) else item
            if component.can_enable(self._config):
                self._components[component.name] = component
                component.configure(self, self._config)
                logger.debug(f"组件已注册: {component.name}")

    @property
    def components(self) -> dict[str, Component]:
        return dict(self._components)

    async def _on_startup(self) -> None:
        logger.info("应用启动中...")
        for component in self._components.values():
            try:
                await component.setup(self, self._config)
                logger.info(f"组件启动成功: {component.name}")
            except Exception as e:
                logger.error(f"组件启动失败 ({component.name}): {e}")
                raise
        logger.info("应用启动完成")

    async def _on_shutdown(self) -> None:
        logger.info("应用关闭中...")
        for component in reversed(self._components.values()):
            try:
                await component.teardown(self)
                logger.info(f"组件关闭成功: {component.name}")
            except Exception as e:
                logger.warning(f"组件关闭失败 ({component.name}): {e}")
        logger.info("应用关闭完成")

    def setup_routes(self) -> None:
        """设置路由，子类可以重写。"""
        self.setup_health_check()

    def setup_health_check(self) -> None:
        """注册 /health 端点，检查数据库连接。"""

        @self.get("/health", tags=["health"])
        async def health_check() -> JSONResponse:
            health_status: dict[str, Any] = {"status": "healthy", "checks": {}}

            db_manager = DatabaseManager.get_instance()
            if db_manager.initialized:
                if await db_manager.health_check():
                    health_status["checks"]["database"] = "ok"
                else:
                    health_status["status"] = "unhealthy"
                    health_status["checks"]["database"] = "error"

            status_code = (
                status.HTTP_200_OK
                if health_status["status"] == "healthy"
                else status.HTTP_503_SERVICE_UNAVAILABLE
            )
            return JSONResponse(content=health_status, status_code=status_code)

    @property
    def config(self) -> BaseConfig:
        return self._config


__all__ = [
    "Component",
    "SozlukApp",
]
