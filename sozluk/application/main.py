"""BlazorSozluk API 应用。"""

from __future__ import annotations

from typing import ClassVar

from sozluk.application.app import (
    Component,
    CORSComponent,
    DatabaseComponent,
    RequestLoggingComponent,
    SozlukApp,
)
from sozluk.application.config import BaseConfig
from sozluk.application.routers import user_router


class SozlukApi(SozlukApp):
    items: ClassVar[list[type[Component] | Component]] = [
        RequestLoggingComponent,
        CORSComponent,
        DatabaseComponent,
    ]

    def setup_routes(self) -> None:
        super().setup_routes()
        self.include_router(user_router)


def create_app(config: BaseConfig | None = None) -> SozlukApi:
    """创建应用实例（uvicorn --factory 入口）。"""
    return SozlukApi(config)


__all__ = [
    "SozlukApi",
    "create_app",
]
