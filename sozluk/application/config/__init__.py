"""配置模块。

提供应用的配置结构，使用 pydantic-settings 进行分层分级配置管理。
"""

from .settings import (
    BaseConfig,
    CORSSettings,
    DatabaseSettings,
    JWTSettings,
    LogSettings,
    ServerSettings,
)

__all__ = [
    "BaseConfig",
    "CORSSettings",
    "DatabaseSettings",
    "JWTSettings",
    "LogSettings",
    "ServerSettings",
]
