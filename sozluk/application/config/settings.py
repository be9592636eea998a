"""应用配置。

使用 pydantic-settings 进行分层分级配置管理，
每个配置段有独立的环境变量前缀，BaseConfig 统一聚合并读取 .env 文件。
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from sozluk.infrastructure.database.settings import DatabaseSettings


class ServerSettings(BaseSettings):
    """服务器配置。

    环境变量前缀: SERVER_
    示例: SERVER_HOST, SERVER_PORT, SERVER_RELOAD
    """

    host: str = Field(
        default="127.0.0.1",
        description="服务器监听地址"
    )
    port: int = Field(
        default=8000,
        description="服务器监听端口"
    )
    reload: bool = Field(
        default=False,
        description="是否启用热重载"
    )
    workers: int = Field(
        default=1,
        description="工作进程数"
    )
    slow_request_threshold: float = Field(
        default=1.0,
        gt=0,
        description="慢请求阈值（秒）"
    )

    model_config = SettingsConfigDict(
        env_prefix="SERVER_",
        case_sensitive=False,
    )


class CORSSettings(BaseSettings):
    """CORS配置。

    环境变量前缀: CORS_
    示例: CORS_ORIGINS, CORS_ALLOW_CREDENTIALS
    """

    origins: list[str] = Field(
        default=["*"],
        description="允许的CORS源"
    )
    allow_credentials: bool = Field(
        default=True,
        description="是否允许CORS凭据"
    )
    allow_methods: list[str] = Field(
        default=["*"],
        description="允许的CORS方法"
    )
    allow_headers: list[str] = Field(
        default=["*"],
        description="允许的CORS头"
    )

    model_config = SettingsConfigDict(
        env_prefix="CORS_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """日志配置。

    环境变量前缀: LOG_
    示例: LOG_LEVEL, LOG_DIR
    """

    level: str = Field(
        default="INFO",
        description="日志级别"
    )
    dir: str | None = Field(
        default=None,
        description="日志目录（如果不设置则仅输出到控制台）"
    )
    rotation_time: str = Field(
        default="00:00",
        description="日志文件轮转时间"
    )
    retention_days: int = Field(
        default=7,
        description="日志保留天数"
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class JWTSettings(BaseSettings):
    """访问令牌配置。

    环境变量前缀: JWT_
    示例: JWT_SECRET, JWT_EXPIRE_DAYS
    """

    secret: str = Field(
        default="change-me-blazorsozluk-secret-key",
        description="签名密钥"
    )
    algorithm: str = Field(
        default="HS256",
        description="签名算法"
    )
    expire_days: int = Field(
        default=10,
        ge=1,
        description="令牌有效期（天）"
    )

    model_config = SettingsConfigDict(
        env_prefix="JWT_",
        case_sensitive=False,
    )


class BaseConfig(BaseSettings):
    """应用配置。

    使用 pydantic-settings 自动从环境变量和 .env 文件加载配置。
    """

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    cors: CORSSettings = Field(default_factory=CORSSettings)
    log: LogSettings = Field(default_factory=LogSettings)
    jwt: JWTSettings = Field(default_factory=JWTSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )


__all__ = [
    "BaseConfig",
    "CORSSettings",
    "DatabaseSettings",
    "JWTSettings",
    "LogSettings",
    "ServerSettings",
]
