"""FastAPI 依赖。

每个请求获得独立的存储上下文，请求结束时关闭；仓储与处理器基于它构造。
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

from fastapi import Depends, Request

from sozluk.application.config import JWTSettings
from sozluk.application.features.users import LoginUserCommandHandler
from sozluk.domain.repository import IUserRepository, UserRepository
from sozluk.infrastructure.database import AsyncSozlukContext, DatabaseManager


async def get_session() -> AsyncGenerator[AsyncSozlukContext, None]:
    async with DatabaseManager.get_instance().session() as session:
        yield session


def get_user_repository(session: AsyncSozlukContext = Depends(get_session)) -> IUserRepository:
    return UserRepository(session)


def get_jwt_settings(request: Request) -> JWTSettings:
    return request.app.config.jwt


def get_login_handler(
    user_repository: IUserRepository = Depends(get_user_repository),
    jwt_settings: JWTSettings = Depends(get_jwt_settings),
) -> LoginUserCommandHandler:
    return LoginUserCommandHandler(user_repository, jwt_settings)


__all__ = [
    "get_jwt_settings",
    "get_login_handler",
    "get_session",
    "get_user_repository",
]
