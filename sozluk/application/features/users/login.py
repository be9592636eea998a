"""用户登录。

按邮箱查找用户、校验密码哈希与邮箱确认状态，成功后返回带访问令牌的用户视图。
"""

from __future__ import annotations

from datetime import timedelta
import uuid

from pydantic import BaseModel, ConfigDict, Field

from sozluk.application.config import JWTSettings
from sozluk.application.errors import (
    EmailNotConfirmedError,
    InvalidCredentialsError,
    UserNotFoundError,
)
from sozluk.common.logging import log_performance, logger
from sozluk.domain.models import User
from sozluk.domain.repository import IUserRepository
from sozluk.utils.jwt import create_access_token
from sozluk.utils.security import verify_password


class LoginUserCommand(BaseModel):
    """登录请求。"""

    email_address: str = Field(..., min_length=3, max_length=255, description="邮箱地址")
    password: str = Field(..., min_length=1, description="明文密码")


class LoginUserViewModel(BaseModel):
    """登录结果视图。"""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_name: str
    first_name: str | None = None
    last_name: str | None = None
    token: str | None = None


class LoginUserCommandHandler:
    """登录处理器，仓储是它访问存储的唯一途径。"""

    def __init__(self, user_repository: IUserRepository, jwt_settings: JWTSettings) -> None:
        self._user_repository = user_repository
        self._jwt_settings = jwt_settings

    @log_performance(threshold=1.0)
    async def handle(self, command: LoginUserCommand) -> LoginUserViewModel:
        """处理登录。

        Raises:
            UserNotFoundError: 邮箱对应的用户不存在
            InvalidCredentialsError: 密码不匹配
            EmailNotConfirmedError: 邮箱尚未确认
        """
        user = await self._user_repository.first_or_default(
            User.email_address == command.email_address
        )
        if user is None:
            raise UserNotFoundError(command.email_address)

        if not verify_password(command.password, user.password):
            raise InvalidCredentialsError()

        if not user.email_confirmed:
            raise EmailNotConfirmedError(user.email_address)

        result = LoginUserViewModel.model_validate(user)
        result.token = self._generate_token(user)
        logger.info(f"用户登录成功: {user.id}")
        return result

    def _generate_token(self, user: User) -> str:
        claims = {
            "sub": str(user.id),
            "email": user.email_address,
            "name": user.user_name,
            "given_name": user.first_name,
            "family_name": user.last_name,
        }
        return create_access_token(
            claims,
            self._jwt_settings.secret,
            algorithm=self._jwt_settings.algorithm,
            expires_in=timedelta(days=self._jwt_settings.expire_days),
        )


__all__ = [
    "LoginUserCommand",
    "LoginUserCommandHandler",
    "LoginUserViewModel",
]
