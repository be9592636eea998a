"""JWT 访问令牌。

登录成功后签发 HS256 访问令牌，声明与用户资料对应。
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from pydantic import BaseModel, Field


class TokenPayload(BaseModel):
    """访问令牌载荷（Pydantic）。"""

    sub: str = Field(..., description="主题（用户ID）")
    email: str = Field(..., description="邮箱地址")
    name: str = Field(..., description="用户名")
    given_name: str | None = Field(None, description="名")
    family_name: str | None = Field(None, description="姓")
    exp: datetime = Field(..., description="过期时间")
    iat: datetime = Field(default_factory=lambda: datetime.now(UTC), description="签发时间")


def create_access_token(
    claims: dict[str, Any],
    secret: str,
    *,
    algorithm: str = "HS256",
    expires_in: timedelta = timedelta(days=10),
) -> str:
    """签发访问令牌。

    Args:
        claims: 载荷声明（不含 exp/iat）
        secret: 签名密钥
        algorithm: 签名算法
        expires_in: 有效期

    Returns:
        str: 编码后的令牌
    """
    now = datetime.now(UTC)
    payload = TokenPayload(**claims, exp=now + expires_in, iat=now)
    return jwt.encode(payload.model_dump(exclude_none=True), secret, algorithm=algorithm)


def decode_access_token(token: str, secret: str, *, algorithm: str = "HS256") -> TokenPayload:
    """解码并校验访问令牌。

    Raises:
        jwt.InvalidTokenError: 签名无效或令牌已过期
    """
    return TokenPayload(**jwt.decode(token, secret, algorithms=[algorithm]))


__all__ = [
    "TokenPayload",
    "create_access_token",
    "decode_access_token",
]
