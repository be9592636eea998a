"""应用层异常类定义。

处理器抛出的异常都继承自 BaseError，携带 HTTP 状态码与业务错误代码，
由错误处理链转换为 ErrorResponse。
"""

from __future__ import annotations

from typing import Any

from fastapi import status

from sozluk.common.exceptions import FoundationError

from .codes import ErrorCode
from .response import ErrorDetail


class BaseError(FoundationError):
    """应用层异常基类（用于 HTTP 响应）。

    Attributes:
        message: 错误消息
        code: 错误代码
        status_code: HTTP状态码
        details: 错误详情列表
        metadata: 元数据
    """

    code: ErrorCode = ErrorCode.UNKNOWN_ERROR
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        details: list[ErrorDetail] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.details = details or []
        self.metadata = metadata or {}

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} code={self.code.value} message={self.message}>"


class NotFoundError(BaseError):
    """资源不存在。"""

    code = ErrorCode.NOT_FOUND
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str = "资源不存在", resource: Any = None, **kwargs) -> None:
        metadata = kwargs.pop("metadata", {})
        if resource is not None:
            metadata["resource"] = str(resource)
        super().__init__(message, metadata=metadata, **kwargs)


class UnauthorizedError(BaseError):
    """未授权访问。"""

    code = ErrorCode.UNAUTHORIZED
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "未授权访问", **kwargs) -> None:
        super().__init__(message, **kwargs)


class BusinessError(BaseError):
    """业务规则不满足。"""

    code = ErrorCode.BUSINESS_ERROR
    status_code = status.HTTP_400_BAD_REQUEST


class UserNotFoundError(NotFoundError):
    """按邮箱找不到用户。"""

    def __init__(self, email_address: str) -> None:
        super().__init__("用户不存在", resource=email_address)


class InvalidCredentialsError(UnauthorizedError):
    """密码与存储的哈希不匹配。"""

    def __init__(self) -> None:
        super().__init__("密码错误")


class EmailNotConfirmedError(BusinessError):
    """邮箱地址尚未确认，不允许登录。"""

    code = ErrorCode.EMAIL_NOT_CONFIRMED

    def __init__(self, email_address: str) -> None:
        super().__init__("邮箱地址尚未确认", metadata={"email_address": email_address})


__all__ = [
    "BaseError",
    "BusinessError",
    "EmailNotConfirmedError",
    "InvalidCredentialsError",
    "NotFoundError",
    "UnauthorizedError",
    "UserNotFoundError",
]
