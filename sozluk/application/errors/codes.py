"""错误代码定义。

提供统一的错误代码枚举。
"""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """错误代码枚举。"""

    # 通用错误 (1xxx)
    UNKNOWN_ERROR = "1000"
    VALIDATION_ERROR = "1001"
    NOT_FOUND = "1002"
    UNAUTHORIZED = "1004"

    # 数据库错误 (2xxx)
    DATABASE_ERROR = "2000"
    CONSTRAINT_VIOLATION = "2002"
    CONCURRENCY_CONFLICT = "2003"  # 更新/删除的行不存在或已变化

    # 业务错误 (3xxx)
    BUSINESS_ERROR = "3000"
    INVALID_ARGUMENT = "3001"
    EMAIL_NOT_CONFIRMED = "3002"


__all__ = [
    "ErrorCode",
]
