"""Domain 层异常定义。

Domain 层异常，继承自 FoundationError。
存储引擎异常（sqlalchemy.exc.*）与取消异常不在此包装，原样向上传播。
"""

from __future__ import annotations

from typing import Any

from sozluk.common.exceptions import FoundationError


class DomainError(FoundationError):
    """Domain 层异常基类。"""

    pass


class RepositoryError(DomainError):
    """仓储相关错误基类。"""

    pass


class InvalidArgumentError(RepositoryError, ValueError):
    """参数无效异常。

    必需的实体或集合参数为 None 时同步抛出；
    按 ID 删除但记录不存在时同样以此异常报告。

    Attributes:
        argument: 参数名
        value: 参数值（可选）
    """

    def __init__(
        self,
        argument: str,
        message: str | None = None,
        value: Any = None,
    ) -> None:
        super().__init__(message or f"参数 '{argument}' 不能为空")
        self.argument = argument
        self.value = value


class TransactionRequiredError(DomainError):
    """需要事务但当前会话不在事务中。"""

    pass


__all__ = [
    "DomainError",
    "InvalidArgumentError",
    "RepositoryError",
    "TransactionRequiredError",
]
