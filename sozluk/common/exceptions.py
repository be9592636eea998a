"""异常基类。

所有 Sozluk 异常的根类型，各层异常均继承自 FoundationError。
"""

from __future__ import annotations


class FoundationError(Exception):
    """Sozluk 异常根类。

    Attributes:
        message: 错误消息
    """

    def __init__(self, message: str = "", *args: object) -> None:
        super().__init__(message, *args)
        self.message = message

    def __str__(self) -> str:
        return self.message


__all__ = [
    "FoundationError",
]
