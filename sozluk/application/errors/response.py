"""错误响应模型。"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """错误详情。"""

    message: str = Field(..., description="错误消息")
    code: str | None = Field(default=None, description="错误代码")
    field: str | None = Field(default=None, description="相关字段")


class ErrorResponse(BaseModel):
    """错误响应模型。

    Attributes:
        code: HTTP 状态码
        message: 错误消息
        error_code: 业务错误代码
        errors: 错误详情列表
        metadata: 元数据
        trace_id: 链路追踪ID
        timestamp: 响应时间戳
    """

    code: int = Field(default=400, description="响应状态码")
    message: str = Field(default="请求错误", description="错误消息")
    error_code: str | None = Field(default=None, description="错误代码")
    errors: list[ErrorDetail] | None = Field(default=None, description="错误详情")
    metadata: dict[str, Any] | None = Field(default=None, description="元数据")
    trace_id: str | None = Field(default=None, description="链路追踪ID")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC), description="响应时间戳")


__all__ = [
    "ErrorDetail",
    "ErrorResponse",
]
