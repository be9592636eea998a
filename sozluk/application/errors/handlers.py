"""错误处理器实现。

提供责任链模式的错误处理器：
BaseError -> HTTPException -> 请求验证 -> 领域异常 -> 数据库异常 -> 默认 500
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError
from starlette.exceptions import HTTPException

from sozluk.common.logging import get_trace_id, logger
from sozluk.domain.exceptions import DomainError, InvalidArgumentError

from .codes import ErrorCode
from .exceptions import BaseError
from .response import ErrorDetail, ErrorResponse


def _json(response: ErrorResponse) -> JSONResponse:
    response.trace_id = get_trace_id()
    return JSONResponse(
        status_code=response.code,
        content=response.model_dump(mode="json", exclude_none=True),
    )


class ErrorHandler(ABC):
    """错误处理器抽象基类 - 责任链模式。"""

    def __init__(self) -> None:
        self._next_handler: ErrorHandler | None = None

    def set_next(self, handler: ErrorHandler) -> ErrorHandler:
        """设置下一个处理器。

        Returns:
            ErrorHandler: 下一个处理器（支持链式调用）
        """
        self._next_handler = handler
        return handler

    @abstractmethod
    def can_handle(self, exception: Exception) -> bool:
        """判断是否可以处理该异常。"""

    @abstractmethod
    async def handle(self, exception: Exception, request: Request) -> JSONResponse:
        """处理异常。"""

    async def process(self, exception: Exception, request: Request) -> JSONResponse:
        """处理异常（责任链入口）。"""
        if self.can_handle(exception):
            return await self.handle(exception, request)

        if self._next_handler:
            return await self._next_handler.process(exception, request)

        return await self._default_handle(exception, request)

    async def _default_handle(self, exception: Exception, request: Request) -> JSONResponse:
        """默认异常处理。"""
        logger.exception(f"未处理的异常: {exception}")
        return _json(ErrorResponse(
            code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            message="服务器内部错误",
            error_code=ErrorCode.UNKNOWN_ERROR.value,
        ))


class BaseErrorHandler(ErrorHandler):
    """应用层异常处理器。"""

    def can_handle(self, exception: Exception) -> bool:
        return isinstance(exception, BaseError)

    async def handle(self, exception: BaseError, request: Request) -> JSONResponse:
        logger.warning(f"业务异常: {exception!r}")
        return _json(ErrorResponse(
            code=exception.status_code,
            message=exception.message,
            error_code=exception.code.value,
            errors=exception.details or None,
            metadata=exception.metadata or None,
        ))


class HTTPExceptionHandler(ErrorHandler):
    """HTTP异常处理器。"""

    def can_handle(self, exception: Exception) -> bool:
        return isinstance(exception, HTTPException)

    async def handle(self, exception: HTTPException, request: Request) -> JSONResponse:
        logger.warning(f"HTTP异常: {exception.status_code} - {exception.detail}")
        return _json(ErrorResponse(
            code=exception.status_code,
            message=str(exception.detail),
        ))


class RequestValidationHandler(ErrorHandler):
    """请求体验证异常处理器（FastAPI / Pydantic）。"""

    def can_handle(self, exception: Exception) -> bool:
        return isinstance(exception, (RequestValidationError, PydanticValidationError))

    async def handle(self, exception: Exception, request: Request) -> JSONResponse:
        logger.warning(f"数据验证失败: {exception}")
        errors = [
            ErrorDetail(
                field=".".join(str(loc) for loc in error["loc"]),
                message=error["msg"],
                code=error["type"],
            )
            for error in exception.errors()
        ]
        return _json(ErrorResponse(
            code=status.HTTP_400_BAD_REQUEST,
            message="数据验证失败",
            error_code=ErrorCode.VALIDATION_ERROR.value,
            errors=errors,
        ))


class DomainErrorHandler(ErrorHandler):
    """领域异常处理器。

    InvalidArgumentError（包括按 ID 删除不存在的记录）转换为 400。
    """

    def can_handle(self, exception: Exception) -> bool:
        return isinstance(exception, DomainError)

    async def handle(self, exception: DomainError, request: Request) -> JSONResponse:
        logger.warning(f"领域异常: {exception}")
        if isinstance(exception, InvalidArgumentError):
            return _json(ErrorResponse(
                code=status.HTTP_400_BAD_REQUEST,
                message=exception.message,
                error_code=ErrorCode.INVALID_ARGUMENT.value,
                errors=[ErrorDetail(message=exception.message, field=exception.argument)],
            ))
        return _json(ErrorResponse(
            code=status.HTTP_400_BAD_REQUEST,
            message=exception.message,
            error_code=ErrorCode.BUSINESS_ERROR.value,
        ))


class DatabaseErrorHandler(ErrorHandler):
    """数据库异常处理器。"""

    def can_handle(self, exception: Exception) -> bool:
        return isinstance(exception, SQLAlchemyError)

    async def handle(self, exception: SQLAlchemyError, request: Request) -> JSONResponse:
        if isinstance(exception, StaleDataError):
            logger.warning(f"并发冲突: {exception}")
            return _json(ErrorResponse(
                code=status.HTTP_409_CONFLICT,
                message="数据不存在或已被其他操作修改",
                error_code=ErrorCode.CONCURRENCY_CONFLICT.value,
            ))
        if isinstance(exception, IntegrityError):
            logger.warning(f"约束冲突: {exception.orig}")
            return _json(ErrorResponse(
                code=status.HTTP_409_CONFLICT,
                message="数据违反约束",
                error_code=ErrorCode.CONSTRAINT_VIOLATION.value,
            ))

        logger.exception(f"数据库错误: {exception}")
        return _json(ErrorResponse(
            code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            message="数据库操作失败",
            error_code=ErrorCode.DATABASE_ERROR.value,
        ))


class ErrorHandlerChain:
    """错误处理链管理器。"""

    def __init__(self) -> None:
        self._chain = self._build_chain()

    def _build_chain(self) -> ErrorHandler:
        """按优先级顺序构建处理链。"""
        head = BaseErrorHandler()
        (
            head.set_next(HTTPExceptionHandler())
            .set_next(RequestValidationHandler())
            .set_next(DomainErrorHandler())
            .set_next(DatabaseErrorHandler())
        )
        return head

    async def handle(self, exception: Exception, request: Request) -> JSONResponse:
        return await self._chain.process(exception, request)


# 全局异常处理器实例
error_handler_chain = ErrorHandlerChain()


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """全局异常处理器（FastAPI集成）。

    使用方式:
        app.add_exception_handler(Exception, global_exception_handler)
    """
    return await error_handler_chain.handle(exc, request)


__all__ = [
    "BaseErrorHandler",
    "DatabaseErrorHandler",
    "DomainErrorHandler",
    "ErrorHandler",
    "ErrorHandlerChain",
    "HTTPExceptionHandler",
    "RequestValidationHandler",
    "global_exception_handler",
]
