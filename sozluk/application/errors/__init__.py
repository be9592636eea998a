"""应用层错误处理。"""

from .codes import ErrorCode
from .exceptions import (
    BaseError,
    BusinessError,
    EmailNotConfirmedError,
    InvalidCredentialsError,
    NotFoundError,
    UnauthorizedError,
    UserNotFoundError,
)
from .handlers import ErrorHandler, ErrorHandlerChain, global_exception_handler
from .response import ErrorDetail, ErrorResponse

__all__ = [
    "BaseError",
    "BusinessError",
    "EmailNotConfirmedError",
    "ErrorCode",
    "ErrorDetail",
    "ErrorHandler",
    "ErrorHandlerChain",
    "ErrorResponse",
    "InvalidCredentialsError",
    "NotFoundError",
    "UnauthorizedError",
    "UserNotFoundError",
    "global_exception_handler",
]
