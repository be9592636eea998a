"""用户相关命令与查询。"""

from .login import LoginUserCommand, LoginUserCommandHandler, LoginUserViewModel

__all__ = [
    "LoginUserCommand",
    "LoginUserCommandHandler",
    "LoginUserViewModel",
]
