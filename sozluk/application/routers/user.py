"""用户接口。"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from sozluk.application.dependencies import get_login_handler
from sozluk.application.features.users import (
    LoginUserCommand,
    LoginUserCommandHandler,
    LoginUserViewModel,
)

router = APIRouter(prefix="/api/user", tags=["user"])


@router.post("/login", response_model=LoginUserViewModel)
async def login(
    command: LoginUserCommand,
    handler: LoginUserCommandHandler = Depends(get_login_handler),
) -> LoginUserViewModel:
    return await handler.handle(command)


__all__ = [
    "router",
]
