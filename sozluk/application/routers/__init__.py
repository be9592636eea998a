"""HTTP 路由。"""

from .user import router as user_router

__all__ = [
    "user_router",
]
