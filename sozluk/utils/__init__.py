"""工具模块。"""

from .jwt import TokenPayload, create_access_token, decode_access_token
from .security import hash_password, verify_password

__all__ = [
    "TokenPayload",
    "create_access_token",
    "decode_access_token",
    "hash_password",
    "verify_password",
]
