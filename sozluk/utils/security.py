"""安全工具 - 密码哈希。

密码只保存单向哈希（bcrypt），登录时比对。
"""

from __future__ import annotations

import bcrypt

from sozluk.common.logging import logger


def hash_password(password: str, rounds: int = 12) -> str:
    """哈希密码（bcrypt）。

    Args:
        password: 明文密码
        rounds: bcrypt轮数（默认12，范围4-31）

    Returns:
        str: 哈希后的密码
    """
    if not password:
        raise ValueError("密码不能为空")

    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode(), salt)
    return hashed.decode()


def verify_password(password: str, hashed: str) -> bool:
    """验证密码。

    Args:
        password: 明文密码
        hashed: 哈希密码

    Returns:
        bool: 是否匹配（哈希格式无效时返回 False）
    """
    try:
        return bcrypt.checkpw(password.encode(), hashed.encode())
    except (ValueError, TypeError) as exc:
        logger.warning(f"密码验证失败: {exc}")
        return False


__all__ = [
    "hash_password",
    "verify_password",
]
