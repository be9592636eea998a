"""领域模型模块。

提供 ORM 基类、实体基类与论坛实体。
"""

from .base import DEFAULT_SCHEMA, Base, BaseEntity, UTCDateTime
from .entities import (
    EmailConfirmation,
    Entry,
    EntryComment,
    EntryCommentFavorite,
    EntryCommentVote,
    EntryFavorite,
    EntryVote,
    User,
    VoteType,
)

__all__ = [
    # 基类
    "DEFAULT_SCHEMA",
    "Base",
    "BaseEntity",
    "UTCDateTime",
    # 实体
    "EmailConfirmation",
    "Entry",
    "EntryComment",
    "EntryCommentFavorite",
    "EntryCommentVote",
    "EntryFavorite",
    "EntryVote",
    "User",
    "VoteType",
]
