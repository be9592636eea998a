"""仓储模块。

- IGenericRepository: 通用仓储接口
- GenericRepository / SyncGenericRepository: 通用仓储实现
- QueryBuilder: 查询构建器
- UserRepository 等: 具体实体仓储
"""

from .impl import GenericRepository, SyncGenericRepository
from .interface import IGenericRepository
from .query_builder import IncludePath, Predicate, QueryBuilder
from .repositories import (
    EmailConfirmationRepository,
    EntryCommentRepository,
    EntryRepository,
    IEmailConfirmationRepository,
    IEntryCommentRepository,
    IEntryRepository,
    IUserRepository,
    UserRepository,
)

__all__ = [
    "EmailConfirmationRepository",
    "EntryCommentRepository",
    "EntryRepository",
    "GenericRepository",
    "IEmailConfirmationRepository",
    "IEntryCommentRepository",
    "IEntryRepository",
    "IGenericRepository",
    "IUserRepository",
    "IncludePath",
    "Predicate",
    "QueryBuilder",
    "SyncGenericRepository",
    "UserRepository",
]
