"""具体实体仓储。

每个实体一个接口 + 一个实现，实现全部继承自 GenericRepository，
只负责绑定实体类型，便于依赖注入层按接口注册。
"""

from __future__ import annotations

from abc import ABC
from typing import TYPE_CHECKING

from sozluk.domain.models import EmailConfirmation, Entry, EntryComment, User

from .impl import GenericRepository
from .interface import IGenericRepository

if TYPE_CHECKING:
    from sozluk.infrastructure.database.context import AsyncSozlukContext


class IUserRepository(IGenericRepository[User], ABC):
    pass


class IEntryRepository(IGenericRepository[Entry], ABC):
    pass


class IEntryCommentRepository(IGenericRepository[EntryComment], ABC):
    pass


class IEmailConfirmationRepository(IGenericRepository[EmailConfirmation], ABC):
    pass


class UserRepository(GenericRepository[User], IUserRepository):
    def __init__(self, session: AsyncSozlukContext) -> None:
        super().__init__(session, User)


class EntryRepository(GenericRepository[Entry], IEntryRepository):
    def __init__(self, session: AsyncSozlukContext) -> None:
        super().__init__(session, Entry)


class EntryCommentRepository(GenericRepository[EntryComment], IEntryCommentRepository):
    def __init__(self, session: AsyncSozlukContext) -> None:
        super().__init__(session, EntryComment)


class EmailConfirmationRepository(
    GenericRepository[EmailConfirmation], IEmailConfirmationRepository
):
    def __init__(self, session: AsyncSozlukContext) -> None:
        super().__init__(session, EmailConfirmation)


__all__ = [
    "EmailConfirmationRepository",
    "EntryCommentRepository",
    "EntryRepository",
    "IEmailConfirmationRepository",
    "IEntryCommentRepository",
    "IEntryRepository",
    "IUserRepository",
    "UserRepository",
]
