"""论坛实体及其映射。

每个实体映射到 dbo 模式下的一张表；外键按关系逐一声明，
子表多对一引用父表，父表暴露对应集合。
"""

from __future__ import annotations

from enum import IntEnum
import uuid

from sqlalchemy import Boolean, Enum, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.types import Uuid

from .base import DEFAULT_SCHEMA, BaseEntity


def _fk(table: str) -> ForeignKey:
    return ForeignKey(f"{DEFAULT_SCHEMA}.{table}.id")


class VoteType(IntEnum):
    """投票类型"""

    NONE = -1
    DOWN_VOTE = 0
    UP_VOTE = 1


class User(BaseEntity):
    __tablename__ = "user"

    first_name: Mapped[str | None] = mapped_column(String(100))
    last_name: Mapped[str | None] = mapped_column(String(100))
    email_address: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    user_name: Mapped[str] = mapped_column(String(100))
    password: Mapped[str] = mapped_column(String(255), comment="单向哈希")
    email_confirmed: Mapped[bool] = mapped_column(Boolean, default=False)

    entries: Mapped[list[Entry]] = relationship(
        back_populates="created_by", passive_deletes=True
    )
    entry_comments: Mapped[list[EntryComment]] = relationship(
        back_populates="created_by", passive_deletes=True
    )
    entry_favorites: Mapped[list[EntryFavorite]] = relationship(
        back_populates="created_user", passive_deletes=True
    )
    entry_comment_favorites: Mapped[list[EntryCommentFavorite]] = relationship(
        back_populates="created_user", passive_deletes=True
    )


class Entry(BaseEntity):
    __tablename__ = "entry"

    subject: Mapped[str] = mapped_column(String(400))
    content: Mapped[str] = mapped_column(Text)
    created_by_id: Mapped[uuid.UUID] = mapped_column(_fk("user"), index=True)

    created_by: Mapped[User] = relationship(back_populates="entries")
    entry_votes: Mapped[list[EntryVote]] = relationship(
        back_populates="entry", passive_deletes=True
    )
    entry_favorites: Mapped[list[EntryFavorite]] = relationship(
        back_populates="entry", passive_deletes=True
    )
    entry_comments: Mapped[list[EntryComment]] = relationship(
        back_populates="entry", passive_deletes=True
    )


class EntryComment(BaseEntity):
    __tablename__ = "entrycomment"

    content: Mapped[str] = mapped_column(Text)
    created_by_id: Mapped[uuid.UUID] = mapped_column(_fk("user"), index=True)
    entry_id: Mapped[uuid.UUID] = mapped_column(_fk("entry"), index=True)

    created_by: Mapped[User] = relationship(back_populates="entry_comments")
    entry: Mapped[Entry] = relationship(back_populates="entry_comments")
    entry_comment_votes: Mapped[list[EntryCommentVote]] = relationship(
        back_populates="entry_comment", passive_deletes=True
    )
    entry_comment_favorites: Mapped[list[EntryCommentFavorite]] = relationship(
        back_populates="entry_comment", passive_deletes=True
    )


class EntryVote(BaseEntity):
    __tablename__ = "entryvote"

    vote_type: Mapped[VoteType] = mapped_column(
        Enum(VoteType, native_enum=False, values_callable=lambda e: [str(m.value) for m in e]),
        default=VoteType.NONE,
    )
    entry_id: Mapped[uuid.UUID] = mapped_column(_fk("entry"), index=True)
    created_by_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True))

    entry: Mapped[Entry] = relationship(back_populates="entry_votes")


class EntryCommentVote(BaseEntity):
    __tablename__ = "entrycommentvote"

    vote_type: Mapped[VoteType] = mapped_column(
        Enum(VoteType, native_enum=False, values_callable=lambda e: [str(m.value) for m in e]),
        default=VoteType.NONE,
    )
    entry_comment_id: Mapped[uuid.UUID] = mapped_column(_fk("entrycomment"), index=True)
    created_by_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True))

    entry_comment: Mapped[EntryComment] = relationship(back_populates="entry_comment_votes")


class EntryFavorite(BaseEntity):
    __tablename__ = "entryfavorite"

    entry_id: Mapped[uuid.UUID] = mapped_column(_fk("entry"), index=True)
    created_by_id: Mapped[uuid.UUID] = mapped_column(_fk("user"), index=True)

    entry: Mapped[Entry] = relationship(back_populates="entry_favorites")
    created_user: Mapped[User] = relationship(back_populates="entry_favorites")


class EntryCommentFavorite(BaseEntity):
    __tablename__ = "entrycommentfavorite"

    entry_comment_id: Mapped[uuid.UUID] = mapped_column(_fk("entrycomment"), index=True)
    created_by_id: Mapped[uuid.UUID] = mapped_column(_fk("user"), index=True)

    entry_comment: Mapped[EntryComment] = relationship(back_populates="entry_comment_favorites")
    created_user: Mapped[User] = relationship(back_populates="entry_comment_favorites")


class EmailConfirmation(BaseEntity):
    """邮箱确认令牌，确认流程中只使用一次。"""

    __tablename__ = "emailconfirmation"

    old_email_address: Mapped[str | None] = mapped_column(String(255))
    new_email_address: Mapped[str] = mapped_column(String(255))
    user_id: Mapped[uuid.UUID] = mapped_column(_fk("user"), index=True)


__all__ = [
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
