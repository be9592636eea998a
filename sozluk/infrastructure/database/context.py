"""存储上下文 - 所有保存操作的统一入口。

SozlukContext 是同步 Session 的子类，AsyncSozlukContext 以它作为底层同步会话。
两者共享同一个 before_flush 钩子：无论通过 save_changes()、commit()、
显式 flush() 还是 autoflush 触发保存，新增实体的 create_date 都在这里统一写入，
已持久化实体对 create_date 的修改在这里被撤销。
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import event, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.orm.attributes import set_committed_value

from sozluk.common.logging import logger
from sozluk.domain.models import BaseEntity

# 会话 info 中的标记：处于显式工作单元内时 save_changes 只 flush 不提交
DEFER_COMMIT_KEY = "sozluk.defer_commit"


def prepare_added_entities(entities: Iterable[Any]) -> int:
    """为尚未设置创建时间的新增实体写入当前时间。

    Args:
        entities: 处于 added 状态的实体

    Returns:
        int: 本次写入创建时间的实体数量
    """
    now = datetime.now(UTC)
    stamped = 0
    for entity in entities:
        if isinstance(entity, BaseEntity) and entity.create_date is None:
            entity.create_date = now
            stamped += 1
    return stamped


def keep_create_dates(session: Session, entities: Iterable[Any]) -> int:
    """撤销对已持久化实体 create_date 的修改。

    Returns:
        int: 被撤销修改的实体数量
    """
    reverted = 0
    for entity in entities:
        if not isinstance(entity, BaseEntity):
            continue
        history = inspect(entity).attrs.create_date.history
        if not history.has_changes():
            continue
        if history.deleted:
            set_committed_value(entity, "create_date", history.deleted[0])
        else:
            session.expire(entity, ["create_date"])
        reverted += 1
    return reverted


class SozlukContext(Session):
    """同步存储上下文。"""

    @property
    def commit_deferred(self) -> bool:
        """是否处于显式工作单元中（由工作单元负责提交）。"""
        return bool(self.info.get(DEFER_COMMIT_KEY))

    def pending_changes(self) -> int:
        """待写入的实体状态条目数（新增 + 实际修改 + 删除）。"""
        modified = [obj for obj in self.dirty if self.is_modified(obj)]
        return len(self.new) + len(modified) + len(self.deleted)

    def save_changes(self) -> int:
        """保存所有挂起的变更。

        Returns:
            int: 写入的实体状态条目数
        """
        affected = self.pending_changes()
        deferred = self.commit_deferred
        try:
            self.flush()
            if not deferred:
                self.commit()
        except Exception:
            if not deferred:
                self.rollback()
            raise
        logger.debug(f"保存变更: {affected} 条 (deferred={deferred})")
        return affected


@event.listens_for(SozlukContext, "before_flush")
def _before_save(session: SozlukContext, flush_context: Any, instances: Any) -> None:
    prepare_added_entities(session.new)
    keep_create_dates(session, session.dirty)


class AsyncSozlukContext(AsyncSession):
    """异步存储上下文。

    底层同步会话为 SozlukContext，保存逻辑与钩子完全复用。
    """

    sync_session_class = SozlukContext

    @property
    def commit_deferred(self) -> bool:
        return self.sync_session.commit_deferred

    def pending_changes(self) -> int:
        return self.sync_session.pending_changes()

    async def save_changes(self) -> int:
        """保存所有挂起的变更（异步）。"""
        return await self.run_sync(SozlukContext.save_changes)


def create_context_factory(engine: Engine) -> sessionmaker[SozlukContext]:
    """创建同步存储上下文工厂。"""
    return sessionmaker(
        engine,
        class_=SozlukContext,
        expire_on_commit=False,
        autoflush=False,
    )


def create_async_context_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSozlukContext]:
    """创建异步存储上下文工厂。"""
    return async_sessionmaker(
        engine,
        class_=AsyncSozlukContext,
        expire_on_commit=False,
        autoflush=False,
    )


__all__ = [
    "DEFER_COMMIT_KEY",
    "AsyncSozlukContext",
    "SozlukContext",
    "create_async_context_factory",
    "create_context_factory",
    "keep_create_dates",
    "prepare_added_entities",
]
