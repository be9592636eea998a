"""通用仓储实现。

GenericRepository 为异步实现（处理器和接口层使用），SyncGenericRepository 为同步镜像。
两者共享附加、标记修改和非跟踪读取的逻辑，所有保存都经由存储上下文的 save_changes()。

跟踪策略：
- 读操作默认 no_tracking=True，本次读取新载入的实例会从上下文中分离；
  调用前已被跟踪的实例保持原状
- update/delete 及批量变体会自动重新附加已分离或新构造的实例
- 删除上下文未跟踪的实例前先按 id 载入；行不存在时抛出 StaleDataError，
  与 UPDATE 未匹配到行时的行为一致
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any
import uuid

from sqlalchemy import Select, func, inspect, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session, make_transient_to_detached
from sqlalchemy.orm.exc import StaleDataError
from sqlalchemy.orm.attributes import flag_modified

from sozluk.common.logging import logger
from sozluk.domain.exceptions import InvalidArgumentError
from sozluk.domain.models import BaseEntity

from .interface import IGenericRepository
from .query_builder import IncludePath, Predicate, QueryBuilder

if TYPE_CHECKING:
    from sozluk.infrastructure.database.context import AsyncSozlukContext, SozlukContext

# 整体更新时不写回的字段
_IMMUTABLE_COLUMNS = frozenset({"id", "create_date"})


def _require(argument: str, value: Any) -> None:
    if value is None:
        raise InvalidArgumentError(argument)


def _materialize[T](argument: str, items: Iterable[T] | None) -> list[T]:
    _require(argument, items)
    return list(items)


class _RepositoryBase[ModelType: BaseEntity]:
    """同步/异步仓储共享的部分（只包含不访问数据库的操作）。"""

    def __init__(self, session: Session | AsyncSession, model_class: type[ModelType]) -> None:
        self._model_class = model_class
        # 身份映射始终在同步会话上
        self._tracker: Session = (
            session.sync_session if isinstance(session, AsyncSession) else session
        )
        logger.debug(f"初始化 {self.__class__.__name__}")

    @property
    def model_class(self) -> type[ModelType]:
        return self._model_class

    def as_queryable(self) -> QueryBuilder[ModelType]:
        return QueryBuilder(self._model_class)

    def get(
        self,
        predicate: Predicate = None,
        *includes: IncludePath,
        no_tracking: bool = True,
    ) -> QueryBuilder[ModelType]:
        builder = self.as_queryable().where(predicate).include(*includes)
        return builder.as_no_tracking() if no_tracking else builder.as_tracking()

    def _list_query(
        self,
        predicate: Predicate,
        includes: Sequence[IncludePath],
        no_tracking: bool,
        order_by: Any | Sequence[Any] | None,
    ) -> QueryBuilder[ModelType]:
        builder = self.get(predicate, *includes, no_tracking=no_tracking)
        if order_by is not None:
            fields = order_by if isinstance(order_by, (list, tuple)) else (order_by,)
            builder.order_by(*fields)
        return builder

    def _count_query(self, predicate: Predicate) -> Select:
        query = select(func.count()).select_from(self._model_class)
        if predicate is not None:
            query = query.where(predicate)
        return query

    def _not_found(self, id: uuid.UUID) -> InvalidArgumentError:
        return InvalidArgumentError(
            "id",
            f"{self._model_class.__name__} 不存在: {id}",
            value=id,
        )

    def _missing_row(self, entity: ModelType) -> StaleDataError:
        table = self._model_class.__table__.name
        return StaleDataError(
            f"DELETE statement on table '{table}' expected to delete 1 row(s); "
            f"0 were matched: {entity.id}"
        )

    @contextmanager
    def _reading(self, no_tracking: bool) -> Iterator[None]:
        """非跟踪读取：把本次读取新载入上下文的实例全部分离。"""
        if not no_tracking:
            yield
            return
        before = set(self._tracker.identity_map.values())
        try:
            yield
        finally:
            for obj in list(self._tracker.identity_map.values()):
                if obj not in before:
                    self._tracker.expunge(obj)

    def _is_tracked_locally(self, entity: ModelType) -> bool:
        """本地变更集（身份映射 + 待插入）中是否已有同 id 的实例。"""
        key = inspect(self._model_class).identity_key_from_primary_key([entity.id])
        if self._tracker.identity_map.get(key) is not None:
            return True
        return any(
            isinstance(obj, self._model_class) and obj.id == entity.id
            for obj in self._tracker.new
        )

    def _attach(self, entity: ModelType) -> ModelType:
        """把未跟踪的实例附加到存储上下文，返回上下文中实际跟踪的实例。

        新构造（transient）的实例按已存在的行附加；
        上下文中已有同 id 的另一个实例时，把已载入的字段值写到该实例上。
        """
        if entity in self._tracker:
            return entity

        state = inspect(entity)
        if state.transient:
            make_transient_to_detached(entity)

        tracked = self._tracker.identity_map.get(state.key)
        if tracked is not None:
            for attr in state.mapper.column_attrs:
                if attr.key not in _IMMUTABLE_COLUMNS and attr.key in state.dict:
                    setattr(tracked, attr.key, state.dict[attr.key])
            return tracked

        self._tracker.add(entity)
        return entity

    @staticmethod
    def _mark_modified(entity: BaseEntity) -> None:
        """把所有已载入的字段（id、create_date 除外）标记为修改。"""
        state = inspect(entity)
        for attr in state.mapper.column_attrs:
            if attr.key not in _IMMUTABLE_COLUMNS and attr.key in state.dict:
                flag_modified(entity, attr.key)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} model={self._model_class.__name__}>"


class GenericRepository[ModelType: BaseEntity](
    _RepositoryBase[ModelType], IGenericRepository[ModelType]
):
    """异步通用仓储。

    使用示例:
        repo = GenericRepository(session, Entry)
        await repo.add(Entry(subject="...", content="...", created_by_id=user.id))
        entries = await repo.get_list(Entry.created_by_id == user.id, order_by="-create_date")
    """

    def __init__(self, session: AsyncSozlukContext, model_class: type[ModelType]) -> None:
        super().__init__(session, model_class)
        self._session = session

    @property
    def session(self) -> AsyncSozlukContext:
        return self._session

    async def _deletable(self, entity: ModelType) -> ModelType:
        if self._is_tracked_locally(entity):
            return self._attach(entity)
        existing = await self._session.get(self._model_class, entity.id)
        if existing is None:
            raise self._missing_row(entity)
        return existing

    # 写操作

    async def add(self, entity: ModelType) -> int:
        _require("entity", entity)
        self._session.add(entity)
        logger.debug(f"添加实体: {entity}")
        return await self.save_changes()

    async def add_range(self, entities: Iterable[ModelType]) -> int:
        items = _materialize("entities", entities)
        if not items:
            return 0
        self._session.add_all(items)
        logger.debug(f"添加 {len(items)} 个实体")
        return await self.save_changes()

    async def add_or_update(self, entity: ModelType) -> int:
        _require("entity", entity)
        # 本地未跟踪时只会发出 UPDATE，不会插入
        if not self._is_tracked_locally(entity):
            self._mark_modified(self._attach(entity))
        return await self.save_changes()

    async def update(self, entity: ModelType) -> int:
        _require("entity", entity)
        self._mark_modified(self._attach(entity))
        logger.debug(f"更新实体: {entity}")
        return await self.save_changes()

    async def bulk_add(self, entities: Iterable[ModelType]) -> int:
        items = _materialize("entities", entities)
        if not items:
            return 0
        self._session.add_all(items)
        logger.debug(f"批量添加 {len(items)} 个实体")
        return await self.save_changes()

    async def bulk_delete(self, predicate: Predicate = None) -> int:
        result = await self._session.execute(self.get(predicate, no_tracking=False).build())
        for entity in result.scalars().all():
            await self._session.delete(entity)
        return await self.save_changes()

    async def bulk_delete_entities(self, entities: Iterable[ModelType]) -> int:
        items = _materialize("entities", entities)
        if not items:
            return 0
        targets = [await self._deletable(entity) for entity in items]
        for target in targets:
            await self._session.delete(target)
        logger.debug(f"批量删除 {len(items)} 个实体")
        return await self.save_changes()

    async def bulk_delete_by_id(self, ids: Iterable[uuid.UUID]) -> int:
        id_list = _materialize("ids", ids)
        if not id_list:
            return 0
        return await self.bulk_delete(self._model_class.id.in_(id_list))

    async def bulk_update(self, entities: Iterable[ModelType]) -> int:
        items = _materialize("entities", entities)
        if not items:
            return 0
        for entity in items:
            self._mark_modified(self._attach(entity))
        logger.debug(f"批量更新 {len(items)} 个实体")
        return await self.save_changes()

    async def delete(self, entity: ModelType) -> int:
        _require("entity", entity)
        await self._session.delete(await self._deletable(entity))
        logger.debug(f"删除实体: {entity}")
        return await self.save_changes()

    async def delete_by_id(self, id: uuid.UUID) -> int:
        entity = await self._session.get(self._model_class, id)
        if entity is None:
            raise self._not_found(id)
        await self._session.delete(entity)
        return await self.save_changes()

    async def delete_range(self, predicate: Predicate = None) -> int:
        return await self.bulk_delete(predicate)

    # 读操作

    async def to_list(self, query: QueryBuilder[ModelType]) -> list[ModelType]:
        """执行 get()/as_queryable() 构建的查询。"""
        with self._reading(query.no_tracking):
            result = await self._session.execute(query.build())
            return list(result.scalars().all())

    async def first(self, query: QueryBuilder[ModelType]) -> ModelType | None:
        """执行查询并返回第一条结果。"""
        with self._reading(query.no_tracking):
            result = await self._session.execute(query.build().limit(1))
            return result.scalars().first()

    async def get_all(self, no_tracking: bool = True) -> list[ModelType]:
        return await self.to_list(self.get(no_tracking=no_tracking))

    async def get_by_id(
        self,
        id: uuid.UUID,
        *includes: IncludePath,
        no_tracking: bool = True,
    ) -> ModelType | None:
        with self._reading(no_tracking):
            if not includes:
                return await self._session.get(self._model_class, id)
            query = self.get(self._model_class.id == id, *includes).build()
            result = await self._session.execute(query)
            return result.scalar_one_or_none()

    async def get_list(
        self,
        predicate: Predicate = None,
        *includes: IncludePath,
        no_tracking: bool = True,
        order_by: Any | Sequence[Any] | None = None,
    ) -> list[ModelType]:
        return await self.to_list(self._list_query(predicate, includes, no_tracking, order_by))

    async def get_single(
        self,
        predicate: Predicate = None,
        *includes: IncludePath,
        no_tracking: bool = True,
    ) -> ModelType | None:
        with self._reading(no_tracking):
            result = await self._session.execute(self.get(predicate, *includes).build())
            return result.scalar_one_or_none()

    async def first_or_default(
        self,
        predicate: Predicate = None,
        *includes: IncludePath,
        no_tracking: bool = True,
    ) -> ModelType | None:
        return await self.first(self.get(predicate, *includes, no_tracking=no_tracking))

    async def count(self, predicate: Predicate = None) -> int:
        result = await self._session.execute(self._count_query(predicate))
        return result.scalar_one()

    async def exists(self, predicate: Predicate = None) -> bool:
        return await self.count(predicate) > 0

    async def save_changes(self) -> int:
        return await self._session.save_changes()


class SyncGenericRepository[ModelType: BaseEntity](_RepositoryBase[ModelType]):
    """同步通用仓储，操作集与 GenericRepository 相同。

    唯一差异：delete_range 返回是否有记录被删除。
    """

    def __init__(self, session: SozlukContext, model_class: type[ModelType]) -> None:
        super().__init__(session, model_class)
        self._session = session

    @property
    def session(self) -> SozlukContext:
        return self._session

    def _deletable(self, entity: ModelType) -> ModelType:
        if self._is_tracked_locally(entity):
            return self._attach(entity)
        existing = self._session.get(self._model_class, entity.id)
        if existing is None:
            raise self._missing_row(entity)
        return existing

    def add(self, entity: ModelType) -> int:
        _require("entity", entity)
        self._session.add(entity)
        logger.debug(f"添加实体: {entity}")
        return self.save_changes()

    def add_range(self, entities: Iterable[ModelType]) -> int:
        items = _materialize("entities", entities)
        if not items:
            return 0
        self._session.add_all(items)
        return self.save_changes()

    def add_or_update(self, entity: ModelType) -> int:
        _require("entity", entity)
        if not self._is_tracked_locally(entity):
            self._mark_modified(self._attach(entity))
        return self.save_changes()

    def update(self, entity: ModelType) -> int:
        _require("entity", entity)
        self._mark_modified(self._attach(entity))
        return self.save_changes()

    def bulk_add(self, entities: Iterable[ModelType]) -> int:
        return self.add_range(entities)

    def bulk_delete(self, predicate: Predicate = None) -> int:
        entities = self._session.scalars(self.get(predicate, no_tracking=False).build()).all()
        for entity in entities:
            self._session.delete(entity)
        return self.save_changes()

    def bulk_delete_entities(self, entities: Iterable[ModelType]) -> int:
        items = _materialize("entities", entities)
        if not items:
            return 0
        targets = [self._deletable(entity) for entity in items]
        for target in targets:
            self._session.delete(target)
        return self.save_changes()

    def bulk_delete_by_id(self, ids: Iterable[uuid.UUID]) -> int:
        id_list = _materialize("ids", ids)
        if not id_list:
            return 0
        return self.bulk_delete(self._model_class.id.in_(id_list))

    def bulk_update(self, entities: Iterable[ModelType]) -> int:
        items = _materialize("entities", entities)
        if not items:
            return 0
        for entity in items:
            self._mark_modified(self._attach(entity))
        return self.save_changes()

    def delete(self, entity: ModelType) -> int:
        _require("entity", entity)
        self._session.delete(self._deletable(entity))
        return self.save_changes()

    def delete_by_id(self, id: uuid.UUID) -> int:
        entity = self._session.get(self._model_class, id)
        if entity is None:
            raise self._not_found(id)
        self._session.delete(entity)
        return self.save_changes()

    def delete_range(self, predicate: Predicate = None) -> bool:
        return self.bulk_delete(predicate) > 0

    def to_list(self, query: QueryBuilder[ModelType]) -> list[ModelType]:
        with self._reading(query.no_tracking):
            return list(self._session.scalars(query.build()).all())

    def first(self, query: QueryBuilder[ModelType]) -> ModelType | None:
        with self._reading(query.no_tracking):
            return self._session.scalars(query.build().limit(1)).first()

    def get_all(self, no_tracking: bool = True) -> list[ModelType]:
        return self.to_list(self.get(no_tracking=no_tracking))

    def get_by_id(
        self,
        id: uuid.UUID,
        *includes: IncludePath,
        no_tracking: bool = True,
    ) -> ModelType | None:
        with self._reading(no_tracking):
            if not includes:
                return self._session.get(self._model_class, id)
            query = self.get(self._model_class.id == id, *includes).build()
            return self._session.scalars(query).one_or_none()

    def get_list(
        self,
        predicate: Predicate = None,
        *includes: IncludePath,
        no_tracking: bool = True,
        order_by: Any | Sequence[Any] | None = None,
    ) -> list[ModelType]:
        return self.to_list(self._list_query(predicate, includes, no_tracking, order_by))

    def get_single(
        self,
        predicate: Predicate = None,
        *includes: IncludePath,
        no_tracking: bool = True,
    ) -> ModelType | None:
        with self._reading(no_tracking):
            return self._session.scalars(self.get(predicate, *includes).build()).one_or_none()

    def first_or_default(
        self,
        predicate: Predicate = None,
        *includes: IncludePath,
        no_tracking: bool = True,
    ) -> ModelType | None:
        return self.first(self.get(predicate, *includes, no_tracking=no_tracking))

    def count(self, predicate: Predicate = None) -> int:
        return self._session.scalar(self._count_query(predicate)) or 0

    def exists(self, predicate: Predicate = None) -> bool:
        return self.count(predicate) > 0

    def save_changes(self) -> int:
        return self._session.save_changes()


__all__ = [
    "GenericRepository",
    "SyncGenericRepository",
]
