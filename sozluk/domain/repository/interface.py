"""仓储接口定义。

遵循面向对象设计原则：
- 单一职责原则：Repository只负责数据访问
- 依赖倒置原则：处理器依赖抽象而非具体实现
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from typing import Any
import uuid

from sozluk.domain.models import BaseEntity

from .query_builder import IncludePath, Predicate, QueryBuilder


class IGenericRepository[ModelType: BaseEntity](ABC):
    """通用仓储接口。

    所有写操作在调用内完成保存并返回写入的实体状态条目数；
    所有读操作默认以非跟踪模式返回分离快照。
    """

    # 写操作

    @abstractmethod
    async def add(self, entity: ModelType) -> int:
        """添加实体。"""

    @abstractmethod
    async def add_range(self, entities: Iterable[ModelType]) -> int:
        """添加多个实体，空集合直接返回 0。"""

    @abstractmethod
    async def add_or_update(self, entity: ModelType) -> int:
        """本地未跟踪同 id 实体时附加并标记为修改，然后保存。"""

    @abstractmethod
    async def update(self, entity: ModelType) -> int:
        """附加实体并标记全部字段为修改。"""

    @abstractmethod
    async def bulk_add(self, entities: Iterable[ModelType]) -> int:
        """批量添加。"""

    @abstractmethod
    async def bulk_delete(self, predicate: Predicate = None) -> int:
        """按条件批量删除。"""

    @abstractmethod
    async def bulk_delete_entities(self, entities: Iterable[ModelType]) -> int:
        """批量删除给定实体。"""

    @abstractmethod
    async def bulk_delete_by_id(self, ids: Iterable[uuid.UUID]) -> int:
        """按 id 列表批量删除。"""

    @abstractmethod
    async def bulk_update(self, entities: Iterable[ModelType]) -> int:
        """批量附加并标记为修改。"""

    @abstractmethod
    async def delete(self, entity: ModelType) -> int:
        """删除实体。"""

    @abstractmethod
    async def delete_by_id(self, id: uuid.UUID) -> int:
        """按 id 删除，记录不存在时抛出 InvalidArgumentError。"""

    @abstractmethod
    async def delete_range(self, predicate: Predicate = None) -> int:
        """删除所有匹配条件的记录。"""

    # 读操作

    @abstractmethod
    def as_queryable(self) -> QueryBuilder[ModelType]:
        """返回未加任何条件的查询构建器。"""

    @abstractmethod
    def get(
        self,
        predicate: Predicate = None,
        *includes: IncludePath,
        no_tracking: bool = True,
    ) -> QueryBuilder[ModelType]:
        """返回可继续组合的查询。"""

    @abstractmethod
    async def get_all(self, no_tracking: bool = True) -> list[ModelType]:
        """获取全部实体。"""

    @abstractmethod
    async def get_by_id(
        self,
        id: uuid.UUID,
        *includes: IncludePath,
        no_tracking: bool = True,
    ) -> ModelType | None:
        """按 id 获取实体，不存在返回 None。"""

    @abstractmethod
    async def get_list(
        self,
        predicate: Predicate = None,
        *includes: IncludePath,
        no_tracking: bool = True,
        order_by: Any | Sequence[Any] | None = None,
    ) -> list[ModelType]:
        """按条件获取实体列表。"""

    @abstractmethod
    async def get_single(
        self,
        predicate: Predicate = None,
        *includes: IncludePath,
        no_tracking: bool = True,
    ) -> ModelType | None:
        """获取唯一匹配的实体，多于一条时抛出 MultipleResultsFound。"""

    @abstractmethod
    async def first_or_default(
        self,
        predicate: Predicate = None,
        *includes: IncludePath,
        no_tracking: bool = True,
    ) -> ModelType | None:
        """获取第一条匹配的实体。"""

    @abstractmethod
    async def count(self, predicate: Predicate = None) -> int:
        """统计实体数量。"""

    @abstractmethod
    async def exists(self, predicate: Predicate = None) -> bool:
        """检查实体是否存在。"""

    @abstractmethod
    async def save_changes(self) -> int:
        """保存存储上下文中所有挂起的变更。"""


__all__ = [
    "IGenericRepository",
]
