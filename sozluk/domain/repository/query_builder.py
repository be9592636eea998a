"""查询构建器。

提供链式查询、关联加载（include）和跟踪模式设置。

注意：此模块定义在 domain 层（而非 infrastructure），因为查询构建是领域层的通用能力，
与特定的数据库实现无关。
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import ColumnElement, Select, and_, select
from sqlalchemy.orm import QueryableAttribute, RelationshipProperty, selectinload

from sozluk.domain.exceptions import InvalidArgumentError
from sozluk.domain.models import BaseEntity

# 过滤条件：SQLAlchemy 布尔表达式，None 表示整个集合
type Predicate = ColumnElement[bool] | None
# 关联路径：关系属性，或关系名（可用 "." 表示嵌套路径）
type IncludePath = QueryableAttribute[Any] | str


def _relationship_of(model_class: type, name: str) -> QueryableAttribute[Any]:
    attr = getattr(model_class, name, None)
    if not isinstance(getattr(attr, "property", None), RelationshipProperty):
        raise InvalidArgumentError(
            "include",
            f"{model_class.__name__} 没有名为 '{name}' 的关系",
            value=name,
        )
    return attr


def build_include_option(model_class: type, path: IncludePath) -> Any:
    """把关联路径转换为 selectinload 加载选项。

    Args:
        model_class: 查询的根模型类
        path: 关系属性，或 "entry_comments.created_by" 形式的关系名路径

    Raises:
        InvalidArgumentError: 路径中某一段不是关系
    """
    if not isinstance(path, str):
        return selectinload(path)

    option: Any | None = None
    current = model_class
    for name in path.split("."):
        attr = _relationship_of(current, name)
        option = selectinload(attr) if option is None else option.selectinload(attr)
        current = attr.property.mapper.class_
    if option is None:
        raise InvalidArgumentError("include", "关联路径不能为空", value=path)
    return option


class QueryBuilder[ModelType: BaseEntity]:
    """查询构建器。

    过滤条件只接受 SQLAlchemy 布尔表达式（可用 sqlalchemy 的 and_/or_/not_ 组合），
    多次调用 where() 的条件以 AND 连接。
    支持关联加载：include()（SELECT IN）

    构建器本身不访问数据库，由仓储的 to_list()/first() 执行；
    no_tracking 决定执行结果是否从存储上下文中分离。
    """

    def __init__(self, model_class: type[ModelType]) -> None:
        self._model_class = model_class
        self._filters: list[Any] = []
        self._order_by: list[Any] = []
        self._load_options: list[Any] = []
        self._limit: int | None = None
        self._offset: int | None = None
        self._no_tracking = True

    @property
    def model_class(self) -> type[ModelType]:
        return self._model_class

    @property
    def no_tracking(self) -> bool:
        return self._no_tracking

    def where(self, *conditions: Predicate) -> QueryBuilder[ModelType]:
        """添加过滤条件，None 会被忽略。"""
        self._filters.extend(c for c in conditions if c is not None)
        return self

    def order_by(self, *fields) -> QueryBuilder[ModelType]:
        """添加排序条件。

        支持字符串字段名，使用 "-" 前缀表示降序。
        """
        for field in fields:
            if isinstance(field, str):
                descending = field.startswith("-")
                field_name = field.lstrip("-")
                if not hasattr(self._model_class, field_name):
                    raise InvalidArgumentError(
                        "order_by",
                        f"{self._model_class.__name__} 没有字段 '{field_name}'",
                        value=field,
                    )
                column = getattr(self._model_class, field_name)
                self._order_by.append(column.desc() if descending else column)
            else:
                self._order_by.append(field)

        return self

    def include(self, *paths: IncludePath) -> QueryBuilder[ModelType]:
        """加载关联实体（SELECT IN）。"""
        for path in paths:
            self._load_options.append(build_include_option(self._model_class, path))
        return self

    def limit(self, limit: int) -> QueryBuilder[ModelType]:
        self._limit = limit
        return self

    def offset(self, offset: int) -> QueryBuilder[ModelType]:
        self._offset = offset
        return self

    def as_no_tracking(self) -> QueryBuilder[ModelType]:
        """结果以分离快照形式返回（默认）。"""
        self._no_tracking = True
        return self

    def as_tracking(self) -> QueryBuilder[ModelType]:
        """结果保持由存储上下文跟踪，修改后可直接保存。"""
        self._no_tracking = False
        return self

    def build(self) -> Select:
        """构建查询对象。

        Returns:
            Select: SQLAlchemy 查询对象
        """
        query = select(self._model_class)

        if self._filters:
            query = query.where(and_(*self._filters))

        if self._order_by:
            query = query.order_by(*self._order_by)

        if self._load_options:
            query = query.options(*self._load_options)

        if self._offset is not None:
            query = query.offset(self._offset)

        if self._limit is not None:
            query = query.limit(self._limit)

        return query

    def __repr__(self) -> str:
        return f"<QueryBuilder model={self._model_class.__name__} no_tracking={self._no_tracking}>"


__all__ = [
    "IncludePath",
    "Predicate",
    "QueryBuilder",
    "build_include_option",
]
