"""实体基类 (SQLAlchemy 2.0)。

所有持久化实体共享两个字段：
- id: UUID 主键，实例构造时即分配
- create_date: 创建时间，由存储上下文在首次保存时统一写入，之后不再修改
"""

from __future__ import annotations

from datetime import UTC, datetime
import uuid

from sqlalchemy import DateTime, MetaData
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator, Uuid

DEFAULT_SCHEMA = "dbo"

# 约束命名规范，保证不同数据库上生成的约束名一致
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class UTCDateTime(TypeDecorator):
    """始终以 UTC 感知时间读写的 DateTime。

    SQLite 等不保存时区的后端读出的是朴素时间，这里统一补上 UTC。
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(UTC)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value


class Base(DeclarativeBase):
    """SQLAlchemy 2.0 声明式基类"""

    metadata = MetaData(schema=DEFAULT_SCHEMA, naming_convention=NAMING_CONVENTION)


class BaseEntity(Base):
    """所有实体的抽象根类。

    create_date 为 None 表示尚未持久化；
    它只会被存储上下文的 before_flush 钩子赋值一次。
    """

    __abstract__ = True

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        sort_order=-1,
        comment="UUID主键",
    )

    create_date: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        sort_order=99,
        comment="创建时间",
    )

    def __init__(self, **kwargs) -> None:
        # 实体在加入存储上下文之前就拥有标识
        kwargs.setdefault("id", uuid.uuid4())
        super().__init__(**kwargs)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} id={self.id}>"


__all__ = [
    "DEFAULT_SCHEMA",
    "Base",
    "BaseEntity",
    "UTCDateTime",
]
