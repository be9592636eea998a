"""工作单元（显式事务）工具。

默认情况下每次仓储写操作都在 save_changes() 中立即提交；
进入工作单元后 save_changes() 只 flush，由工作单元在结束时统一提交或回滚。

提供多种使用方式：
1. transactional_context - 上下文管理器
2. @transactional - 通用装饰器，自动从参数中获取session
3. TransactionManager - 手动控制事务
"""

from collections.abc import AsyncGenerator, Callable
from contextlib import asynccontextmanager
from functools import wraps
from inspect import signature

from sozluk.common.logging import logger
from sozluk.domain.exceptions import TransactionRequiredError
from sozluk.infrastructure.database.context import DEFER_COMMIT_KEY, AsyncSozlukContext


def _enter(session: AsyncSozlukContext) -> bool:
    """进入工作单元，返回是否为最外层。"""
    if session.commit_deferred:
        return False
    session.info[DEFER_COMMIT_KEY] = True
    return True


def _leave(session: AsyncSozlukContext) -> None:
    session.info.pop(DEFER_COMMIT_KEY, None)


@asynccontextmanager
async def transactional_context(
    session: AsyncSozlukContext,
    auto_commit: bool = True,
) -> AsyncGenerator[AsyncSozlukContext]:
    """
    工作单元上下文管理器，自动处理提交和回滚。

    Args:
        session: 存储上下文
        auto_commit: 是否自动提交（默认True）

    用法:
        async with transactional_context(session):
            await user_repo.add(user)
            await entry_repo.add_range(entries)
            # 如果没有异常，自动提交
            # 如果有异常（包括任务取消），自动回滚
    """
    outermost = _enter(session)

    try:
        yield session
        if outermost:
            _leave(session)
            if auto_commit:
                await session.commit()
                logger.debug("事务提交成功")
    except BaseException as exc:
        if outermost:
            _leave(session)
            await session.rollback()
            logger.debug(f"事务回滚: {exc!r}")
        raise


def transactional[T](func: Callable[..., T]) -> Callable[..., T]:
    """
    通用事务装饰器，自动从函数参数中查找session并在工作单元中执行。

    支持多种用法：
    1. 参数名为 session 的函数
    2. 参数名为 db 的函数
    3. 类方法中有 self.session 属性（例如仓储）

    用法示例:
        @transactional
        async def register(session: AsyncSozlukContext, user: User, confirmation: EmailConfirmation):
            await UserRepository(session).add(user)
            await EmailConfirmationRepository(session).add(confirmation)
    """

    @wraps(func)
    async def wrapper(*args, **kwargs):
        session: AsyncSozlukContext | None = None

        # 策略1: 从kwargs中获取session或db
        if "session" in kwargs:
            session = kwargs["session"]
        elif "db" in kwargs:
            session = kwargs["db"]
        else:
            # 策略2: 从args中获取
            params = list(signature(func).parameters.keys())
            for i, param_name in enumerate(params):
                if i >= len(args):
                    break
                param_value = args[i]
                if isinstance(param_value, AsyncSozlukContext) or param_name in ("session", "db"):
                    session = param_value
                    break

            # 策略3: 从self.session获取 (类方法)
            if session is None and args and hasattr(args[0], "session"):
                session = args[0].session

        if session is None:
            raise ValueError(
                f"无法找到session参数。请确保函数 {func.__name__} 有一个名为 'session' 或 'db' 的参数，"
                "或者类有 'session' 属性。"
            )

        if session.commit_deferred:
            logger.debug(f"已在工作单元中，直接执行 {func.__name__}")
            return await func(*args, **kwargs)

        logger.debug(f"开启工作单元执行 {func.__name__}")
        async with transactional_context(session):
            return await func(*args, **kwargs)

    return wrapper


class TransactionManager:
    """
    事务管理器，提供更细粒度的事务控制。

    用法:
        tm = TransactionManager(session)

        await tm.begin()
        try:
            await user_repo.update(user)
            await confirmation_repo.delete(confirmation)
            await tm.commit()
        except Exception:
            await tm.rollback()
            raise
    """

    def __init__(self, session: AsyncSozlukContext):
        self.session = session
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    async def begin(self):
        """开始事务。"""
        if self._active:
            return
        if not _enter(self.session):
            raise TransactionRequiredError("存储上下文已处于其他工作单元中")
        self._active = True
        logger.debug("手动开启事务")

    async def commit(self):
        """提交事务。"""
        if self._active:
            _leave(self.session)
            self._active = False
            await self.session.commit()
            logger.debug("手动提交事务")

    async def rollback(self):
        """回滚事务。"""
        if self._active:
            _leave(self.session)
            self._active = False
            await self.session.rollback()
            logger.debug("手动回滚事务")

    async def __aenter__(self):
        await self.begin()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            await self.commit()
        else:
            await self.rollback()


def ensure_transaction(session: AsyncSozlukContext) -> bool:
    """检查当前存储上下文是否处于工作单元中。"""
    return session.commit_deferred


def require_transaction(session: AsyncSozlukContext) -> None:
    """要求调用方已开启工作单元。

    Raises:
        TransactionRequiredError: 未处于工作单元中
    """
    if not ensure_transaction(session):
        raise TransactionRequiredError("此操作必须在工作单元（transactional_context）中执行")


__all__ = [
    "TransactionManager",
    "TransactionRequiredError",
    "ensure_transaction",
    "require_transaction",
    "transactional",
    "transactional_context",
]
