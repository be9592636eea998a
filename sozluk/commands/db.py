"""数据库命令。

建表/删表与连接检查，表结构直接来自模型元数据。
"""

from __future__ import annotations

import asyncio

from rich.console import Console
from rich.table import Table
import typer

from sozluk.domain.models import Base
from sozluk.infrastructure.database import DatabaseManager, DatabaseSettings

console = Console()

app = typer.Typer(
    name="db",
    help="数据库管理工具",
    add_completion=False,
)


def _settings(url: str | None) -> DatabaseSettings:
    return DatabaseSettings(url=url) if url else DatabaseSettings()


async def _with_manager(settings: DatabaseSettings, action: str) -> bool:
    manager = DatabaseManager.get_instance()
    await manager.initialize(settings, verify=False)
    try:
        if action == "create":
            await manager.create_all()
        elif action == "drop":
            await manager.drop_all()
        return await manager.health_check()
    finally:
        await manager.cleanup()


@app.command("create-all")
def create_all(
    url: str | None = typer.Option(None, "--url", envvar="DATABASE_URL", help="数据库连接URL"),
) -> None:
    """按模型创建所有表。

    示例:
        sozluk db create-all
        sozluk db create-all --url sqlite+aiosqlite:///./sozluk.db
    """
    try:
        asyncio.run(_with_manager(_settings(url), "create"))
    except Exception as e:
        typer.echo(f"❌ 建表失败: {e}", err=True)
        raise typer.Exit(1) from e

    table = Table(title="已创建的表", show_header=True, header_style="bold magenta")
    table.add_column("表", style="cyan")
    table.add_column("字段数", style="green")
    for name, model_table in sorted(Base.metadata.tables.items()):
        table.add_row(name, str(len(model_table.columns)))
    console.print(table)


@app.command("drop-all")
def drop_all(
    url: str | None = typer.Option(None, "--url", envvar="DATABASE_URL", help="数据库连接URL"),
    yes: bool = typer.Option(False, "--yes", "-y", help="跳过确认"),
) -> None:
    """删除所有表。"""
    if not yes:
        typer.confirm("确定要删除所有表吗？", abort=True)
    try:
        asyncio.run(_with_manager(_settings(url), "drop"))
    except Exception as e:
        typer.echo(f"❌ 删表失败: {e}", err=True)
        raise typer.Exit(1) from e
    typer.echo("✅ 所有表已删除")


@app.command()
def check(
    url: str | None = typer.Option(None, "--url", envvar="DATABASE_URL", help="数据库连接URL"),
) -> None:
    """检查数据库连接。"""
    healthy = asyncio.run(_with_manager(_settings(url), "check"))
    if not healthy:
        typer.echo("❌ 数据库连接失败", err=True)
        raise typer.Exit(1)
    typer.echo("✅ 数据库连接正常")


__all__ = [
    "app",
]
