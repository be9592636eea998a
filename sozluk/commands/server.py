"""服务器运行命令。"""

from __future__ import annotations

import typer
import uvicorn

app = typer.Typer(
    name="server",
    help="ASGI 服务器管理工具",
    add_completion=False,
)


@app.command()
def run(
    host: str = typer.Option("127.0.0.1", "--host", "-h", envvar="SERVER_HOST", help="监听地址"),
    port: int = typer.Option(8000, "--port", "-p", envvar="SERVER_PORT", help="监听端口"),
    workers: int = typer.Option(1, "--workers", "-w", envvar="SERVER_WORKERS", help="工作进程数"),
    reload: bool = typer.Option(False, "--reload", envvar="SERVER_RELOAD", help="启用热重载（开发模式）"),
    no_access_log: bool = typer.Option(False, "--no-access-log", help="禁用访问日志"),
) -> None:
    """运行 API 服务器。

    示例：
        sozluk server run
        sozluk server run --host 0.0.0.0 --port 8080 --workers 4
    """
    typer.echo(f"🚀 启动服务器: http://{host}:{port}")
    uvicorn.run(
        "sozluk.application.main:create_app",
        factory=True,
        host=host,
        port=port,
        workers=1 if reload else workers,
        reload=reload,
        access_log=not no_access_log,
    )


__all__ = [
    "app",
]
