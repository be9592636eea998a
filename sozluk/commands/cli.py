"""命令行入口。

sozluk db create-all | drop-all | check
sozluk server run
"""

from __future__ import annotations

import typer

from sozluk import __version__

from . import db, server

app = typer.Typer(
    name="sozluk",
    help="BlazorSozluk 后端管理工具",
    add_completion=False,
)
app.add_typer(db.app, name="db")
app.add_typer(server.app, name="server")


@app.command()
def version() -> None:
    """显示版本。"""
    typer.echo(__version__)


def main() -> None:
    """命令行入口函数。"""
    app()


if __name__ == "__main__":
    main()
