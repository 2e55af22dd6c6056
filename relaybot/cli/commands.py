"""relaybot 的 CLI 命令。"""

import asyncio
import sys
from pathlib import Path

import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from relaybot import __version__, __logo__
from relaybot.config.loader import CONFIG_ENV_VAR, ConfigError, load_config
from relaybot.config.schema import Config

app = typer.Typer(
    name="relaybot",
    help=f"{__logo__} relaybot - 基于配置的 Telegram 消息转发机器人",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"{__logo__} relaybot v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True
    ),
):
    """relaybot - 基于配置的 Telegram 消息转发机器人。"""
    pass


def _load(config_path: Path | None) -> Config:
    """加载配置；失败时以非零状态退出。"""
    try:
        return load_config(config_path)
    except ConfigError as e:
        console.print(f"[red]错误：{escape(str(e))}[/red]")
        if config_path is None:
            console.print(f"通过 [cyan]{CONFIG_ENV_VAR}[/cyan] 环境变量或 [cyan]--config[/cyan] 提供配置")
        raise typer.Exit(1)


def _configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO")
    if verbose:
        import logging
        logging.basicConfig(level=logging.DEBUG)


# ============================================================================
# Run
# ============================================================================


@app.command()
def run(
    config_path: Path = typer.Option(None, "--config", "-c", help="配置文件路径（默认读取 APP_CONFIG）"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="详细输出"),
):
    """启动转发机器人和存活探针。"""
    from telegram.error import TelegramError

    from relaybot.channels.telegram import TelegramClient
    from relaybot.lifecycle.orchestrator import ServiceError
    from relaybot.lifecycle.services import build_orchestrator
    
    config = _load(config_path)
    _configure_logging(verbose)
    
    console.print(f"{__logo__} 正在端口 {config.port} 上启动 relaybot...")
    client = TelegramClient(config)
    
    async def serve():
        # 客户端初始化失败时不启动任何服务
        await client.connect()
        orchestrator = build_orchestrator(config, client)
        await orchestrator.run()
    
    try:
        asyncio.run(serve())
    except TelegramError as e:
        console.print(f"[red]初始化机器人失败：{escape(str(e))}[/red]")
        raise typer.Exit(1)
    except ServiceError as e:
        console.print(f"[red]应用程序错误：{escape(str(e))}[/red]")
        raise typer.Exit(1)


# ============================================================================
# Check
# ============================================================================


@app.command()
def check(
    config_path: Path = typer.Option(None, "--config", "-c", help="配置文件路径（默认读取 APP_CONFIG）"),
):
    """验证配置并显示转发规则。"""
    from relaybot.channels.telegram import TelegramClient
    from relaybot.relay.dispatcher import Dispatcher
    from relaybot.relay.routing import RoutingTable
    
    config = _load(config_path)
    
    # 与 run 使用相同的绑定；客户端不会连接
    dispatcher = Dispatcher(config, TelegramClient(config))
    routes = RoutingTable.build(config, dispatcher)
    
    def ids(values: tuple[int, ...]) -> str:
        return ", ".join(str(i) for i in values)
    
    columns = {
        "handle_id": ("*", "[dim]sender[/dim]"),
        "handle_resend": (ids(config.resend.from_), ids(config.resend.to)),
        "handle_feedback": ("private", ids(config.feedback.to)),
    }
    
    table = Table(title="Routing Rules")
    table.add_column("Trigger", style="cyan")
    table.add_column("Handler", style="green")
    table.add_column("From", style="yellow")
    table.add_column("To", style="yellow")
    
    for trigger, handler in routes.bindings:
        name = handler.__name__
        sources, targets = columns.get(name, ("", ""))
        table.add_row(escape(trigger), name.removeprefix("handle_"), sources, targets)
    
    console.print(table)
    console.print(f"[green]✓[/green] 配置有效（端口 {config.port}）")
