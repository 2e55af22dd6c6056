"""存活探针 - 提供 GET /health 的 HTTP 服务器。"""

import asyncio

from aiohttp import web
from loguru import logger

# 默认关闭宽限期：30 秒
DEFAULT_SHUTDOWN_GRACE_S = 30.0


async def handle_health(request: web.Request) -> web.Response:
    return web.Response(text="OK", content_type="text/plain")


def build_app() -> web.Application:
    """创建只包含 /health 路由的应用程序。"""
    app = web.Application()
    app.router.add_get("/health", handle_health)
    return app


class LivenessServer:
    """
    供外部监控确认进程存活的 HTTP 服务器。
    
    停止时给进行中的请求一个有界的宽限期，然后强制关闭。
    """
    
    name = "http"
    
    def __init__(
        self,
        port: int,
        host: str = "0.0.0.0",
        shutdown_grace: float = DEFAULT_SHUTDOWN_GRACE_S,
    ):
        self.port = port
        self.host = host
        self.shutdown_grace = shutdown_grace
    
    async def serve(self, stop: asyncio.Event) -> None:
        """监听直到 stop 被设置。无法绑定端口时引发 OSError。"""
        runner = web.AppRunner(build_app(), shutdown_timeout=self.shutdown_grace, access_log=None)
        await runner.setup()
        try:
            site = web.TCPSite(runner, self.host, self.port)
            await site.start()
            logger.info(f"正在端口 {self.port} 上启动 HTTP 服务器")
            
            await stop.wait()
            logger.info("正在关闭 HTTP 服务器...")
        finally:
            await runner.cleanup()
