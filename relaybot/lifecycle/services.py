"""编排器管理的服务：接收循环以及应用程序组装。"""

from __future__ import annotations

import asyncio

from loguru import logger

from relaybot.channels.base import MessagingClient
from relaybot.config.schema import Config
from relaybot.health.server import LivenessServer
from relaybot.lifecycle.orchestrator import LifecycleOrchestrator
from relaybot.relay.dispatcher import Dispatcher
from relaybot.relay.routing import RoutingTable


class ReceiveLoop:
    """将客户端的接收循环适配为可停止的服务。"""
    
    def __init__(self, client: MessagingClient, routes: RoutingTable):
        self.client = client
        self.routes = routes
        self.name = client.name
    
    async def serve(self, stop: asyncio.Event) -> None:
        receive = asyncio.create_task(self.client.start(self.routes))
        stopped = asyncio.create_task(stop.wait())
        
        done, _ = await asyncio.wait({receive, stopped}, return_when=asyncio.FIRST_COMPLETED)
        if receive in done:
            # 在关闭之前结束：引发错误或作为意外退出返回
            stopped.cancel()
            receive.result()
            return
        
        logger.info(f"正在停止 {self.name} 接收循环...")
        await self.client.stop()
        await receive


def build_orchestrator(
    config: Config,
    client: MessagingClient,
    handle_signals: bool = True,
) -> LifecycleOrchestrator:
    """
    组装路由表、存活探针和接收循环。
    
    路由表在接收循环启动之前完全构建。
    """
    dispatcher = Dispatcher(config, client)
    routes = RoutingTable.build(config, dispatcher)
    logger.info(f"已绑定触发器：{', '.join(routes.triggers)}")
    
    liveness = LivenessServer(
        port=config.port,
        host=config.host,
        shutdown_grace=config.shutdown_grace,
    )
    return LifecycleOrchestrator(
        [liveness, ReceiveLoop(client, routes)],
        handle_signals=handle_signals,
    )
