"""消息平台的基类客户端接口。"""

from abc import ABC, abstractmethod
from typing import Any, Sequence

from loguru import logger

from relaybot.relay.events import InboundEvent, MessageRef, Recipient
from relaybot.relay.routing import MenuCommand, RoutingTable


class MessagingClient(ABC):
    """
    消息平台客户端的抽象基类。
    
    每个平台实现都应该提供发送、转发、发布命令菜单
    以及运行接收循环的能力。
    """
    
    name: str = "base"
    
    def __init__(self, config: Any):
        """
        初始化客户端。
        
        参数:
            config: 平台特定的配置。
        """
        self.config = config
        self._running = False
    
    @abstractmethod
    async def connect(self) -> None:
        """
        连接到平台并验证凭据。
        
        失败是致命的：在启动任何服务之前调用。
        """
        pass
    
    @abstractmethod
    async def start(self, routes: RoutingTable) -> None:
        """
        运行接收循环，直到调用 stop()。
        
        这应该是一个长时间运行的异步任务，需要：
        1. 将路由表绑定到平台的事件分发
        2. 发布命令菜单
        3. 通过 _handle_event() 将事件交给路由表
        """
        pass
    
    @abstractmethod
    async def stop(self) -> None:
        """通知接收循环结束。"""
        pass
    
    @abstractmethod
    async def send(self, recipient: Recipient, text: str) -> None:
        """向收件人发送文本消息。"""
        pass
    
    @abstractmethod
    async def forward(self, recipient: Recipient, message: MessageRef) -> None:
        """将已存在的消息转发给收件人。"""
        pass
    
    @abstractmethod
    async def set_commands(self, commands: Sequence[MenuCommand]) -> None:
        """替换平台上的命令菜单。"""
        pass
    
    async def publish_commands(self, commands: Sequence[MenuCommand]) -> bool:
        """
        发布命令菜单。失败会被记录但不是致命的。
        
        返回:
            如果发布成功则返回 True。
        """
        try:
            await self.set_commands(commands)
        except Exception as e:
            logger.warning(f"设置命令失败：{e}")
            return False
        logger.debug(f"已注册 {len(commands)} 个机器人命令")
        return True
    
    async def _handle_event(self, routes: RoutingTable, event: InboundEvent) -> None:
        """将入站事件交给路由表。"""
        logger.debug(f"来自聊天 {event.chat_id}（{event.chat_kind.value}）的 {event.kind.value} 事件")
        await routes.dispatch(event)
    
    @property
    def is_running(self) -> bool:
        """检查接收循环是否正在运行。"""
        return self._running
