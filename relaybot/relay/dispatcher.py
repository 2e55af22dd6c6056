"""/id、转发和反馈的消息处理器。"""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from relaybot.config.schema import Config
from relaybot.relay.events import ForwardOutcome, InboundEvent, Recipient
from relaybot.relay.forward import ForwardEngine

if TYPE_CHECKING:
    from relaybot.channels.base import MessagingClient


class Dispatcher:
    """
    处理入站事件并调用转发引擎。
    
    处理器只读取构造时传入的配置，可以在并发的
    更新处理中共享，无需加锁。
    """
    
    def __init__(
        self,
        config: Config,
        client: MessagingClient,
        engine: ForwardEngine | None = None,
    ):
        self.config = config
        self.client = client
        self.engine = engine or ForwardEngine(client)
        self._resend_sources = frozenset(config.resend.from_)
        self._resend_targets = tuple(Recipient(chat_id) for chat_id in config.resend.to)
        self._feedback_targets = tuple(Recipient(chat_id) for chat_id in config.feedback.to)
    
    async def handle_id(self, event: InboundEvent) -> None:
        """用发送者自己的聊天 ID 回复。"""
        logger.info(f"收到来自聊天 {event.chat_id} 的 /id 命令")
        await self.client.send(Recipient(event.chat_id), str(event.chat_id))
    
    async def handle_resend(self, event: InboundEvent) -> list[ForwardOutcome]:
        """将被回复的消息转发到所有配置的目标。"""
        logger.info(f"收到来自聊天 {event.chat_id} 的转发请求")
        
        # 不是回复或来源未授权时什么都不做
        if event.reply_to is None or event.chat_id not in self._resend_sources:
            logger.debug(f"忽略来自聊天 {event.chat_id} 的转发请求（回复：{event.is_reply}）")
            return []
        
        return await self.engine.forward(self._resend_targets, event.reply_to)
    
    async def handle_feedback(self, event: InboundEvent) -> list[ForwardOutcome]:
        """将私聊消息本身转发到所有反馈目标。"""
        if not event.is_private:
            return []
        
        logger.info(f"收到来自私聊 {event.chat_id} 的反馈")
        return await self.engine.forward(self._feedback_targets, event.message)
