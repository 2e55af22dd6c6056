"""尽力而为的多收件人转发。"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

from loguru import logger

from relaybot.relay.events import ForwardOutcome, MessageRef, Recipient

if TYPE_CHECKING:
    from relaybot.channels.base import MessagingClient


class ForwardEngine:
    """
    将一条消息转发给多个收件人。
    
    每个收件人独立尝试：一个收件人失败会被记录，
    但不会中止对其余收件人的投递。没有重试，也没有回滚。
    """
    
    def __init__(self, client: MessagingClient):
        self.client = client
    
    async def forward(
        self,
        recipients: Iterable[Recipient],
        message: MessageRef,
    ) -> list[ForwardOutcome]:
        """
        按顺序将消息转发给每个收件人。
        
        参数：
            recipients：有序的收件人序列。
            message：要转发的消息。
        
        返回：
            每个收件人的结果；从不引发转发错误。
        """
        outcomes: list[ForwardOutcome] = []
        for recipient in recipients:
            logger.debug(f"正在将消息 {message.message_id} 从聊天 {message.chat_id} 转发到 {recipient}")
            try:
                await self.client.forward(recipient, message)
            except Exception as e:
                logger.error(f"转发消息到 {recipient} 失败：{e}")
                outcomes.append(ForwardOutcome(recipient, ok=False, error=str(e)))
            else:
                outcomes.append(ForwardOutcome(recipient, ok=True))
        return outcomes
