"""消息平台客户端模块。"""

from relaybot.channels.base import MessagingClient

__all__ = ["MessagingClient"]
