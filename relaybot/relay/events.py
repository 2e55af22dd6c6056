"""转发核心使用的事件和值类型。"""

from dataclasses import dataclass
from enum import Enum


class ChatKind(str, Enum):
    """来源聊天的类型。"""
    PRIVATE = "private"
    GROUP = "group"
    SUPERGROUP = "supergroup"
    CHANNEL = "channel"


class EventKind(str, Enum):
    """入站事件的类型。"""
    COMMAND = "command"
    TEXT = "text"
    PHOTO = "photo"


@dataclass(frozen=True)
class Recipient:
    """
    可作为发送/转发目标的地址。
    
    与原始聊天 ID 分开建模，避免将普通整数误用为目标。
    """
    
    chat_id: int
    
    def address(self) -> str:
        """解析为平台地址（十进制聊天 ID）。"""
        return str(self.chat_id)
    
    def __str__(self) -> str:
        return self.address()


@dataclass(frozen=True)
class MessageRef:
    """对已存在消息的引用。"""
    
    chat_id: int
    message_id: int


@dataclass(frozen=True)
class InboundEvent:
    """从消息平台接收的单个事件。"""
    
    chat_id: int
    chat_kind: ChatKind
    kind: EventKind
    message: MessageRef
    reply_to: MessageRef | None = None  # 被回复的消息
    text: str = ""  # 文本或图片说明
    command: str | None = None  # 例如 "/fwd"，不含 @botname
    
    @property
    def is_reply(self) -> bool:
        return self.reply_to is not None
    
    @property
    def is_private(self) -> bool:
        return self.chat_kind == ChatKind.PRIVATE


@dataclass(frozen=True)
class ForwardOutcome:
    """单个收件人的转发结果。"""
    
    recipient: Recipient
    ok: bool
    error: str | None = None
