"""从配置构建的触发器 → 处理器路由表。"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Mapping

from loguru import logger

from relaybot.config.schema import Config
from relaybot.relay.dispatcher import Dispatcher
from relaybot.relay.events import EventKind, InboundEvent

Handler = Callable[[InboundEvent], Awaitable[Any]]


@dataclass(frozen=True)
class MenuCommand:
    """发布到平台命令菜单的命令。"""
    text: str
    description: str


ID_COMMAND = MenuCommand("/id", "Get ID of this chat")


class RoutingTable:
    """
    不可变的触发器绑定集合。
    
    文本事件的解析顺序：
    1. 与开头 /command 匹配的命令
    2. 与整条消息文本完全相同的关键词
    3. 入站文本处理器
    
    照片事件只交给照片处理器。每个事件最多运行一个处理器。
    """
    
    def __init__(
        self,
        commands: Mapping[str, Handler],
        keywords: Mapping[str, Handler] | None = None,
        on_text: Handler | None = None,
        on_photo: Handler | None = None,
        menu: tuple[MenuCommand, ...] = (),
    ):
        self.commands = MappingProxyType(dict(commands))
        self.keywords = MappingProxyType(dict(keywords or {}))
        self.on_text = on_text
        self.on_photo = on_photo
        self.menu = menu
    
    @classmethod
    def build(cls, config: Config, dispatcher: Dispatcher) -> RoutingTable:
        """根据配置绑定所有处理器。"""
        commands: dict[str, Handler] = {ID_COMMAND.text: dispatcher.handle_id}
        keywords: dict[str, Handler] = {}
        menu = [ID_COMMAND]
        on_text = on_photo = None
        
        if config.resend.enabled:
            logger.info("正在启用转发功能")
            trigger = config.resend.command
            commands[trigger.text] = dispatcher.handle_resend
            for keyword in config.resend.keywords:
                keywords[keyword] = dispatcher.handle_resend
            menu.append(MenuCommand(trigger.text, trigger.description))
        
        if config.feedback.enabled:
            logger.info("正在启用反馈功能")
            on_text = on_photo = dispatcher.handle_feedback
        
        return cls(commands, keywords, on_text=on_text, on_photo=on_photo, menu=tuple(menu))
    
    def resolve(self, event: InboundEvent) -> Handler | None:
        """返回应处理事件的处理器，如果没有则返回 None。"""
        if event.kind == EventKind.PHOTO:
            return self.on_photo
        
        if event.command is not None and event.command in self.commands:
            return self.commands[event.command]
        
        if event.text in self.keywords:
            return self.keywords[event.text]
        
        return self.on_text
    
    async def dispatch(self, event: InboundEvent) -> bool:
        """
        将事件交给匹配的处理器。
        
        处理器错误会被记录，从不传播到接收循环。
        
        返回：
            如果找到处理器则返回 True。
        """
        handler = self.resolve(event)
        if handler is None:
            logger.debug(f"聊天 {event.chat_id} 的 {event.kind.value} 事件没有匹配的处理器")
            return False
        
        try:
            await handler(event)
        except Exception as e:
            logger.error(f"处理来自聊天 {event.chat_id} 的事件时出错：{e}")
        return True
    
    @property
    def bindings(self) -> list[tuple[str, Handler]]:
        """按解析顺序列出 (触发器, 处理器)。"""
        pairs = list(self.commands.items()) + list(self.keywords.items())
        if self.on_text:
            pairs.append(("<text>", self.on_text))
        if self.on_photo:
            pairs.append(("<photo>", self.on_photo))
        return pairs
    
    @property
    def triggers(self) -> list[str]:
        """所有已绑定的触发器名称。"""
        return [trigger for trigger, _ in self.bindings]
