"""使用 python-telegram-bot 的 Telegram 客户端实现。"""

from __future__ import annotations

import asyncio
import re
from typing import Any, Sequence

from loguru import logger
from telegram import BotCommand, Message, Update
from telegram.ext import Application, ContextTypes, MessageHandler, filters

from relaybot.channels.base import MessagingClient
from relaybot.config.schema import Config
from relaybot.relay.events import ChatKind, EventKind, InboundEvent, MessageRef, Recipient
from relaybot.relay.routing import MenuCommand, RoutingTable

# /command、可选的 @botname，后跟空白或结尾
_COMMAND_RE = re.compile(r"^(/\w+)(?:@(\w+))?(?:\s|$)")


def to_inbound_event(message: Message, bot_username: str | None = None) -> InboundEvent | None:
    """
    将 Telegram 消息转换为入站事件。
    
    参数:
        message: 收到的消息。
        bot_username: 本机器人的用户名，用于忽略发给其他机器人的命令。
    
    返回:
        入站事件；不支持的消息返回 None。
    """
    chat = message.chat
    try:
        chat_kind = ChatKind(chat.type)
    except ValueError:
        return None
    
    ref = MessageRef(chat.id, message.message_id)
    reply = message.reply_to_message
    reply_to = MessageRef(reply.chat.id, reply.message_id) if reply else None
    
    if message.photo:
        return InboundEvent(
            chat_id=chat.id,
            chat_kind=chat_kind,
            kind=EventKind.PHOTO,
            message=ref,
            reply_to=reply_to,
            text=message.caption or "",
        )
    
    text = message.text
    if not text:
        return None
    
    command = None
    kind = EventKind.TEXT
    match = _COMMAND_RE.match(text)
    if match:
        mention = match.group(2)
        if mention and bot_username and mention.lower() != bot_username.lower():
            return None
        command = match.group(1)
        kind = EventKind.COMMAND
    
    return InboundEvent(
        chat_id=chat.id,
        chat_kind=chat_kind,
        kind=kind,
        message=ref,
        reply_to=reply_to,
        text=text,
        command=command,
    )


class TelegramClient(MessagingClient):
    """
    使用长轮询的 Telegram 客户端。
    
    简单可靠 - 不需要 webhook/公网 IP。
    """
    
    name = "telegram"
    
    def __init__(self, config: Config):
        super().__init__(config)
        self.config: Config = config
        self._app: Application | None = None
        self._routes: RoutingTable | None = None
        self._username: str | None = None
        self._stop_event = asyncio.Event()
    
    async def connect(self) -> None:
        """构建应用程序并验证令牌。"""
        self._app = Application.builder().token(self.config.token).build()
        
        # initialize() 调用 getMe，令牌无效时在这里失败
        await self._app.initialize()
        self._username = self._app.bot.username
        logger.info(f"Telegram 机器人 @{self._username} 已连接")
    
    async def start(self, routes: RoutingTable) -> None:
        """使用长轮询启动 Telegram 机器人，直到调用 stop()。"""
        if not self._app:
            raise RuntimeError("Telegram 机器人未连接")
        
        app = self._app
        self._routes = routes
        app.add_handler(MessageHandler(filters.TEXT | filters.PHOTO, self._on_message))
        await self.publish_commands(routes.menu)
        
        logger.info("正在启动 Telegram 机器人（轮询模式）...")
        self._running = True
        try:
            await app.start()
            await app.updater.start_polling(
                timeout=self.config.poll_timeout,
                allowed_updates=["message"],
            )
            
            # 保持运行直到停止
            await self._stop_event.wait()
        finally:
            self._running = False
            await self._shutdown(app)
    
    async def stop(self) -> None:
        """停止 Telegram 机器人。"""
        self._stop_event.set()
    
    async def _shutdown(self, app: Application) -> None:
        logger.info("正在停止 Telegram 机器人...")
        if app.updater and app.updater.running:
            await app.updater.stop()
        if app.running:
            await app.stop()
        await app.shutdown()
        self._app = None
    
    async def send(self, recipient: Recipient, text: str) -> None:
        """通过 Telegram 发送消息。"""
        bot = self._require_bot()
        await bot.send_message(chat_id=recipient.address(), text=text)
    
    async def forward(self, recipient: Recipient, message: MessageRef) -> None:
        """通过 Telegram 转发消息，保留原作者信息。"""
        bot = self._require_bot()
        await bot.forward_message(
            chat_id=recipient.address(),
            from_chat_id=message.chat_id,
            message_id=message.message_id,
        )
    
    async def set_commands(self, commands: Sequence[MenuCommand]) -> None:
        """在 Telegram 命令菜单中注册命令。"""
        bot = self._require_bot()
        await bot.set_my_commands(
            [BotCommand(c.text.lstrip("/"), c.description) for c in commands]
        )
    
    def _require_bot(self) -> Any:
        if not self._app:
            raise RuntimeError("Telegram 机器人未运行")
        return self._app.bot
    
    async def _on_message(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        """处理传入消息（命令、文本、照片）。"""
        if not update.message or not self._routes:
            return
        
        event = to_inbound_event(update.message, self._username)
        if event is None:
            return
        
        await self._handle_event(self._routes, event)
