import asyncio
from typing import Any, Sequence

import pytest

from relaybot.channels.base import MessagingClient
from relaybot.config.schema import Config
from relaybot.relay.events import ChatKind, EventKind, InboundEvent, MessageRef, Recipient
from relaybot.relay.routing import MenuCommand, RoutingTable

TOKEN = "1234567890:" + "A" * 35


class FakeClient(MessagingClient):
    """记录所有调用的内存客户端。"""

    name = "fake"

    def __init__(self, fail_for: Sequence[int] = (), fail_commands: bool = False):
        super().__init__(config=None)
        self.fail_for = set(fail_for)
        self.fail_commands = fail_commands
        self.sent: list[tuple[Recipient, str]] = []
        self.forwarded: list[tuple[Recipient, MessageRef]] = []
        self.commands: list[MenuCommand] | None = None
        self.routes: RoutingTable | None = None
        self.stop_calls = 0
        self._stopped = asyncio.Event()

    async def connect(self) -> None:
        pass

    async def start(self, routes: RoutingTable) -> None:
        self.routes = routes
        await self.publish_commands(routes.menu)
        self._running = True
        await self._stopped.wait()
        self._running = False

    async def stop(self) -> None:
        self.stop_calls += 1
        self._stopped.set()

    async def send(self, recipient: Recipient, text: str) -> None:
        self.sent.append((recipient, text))

    async def forward(self, recipient: Recipient, message: MessageRef) -> None:
        self.forwarded.append((recipient, message))
        if recipient.chat_id in self.fail_for:
            raise RuntimeError("Forbidden: bot was blocked by the user")

    async def set_commands(self, commands: Sequence[MenuCommand]) -> None:
        if self.fail_commands:
            raise RuntimeError("set_my_commands failed")
        self.commands = list(commands)


def make_config(**overrides: Any) -> Config:
    data: dict[str, Any] = {"token": TOKEN, "port": 8080}
    data.update(overrides)
    return Config(**data)


def make_event(
    chat_id: int = 100,
    chat_kind: ChatKind = ChatKind.GROUP,
    kind: EventKind = EventKind.TEXT,
    text: str = "",
    command: str | None = None,
    reply_to: MessageRef | None = None,
    message_id: int = 1,
) -> InboundEvent:
    return InboundEvent(
        chat_id=chat_id,
        chat_kind=chat_kind,
        kind=kind,
        message=MessageRef(chat_id, message_id),
        reply_to=reply_to,
        text=text,
        command=command,
    )


@pytest.fixture
def client() -> FakeClient:
    return FakeClient()
