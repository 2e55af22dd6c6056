"""基于规则的分发和转发引擎。"""

from relaybot.relay.dispatcher import Dispatcher
from relaybot.relay.events import ChatKind, EventKind, InboundEvent, MessageRef, Recipient
from relaybot.relay.forward import ForwardEngine
from relaybot.relay.routing import MenuCommand, RoutingTable

__all__ = [
    "ChatKind",
    "Dispatcher",
    "EventKind",
    "ForwardEngine",
    "InboundEvent",
    "MenuCommand",
    "MessageRef",
    "Recipient",
    "RoutingTable",
]
