"""服务生命周期管理。"""

from relaybot.lifecycle.orchestrator import LifecycleOrchestrator, LifecycleState, ServiceError
from relaybot.lifecycle.services import ReceiveLoop, build_orchestrator

__all__ = [
    "LifecycleOrchestrator",
    "LifecycleState",
    "ReceiveLoop",
    "ServiceError",
    "build_orchestrator",
]
