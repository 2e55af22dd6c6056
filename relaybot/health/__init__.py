"""存活探针服务。"""

from relaybot.health.server import LivenessServer

__all__ = ["LivenessServer"]
