"""
relaybot - 基于配置的 Telegram 消息转发机器人
"""

__version__ = "0.1.0"
__logo__ = "📨"
