"""relaybot 的配置模块。"""

from relaybot.config.loader import ConfigError, load_config, parse_config
from relaybot.config.schema import Config

__all__ = ["Config", "ConfigError", "load_config", "parse_config"]
