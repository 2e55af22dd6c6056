"""配置加载实用工具。"""

import json
import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from relaybot.config.schema import Config

# 保存配置内容（而非路径）的环境变量
CONFIG_ENV_VAR = "APP_CONFIG"


class ConfigError(ValueError):
    """配置缺失、无法解析或未通过验证。"""


def parse_config(raw: str) -> Config:
    """
    解析并验证原始配置内容。
    
    内容以 "{" 开头时按 JSON 解析，否则按 TOML 解析。
    
    参数：
        raw：配置文本。
    
    返回：
        已验证的不可变配置对象。
    
    引发：
        ConfigError：配置为空、语法错误或验证失败。
    """
    if not raw or not raw.strip():
        raise ConfigError("配置为空")
    
    try:
        data = _decode(raw)
    except (tomllib.TOMLDecodeError, json.JSONDecodeError) as e:
        raise ConfigError(f"无法解析配置：{e}") from e
    
    if not isinstance(data, dict):
        raise ConfigError("配置的顶层必须是表/对象")
    
    try:
        return Config(**convert_keys(data))
    except ValidationError as e:
        raise ConfigError(f"配置验证失败：{e}") from e


def load_config(config_path: Path | None = None) -> Config:
    """
    从文件或 APP_CONFIG 环境变量加载配置。
    
    参数：
        config_path：配置文件的可选路径。如果未提供，则读取环境变量。
    
    返回：
        已加载的配置对象。
    """
    if config_path is not None:
        try:
            raw = config_path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"无法读取配置文件 {config_path}：{e}") from e
    else:
        raw = os.environ.get(CONFIG_ENV_VAR, "")
        if not raw:
            raise ConfigError(f"需要 {CONFIG_ENV_VAR} 环境变量")
    
    return parse_config(raw)


def _decode(raw: str) -> Any:
    if raw.lstrip().startswith("{"):
        return json.loads(raw)
    return tomllib.loads(raw)


def convert_keys(data: Any) -> Any:
    """将 camelCase 键转换为 snake_case 以用于 Pydantic。"""
    if isinstance(data, dict):
        return {camel_to_snake(k): convert_keys(v) for k, v in data.items()}
    if isinstance(data, list):
        return [convert_keys(item) for item in data]
    return data


def camel_to_snake(name: str) -> str:
    """将 camelCase 转换为 snake_case。"""
    result = []
    for i, char in enumerate(name):
        if char.isupper() and i > 0:
            result.append("_")
        result.append(char.lower())
    return "".join(result)
