"""使用 Pydantic 的配置模式。"""

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# 来自 @BotFather 的机器人令牌长度固定
TOKEN_LENGTH = 46

# Telegram 命令：斜杠 + 1-32 个字母、数字或下划线
COMMAND_PATTERN = re.compile(r"/\w{1,32}")


def _unique(values: tuple) -> tuple:
    """去重，保留首次出现的顺序。"""
    return tuple(dict.fromkeys(values))


class CommandConfig(BaseModel):
    """在 Telegram 命令菜单中发布的命令。"""
    model_config = ConfigDict(frozen=True, extra="ignore")

    text: str = ""  # 命令文本，例如 "/fwd"
    description: str = ""  # 命令菜单中显示的说明


class ResendConfig(BaseModel):
    """转发规则：将被回复的消息从授权聊天转发到目标聊天。"""
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    enabled: bool = False
    command: CommandConfig = Field(default_factory=CommandConfig)
    keywords: tuple[str, ...] = ()  # 与命令共享同一处理器的附加文本触发词
    from_: tuple[int, ...] = Field(default=(), alias="from")  # 授权的来源聊天 ID
    to: tuple[int, ...] = ()  # 转发目标聊天 ID

    @field_validator("keywords")
    @classmethod
    def _clean_keywords(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return _unique(tuple(k for k in value if k.strip()))

    @field_validator("from_", "to")
    @classmethod
    def _clean_chat_ids(cls, value: tuple[int, ...]) -> tuple[int, ...]:
        return _unique(value)

    @model_validator(mode="after")
    def _check_enabled(self) -> "ResendConfig":
        if not self.enabled:
            return self

        missing = []
        if not self.command.text:
            missing.append("command.text")
        if not self.command.description:
            missing.append("command.description")
        if not self.from_:
            missing.append("from")
        if not self.to:
            missing.append("to")
        if missing:
            raise ValueError(f"启用 resend 时必须设置：{', '.join(missing)}")

        if not COMMAND_PATTERN.fullmatch(self.command.text):
            raise ValueError(f"无效的命令：{self.command.text!r}（应类似 /fwd）")
        return self


class FeedbackConfig(BaseModel):
    """反馈规则：将私聊中的文本和照片转发到目标聊天。"""
    model_config = ConfigDict(frozen=True, extra="ignore")

    enabled: bool = False
    to: tuple[int, ...] = ()  # 转发目标聊天 ID

    @field_validator("to")
    @classmethod
    def _clean_chat_ids(cls, value: tuple[int, ...]) -> tuple[int, ...]:
        return _unique(value)

    @model_validator(mode="after")
    def _check_enabled(self) -> "FeedbackConfig":
        if self.enabled and not self.to:
            raise ValueError("启用 feedback 时必须设置：to")
        return self


class Config(BaseSettings):
    """relaybot 的根配置。"""
    model_config = SettingsConfigDict(
        env_prefix="RELAYBOT_",
        env_nested_delimiter="__",
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    token: str = Field(min_length=TOKEN_LENGTH, max_length=TOKEN_LENGTH)
    port: int = Field(ge=1, le=65535)  # 存活探针监听端口
    host: str = "0.0.0.0"
    poll_timeout: int = Field(default=10, ge=1)  # 长轮询等待秒数
    shutdown_grace: float = Field(default=30.0, ge=0)  # HTTP 服务器关闭宽限期（秒）
    resend: ResendConfig = Field(default_factory=ResendConfig)
    feedback: FeedbackConfig = Field(default_factory=FeedbackConfig)
