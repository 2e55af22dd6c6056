import json

import pytest

from relaybot.config.loader import CONFIG_ENV_VAR, ConfigError, load_config, parse_config

from conftest import TOKEN

VALID_TOML = f"""
token = "{TOKEN}"
port = "8080"

[resend]
enabled = true
keywords = ["fwd", "fwd", ""]
from = [100]
to = [200, 300, 200]

[resend.command]
text = "/fwd"
description = "Forward the replied message"

[feedback]
enabled = true
to = [500]
"""


# 测试解析完整的 TOML 配置
def test_parse_toml_config() -> None:
    config = parse_config(VALID_TOML)
    assert config.token == TOKEN
    assert config.port == 8080
    assert config.resend.enabled
    assert config.resend.command.text == "/fwd"
    assert config.resend.from_ == (100,)
    assert config.feedback.to == (500,)
    assert config.poll_timeout == 10.0
    assert config.shutdown_grace == 30.0


# 测试重复的 ID 和空关键词被去除，顺序保持不变
def test_lists_are_deduplicated_in_order() -> None:
    config = parse_config(VALID_TOML)
    assert config.resend.to == (200, 300)
    assert config.resend.keywords == ("fwd",)


# 测试 JSON 配置和 camelCase 键
def test_parse_json_config_with_camel_case_keys() -> None:
    raw = json.dumps({
        "token": TOKEN,
        "port": 9000,
        "pollTimeout": 5,
        "shutdownGrace": 1.5,
        "feedback": {"enabled": True, "to": [-1001]},
    })
    config = parse_config(raw)
    assert config.port == 9000
    assert config.poll_timeout == 5
    assert config.shutdown_grace == 1.5
    assert config.feedback.to == (-1001,)
    assert not config.resend.enabled


# 测试令牌长度必须正好为 46
def test_token_must_have_fixed_length() -> None:
    with pytest.raises(ConfigError, match="token"):
        parse_config('token = "short"\nport = 8080')


# 测试缺少端口的情况
def test_port_is_required() -> None:
    with pytest.raises(ConfigError, match="port"):
        parse_config(f'token = "{TOKEN}"')


# 测试启用 resend 时缺少必填字段的情况
def test_enabled_resend_requires_fields() -> None:
    raw = f"""
token = "{TOKEN}"
port = 8080

[resend]
enabled = true
to = [200]
"""
    with pytest.raises(ConfigError) as exc_info:
        parse_config(raw)
    message = str(exc_info.value)
    assert "command.text" in message
    assert "command.description" in message
    assert "from" in message


# 测试禁用的规则不需要字段
def test_disabled_rules_need_no_fields() -> None:
    raw = f"""
token = "{TOKEN}"
port = 8080

[resend]
enabled = false
keywords = ["fwd"]

[feedback]
enabled = false
"""
    config = parse_config(raw)
    assert not config.resend.enabled
    assert not config.feedback.enabled


# 测试启用 feedback 时 to 不能为空
def test_enabled_feedback_requires_targets() -> None:
    raw = f'token = "{TOKEN}"\nport = 8080\n[feedback]\nenabled = true\n'
    with pytest.raises(ConfigError, match="feedback"):
        parse_config(raw)


# 测试命令必须以斜杠开头
def test_resend_command_must_be_slash_command() -> None:
    raw = VALID_TOML.replace('text = "/fwd"', 'text = "fwd"')
    with pytest.raises(ConfigError, match="无效的命令"):
        parse_config(raw)


# 测试空内容和语法错误
@pytest.mark.parametrize("raw", ["", "   ", "token = ", "{not json", "[1, 2]"])
def test_malformed_config_is_rejected(raw: str) -> None:
    with pytest.raises(ConfigError):
        parse_config(raw)


# 测试配置不可变
def test_config_is_frozen() -> None:
    config = parse_config(VALID_TOML)
    with pytest.raises(Exception):
        config.port = 1


# 测试从环境变量加载配置
def test_load_config_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(CONFIG_ENV_VAR, VALID_TOML)
    assert load_config().resend.to == (200, 300)


# 测试缺少环境变量的情况
def test_load_config_requires_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    with pytest.raises(ConfigError, match=CONFIG_ENV_VAR):
        load_config()


# 测试从文件加载配置
def test_load_config_from_file(tmp_path) -> None:
    path = tmp_path / "config.toml"
    path.write_text(VALID_TOML, encoding="utf-8")
    assert load_config(path).port == 8080

    with pytest.raises(ConfigError, match="无法读取"):
        load_config(tmp_path / "missing.toml")


# 测试命令末尾的换行会被拒绝
def test_resend_command_rejects_trailing_newline() -> None:
    raw = VALID_TOML.replace('text = "/fwd"', 'text = "/fwd\\n"')
    with pytest.raises(ConfigError, match="无效的命令"):
        parse_config(raw)


# 测试未知键在顶层和嵌套部分都被忽略
def test_unknown_keys_are_ignored_everywhere() -> None:
    raw = VALID_TOML.replace('port = "8080"', 'port = "8080"\nunknown = 1').replace(
        "[feedback]\nenabled = true", "[feedback]\nenabled = true\nbogus = 1"
    )
    config = parse_config(raw)
    assert config.port == 8080
    assert config.feedback.to == (500,)
    assert not hasattr(config, "unknown")


# 测试轮询超时必须是至少 1 秒的整数
@pytest.mark.parametrize("value", ["0.5", "0"])
def test_poll_timeout_must_be_whole_seconds(value: str) -> None:
    raw = VALID_TOML.replace('port = "8080"', f'port = "8080"\npollTimeout = {value}')
    with pytest.raises(ConfigError, match="poll_timeout"):
        parse_config(raw)
