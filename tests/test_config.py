import os

import pytest

from orask.config import (
    CHAT_COMPLETIONS_URL,
    DEFAULT_MODEL,
    DEFAULT_SYSTEM_PROMPT,
    MODEL_SHORTCUTS,
    InvocationOptions,
    OpenRouterConfig,
    load_env_file,
    parse_provider_order,
    resolve_model,
    resolve_system_prompt,
)
from orask.exceptions import LLMConfigError


def test_from_env_requires_api_key():
    with pytest.raises(LLMConfigError, match="OPENROUTER_API_KEY"):
        OpenRouterConfig.from_env()


def test_from_env_rejects_blank_key(monkeypatch):
    monkeypatch.setenv("OPENROUTER_API_KEY", "   ")
    with pytest.raises(LLMConfigError):
        OpenRouterConfig.from_env()


def test_from_env_defaults(api_key):
    cfg = OpenRouterConfig.from_env()
    assert cfg.api_key == api_key
    assert cfg.endpoint == CHAT_COMPLETIONS_URL
    assert cfg.request_timeout == 120.0
    assert cfg.retry.max_retries == 0


def test_from_env_strips_and_reads_optionals(monkeypatch):
    monkeypatch.setenv("OPENROUTER_API_KEY", " sk-or-x \n")
    monkeypatch.setenv("OPENROUTER_TIMEOUT", "15.5")
    monkeypatch.setenv("OPENROUTER_MAX_RETRIES", "2")
    cfg = OpenRouterConfig.from_env()
    assert cfg.api_key == "sk-or-x"
    assert cfg.request_timeout == 15.5
    assert cfg.retry.max_retries == 2


@pytest.mark.parametrize(
    "key, value",
    [
        ("OPENROUTER_TIMEOUT", "soon"),
        ("OPENROUTER_TIMEOUT", "0"),
        ("OPENROUTER_TIMEOUT", "nan"),
        ("OPENROUTER_TIMEOUT", "inf"),
        ("OPENROUTER_MAX_RETRIES", "1.5"),
        ("OPENROUTER_MAX_RETRIES", "-1"),
    ],
)
def test_from_env_rejects_bad_numbers(api_key, monkeypatch, key, value):
    monkeypatch.setenv(key, value)
    with pytest.raises(LLMConfigError, match=key):
        OpenRouterConfig.from_env()


def test_resolve_model_default():
    assert resolve_model(None) == DEFAULT_MODEL
    assert resolve_model([]) == DEFAULT_MODEL


def test_resolve_model_last_shortcut_wins():
    assert resolve_model(["c", "k"]) == MODEL_SHORTCUTS["k"]
    assert resolve_model(["k", "c"]) == MODEL_SHORTCUTS["c"]


def test_resolve_model_custom_overrides_shortcuts():
    assert resolve_model(["c", "o"], "meta-llama/llama-3.3-70b-instruct") == "meta-llama/llama-3.3-70b-instruct"


def test_system_prompt_precedence():
    assert resolve_system_prompt() == DEFAULT_SYSTEM_PROMPT
    assert resolve_system_prompt(raw=True) == ""
    assert resolve_system_prompt(raw=True, custom="X") == "X"
    assert resolve_system_prompt(raw=False, custom="X") == "X"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("a, b", ("a", "b")),
        (" groq ,together,  fireworks ", ("groq", "together", "fireworks")),
        (",, a ,", ("a",)),
        ("", ()),
        (None, ()),
    ],
)
def test_parse_provider_order(raw, expected):
    assert parse_provider_order(raw) == expected


def test_invocation_options_are_immutable():
    opts = InvocationOptions(model="m", prompt="p")
    with pytest.raises(AttributeError):
        opts.model = "other"


def test_load_env_file_does_not_override(tmp_path, monkeypatch):
    env = tmp_path / ".env"
    env.write_text("OPENROUTER_API_KEY=from-file\nOPENROUTER_TIMEOUT=9\n", encoding="utf-8")
    monkeypatch.setenv("OPENROUTER_TIMEOUT", "3")
    try:
        load_env_file(env)
        assert os.environ["OPENROUTER_API_KEY"] == "from-file"
        assert os.environ["OPENROUTER_TIMEOUT"] == "3"
    finally:
        os.environ.pop("OPENROUTER_API_KEY", None)


def test_load_env_file_missing_is_noop(tmp_path):
    load_env_file(tmp_path / "absent.env")
    assert "OPENROUTER_API_KEY" not in os.environ
