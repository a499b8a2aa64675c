"""Configuration helpers."""
from __future__ import annotations

import math
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Sequence, Tuple

from dotenv import load_dotenv

from .exceptions import LLMConfigError

API_KEY_ENV = "OPENROUTER_API_KEY"
CHAT_COMPLETIONS_URL = "https://openrouter.ai/api/v1/chat/completions"
DEFAULT_TIMEOUT = 120.0

# 单字母快捷参数 -> 上游模型标识
MODEL_SHORTCUTS: Dict[str, str] = {
    "c": "anthropic/claude-sonnet-4",
    "g": "google/gemini-2.5-flash",
    "o": "openai/gpt-4o",
    "d": "deepseek/deepseek-chat-v3-0324",
    "k": "moonshotai/kimi-k2",
}
DEFAULT_MODEL = MODEL_SHORTCUTS["g"]

DEFAULT_SYSTEM_PROMPT = (
    "Answer directly and tersely. No preamble, no commentary, no follow-up questions."
)


@dataclass
class RetryConfig:
    """Retry configuration. ``max_retries=0`` means a single attempt."""
    max_retries: int = 0
    initial_delay: float = 1.0
    max_delay: float = 30.0
    exponential_base: float = 2.0
    jitter: bool = True


@dataclass(slots=True)
class OpenRouterConfig:
    """Runtime configuration for the OpenRouter API."""
    api_key: str
    endpoint: str = CHAT_COMPLETIONS_URL
    request_timeout: float = DEFAULT_TIMEOUT
    retry: RetryConfig = field(default_factory=RetryConfig)

    @classmethod
    def from_env(cls) -> "OpenRouterConfig":
        def req(key: str) -> str:
            value = os.environ.get(key)
            if not value or not value.strip():
                raise LLMConfigError(f"missing environment variable: {key}")
            return value.strip()

        def number(key: str, default, cast, positive: bool = False):
            raw = os.environ.get(key)
            if not raw or not raw.strip():
                return default
            try:
                value = cast(raw.strip())
            except ValueError as exc:
                raise LLMConfigError(f"invalid value for {key}: {raw!r}") from exc
            if not math.isfinite(value):
                raise LLMConfigError(f"{key} must be a finite number")
            if positive and value <= 0:
                raise LLMConfigError(f"{key} must be greater than zero")
            if value < 0:
                raise LLMConfigError(f"{key} must not be negative")
            return value

        api_key = req(API_KEY_ENV)
        timeout = number("OPENROUTER_TIMEOUT", DEFAULT_TIMEOUT, float, positive=True)
        retries = number("OPENROUTER_MAX_RETRIES", 0, int)
        return cls(api_key=api_key, request_timeout=timeout, retry=RetryConfig(max_retries=retries))


@dataclass(frozen=True, slots=True)
class InvocationOptions:
    """Options for one CLI invocation, resolved once from parsed arguments."""
    model: str
    prompt: str
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    stream: bool = False
    provider_order: Tuple[str, ...] = ()


def resolve_model(shortcuts: Optional[Sequence[str]], custom: Optional[str] = None) -> str:
    """Pick the model: explicit custom string, else the last shortcut given, else the default."""
    if custom and custom.strip():
        return custom.strip()
    if shortcuts:
        return MODEL_SHORTCUTS[shortcuts[-1]]
    return DEFAULT_MODEL


def resolve_system_prompt(raw: bool = False, custom: Optional[str] = None) -> str:
    """Explicit system text beats ``raw``; ``raw`` beats the built-in default."""
    if custom is not None:
        return custom
    if raw:
        return ""
    return DEFAULT_SYSTEM_PROMPT


def parse_provider_order(raw: Optional[str]) -> Tuple[str, ...]:
    if not raw:
        return ()
    return tuple(p.strip() for p in raw.split(",") if p.strip())


def load_env_file(path: str | os.PathLike[str] = ".env") -> None:
    """Load a .env file into the environment if it exists."""
    env_path = Path(path)
    if not env_path.exists():
        return
    load_dotenv(dotenv_path=env_path, override=False)


__all__ = [
    "API_KEY_ENV",
    "CHAT_COMPLETIONS_URL",
    "DEFAULT_MODEL",
    "DEFAULT_SYSTEM_PROMPT",
    "MODEL_SHORTCUTS",
    "InvocationOptions",
    "OpenRouterConfig",
    "RetryConfig",
    "load_env_file",
    "parse_provider_order",
    "resolve_model",
    "resolve_system_prompt",
]
