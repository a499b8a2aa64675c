"""Command-line client for the OpenRouter chat-completions API."""
import logging

from .builder import RequestBuilder
from .client import OpenRouterClient
from .config import (
    DEFAULT_MODEL,
    DEFAULT_SYSTEM_PROMPT,
    MODEL_SHORTCUTS,
    InvocationOptions,
    OpenRouterConfig,
    RetryConfig,
    load_env_file,
)
from .exceptions import LLMConfigError, LLMTransportError, LLMUpstreamError, LLMValidationError
from .models import ChatMessage, ChatRequest, ChatResult
from .stream import iter_fragments

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

__all__ = [
    # 客户端
    "OpenRouterClient",
    "RequestBuilder",
    # 配置
    "OpenRouterConfig",
    "InvocationOptions",
    "RetryConfig",
    "load_env_file",
    "DEFAULT_MODEL",
    "DEFAULT_SYSTEM_PROMPT",
    "MODEL_SHORTCUTS",
    # 异常
    "LLMConfigError",
    "LLMValidationError",
    "LLMTransportError",
    "LLMUpstreamError",
    # 数据模型
    "ChatMessage",
    "ChatRequest",
    "ChatResult",
    "iter_fragments",
]

__version__ = "0.1.0"
