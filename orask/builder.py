"""Request builder."""
from __future__ import annotations

import logging
from typing import List

from .config import InvocationOptions
from .exceptions import LLMConfigError, LLMValidationError
from .models import SYSTEM, USER, ChatMessage, ChatRequest

logger = logging.getLogger(__name__)


class RequestBuilder:
    """Turns resolved invocation options into a :class:`ChatRequest`."""

    @staticmethod
    def build(options: InvocationOptions) -> ChatRequest:
        if not options.model or not options.model.strip():
            raise LLMConfigError("no model given")
        if not options.prompt or not options.prompt.strip():
            raise LLMValidationError("prompt must be a non-empty string")

        messages = RequestBuilder._build_message_chain(options.system_prompt, options.prompt)
        request = ChatRequest(
            model=options.model.strip(),
            messages=tuple(messages),
            stream=options.stream,
            provider_order=tuple(options.provider_order),
        )
        logger.debug(
            "built request model=%s messages=%d stream=%s providers=%s",
            request.model,
            len(request.messages),
            request.stream,
            list(request.provider_order),
        )
        return request

    @staticmethod
    def _build_message_chain(system_prompt: str, prompt: str) -> List[ChatMessage]:
        messages: List[ChatMessage] = []
        if system_prompt:
            messages.append(ChatMessage(role=SYSTEM, content=system_prompt))
        messages.append(ChatMessage(role=USER, content=prompt))
        return messages


__all__ = ["RequestBuilder"]
