"""Common data models."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

SYSTEM = "system"
USER = "user"
MESSAGE_ROLES = (SYSTEM, USER)


@dataclass(frozen=True, slots=True)
class ChatMessage:
    """One chat turn."""

    role: str
    content: str

    def to_payload(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True, slots=True)
class ChatRequest:
    """Chat-completions request body. Message order is significant."""

    model: str
    messages: Tuple[ChatMessage, ...]
    stream: bool = False
    provider_order: Tuple[str, ...] = ()

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": [m.to_payload() for m in self.messages],
            "stream": self.stream,
        }
        if self.provider_order:
            payload["provider"] = {"order": list(self.provider_order)}
        return payload


@dataclass(slots=True)
class ChatResult:
    """Outcome of one request.

    ``provider`` and ``completion_tokens`` are only known for non-streamed
    responses; a streamed result leaves them as ``None``.
    """

    content: str
    model: str
    elapsed: float
    provider: Optional[str] = None
    completion_tokens: Optional[int] = None
    streamed: bool = False

    @property
    def tokens_per_second(self) -> float:
        if not self.completion_tokens or self.elapsed <= 0:
            return 0.0
        return self.completion_tokens / self.elapsed


__all__ = ["SYSTEM", "USER", "MESSAGE_ROLES", "ChatMessage", "ChatRequest", "ChatResult"]
