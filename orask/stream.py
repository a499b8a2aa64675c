"""Server-sent event parsing for streamed chat completions."""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterable, Iterator, Optional, Union

from .exceptions import LLMUpstreamError
from .utils import _get

logger = logging.getLogger(__name__)

DATA_PREFIX = "data:"
DONE_MARKER = "[DONE]"

Line = Union[str, bytes]


def iter_data(lines: Iterable[Line]) -> Iterator[str]:
    """Yield the payload of each ``data:`` line until the ``[DONE]`` marker.

    Blank lines, ``:`` comments (OpenRouter keep-alives) and other SSE fields
    are ignored. Nothing after ``[DONE]`` is consumed.
    """
    for raw in lines:
        if raw is None:
            continue
        line = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
        line = line.strip()
        if not line.startswith(DATA_PREFIX):
            continue
        data = line[len(DATA_PREFIX):].strip()
        if data == DONE_MARKER:
            logger.debug("stream terminated by %s", DONE_MARKER)
            return
        yield data


def iter_events(lines: Iterable[Line]) -> Iterator[Dict[str, Any]]:
    """Decode each data payload as JSON, silently skipping malformed lines."""
    for data in iter_data(lines):
        try:
            event = json.loads(data)
        except ValueError:
            continue
        if isinstance(event, dict):
            yield event


def delta_content(event: Dict[str, Any]) -> Optional[str]:
    """Return ``choices[0].delta.content`` of one event, if any."""
    choices = _get(event, "choices")
    if not isinstance(choices, list) or not choices:
        return None
    delta = _get(choices[0], "delta")
    content = _get(delta, "content")
    return content if isinstance(content, str) else None


def iter_fragments(lines: Iterable[Line]) -> Iterator[str]:
    """Yield the text fragments of a streamed completion in arrival order.

    Raises:
        LLMUpstreamError: an event carries an ``error`` object.
    """
    for event in iter_events(lines):
        error = event.get("error")
        if error:
            raise upstream_error(error)
        content = delta_content(event)
        if content:
            yield content


def upstream_error(error: Any) -> LLMUpstreamError:
    if isinstance(error, dict):
        message = error.get("message") or json.dumps(error, ensure_ascii=False)
        return LLMUpstreamError(str(message), code=error.get("code"))
    return LLMUpstreamError(str(error))


__all__ = ["DATA_PREFIX", "DONE_MARKER", "iter_data", "iter_events", "iter_fragments", "delta_content", "upstream_error"]
