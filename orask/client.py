"""OpenRouter chat-completions client."""
from __future__ import annotations

import dataclasses
import logging
import time
from typing import Any, Callable, Dict, Iterator, Optional, TextIO

import requests

from .config import OpenRouterConfig
from .exceptions import LLMConfigError, LLMTransportError, LLMUpstreamError, LLMValidationError
from .models import ChatRequest, ChatResult
from .stream import iter_fragments, upstream_error
from .utils import _get, _retry

logger = logging.getLogger(__name__)

# 超时、限流和 5xx 视为可重试
RETRYABLE_STATUS = {408, 409, 425, 429, 500, 502, 503, 504}


def _is_retryable(exc: BaseException) -> bool:
    status = getattr(exc, "status_code", None)
    return status is None or status in RETRYABLE_STATUS


class OpenRouterClient:
    """Sends one chat-completions request and returns its result."""
    # 异常类作为类属性，方便外部通过 OpenRouterClient.ConfigError 访问
    ConfigError = LLMConfigError
    ValidationError = LLMValidationError
    TransportError = LLMTransportError
    UpstreamError = LLMUpstreamError

    def __init__(
        self,
        config: OpenRouterConfig,
        session: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._config = config
        self._session = session or requests.Session()
        self._clock = clock
        self._sleep = sleep

    @classmethod
    def from_env(cls) -> "OpenRouterClient":
        return cls(OpenRouterConfig.from_env())

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._config.api_key}",
            "X-Title": "orask",
        }

    def send(self, request: ChatRequest, out: Optional[TextIO] = None) -> ChatResult:
        """Dispatch on ``request.stream``. Streamed fragments are written to ``out``."""
        if request.stream:
            if out is None:
                raise LLMValidationError("streaming requires an output stream")
            return self.stream_to(request, out)
        return self.complete(request)

    def complete(self, request: ChatRequest) -> ChatResult:
        if request.stream:
            request = dataclasses.replace(request, stream=False)
        start = self._clock()
        resp = self._post(request)
        try:
            data = resp.json()
        except ValueError as e:
            logger.error("invalid JSON response status=%s", resp.status_code)
            raise LLMTransportError(f"invalid JSON response: {e}") from e
        finally:
            resp.close()
        elapsed = self._clock() - start

        error = _get(data, "error")
        if error:
            err = upstream_error(error)
            logger.error("upstream error model=%s: %s", request.model, err)
            raise err

        usage = _get(data, "usage")
        tokens = _get(usage, "completion_tokens")
        result = ChatResult(
            content=self._extract_content(data),
            model=request.model,
            elapsed=elapsed,
            provider=_get(data, "provider"),
            completion_tokens=tokens if isinstance(tokens, int) else None,
        )
        logger.debug("completed model=%s provider=%s elapsed=%.2fs", result.model, result.provider, elapsed)
        return result

    def stream(self, request: ChatRequest) -> Iterator[str]:
        """Lazily yield text fragments; the request is sent on first iteration."""
        if not request.stream:
            request = dataclasses.replace(request, stream=True)
        resp = self._post(request)
        try:
            yield from iter_fragments(resp.iter_lines(chunk_size=None))
        except requests.RequestException as e:
            error_msg = f"{e.__class__.__name__}: {str(e)}"
            logger.error("stream interrupted model=%s: %s", request.model, error_msg)
            raise LLMTransportError(error_msg) from e
        except LLMUpstreamError as e:
            logger.error("upstream error in stream model=%s: %s", request.model, e)
            raise
        finally:
            resp.close()

    def stream_to(self, request: ChatRequest, out: TextIO) -> ChatResult:
        """Write each fragment to ``out`` as it arrives, flushing after every write."""
        start = self._clock()
        parts = []
        for fragment in self.stream(request):
            out.write(fragment)
            out.flush()
            parts.append(fragment)
        elapsed = self._clock() - start
        logger.debug("stream finished model=%s fragments=%d elapsed=%.2fs", request.model, len(parts), elapsed)
        return ChatResult(content="".join(parts), model=request.model, elapsed=elapsed, streamed=True)

    def _post(self, request: ChatRequest) -> requests.Response:
        payload = request.to_payload()

        @_retry(self._config.retry, retry_on=(LLMTransportError,), should_retry=_is_retryable, sleep=self._sleep)
        def _call() -> requests.Response:
            logger.debug("POST %s model=%s stream=%s", self._config.endpoint, request.model, request.stream)
            try:
                resp = self._session.post(
                    self._config.endpoint,
                    json=payload,
                    headers=self._headers(),
                    timeout=self._config.request_timeout,
                    stream=request.stream,
                )
            except requests.RequestException as e:
                error_msg = f"{e.__class__.__name__}: {str(e)}"
                logger.error("transport error model=%s: %s", request.model, error_msg)
                raise LLMTransportError(error_msg) from e
            if not resp.ok:
                error_msg = self._http_error_message(resp)
                resp.close()
                logger.error("HTTP error model=%s: %s", request.model, error_msg)
                raise LLMTransportError(error_msg, status_code=resp.status_code)
            return resp

        return _call()

    @staticmethod
    def _http_error_message(resp: requests.Response) -> str:
        detail = None
        try:
            detail = _get(_get(resp.json(), "error"), "message")
        except ValueError:
            pass
        if not detail:
            detail = (resp.text or "").strip()[:200] or resp.reason
        return f"HTTP {resp.status_code}: {detail}"

    @staticmethod
    def _extract_content(data: Any) -> str:
        choices = _get(data, "choices")
        if not isinstance(choices, list) or not choices:
            return ""
        content = _get(_get(choices[0], "message"), "content")
        if isinstance(content, list):
            content = "".join(p.get("text", "") for p in content if isinstance(p, dict) and p.get("type") == "text")
        return content if isinstance(content, str) else ""

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "OpenRouterClient":
        return self

    def __exit__(self, *args) -> None:
        self.close()


__all__ = ["OpenRouterClient"]
