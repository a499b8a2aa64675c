"""Common exception definitions."""
from typing import Optional, Union


class LLMConfigError(RuntimeError):
    """Configuration error."""


class LLMValidationError(ValueError):
    """Input validation error."""


class LLMTransportError(RuntimeError):
    """Transport layer error."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class LLMUpstreamError(RuntimeError):
    """Error object returned by the upstream API."""

    def __init__(self, message: str, code: Optional[Union[int, str]] = None):
        super().__init__(message)
        self.code = code


__all__ = [
    "LLMConfigError",
    "LLMValidationError",
    "LLMTransportError",
    "LLMUpstreamError",
]
