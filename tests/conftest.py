import json

import pytest

from orask.client import OpenRouterClient
from orask.config import OpenRouterConfig, RetryConfig

_NO_JSON = object()


class FakeResponse:
    def __init__(self, status_code=200, json_data=_NO_JSON, lines=(), text="", reason="OK"):
        self.status_code = status_code
        self._json = json_data
        self._lines = list(lines)
        self.text = text if text or json_data is _NO_JSON else json.dumps(json_data)
        self.reason = reason
        self.encoding = None
        self.closed = False
        self.lines_read = 0

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._json is _NO_JSON:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._json

    def iter_lines(self, chunk_size=None, decode_unicode=False):
        for line in self._lines:
            self.lines_read += 1
            if isinstance(line, BaseException):
                raise line
            yield line

    def close(self):
        self.closed = True


class FakeSession:
    """Replays queued responses (or raises queued exceptions) for each POST."""

    def __init__(self, *outcomes):
        self._outcomes = list(outcomes)
        self.calls = []
        self.closed = False

    def post(self, url, **kwargs):
        self.calls.append({"url": url, **kwargs})
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def close(self):
        self.closed = True

    @property
    def last_payload(self):
        return self.calls[-1]["json"]


class FakeClock:
    def __init__(self, *ticks):
        self._ticks = list(ticks)

    def __call__(self):
        return self._ticks.pop(0)


def sse(event):
    return "data: " + json.dumps(event)


def delta(text):
    return sse({"choices": [{"delta": {"content": text}}]})


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for key in ("OPENROUTER_API_KEY", "OPENROUTER_TIMEOUT", "OPENROUTER_MAX_RETRIES"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def api_key(monkeypatch):
    monkeypatch.setenv("OPENROUTER_API_KEY", "sk-or-test")
    return "sk-or-test"


@pytest.fixture
def config():
    return OpenRouterConfig(api_key="sk-or-test", request_timeout=30.0, retry=RetryConfig(max_retries=0))


@pytest.fixture
def make_client(config):
    def _make(*outcomes, clock=None, retries=0, sleeps=None):
        cfg = OpenRouterConfig(
            api_key=config.api_key,
            request_timeout=config.request_timeout,
            retry=RetryConfig(max_retries=retries, jitter=False),
        )
        session = FakeSession(*outcomes)
        sleep = sleeps.append if sleeps is not None else (lambda _: None)
        client = OpenRouterClient(cfg, session=session, clock=clock or FakeClock(0.0, 2.0), sleep=sleep)
        return client, session

    return _make
