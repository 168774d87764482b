import os
from typing import Any, Callable, List

import httpx
import pytest
from typer.testing import CliRunner

from shopsavvy.core.client import ShopSavvyClient
from shopsavvy.domain.models.common import RetryPolicyConfig
from shopsavvy.infrastructure.config.settings import ENV_PREFIX, clear_test_config

API_KEY = "ss_test_abc123"


class RecordingSleep:
    """Stand-in for asyncio.sleep that records requested delays and returns immediately."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class ScriptedOperation:
    """Operation that replays a script of exceptions and values, one per attempt."""

    def __init__(self, *steps: Any):
        self.steps = list(steps)
        self.calls = 0
        self.__name__ = "scripted"

    async def __call__(self) -> Any:
        step = self.steps[min(self.calls, len(self.steps) - 1)]
        self.calls += 1
        if isinstance(step, BaseException):
            raise step
        return step


@pytest.fixture(scope="session")
def runner():
    """Provides a Typer CliRunner instance."""
    return CliRunner()


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def fast_policy():
    return RetryPolicyConfig(max_attempts=3, initial_delay=1.0, max_delay=30.0, backoff_multiplier=2.0)


@pytest.fixture
def scripted():
    """Factory for ScriptedOperation instances."""
    return ScriptedOperation


@pytest.fixture
def make_client(recording_sleep):
    """Builds a ShopSavvyClient whose HTTP traffic is served by `handler`.

    Every request seen by the handler is appended to `client.requests`.
    """
    def factory(handler: Callable[[httpx.Request], httpx.Response], **kwargs: Any) -> ShopSavvyClient:
        requests: List[httpx.Request] = []

        def recording_handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return handler(request)

        kwargs.setdefault("sleep", recording_sleep)
        client = ShopSavvyClient(API_KEY, http_transport=httpx.MockTransport(recording_handler), **kwargs)
        client.requests = requests
        return client

    return factory


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Keeps tests independent of the developer's environment and config overrides."""
    for name in [name for name in os.environ if name.startswith(ENV_PREFIX)]:
        monkeypatch.delenv(name)
    yield
    clear_test_config()
