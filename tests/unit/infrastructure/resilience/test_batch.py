import asyncio

import pytest

from shopsavvy.domain.errors import (
    AuthenticationError,
    BatchConfigurationError,
    NetworkError,
    NotFoundError,
)
from shopsavvy.domain.events.api_events import BatchCompleted, BatchStarted
from shopsavvy.domain.models.common import RetryPolicyConfig
from shopsavvy.infrastructure.resilience.api_retry import RequestExecutor
from shopsavvy.infrastructure.resilience.batch import BatchOrchestrator


@pytest.fixture
def events():
    return []


@pytest.fixture
def orchestrator(fast_policy, recording_sleep, events):
    executor = RequestExecutor(policy=fast_policy, event_listener=events.append, sleep=recording_sleep)
    return BatchOrchestrator(executor)


class ConcurrencyProbe:
    """Builds operations that record how many of them run at the same time."""

    def __init__(self):
        self.active = 0
        self.peak = 0

    def op(self, value, delay=0.01, error=None):
        async def run():
            self.active += 1
            self.peak = max(self.peak, self.active)
            try:
                await asyncio.sleep(delay)
                if error is not None:
                    raise error
                return value
            finally:
                self.active -= 1
        return run


async def test_results_are_positional_regardless_of_completion_order(orchestrator):
    probe = ConcurrencyProbe()
    ops = [probe.op(i, delay=0.05 - i * 0.01) for i in range(5)]
    result = await orchestrator.run_batch(ops, concurrency_limit=5)
    assert [outcome.value for outcome in result] == [0, 1, 2, 3, 4]


async def test_terminal_failures_fill_only_their_slots(orchestrator, scripted, recording_sleep):
    ops = [
        scripted("a"),
        scripted(NotFoundError("missing b")),
        scripted("c"),
        scripted(NotFoundError("missing d")),
        scripted("e"),
    ]
    result = await orchestrator.run_batch(ops, concurrency_limit=2)

    assert len(result) == 5
    assert result.succeeded == [0, 2, 4]
    assert result.failed == [1, 3]
    assert result.values() == ["a", None, "c", None, "e"]
    assert isinstance(result[1].error, NotFoundError)
    assert [op.calls for op in ops] == [1, 1, 1, 1, 1]
    assert recording_sleep.delays == []


async def test_items_retry_independently(orchestrator, scripted, recording_sleep):
    flaky = scripted(NetworkError(), "recovered")
    broken = scripted(AuthenticationError())
    result = await orchestrator.run_batch([flaky, broken])

    assert result[0].value == "recovered"
    assert result[0].attempts == 2
    assert isinstance(result[1].error, AuthenticationError)
    assert result[1].attempts == 1
    assert recording_sleep.delays == [1.0]


async def test_never_more_than_limit_in_flight(orchestrator):
    probe = ConcurrencyProbe()
    ops = [probe.op(i) for i in range(12)]
    result = await orchestrator.run_batch(ops, concurrency_limit=3)
    assert result.all_succeeded
    assert probe.peak == 3


async def test_limit_of_one_serializes(orchestrator):
    probe = ConcurrencyProbe()
    await orchestrator.run_batch([probe.op(i) for i in range(4)], concurrency_limit=1)
    assert probe.peak == 1


async def test_uses_default_limit_when_none_given(fast_policy, recording_sleep):
    orchestrator = BatchOrchestrator(RequestExecutor(policy=fast_policy, sleep=recording_sleep), default_concurrency_limit=2)
    probe = ConcurrencyProbe()
    await orchestrator.run_batch([probe.op(i) for i in range(6)])
    assert probe.peak == 2


async def test_empty_batch_returns_empty_result(orchestrator, events):
    result = await orchestrator.run_batch([])
    assert len(result) == 0
    assert result.all_succeeded
    assert events == []


@pytest.mark.parametrize("limit", [0, -1, 1.5, True, "3"])
async def test_invalid_concurrency_limit_is_rejected(orchestrator, scripted, limit):
    with pytest.raises(BatchConfigurationError):
        await orchestrator.run_batch([scripted("a")], concurrency_limit=limit)


@pytest.mark.parametrize("ops", ["not a list", None, {"a": 1}])
async def test_malformed_batch_input_is_rejected(orchestrator, ops):
    with pytest.raises(BatchConfigurationError):
        await orchestrator.run_batch(ops)


async def test_non_callable_item_is_rejected(orchestrator, scripted):
    with pytest.raises(BatchConfigurationError):
        await orchestrator.run_batch([scripted("a"), "oops"])


def test_invalid_default_limit_is_rejected(fast_policy):
    with pytest.raises(BatchConfigurationError):
        BatchOrchestrator(RequestExecutor(policy=fast_policy), default_concurrency_limit=0)


async def test_batch_events_bracket_the_run(orchestrator, scripted, events):
    await orchestrator.run_batch([scripted("a"), scripted(NotFoundError())], concurrency_limit=2)
    started = [e for e in events if isinstance(e, BatchStarted)]
    completed = [e for e in events if isinstance(e, BatchCompleted)]
    assert len(started) == len(completed) == 1
    assert started[0].size == 2
    assert started[0].concurrency_limit == 2
    assert (completed[0].succeeded, completed[0].failed) == (1, 1)
    assert completed[0].batch_id == started[0].batch_id
    assert events[0] is started[0]
    assert events[-1] is completed[0]


async def test_long_attempt_budget_does_not_break_the_batch(recording_sleep, scripted):
    policy = RetryPolicyConfig(max_attempts=1200, initial_delay=0.001, max_delay=0.001)
    orchestrator = BatchOrchestrator(RequestExecutor(policy=policy, sleep=recording_sleep))

    result = await orchestrator.run_batch([scripted("ok"), scripted(NetworkError())], concurrency_limit=2)

    assert result[0].value == "ok"
    assert isinstance(result[1].error, NetworkError)
    assert result[1].attempts == 1200
    assert set(recording_sleep.delays) == {0.001}


async def test_retry_wait_lets_other_items_run():
    timeline = []
    calls = 0

    async def flaky():
        nonlocal calls
        calls += 1
        if calls == 1:
            timeline.append("flaky failed")
            raise NetworkError()
        timeline.append("flaky recovered")
        return "flaky"

    async def sibling():
        timeline.append("sibling started")
        await asyncio.sleep(0.01)
        timeline.append("sibling finished")
        return "sibling"

    policy = RetryPolicyConfig(max_attempts=2, initial_delay=0.2, max_delay=0.2)
    orchestrator = BatchOrchestrator(RequestExecutor(policy=policy))

    result = await orchestrator.run_batch([flaky, sibling], concurrency_limit=2)

    assert result.values() == ["flaky", "sibling"]
    assert timeline.index("flaky failed") < timeline.index("sibling finished") < timeline.index("flaky recovered")


def test_executor_waits_with_asyncio_sleep_by_default():
    assert RequestExecutor()._sleep is asyncio.sleep
