"""Bounded-concurrency fan-out of independent operations.

Every operation goes through the RequestExecutor on its own; a terminal
failure only fills its own slot of the result vector. A counting semaphore
caps the number of operations in flight. The slot is held for the whole life
of an operation, retry waits included, and released on success or terminal
failure.
"""

import asyncio
import collections.abc
import logging
import time
import uuid
from typing import Any, Optional, Sequence, TypeVar

from shopsavvy.domain.errors import BatchConfigurationError
from shopsavvy.domain.events.api_events import BatchCompleted, BatchStarted
from shopsavvy.domain.models.common import RetryPolicyConfig
from shopsavvy.domain.models.results import BatchResult, Outcome
from shopsavvy.infrastructure.resilience.api_retry import Operation, RequestExecutor

T = TypeVar("T")

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY_LIMIT = 5


class BatchOrchestrator:
    """Runs N operations with bounded concurrency and returns a positional BatchResult."""

    def __init__(self, executor: RequestExecutor, default_concurrency_limit: int = DEFAULT_CONCURRENCY_LIMIT):
        self.executor = executor
        self.default_concurrency_limit = self._validate_limit(default_concurrency_limit)

    @staticmethod
    def _validate_limit(limit: Any) -> int:
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise BatchConfigurationError(f"concurrency_limit must be a positive integer, got {limit!r}")
        return limit

    @staticmethod
    def _validate_ops(ops: Any) -> Sequence[Operation[Any]]:
        if isinstance(ops, (str, bytes)) or not isinstance(ops, collections.abc.Sequence):
            raise BatchConfigurationError(f"Batch input must be a sequence of operations, got {type(ops).__name__}")
        for index, op in enumerate(ops):
            if not callable(op):
                raise BatchConfigurationError(f"Batch item {index} is not callable: {op!r}")
        return ops

    async def run_batch(
        self,
        ops: Sequence[Operation[T]],
        concurrency_limit: Optional[int] = None,
        *,
        policy: Optional[RetryPolicyConfig] = None,
        deadline: Optional[float] = None,
        endpoint: str = "batch",
    ) -> BatchResult[T]:
        """Executes every operation and collects per-item outcomes.

        Args:
            ops: Ordered operations. Result i belongs to ops[i].
            concurrency_limit: Maximum simultaneously executing operations
                (defaults to the orchestrator's limit).
            policy: Retry policy for every item (defaults to the executor's).
            deadline: Optional per-operation budget for retry waits, in seconds.
            endpoint: Label prefix for logs and events.

        Returns:
            A BatchResult of the same length and order as `ops`.

        Raises:
            BatchConfigurationError: If the batch cannot start (malformed
                input or limit). Per-item failures never raise.
        """
        operations = self._validate_ops(ops)
        limit = self._validate_limit(concurrency_limit) if concurrency_limit is not None else self.default_concurrency_limit

        if not operations:
            return BatchResult([])

        batch_id = uuid.uuid4().hex[:8]
        self.executor.dispatch_event(BatchStarted(size=len(operations), concurrency_limit=limit, batch_id=batch_id))
        logger.info(f"Batch {batch_id} started: {len(operations)} operations, concurrency_limit={limit}")
        start_time = time.perf_counter()

        semaphore = asyncio.Semaphore(limit)

        async def run_one(index: int, op: Operation[T]) -> Outcome[T]:
            async with semaphore:
                return await self.executor.execute_outcome(
                    op,
                    endpoint=f"{endpoint}[{index}]",
                    deadline=deadline,
                    policy=policy,
                )

        # gather keeps argument order, independent of completion order
        outcomes = await asyncio.gather(*(run_one(i, op) for i, op in enumerate(operations)))
        result: BatchResult[T] = BatchResult(list(outcomes))

        duration_ms = (time.perf_counter() - start_time) * 1000
        self.executor.dispatch_event(BatchCompleted(
            size=len(result),
            succeeded=len(result.succeeded),
            failed=len(result.failed),
            duration_ms=duration_ms,
            batch_id=batch_id,
        ))
        logger.info(
            f"Batch {batch_id} finished in {duration_ms:.0f}ms: "
            f"{len(result.succeeded)} succeeded, {len(result.failed)} failed"
        )
        return result
