from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

import structlog

from .backoff import DEFAULT_RETRY_POLICY, RetryPolicy
from .classifier import BusinessRule, classify, epoch_millis, is_business_decline
from .codes import ErrorCode
from .errors import AdminError, ContextSeed
from .logging import log_retry
from .metrics import (
    operation_attempts_total,
    operation_failures_total,
    operation_latency_seconds,
    operation_retries_total,
)

log = structlog.get_logger()

T = TypeVar("T")

RemoteThunk = Callable[[], Awaitable[Any]]
Validator = Callable[[], ErrorCode | None]


@dataclass(frozen=True)
class Operation:
    """
    Everything the invoker needs to run one admin action.

    ``call`` performs a single remote attempt. ``validate`` runs before any
    network activity and returns the code of the first violated rule, or None.
    """

    action: str
    call: RemoteThunk
    validate: Validator | None = None
    policy: RetryPolicy = DEFAULT_RETRY_POLICY
    context_seed: ContextSeed = field(default_factory=ContextSeed)
    business_rules: tuple[BusinessRule, ...] = ()
    business_failure_code: ErrorCode = ErrorCode.ADMIN_UNKNOWN_ERROR


@dataclass(frozen=True)
class AttemptRecord:
    action: str
    attempt_number: int
    max_attempts: int
    delay_ms: int
    error: AdminError


@dataclass(frozen=True)
class InvocationResult(Generic[T]):
    payload: T | None = None
    error: AdminError | None = None
    attempts: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T | None:
        if self.error is not None:
            raise self.error
        return self.payload


RetryListener = Callable[[AttemptRecord], None]


class ResilientInvoker:
    """
    Runs operations through validate -> call -> classify -> wait -> call ...

    Only failures classified as retryable are attempted again, at most
    ``policy.max_attempts`` calls in total. The invoker keeps no state between
    invocations and can be shared by concurrent callers.
    """

    def __init__(
        self,
        *,
        sleeper: Callable[[float], Awaitable[None]] | None = None,
        clock: Callable[[], int] | None = None,
        on_retry: Sequence[RetryListener] | None = None,
    ):
        self._sleep: Callable[[float], Awaitable[None]] = sleeper or asyncio.sleep
        self._clock: Callable[[], int] = clock or epoch_millis
        self._listeners: tuple[RetryListener, ...] = tuple(on_retry) if on_retry is not None else (log_retry,)

    async def invoke(self, operation: Operation) -> InvocationResult[Any]:
        with operation_latency_seconds.labels(action=operation.action).time():
            return await self._run(operation)

    async def _run(self, operation: Operation) -> InvocationResult[Any]:
        if operation.validate is not None:
            code = operation.validate()
            if code is not None:
                context = operation.context_seed.build(operation.action, self._clock())
                return self._fail(operation, AdminError(code, context), attempts=0)

        policy = operation.policy
        for attempt in range(1, policy.max_attempts + 1):
            operation_attempts_total.labels(action=operation.action).inc()
            try:
                payload = await operation.call()
            except Exception as e:
                error = self._classify(operation, e)
            else:
                if not is_business_decline(payload):
                    log.debug("admin_operation_ok", action=operation.action, attempts=attempt)
                    return InvocationResult(payload=payload, attempts=attempt)
                error = self._classify(operation, payload)

            if not error.retryable or attempt >= policy.max_attempts:
                return self._fail(operation, error, attempts=attempt)

            record = AttemptRecord(
                action=operation.action,
                attempt_number=attempt,
                max_attempts=policy.max_attempts,
                delay_ms=policy.delay_for(attempt),
                error=error,
            )
            operation_retries_total.labels(action=operation.action, error_code=error.code.value).inc()
            for listener in self._listeners:
                listener(record)
            await self._sleep(record.delay_ms / 1000)
        else:  # pragma: no cover
            raise RuntimeError("Retry loop exited without settling.")

    def _classify(self, operation: Operation, failure: Any) -> AdminError:
        return classify(
            failure,
            operation.action,
            operation.context_seed,
            business_rules=operation.business_rules,
            default_business_code=operation.business_failure_code,
            now_ms=self._clock,
        )

    def _fail(self, operation: Operation, error: AdminError, *, attempts: int) -> InvocationResult[Any]:
        operation_failures_total.labels(action=operation.action, error_code=error.code.value).inc()
        return InvocationResult(error=error, attempts=attempts)
