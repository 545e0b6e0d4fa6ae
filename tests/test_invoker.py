import pytest

from dispatch_admin.backoff import RetryPolicy
from dispatch_admin.classifier import REASSIGNMENT_RULES
from dispatch_admin.codes import ErrorCode
from dispatch_admin.errors import AdminError, ContextSeed, RemoteCallError
from dispatch_admin.invoker import AttemptRecord, Operation, ResilientInvoker

NOW = 1_700_000_000_000


class ScriptedCall:
    """Remote thunk that replays a script of outcomes, one per attempt."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = 0

    async def __call__(self):
        outcome = self.outcomes[min(self.calls, len(self.outcomes) - 1)]
        self.calls += 1
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


def _invoker(records: list[AttemptRecord], sleeps: list[float]) -> ResilientInvoker:
    async def fake_sleep(seconds: float) -> None:
        sleeps.append(seconds)

    return ResilientInvoker(sleeper=fake_sleep, clock=lambda: NOW, on_retry=[records.append])


def _timeout() -> RemoteCallError:
    return RemoteCallError("TIMEOUT", "Request timed out.")


@pytest.mark.asyncio
async def test_first_attempt_success_returns_payload():
    records: list[AttemptRecord] = []
    sleeps: list[float] = []
    call = ScriptedCall([{"id": "p1"}])

    result = await _invoker(records, sleeps).invoke(Operation(action="list", call=call))

    assert result.ok
    assert result.payload == [{"id": "p1"}]
    assert result.attempts == 1
    assert call.calls == 1
    assert records == []
    assert sleeps == []


@pytest.mark.asyncio
async def test_always_transient_failure_makes_max_attempts_and_keeps_last_error():
    records: list[AttemptRecord] = []
    sleeps: list[float] = []
    last = RemoteCallError("NETWORK", "third failure")
    call = ScriptedCall(_timeout(), _timeout(), last)

    result = await _invoker(records, sleeps).invoke(Operation(action="reassign_order", call=call))

    assert call.calls == 3
    assert result.attempts == 3
    assert not result.ok
    assert result.error.code is ErrorCode.NETWORK_TIMEOUT
    assert result.error.retryable is True
    assert result.error.cause is last
    assert [r.attempt_number for r in records] == [1, 2]
    assert [r.delay_ms for r in records] == [1000, 2000]
    assert sleeps == [1.0, 2.0]


@pytest.mark.asyncio
async def test_success_on_third_attempt_after_two_timeouts():
    records: list[AttemptRecord] = []
    sleeps: list[float] = []
    call = ScriptedCall(_timeout(), _timeout(), {"success": True, "order_id": "o1"})

    result = await _invoker(records, sleeps).invoke(Operation(action="reassign_order", call=call))

    assert result.ok
    assert result.error is None
    assert result.payload == {"success": True, "order_id": "o1"}
    assert call.calls == 3
    assert [(r.action, r.attempt_number, r.max_attempts, r.delay_ms) for r in records] == [
        ("reassign_order", 1, 3, 1000),
        ("reassign_order", 2, 3, 2000),
    ]
    assert all(r.error.code is ErrorCode.NETWORK_TIMEOUT for r in records)


@pytest.mark.asyncio
@pytest.mark.parametrize("k", [1, 2, 3])
async def test_success_at_attempt_k_makes_exactly_k_calls(k):
    call = ScriptedCall(*([_timeout()] * (k - 1)), "ok")
    result = await _invoker([], []).invoke(Operation(action="a", call=call))
    assert result.ok
    assert result.payload == "ok"
    assert call.calls == k
    assert result.attempts == k


@pytest.mark.asyncio
async def test_permission_failure_stops_after_one_attempt():
    records: list[AttemptRecord] = []
    sleeps: list[float] = []
    call = ScriptedCall(RemoteCallError("PGRST301", "permission denied"), "never")

    result = await _invoker(records, sleeps).invoke(Operation(action="reassign_order", call=call))

    assert call.calls == 1
    assert result.error.code is ErrorCode.INSUFFICIENT_ADMIN_PERMISSIONS
    assert records == []
    assert sleeps == []


@pytest.mark.asyncio
async def test_unknown_failure_is_not_retried():
    call = ScriptedCall(RuntimeError("boom"), "never")
    result = await _invoker([], []).invoke(Operation(action="a", call=call))
    assert call.calls == 1
    assert result.error.code is ErrorCode.ADMIN_UNKNOWN_ERROR


@pytest.mark.asyncio
async def test_business_decline_is_classified_and_not_retried():
    call = ScriptedCall({"success": False, "error": "Provider already assigned to this order"})
    op = Operation(
        action="reassign_order",
        call=call,
        context_seed=ContextSeed(order_id="o1", metadata={"orderType": "ride"}),
        business_rules=REASSIGNMENT_RULES,
        business_failure_code=ErrorCode.ORDER_REASSIGNMENT_FAILED,
    )

    result = await _invoker([], []).invoke(op)

    assert call.calls == 1
    assert result.error.code is ErrorCode.PROVIDER_ALREADY_ASSIGNED
    assert result.error.context.timestamp == NOW
    assert result.error.context.metadata["businessError"] == "Provider already assigned to this order"


@pytest.mark.asyncio
async def test_validation_failure_makes_no_remote_call():
    call = ScriptedCall("never")
    op = Operation(
        action="reassign_order",
        call=call,
        validate=lambda: ErrorCode.INVALID_ORDER_ID,
        context_seed=ContextSeed(order_id=""),
    )

    result = await _invoker([], []).invoke(op)

    assert call.calls == 0
    assert result.attempts == 0
    assert result.error.code is ErrorCode.INVALID_ORDER_ID
    assert result.error.retryable is False
    assert result.error.context.action == "reassign_order"


@pytest.mark.asyncio
async def test_policy_bounds_attempts_and_shapes_delays():
    records: list[AttemptRecord] = []
    sleeps: list[float] = []
    call = ScriptedCall(_timeout())
    policy = RetryPolicy(max_attempts=5, base_delay_ms=100, backoff_multiplier=2, max_delay_ms=300)

    result = await _invoker(records, sleeps).invoke(Operation(action="a", call=call, policy=policy))

    assert call.calls == 5
    assert [r.delay_ms for r in records] == [100, 200, 300, 300]
    assert result.error.code is ErrorCode.NETWORK_TIMEOUT


@pytest.mark.asyncio
async def test_single_attempt_policy_never_sleeps():
    sleeps: list[float] = []
    call = ScriptedCall(_timeout())
    result = await _invoker([], sleeps).invoke(Operation(action="a", call=call, policy=RetryPolicy(max_attempts=1)))
    assert call.calls == 1
    assert sleeps == []
    assert result.error.code is ErrorCode.NETWORK_TIMEOUT


@pytest.mark.asyncio
async def test_unwrap_raises_the_admin_error():
    result = await _invoker([], []).invoke(Operation(action="a", call=ScriptedCall(RuntimeError("x"))))
    with pytest.raises(AdminError) as exc:
        result.unwrap()
    assert exc.value is result.error


@pytest.mark.asyncio
async def test_default_listener_logs_each_retry():
    from structlog.testing import capture_logs

    async def no_sleep(_: float) -> None:
        return None

    invoker = ResilientInvoker(sleeper=no_sleep, clock=lambda: NOW)
    call = ScriptedCall(_timeout(), "ok")

    with capture_logs() as logs:
        result = await invoker.invoke(Operation(action="reassign_order", call=call))

    assert result.ok
    retries = [e for e in logs if e["event"] == "admin_operation_retry"]
    assert retries == [
        {
            "event": "admin_operation_retry",
            "log_level": "warning",
            "action": "reassign_order",
            "attempt": 1,
            "max_attempts": 3,
            "delay_ms": 1000,
            "error_code": "NETWORK_TIMEOUT",
        }
    ]
