"""
Declarative admin operations.

Each builder binds the caller's arguments into an ``Operation``: the remote
procedure to call, the local checks that must pass before any network
activity, and the ordered rules that map a backend decline to an error code.
Builders never perform I/O; run the result through ``ResilientInvoker``.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from .backoff import DEFAULT_RETRY_POLICY, RetryPolicy
from .classifier import REASSIGNMENT_RULES, BusinessRule
from .codes import ErrorCode
from .errors import AdminError, ContextSeed
from .invoker import Operation

PerformRemote = Callable[[str, Mapping[str, Any]], Awaitable[Any]]

GET_AVAILABLE_PROVIDERS = "get_available_providers"
REASSIGN_ORDER = "reassign_order"
GET_REASSIGNMENT_HISTORY = "get_reassignment_history"
SUSPEND_CUSTOMER = "suspend_customer_account"
UNSUSPEND_CUSTOMER = "unsuspend_customer_account"

SUSPENSION_RULES: tuple[BusinessRule, ...] = (
    BusinessRule("already suspended", ErrorCode.CUSTOMER_ALREADY_SUSPENDED),
    BusinessRule("active order", ErrorCode.CUSTOMER_HAS_ACTIVE_ORDERS),
)

UNSUSPENSION_RULES: tuple[BusinessRule, ...] = (
    BusinessRule("not suspended", ErrorCode.CUSTOMER_NOT_SUSPENDED),
)


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


def _remote(perform: PerformRemote, procedure: str, params: Mapping[str, Any]) -> Callable[[], Awaitable[Any]]:
    async def _call() -> Any:
        return await perform(procedure, params)

    return _call


def list_available_providers(
    perform: PerformRemote,
    service_type: str | None = None,
    *,
    limit: int = 100,
    admin_id: str | None = None,
    policy: RetryPolicy = DEFAULT_RETRY_POLICY,
) -> Operation:
    params = {"p_service_type": service_type or None, "p_limit": limit}
    return Operation(
        action=GET_AVAILABLE_PROVIDERS,
        call=_remote(perform, GET_AVAILABLE_PROVIDERS, params),
        policy=policy,
        context_seed=ContextSeed(admin_id=admin_id, metadata={"serviceType": service_type}),
        business_failure_code=ErrorCode.ADMIN_DATA_FETCH_FAILED,
    )


def no_available_providers(operation: Operation, timestamp: int) -> AdminError:
    """Error for a provider listing that succeeded but came back empty.

    Built directly rather than through the retry loop: asking again right away
    returns the same empty list.
    """
    return AdminError(ErrorCode.NO_AVAILABLE_PROVIDERS, operation.context_seed.build(operation.action, timestamp))


def reassign_order(
    perform: PerformRemote,
    order_id: str,
    order_type: str,
    provider_id: str,
    *,
    reason: str | None = None,
    notes: str | None = None,
    admin_id: str | None = None,
    policy: RetryPolicy = DEFAULT_RETRY_POLICY,
) -> Operation:
    def _validate() -> ErrorCode | None:
        if _blank(order_id):
            return ErrorCode.INVALID_ORDER_ID
        if _blank(provider_id):
            return ErrorCode.INVALID_PROVIDER_ID
        return None

    params = {
        "p_order_id": order_id,
        "p_order_type": order_type,
        "p_new_provider_id": provider_id,
        "p_reason": reason or None,
        "p_notes": notes or None,
    }
    return Operation(
        action=REASSIGN_ORDER,
        call=_remote(perform, REASSIGN_ORDER, params),
        validate=_validate,
        policy=policy,
        context_seed=ContextSeed(
            order_id=order_id,
            provider_id=provider_id,
            admin_id=admin_id,
            metadata={"orderType": order_type, "reason": reason, "notes": notes},
        ),
        business_rules=REASSIGNMENT_RULES,
        business_failure_code=ErrorCode.ORDER_REASSIGNMENT_FAILED,
    )


def get_reassignment_history(
    perform: PerformRemote,
    order_id: str | None = None,
    provider_id: str | None = None,
    *,
    limit: int = 50,
    offset: int = 0,
    admin_id: str | None = None,
    policy: RetryPolicy = DEFAULT_RETRY_POLICY,
) -> Operation:
    def _validate() -> ErrorCode | None:
        if limit < 1 or offset < 0:
            return ErrorCode.ADMIN_DATA_FETCH_FAILED
        return None

    params = {
        "p_order_id": order_id or None,
        "p_provider_id": provider_id or None,
        "p_limit": limit,
        "p_offset": offset,
    }
    return Operation(
        action=GET_REASSIGNMENT_HISTORY,
        call=_remote(perform, GET_REASSIGNMENT_HISTORY, params),
        validate=_validate,
        policy=policy,
        context_seed=ContextSeed(
            order_id=order_id,
            provider_id=provider_id,
            admin_id=admin_id,
            metadata={"limit": limit, "offset": offset},
        ),
        business_failure_code=ErrorCode.ADMIN_DATA_FETCH_FAILED,
    )


def suspend_customer(
    perform: PerformRemote,
    customer_id: str,
    reason: str,
    *,
    admin_id: str | None = None,
    policy: RetryPolicy = DEFAULT_RETRY_POLICY,
) -> Operation:
    def _validate() -> ErrorCode | None:
        if _blank(customer_id):
            return ErrorCode.INVALID_CUSTOMER_ID
        if _blank(reason):
            return ErrorCode.CUSTOMER_SUSPENSION_FAILED
        return None

    return Operation(
        action=SUSPEND_CUSTOMER,
        call=_remote(perform, SUSPEND_CUSTOMER, {"p_customer_id": customer_id, "p_reason": reason}),
        validate=_validate,
        policy=policy,
        context_seed=ContextSeed(customer_id=customer_id, admin_id=admin_id, metadata={"reason": reason}),
        business_rules=SUSPENSION_RULES,
        business_failure_code=ErrorCode.CUSTOMER_SUSPENSION_FAILED,
    )


def unsuspend_customer(
    perform: PerformRemote,
    customer_id: str,
    *,
    admin_id: str | None = None,
    policy: RetryPolicy = DEFAULT_RETRY_POLICY,
) -> Operation:
    def _validate() -> ErrorCode | None:
        if _blank(customer_id):
            return ErrorCode.INVALID_CUSTOMER_ID
        return None

    return Operation(
        action=UNSUSPEND_CUSTOMER,
        call=_remote(perform, UNSUSPEND_CUSTOMER, {"p_customer_id": customer_id}),
        validate=_validate,
        policy=policy,
        context_seed=ContextSeed(customer_id=customer_id, admin_id=admin_id),
        business_rules=UNSUSPENSION_RULES,
        business_failure_code=ErrorCode.CUSTOMER_SUSPENSION_FAILED,
    )
