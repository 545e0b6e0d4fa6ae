from __future__ import annotations

import time
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

import httpx

from .codes import RETRYABLE_CODES, ErrorCode
from .errors import AdminError, ContextSeed, RemoteCallError


@dataclass(frozen=True)
class BusinessRule:
    """Maps a substring of a backend decline message to an error code."""

    pattern: str
    code: ErrorCode

    def matches(self, text: str) -> bool:
        return self.pattern.lower() in text.lower()


PERMISSION_CODES = frozenset({"PGRST301", "42501", "401", "403"})
PERMISSION_MARKERS = ("permission", "policy", "not authorized", "forbidden")

# Allow-list of retryable transport failures. Anything not listed here is terminal.
TRANSIENT_EXCEPTIONS: tuple[type[BaseException], ...] = (
    httpx.TimeoutException,
    httpx.NetworkError,
    httpx.RemoteProtocolError,
    TimeoutError,
    ConnectionError,
)
# Gateway statuses only; 500 stays terminal.
TRANSIENT_CODES = frozenset({"TIMEOUT", "NETWORK", "ECONNRESET", "ETIMEDOUT", "502", "503", "504"})
TRANSIENT_MARKERS = (
    "timeout",
    "timed out",
    "connection reset",
    "network error",
    "network request failed",
    "failed to fetch",
)

REASSIGNMENT_RULES: tuple[BusinessRule, ...] = (
    BusinessRule("already assigned", ErrorCode.PROVIDER_ALREADY_ASSIGNED),
    BusinessRule("invalid status", ErrorCode.INVALID_ORDER_STATUS),
)


def epoch_millis() -> int:
    return int(time.time() * 1000)


def is_business_decline(payload: Any) -> bool:
    return isinstance(payload, Mapping) and payload.get("success") is False


def _transport_signature(failure: BaseException) -> tuple[str, str]:
    if isinstance(failure, RemoteCallError):
        code, message = failure.code, failure.message
    else:
        code, message = getattr(failure, "code", None), str(failure)
    return (str(code).upper() if code is not None else ""), (message or "").lower()


def classify_transport(failure: BaseException) -> ErrorCode:
    code, message = _transport_signature(failure)

    if code in PERMISSION_CODES or any(m in message for m in PERMISSION_MARKERS):
        return ErrorCode.INSUFFICIENT_ADMIN_PERMISSIONS

    if isinstance(failure, TRANSIENT_EXCEPTIONS):
        return ErrorCode.NETWORK_TIMEOUT
    if code in TRANSIENT_CODES or any(m in message for m in TRANSIENT_MARKERS):
        return ErrorCode.NETWORK_TIMEOUT

    return ErrorCode.ADMIN_UNKNOWN_ERROR


def classify_business(message: Any, rules: Sequence[BusinessRule], default: ErrorCode) -> ErrorCode:
    # Structured or numeric errors fall through to the default code.
    text = message if isinstance(message, str) else ""
    for rule in rules:
        if rule.matches(text):
            return rule.code
    return default


def classify(
    failure: BaseException | Mapping[str, Any],
    action: str,
    context_seed: ContextSeed | None = None,
    *,
    business_rules: Sequence[BusinessRule] = (),
    default_business_code: ErrorCode = ErrorCode.ORDER_REASSIGNMENT_FAILED,
    now_ms: Callable[[], int] | None = None,
) -> AdminError:
    seed = context_seed or ContextSeed()
    timestamp = (now_ms or epoch_millis)()

    if isinstance(failure, BaseException):
        code = classify_transport(failure)
        context = seed.build(action, timestamp)
        return AdminError(code, context, retryable=code in RETRYABLE_CODES, cause=failure)

    if not is_business_decline(failure):
        raise TypeError(f"Cannot classify successful payload of type {type(failure).__name__}.")

    business_error = failure.get("error")
    code = classify_business(business_error, business_rules, default_business_code)
    extra: dict[str, Any] = {"businessError": business_error}
    if failure.get("error_detail") is not None:
        extra["errorDetail"] = failure.get("error_detail")
    context = seed.build(action, timestamp, **extra)
    # The backend already evaluated the request; a decline is never retried.
    return AdminError(code, context, retryable=False)
