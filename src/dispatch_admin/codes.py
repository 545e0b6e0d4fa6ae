from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    # Client-side validation
    INVALID_ORDER_ID = "INVALID_ORDER_ID"
    INVALID_PROVIDER_ID = "INVALID_PROVIDER_ID"
    INVALID_CUSTOMER_ID = "INVALID_CUSTOMER_ID"
    INVALID_DATE_RANGE = "INVALID_DATE_RANGE"

    # Authorization
    INSUFFICIENT_ADMIN_PERMISSIONS = "INSUFFICIENT_ADMIN_PERMISSIONS"

    # Transport / infrastructure
    NETWORK_TIMEOUT = "NETWORK_TIMEOUT"
    ADMIN_UNKNOWN_ERROR = "ADMIN_UNKNOWN_ERROR"

    # Order reassignment
    ORDER_REASSIGNMENT_FAILED = "ORDER_REASSIGNMENT_FAILED"
    NO_AVAILABLE_PROVIDERS = "NO_AVAILABLE_PROVIDERS"
    PROVIDER_ALREADY_ASSIGNED = "PROVIDER_ALREADY_ASSIGNED"
    INVALID_ORDER_STATUS = "INVALID_ORDER_STATUS"

    # Customer suspension
    CUSTOMER_SUSPENSION_FAILED = "CUSTOMER_SUSPENSION_FAILED"
    CUSTOMER_ALREADY_SUSPENDED = "CUSTOMER_ALREADY_SUSPENDED"
    CUSTOMER_NOT_SUSPENDED = "CUSTOMER_NOT_SUSPENDED"
    CUSTOMER_HAS_ACTIVE_ORDERS = "CUSTOMER_HAS_ACTIVE_ORDERS"

    # Data fetching
    ADMIN_DATA_FETCH_FAILED = "ADMIN_DATA_FETCH_FAILED"


VALIDATION_CODES = frozenset(
    {
        ErrorCode.INVALID_ORDER_ID,
        ErrorCode.INVALID_PROVIDER_ID,
        ErrorCode.INVALID_CUSTOMER_ID,
        ErrorCode.INVALID_DATE_RANGE,
    }
)

# Only these codes are ever retried by the invoker.
RETRYABLE_CODES = frozenset({ErrorCode.NETWORK_TIMEOUT})
