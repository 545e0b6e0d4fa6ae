from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, TypeAlias

from .codes import ErrorCode

if TYPE_CHECKING:
    from .messages import MessageCatalog

Scalar: TypeAlias = str | int | float | bool | None


class AdminOpsError(Exception):
    """Base error for admin operation failures."""


class ConfigurationError(AdminOpsError):
    pass


class RemoteCallError(AdminOpsError):
    """Transport-level failure raised by the remote call boundary."""

    def __init__(self, code: str | None = None, message: str = "Remote call failed"):
        super().__init__(message)
        self.code = code
        self.message = message


def _freeze_metadata(metadata: Mapping[str, Any] | None) -> Mapping[str, Scalar]:
    frozen: dict[str, Scalar] = {}
    for key, value in (metadata or {}).items():
        if value is None or isinstance(value, (str, int, float, bool)):
            frozen[str(key)] = value
        else:
            frozen[str(key)] = str(value)
    return MappingProxyType(frozen)


@dataclass(frozen=True)
class ErrorContext:
    action: str
    timestamp: int
    order_id: str | None = None
    provider_id: str | None = None
    customer_id: str | None = None
    admin_id: str | None = None
    metadata: Mapping[str, Scalar] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.action:
            raise ValueError("ErrorContext.action must be non-empty.")
        if self.timestamp <= 0:
            raise ValueError("ErrorContext.timestamp must be positive epoch millis.")
        object.__setattr__(self, "metadata", _freeze_metadata(self.metadata))

    def with_metadata(self, **extra: Any) -> ErrorContext:
        merged = {**self.metadata, **extra}
        return replace(self, metadata=merged)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"action": self.action, "timestamp": self.timestamp}
        for name in ("order_id", "provider_id", "customer_id", "admin_id"):
            value = getattr(self, name)
            if value is not None:
                out[name] = value
        out["metadata"] = dict(self.metadata)
        return out


@dataclass(frozen=True)
class ContextSeed:
    """Call-site context an operation carries into every error it produces."""

    order_id: str | None = None
    provider_id: str | None = None
    customer_id: str | None = None
    admin_id: str | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def build(self, action: str, timestamp: int, **extra_metadata: Any) -> ErrorContext:
        return ErrorContext(
            action=action,
            timestamp=timestamp,
            order_id=self.order_id,
            provider_id=self.provider_id,
            customer_id=self.customer_id,
            admin_id=self.admin_id,
            metadata={**self.metadata, **extra_metadata},
        )


class AdminError(AdminOpsError):
    """
    Terminal failure of an admin operation.

    Carries the classified code, the call context and whether the failure class
    is retryable. The user-facing message always comes from the catalog; raw
    backend text only ever lives in ``context.metadata``.
    """

    def __init__(
        self,
        code: ErrorCode,
        context: ErrorContext,
        *,
        retryable: bool = False,
        cause: BaseException | None = None,
    ):
        self._code = ErrorCode(code)
        self._context = context
        self._retryable = retryable
        self._cause = cause
        super().__init__(self._code.value)

    @property
    def code(self) -> ErrorCode:
        return self._code

    @property
    def context(self) -> ErrorContext:
        return self._context

    @property
    def retryable(self) -> bool:
        return self._retryable

    @property
    def cause(self) -> BaseException | None:
        return self._cause

    def get_user_message(self, catalog: MessageCatalog | None = None) -> str:
        if catalog is None:
            from .messages import THAI_CATALOG

            catalog = THAI_CATALOG
        return catalog[self._code]

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "code": self._code.value,
            "message": self.get_user_message(),
            "retryable": self._retryable,
            "context": self._context.to_dict(),
        }
        if self._cause is not None:
            out["cause"] = {"type": type(self._cause).__name__, "message": str(self._cause)}
        return out

    def __repr__(self) -> str:
        return f"AdminError(code={self._code.value!r}, action={self._context.action!r})"
