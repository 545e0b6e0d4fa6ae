from __future__ import annotations

from collections.abc import Callable
from typing import Any

import structlog
from pydantic import ValidationError

from . import operations
from .backoff import DEFAULT_RETRY_POLICY, RetryPolicy
from .classifier import epoch_millis
from .codes import ErrorCode
from .config import AdminOpsConfig
from .errors import AdminError
from .invoker import InvocationResult, Operation, ResilientInvoker
from .logging import configure_logging, log_admin_error
from .messages import THAI_CATALOG, MessageCatalog
from .metrics import maybe_start_metrics
from .models import Provider, ReassignmentHistoryEntry, ReassignmentResult, SuspensionResult
from .operations import PerformRemote
from .rpc import AdminRpcClient

log = structlog.get_logger()


class AdminOperations:
    """
    Caller-facing entry points for admin actions.

    Each instance belongs to one calling context and exposes the latest
    ``error`` (or None) and an ``is_loading`` flag. Entry points return the
    parsed payload on success and None on failure; a new call clears the
    previous error before it starts.
    """

    def __init__(
        self,
        perform: PerformRemote,
        *,
        invoker: ResilientInvoker | None = None,
        policy: RetryPolicy = DEFAULT_RETRY_POLICY,
        catalog: MessageCatalog | None = None,
        admin_id: str | None = None,
        clock: Callable[[], int] | None = None,
    ):
        self._perform = perform
        self._invoker = invoker or ResilientInvoker(clock=clock)
        self._policy = policy
        self._clock: Callable[[], int] = clock or epoch_millis
        self._inflight = 0
        self._rpc: AdminRpcClient | None = None
        self.catalog = catalog or THAI_CATALOG
        self.admin_id = admin_id

        self.error: AdminError | None = None
        self.available_providers: list[Provider] = []
        self.reassignment_history: list[ReassignmentHistoryEntry] = []

    @classmethod
    def from_config(cls, cfg: AdminOpsConfig | None = None, *, admin_id: str | None = None) -> AdminOperations:
        cfg = cfg or AdminOpsConfig()
        configure_logging(level=cfg.log_level, fmt=cfg.log_format, secrets=cfg.secrets())
        maybe_start_metrics(enable=cfg.enable_metrics, bind=cfg.metrics_bind, port=cfg.metrics_port)
        rpc = AdminRpcClient(
            cfg.require_base_url(),
            api_key=cfg.rpc_api_key,
            access_token=cfg.rpc_access_token,
            timeout_seconds=cfg.rpc_timeout_seconds,
        )
        ops = cls(rpc, policy=cfg.retry_policy(), catalog=cfg.message_catalog(), admin_id=admin_id)
        ops._rpc = rpc
        return ops

    async def close(self) -> None:
        if self._rpc is not None:
            await self._rpc.close()

    @property
    def is_loading(self) -> bool:
        return self._inflight > 0

    @property
    def user_message(self) -> str | None:
        if self.error is None:
            return None
        return self.error.get_user_message(self.catalog)

    @property
    def online_providers(self) -> list[Provider]:
        return [p for p in self.available_providers if p.is_online]

    @property
    def offline_providers(self) -> list[Provider]:
        return [p for p in self.available_providers if not p.is_online]

    @property
    def top_rated_providers(self) -> list[Provider]:
        return sorted(self.available_providers, key=lambda p: p.rating or 0, reverse=True)[:10]

    async def get_available_providers(self, service_type: str | None = None) -> list[Provider] | None:
        op = operations.list_available_providers(
            self._perform, service_type, admin_id=self.admin_id, policy=self._policy
        )
        result = await self._run(op)
        if result.error is not None:
            return self._failed(result.error)

        rows = result.payload or []
        if not rows:
            return self._failed(operations.no_available_providers(op, self._clock()))
        try:
            providers = [Provider.model_validate(row) for row in rows]
        except ValidationError as e:
            return self._failed(self._unexpected(op, ErrorCode.ADMIN_DATA_FETCH_FAILED, e))

        self.available_providers = providers
        return providers

    async def reassign_order(
        self,
        order_id: str,
        order_type: str,
        provider_id: str,
        reason: str | None = None,
        notes: str | None = None,
    ) -> ReassignmentResult | None:
        op = operations.reassign_order(
            self._perform,
            order_id,
            order_type,
            provider_id,
            reason=reason,
            notes=notes,
            admin_id=self.admin_id,
            policy=self._policy,
        )
        result = await self._run(op)
        if result.error is not None:
            return self._failed(result.error)
        try:
            return ReassignmentResult.model_validate(result.payload)
        except ValidationError as e:
            return self._failed(self._unexpected(op, ErrorCode.ORDER_REASSIGNMENT_FAILED, e))

    async def get_reassignment_history(
        self,
        order_id: str | None = None,
        provider_id: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[ReassignmentHistoryEntry] | None:
        op = operations.get_reassignment_history(
            self._perform,
            order_id,
            provider_id,
            limit=limit,
            offset=offset,
            admin_id=self.admin_id,
            policy=self._policy,
        )
        result = await self._run(op)
        if result.error is not None:
            return self._failed(result.error)
        try:
            history = [ReassignmentHistoryEntry.model_validate(row) for row in result.payload or []]
        except ValidationError as e:
            return self._failed(self._unexpected(op, ErrorCode.ADMIN_DATA_FETCH_FAILED, e))

        self.reassignment_history = history
        return history

    async def suspend_customer(self, customer_id: str, reason: str) -> SuspensionResult | None:
        op = operations.suspend_customer(
            self._perform, customer_id, reason, admin_id=self.admin_id, policy=self._policy
        )
        return await self._run_suspension(op, customer_id)

    async def unsuspend_customer(self, customer_id: str) -> SuspensionResult | None:
        op = operations.unsuspend_customer(self._perform, customer_id, admin_id=self.admin_id, policy=self._policy)
        return await self._run_suspension(op, customer_id)

    async def _run_suspension(self, op: Operation, customer_id: str) -> SuspensionResult | None:
        result = await self._run(op)
        if result.error is not None:
            return self._failed(result.error)
        payload = result.payload if isinstance(result.payload, dict) else {}
        try:
            return SuspensionResult.model_validate({"success": True, "customer_id": customer_id, **payload})
        except ValidationError as e:
            return self._failed(self._unexpected(op, ErrorCode.CUSTOMER_SUSPENSION_FAILED, e))

    async def _run(self, op: Operation) -> InvocationResult[Any]:
        self._inflight += 1
        self.error = None
        try:
            return await self._invoker.invoke(op)
        finally:
            self._inflight -= 1

    def _unexpected(self, op: Operation, code: ErrorCode, exc: Exception) -> AdminError:
        return AdminError(code, op.context_seed.build(op.action, self._clock()), cause=exc)

    def _failed(self, error: AdminError) -> None:
        self.error = error
        log_admin_error(error, locale=self.catalog.locale)
        return None
