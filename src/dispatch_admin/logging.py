from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping, MutableMapping
from typing import TYPE_CHECKING, Any, TypeAlias, cast

import structlog

if TYPE_CHECKING:
    from .errors import AdminError
    from .invoker import AttemptRecord


# Header names the RPC client sends; any key containing "token" or "secret" is masked too.
_SENSITIVE_KEYS = frozenset({"authorization", "apikey"})
_SENSITIVE_FRAGMENTS = ("token", "secret")


_BEARER_RE = re.compile(r"(?i)\bBearer\s+([A-Za-z0-9._-]{6,})")

ProcessorReturn: TypeAlias = Mapping[str, Any] | str | bytes | bytearray | tuple[Any, ...]
Processor: TypeAlias = Callable[[Any, str, MutableMapping[str, Any]], ProcessorReturn]


def _redact_str(value: str, *, secrets: list[str]) -> str:
    out = value
    for secret in secrets:
        if secret and secret in out:
            out = out.replace(secret, "[REDACTED]")
    return _BEARER_RE.sub("Bearer [REDACTED]", out)


def _is_sensitive(key: Any) -> bool:
    name = str(key).lower()
    return name in _SENSITIVE_KEYS or any(f in name for f in _SENSITIVE_FRAGMENTS)


def _redact_obj(obj: Any, *, secrets: list[str]) -> Any:
    if isinstance(obj, str):
        return _redact_str(obj, secrets=secrets)
    if isinstance(obj, list):
        return [_redact_obj(v, secrets=secrets) for v in obj]
    if isinstance(obj, Mapping):
        return {
            k: "[REDACTED]" if _is_sensitive(k) else _redact_obj(v, secrets=secrets)
            for k, v in obj.items()
        }
    return obj


def _make_redaction_processor(*, secrets: list[str]) -> Processor:
    secrets_norm = [s for s in secrets if isinstance(s, str) and s]

    def _processor(_logger: Any, _method_name: str, event_dict: MutableMapping[str, Any]) -> ProcessorReturn:
        return cast(dict[str, Any], _redact_obj(event_dict, secrets=secrets_norm))

    return _processor


def configure_logging(level: str = "INFO", fmt: str = "json", *, secrets: list[str] | None = None) -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO))

    processors: list[Processor] = [
        cast(Processor, structlog.contextvars.merge_contextvars),
        cast(Processor, structlog.processors.add_log_level),
        cast(Processor, structlog.processors.TimeStamper(fmt="iso")),
        _make_redaction_processor(secrets=secrets or []),
    ]

    if fmt == "json":
        processors.append(cast(Processor, structlog.processors.JSONRenderer(ensure_ascii=False)))
    else:
        processors.append(cast(Processor, structlog.dev.ConsoleRenderer()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.INFO)
        ),
        cache_logger_on_first_use=True,
    )


def log_retry(record: AttemptRecord) -> None:
    """Default retry listener: one structured line per scheduled retry."""
    structlog.get_logger().warning(
        "admin_operation_retry",
        action=record.action,
        attempt=record.attempt_number,
        max_attempts=record.max_attempts,
        delay_ms=record.delay_ms,
        error_code=record.error.code.value,
    )


def log_admin_error(error: AdminError, **extra: Any) -> None:
    structlog.get_logger().error("admin_operation_failed", error=error.to_dict(), **extra)
