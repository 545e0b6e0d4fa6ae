from .backoff import DEFAULT_RETRY_POLICY, RetryPolicy, delay_for
from .classifier import BusinessRule, classify
from .codes import ErrorCode
from .config import AdminOpsConfig
from .errors import AdminError, AdminOpsError, ConfigurationError, ContextSeed, ErrorContext, RemoteCallError
from .invoker import AttemptRecord, InvocationResult, Operation, ResilientInvoker
from .messages import ENGLISH_CATALOG, THAI_CATALOG, MessageCatalog, catalog_for
from .rpc import AdminRpcClient
from .service import AdminOperations

__all__ = [
    "AdminError",
    "AdminOperations",
    "AdminOpsConfig",
    "AdminOpsError",
    "AdminRpcClient",
    "AttemptRecord",
    "BusinessRule",
    "ConfigurationError",
    "ContextSeed",
    "DEFAULT_RETRY_POLICY",
    "ENGLISH_CATALOG",
    "ErrorCode",
    "ErrorContext",
    "InvocationResult",
    "MessageCatalog",
    "Operation",
    "RemoteCallError",
    "ResilientInvoker",
    "RetryPolicy",
    "THAI_CATALOG",
    "catalog_for",
    "classify",
    "delay_for",
]
