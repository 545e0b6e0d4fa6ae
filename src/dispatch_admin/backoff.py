from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    base_delay_ms: int = 1000
    backoff_multiplier: float = 2
    max_delay_ms: int = 8000

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1.")
        if self.base_delay_ms < 0 or self.max_delay_ms < 0:
            raise ValueError("Retry delays must be >= 0.")
        if self.backoff_multiplier < 1:
            raise ValueError("backoff_multiplier must be >= 1.")

    def delay_for(self, attempt: int) -> int:
        # attempt: 1-based number of the attempt that just failed
        if attempt < 1:
            raise ValueError(f"attempt must be >= 1, got {attempt}.")
        try:
            delay = self.base_delay_ms * (self.backoff_multiplier ** (attempt - 1))
        except OverflowError:
            return self.max_delay_ms
        return int(min(delay, self.max_delay_ms))


DEFAULT_RETRY_POLICY = RetryPolicy()


def delay_for(attempt: int, policy: RetryPolicy = DEFAULT_RETRY_POLICY) -> int:
    return policy.delay_for(attempt)
