"""
Retry with exponential backoff for collaborator calls.

Used by the AWS resource manager only. The lifecycle core never retries: a
call that still fails after the collaborator's own retries is reported as a
per-item failure (teardown) or aborts the run (registry).
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar

from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RetryConfig:
    """Configuration for retry with exponential backoff."""
    max_retries: int = 3
    base_delay_s: float = 0.5
    max_delay_s: float = 10.0
    backoff_factor: float = 1.5
    retry_on_error_codes: tuple[str, ...] = (
        "Throttling",
        "ThrottlingException",
        "TooManyRequestsException",
        "RequestLimitExceeded",
        "ServiceUnavailable",
        "InternalFailure",
    )

    def is_retryable(self, exc: BaseException) -> bool:
        """Only throttling/transient AWS errors are retried; everything else fails fast."""
        if isinstance(exc, ClientError):
            code = exc.response.get("Error", {}).get("Code", "")
            return code in self.retry_on_error_codes
        return False


def resilient_call(
    func: Callable[..., T],
    *args: Any,
    retry_config: Optional[RetryConfig] = None,
    sleep: Callable[[float], None] = time.sleep,
    **kwargs: Any,
) -> T:
    """
    Execute a collaborator call with retry + backoff.

    Raises the last exception if all retries are exhausted or the error is
    not retryable.
    """
    cfg = retry_config or RetryConfig()

    last_err: Optional[Exception] = None
    for attempt in range(1, max(cfg.max_retries, 1) + 1):
        try:
            return func(*args, **kwargs)
        except Exception as exc:
            last_err = exc
            err_msg = f"{type(exc).__name__}: {exc}"
            logger.debug(
                "Attempt %d/%d failed: %s", attempt, cfg.max_retries, err_msg
            )
            if not cfg.is_retryable(exc):
                raise
            if attempt < cfg.max_retries:
                delay = min(
                    cfg.base_delay_s * (cfg.backoff_factor ** (attempt - 1)),
                    cfg.max_delay_s,
                )
                sleep(delay)

    raise last_err  # type: ignore[misc]
