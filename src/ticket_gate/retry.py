"""Exponential backoff for the GitHub calls that list pull request commits.

Ticket status reads are never retried; this only wraps the commit source.
"""

import random
import time
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from ticket_gate.logging import get_logger

T = TypeVar("T")

logger = get_logger("ticket_gate.retry")


@dataclass(frozen=True)
class RetryConfig:
    max_attempts: int = 4
    base_delay_seconds: float = 0.5
    max_delay_seconds: float = 8.0
    jitter_ratio: float = 0.25


def backoff_seconds(attempt: int, config: RetryConfig) -> float:
    exponential = min(config.base_delay_seconds * (2 ** (attempt - 1)), config.max_delay_seconds)
    return exponential * (1 + random.uniform(0, config.jitter_ratio))


def is_transient_status(status_code: int) -> bool:
    return status_code in {403, 429} or status_code >= 500


def call_with_retry(
    operation_name: str,
    fn: Callable[[], T],
    is_retryable_exception: Callable[[Exception], bool],
    is_retryable_result: Optional[Callable[[T], bool]] = None,
    config: Optional[RetryConfig] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call ``fn`` until it succeeds or ``config.max_attempts`` is reached.

    A retryable result on the final attempt is returned as-is so the caller
    can inspect it; a retryable exception on the final attempt is re-raised.
    """
    cfg = config or RetryConfig()

    for attempt in range(1, cfg.max_attempts + 1):
        last_attempt = attempt == cfg.max_attempts
        try:
            result = fn()
        except Exception as exc:  # noqa: BLE001
            if last_attempt or not is_retryable_exception(exc):
                raise
            delay = backoff_seconds(attempt, cfg)
            logger.warning(
                "retrying_after_exception",
                extra={"extra": {"operation": operation_name, "attempt": attempt, "error": str(exc)}},
            )
            sleep(delay)
            continue

        if is_retryable_result is None or last_attempt or not is_retryable_result(result):
            return result

        logger.warning(
            "retrying_after_result",
            extra={"extra": {"operation": operation_name, "attempt": attempt}},
        )
        sleep(backoff_seconds(attempt, cfg))

    raise RuntimeError(f"Retry loop exhausted unexpectedly for {operation_name}")
