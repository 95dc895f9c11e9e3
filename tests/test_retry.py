from __future__ import annotations

import pytest

from ticket_gate.retry import RetryConfig, backoff_seconds, call_with_retry, is_transient_status


def test_returns_first_good_result() -> None:
    sleeps: list[float] = []
    results = iter([503, 200])

    result = call_with_retry(
        operation_name="op",
        fn=lambda: next(results),
        is_retryable_exception=lambda exc: False,
        is_retryable_result=is_transient_status,
        sleep=sleeps.append,
    )

    assert result == 200
    assert len(sleeps) == 1


def test_last_retryable_result_is_returned() -> None:
    sleeps: list[float] = []

    result = call_with_retry(
        operation_name="op",
        fn=lambda: 429,
        is_retryable_exception=lambda exc: False,
        is_retryable_result=is_transient_status,
        config=RetryConfig(max_attempts=3),
        sleep=sleeps.append,
    )

    assert result == 429
    assert len(sleeps) == 2


def test_non_retryable_exception_propagates_immediately() -> None:
    calls = []

    def boom() -> int:
        calls.append(1)
        raise KeyError("nope")

    with pytest.raises(KeyError):
        call_with_retry("op", boom, is_retryable_exception=lambda exc: False, sleep=lambda _: None)
    assert len(calls) == 1


def test_retryable_exception_reraised_after_last_attempt() -> None:
    calls = []

    def boom() -> int:
        calls.append(1)
        raise ConnectionError("down")

    with pytest.raises(ConnectionError):
        call_with_retry(
            "op",
            boom,
            is_retryable_exception=lambda exc: isinstance(exc, ConnectionError),
            config=RetryConfig(max_attempts=2),
            sleep=lambda _: None,
        )
    assert len(calls) == 2


def test_backoff_is_capped() -> None:
    cfg = RetryConfig(base_delay_seconds=1.0, max_delay_seconds=2.0, jitter_ratio=0.0)
    assert backoff_seconds(1, cfg) == 1.0
    assert backoff_seconds(5, cfg) == 2.0


@pytest.mark.parametrize(("status", "transient"), [(200, False), (404, False), (403, True), (429, True), (500, True)])
def test_transient_statuses(status: int, transient: bool) -> None:
    assert is_transient_status(status) is transient
