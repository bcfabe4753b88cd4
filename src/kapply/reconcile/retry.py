"""Bounded exponential backoff for transient cluster API failures (tenacity)."""

import time
from typing import Callable, Optional, Tuple, TypeVar
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential
from ..config.settings import RetrySettings
from ..utils.errors import ClusterAPIError, TransientAPIError
from ..utils.logging import get_logger

logger = get_logger("reconcile.retry")

T = TypeVar("T")


def call_with_retry(
    func: Callable[[], T],
    settings: RetrySettings,
    description: str,
    sleep: Optional[Callable[[float], None]] = None
) -> Tuple[T, int]:
    """
    Run func, retrying TransientAPIError with capped doubling delays.

    Args:
        func: Zero-argument callable issuing one API call
        settings: Attempts, base delay and delay cap
        description: Label for log messages (never includes secret values)
        sleep: Sleep function (tests pass a no-op)

    Returns:
        Tuple of (func result, attempts used)

    Raises:
        TransientAPIError: When every attempt failed transiently
        ClusterAPIError: Immediately for non-transient failures
    """
    retrying = Retrying(
        stop=stop_after_attempt(settings.attempts),
        wait=wait_exponential(multiplier=settings.base_delay, min=0, max=settings.max_delay),
        retry=retry_if_exception_type(TransientAPIError),
        reraise=True,
        sleep=sleep or time.sleep,
        before_sleep=lambda state: logger.warning(
            f"{description}: attempt {state.attempt_number}/{settings.attempts} failed "
            f"({state.outcome.exception()}), retrying in {state.next_action.sleep:.2f}s"
        ),
    )

    attempts = 0
    try:
        for attempt in retrying:
            with attempt:
                attempts = attempt.retry_state.attempt_number
                result = func()
    except ClusterAPIError as e:
        e.attempts = attempts
        raise
    return result, attempts
