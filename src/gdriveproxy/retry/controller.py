"""Bounded retry with exponential backoff, keyed by operation id."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Generic, Optional, TypeVar

from gdriveproxy.errors import (
    AppError,
    DownloadCancelledError,
    ErrorCode,
    classify_error,
    create_app_error,
    is_retryable_error,
)

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    max_retries: int = 3
    initial_delay_ms: int = 1000
    backoff_multiplier: float = 2
    max_delay_ms: int = 10000

    def __post_init__(self) -> None:
        if self.max_retries < 1:
            raise ValueError("RetryPolicy.max_retries must be >= 1")
        if self.initial_delay_ms < 0 or self.max_delay_ms < 0:
            raise ValueError("RetryPolicy delays must be >= 0")


@dataclass(slots=True)
class RetryState:
    attempts: int = 0
    last_error: Optional[AppError] = None
    is_retrying: bool = False


@dataclass(slots=True)
class RetryResult(Generic[T]):
    success: bool
    attempts: int
    data: Optional[T] = None
    error: Optional[AppError] = None
    exception: Optional[BaseException] = field(default=None, repr=False)

    @property
    def retries(self) -> int:
        return max(0, self.attempts - 1)


class RetryController:
    """
    Run fallible operations with bounded retries.

    Notes:
        - Only NETWORK_ERROR and DOWNLOAD_FAILED are retried.
        - Exhausted state sticks until reset(); a further call fails without
          invoking the operation.
        - Two calls for the same operation_id must not run concurrently.
    """

    def __init__(
        self,
        policy: Optional[RetryPolicy] = None,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._policy = policy or RetryPolicy()
        self._sleep = sleep
        self._states: dict[str, RetryState] = {}

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    def get_state(self, operation_id: str) -> RetryState:
        state = self._states.get(operation_id)
        if state is None:
            state = RetryState()
            self._states[operation_id] = state
        return state

    def reset(self, operation_id: str) -> None:
        self._states[operation_id] = RetryState()

    def clear(self, operation_id: str) -> None:
        self._states.pop(operation_id, None)

    def can_retry(self, operation_id: str) -> bool:
        return self.get_state(operation_id).attempts < self._policy.max_retries

    def remaining_attempts(self, operation_id: str) -> int:
        return max(0, self._policy.max_retries - self.get_state(operation_id).attempts)

    def record_attempt(self, operation_id: str, code: ErrorCode) -> bool:
        """
        Count a failed attempt made outside execute_with_retry.

        Returns:
            Whether another attempt is still allowed.
        """
        state = self.get_state(operation_id)
        if state.attempts < self._policy.max_retries:
            state.attempts += 1
        state.last_error = create_app_error(code)
        return self.can_retry(operation_id)

    def calculate_delay(self, attempt_index: int) -> float:
        """Delay in ms before the retry following failure number attempt_index+1."""
        p = self._policy
        delay = p.initial_delay_ms * (p.backoff_multiplier ** attempt_index)
        return min(delay, p.max_delay_ms)

    def execute_with_retry(
        self,
        operation_id: str,
        operation: Callable[[], T],
        on_retry: Optional[Callable[[int, float], None]] = None,
    ) -> RetryResult[T]:
        state = self.get_state(operation_id)

        if state.attempts >= self._policy.max_retries:
            return RetryResult(
                success=False,
                attempts=state.attempts,
                error=state.last_error or create_app_error(ErrorCode.API_ERROR),
            )

        while True:
            state.is_retrying = state.attempts > 0
            try:
                data = operation()
            except DownloadCancelledError:
                state.is_retrying = False
                raise
            except Exception as exc:
                state.attempts += 1
                code = classify_error(exc)
                state.last_error = create_app_error(code)

                if is_retryable_error(code) and state.attempts < self._policy.max_retries:
                    delay_ms = self.calculate_delay(state.attempts - 1)
                    logger.info(
                        "Retrying %s after %s (attempt %d/%d, waiting %.0f ms)",
                        operation_id,
                        code.value,
                        state.attempts,
                        self._policy.max_retries,
                        delay_ms,
                    )
                    if on_retry is not None:
                        on_retry(state.attempts, delay_ms)
                    self._sleep(delay_ms / 1000)
                    continue

                state.is_retrying = False
                logger.warning(
                    "Operation %s failed with %s after %d attempt(s)",
                    operation_id,
                    code.value,
                    state.attempts,
                )
                return RetryResult(
                    success=False,
                    attempts=state.attempts,
                    error=state.last_error,
                    exception=exc,
                )

            attempts = state.attempts + 1
            self.reset(operation_id)
            return RetryResult(success=True, attempts=attempts, data=data)
