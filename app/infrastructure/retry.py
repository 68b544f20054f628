"""Retry with exponential backoff for outbound delivery calls."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    wait_exponential_jitter,
)

from app.config import Settings

logger = logging.getLogger(__name__)

DEFAULT_RETRY_STATUSES = frozenset({408, 429, 500, 502, 503, 504})


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded exponential backoff with jitter of up to half the first delay."""

    max_attempts: int = 3
    initial_delay: float = 1.0
    max_delay: float = 10.0
    backoff_factor: float = 2.0
    retry_statuses: frozenset[int] = field(default=DEFAULT_RETRY_STATUSES)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    @classmethod
    def from_settings(cls, settings: Settings) -> "RetryPolicy":
        return cls(
            max_attempts=settings.delivery_max_attempts,
            initial_delay=settings.delivery_initial_delay_seconds,
            max_delay=settings.delivery_max_delay_seconds,
        )

    def wait_strategy(self) -> wait_exponential_jitter:
        return wait_exponential_jitter(
            initial=self.initial_delay,
            max=self.max_delay,
            exp_base=self.backoff_factor,
            jitter=self.initial_delay / 2,
        )

    def is_retryable(self, status_code: int | None) -> bool:
        return status_code is not None and status_code in self.retry_statuses

    def retrying(
        self,
        retry: Any,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        **kwargs: Any,
    ) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=self.wait_strategy(),
            retry=retry,
            sleep=sleep,
            before_sleep=_log_retry,
            **kwargs,
        )


def _log_retry(retry_state: RetryCallState) -> None:
    outcome = retry_state.outcome
    if outcome is None:
        return
    if outcome.failed:
        logger.warning(
            "Delivery call failed on attempt %s, retrying: %s",
            retry_state.attempt_number,
            outcome.exception(),
        )
        return
    response = outcome.result()
    logger.warning(
        "HTTP request returned %s on attempt %s, retrying",
        getattr(response, "status_code", None),
        retry_state.attempt_number,
    )


def _last_outcome(retry_state: RetryCallState) -> Any:
    # Hand back the final response, or re-raise the final transport error.
    return retry_state.outcome.result()


async def request_with_retries(
    request_fn: Callable[[], Awaitable[httpx.Response]],
    policy: RetryPolicy,
    *,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> httpx.Response:
    """Execute an HTTP request, retrying transport errors and transient statuses."""

    retrying = policy.retrying(
        retry_if_exception_type(httpx.RequestError)
        | retry_if_result(lambda response: policy.is_retryable(response.status_code)),
        sleep=sleep,
        retry_error_callback=_last_outcome,
    )
    return await retrying(request_fn)


async def call_with_retries(
    call: Callable[[], Awaitable[object]],
    policy: RetryPolicy,
    *,
    status_of: Callable[[BaseException], int | None],
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> object:
    """Run ``call`` retrying exceptions whose status code is transient."""

    retrying = policy.retrying(
        retry_if_exception(lambda exc: policy.is_retryable(status_of(exc))),
        sleep=sleep,
        reraise=True,
    )
    return await retrying(call)


__all__ = [
    "DEFAULT_RETRY_STATUSES",
    "RetryPolicy",
    "call_with_retries",
    "request_with_retries",
]
