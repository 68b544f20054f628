"""Tests for the tenacity-based delivery retry helpers."""

from __future__ import annotations

import httpx
import pytest

from app.infrastructure.retry import RetryPolicy, call_with_retries, request_with_retries


class StatusError(Exception):
    def __init__(self, status_code: int | None) -> None:
        super().__init__(f"status {status_code}")
        self.status_code = status_code


def _policy(**overrides) -> RetryPolicy:
    values = {"max_attempts": 3, "initial_delay": 2.0, "max_delay": 5.0}
    values.update(overrides)
    return RetryPolicy(**values)


class Recorder:
    def __init__(self) -> None:
        self.sleeps: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.sleeps.append(delay)


def _status_of(exc: BaseException) -> int | None:
    return getattr(exc, "status_code", None)


@pytest.mark.asyncio
async def test_backoff_doubles_and_is_capped() -> None:
    sleep = Recorder()
    outcomes = [StatusError(503), StatusError(503), StatusError(503), "done"]

    async def call():
        outcome = outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    result = await call_with_retries(
        call, _policy(max_attempts=4), status_of=_status_of, sleep=sleep
    )

    assert result == "done"
    assert len(sleep.sleeps) == 3
    assert 2.0 <= sleep.sleeps[0] <= 3.0
    assert 4.0 <= sleep.sleeps[1] <= 5.0
    assert sleep.sleeps[2] == 5.0


@pytest.mark.asyncio
async def test_non_transient_errors_raise_immediately() -> None:
    sleep = Recorder()
    calls = []

    async def call():
        calls.append(1)
        raise StatusError(404)

    with pytest.raises(StatusError):
        await call_with_retries(call, _policy(), status_of=_status_of, sleep=sleep)

    assert len(calls) == 1
    assert sleep.sleeps == []


@pytest.mark.asyncio
async def test_exhausted_retries_reraise_last_error() -> None:
    sleep = Recorder()

    async def call():
        raise StatusError(429)

    with pytest.raises(StatusError, match="status 429"):
        await call_with_retries(call, _policy(), status_of=_status_of, sleep=sleep)

    assert len(sleep.sleeps) == 2


@pytest.mark.asyncio
async def test_request_returns_last_transient_response(caplog) -> None:
    sleep = Recorder()
    client = httpx.AsyncClient(
        transport=httpx.MockTransport(lambda request: httpx.Response(502))
    )

    with caplog.at_level("WARNING"):
        response = await request_with_retries(
            lambda: client.get("https://api.example.com/"), _policy(), sleep=sleep
        )
    await client.aclose()

    assert response.status_code == 502
    assert len(sleep.sleeps) == 2
    assert "returned 502" in caplog.text


def test_policy_requires_one_attempt() -> None:
    with pytest.raises(ValueError):
        RetryPolicy(max_attempts=0)
