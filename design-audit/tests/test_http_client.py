"""Tests for the rate-limit retry client and backoff policies."""

from __future__ import annotations

import asyncio

import pytest

from conftest import FakeResponse, FakeSession
from design_audit.http_client import BackoffPolicy, RetryClient, parse_retry_after


def test_exponential_policy_doubles_from_base() -> None:
    policy = BackoffPolicy(strategy="exponential", base_delay=3.0)

    assert [policy.delay_for(n) for n in range(4)] == [3.0, 6.0, 12.0, 24.0]


def test_linear_and_fixed_policies() -> None:
    assert [BackoffPolicy(strategy="linear", base_delay=2.0).delay_for(n) for n in range(3)] == [2.0, 4.0, 6.0]
    assert [BackoffPolicy(strategy="fixed", base_delay=1.5).delay_for(n) for n in range(3)] == [1.5, 1.5, 1.5]


def test_policy_caps_delay() -> None:
    policy = BackoffPolicy(base_delay=10.0, max_delay=25.0)

    assert policy.delay_for(5) == 25.0


def test_header_policy_prefers_retry_after() -> None:
    policy = BackoffPolicy(strategy="header", base_delay=3.0)

    assert policy.delay_for(0, FakeResponse(429, headers={"Retry-After": "7"})) == 7.0
    assert policy.delay_for(1, FakeResponse(429)) == 6.0
    assert policy.delay_for(1, FakeResponse(429, headers={"Retry-After": "soon"})) == 6.0


def test_parse_retry_after_handles_missing_response() -> None:
    assert parse_retry_after(None) is None
    assert parse_retry_after(FakeResponse(429, headers={"Retry-After": "12"})) == 12.0


def test_returns_final_429_after_exhausting_retries(recording_sleep) -> None:
    session = FakeSession(lambda url: FakeResponse(429))
    client = RetryClient(session=session, max_retries=4, sleep=recording_sleep)

    response = asyncio.run(client.fetch_with_retry("https://api.figma.com/v1/images/abc", {}))

    assert response.status_code == 429
    assert len(session.calls) == 5
    assert recording_sleep.delays == [3.0, 6.0, 12.0, 24.0]
    assert sum(recording_sleep.delays) == 45.0


def test_retries_until_success(recording_sleep) -> None:
    responses = iter([FakeResponse(429), FakeResponse(429), FakeResponse(200, {"ok": True})])
    session = FakeSession(lambda url: next(responses))
    client = RetryClient(session=session, sleep=recording_sleep)

    response = asyncio.run(client.fetch_with_retry("https://example.test", {}))

    assert response.status_code == 200
    assert len(session.calls) == 3
    assert recording_sleep.delays == [3.0, 6.0]


@pytest.mark.parametrize("status", [200, 403, 404, 500, 503])
def test_non_rate_limit_statuses_are_not_retried(status: int, recording_sleep) -> None:
    session = FakeSession(lambda url: FakeResponse(status))
    client = RetryClient(session=session, sleep=recording_sleep)

    response = asyncio.run(client.fetch_with_retry("https://example.test", {}))

    assert response.status_code == status
    assert len(session.calls) == 1
    assert recording_sleep.delays == []


def test_per_call_retry_override(recording_sleep) -> None:
    session = FakeSession(lambda url: FakeResponse(429))
    client = RetryClient(session=session, max_retries=4, sleep=recording_sleep)

    asyncio.run(client.fetch_with_retry("https://example.test", {}, max_retries=1))

    assert len(session.calls) == 2
    assert recording_sleep.delays == [3.0]
