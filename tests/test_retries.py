from datetime import datetime, timezone

import httpx
import pytest

from onboard.http import RetryTransport, _seconds_from_retry_after, build_http_client


class SleepRecorder:
    def __init__(self) -> None:
        self.calls: list[int] = []

    async def __call__(self, seconds: int) -> None:
        self.calls.append(seconds)


def _make_handler(statuses: list[int], headers_by_attempt: list[dict[str, str]] | None = None):
    attempt = {"count": 0}

    async def handler(request: httpx.Request) -> httpx.Response:
        index = attempt["count"]
        attempt["count"] += 1
        status = statuses[min(index, len(statuses) - 1)]
        headers = {}
        if headers_by_attempt is not None and index < len(headers_by_attempt):
            headers = headers_by_attempt[index]
        return httpx.Response(status, request=request, headers=headers, json={"status": status})

    return handler, attempt


@pytest.mark.asyncio
async def test_retry_on_429_honours_retry_after() -> None:
    handler, attempt = _make_handler([429, 200], headers_by_attempt=[{"retry-after": "7"}, {}])
    sleep = SleepRecorder()
    transport = RetryTransport(httpx.MockTransport(handler), max_retries=2, sleep=sleep)

    async with httpx.AsyncClient(transport=transport) as client:
        response = await client.get("https://oauth2.example.com/userinfo")

    assert response.status_code == 200
    assert attempt["count"] == 2
    assert sleep.calls == [7]


@pytest.mark.asyncio
async def test_retry_on_500_backs_off() -> None:
    handler, attempt = _make_handler([500, 502, 200])
    sleep = SleepRecorder()
    transport = RetryTransport(httpx.MockTransport(handler), max_retries=2, sleep=sleep)

    async with httpx.AsyncClient(transport=transport) as client:
        response = await client.get("https://oauth2.example.com/userinfo")

    assert response.status_code == 200
    assert attempt["count"] == 3
    assert sleep.calls == [1, 2]


@pytest.mark.asyncio
async def test_gives_up_after_max_retries() -> None:
    handler, attempt = _make_handler([503])
    sleep = SleepRecorder()
    transport = RetryTransport(httpx.MockTransport(handler), max_retries=1, sleep=sleep)

    async with httpx.AsyncClient(transport=transport) as client:
        response = await client.get("https://oauth2.example.com/userinfo")

    assert response.status_code == 503
    assert attempt["count"] == 2


@pytest.mark.asyncio
async def test_no_retry_when_disabled() -> None:
    handler, attempt = _make_handler([500, 200])
    sleep = SleepRecorder()
    transport = RetryTransport(httpx.MockTransport(handler), max_retries=0, sleep=sleep)

    async with httpx.AsyncClient(transport=transport) as client:
        response = await client.get("https://oauth2.example.com/userinfo")

    assert response.status_code == 500
    assert attempt["count"] == 1
    assert sleep.calls == []


@pytest.mark.asyncio
async def test_no_retry_on_400() -> None:
    handler, attempt = _make_handler([400, 200])
    transport = RetryTransport(httpx.MockTransport(handler), max_retries=2, sleep=SleepRecorder())

    async with httpx.AsyncClient(transport=transport) as client:
        response = await client.post("https://oauth2.example.com/token")

    assert response.status_code == 400
    assert attempt["count"] == 1


def test_retry_after_http_date() -> None:
    now = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    assert _seconds_from_retry_after("Mon, 01 Jan 2024 12:00:30 GMT", now=now) == 30


def test_retry_after_invalid() -> None:
    assert _seconds_from_retry_after("soon") is None
    assert _seconds_from_retry_after(None) is None


@pytest.mark.asyncio
async def test_build_http_client_logs_and_returns_response() -> None:
    handler, attempt = _make_handler([404])
    client = build_http_client(transport=httpx.MockTransport(handler), max_retries=0)

    async with client:
        response = await client.get("https://oauth2.example.com/userinfo?access_token=secret")

    assert response.status_code == 404
    assert attempt["count"] == 1


@pytest.mark.asyncio
async def test_post_is_not_retried() -> None:
    handler, attempt = _make_handler([503, 200])
    sleep = SleepRecorder()
    transport = RetryTransport(httpx.MockTransport(handler), max_retries=2, sleep=sleep)

    async with httpx.AsyncClient(transport=transport) as client:
        response = await client.post("https://oauth2.example.com/token", data={"code": "c"})

    assert response.status_code == 503
    assert attempt["count"] == 1
    assert sleep.calls == []
