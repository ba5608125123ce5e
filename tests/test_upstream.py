import asyncio

import httpx
import pytest

from juris_relay import logs, upstream


def _run(handler, **kwargs):
    async def go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await upstream.send_with_retry(client, "GET", "https://upstream.test/x", **kwargs)
    return asyncio.run(go())


def test_connect_error_is_retried(configured):
    calls = []

    def handler(request):
        calls.append(request)
        if len(calls) == 1:
            raise httpx.ConnectError("refused", request=request)
        return httpx.Response(200, json={"ok": True})

    assert _run(handler).status_code == 200
    assert len(calls) == 2


def test_non_transient_transport_error_is_not_retried(configured):
    calls = []

    def handler(request):
        calls.append(request)
        raise httpx.UnsupportedProtocol("bad scheme", request=request)

    with pytest.raises(httpx.UnsupportedProtocol):
        _run(handler)
    assert len(calls) == 1


def test_retries_zero_sends_once(configured):
    calls = []

    def handler(request):
        calls.append(request)
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(httpx.ReadTimeout):
        _run(handler, retries=0)
    assert len(calls) == 1


def test_total_deadline_bounds_all_attempts(configured):
    async def handler(request):
        await asyncio.sleep(5)
        return httpx.Response(200)

    with pytest.raises(httpx.TimeoutException):
        _run(handler, deadline=0.05)


def test_deadline_overrun_is_500_on_search(client, configured, remote, monkeypatch):
    monkeypatch.setattr(configured, "UPSTREAM_DEADLINE", 0.05)

    async def handler(request):
        await asyncio.sleep(5)
        return httpx.Response(200, json={})
    remote.handler = handler

    resp = client.post("/search", json={"target_collection": "trt1", "query_term": "férias"})

    assert resp.status_code == 500
    assert "deadline" in resp.json()["message"]


def test_log_step_accepts_any_detail_name(capsys):
    token = logs.bind_request_id("rid-1")
    try:
        logs.log_step("PAYMENTS", "❌ ERRO", message="boom", scope="x")
    finally:
        logs.reset_request_id(token)

    line = capsys.readouterr().out.strip()
    assert line.startswith("[rid-1] [PAYMENTS] ❌ ERRO - ")
    assert '"message": "boom"' in line
