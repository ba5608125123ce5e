import os
from typing import Callable, List, Optional

os.environ.setdefault("DATAJUD_API_KEY", "test-datajud-key")

import httpx
import pytest
from fastapi.testclient import TestClient

from juris_relay import upstream
from juris_relay.config import settings
from juris_relay.main import app


class RecordingUpstream:
    """MockTransport handler that records requests and delegates to `handler`"""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.handler: Optional[Callable[[httpx.Request], httpx.Response]] = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.handler is None:
            raise AssertionError(f"unexpected upstream call: {request.method} {request.url}")
        return self.handler(request)


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def remote(monkeypatch):
    recorder = RecordingUpstream()
    monkeypatch.setattr(upstream, "transport", httpx.MockTransport(recorder))
    return recorder


@pytest.fixture
def configured(monkeypatch):
    values = {
        "DATAJUD_API_KEY": "test-datajud-key",
        "DATAJUD_BASE_URL": "https://datajud.test",
        "STRIPE_SECRET_KEY": "sk_test_123",
        "STRIPE_PRICE_ID": "price_default",
        "STRIPE_API_BASE": "https://stripe.test",
        "SUPABASE_URL": "https://supabase.test",
        "SUPABASE_SERVICE_ROLE_KEY": "service-role",
        "GEMINI_API_KEY": "gemini-key",
        "GOOGLE_TTS_API_KEY": "tts-key",
        "UPSTREAM_RETRIES": 1,
    }
    for name, value in values.items():
        monkeypatch.setattr(settings, name, value)
    return settings
