import json

import httpx


def test_tts_returns_audio(client, configured, remote):
    remote.handler = lambda request: httpx.Response(200, json={"audioContent": "SUQz"})

    resp = client.post("/text-to-speech", json={"text": "Art. 5º"})

    assert resp.status_code == 200
    assert resp.json() == {"audioContent": "SUQz"}
    sent = remote.requests[0]
    assert sent.url.params["key"] == "tts-key"
    payload = json.loads(sent.content)
    assert payload["voice"]["languageCode"] == "pt-BR"
    assert payload["audioConfig"]["audioEncoding"] == "MP3"


def test_tts_upstream_error_message(client, configured, remote):
    remote.handler = lambda request: httpx.Response(403, json={"error": {"message": "API key invalid"}})

    resp = client.post("/text-to-speech", json={"text": "olá"})

    assert resp.status_code == 400
    assert resp.json()["error"] == "API key invalid"


def test_tts_requires_text(client, configured, remote):
    resp = client.post("/text-to-speech", json={"text": " "})

    assert resp.status_code == 400
    assert resp.json()["error"] == "O texto é obrigatório"
    assert remote.requests == []


def test_tts_non_json_success_is_json_500(client, configured, remote):
    remote.handler = lambda request: httpx.Response(200, text="<html>captive portal</html>")

    resp = client.post("/text-to-speech", json={"text": "olá"})

    assert resp.status_code == 500
    assert resp.headers["content-type"].startswith("application/json")
    assert "error" in resp.json()


def test_tts_success_without_audio_is_500(client, configured, remote):
    remote.handler = lambda request: httpx.Response(200, json=[{"unexpected": True}])

    resp = client.post("/text-to-speech", json={"text": "olá"})

    assert resp.status_code == 500
