import json

import httpx

from juris_relay.routes import transcript

VIDEO_ID = "dQw4w9WgXcQ"

TRACKS = [
    {"baseUrl": "https://www.youtube.com/api/timedtext?v=x&lang=en", "languageCode": "en",
     "name": {"runs": [{"text": "English"}]}},
    {"baseUrl": "https://www.youtube.com/api/timedtext?v=x&lang=pt", "languageCode": "pt",
     "name": {"runs": [{"text": "Português"}]}},
]

CAPTIONS_XML = (
    '<?xml version="1.0" encoding="utf-8" ?><transcript>'
    '<text start="0" dur="2.1">Bom dia, pessoal.</text>'
    '<text start="2.1" dur="3">Hoje falamos de &amp;#39;habeas corpus&amp;#39;.</text>'
    "</transcript>"
)


def _page(tracks=None, description="Aula de processo penal"):
    player = ""
    if tracks is not None:
        player = '<script>var ytInitialPlayerResponse = {"captions":{"playerCaptionsTracklistRenderer":' \
                 '{"captionTracks":' + json.dumps(tracks) + ',"audioTracks":[]}}};</script>'
    meta = f'<meta property="og:description" content="{description}">' if description else ""
    return f"<html><head>{meta}</head><body>{player}</body></html>"


def test_extract_caption_tracks_handles_nested_arrays():
    tracks = transcript.extract_caption_tracks(_page(TRACKS))

    assert [t["languageCode"] for t in tracks] == ["en", "pt"]


def test_extract_caption_tracks_absent():
    assert transcript.extract_caption_tracks(_page()) == []


def test_pick_track_prefers_portuguese():
    assert transcript.pick_track(TRACKS)["languageCode"] == "pt"
    assert transcript.pick_track(TRACKS[:1])["languageCode"] == "en"
    assert transcript.pick_track([]) is None


def test_captions_to_text_unescapes():
    assert transcript.captions_to_text(CAPTIONS_XML) == "Bom dia, pessoal. Hoje falamos de 'habeas corpus'."


def test_fetch_transcript_from_captions(client, remote):
    def handle(request):
        if request.url.path == "/watch":
            return httpx.Response(200, text=_page(TRACKS))
        assert request.url.params["lang"] == "pt"
        return httpx.Response(200, text=CAPTIONS_XML)
    remote.handler = handle

    resp = client.post("/fetch-video-transcript", json={"videoId": VIDEO_ID})

    assert resp.status_code == 200
    body = resp.json()
    assert body["source"] == "captions"
    assert body["language"] == "pt"
    assert body["transcript"].startswith("Bom dia")
    assert remote.requests[0].url.params["v"] == VIDEO_ID


def test_fetch_transcript_falls_back_to_description(client, remote):
    remote.handler = lambda request: httpx.Response(200, text=_page())

    resp = client.post("/fetch-video-transcript", json={"videoId": VIDEO_ID})

    assert resp.status_code == 200
    assert resp.json()["source"] == "description"
    assert resp.json()["transcript"] == "Aula de processo penal"


def test_fetch_transcript_nothing_available_is_404(client, remote):
    remote.handler = lambda request: httpx.Response(200, text=_page(description=""))

    resp = client.post("/fetch-video-transcript", json={"videoId": VIDEO_ID})

    assert resp.status_code == 404


def test_fetch_transcript_validates_video_id(client, remote):
    assert client.post("/fetch-video-transcript", json={}).status_code == 400
    assert client.post("/fetch-video-transcript", json={"videoId": "../../etc"}).status_code == 400
    assert remote.requests == []


def test_fetch_transcript_page_error_passes_status(client, remote):
    remote.handler = lambda request: httpx.Response(429, text="slow down")

    resp = client.post("/fetch-video-transcript", json={"videoId": VIDEO_ID})

    assert resp.status_code == 429
