"""Video transcript fetch from the public YouTube watch page"""

from fastapi import APIRouter
from pydantic import BaseModel
from typing import Any, Dict, List, Optional
from bs4 import BeautifulSoup
import html
import json
import re

from juris_relay.errors import RelayError
from juris_relay.logs import log_step
from juris_relay.upstream import http_client, send_with_retry

router = APIRouter()

WATCH_URL = "https://www.youtube.com/watch"
VIDEO_ID_RE = re.compile(r"^[A-Za-z0-9_-]{11}$")
PREFERRED_LANGUAGES = ("pt", "pt-BR", "pt-PT")


class TranscriptRequest(BaseModel):
    videoId: Optional[str] = None


def extract_caption_tracks(page: str) -> List[Dict[str, Any]]:
    """Pull the `captionTracks` JSON array out of the watch page markup"""
    marker = '"captionTracks":'
    start = page.find(marker)
    if start == -1:
        return []
    try:
        tracks, _ = json.JSONDecoder().raw_decode(page, start + len(marker))
    except json.JSONDecodeError:
        return []
    return [t for t in tracks if isinstance(t, dict) and t.get("baseUrl")]


def pick_track(tracks: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Portuguese track when there is one, otherwise the first listed"""
    for lang in PREFERRED_LANGUAGES:
        for track in tracks:
            if track.get("languageCode") == lang:
                return track
    return tracks[0] if tracks else None


def captions_to_text(xml: str) -> str:
    """Flatten timedtext XML into a single line of text"""
    soup = BeautifulSoup(xml, "html.parser")
    parts = [html.unescape(node.get_text()) for node in soup.find_all("text")]
    text = " ".join(p.strip() for p in parts if p.strip())
    return re.sub(r"\s+", " ", text).strip()


def page_description(page: str) -> str:
    soup = BeautifulSoup(page, "html.parser")
    meta = soup.find("meta", attrs={"property": "og:description"}) or soup.find("meta", attrs={"name": "description"})
    return (meta.get("content") or "").strip() if meta else ""


@router.post("/fetch-video-transcript")
async def fetch_video_transcript(request: TranscriptRequest):
    """Caption text for a video, falling back to its page description"""

    if not request.videoId:
        raise RelayError(400, "videoId is required")
    if not VIDEO_ID_RE.match(request.videoId):
        raise RelayError(400, "videoId inválido")

    log_step("TRANSCRIPT", "🎬 Fetching transcript", videoId=request.videoId)

    try:
        async with http_client() as client:
            response = await send_with_retry(
                client,
                "GET",
                WATCH_URL,
                params={"v": request.videoId, "hl": "pt-BR"},
                headers={"User-Agent": "Mozilla/5.0 (JurisRelay/1.0)", "Accept-Language": "pt-BR,pt;q=0.9"},
                follow_redirects=True,
            )
            if response.status_code != 200:
                raise RelayError(
                    response.status_code,
                    f"Failed to fetch video page: {response.status_code}",
                )
            page = response.text

            track = pick_track(extract_caption_tracks(page))
            if track:
                captions = await send_with_retry(client, "GET", track["baseUrl"], follow_redirects=True)
                if captions.status_code == 200:
                    transcript = captions_to_text(captions.text)
                    if transcript:
                        log_step("TRANSCRIPT", "✅ Captions found",
                                 language=track.get("languageCode"), length=len(transcript))
                        return {
                            "videoId": request.videoId,
                            "transcript": transcript,
                            "source": "captions",
                            "language": track.get("languageCode"),
                        }
                log_step("TRANSCRIPT", "⚠️ Caption track unusable", status=captions.status_code)

    except RelayError:
        raise
    except Exception as e:
        log_step("TRANSCRIPT", "❌ Transcript error", error=str(e))
        raise RelayError(500, f"Transcript fetch failed: {e}")

    description = page_description(page)
    if not description:
        raise RelayError(404, "Nenhuma transcrição disponível para este vídeo")

    log_step("TRANSCRIPT", "📝 Using page description as fallback", length=len(description))
    return {
        "videoId": request.videoId,
        "transcript": description,
        "source": "description",
        "language": None,
    }
