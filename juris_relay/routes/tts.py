"""Text-to-speech proxy to Google Cloud TTS"""

from fastapi import APIRouter
from pydantic import BaseModel
from typing import Optional

from juris_relay.config import settings
from juris_relay.errors import RelayError, require_feature
from juris_relay.logs import log_step
from juris_relay.upstream import http_client, send_with_retry

router = APIRouter()

TTS_URL = "https://texttospeech.googleapis.com/v1/text:synthesize"

VOICE = {
    "languageCode": "pt-BR",
    "name": "pt-BR-Standard-A",
    "ssmlGender": "FEMALE",
}


class TextToSpeechRequest(BaseModel):
    text: Optional[str] = None


@router.post("/text-to-speech")
async def text_to_speech(request: TextToSpeechRequest):
    """Synthesize Portuguese speech, returned as base64 MP3"""
    require_feature("tts", "Google TTS")

    if not request.text or not request.text.strip():
        raise RelayError(400, "O texto é obrigatório")

    log_step("TTS", "🔊 Synthesizing", length=len(request.text))

    try:
        async with http_client() as client:
            response = await send_with_retry(
                client,
                "POST",
                TTS_URL,
                params={"key": settings.GOOGLE_TTS_API_KEY},
                json={
                    "input": {"text": request.text},
                    "voice": VOICE,
                    "audioConfig": {"audioEncoding": "MP3"},
                },
            )
    except Exception as e:
        log_step("TTS", "❌ TTS error", error=str(e))
        raise RelayError(500, f"Text-to-speech failed: {e}")

    if response.status_code != 200:
        try:
            message = (response.json().get("error") or {}).get("message")
        except (ValueError, AttributeError):
            message = None
        log_step("TTS", "❌ Google TTS error", status=response.status_code)
        raise RelayError(400, message or "Falha ao gerar áudio")

    try:
        audio = response.json()["audioContent"]
    except (ValueError, KeyError, TypeError) as e:
        log_step("TTS", "❌ Unexpected Google TTS response", error=str(e))
        raise RelayError(500, "Resposta inválida do serviço de voz", details=response.text[:300])

    return {"audioContent": audio}
