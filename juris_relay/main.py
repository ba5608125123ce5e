"""
Juris Relay - Main Application
FastAPI server relaying the study platform's calls to third-party APIs
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import uvicorn

from juris_relay.config import settings, validate_settings
from juris_relay.errors import RelayError, relay_error_handler, validation_error_handler
from juris_relay.logs import bind_request_id, log_step, new_request_id, reset_request_id
from juris_relay.routes import ai_content, datajud, health, payments, transcript, tts, vademecum

# Create FastAPI app
app = FastAPI(
    title="Juris Relay",
    description="Search proxy and serverless-style relays for the legal studies platform",
    version="1.0.0"
)

app.add_exception_handler(RelayError, relay_error_handler)
app.add_exception_handler(RequestValidationError, validation_error_handler)

# CORS Configuration
def is_allowed_origin(origin: str) -> bool:
    if not origin:
        return True

    # Allow localhost variations
    if origin.startswith("http://localhost") or origin.startswith("http://127.0.0.1"):
        return True

    if settings.ALLOW_ALL_ORIGINS:
        return True

    # Check allowlist
    return origin in settings.CORS_ORIGINS

# Custom CORS middleware so preflights never reach the routes
@app.middleware("http")
async def cors_middleware(request: Request, call_next):
    origin = request.headers.get("origin", "")

    # Handle preflight
    if request.method == "OPTIONS":
        response = JSONResponse(content={})
        response.headers["Access-Control-Allow-Origin"] = origin if is_allowed_origin(origin) else ""
        response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
        response.headers["Access-Control-Allow-Headers"] = "authorization, x-client-info, apikey, content-type, x-request-id"
        response.headers["Access-Control-Allow-Credentials"] = "true"
        return response

    response = await call_next(request)

    if origin and is_allowed_origin(origin):
        response.headers["Access-Control-Allow-Origin"] = origin
        response.headers["Access-Control-Allow-Credentials"] = "true"
        response.headers["Access-Control-Expose-Headers"] = "X-Request-ID"

    return response

# Correlation id for every log line and error body of a request
@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    request_id = request.headers.get("x-request-id") or new_request_id()
    token = bind_request_id(request_id)
    try:
        response = await call_next(request)
    finally:
        reset_request_id(token)
    response.headers["X-Request-ID"] = request_id
    return response

# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(datajud.router, tags=["Jurisprudence Search"])
app.include_router(payments.router, tags=["Payments"])
app.include_router(ai_content.router, tags=["AI Content"])
app.include_router(transcript.router, tags=["Video Transcript"])
app.include_router(vademecum.router, tags=["Vade Mecum"])
app.include_router(tts.router, tags=["Text to Speech"])

# Startup event
@app.on_event("startup")
async def startup_event():
    validate_settings()
    print(f"""
🚀 Juris Relay v1.0
   Running at http://localhost:{settings.PORT}

🔍 Datajud: {settings.DATAJUD_BASE_URL}
⏱️ Upstream timeout: {settings.UPSTREAM_TIMEOUT}s per phase, {settings.UPSTREAM_DEADLINE}s total, retries on transport errors: {settings.UPSTREAM_RETRIES}

📡 Available endpoints:
   GET  /health                       - Health check
   POST /search                       - Datajud search proxy (also /api/datajud/search)
   POST /create-checkout              - Stripe subscription checkout
   POST /customer-portal              - Stripe billing portal
   POST /legal-assistant              - Legal assistant (Gemini)
   POST /generate-curriculum-content  - Curriculum study content (Gemini)
   POST /generate-redacao-content     - Legal writing content (Gemini)
   POST /video-assistant              - Video lesson assistant (Gemini)
   POST /fetch-video-transcript       - YouTube captions
   POST /query-vademecum-table        - Legal code tables
   POST /text-to-speech               - Google TTS

✅ Server ready!
""")

# Shutdown event
@app.on_event("shutdown")
async def shutdown_event():
    log_step("SERVER", "🛑 Gracefully shutting down server...")


if __name__ == "__main__":
    uvicorn.run("juris_relay.main:app", host="0.0.0.0", port=settings.PORT)
