from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    # Datajud (jurisprudence search)
    DATAJUD_API_KEY: str = ""
    DATAJUD_BASE_URL: str = "https://api-publica.datajud.cnj.jus.br"

    # Outbound calls
    UPSTREAM_TIMEOUT: float = 20.0
    UPSTREAM_RETRIES: int = 1
    UPSTREAM_DEADLINE: float = 30.0

    # Payments
    STRIPE_SECRET_KEY: str = ""
    STRIPE_PRICE_ID: str = ""
    STRIPE_API_BASE: str = "https://api.stripe.com"

    # Supabase (auth + legal code tables)
    SUPABASE_URL: str = ""
    SUPABASE_SERVICE_ROLE_KEY: str = ""

    # Google
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.0-flash"
    GOOGLE_TTS_API_KEY: str = ""

    # Server
    PORT: int = 3500
    DEFAULT_ORIGIN: str = "http://localhost:8080"
    ALLOW_ALL_ORIGINS: bool = False

    # CORS
    CORS_ORIGINS: List[str] = [
        "http://localhost:8080",
        "http://localhost:5173",
        "http://127.0.0.1:8080",
    ]

    class Config:
        env_file = ".env"
        extra = "allow"

settings = Settings()


# Features that stay disabled (503) until their keys are configured
OPTIONAL_KEYS = {
    "payments": ["STRIPE_SECRET_KEY", "SUPABASE_URL", "SUPABASE_SERVICE_ROLE_KEY"],
    "ai": ["GEMINI_API_KEY"],
    "vademecum": ["SUPABASE_URL", "SUPABASE_SERVICE_ROLE_KEY"],
    "tts": ["GOOGLE_TTS_API_KEY"],
}


def missing_keys(feature: str) -> List[str]:
    """Names of the settings a feature needs that are still empty"""
    return [name for name in OPTIONAL_KEYS[feature] if not getattr(settings, name)]


# Validate required settings
def validate_settings():
    """
    Refuse to start without the Datajud key; the search proxy must never
    forward an empty credential. Other integrations only get reported.
    """
    if not settings.DATAJUD_API_KEY:
        raise RuntimeError("DATAJUD_API_KEY is not set; refusing to start the search proxy")

    disabled = [feature for feature in OPTIONAL_KEYS if missing_keys(feature)]
    if disabled:
        print(f"⚠️ Integrations disabled (missing keys): {', '.join(disabled)}")
    else:
        print("✅ All environment variables are set")
