"""Relay error type and the JSON handlers registered on the app"""

from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from juris_relay.config import missing_keys
from juris_relay.logs import current_request_id


class RelayError(Exception):
    """An error that already knows its HTTP status and JSON body"""

    def __init__(self, status_code: int, error: str, **extra: Any):
        super().__init__(error)
        self.status_code = status_code
        self.payload: Dict[str, Any] = {"error": error, **extra}


def require_feature(feature: str, label: Optional[str] = None) -> None:
    """Raise 503 when the settings a feature needs are not configured"""
    missing = missing_keys(feature)
    if missing:
        raise RelayError(503, f"{label or feature} not configured on server", missing=missing)


def _with_request_id(payload: Dict[str, Any]) -> Dict[str, Any]:
    body = dict(payload)
    rid = current_request_id()
    if rid:
        body["request_id"] = rid
    return body


async def relay_error_handler(request: Request, exc: RelayError):
    return JSONResponse(status_code=exc.status_code, content=_with_request_id(exc.payload))


async def validation_error_handler(request: Request, exc: RequestValidationError):
    details = [
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}"
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content=_with_request_id({"error": "Requisição inválida", "details": details}),
    )
