"""Console logging tagged with the current request id"""

import contextvars
import json
import uuid
from typing import Any, Optional

_request_id: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "request_id", default=None
)


def new_request_id() -> str:
    return uuid.uuid4().hex[:12]


def bind_request_id(request_id: str) -> contextvars.Token:
    return _request_id.set(request_id)


def reset_request_id(token: contextvars.Token) -> None:
    _request_id.reset(token)


def current_request_id() -> Optional[str]:
    return _request_id.get()


def log_step(scope: str, message: str, /, **details: Any) -> None:
    """
    Print one log line: `[req-id] [SCOPE] message - {details}`.
    Never pass credentials in details.
    """
    rid = _request_id.get() or "-"
    suffix = f" - {json.dumps(details, ensure_ascii=False, default=str)}" if details else ""
    print(f"[{rid}] [{scope}] {message}{suffix}")
