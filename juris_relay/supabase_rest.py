"""Supabase REST calls made with the service role key"""

from typing import Any, Dict, List

from juris_relay.config import settings
from juris_relay.errors import RelayError
from juris_relay.logs import log_step
from juris_relay.upstream import http_client, send_with_retry


def _headers(bearer: str) -> Dict[str, str]:
    return {
        "apikey": settings.SUPABASE_SERVICE_ROLE_KEY,
        "Authorization": f"Bearer {bearer}",
        "Content-Type": "application/json",
    }


def _base() -> str:
    return settings.SUPABASE_URL.rstrip("/")


def bearer_token(authorization: str) -> str:
    """Strip the `Bearer ` prefix, 401 when the header is absent"""
    if not authorization:
        raise RelayError(401, "Cabeçalho de autorização não fornecido")
    token = authorization[7:] if authorization.lower().startswith("bearer ") else authorization
    if not token.strip():
        raise RelayError(401, "Cabeçalho de autorização não fornecido")
    return token.strip()


async def get_user(access_token: str) -> Dict[str, Any]:
    """Resolve a user access token through Supabase Auth"""
    async with http_client() as client:
        response = await send_with_retry(
            client, "GET", f"{_base()}/auth/v1/user", headers=_headers(access_token)
        )

    if response.status_code != 200:
        raise RelayError(401, f"Erro de autenticação: {response.status_code}", details=response.text[:500])

    user = response.json()
    if not user.get("email"):
        raise RelayError(401, "Usuário não autenticado ou email não disponível")
    return user


async def call_rpc(function: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
    async with http_client() as client:
        response = await send_with_retry(
            client,
            "POST",
            f"{_base()}/rest/v1/rpc/{function}",
            headers=_headers(settings.SUPABASE_SERVICE_ROLE_KEY),
            json=params,
        )

    if response.status_code != 200:
        raise Exception(f"Supabase RPC {function} error: {response.status_code} - {response.text[:300]}")
    return response.json()


async def select_all(table: str) -> List[Dict[str, Any]]:
    log_step("SUPABASE", "📥 Selecting all rows", table=table)
    async with http_client() as client:
        response = await send_with_retry(
            client,
            "GET",
            f"{_base()}/rest/v1/{table}",
            params={"select": "*"},
            headers=_headers(settings.SUPABASE_SERVICE_ROLE_KEY),
        )

    if response.status_code != 200:
        raise Exception(f"Supabase select on {table} error: {response.status_code} - {response.text[:300]}")
    return response.json()
