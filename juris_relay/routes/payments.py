"""Subscription checkout and customer portal via the Stripe REST API"""

from fastapi import APIRouter, Header
from pydantic import BaseModel
from typing import Any, Dict, Optional
import uuid

from juris_relay import supabase_rest as supabase
from juris_relay.config import settings
from juris_relay.errors import RelayError, require_feature
from juris_relay.logs import log_step
from juris_relay.upstream import http_client, send_with_retry

router = APIRouter()


class CheckoutRequest(BaseModel):
    priceId: Optional[str] = None


def _stripe_headers(method: str) -> Dict[str, str]:
    headers = {"Authorization": f"Bearer {settings.STRIPE_SECRET_KEY}"}
    # One key per logical call, so a retried POST cannot create a second session
    if method == "POST":
        headers["Idempotency-Key"] = uuid.uuid4().hex
    return headers


async def _stripe(method: str, path: str, **kwargs) -> Dict[str, Any]:
    async with http_client() as client:
        response = await send_with_retry(
            client, method, f"{settings.STRIPE_API_BASE}{path}", headers=_stripe_headers(method), **kwargs
        )

    data = response.json()
    if response.status_code != 200:
        error = data.get("error") if isinstance(data, dict) else None
        message = (error or {}).get("message") or response.text[:300]
        raise Exception(f"Stripe error ({response.status_code}): {message}")
    return data


async def find_customer_id(email: str) -> Optional[str]:
    """Existing Stripe customer for this email, if any"""
    data = await _stripe("GET", "/v1/customers", params={"email": email, "limit": 1})
    customers = data.get("data", [])
    return customers[0]["id"] if customers else None


async def _authenticated_email(authorization: str) -> str:
    token = supabase.bearer_token(authorization)
    try:
        user = await supabase.get_user(token)
    except RelayError:
        raise
    except Exception as e:
        log_step("PAYMENTS", "❌ Falha ao consultar Supabase Auth", error=str(e))
        raise RelayError(500, f"Erro de autenticação: {e}")
    log_step("PAYMENTS", "Usuário autenticado", userId=user.get("id"))
    return user["email"]


@router.post("/create-checkout")
async def create_checkout(
    request: Optional[CheckoutRequest] = None,
    authorization: str = Header(default=""),
    origin: str = Header(default=""),
):
    """Create a subscription checkout session and return its URL"""
    require_feature("payments", "Stripe")
    log_step("CREATE-CHECKOUT", "Função iniciada")

    email = await _authenticated_email(authorization)
    price_id = (request.priceId if request else None) or settings.STRIPE_PRICE_ID
    if not price_id:
        raise RelayError(400, "priceId não informado e STRIPE_PRICE_ID não configurado")
    log_step("CREATE-CHECKOUT", "Usando priceId", priceId=price_id)

    site = origin or settings.DEFAULT_ORIGIN
    try:
        customer_id = await find_customer_id(email)
        form = {
            "line_items[0][price]": price_id,
            "line_items[0][quantity]": "1",
            "mode": "subscription",
            "success_url": f"{site}/assinatura/sucesso",
            "cancel_url": f"{site}/assinatura/cancelado",
            "allow_promotion_codes": "true",
        }
        if customer_id:
            log_step("CREATE-CHECKOUT", "Cliente existente encontrado", customerId=customer_id)
            form["customer"] = customer_id
        else:
            form["customer_email"] = email

        session = await _stripe("POST", "/v1/checkout/sessions", data=form)
        log_step("CREATE-CHECKOUT", "✅ Sessão de checkout criada", sessionId=session.get("id"))
        return {"url": session.get("url")}

    except Exception as e:
        log_step("CREATE-CHECKOUT", "❌ ERRO", error=str(e))
        raise RelayError(500, str(e))


@router.post("/customer-portal")
async def customer_portal(
    authorization: str = Header(default=""),
    origin: str = Header(default=""),
):
    """Open a billing portal session for the caller's Stripe customer"""
    require_feature("payments", "Stripe")

    email = await _authenticated_email(authorization)
    site = origin or settings.DEFAULT_ORIGIN
    try:
        customer_id = await find_customer_id(email)
    except Exception as e:
        log_step("CUSTOMER-PORTAL", "❌ ERRO", error=str(e))
        raise RelayError(500, str(e))

    if not customer_id:
        raise RelayError(404, "Nenhum cliente Stripe encontrado para este usuário")

    try:
        session = await _stripe(
            "POST",
            "/v1/billing_portal/sessions",
            data={"customer": customer_id, "return_url": f"{site}/assinatura"},
        )
        log_step("CUSTOMER-PORTAL", "✅ Sessão do portal criada", customerId=customer_id)
        return {"url": session.get("url")}

    except Exception as e:
        log_step("CUSTOMER-PORTAL", "❌ ERRO", error=str(e))
        raise RelayError(500, str(e))
