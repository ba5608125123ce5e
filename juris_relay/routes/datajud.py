"""Datajud jurisprudence search proxy"""

from fastapi import APIRouter, Response
from pydantic import AliasChoices, BaseModel, Field
from typing import Any, Dict, Optional

from juris_relay.config import settings
from juris_relay.errors import RelayError
from juris_relay.logs import log_step
from juris_relay.upstream import http_client, send_with_retry

router = APIRouter()

RESULT_LIMIT = 50
INDEX_PREFIX = "api_publica_"

_UFS = [
    "ac", "al", "am", "ap", "ba", "ce", "df", "es", "go", "ma", "mg", "ms", "mt", "pa",
    "pb", "pe", "pi", "pr", "rj", "rn", "ro", "rr", "rs", "sc", "se", "sp", "to",
]

# Public Datajud indexes, by tribunal code
TRIBUNAIS = frozenset(
    ["tst", "tse", "stj", "stm"]
    + [f"trf{n}" for n in range(1, 7)]
    + ["tjdft"] + [f"tj{uf}" for uf in _UFS if uf != "df"]
    + [f"trt{n}" for n in range(1, 25)]
    + [f"tre-{uf}" for uf in _UFS]
    + ["tjmmg", "tjmrs", "tjmsp"]
)


class DatajudSearchRequest(BaseModel):
    target_collection: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("target_collection", "tribunal")
    )
    query_term: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("query_term", "termo")
    )
    # Accepted but not applied to the query
    filters: Optional[Dict[str, Any]] = Field(
        default=None, validation_alias=AliasChoices("filters", "filtros")
    )


def resolve_index(target_collection: str) -> str:
    """
    Map a tribunal code (`trt1`) or index alias (`api_publica_trt1`) to the
    index alias, rejecting anything off the allow-list.
    """
    code = target_collection.strip().lower()
    if code.startswith(INDEX_PREFIX):
        code = code[len(INDEX_PREFIX):]
    if code not in TRIBUNAIS:
        raise RelayError(400, f"Tribunal não permitido: {target_collection}")
    return f"{INDEX_PREFIX}{code}"


def build_search_query(query_term: str) -> Dict[str, Any]:
    """Fuzzy match over every field; ties broken by most recent first"""
    return {
        "size": RESULT_LIMIT,
        "query": {
            "multi_match": {
                "query": query_term,
                "fields": ["*"],
                "type": "best_fields",
                "fuzziness": "AUTO",
            }
        },
        "sort": [
            {"_score": {"order": "desc"}},
            {"@timestamp": {"order": "desc"}},
        ],
    }


def hit_count(data: Any) -> int:
    """`hits.total` is an object on ES 7+ and a bare number before that"""
    hits = data.get("hits") if isinstance(data, dict) else None
    if not isinstance(hits, dict):
        return 0
    total = hits.get("total", 0)
    if isinstance(total, dict):
        total = total.get("value", 0)
    return total if isinstance(total, int) else 0


@router.post("/search")
@router.post("/api/datajud/search")
async def datajud_search(request: DatajudSearchRequest):
    """Proxy a jurisprudence search to the Datajud public API"""

    if not request.target_collection or not request.target_collection.strip():
        raise RelayError(400, "Campo obrigatório ausente: target_collection")
    if not request.query_term or not request.query_term.strip():
        raise RelayError(400, "Campo obrigatório ausente: query_term")

    index = resolve_index(request.target_collection)
    url = f"{settings.DATAJUD_BASE_URL.rstrip('/')}/{index}/_search"
    query_body = build_search_query(request.query_term)

    log_step("DATAJUD", "🔍 Consultando API Datajud", url=url)
    log_step("DATAJUD", "Termo de busca", termo=request.query_term)
    if request.filters:
        log_step("DATAJUD", "⚠️ Filtros recebidos e ignorados", keys=sorted(request.filters))

    try:
        async with http_client() as client:
            response = await send_with_retry(
                client,
                "POST",
                url,
                headers={
                    "Authorization": f"APIKey {settings.DATAJUD_API_KEY}",
                    "Content-Type": "application/json",
                },
                json=query_body,
            )

            if not response.is_success:
                log_step("DATAJUD", "❌ Erro da API Datajud",
                         status=response.status_code, body=response.text[:500])
                raise RelayError(
                    response.status_code,
                    f"Erro na API Datajud: {response.status_code}",
                    details=response.text,
                )

            data = response.json()
            log_step("DATAJUD", "✅ Resultados encontrados", total=hit_count(data))

            return Response(content=response.content, status_code=200, media_type="application/json")

    except RelayError:
        raise
    except Exception as e:
        log_step("DATAJUD", "❌ Erro no servidor proxy", error=str(e))
        raise RelayError(500, "Erro interno no servidor proxy", message=str(e))
