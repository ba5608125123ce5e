"""Vade Mecum legal code table queries"""

from fastapi import APIRouter
from pydantic import BaseModel
from typing import Optional

from juris_relay import supabase_rest as supabase
from juris_relay.errors import RelayError, require_feature
from juris_relay.logs import log_step

router = APIRouter()

# Only these tables may be read through the relay
ALLOWED_TABLES = frozenset([
    "Código_Civil",
    "Código_Penal",
    "Código_de_Processo_Civil",
    "Código_de_Processo_Penal",
    "Código_de_Defesa_do_Consumidor",
    "Código_Tributário_Nacional",
    "Código_Comercial",
    "Código_Eleitoral",
    "Código_de_Trânsito_Brasileiro",
    "Código_Brasileiro_de_Telecomunicações",
    "Estatuto_da_Criança_e_do_Adolescente",
    "Estatuto_do_Idoso",
    "Estatuto_da_Terra",
    "Estatuto_da_Cidade",
    "Estatuto_da_Advocacia_e_da_OAB",
    "Estatuto_do_Desarmamento",
    "Estatuto_do_Torcedor",
    "Estatuto_da_Igualdade_Racial",
    "Estatuto_da_Pessoa_com_Deficiência",
    "Estatuto_dos_Servidores_Públicos_Civis_da_União",
    "Constituicao_Federal",
    "Constituição_Federal",
])


class VadeMecumRequest(BaseModel):
    table_name: Optional[str] = None


@router.post("/query-vademecum-table")
async def query_vademecum_table(request: VadeMecumRequest):
    """All articles of one legal code table, RPC first, plain select as fallback"""
    require_feature("vademecum", "Supabase")

    table = request.table_name
    if not table or table not in ALLOWED_TABLES:
        log_step("VADEMECUM", "❌ Invalid or disallowed table name", table=table)
        raise RelayError(400, "Nome da tabela inválido ou não permitido")

    log_step("VADEMECUM", "📚 Querying table", table=table)

    try:
        rows = await supabase.call_rpc("query_vademecum_table", {"table_name": table})
        if rows:
            log_step("VADEMECUM", "✅ Retrieved via RPC", table=table, count=len(rows))
            return rows
        log_step("VADEMECUM", "RPC returned no rows, falling back to direct query", table=table)
    except Exception as e:
        log_step("VADEMECUM", "⚠️ RPC failed, falling back to direct query", table=table, error=str(e))

    try:
        rows = await supabase.select_all(table)
    except Exception as e:
        log_step("VADEMECUM", "❌ Error querying table", table=table, error=str(e))
        raise RelayError(500, str(e))

    log_step("VADEMECUM", "✅ Retrieved via select", table=table, count=len(rows))
    return rows
