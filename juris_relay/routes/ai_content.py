"""Gemini-backed content endpoints: legal assistant, curriculum and essay-writing content, video assistant"""

from fastapi import APIRouter
from pydantic import BaseModel
from typing import Any, Dict, Optional
import asyncio

from google import genai
from google.genai import types
from juris_relay.config import settings
from juris_relay.errors import RelayError, require_feature
from juris_relay.logs import log_step

router = APIRouter()

# Initialize genai client
_client = None

def get_genai_client():
    """Get or create genai client"""
    global _client
    if _client is None:
        _client = genai.Client(
            api_key=settings.GEMINI_API_KEY,
            http_options=types.HttpOptions(timeout=int(settings.UPSTREAM_TIMEOUT * 1000)),
        )
    return _client


EMPTY_CONTENT = "Não foi possível gerar o conteúdo."

ASSISTANT_INSTRUCTIONS = {
    "doubt": "Você é um assistente jurídico especializado em esclarecer dúvidas sobre direito brasileiro. Responda de forma clara e objetiva.",
    "case-analysis": "Você é um assistente jurídico especializado em análise de casos. Analise o caso apresentado considerando a legislação brasileira.",
    "study-plan": "Você é um assistente especializado em criar planos de estudo personalizados para área jurídica.",
}
DEFAULT_INSTRUCTION = "Você é um assistente jurídico especializado em direito brasileiro."

CURRICULUM_PROMPTS = {
    "summary": 'Crie um resumo conciso sobre o tema "{subject}" no contexto de um curso de direito. O resumo deve ser informativo, acadêmico e focado nos pontos principais que os estudantes de direito devem entender sobre este tema. Limite a 200 palavras.',
    "mindmap": 'Crie uma estrutura de mapa mental em formato de texto para o tema "{subject}" no contexto de um curso de direito. Liste os principais conceitos, suas conexões e ramificações. O resultado deve ser um esboço organizado que pode ser transformado em um mapa mental visual.',
    "materials": 'Liste 5 materiais de estudo recomendados (livros, artigos ou recursos online) para estudantes de direito que estejam estudando "{subject}". Para cada item, inclua título, autor/fonte e uma breve descrição de uma linha explicando por que é relevante.',
    "questions": 'Crie 3 questões de múltipla escolha sobre o tema "{subject}" para estudantes de direito, com 4 alternativas cada e a resposta correta indicada. As questões devem testar o conhecimento e compreensão do tema em diferentes níveis.',
}
DEFAULT_CURRICULUM_PROMPT = 'Forneça informações gerais sobre o tema "{subject}" no contexto de um curso de direito.'

REDACAO_PROMPTS = {
    "artigo": """Crie um artigo de redação jurídica sobre o tópico "{topic}".
O artigo deve conter:
- Introdução ao tema
- Fundamentos e conceitos teóricos
- Aspectos práticos e aplicação
- Exemplos relevantes
- Conclusão
Use linguagem formal e técnica apropriada para textos jurídicos.""",
    "modelo": """Crie um modelo de peça jurídica do tipo "{topic}".
O modelo deve:
- Seguir a formatação padrão esperada pelos tribunais
- Incluir todas as seções necessárias
- Usar linguagem jurídica apropriada
- Ter marcadores de [INSERIR_TEXTO] para personalização
Forneça um documento completo que possa ser usado como base.""",
    "dicas": """Forneça dicas precisas de redação jurídica sobre "{topic}".
As dicas devem:
- Ser diretas e aplicáveis
- Focar em aspectos técnicos e formais
- Incluir exemplos curtos do que fazer e o que evitar
- Mencionar erros comuns e como corrigi-los
Organize em formato de lista para fácil consulta.""",
    "exercicio": """Crie um exercício prático de redação jurídica sobre "{topic}".
O exercício deve incluir:
- Contexto e situação hipotética
- Instruções claras sobre o que deve ser redigido
- Critérios de avaliação
- Dicas para uma boa resolução
- Gabarito ou elementos essenciais que deveriam estar na resposta""",
}
DEFAULT_REDACAO_PROMPT = """Crie um conteúdo sobre redação jurídica relacionado a "{topic}".
Seja didático, use linguagem formal e técnica apropriada para textos jurídicos."""

REDACAO_GENERATION = {
    "temperature": 0.7,
    "top_k": 40,
    "top_p": 0.95,
    "max_output_tokens": 2048,
}


class LegalAssistantRequest(BaseModel):
    prompt: Optional[str] = None
    type: Optional[str] = None


class CurriculumContentRequest(BaseModel):
    subject: Optional[str] = None
    contentType: Optional[str] = None


class RedacaoContentRequest(BaseModel):
    topic: Optional[str] = None
    type: Optional[str] = None


class VideoAssistantRequest(BaseModel):
    prompt: Optional[str] = None
    context: Optional[str] = None
    contentType: Optional[str] = None


def curriculum_prompt(subject: str, content_type: str) -> str:
    return CURRICULUM_PROMPTS.get(content_type, DEFAULT_CURRICULUM_PROMPT).format(subject=subject)


def video_prompt(prompt: str, context: Optional[str]) -> str:
    return f"Contexto: {context}\n\nPergunta: {prompt}" if context else prompt


def redacao_prompt(topic: str, content_type: str) -> str:
    return REDACAO_PROMPTS.get(content_type, DEFAULT_REDACAO_PROMPT).format(topic=topic)


async def generate_text(
    prompt: str,
    system_instruction: Optional[str] = None,
    generation: Optional[Dict[str, Any]] = None,
) -> str:
    """
    Single-shot generation on the async client; empty string when the model
    returns nothing. The client carries the per-request timeout, the
    wait_for the overall deadline.
    """
    client = get_genai_client()
    config: Dict[str, Any] = dict(generation or {})
    if system_instruction:
        config["system_instruction"] = system_instruction
    result = await asyncio.wait_for(
        client.aio.models.generate_content(
            model=settings.GEMINI_MODEL,
            contents=prompt,
            config=config or None,
        ),
        timeout=settings.UPSTREAM_DEADLINE,
    )
    return result.text or ""


@router.post("/legal-assistant")
async def legal_assistant(request: LegalAssistantRequest):
    """Answer a legal question with a persona picked by `type`"""
    require_feature("ai", "Gemini")

    if not request.prompt or not request.prompt.strip():
        raise RelayError(400, "prompt is required")

    instruction = ASSISTANT_INSTRUCTIONS.get(request.type or "", DEFAULT_INSTRUCTION)
    log_step("LEGAL-ASSISTANT", "🤖 Gerando resposta", type=request.type)

    try:
        text = await generate_text(request.prompt, instruction)
    except Exception as e:
        log_step("LEGAL-ASSISTANT", "❌ Gemini error", error=str(e))
        raise RelayError(500, str(e))

    return {"text": text, "type": request.type}


@router.post("/generate-curriculum-content")
async def generate_curriculum_content(request: CurriculumContentRequest):
    """Study material for a curriculum subject"""
    require_feature("ai", "Gemini")

    if not request.subject or not request.contentType:
        raise RelayError(400, "Missing required parameters")

    log_step("CURRICULUM", "Calling Gemini API", subject=request.subject, contentType=request.contentType)

    try:
        content = await generate_text(curriculum_prompt(request.subject, request.contentType))
    except Exception as e:
        log_step("CURRICULUM", "❌ Gemini error", error=str(e))
        raise RelayError(500, "Failed to get content from Gemini API", details=str(e))

    return {"content": content or EMPTY_CONTENT}


@router.post("/generate-redacao-content")
async def generate_redacao_content(request: RedacaoContentRequest):
    """Legal writing material: article, document template, tips or exercise"""
    require_feature("ai", "Gemini")

    if not request.topic or not request.type:
        raise RelayError(400, "Topic and type are required")

    log_step("REDACAO", "Calling Gemini API", topic=request.topic, type=request.type)

    try:
        content = await generate_text(redacao_prompt(request.topic, request.type), generation=REDACAO_GENERATION)
    except Exception as e:
        log_step("REDACAO", "❌ Gemini error", error=str(e))
        raise RelayError(500, str(e))

    if not content:
        raise RelayError(500, "No response from Gemini API")

    return {"content": content}


@router.post("/video-assistant")
async def video_assistant(request: VideoAssistantRequest):
    """Answer a question about a video lesson, optionally grounded on its context"""
    require_feature("ai", "Gemini")

    if not request.prompt or not request.prompt.strip():
        raise RelayError(400, "prompt is required")

    try:
        result = await generate_text(video_prompt(request.prompt, request.context))
    except Exception as e:
        log_step("VIDEO-ASSISTANT", "❌ Gemini error", error=str(e))
        raise RelayError(500, str(e))

    return {"response": result or "No response generated."}
