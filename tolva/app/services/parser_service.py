# tolva/app/services/parser_service.py

"""
Extracción de datos de facturas con LLM.

Flujo:
    PDF (bytes) -> texto completo (PyMuPDF)
                -> extracto relevante (primeras líneas, líneas con importes,
                   últimas líneas; máx. 8000 caracteres)
                -> OpenAI Responses API con esquema JSON fijo
                -> JSON -> sanitize_billing_result

Cualquier fallo de descarga, lectura del PDF o del LLM se convierte en
BillingParseError (con stage = "download" | "pdf" | "llm"). No hay
reintentos: el cliente puede volver a pedir la extracción.
"""

from __future__ import annotations

import json
import logging
import re
from functools import lru_cache
from typing import Any, Dict, List, Optional

import fitz  # PyMuPDF
import openai
import requests
from openai import OpenAI

from tolva.app.core.config import settings
from tolva.app.core.errors import BillingParseError
from tolva.app.schemas.billing import BillingParseResult
from tolva.app.utils.sanitize_utils import sanitize_billing_result

logger = logging.getLogger(__name__)


# ============================================================
# Esquema y prompts
# ============================================================

def _nullable(json_type: str) -> Dict[str, Any]:
    return {"anyOf": [{"type": json_type}, {"type": "null"}]}


_RUBRO_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "rubroNumber": _nullable("number"),
        "label": _nullable("string"),
        "total": _nullable("number"),
    },
    "required": ["rubroNumber", "label", "total"],
}

_HOA_PROPERTIES: Dict[str, Any] = {
    "buildingCode": _nullable("string"),
    "buildingAddress": _nullable("string"),
    "unitCode": _nullable("string"),
    "unitLabel": _nullable("string"),
    "ownerName": _nullable("string"),
    "periodLabel": _nullable("string"),
    "periodYear": _nullable("number"),
    "periodMonth": _nullable("number"),
    "firstDueAmount": _nullable("number"),
    "secondDueAmount": _nullable("number"),
    "totalBuildingExpenses": _nullable("number"),
    "totalToPayUnit": _nullable("number"),
    "rubros": {"type": "array", "items": _RUBRO_SCHEMA},
}

BILL_PARSER_SCHEMA_NAME = "billing_parse_result"

BILL_PARSER_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "text": {"type": "string"},
        "providerId": _nullable("string"),
        "providerNameDetected": _nullable("string"),
        "category": _nullable("string"),
        "totalAmount": _nullable("number"),
        "currency": _nullable("string"),
        "issueDate": _nullable("string"),
        "dueDate": _nullable("string"),
        "periodStart": _nullable("string"),
        "periodEnd": _nullable("string"),
        "hoaDetails": {
            "anyOf": [
                {"type": "null"},
                {
                    "type": "object",
                    "additionalProperties": False,
                    "properties": _HOA_PROPERTIES,
                    "required": list(_HOA_PROPERTIES),
                },
            ]
        },
    },
    "required": ["text"],
}

SYSTEM_PROMPT = (
    "You are a meticulous assistant that extracts structured billing data from PDF text. "
    "Always respond with JSON that strictly matches the provided schema."
)

USER_PROMPT = (
    "Analyze the following PDF text and extract any billing related metadata. "
    "Use the schema fields and return null when information cannot be determined."
)


# ============================================================
# Cliente OpenAI
# ============================================================

@lru_cache(maxsize=1)
def get_openai_client() -> OpenAI:
    """
    Cliente OpenAI cacheado (uno por proceso).

    Sin OPENAI_API_KEY no se puede extraer: se lanza al usarlo, nunca al
    importar el módulo.
    """
    if not settings.OPENAI_API_KEY:
        raise BillingParseError(
            code="llm_not_configured",
            message="OPENAI_API_KEY no está configurada",
            stage="llm",
        )
    return OpenAI(
        api_key=settings.OPENAI_API_KEY,
        base_url=settings.OPENAI_BASE_URL or None,
        timeout=settings.OPENAI_TIMEOUT_SECONDS,
        max_retries=0,
    )


# ============================================================
# PDF
# ============================================================

def fetch_pdf_bytes(url: str) -> bytes:
    """Descarga el PDF guardado (storageUrl)."""
    try:
        resp = requests.get(url, timeout=settings.PDF_FETCH_TIMEOUT_SECONDS)
        resp.raise_for_status()
    except requests.RequestException as e:
        logger.warning("[parse] descarga fallida url=%s error=%s", url, e)
        raise BillingParseError(
            code="download_failed",
            message="No se pudo descargar el PDF",
            stage="download",
            details={"error": str(e)},
        ) from e
    return resp.content


def extract_pdf_text(pdf_bytes: bytes) -> str:
    """
    Texto completo del PDF, página a página.

    Un PDF sin capa de texto (escaneado) devuelve "".
    """
    try:
        doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    except (RuntimeError, ValueError) as e:
        raise BillingParseError(
            code="pdf_unreadable",
            message="No se pudo leer el PDF",
            stage="pdf",
            details={"error": str(e)},
        ) from e

    try:
        parts = [page.get_text("text") or "" for page in doc]
    finally:
        doc.close()
    return "\n".join(parts)


_MONEY_LINE_RE = re.compile(r"(\$|TOTAL|Importe|Vencim|Periodo|Período)", re.IGNORECASE)

FIRST_LINES = 60
LAST_LINES = 40
MAX_RELEVANT_CHARS = 8000


def _to_lines(full_text: str) -> List[str]:
    return [line.strip() for line in full_text.splitlines() if line.strip()]


def extract_relevant_text(full_text: str) -> str:
    """
    Recorta el texto del PDF a lo que le sirve al LLM:

    - primeras 60 líneas (cabecera: proveedor, cliente, período)
    - líneas con importes/vencimientos, sin repetir
    - últimas 40 líneas (totales, talón de pago)
    """
    lines = _to_lines(full_text or "")
    money_lines = list(dict.fromkeys(line for line in lines if _MONEY_LINE_RE.search(line)))
    combined = "\n".join(
        ["=== FIRST LINES ===", *lines[:FIRST_LINES],
         "=== MONEY LINES ===", *money_lines,
         "=== LAST LINES ===", *lines[-LAST_LINES:]]
    )
    return combined[:MAX_RELEVANT_CHARS]


# ============================================================
# Respuesta del LLM
# ============================================================

def _field(obj: Any, name: str) -> Any:
    # objetos del SDK o dicts (respuestas crudas)
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def _non_blank(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def extract_json_from_response(response: Any) -> str:
    """
    Devuelve el primer texto utilizable de la respuesta:

    1. output_text
    2. primer item "message" con un content que tenga text
    3. primer item con text plano
    """
    output_text = _non_blank(_field(response, "output_text"))
    if output_text:
        return output_text

    for item in _field(response, "output") or []:
        if not item:
            continue
        if _field(item, "type") == "message":
            for content in _field(item, "content") or []:
                text = _non_blank(_field(content, "text"))
                if text:
                    return text
        text = _non_blank(_field(item, "text"))
        if text:
            return text

    raise BillingParseError(
        code="llm_empty_response",
        message="La respuesta del LLM no contiene JSON",
        stage="llm",
    )


# ============================================================
# Orquestación
# ============================================================

def _build_input(relevant_text: str) -> List[Dict[str, Any]]:
    return [
        {"role": "system", "content": [{"type": "input_text", "text": SYSTEM_PROMPT}]},
        {"role": "user", "content": [{"type": "input_text", "text": f"{USER_PROMPT}\n\n{relevant_text}"}]},
    ]


def parse_pdf_with_openai(pdf_bytes: bytes) -> BillingParseResult:
    """
    Extrae los datos de una factura en PDF.

    El resultado siempre viene saneado; si el LLM no devuelve `text` se usa
    el texto completo del PDF.
    """
    full_text = extract_pdf_text(pdf_bytes)
    relevant_text = extract_relevant_text(full_text)
    client = get_openai_client()

    logger.info("[parse] llamada LLM model=%s chars=%s", settings.OPENAI_MODEL, len(relevant_text))
    try:
        response = client.responses.create(
            model=settings.OPENAI_MODEL,
            input=_build_input(relevant_text),
            text={
                "format": {
                    "type": "json_schema",
                    "name": BILL_PARSER_SCHEMA_NAME,
                    "schema": BILL_PARSER_SCHEMA,
                    "strict": False,
                }
            },
        )
    except openai.OpenAIError as e:
        logger.warning("[parse] error del LLM: %s", e)
        raise BillingParseError(
            code="llm_failed",
            message="Falló la llamada al LLM",
            stage="llm",
            details={"error": str(e)},
        ) from e

    json_text = extract_json_from_response(response)
    try:
        parsed = json.loads(json_text)
    except json.JSONDecodeError as e:
        raise BillingParseError(
            code="llm_invalid_json",
            message="El LLM devolvió un JSON inválido",
            stage="llm",
        ) from e

    result = sanitize_billing_result(parsed)
    if result.text is None and full_text:
        result.text = full_text
    return result


def parse_document_pdf(storage_url: str) -> BillingParseResult:
    """Descarga + extracción en un solo paso (lo usa POST /parse)."""
    return parse_pdf_with_openai(fetch_pdf_bytes(storage_url))
