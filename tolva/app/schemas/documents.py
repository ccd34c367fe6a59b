# tolva/app/schemas/documents.py

"""
Schemas Pydantic para DOCUMENTOS (facturas).

- DocumentCreateSchema: POST /documents (alta por subida o carga manual).
- DocumentUpdateSchema: PATCH /documents/{id}. Todos los campos opcionales;
  un campo AUSENTE no se toca, un campo enviado a null se limpia.
- DocumentSchema: lo que devuelven los endpoints.
- ParseRequestSchema: POST /parse.

Reglas de entrada compartidas:
- Strings: trim, vacío -> None (números/booleanos se pasan a string).
- Importes: numéricos >= 0 o None ("" -> None).
- Moneda: trim + MAYÚSCULAS, exactamente 3 letras.
- Fechas: se anclan a la hora fija UTC (utils/date_utils.py).
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Dict, List, Optional, Union
from urllib.parse import urlparse

from pydantic import field_validator

from tolva.app.core.constants import (
    MAX_CATEGORY_LENGTH,
    MAX_FILE_NAME_LENGTH,
    MAX_PROVIDER_ID_LENGTH,
    MAX_PROVIDER_LENGTH,
    MAX_TEXT_EXTRACT_LENGTH,
    BillCategory,
    DocumentStatus,
)
from tolva.app.schemas.billing import BillingParseResult
from tolva.app.schemas.common import CamelModel
from tolva.app.utils.date_utils import normalize_date_input


# ============================================================
# Helpers de validación
# ============================================================

def _nullable_string(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (str, int, float, bool)):
        s = str(value).strip()
        return s or None
    return None


def _check_max_length(value: Optional[str], max_length: int, name: str) -> Optional[str]:
    if value is not None and len(value) > max_length:
        raise ValueError(f"{name} es demasiado largo (máx. {max_length})")
    return value


def _nullable_number(value: Any) -> Optional[float]:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _check_non_negative(value: Optional[float], name: str) -> Optional[float]:
    if value is not None and value < 0:
        raise ValueError(f"{name} debe ser mayor o igual a 0")
    return value


def normalize_currency(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    s = value.strip().upper()
    return s or None


def _check_currency(value: Optional[str]) -> Optional[str]:
    if value is not None and (len(value) != 3 or not value.isalpha()):
        raise ValueError("currency debe ser un código ISO de 3 letras")
    return value


def _nullable_url(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        return None
    s = value.strip()
    if not s:
        return None
    parsed = urlparse(s)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError("storageUrl debe ser una URL válida")
    return s


_STRING_LIMITS = {
    "provider": MAX_PROVIDER_LENGTH,
    "provider_id": MAX_PROVIDER_ID_LENGTH,
    "category": MAX_CATEGORY_LENGTH,
    "text_extract": MAX_TEXT_EXTRACT_LENGTH,
}

_DATE_FIELDS = ("due_date", "issue_date", "period_start", "period_end")


class _BillFieldsMixin(CamelModel):
    """Validadores comunes a alta y modificación."""

    @field_validator("provider", "provider_id", "category", mode="before", check_fields=False)
    @classmethod
    def _strings(cls, v, info):
        return _check_max_length(_nullable_string(v), _STRING_LIMITS[info.field_name], info.field_name)

    @field_validator("amount", "total_amount", mode="before", check_fields=False)
    @classmethod
    def _amounts(cls, v, info):
        return _check_non_negative(_nullable_number(v), info.field_name)

    @field_validator("currency", mode="before", check_fields=False)
    @classmethod
    def _currency(cls, v):
        return _check_currency(normalize_currency(v))

    @field_validator(*_DATE_FIELDS, mode="before", check_fields=False)
    @classmethod
    def _dates(cls, v):
        return normalize_date_input(v)


# ============================================================
# Alta
# ============================================================

class DocumentCreateSchema(_BillFieldsMixin):
    file_name: str
    storage_url: Optional[str] = None
    provider: Optional[str] = None
    provider_id: Optional[str] = None
    category: Optional[str] = None
    amount: Optional[float] = None
    total_amount: Optional[float] = None
    currency: Optional[str] = None
    due_date: Optional[datetime] = None
    issue_date: Optional[datetime] = None
    period_start: Optional[datetime] = None
    period_end: Optional[datetime] = None
    manual_entry: bool = False
    text_extract: Optional[str] = None
    hoa_details: Optional[Dict[str, Any]] = None

    @field_validator("file_name", mode="before")
    @classmethod
    def _file_name(cls, v):
        s = v.strip() if isinstance(v, str) else ""
        if not s:
            raise ValueError("fileName es obligatorio")
        return _check_max_length(s, MAX_FILE_NAME_LENGTH, "fileName")

    @field_validator("storage_url", mode="before")
    @classmethod
    def _storage_url(cls, v):
        return _nullable_url(v)

    @field_validator("text_extract", mode="before")
    @classmethod
    def _text_extract(cls, v):
        return _check_max_length(_nullable_string(v), MAX_TEXT_EXTRACT_LENGTH, "textExtract")

    @field_validator("manual_entry", mode="before")
    @classmethod
    def _manual_entry(cls, v):
        return bool(v) if v is not None else False

    @field_validator("hoa_details", mode="before")
    @classmethod
    def _hoa_details(cls, v):
        return v if isinstance(v, dict) else None


# ============================================================
# Modificación parcial
# ============================================================

class DocumentUpdateSchema(_BillFieldsMixin):
    provider: Optional[str] = None
    provider_id: Optional[str] = None
    amount: Optional[float] = None
    total_amount: Optional[float] = None
    currency: Optional[str] = None
    status: Optional[DocumentStatus] = None
    category: Optional[str] = None
    due_date: Optional[datetime] = None
    issue_date: Optional[datetime] = None
    period_start: Optional[datetime] = None
    period_end: Optional[datetime] = None
    hoa_details: Optional[Dict[str, Any]] = None

    @field_validator("hoa_details", mode="before")
    @classmethod
    def _hoa_details(cls, v):
        # null explícito limpia; cualquier otra cosa que no sea objeto no cambia nada
        if v is None or isinstance(v, dict):
            return v
        return {}


# ============================================================
# Lectura
# ============================================================

class DocumentSchema(CamelModel):
    id: str
    user_id: str
    file_name: str
    storage_url: Optional[str] = None
    provider: Optional[str] = None
    provider_id: Optional[str] = None
    category: BillCategory = BillCategory.OTHER
    amount: Optional[float] = None
    total_amount: Optional[float] = None
    currency: Optional[str] = None
    due_date: Optional[datetime] = None
    issue_date: Optional[datetime] = None
    period_start: Optional[datetime] = None
    period_end: Optional[datetime] = None
    status: DocumentStatus = DocumentStatus.PENDING
    manual_entry: bool = False
    text_extract: Optional[str] = None
    hoa_details: Optional[Dict[str, Any]] = None
    uploaded_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DocumentListResponse(CamelModel):
    documents: List[DocumentSchema]


class DocumentCreatedResponse(CamelModel):
    document_id: str


class CalendarUrlResponse(CamelModel):
    url: str


# ============================================================
# Extracción
# ============================================================

class ParseRequestSchema(CamelModel):
    document_id: str

    @field_validator("document_id", mode="before")
    @classmethod
    def _document_id(cls, v: Union[str, int, None]):
        if isinstance(v, bool) or not isinstance(v, (str, int)):
            raise ValueError("documentId es obligatorio")
        s = str(v).strip()
        if not s:
            raise ValueError("documentId es obligatorio")
        return s


class ParseResponseSchema(CamelModel):
    document: DocumentSchema
    result: BillingParseResult
