# tolva/app/utils/sanitize_utils.py

"""
Saneador de resultados de extracción (JSON del LLM o payload del usuario).

Reglas:
- Nunca lanza excepción: cualquier campo inválido o ausente queda en None.
- Strings: trim; vacío -> None.
- Números: acepta int/float o strings numéricos con separadores de miles
  y decimales "a la argentina" o "a la inglesa" (ver sanitize_number).
- Enteros: número saneado y redondeado.
- hoaDetails: None si no es un objeto; cada campo se sanea por separado.
- rubros: lista vacía si no es lista; cada elemento se sanea por separado.

Las claves se leen en camelCase (las que devuelve el LLM) y, si no están,
en snake_case.
"""

from __future__ import annotations

import math
import re
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional

from pydantic.alias_generators import to_camel

from tolva.app.schemas.billing import BillingParseResult, HoaDetails, HoaRubro
from tolva.app.utils.text_utils import clean_text

_NON_NUMERIC_RE = re.compile(r"[^0-9.,\-]+")

# "1.234" / "12,500": un único separador seguido de exactamente 3 dígitos
_SINGLE_THOUSANDS_RE = re.compile(r"^-?[1-9]\d{0,2}[.,]\d{3}$")

_HOA_STRING_FIELDS = (
    "building_code",
    "building_address",
    "unit_code",
    "unit_label",
    "owner_name",
    "period_key",
    "period_label",
)
_HOA_INTEGER_FIELDS = ("period_year", "period_month")
_HOA_NUMBER_FIELDS = (
    "first_due_amount",
    "second_due_amount",
    "total_building_expenses",
    "total_to_pay_unit",
)


def _get(data: Mapping[str, Any], field: str) -> Any:
    camel = to_camel(field)
    if camel in data:
        return data[camel]
    return data.get(field)


def _has(data: Mapping[str, Any], field: str) -> bool:
    return to_camel(field) in data or field in data


# ============================================================
# Escalares
# ============================================================

def sanitize_string(value: Any) -> Optional[str]:
    return clean_text(value)


def _normalize_separators(numeric: str) -> str:
    """
    Decide qué separador es el decimal.

    - Ambos presentes: el que aparece más a la derecha es el decimal y el
      otro se descarta como separador de miles.
      "1.234,56" -> "1234.56"; "1,234.56" -> "1234.56"
    - Un solo tipo repetido: separador de miles. "1.234.567" -> "1234567"
    - Un solo separador con 3 dígitos detrás: miles. "1.234" -> "1234"
    - Una sola coma en otro caso: decimal. "12,5" -> "12.5"
    """
    comma_count = numeric.count(",")
    dot_count = numeric.count(".")

    if comma_count and dot_count:
        if numeric.rfind(",") > numeric.rfind("."):
            return numeric.replace(".", "").replace(",", ".")
        return numeric.replace(",", "")

    if comma_count > 1:
        return numeric.replace(",", "")
    if dot_count > 1:
        return numeric.replace(".", "")

    if _SINGLE_THOUSANDS_RE.match(numeric):
        return numeric.replace(",", "").replace(".", "")

    if comma_count == 1:
        return numeric.replace(",", ".")
    return numeric


def sanitize_number(value: Any) -> Optional[float]:
    """
    Convierte a float un número o un string "numérico".

    Ejemplos:
    - 1234.56       -> 1234.56
    - "1.234,56"    -> 1234.56
    - "$ 1,234.56"  -> 1234.56
    - "$.99"        -> 0.99
    - "abc"         -> None
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
        return number if math.isfinite(number) else None
    if not isinstance(value, str):
        return None

    numeric = _NON_NUMERIC_RE.sub("", value.strip())
    # restos de puntuación al final ("1.234,56.-"); un separador inicial es decimal (".5")
    numeric = numeric.rstrip(".,-")
    if not numeric or numeric == "-":
        return None

    try:
        number = float(_normalize_separators(numeric))
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def sanitize_integer(value: Any) -> Optional[int]:
    number = sanitize_number(value)
    if number is None:
        return None
    # redondeo "half up" (2.5 -> 3), no el redondeo bancario de round()
    return int(math.floor(number + 0.5))


# ============================================================
# Expensas (HOA)
# ============================================================

def sanitize_hoa_rubro(value: Any) -> HoaRubro:
    if not isinstance(value, Mapping):
        return HoaRubro()
    return HoaRubro(
        rubro_number=sanitize_integer(_get(value, "rubro_number")),
        label=sanitize_string(_get(value, "label")),
        total=sanitize_number(_get(value, "total")),
    )


def sanitize_hoa_rubros(value: Any) -> List[HoaRubro]:
    if not isinstance(value, (list, tuple)):
        return []
    return [sanitize_hoa_rubro(item) for item in value]


def _sanitize_hoa_field(data: Mapping[str, Any], field: str) -> Any:
    raw = _get(data, field)
    if field in _HOA_INTEGER_FIELDS:
        return sanitize_integer(raw)
    if field in _HOA_NUMBER_FIELDS:
        return sanitize_number(raw)
    if field == "rubros":
        return sanitize_hoa_rubros(raw)
    return sanitize_string(raw)


_HOA_FIELDS = _HOA_STRING_FIELDS + _HOA_INTEGER_FIELDS + _HOA_NUMBER_FIELDS + ("rubros",)


def sanitize_hoa_details(value: Any) -> Optional[HoaDetails]:
    """
    Sanea un objeto de expensas completo. None si no es un objeto.
    """
    if not isinstance(value, Mapping):
        return None
    return HoaDetails(**{field: _sanitize_hoa_field(value, field) for field in _HOA_FIELDS})


def sanitize_hoa_patch(value: Any) -> Dict[str, Any]:
    """
    Sanea SOLO las claves presentes de un parche de expensas.

    Devuelve un dict en camelCase (formato en que se guarda hoaDetails),
    listo para fusionarse sobre los datos existentes.
    """
    if not isinstance(value, Mapping):
        return {}
    out: Dict[str, Any] = {}
    for field in _HOA_FIELDS:
        if not _has(value, field):
            continue
        sanitized = _sanitize_hoa_field(value, field)
        if field == "rubros":
            sanitized = [r.model_dump(by_alias=True) for r in sanitized]
        out[to_camel(field)] = sanitized
    return out


# ============================================================
# Resultado completo
# ============================================================

def sanitize_billing_result(value: Any) -> BillingParseResult:
    """
    Convierte cualquier valor (dict, lista, None, basura) en un
    BillingParseResult donde cada campo es válido o None.
    """
    data: Mapping[str, Any] = value if isinstance(value, Mapping) else {}
    return BillingParseResult(
        text=sanitize_string(_get(data, "text")),
        provider_id=sanitize_string(_get(data, "provider_id")),
        provider_name_detected=sanitize_string(_get(data, "provider_name_detected")),
        category=sanitize_string(_get(data, "category")),
        total_amount=sanitize_number(_get(data, "total_amount")),
        currency=sanitize_string(_get(data, "currency")),
        issue_date=sanitize_string(_get(data, "issue_date")),
        due_date=sanitize_string(_get(data, "due_date")),
        period_start=sanitize_string(_get(data, "period_start")),
        period_end=sanitize_string(_get(data, "period_end")),
        hoa_details=sanitize_hoa_details(_get(data, "hoa_details")),
    )
