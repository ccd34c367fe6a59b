# tolva/app/utils/hoa_utils.py

"""
Utilidades de EXPENSAS (HOA / consorcio).

Incluye:

- format_hoa_period(month, year):
    Etiqueta de período en castellano: (10, 2025) -> "OCTUBRE/2025".

- ensure_spanish_period_label(label):
    Convierte "10/2025" -> "OCTUBRE/2025"; cualquier otra etiqueta se
    devuelve tal cual (idempotente).

- build_period_key(year, month):
    Clave canónica "YYYY-MM".

- normalize_hoa_details(raw):
    Sanea y completa los datos de expensas (edificio/unidad por defecto,
    unitCode con ancho fijo, periodKey y periodLabel recalculados).
    Nunca lanza: devuelve None si raw no es un objeto.

- calculate_hoa_totals(rubros):
    Suma de rubros y aporte de cada rubro al total.
"""

from __future__ import annotations

import logging
import re
from datetime import MAXYEAR, MINYEAR, date
from typing import Any, Iterable, Optional

from babel.dates import format_date

from tolva.app.core.constants import (
    HOA_DEFAULT_BUILDING_CODE,
    HOA_DEFAULT_UNIT_CODE,
    HOA_PERIOD_LOCALE,
    HOA_UNIT_CODE_WIDTH,
)
from tolva.app.schemas.billing import (
    HoaDetails,
    HoaRubro,
    HoaRubroWithTotal,
    HoaTotals,
    NormalizedHoaDetails,
)
from tolva.app.utils.sanitize_utils import sanitize_hoa_details, sanitize_hoa_rubro
from tolva.app.utils.text_utils import normalize_upper

logger = logging.getLogger(__name__)

_NUMERIC_PERIOD_RE = re.compile(r"^(\d{1,2})/(\d{4})$")


# ============================================================
# Período
# ============================================================

def format_hoa_period(month: Optional[int], year: Optional[int]) -> Optional[str]:
    """
    Formatea mes/año como "MES/AAAA" con el nombre del mes en castellano.

    - format_hoa_period(10, 2025) -> "OCTUBRE/2025"
    - Mes o año ausentes -> None
    - Mes fuera de rango -> formato numérico "13/2025"
    """
    if not month or not year:
        return None
    try:
        month_name = format_date(date(year, month, 1), format="MMMM", locale=HOA_PERIOD_LOCALE)
    except (ValueError, OverflowError):
        logger.warning("[hoa] período inválido month=%s year=%s", month, year)
        return f"{month:02d}/{year}"
    return f"{month_name.upper()}/{year}"


def ensure_spanish_period_label(label: Optional[str]) -> Optional[str]:
    """
    Si la etiqueta viene como "MM/AAAA" (o "M/AAAA") la pasa a "MES/AAAA".
    """
    if not label:
        return None
    match = _NUMERIC_PERIOD_RE.match(label)
    if match:
        month, year = int(match.group(1)), int(match.group(2))
        return format_hoa_period(month, year) or label
    return label


def build_period_key(year: Optional[int], month: Optional[int]) -> Optional[str]:
    if not year or not month:
        return None
    return f"{year:04d}-{month:02d}"


def _valid_month(month: Optional[int]) -> Optional[int]:
    if month is None or not 1 <= month <= 12:
        return None
    return month


def _valid_year(year: Optional[int]) -> Optional[int]:
    if year is None or not MINYEAR <= year <= MAXYEAR:
        return None
    return year


# ============================================================
# Edificio / unidad
# ============================================================

def normalize_unit_code(unit_code: Optional[str]) -> str:
    """
    Unidad funcional con ancho fijo: "5" -> "0005", "12b" -> "012B".
    Sin unidad -> "0005".
    """
    value = normalize_upper(unit_code)
    if not value:
        return HOA_DEFAULT_UNIT_CODE
    return value.zfill(HOA_UNIT_CODE_WIDTH)


def normalize_building_code(building_code: Optional[str]) -> str:
    return normalize_upper(building_code) or HOA_DEFAULT_BUILDING_CODE


# ============================================================
# Normalización completa
# ============================================================

def normalize_hoa_details(raw: Any) -> Optional[NormalizedHoaDetails]:
    """
    Devuelve los datos de expensas normalizados, o None si raw no es un objeto.

    Reglas:
    - buildingCode en MAYÚSCULAS, "EDIFICIO" si falta.
    - unitCode con ancho fijo, "0005" si falta.
    - periodYear fuera de 1..9999 y periodMonth fuera de 1..12 se descartan.
    - periodKey: "YYYY-MM" si hay año y mes; si no, se conserva el recibido.
    - periodLabel: si ya hay etiqueta se pasa por ensure_spanish_period_label;
      si no, se genera desde año y mes.
    """
    if isinstance(raw, HoaDetails):
        raw = raw.model_dump(by_alias=True)

    details = sanitize_hoa_details(raw)
    if details is None:
        return None

    year = _valid_year(details.period_year)
    month = _valid_month(details.period_month)

    period_key = build_period_key(year, month) if year and month else details.period_key
    if details.period_label:
        period_label = ensure_spanish_period_label(details.period_label)
    else:
        period_label = format_hoa_period(month, year)

    return NormalizedHoaDetails(
        **details.model_dump(
            exclude={"building_code", "unit_code", "period_year", "period_month", "period_key", "period_label"}
        ),
        building_code=normalize_building_code(details.building_code),
        unit_code=normalize_unit_code(details.unit_code),
        period_year=year,
        period_month=month,
        period_key=period_key,
        period_label=period_label,
    )


# ============================================================
# Totales
# ============================================================

def _as_rubro(item: Any) -> HoaRubro:
    if isinstance(item, HoaRubro):
        return item
    return sanitize_hoa_rubro(item)


def calculate_hoa_totals(rubros: Optional[Iterable[Any]]) -> HoaTotals:
    """
    Suma el total de los rubros (los que no tienen total cuentan 0) y
    devuelve cada rubro con su total y su porcentaje sobre el total.
    """
    items = [_as_rubro(r) for r in (rubros or [])]
    rubros_total = round(sum(r.total or 0.0 for r in items), 2)

    with_totals = []
    for r in items:
        total = r.total or 0.0
        share = round(total / rubros_total * 100, 2) if rubros_total else 0.0
        with_totals.append(
            HoaRubroWithTotal(rubro_number=r.rubro_number, label=r.label, total=total, share=share)
        )

    return HoaTotals(rubros_total=rubros_total, rubros_with_totals=with_totals)
