# tolva/app/utils/date_utils.py

"""
Utilidades de fechas.

Las fechas de las facturas (vencimiento, emisión, período) son "solo día".
Para que no se corran de día al serializarse en otra zona horaria, se
guardan como datetime UTC anclado a una hora fija (settings.DATE_ANCHOR_HOUR).

- normalize_date_input: acepta date/datetime, "YYYY-MM-DD", ISO completo o
  epoch en milisegundos. Devuelve el día anclado, o None si no se entiende.
- as_day: lee un valor guardado (con o sin tz) y devuelve su date.
- resolve_doc_date: fecha de referencia de un documento para el dashboard.
- month_range: rango [inicio, fin_exclusivo) de un mes.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timezone
from typing import Any, Optional, Tuple

from tolva.app.core.config import settings

_ISO_DAY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def anchor_day(day: date) -> datetime:
    return datetime(day.year, day.month, day.day, settings.DATE_ANCHOR_HOUR, tzinfo=timezone.utc)


def _parse_day(value: Any) -> Optional[date]:
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc).date()
        except (OverflowError, OSError, ValueError):
            return None

    if isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        try:
            if _ISO_DAY_RE.match(s):
                return date.fromisoformat(s)
            return datetime.fromisoformat(s.replace("Z", "+00:00")).date()
        except ValueError:
            return None

    return None


def normalize_date_input(value: Any) -> Optional[datetime]:
    """
    Normaliza una fecha de entrada y la ancla a la hora fija UTC.

    Ejemplos (DATE_ANCHOR_HOUR=12):
    - "2025-10-15"                -> 2025-10-15 12:00 UTC
    - "2025-10-15T23:30:00-03:00" -> 2025-10-15 12:00 UTC (se respeta el día escrito)
    - 1760486400000               -> 2025-10-15 12:00 UTC
    - "mañana"                    -> None
    """
    day = _parse_day(value)
    return anchor_day(day) if day else None


def as_day(value: Any) -> Optional[date]:
    return _parse_day(value)


def resolve_doc_date(doc: Any) -> Optional[date]:
    """
    Fecha de referencia de un documento: el primero presente de
    due_date, issue_date, period_end, period_start, uploaded_at.
    """
    for attr in ("due_date", "issue_date", "period_end", "period_start", "uploaded_at"):
        day = as_day(getattr(doc, attr, None))
        if day:
            return day
    return None


def month_range(year: int, month: int) -> Tuple[date, date]:
    """
    Devuelve el rango [ini, fin_excl) del mes solicitado.
    """
    ini = date(year, month, 1)
    if month == 12:
        fin_excl = date(year + 1, 1, 1)
    else:
        fin_excl = date(year, month + 1, 1)
    return ini, fin_excl


def utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)
