# tolva/app/utils/billing_utils.py

"""
Helpers de facturas usados por el dashboard y el recordatorio de pago.

- document_spend: gasto de un documento (totalAmount, si no amount).
- default_category_totals: todas las categorías a 0, en orden de pantalla.
- build_calendar_url: enlace "crear evento" de Google Calendar para pagar.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Dict
from urllib.parse import quote

from tolva.app.core.constants import CATEGORY_ORDER, BillCategory
from tolva.app.utils.date_utils import as_day

GOOGLE_CALENDAR_URL = "https://calendar.google.com/calendar/render?action=TEMPLATE"


def document_spend(doc: Any) -> float:
    total_amount = getattr(doc, "total_amount", None)
    if total_amount is not None:
        return float(total_amount)
    amount = getattr(doc, "amount", None)
    return float(amount) if amount is not None else 0.0


def default_category_totals() -> Dict[BillCategory, float]:
    return {category: 0.0 for category in CATEGORY_ORDER}


def _format_amount(value: Any) -> str:
    number = float(value or 0)
    return str(int(number)) if number.is_integer() else str(number)


def build_calendar_url(doc: Any) -> str:
    """
    Enlace para crear el recordatorio "Pagar <proveedor> $<importe>".

    Con fecha de vencimiento el evento ocupa ese día completo
    (dates=AAAAMMDD/AAAAMMDD del día siguiente).
    """
    amount = doc.amount if doc.amount is not None else doc.total_amount
    title = f"Pagar {doc.provider or 'Bill'} ${_format_amount(amount)}"
    details = f"Document Link: {doc.storage_url or ''}"

    url = f"{GOOGLE_CALENDAR_URL}&text={quote(title, safe='')}&details={quote(details, safe='')}"

    due = as_day(doc.due_date)
    if due:
        next_day = due + timedelta(days=1)
        url += f"&dates={due:%Y%m%d}/{next_day:%Y%m%d}"
    return url
