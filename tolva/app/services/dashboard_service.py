# tolva/app/services/dashboard_service.py

"""
Resumen mensual para el DASHBOARD.

Un documento cuenta en el mes de su fecha de referencia (el primero de
dueDate, issueDate, periodEnd, periodStart, uploadedAt). Como esa fecha
depende de varias columnas, el filtro por mes se hace en Python sobre
los documentos del usuario.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timezone
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from tolva.app.core.constants import BillCategory, DocumentStatus
from tolva.app.db import models
from tolva.app.schemas.dashboard import CategoryTotal, DashboardSchema, DocumentCounts
from tolva.app.utils.billing_utils import default_category_totals, document_spend
from tolva.app.utils.category_utils import get_category_label
from tolva.app.utils.date_utils import month_range, resolve_doc_date, utcnow

logger = logging.getLogger(__name__)


def _as_utc_start(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def build_dashboard(
    db: Session,
    user_id: str,
    year: Optional[int] = None,
    month: Optional[int] = None,
) -> DashboardSchema:
    today = utcnow().date()
    year = year or today.year
    month = month or today.month
    ini, fin_excl = month_range(year, month)

    totals = default_category_totals()
    counts_by_category = {category: 0 for category in totals}
    counts = DocumentCounts()

    docs = db.query(models.BillDocument).filter(models.BillDocument.user_id == user_id).all()
    for doc in docs:
        ref = resolve_doc_date(doc)
        if ref is None or not (ini <= ref < fin_excl):
            continue

        category = doc.category or BillCategory.OTHER
        totals[category] += document_spend(doc)
        counts_by_category[category] += 1

        counts.total += 1
        status = doc.status or DocumentStatus.PENDING
        setattr(counts, status.value, getattr(counts, status.value) + 1)

    income_total = (
        db.query(func.coalesce(func.sum(models.IncomeEntry.amount), 0.0))
        .filter(
            models.IncomeEntry.user_id == user_id,
            models.IncomeEntry.date >= _as_utc_start(ini),
            models.IncomeEntry.date < _as_utc_start(fin_excl),
        )
        .scalar()
    )
    income_total = round(float(income_total or 0.0), 2)
    spend_total = round(sum(totals.values()), 2)

    logger.debug("[dashboard] user=%s %s-%02d docs=%s", user_id, year, month, counts.total)

    return DashboardSchema(
        year=year,
        month=month,
        categories=[
            CategoryTotal(
                category=category,
                label=get_category_label(category),
                total=round(total, 2),
                count=counts_by_category[category],
            )
            for category, total in totals.items()
        ],
        spend_total=spend_total,
        income_total=income_total,
        balance=round(income_total - spend_total, 2),
        documents=counts,
    )
