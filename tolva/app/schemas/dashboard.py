# tolva/app/schemas/dashboard.py

"""
Schemas del DASHBOARD mensual (GET /dashboard).

- CategoryTotal: gasto de una categoría (todas aparecen, aunque sea en 0).
- DashboardSchema: totales del mes + balance (ingresos - gasto).
"""

from __future__ import annotations

from typing import List

from tolva.app.core.constants import BillCategory
from tolva.app.schemas.common import CamelModel


class CategoryTotal(CamelModel):
    category: BillCategory
    label: str
    total: float = 0.0
    count: int = 0


class DocumentCounts(CamelModel):
    total: int = 0
    pending: int = 0
    parsed: int = 0
    needs_review: int = 0
    error: int = 0
    paid: int = 0


class DashboardSchema(CamelModel):
    year: int
    month: int
    categories: List[CategoryTotal]
    spend_total: float = 0.0
    income_total: float = 0.0
    balance: float = 0.0
    documents: DocumentCounts
