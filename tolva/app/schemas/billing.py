# tolva/app/schemas/billing.py

"""
Schemas del resultado de extracción de facturas.

- HoaRubro / HoaDetails: datos de expensas (consorcio) embebidos en el documento.
- NormalizedHoaDetails: HoaDetails tras normalizar (edificio/unidad con
  valores por defecto y periodKey calculado).
- BillingParseResult: resultado ya saneado de la extracción por LLM.

Todos los campos son opcionales: el saneador deja en None lo que no se
pudo interpretar.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import Field

from tolva.app.schemas.common import CamelModel


class HoaRubro(CamelModel):
    """Línea de gasto (rubro) de la liquidación de expensas."""
    rubro_number: Optional[int] = None
    label: Optional[str] = None
    total: Optional[float] = None


class HoaDetails(CamelModel):
    building_code: Optional[str] = None
    building_address: Optional[str] = None
    unit_code: Optional[str] = None
    unit_label: Optional[str] = None
    owner_name: Optional[str] = None
    period_key: Optional[str] = None
    period_label: Optional[str] = None
    period_year: Optional[int] = None
    period_month: Optional[int] = None
    first_due_amount: Optional[float] = None
    second_due_amount: Optional[float] = None
    total_building_expenses: Optional[float] = None
    total_to_pay_unit: Optional[float] = None
    rubros: List[HoaRubro] = Field(default_factory=list)


class NormalizedHoaDetails(HoaDetails):
    building_code: str
    unit_code: str


class HoaRubroWithTotal(HoaRubro):
    """Rubro con su aporte al total (total sin None y porcentaje sobre el total)."""
    total: float = 0.0
    share: float = 0.0


class HoaTotals(CamelModel):
    rubros_total: float = 0.0
    rubros_with_totals: List[HoaRubroWithTotal] = Field(default_factory=list)


class BillingParseResult(CamelModel):
    text: Optional[str] = None
    provider_id: Optional[str] = None
    provider_name_detected: Optional[str] = None
    category: Optional[str] = None
    total_amount: Optional[float] = None
    currency: Optional[str] = None
    issue_date: Optional[str] = None
    due_date: Optional[str] = None
    period_start: Optional[str] = None
    period_end: Optional[str] = None
    hoa_details: Optional[HoaDetails] = None
