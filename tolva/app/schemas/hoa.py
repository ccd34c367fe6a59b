# tolva/app/schemas/hoa.py

"""
Schema de salida del resumen de expensas (GET /hoa/summaries).
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from tolva.app.schemas.billing import HoaRubro, HoaRubroWithTotal
from tolva.app.schemas.common import CamelModel


class HoaSummarySchema(CamelModel):
    id: str
    user_id: str
    building_code: str
    building_address: Optional[str] = None
    unit_code: str
    unit_label: Optional[str] = None
    owner_name: Optional[str] = None
    period_key: str
    period_label: Optional[str] = None
    period_year: int
    period_month: int
    first_due_amount: Optional[float] = None
    second_due_amount: Optional[float] = None
    total_building_expenses: Optional[float] = None
    total_to_pay_unit: Optional[float] = None
    rubros: List[HoaRubro] = Field(default_factory=list)
    rubros_total: float = 0.0
    rubros_with_totals: List[HoaRubroWithTotal] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    @field_validator("rubros", "rubros_with_totals", mode="before")
    @classmethod
    def _none_as_empty(cls, v):
        return v or []


class HoaSummaryListResponse(CamelModel):
    summaries: List[HoaSummarySchema]
