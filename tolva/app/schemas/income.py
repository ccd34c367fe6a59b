# tolva/app/schemas/income.py

"""
Schemas Pydantic para INGRESOS.

- IncomeCreateSchema: POST /income. amount obligatorio y > 0; source por
  defecto "Salary"; date opcional (si falta, ahora).
- IncomeUpdateSchema: PATCH /income/{id}. Solo se edita el importe.
- IncomeSchema: salida.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any, List, Optional

from pydantic import field_validator

from tolva.app.core.constants import MAX_INCOME_SOURCE_LENGTH
from tolva.app.schemas.common import CamelModel
from tolva.app.utils.date_utils import normalize_date_input


def _positive_amount(value: Any) -> float:
    if isinstance(value, bool) or value is None or value == "":
        raise ValueError("amount debe ser un número mayor que 0")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError("amount debe ser un número mayor que 0")
    if not math.isfinite(number) or number <= 0:
        raise ValueError("amount debe ser un número mayor que 0")
    return number


class IncomeCreateSchema(CamelModel):
    amount: float
    source: Optional[str] = None
    currency: Optional[str] = None
    date: Optional[datetime] = None

    @field_validator("amount", mode="before")
    @classmethod
    def _amount(cls, v):
        return _positive_amount(v)

    @field_validator("source", mode="before")
    @classmethod
    def _source(cls, v):
        if v is None:
            return None
        s = str(v).strip()
        if len(s) > MAX_INCOME_SOURCE_LENGTH:
            raise ValueError(f"source es demasiado largo (máx. {MAX_INCOME_SOURCE_LENGTH})")
        return s or None

    @field_validator("currency", mode="before")
    @classmethod
    def _currency(cls, v):
        if not isinstance(v, str) or not v.strip():
            return None
        s = v.strip().upper()
        if len(s) != 3 or not s.isalpha():
            raise ValueError("currency debe ser un código ISO de 3 letras")
        return s

    @field_validator("date", mode="before")
    @classmethod
    def _date(cls, v):
        if v is None or v == "":
            return None
        # fecha con hora real (ingreso registrado "ahora") o día anclado
        if isinstance(v, datetime):
            return v
        return normalize_date_input(v)


class IncomeUpdateSchema(CamelModel):
    amount: float

    @field_validator("amount", mode="before")
    @classmethod
    def _amount(cls, v):
        return _positive_amount(v)


class IncomeSchema(CamelModel):
    id: str
    user_id: str
    amount: float
    source: str
    currency: str
    date: datetime
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class IncomeListResponse(CamelModel):
    entries: List[IncomeSchema]
