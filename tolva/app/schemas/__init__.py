# tolva/app/schemas/__init__.py
"""
Paquete de schemas Pydantic de Tolva.

Exponemos los schemas de entrada/salida de la API; los del resultado de
extracción (billing.py) se importan desde su módulo.
"""

from .documents import (
    DocumentSchema,
    DocumentCreateSchema,
    DocumentUpdateSchema,
    ParseRequestSchema,
)
from .income import IncomeSchema, IncomeCreateSchema, IncomeUpdateSchema
from .hoa import HoaSummarySchema
from .dashboard import DashboardSchema

__all__ = [
    "DocumentSchema",
    "DocumentCreateSchema",
    "DocumentUpdateSchema",
    "ParseRequestSchema",
    "IncomeSchema",
    "IncomeCreateSchema",
    "IncomeUpdateSchema",
    "HoaSummarySchema",
    "DashboardSchema",
]
