# tolva/app/api/v1/dashboard_router.py

"""
Router del DASHBOARD mensual.

GET /api/v1/dashboard?year=&month=
- Sin year/month -> mes actual.
- Gasto por categoría (todas, aunque sea 0), ingresos, balance y
  conteo de documentos por estado.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from tolva.app.api.v1.auth_router import require_user_id
from tolva.app.db.session import get_db
from tolva.app.schemas.dashboard import DashboardSchema
from tolva.app.services.dashboard_service import build_dashboard

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardSchema)
@router.get("/", response_model=DashboardSchema, include_in_schema=False)
def get_dashboard(
    year: Optional[int] = Query(None, ge=1900, le=9999),
    month: Optional[int] = Query(None, ge=1, le=12),
    db: Session = Depends(get_db),
    user_id: str = Depends(require_user_id),
):
    return build_dashboard(db, user_id, year=year, month=month)
