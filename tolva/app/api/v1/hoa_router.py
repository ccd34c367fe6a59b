# tolva/app/api/v1/hoa_router.py

"""
Router de EXPENSAS: resúmenes por edificio/unidad/período.

GET /api/v1/hoa/summaries?buildingCode=&unitCode=
- Filtros opcionales (se normalizan igual que al guardar).
- Orden: período más reciente primero.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from tolva.app.api.v1.auth_router import require_user_id
from tolva.app.db.session import get_db
from tolva.app.schemas.hoa import HoaSummaryListResponse, HoaSummarySchema
from tolva.app.services.hoa_service import list_hoa_summaries

router = APIRouter(prefix="/hoa", tags=["hoa"])


@router.get("/summaries", response_model=HoaSummaryListResponse)
def list_summaries(
    building_code: Optional[str] = Query(None, alias="buildingCode"),
    unit_code: Optional[str] = Query(None, alias="unitCode"),
    db: Session = Depends(get_db),
    user_id: str = Depends(require_user_id),
):
    rows = list_hoa_summaries(db, user_id, building_code=building_code, unit_code=unit_code)
    return HoaSummaryListResponse(summaries=[HoaSummarySchema.model_validate(r) for r in rows])
