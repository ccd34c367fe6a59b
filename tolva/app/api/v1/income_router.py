# tolva/app/api/v1/income_router.py

"""
Router de INGRESOS.

Endpoints (prefix /api/v1/income):
- GET    /      -> ingresos del usuario, fecha descendente
- POST   /      -> alta (201)
- PATCH  /{id}  -> cambio de importe
- DELETE /{id}  -> baja

Reglas:
- amount > 0 siempre.
- source por defecto "Salary"; currency por defecto ARS.
- Sin fecha -> ahora.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from tolva.app.api.v1.auth_router import require_user_id
from tolva.app.core.config import settings
from tolva.app.db import models
from tolva.app.db.session import get_db
from tolva.app.schemas.income import (
    IncomeCreateSchema,
    IncomeListResponse,
    IncomeSchema,
    IncomeUpdateSchema,
)
from tolva.app.utils.date_utils import utcnow
from tolva.app.utils.id_utils import generate_income_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/income", tags=["income"])


def _get_income_for_user(db: Session, income_id: str, user_id: str) -> models.IncomeEntry:
    """
    Recupera un ingreso asegurando que pertenece al usuario actual.
    """
    obj = db.get(models.IncomeEntry, income_id)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Ingreso no encontrado")
    if obj.user_id != user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Prohibido")
    return obj


@router.get("", response_model=IncomeListResponse)
@router.get("/", response_model=IncomeListResponse, include_in_schema=False)
def list_income(
    db: Session = Depends(get_db),
    user_id: str = Depends(require_user_id),
):
    objs = (
        db.query(models.IncomeEntry)
        .filter(models.IncomeEntry.user_id == user_id)
        .order_by(models.IncomeEntry.date.desc(), models.IncomeEntry.created_at.desc())
        .all()
    )
    return IncomeListResponse(entries=[IncomeSchema.model_validate(o) for o in objs])


@router.post("", response_model=IncomeSchema, status_code=status.HTTP_201_CREATED)
@router.post(
    "/",
    response_model=IncomeSchema,
    status_code=status.HTTP_201_CREATED,
    include_in_schema=False,
)
def create_income(
    income_in: IncomeCreateSchema,
    db: Session = Depends(get_db),
    user_id: str = Depends(require_user_id),
):
    """
    Crea un ingreso para el usuario actual.
    """
    now = utcnow()
    obj = models.IncomeEntry(
        id=generate_income_id(),
        user_id=user_id,
        amount=income_in.amount,
        source=income_in.source or settings.DEFAULT_INCOME_SOURCE,
        currency=income_in.currency or settings.DEFAULT_INCOME_CURRENCY,
        date=income_in.date or now,
        created_at=now,
        updated_at=now,
    )
    db.add(obj)
    db.commit()
    db.refresh(obj)
    logger.info("[income] creado id=%s user=%s amount=%s", obj.id, user_id, obj.amount)
    return obj


@router.patch("/{income_id}", response_model=IncomeSchema)
def update_income(
    income_id: str,
    income_in: IncomeUpdateSchema,
    db: Session = Depends(get_db),
    user_id: str = Depends(require_user_id),
):
    obj = _get_income_for_user(db, income_id, user_id)
    obj.amount = income_in.amount
    obj.updated_at = utcnow()
    db.commit()
    db.refresh(obj)
    return obj


@router.delete("/{income_id}")
def delete_income(
    income_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(require_user_id),
):
    obj = _get_income_for_user(db, income_id, user_id)
    db.delete(obj)
    db.commit()
    logger.info("[income] borrado id=%s user=%s", income_id, user_id)
    return {"success": True}
