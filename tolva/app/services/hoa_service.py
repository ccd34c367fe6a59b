# tolva/app/services/hoa_service.py

"""
Resumen de EXPENSAS (hoa_summaries).

upsert_hoa_summary(db, user_id, hoa_details):
- Normaliza los datos (edificio/unidad por defecto, periodKey).
- Si falta usuario, año o mes del período -> no hace nada (se loguea).
  Un resumen es opcional: nunca debe bloquear la escritura del documento.
- Clave determinista {user}_{edificio}_{unidad}_{periodKey}: repetir la
  llamada para el mismo período actualiza la misma fila.
- Fusión, no reemplazo: los campos que llegan en None conservan el valor
  guardado; created_at se conserva y updated_at se refresca.

No hace commit: el router decide cuándo confirmar la transacción.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from tolva.app.db import models
from tolva.app.utils.date_utils import utcnow
from tolva.app.utils.hoa_utils import (
    build_period_key,
    calculate_hoa_totals,
    normalize_building_code,
    normalize_hoa_details,
    normalize_unit_code,
)
from tolva.app.utils.id_utils import build_hoa_summary_id

logger = logging.getLogger(__name__)

# Campos escalares que se copian de los datos normalizados al resumen
_SUMMARY_FIELDS = (
    "building_address",
    "unit_label",
    "owner_name",
    "period_label",
    "first_due_amount",
    "second_due_amount",
    "total_building_expenses",
    "total_to_pay_unit",
)


def upsert_hoa_summary(db: Session, user_id: Optional[str], hoa_details: Any) -> Optional[models.HoaSummary]:
    """
    Crea o actualiza el resumen del período. Devuelve la fila, o None si
    no había datos suficientes para identificar el período.
    """
    normalized = normalize_hoa_details(hoa_details)
    period_year = normalized.period_year if normalized else None
    period_month = normalized.period_month if normalized else None

    if not normalized or not user_id or not period_year or not period_month:
        logger.warning(
            "[hoa] upsert omitido: faltan campos user_id=%s building=%s unit=%s year=%s month=%s",
            user_id,
            normalized.building_code if normalized else None,
            normalized.unit_code if normalized else None,
            period_year,
            period_month,
        )
        return None

    period_key = normalized.period_key or build_period_key(period_year, period_month)
    summary_id = build_hoa_summary_id(user_id, normalized.building_code, normalized.unit_code, period_key)
    now = utcnow()

    summary = db.get(models.HoaSummary, summary_id)
    created = summary is None
    if created:
        summary = models.HoaSummary(
            id=summary_id,
            user_id=user_id,
            building_code=normalized.building_code,
            unit_code=normalized.unit_code,
            period_key=period_key,
            period_year=period_year,
            period_month=period_month,
            created_at=now,
        )
        db.add(summary)

    for field in _SUMMARY_FIELDS:
        value = getattr(normalized, field)
        if value is not None:
            setattr(summary, field, value)

    rubros: List[Dict[str, Any]] = [r.model_dump(by_alias=True) for r in normalized.rubros]
    if rubros:
        summary.rubros = rubros

    totals = calculate_hoa_totals(summary.rubros or [])
    summary.rubros_total = totals.rubros_total
    summary.rubros_with_totals = [r.model_dump(by_alias=True) for r in totals.rubros_with_totals]
    summary.updated_at = now

    db.flush()
    logger.info(
        "[hoa] upsert %s id=%s rubros_total=%s",
        "creado" if created else "actualizado",
        summary_id,
        summary.rubros_total,
    )
    return summary


def list_hoa_summaries(
    db: Session,
    user_id: str,
    *,
    building_code: Optional[str] = None,
    unit_code: Optional[str] = None,
) -> List[models.HoaSummary]:
    q = db.query(models.HoaSummary).filter(models.HoaSummary.user_id == user_id)
    if building_code:
        q = q.filter(models.HoaSummary.building_code == normalize_building_code(building_code))
    if unit_code:
        q = q.filter(models.HoaSummary.unit_code == normalize_unit_code(unit_code))
    return q.order_by(models.HoaSummary.period_key.desc(), models.HoaSummary.building_code.asc()).all()
