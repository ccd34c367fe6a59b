# tolva/app/services/document_service.py

"""
Servicio de DOCUMENTOS (facturas).

Concentra la lógica de negocio que no es "fontanería HTTP":

- create_document: alta (por subida de PDF o carga manual).
- build_document_updates: PATCH parcial + reconciliación de expensas.
- apply_parse_result: vuelca en el documento lo extraído por el LLM.
- sync_hoa_summary: mantiene al día el resumen de expensas del período.

Reconciliación de expensas (categoría hoa):
- amount enviado explícitamente -> manda el importe de arriba y se copia
  a hoaDetails.totalToPayUnit.
- amount NO enviado y totalToPayUnit distinto del importe -> manda
  totalToPayUnit y se copia a amount/totalAmount.
- Si hay periodStart (en el PATCH o ya guardado) se recalculan
  periodYear/periodMonth y se descartan periodKey/periodLabel, que se
  regeneran al normalizar.

Como el resto de servicios, solo hace flush: el commit es del router.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from tolva.app.core.constants import (
    HOA_DEFAULT_BUILDING_CODE,
    HOA_DEFAULT_UNIT_CODE,
    MAX_TEXT_EXTRACT_LENGTH,
    BillCategory,
    DocumentStatus,
)
from tolva.app.db import models
from tolva.app.schemas.billing import BillingParseResult
from tolva.app.schemas.documents import DocumentCreateSchema, DocumentUpdateSchema
from tolva.app.services.hoa_service import upsert_hoa_summary
from tolva.app.utils.category_utils import classify
from tolva.app.utils.date_utils import as_day, normalize_date_input, utcnow
from tolva.app.utils.id_utils import generate_document_id
from tolva.app.utils.sanitize_utils import sanitize_hoa_patch

logger = logging.getLogger(__name__)

# Campos que se copian tal cual si vienen en el PATCH (aunque sea a null)
_SIMPLE_UPDATE_FIELDS = (
    "provider",
    "provider_id",
    "total_amount",
    "currency",
    "due_date",
    "issue_date",
    "period_start",
    "period_end",
)


# ============================================================
# Helpers
# ============================================================

def _is_hoa(category: Any) -> bool:
    return category == BillCategory.HOA or category == BillCategory.HOA.value


def _apply_period(hoa: Dict[str, Any], period_start: Any) -> None:
    """
    Deriva periodYear/periodMonth de la fecha de inicio de período y
    descarta periodKey/periodLabel cacheados.
    """
    day = as_day(period_start)
    if not day:
        return
    hoa["periodYear"] = day.year
    hoa["periodMonth"] = day.month
    hoa.pop("periodKey", None)
    hoa.pop("periodLabel", None)


def list_documents(db: Session, user_id: str):
    return (
        db.query(models.BillDocument)
        .filter(models.BillDocument.user_id == user_id)
        .order_by(models.BillDocument.uploaded_at.desc(), models.BillDocument.id.asc())
        .all()
    )


# ============================================================
# Alta
# ============================================================

def create_document(db: Session, user_id: str, data: DocumentCreateSchema) -> models.BillDocument:
    """
    Crea un documento.

    - status: pending si hay storageUrl (falta extraer), needs_review si no.
    - category: clasificada a partir de providerId/category/provider.
    - totalAmount: si no viene, igual a amount.
    - Expensas: hoaDetails saneado con totalToPayUnit y período completados
      desde el importe y la fecha de inicio del documento.
    """
    category = classify(data.provider_id, data.category, data.provider)
    total_amount = data.total_amount if data.total_amount is not None else data.amount
    now = utcnow()

    hoa_details: Optional[Dict[str, Any]] = None
    patch = sanitize_hoa_patch(data.hoa_details)
    if _is_hoa(category):
        hoa_details = patch
        if hoa_details.get("totalToPayUnit") is None and total_amount is not None:
            hoa_details["totalToPayUnit"] = total_amount
        _apply_period(hoa_details, data.period_start)
    elif patch:
        hoa_details = patch

    doc = models.BillDocument(
        id=generate_document_id(),
        user_id=user_id,
        file_name=data.file_name,
        storage_url=data.storage_url,
        provider=data.provider,
        provider_id=data.provider_id,
        category=category,
        amount=data.amount,
        total_amount=total_amount,
        currency=data.currency,
        due_date=data.due_date,
        issue_date=data.issue_date,
        period_start=data.period_start,
        period_end=data.period_end,
        status=DocumentStatus.PENDING if data.storage_url else DocumentStatus.NEEDS_REVIEW,
        manual_entry=data.manual_entry,
        text_extract=data.text_extract,
        hoa_details=hoa_details or None,
        uploaded_at=now,
        updated_at=now,
    )
    db.add(doc)
    db.flush()
    logger.info("[documents] creado id=%s user=%s category=%s", doc.id, user_id, category.value)
    return doc


# ============================================================
# PATCH + reconciliación
# ============================================================

def build_document_updates(doc: models.BillDocument, payload: DocumentUpdateSchema) -> Dict[str, Any]:
    """
    Calcula el dict de columnas a actualizar para un PATCH parcial.

    Un campo ausente del PATCH no se toca; enviado a null se limpia.
    No modifica el documento: ver update_document.
    """
    sent = payload.model_fields_set
    updates: Dict[str, Any] = {}

    for field in _SIMPLE_UPDATE_FIELDS:
        if field in sent:
            updates[field] = getattr(payload, field)

    if "status" in sent and payload.status:
        updates["status"] = payload.status

    amount_sent = "amount" in sent
    if amount_sent:
        updates["amount"] = payload.amount
        updates["total_amount"] = payload.amount

    if "category" in sent and payload.category is not None:
        category = classify(None, payload.category, None)
        updates["category"] = category
    else:
        category = doc.category or BillCategory.OTHER

    hoa_cleared = "hoa_details" in sent and payload.hoa_details is None
    patch = sanitize_hoa_patch(payload.hoa_details) if "hoa_details" in sent else {}

    if _is_hoa(category):
        # en expensas hoaDetails no se vacía: totalToPayUnit y el período
        # se reconstruyen siempre sobre lo guardado, también con hoaDetails=null
        merged: Dict[str, Any] = dict(doc.hoa_details or {})
        merged.update(patch)

        if amount_sent:
            merged["totalToPayUnit"] = payload.amount
        else:
            total_to_pay = merged.get("totalToPayUnit")
            if total_to_pay is not None and total_to_pay != doc.amount:
                updates["amount"] = total_to_pay
                updates["total_amount"] = total_to_pay

        period_start = updates["period_start"] if "period_start" in updates else doc.period_start
        _apply_period(merged, period_start)

        updates["hoa_details"] = merged or None
    elif hoa_cleared:
        updates["hoa_details"] = None
    elif patch:
        merged = dict(doc.hoa_details or {})
        merged.update(patch)
        updates["hoa_details"] = merged

    updates["updated_at"] = utcnow()
    return updates


def update_document(db: Session, doc: models.BillDocument, payload: DocumentUpdateSchema) -> models.BillDocument:
    updates = build_document_updates(doc, payload)
    for field, value in updates.items():
        setattr(doc, field, value)
    db.flush()
    logger.info("[documents] patch id=%s campos=%s", doc.id, sorted(updates))
    return doc


# ============================================================
# Resultado de extracción
# ============================================================

def apply_parse_result(doc: models.BillDocument, result: BillingParseResult) -> models.BillDocument:
    """
    Vuelca el resultado saneado del LLM en el documento.

    - provider/providerId detectados; category clasificada con ambos.
    - Importe: totalAmount o, en expensas, totalToPayUnit.
    - status: parsed si se encontró importe, needs_review si no.
    """
    provider = result.provider_name_detected or doc.provider
    provider_id = result.provider_id or doc.provider_id
    category = classify(provider_id, result.category, provider)

    hoa = result.hoa_details
    amount = result.total_amount
    if amount is None and hoa is not None:
        amount = hoa.total_to_pay_unit

    currency = (result.currency or "").strip().upper()

    doc.provider = provider
    doc.provider_id = provider_id
    doc.category = category
    if amount is not None:
        doc.amount = amount
        doc.total_amount = amount
    if len(currency) == 3 and currency.isalpha():
        doc.currency = currency

    for field in ("issue_date", "due_date", "period_start", "period_end"):
        value = normalize_date_input(getattr(result, field))
        if value is not None:
            setattr(doc, field, value)

    if result.text:
        doc.text_extract = result.text[:MAX_TEXT_EXTRACT_LENGTH]

    if hoa is not None:
        hoa_details = hoa.model_dump(by_alias=True)
        if hoa_details.get("totalToPayUnit") is None and amount is not None and _is_hoa(category):
            hoa_details["totalToPayUnit"] = amount
        doc.hoa_details = hoa_details

    doc.status = DocumentStatus.PARSED if amount is not None else DocumentStatus.NEEDS_REVIEW
    doc.updated_at = utcnow()
    return doc


# ============================================================
# Resumen de expensas
# ============================================================

def sync_hoa_summary(db: Session, doc: models.BillDocument) -> Optional[models.HoaSummary]:
    """
    Actualiza el resumen de expensas del documento (solo categoría hoa).

    Si el documento no tiene hoaDetails se usa el importe de arriba con
    edificio/unidad por defecto. Sin período resoluble es un no-op.
    """
    if not _is_hoa(doc.category):
        return None

    data: Dict[str, Any] = dict(doc.hoa_details or {})
    if not data:
        data = {
            "buildingCode": HOA_DEFAULT_BUILDING_CODE,
            "unitCode": HOA_DEFAULT_UNIT_CODE,
        }
    if data.get("totalToPayUnit") is None:
        data["totalToPayUnit"] = doc.amount if doc.amount is not None else doc.total_amount
    if data.get("periodYear") is None or data.get("periodMonth") is None:
        _apply_period(data, doc.period_start)

    return upsert_hoa_summary(db, doc.user_id, data)
