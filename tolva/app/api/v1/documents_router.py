# tolva/app/api/v1/documents_router.py

"""
Router de DOCUMENTOS (facturas).

Endpoints (prefix /api/v1/documents):
- POST   /                  -> alta (subida de PDF o carga manual)
- GET    /                  -> lista del usuario, más recientes primero
- GET    /{id}              -> detalle
- PATCH  /{id}              -> edición parcial + reconciliación de expensas
- DELETE /{id}              -> baja
- GET    /{id}/calendar-url -> enlace de recordatorio en Google Calendar

Reglas:
- Todos los endpoints filtran por el usuario autenticado (require_user_id).
- Documento de otro usuario -> 403; inexistente -> 404.
- Tras guardar un documento de expensas se actualiza el resumen del
  período. Ese paso es "best effort": si falla se loguea y el documento
  queda guardado igual.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tolva.app.api.v1.auth_router import require_user_id
from tolva.app.db import models
from tolva.app.db.session import get_db
from tolva.app.schemas.documents import (
    CalendarUrlResponse,
    DocumentCreateSchema,
    DocumentCreatedResponse,
    DocumentListResponse,
    DocumentSchema,
    DocumentUpdateSchema,
)
from tolva.app.services.document_service import (
    create_document,
    list_documents,
    sync_hoa_summary,
    update_document,
)
from tolva.app.utils.billing_utils import build_calendar_url

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["documents"])


# ============================================================
# Helpers
# ============================================================

def get_document_for_user(db: Session, document_id: str, user_id: str) -> models.BillDocument:
    """
    Recupera un documento asegurando que pertenece al usuario actual.
    """
    doc = db.get(models.BillDocument, document_id)
    if not doc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Documento no encontrado")
    if doc.user_id != user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Prohibido")
    return doc


def refresh_hoa_summary(db: Session, doc: models.BillDocument) -> None:
    """
    Actualiza el resumen de expensas del documento y confirma.

    El documento ya está confirmado: un fallo aquí no lo deshace.
    """
    try:
        sync_hoa_summary(db, doc)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("[documents] no se pudo actualizar el resumen de expensas id=%s", doc.id)


# ============================================================
# CRUD
# ============================================================

@router.post("", response_model=DocumentCreatedResponse)
@router.post("/", response_model=DocumentCreatedResponse, include_in_schema=False)
def create_document_endpoint(
    payload: DocumentCreateSchema,
    db: Session = Depends(get_db),
    user_id: str = Depends(require_user_id),
):
    """
    Crea un documento para el usuario actual.

    - status = pending si hay storageUrl, needs_review si es carga manual.
    - category clasificada (providerId / category / provider).
    """
    doc = create_document(db, user_id, payload)
    db.commit()
    db.refresh(doc)

    refresh_hoa_summary(db, doc)
    return DocumentCreatedResponse(document_id=doc.id)


@router.get("", response_model=DocumentListResponse)
@router.get("/", response_model=DocumentListResponse, include_in_schema=False)
def list_documents_endpoint(
    db: Session = Depends(get_db),
    user_id: str = Depends(require_user_id),
):
    """Documentos del usuario ordenados por uploadedAt descendente."""
    docs = list_documents(db, user_id)
    return DocumentListResponse(documents=[DocumentSchema.model_validate(d) for d in docs])


@router.get("/{document_id}", response_model=DocumentSchema)
def get_document_endpoint(
    document_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(require_user_id),
):
    return get_document_for_user(db, document_id, user_id)


@router.patch("/{document_id}", response_model=DocumentSchema)
def update_document_endpoint(
    document_id: str,
    payload: DocumentUpdateSchema,
    db: Session = Depends(get_db),
    user_id: str = Depends(require_user_id),
):
    """
    Edición parcial.

    - Campo ausente -> no se toca; campo a null -> se limpia.
    - amount se replica en totalAmount.
    - Expensas: amount <-> hoaDetails.totalToPayUnit según qué lado se
      haya editado, y período derivado de periodStart.
    """
    doc = get_document_for_user(db, document_id, user_id)
    update_document(db, doc, payload)
    db.commit()
    db.refresh(doc)

    refresh_hoa_summary(db, doc)
    db.refresh(doc)
    return doc


@router.delete("/{document_id}")
def delete_document_endpoint(
    document_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(require_user_id),
):
    doc = get_document_for_user(db, document_id, user_id)
    db.delete(doc)
    db.commit()
    logger.info("[documents] borrado id=%s user=%s", document_id, user_id)
    return {"success": True}


# ============================================================
# Recordatorio
# ============================================================

@router.get("/{document_id}/calendar-url", response_model=CalendarUrlResponse)
def calendar_url_endpoint(
    document_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(require_user_id),
):
    doc = get_document_for_user(db, document_id, user_id)
    return CalendarUrlResponse(url=build_calendar_url(doc))
