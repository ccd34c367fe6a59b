# tolva/app/api/v1/parse_router.py

"""
Router de EXTRACCIÓN (POST /api/v1/parse).

Flujo:
1. Comprueba que el documento existe, es del usuario y tiene PDF.
2. Descarga el PDF y lo pasa por el LLM (services/parser_service.py).
3. Vuelca lo extraído en el documento (status parsed / needs_review).
4. Si es de expensas, actualiza el resumen del período.

Si falla la descarga, el PDF o el LLM: status = error y 502. No se
reintenta; el cliente puede volver a llamar.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from tolva.app.api.v1.auth_router import require_user_id
from tolva.app.api.v1.documents_router import get_document_for_user, refresh_hoa_summary
from tolva.app.core.constants import DocumentStatus
from tolva.app.core.errors import BillingParseError
from tolva.app.db.session import get_db
from tolva.app.schemas.documents import DocumentSchema, ParseRequestSchema, ParseResponseSchema
from tolva.app.services import parser_service
from tolva.app.services.document_service import apply_parse_result
from tolva.app.utils.date_utils import utcnow

logger = logging.getLogger(__name__)

router = APIRouter(tags=["parse"])


@router.post("/parse", response_model=ParseResponseSchema)
def parse_document(
    body: ParseRequestSchema,
    db: Session = Depends(get_db),
    user_id: str = Depends(require_user_id),
):
    doc = get_document_for_user(db, body.document_id, user_id)
    if not doc.storage_url:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="El documento no tiene PDF asociado",
        )

    try:
        result = parser_service.parse_document_pdf(doc.storage_url)
    except BillingParseError as e:
        logger.warning("[parse] fallo id=%s stage=%s code=%s", doc.id, e.stage, e.code)
        doc.status = DocumentStatus.ERROR
        doc.updated_at = utcnow()
        db.commit()
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message) from e

    apply_parse_result(doc, result)
    db.commit()
    db.refresh(doc)
    logger.info("[parse] ok id=%s category=%s status=%s", doc.id, doc.category.value, doc.status.value)

    refresh_hoa_summary(db, doc)
    db.refresh(doc)
    return ParseResponseSchema(document=DocumentSchema.model_validate(doc), result=result)
