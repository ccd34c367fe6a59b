# ============================================================
# Tolva - Modelos SQLAlchemy
# - bill_documents: una factura subida (PDF o carga manual)
# - hoa_summaries: resumen derivado de expensas por usuario/edificio/unidad/período
# - income_entries: ingresos del usuario
# - Todas las tablas llevan user_id indexado (consultas por propietario)
# ============================================================

from sqlalchemy import (
    Column, String, Integer, Float, Boolean, DateTime, Text, JSON,
    Enum as SAEnum, Index, text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from tolva.app.core.constants import BillCategory, DocumentStatus
from tolva.app.db.base import Base

# JSONB en Postgres, JSON genérico en el resto (SQLite en tests)
JsonColumn = JSON().with_variant(JSONB(), "postgresql")


def _enum_values(enum_cls):
    return [m.value for m in enum_cls]


# =============================================
# 1. DOCUMENTOS (FACTURAS)
# =============================================

class BillDocument(Base):
    __tablename__ = "bill_documents"
    __table_args__ = (
        Index("ix_bill_documents_user_uploaded", "user_id", "uploaded_at"),
        {"extend_existing": True},
    )

    id            = Column(String, primary_key=True, index=True)
    user_id       = Column(String, nullable=False, index=True)

    file_name     = Column(String(512), nullable=False)
    storage_url   = Column(String, nullable=True)
    provider      = Column(String(256), nullable=True)
    provider_id   = Column(String(128), nullable=True)

    category      = Column(
        SAEnum(BillCategory, name="bill_category", native_enum=False, values_callable=_enum_values),
        nullable=False,
        default=BillCategory.OTHER,
        server_default=text("'other'"),
    )

    amount        = Column(Float, nullable=True)
    total_amount  = Column(Float, nullable=True)
    currency      = Column(String(3), nullable=True)

    # Fechas "solo día" ancladas a hora fija UTC (ver utils/date_utils.py)
    due_date      = Column(DateTime(timezone=True), nullable=True)
    issue_date    = Column(DateTime(timezone=True), nullable=True)
    period_start  = Column(DateTime(timezone=True), nullable=True)
    period_end    = Column(DateTime(timezone=True), nullable=True)

    status        = Column(
        SAEnum(DocumentStatus, name="document_status", native_enum=False, values_callable=_enum_values),
        nullable=False,
        default=DocumentStatus.PENDING,
    )
    manual_entry  = Column(Boolean, nullable=False, default=False, server_default=text("false"))
    text_extract  = Column(Text, nullable=True)

    # Datos de expensas (solo category = hoa), claves en camelCase
    hoa_details   = Column(JsonColumn, nullable=True)

    uploaded_at   = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at    = Column(DateTime(timezone=True), nullable=True)


# =============================================
# 2. RESUMEN DE EXPENSAS
# =============================================

class HoaSummary(Base):
    """
    Un registro por (usuario, edificio, unidad, período).

    id = "{user_id}_{building_code}_{unit_code}_{period_key}"
    """
    __tablename__ = "hoa_summaries"
    __table_args__ = {"extend_existing": True}

    id                      = Column(String, primary_key=True, index=True)
    user_id                 = Column(String, nullable=False, index=True)

    building_code           = Column(String, nullable=False)
    building_address        = Column(String, nullable=True)
    unit_code               = Column(String, nullable=False)
    unit_label              = Column(String, nullable=True)
    owner_name              = Column(String, nullable=True)

    period_key              = Column(String(7), nullable=False, index=True)
    period_label            = Column(String, nullable=True)
    period_year             = Column(Integer, nullable=False)
    period_month            = Column(Integer, nullable=False)

    first_due_amount        = Column(Float, nullable=True)
    second_due_amount       = Column(Float, nullable=True)
    total_building_expenses = Column(Float, nullable=True)
    total_to_pay_unit       = Column(Float, nullable=True)

    rubros                  = Column(JsonColumn, nullable=True)
    rubros_total            = Column(Float, nullable=False, default=0.0)
    rubros_with_totals      = Column(JsonColumn, nullable=True)

    created_at              = Column(DateTime(timezone=True), nullable=False)
    updated_at              = Column(DateTime(timezone=True), nullable=False)


# =============================================
# 3. INGRESOS
# =============================================

class IncomeEntry(Base):
    __tablename__ = "income_entries"
    __table_args__ = {"extend_existing": True}

    id          = Column(String, primary_key=True, index=True)
    user_id     = Column(String, nullable=False, index=True)

    amount      = Column(Float, nullable=False)
    source      = Column(String(128), nullable=False, default="Salary")
    currency    = Column(String(3), nullable=False, default="ARS")
    date        = Column(DateTime(timezone=True), nullable=False)

    created_at  = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at  = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
