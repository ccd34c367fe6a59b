# tolva/app/core/constants.py

"""
Constantes de negocio de Tolva.

Aquí concentramos todos los "strings mágicos" que usamos en varios sitios:
- categorías de facturas (conjunto cerrado)
- estados de documento
- valores por defecto de expensas (HOA)
"""

from __future__ import annotations

from enum import Enum


# ----------------------------
# Categorías de facturas
# ----------------------------
class BillCategory(str, Enum):
    ELECTRICITY = "electricity"
    WATER = "water"
    GAS = "gas"
    INTERNET = "internet"
    HOA = "hoa"
    HEALTH = "health"
    CREDIT_CARD = "credit_card"
    OTHER = "other"


CATEGORY_LABELS = {
    BillCategory.ELECTRICITY: "Electricity",
    BillCategory.WATER: "Water",
    BillCategory.GAS: "Gas",
    BillCategory.INTERNET: "Internet / Mobile",
    BillCategory.HOA: "Home / HOA",
    BillCategory.HEALTH: "Health",
    BillCategory.CREDIT_CARD: "Credit Card",
    BillCategory.OTHER: "Other",
}

# Orden de presentación en el dashboard (mismo orden que el enum)
CATEGORY_ORDER = tuple(BillCategory)

CATEGORY_VALUES = frozenset(c.value for c in BillCategory)

# Valores legacy que llegaban como categoría y ya no existen
LEGACY_SERVICE_CATEGORIES = frozenset({"service", "services"})


# ----------------------------
# Estados de documento
# ----------------------------
class DocumentStatus(str, Enum):
    PENDING = "pending"
    PARSED = "parsed"
    NEEDS_REVIEW = "needs_review"
    ERROR = "error"
    # Lo escribe el toggle "marcar como pagada" del dashboard (pending <-> paid)
    PAID = "paid"


# ----------------------------
# Expensas (HOA)
# ----------------------------
HOA_DEFAULT_BUILDING_CODE = "EDIFICIO"
HOA_DEFAULT_UNIT_CODE = "0005"
HOA_UNIT_CODE_WIDTH = 4

# Locale para los nombres de mes de las etiquetas de período ("OCTUBRE/2025")
HOA_PERIOD_LOCALE = "es_AR"


# ----------------------------
# Límites de payload
# ----------------------------
MAX_FILE_NAME_LENGTH = 512
MAX_PROVIDER_LENGTH = 256
MAX_PROVIDER_ID_LENGTH = 128
MAX_CATEGORY_LENGTH = 64
MAX_TEXT_EXTRACT_LENGTH = 20_000
MAX_INCOME_SOURCE_LENGTH = 128
