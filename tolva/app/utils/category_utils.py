# tolva/app/utils/category_utils.py

"""
Clasificador de categorías de facturas.

classify(provider_id, raw_category, provider_name) -> BillCategory

Orden de resolución (gana la primera coincidencia):
1. providerId exacto en la tabla de pistas.
2. raw_category normalizada que ya es una categoría válida
   (salvo los legacy "service"/"services", que van a OTHER).
3. Palabras clave: cualquier pista cuya palabra clave esté contenida en
   providerId, providerName o raw_category (todo sin tildes, minúsculas).
   Se recorre la tabla en orden.
4. OTHER.
"""

from __future__ import annotations

from typing import Optional

from tolva.app.core.constants import (
    CATEGORY_LABELS,
    CATEGORY_VALUES,
    LEGACY_SERVICE_CATEGORIES,
    BillCategory,
)
from tolva.app.core.provider_hints import NORMALIZED_HINT_KEYWORDS, PROVIDER_HINTS_BY_ID
from tolva.app.utils.text_utils import normalize_search_value


def _normalize_value(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    return normalize_search_value(value).strip() or None


def classify(
    provider_id: Optional[str] = None,
    raw_category: Optional[str] = None,
    provider_name: Optional[str] = None,
) -> BillCategory:
    """
    Devuelve siempre una categoría del conjunto cerrado (OTHER por defecto).
    """
    # 1) Pista exacta por providerId
    if provider_id:
        hint = PROVIDER_HINTS_BY_ID.get(provider_id)
        if hint:
            return hint.category

    # 2) La categoría cruda ya es válida
    normalized_category = _normalize_value(raw_category)
    if normalized_category in LEGACY_SERVICE_CATEGORIES:
        return BillCategory.OTHER
    if normalized_category in CATEGORY_VALUES:
        return BillCategory(normalized_category)

    # 3) Palabras clave, en el orden de la tabla
    candidates = [
        v for v in (_normalize_value(provider_id), _normalize_value(provider_name), normalized_category) if v
    ]
    if candidates:
        for hint, keywords in NORMALIZED_HINT_KEYWORDS:
            if any(keyword in candidate for keyword in keywords for candidate in candidates):
                return hint.category

    return BillCategory.OTHER


def get_category_label(category: Optional[str]) -> str:
    """Etiqueta legible de una categoría ("Other" si no se reconoce)."""
    try:
        return CATEGORY_LABELS[BillCategory(category)]
    except ValueError:
        return CATEGORY_LABELS[BillCategory.OTHER]
