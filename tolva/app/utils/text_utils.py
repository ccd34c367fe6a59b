# tolva/app/utils/text_utils.py

"""
Utilidades de texto reutilizables en toda la app.

- normalize_search_value: minúsculas + sin tildes (para comparar proveedores).
- normalize_upper: MAYÚSCULAS + trim, None si queda vacío.
- clean_text: trim, None si queda vacío (sin cambiar mayúsculas).
"""

from __future__ import annotations

import unicodedata
from typing import Any, Optional


def normalize_search_value(value: Optional[str]) -> str:
    """
    Normaliza una cadena para búsquedas por palabra clave.

    - Convierte a minúsculas.
    - Normaliza en NFD y elimina las marcas combinantes (tildes, diéresis).

    Ejemplos:
    - "Energía"  -> "energia"
    - "UALÁ"     -> "uala"
    - None       -> ""
    """
    if not value:
        return ""
    s = unicodedata.normalize("NFD", str(value).lower())
    return "".join(c for c in s if not unicodedata.combining(c))


def normalize_upper(value: Optional[str]) -> Optional[str]:
    """
    Normaliza una cadena a MAYÚSCULAS y elimina espacios al principio y final.

    - None -> None
    - "  hola  " -> "HOLA"
    - "   "      -> None
    """
    if value is None:
        return None
    s = str(value).strip().upper()
    return s or None


def clean_text(value: Any) -> Optional[str]:
    """
    Devuelve el string recortado, o None si no es string o queda vacío.
    """
    if not isinstance(value, str):
        return None
    s = value.strip()
    return s or None
