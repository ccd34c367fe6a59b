# tolva/app/core/provider_hints.py

"""
Tabla estática de proveedores conocidos (pistas para clasificar facturas).

Cada pista asocia un proveedor a su categoría y a una lista de palabras
clave. El ORDEN de PROVIDER_HINTS importa: al buscar por palabra clave
gana la primera pista que coincide, por eso los proveedores concretos van
antes que las pistas genéricas del final.

Estructuras derivadas (se construyen una sola vez al importar):
- PROVIDER_HINTS_BY_ID: providerId -> pista.
- PROVIDER_HINT_KEYWORD_MAP: palabra clave normalizada -> pista.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Tuple

from tolva.app.core.constants import BillCategory
from tolva.app.utils.text_utils import normalize_search_value


@dataclass(frozen=True)
class ProviderHint:
    provider_id: str
    provider_name: str
    category: BillCategory
    keywords: Tuple[str, ...]


def _hint(provider_id: str, provider_name: str, category: BillCategory, *keywords: str) -> ProviderHint:
    return ProviderHint(provider_id, provider_name, category, tuple(keywords))


PROVIDER_HINTS: Tuple[ProviderHint, ...] = (
    # Internet / móvil
    _hint("personal", "Personal (Fibertel)", BillCategory.INTERNET,
          "personal", "fibertel", "telecom argentina", "cablevision"),
    _hint("flow", "Flow (Cablevisión Telecom)", BillCategory.INTERNET,
          "flow", "fibertel flow", "flow empresas"),
    _hint("telecentro", "Telecentro", BillCategory.INTERNET, "telecentro"),
    _hint("claro", "Claro", BillCategory.INTERNET, "claro"),
    _hint("movistar", "Movistar", BillCategory.INTERNET, "movistar"),
    _hint("movistar_tv", "Movistar TV", BillCategory.INTERNET, "movistar tv", "movistar play"),
    _hint("iplan", "iPlan", BillCategory.INTERNET, "iplan", "iplan fiber"),
    _hint("fibercorp", "Fibercorp", BillCategory.INTERNET, "fibercorp", "telecom empresas"),
    _hint("telecom", "Telecom Argentina", BillCategory.INTERNET, "telecom argentina"),
    # Electricidad
    _hint("edesur", "Edesur", BillCategory.ELECTRICITY, "edesur"),
    _hint("edenor", "Edenor", BillCategory.ELECTRICITY, "edenor"),
    _hint("epec", "EPEC (Córdoba)", BillCategory.ELECTRICITY, "epec"),
    _hint("edea", "EDEA", BillCategory.ELECTRICITY, "edea"),
    _hint("edesa", "EDESA", BillCategory.ELECTRICITY, "edesa"),
    _hint("epe_santafe", "EPE Santa Fe", BillCategory.ELECTRICITY, "epe", "energia santafe"),
    # Agua
    _hint("aysa", "AySA", BillCategory.WATER, "aysa", "agua y saneamiento"),
    _hint("aguas_cordobesas", "Aguas Cordobesas", BillCategory.WATER, "aguas cordobesas"),
    # Gas
    _hint("metrogas", "Metrogas", BillCategory.GAS, "metrogas"),
    _hint("naturgy", "Naturgy", BillCategory.GAS, "naturgy", "gas natural ban", "gasban"),
    _hint("camuzzi", "Camuzzi Gas", BillCategory.GAS, "camuzzi"),
    # Expensas
    _hint("expensas_genericas", "Expensas / Consorcio", BillCategory.HOA,
          "expensa", "consorcio", "administracion"),
    # Tarjetas
    _hint("visa", "Visa", BillCategory.CREDIT_CARD, "visa"),
    _hint("mastercard", "Mastercard", BillCategory.CREDIT_CARD, "mastercard"),
    _hint("amex", "American Express", BillCategory.CREDIT_CARD, "amex", "american express"),
    _hint("naranja", "Tarjeta Naranja X", BillCategory.CREDIT_CARD, "naranja", "tarjeta naranja", "naranja x"),
    _hint("cabal", "Cabal", BillCategory.CREDIT_CARD, "cabal"),
    _hint("maestro", "Maestro", BillCategory.CREDIT_CARD, "maestro"),
    # Otros
    _hint("coto", "Coto", BillCategory.OTHER, "coto"),
    _hint("mercadopago", "Mercado Pago", BillCategory.OTHER, "mercado pago", "mp"),
    _hint("uala", "Ualá", BillCategory.OTHER, "uala"),
    # Salud / prepagas
    _hint("osde", "OSDE", BillCategory.HEALTH, "osde"),
    _hint("swiss_medical", "Swiss Medical", BillCategory.HEALTH, "swiss medical", "swiss", "smg"),
    _hint("galeno", "Galeno", BillCategory.HEALTH, "galeno"),
    _hint("medicus", "Medicus", BillCategory.HEALTH, "medicus"),
    _hint("omint", "OMINT", BillCategory.HEALTH, "omint"),
    _hint("sancor_salud", "Sancor Salud", BillCategory.HEALTH, "sancor salud", "sancor"),
    _hint("federada_salud", "Federada Salud", BillCategory.HEALTH, "federada salud", "federada"),
    _hint("accord_salud", "Accord Salud", BillCategory.HEALTH, "accord salud", "accord"),
    _hint("premedic", "Premedic", BillCategory.HEALTH, "premedic"),
    _hint("hominis", "Hominis", BillCategory.HEALTH, "hominis"),
    # Pistas genéricas por categoría (siempre al final)
    _hint("generic_health", "Health / Prepaga", BillCategory.HEALTH,
          "salud", "medicina", "prepaga", "obra social", "servicio de salud"),
    _hint("generic_electricity", "Electricity Service", BillCategory.ELECTRICITY,
          "luz", "energia", "electricidad", "electric"),
    _hint("generic_water", "Water Service", BillCategory.WATER, "agua", "aguas", "saneamiento"),
    _hint("generic_gas", "Gas Service", BillCategory.GAS, "gas", "gas natural"),
    _hint("generic_internet", "Internet/Mobile Service", BillCategory.INTERNET,
          "internet", "wifi", "fibra", "banda ancha", "movil", "celular"),
    _hint("generic_hoa", "HOA / Expensas", BillCategory.HOA,
          "expensa", "consorcio", "administracion", "edificio"),
    _hint("generic_credit_card", "Credit Card", BillCategory.CREDIT_CARD,
          "tarjeta", "credito", "resumen", "banco"),
)


def _build_id_map() -> Mapping[str, ProviderHint]:
    return MappingProxyType({h.provider_id: h for h in PROVIDER_HINTS})


def _build_keyword_map() -> Mapping[str, ProviderHint]:
    """
    Palabra clave normalizada -> pista.

    Si una palabra clave aparece en varias pistas, queda la última
    (las genéricas), igual que un dict que se va sobrescribiendo.
    """
    out = {}
    for hint in PROVIDER_HINTS:
        for keyword in hint.keywords:
            normalized = normalize_search_value(keyword)
            if normalized:
                out[normalized] = hint
    return MappingProxyType(out)


PROVIDER_HINTS_BY_ID: Mapping[str, ProviderHint] = _build_id_map()
PROVIDER_HINT_KEYWORD_MAP: Mapping[str, ProviderHint] = _build_keyword_map()

# Palabras clave ya normalizadas, en el orden de la tabla (para el escaneo por substring)
NORMALIZED_HINT_KEYWORDS: Tuple[Tuple[ProviderHint, Tuple[str, ...]], ...] = tuple(
    (h, tuple(k for k in (normalize_search_value(kw) for kw in h.keywords) if k))
    for h in PROVIDER_HINTS
)
