# tolva/app/utils/id_utils.py

"""
Utilidades para la generación de IDs en Tolva.

Objetivo:
- Tener un único sitio donde se definan los patrones de IDs
  (prefijos, longitud, alfabeto).

Incluye:
- random_code: código aleatorio dado un alfabeto.
- generate_random_id: ID simple sin comprobar BD (la colisión es muy
  improbable y además la controla la PK con IntegrityError).
- Wrappers específicos:
    * generate_document_id()
    * generate_income_id()
- build_hoa_summary_id: clave determinista del resumen de expensas.
"""

from __future__ import annotations

import secrets
import string

# Alfabetos que reutilizaremos
UPPER_ALNUM = string.ascii_uppercase + string.digits

DOCUMENT_ID_PREFIX = "DOC-"
INCOME_ID_PREFIX = "INC-"


def random_code(length: int = 6, *, alphabet: str = UPPER_ALNUM) -> str:
    """
    Genera un código aleatorio de `length` caracteres.

    Ejemplo:
        random_code(6) -> 'A3Z91B'
    """
    return "".join(secrets.choice(alphabet) for _ in range(length))


def generate_random_id(
    prefix: str,
    *,
    length: int = 6,
    alphabet: str = UPPER_ALNUM,
) -> str:
    """
    Genera un ID del estilo <prefix><codigo>.

    Ejemplo:
        generate_random_id("DOC-", length=12) -> 'DOC-7K2M9QX0B1ZA'
    """
    return f"{prefix}{random_code(length=length, alphabet=alphabet)}"


def generate_document_id() -> str:
    return generate_random_id(DOCUMENT_ID_PREFIX, length=12)


def generate_income_id() -> str:
    return generate_random_id(INCOME_ID_PREFIX, length=12)


def build_hoa_summary_id(user_id: str, building_code: str, unit_code: str, period_key: str) -> str:
    """
    Clave del resumen de expensas: {userId}_{buildingCode}_{unitCode}_{periodKey}.

    Es determinista: el mismo período siempre cae en la misma fila.
    """
    return f"{user_id}_{building_code}_{unit_code}_{period_key}"
