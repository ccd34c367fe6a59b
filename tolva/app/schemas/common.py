# tolva/app/schemas/common.py

"""
Base común de los schemas Pydantic de Tolva.

La API habla JSON en camelCase (fileName, totalToPayUnit, ...), mientras
que en Python usamos snake_case. CamelModel genera los alias y acepta
ambos nombres en la entrada.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ErrorResponse(BaseModel):
    """Forma de los errores devueltos por la API."""
    detail: str
