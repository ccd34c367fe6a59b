# tolva/app/core/errors.py

"""
Errores de negocio que se pueden mostrar tal cual al cliente.

- UserFacingError: base con code/message/stage/details y to_dict().
- BillingParseError: fallo del proveedor externo al extraer una factura
  (descarga del PDF, lectura del PDF o llamada al LLM). Es terminal para
  ese intento: no hay reintento automático, el cliente puede reenviar.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class UserFacingError(Exception):
    code: str
    message: str
    details: Optional[dict[str, Any]] = None
    stage: Optional[str] = None

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.stage:
            out["stage"] = self.stage
        if self.details:
            out["details"] = self.details
        return out


@dataclass
class BillingParseError(UserFacingError):
    code: str = "parse_failed"
    message: str = "No se pudo procesar la factura"
