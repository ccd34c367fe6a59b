# tolva/app/api/v1/auth_router.py

"""
Autenticación de Tolva.

Endpoints:
- GET /api/v1/auth/me -> devuelve el user_id del token

Reglas:
- Token tipo Bearer (Authorization: Bearer <token>).
- JWT HS256 firmado con SECRET_KEY; el ID de usuario va en 'sub'.
- Tolva no guarda usuarios: el 'sub' del token es el propietario de los
  documentos e ingresos (frontera de autorización).
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError

from tolva.app.core.config import settings

# ---------- Config JWT ----------
SECRET_KEY = settings.SECRET_KEY
ALGORITHM = settings.ALGORITHM
ACCESS_TOKEN_EXPIRE_MINUTES = settings.ACCESS_TOKEN_EXPIRE_MINUTES

# ---------- Router ----------
router = APIRouter(prefix="/auth", tags=["auth"])
security = HTTPBearer(auto_error=False)


def create_access_token(sub: str, minutes: int = ACCESS_TOKEN_EXPIRE_MINUTES) -> str:
    """
    Crea un JWT con:
    - sub: identificador del usuario (string)
    - iat: momento de emisión (timestamp)
    - exp: momento de expiración (iat + minutes)
    """
    now = datetime.now(tz=timezone.utc)
    exp = now + timedelta(minutes=minutes)
    payload = {"sub": sub, "iat": int(now.timestamp()), "exp": int(exp.timestamp())}
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)


def require_user_id(
    creds: Optional[HTTPAuthorizationCredentials] = Security(security),
) -> str:
    """
    Dependencia que obliga a estar autenticado.

    - Lee el token Bearer del header Authorization.
    - Decodifica el JWT.
    - Valida que no esté expirado y que tenga 'sub'.

    Si falla, lanza 401.
    """
    if not creds or creds.scheme.lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Falta Bearer token",
        )

    try:
        payload = jwt.decode(creds.credentials, SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        # Señal clara para el cliente para hacer logout
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="token_expired",
        )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token inválido",
        )

    sub = payload.get("sub")
    if not sub:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token sin 'sub'",
        )
    return str(sub)


@router.get("/me")
def me(user_id: str = Depends(require_user_id)):
    """
    Devuelve el usuario autenticado a partir del token Bearer.
    """
    return {"userId": user_id}
