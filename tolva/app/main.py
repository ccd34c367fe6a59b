# tolva/app/main.py

"""
Punto de entrada principal del backend de Tolva.

Aquí definimos:
- La instancia de FastAPI.
- CORS.
- Manejadores de error (validación -> 400, errores de negocio, 500 genérico).
- Endpoints base: /, /health, /ready.
- Routers de negocio (api/v1) bajo /api/v1.

IMPORTANTE:
- Cargamos .env antes de inicializar settings / engine.
"""

from __future__ import annotations

import logging
from pathlib import Path

# ---------------------------------------------------------------------------
# 0) Carga de variables de entorno (.env) ANTES de importar engine
# ---------------------------------------------------------------------------
from dotenv import load_dotenv

# Este fichero está en: tolva/app/main.py -> .env en la raíz del repo o en el CWD
_ROOT_ENV = Path(__file__).resolve().parents[2] / ".env"
if _ROOT_ENV.is_file():
    load_dotenv(_ROOT_ENV)
else:
    load_dotenv()

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from sqlalchemy import text as sa_text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tolva.app.api.v1 import (
    auth_router,
    dashboard_router,
    documents_router,
    hoa_router,
    income_router,
    parse_router,
)
from tolva.app.core.config import settings
from tolva.app.core.errors import BillingParseError, UserFacingError
from tolva.app.core.logging import setup_logging
from tolva.app.db.base import Base
from tolva.app.db.session import engine, get_db

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


# ---------------------------------------------------------------------------
# 1) Generador de operation_id únicos
# ---------------------------------------------------------------------------
def custom_generate_unique_id(route: APIRoute) -> str:
    """
    Genera un operation_id estable y único para OpenAPI.

    - Patrón: <tag>_<route.name>
    """
    tag_prefix = route.tags[0] if route.tags else "default"
    return f"{tag_prefix}_{route.name}"


# ---------------------------------------------------------------------------
# 2) Crear la app FastAPI
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Tolva API",
    version="0.1.0",
    description="Facturas, expensas e ingresos: extracción, categorización y dashboard.",
    generate_unique_id_function=custom_generate_unique_id,
)


# ---------------------------------------------------------------------------
# 3) CORS
# ---------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# 4) Manejadores de error
# ---------------------------------------------------------------------------
def _validation_message(err: dict) -> str:
    msg = str(err.get("msg") or "")
    # pydantic antepone "Value error, " a los ValueError de los validadores
    if msg.startswith("Value error, "):
        return msg[len("Value error, "):]
    loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
    return f"{loc}: {msg}" if loc else msg


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    detail = ", ".join(_validation_message(e) for e in exc.errors()) or "Payload inválido"
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": detail})


@app.exception_handler(UserFacingError)
async def user_facing_exception_handler(request: Request, exc: UserFacingError):
    code = status.HTTP_502_BAD_GATEWAY if isinstance(exc, BillingParseError) else status.HTTP_400_BAD_REQUEST
    return JSONResponse(status_code=code, content={"detail": exc.message, "error": exc.to_dict()})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("[api] error no controlado %s %s", request.method, request.url.path)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": "Error interno"})


# ---------------------------------------------------------------------------
# 5) Evento startup
# ---------------------------------------------------------------------------
@app.on_event("startup")
def on_startup() -> None:
    """
    Arranque del backend.

    - Configura logging.
    - Crea tablas si BOOTSTRAP_CREATE_ALL (entornos locales).
    - Comprueba conectividad con la BD.
    """
    setup_logging()
    logger.info("[startup] ENV=%s OPENAI configurado=%s", settings.ENV, bool(settings.OPENAI_API_KEY))

    try:
        if settings.BOOTSTRAP_CREATE_ALL:
            Base.metadata.create_all(bind=engine)
            logger.info("[startup] tablas creadas/verificadas")
        with engine.connect() as conn:
            conn.execute(sa_text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("[startup] Error al comprobar la BD: %s", e)


# ---------------------------------------------------------------------------
# 6) Endpoints básicos
# ---------------------------------------------------------------------------
@app.get("/", tags=["core"])
def root() -> dict:
    """Endpoint raíz de la API."""
    return {"message": "Tolva backend is running"}


@app.get("/health", tags=["core"])
def health_simple() -> dict:
    """
    Healthcheck simple:
    - servidor vivo (sin tocar BD).
    """
    return {"status": "ok"}


@app.get("/ready", tags=["core"])
def ready(db: Session = Depends(get_db)) -> dict:
    """
    Readiness check:
    - servidor vivo + BD accesible
    """
    try:
        db.execute(sa_text("SELECT 1"))
        return {"status": "ok", "db": "reachable"}
    except SQLAlchemyError as e:
        return {"status": "error", "db": "unreachable", "detail": str(e)}


# ---------------------------------------------------------------------------
# 7) Routers de negocio
# ---------------------------------------------------------------------------
app.include_router(auth_router.router, prefix=API_PREFIX)
app.include_router(documents_router.router, prefix=API_PREFIX)
app.include_router(parse_router.router, prefix=API_PREFIX)
app.include_router(income_router.router, prefix=API_PREFIX)
app.include_router(hoa_router.router, prefix=API_PREFIX)
app.include_router(dashboard_router.router, prefix=API_PREFIX)
