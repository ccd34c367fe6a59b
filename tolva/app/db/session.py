# tolva/app/db/session.py
"""
Gestión de la conexión a la base de datos (SQLAlchemy).

Puntos clave:
- Construimos engine desde settings.resolve_database_url()
- En Postgres, connect_args fuerza parámetros críticos en el driver psycopg:
  - prepare_threshold=0 (INT): evita problemas con prepared statements y poolers
  - options: search_path
  - connect_timeout, sslmode
- NullPool opcional: recomendado cuando pasas por pooler (p.ej. PgBouncer)
- SQLite (local/tests): sin connect_args de psycopg.
"""

from __future__ import annotations

from urllib.parse import urlparse

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

from tolva.app.core.config import settings


def _should_use_nullpool(db_url: str) -> bool:
    """
    Decide si usar NullPool.

    - Si DB_USE_NULLPOOL está activado.
    - Si detectamos puertos típicos de poolers (6543).
    """
    if settings.DB_USE_NULLPOOL:
        return True

    p = urlparse(db_url)
    host = (p.hostname or "").lower()
    try:
        port = p.port or 0
    except ValueError:
        port = 0
    return "pooler." in host or port == 6543


def _is_postgres(db_url: str) -> bool:
    return db_url.startswith("postgresql")


# 1) Resolver URL final de BD
DATABASE_URL = settings.resolve_database_url()

engine_kwargs = dict(pool_pre_ping=True, future=True)

if _is_postgres(DATABASE_URL):
    # Importante: prepare_threshold DEBE ser int, no string.
    engine_kwargs["connect_args"] = {
        "connect_timeout": 10,
        "sslmode": "require",
        "options": "-c search_path=public",
        "prepare_threshold": 0,
    }
    if _should_use_nullpool(DATABASE_URL):
        engine_kwargs["poolclass"] = NullPool
elif DATABASE_URL.startswith("sqlite"):
    engine_kwargs["connect_args"] = {"check_same_thread": False}

engine = create_engine(DATABASE_URL, **engine_kwargs)


if _is_postgres(DATABASE_URL):

    @event.listens_for(engine, "connect")
    def _pgbouncer_cleanup(dbapi_connection, connection_record):
        """
        Algunos poolers no llevan bien prepared statements persistentes.
        DEALLOCATE ALL al conectar evita errores raros.
        """
        cur = dbapi_connection.cursor()
        try:
            cur.execute("DEALLOCATE ALL;")
        finally:
            cur.close()


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)


def get_db():
    """
    Dependencia FastAPI:
    - abre sesión
    - cierra sesión al finalizar
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
