# tolva/app/core/config.py
"""
Configuración central del backend de Tolva.

Objetivos del diseño:
1) Evitar credenciales "hardcodeadas" en código (JWT, OpenAI, BD).
2) Tener UNA fuente de verdad para la BD en runtime: DATABASE_URL.
3) Normalizar la URL de Postgres:
   - driver psycopg (no psycopg2)
   - sslmode=require
   - search_path=public
   Otros dialectos (sqlite en local/tests) se usan tal cual.

NOTA práctica (Render):
- No pongas valores entre comillas. Ej: DATABASE_URL=postgresql+...
  Si pones DATABASE_URL="postgresql+..." las comillas forman parte del valor.
"""

from __future__ import annotations

import re
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


def _strip_wrapping_quotes(value: str) -> str:
    # DATABASE_URL="..." en el panel de Render llega con las comillas
    v = (value or "").strip()
    if len(v) >= 2 and ((v[0] == v[-1] == '"') or (v[0] == v[-1] == "'")):
        return v[1:-1].strip()
    return v


def _is_postgres_url(url: str) -> bool:
    return url.startswith("postgres://") or url.startswith("postgresql")


def _ensure_psycopg_driver(url: str) -> str:
    """
    Cualquier variante postgres(ql)[+psycopg2]:// pasa a postgresql+psycopg://.
    """
    u = url.strip()
    u = re.sub(r"^postgres://", "postgresql://", u)
    u = re.sub(r"^postgresql\+psycopg2://", "postgresql+psycopg://", u)
    u = re.sub(r"^postgresql://", "postgresql+psycopg://", u)
    return u


def _append_query_param(url: str, key: str, value: str) -> str:
    if re.search(rf"(^|[?&]){re.escape(key)}=", url):
        return url
    sep = "&" if "?" in url else "?"
    return f"{url}{sep}{key}={value}"


def _ensure_search_path_public(url: str) -> str:
    if "options=" in url:
        return url
    # URL-encoded: "-c search_path=public" -> "-c%20search_path%3Dpublic"
    return _append_query_param(url, "options", "-c%20search_path%3Dpublic")


def _csv_to_list(value: str) -> List[str]:
    v = (value or "").strip()
    if not v:
        return []
    return [x.strip() for x in v.split(",") if x.strip()]


class Settings(BaseSettings):
    """
    Ajustes leídos del entorno (y de .env si existe). Los nombres de
    campo coinciden con las variables de entorno.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # ---- entorno general
    ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # ---- seguridad / JWT
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # ---- CORS: CSV en env "http://a,http://b". Vacío -> "*"
    CORS_ORIGINS: str = ""

    # ---- base de datos
    DATABASE_URL: Optional[str] = None
    DB_USE_NULLPOOL: bool = False
    BOOTSTRAP_CREATE_ALL: bool = False

    # ---- OpenAI (extracción de facturas)
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_BASE_URL: Optional[str] = None
    OPENAI_MODEL: str = "gpt-5.1-mini"
    OPENAI_TIMEOUT_SECONDS: float = 60.0

    # ---- descarga del PDF guardado (storageUrl)
    PDF_FETCH_TIMEOUT_SECONDS: float = 20.0

    # ---- fechas "solo día": se anclan a esta hora UTC para no correr de día
    DATE_ANCHOR_HOUR: int = 12

    # ---- ingresos
    DEFAULT_INCOME_CURRENCY: str = "ARS"
    DEFAULT_INCOME_SOURCE: str = "Salary"

    @property
    def cors_origins_list(self) -> List[str]:
        return _csv_to_list(self.CORS_ORIGINS) or ["*"]

    def resolve_database_url(self) -> str:
        """
        Decide qué URL de BD usar.

        - DATABASE_URL es obligatoria.
        - Si es Postgres: driver psycopg + sslmode + search_path.
        - Cualquier otro dialecto (sqlite) se devuelve sin tocar.
        """
        chosen = _strip_wrapping_quotes(self.DATABASE_URL or "")
        if not chosen:
            raise RuntimeError("No hay URL de base de datos. Define DATABASE_URL.")

        if not _is_postgres_url(chosen):
            return chosen

        chosen = _ensure_psycopg_driver(chosen)
        chosen = _append_query_param(chosen, "sslmode", "require")
        chosen = _ensure_search_path_public(chosen)
        return chosen


settings = Settings()
