# tolva/app/core/logging.py

"""
Configuración de logging del backend.

Un único handler a stdout con timestamps ISO; el nivel sale de
settings.LOG_LEVEL (DEBUG, INFO, WARNING, ERROR, CRITICAL).
"""

from __future__ import annotations

import logging
import sys

from tolva.app.core.config import settings

LOG_FORMAT = "[%(asctime)s] %(name)s - %(levelname)s - %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def get_log_level() -> int:
    level = logging.getLevelName((settings.LOG_LEVEL or "INFO").upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging() -> None:
    """
    Configura el root logger una sola vez (idempotente).
    """
    root = logging.getLogger()
    root.setLevel(get_log_level())
    if any(getattr(h, "_tolva", False) for h in root.handlers):
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT))
    handler._tolva = True  # type: ignore[attr-defined]
    root.addHandler(handler)
