from . import (
    auth_router,
    documents_router,
    parse_router,
    income_router,
    hoa_router,
    dashboard_router,
)

__all__ = [
    "auth_router",
    "documents_router",
    "parse_router",
    "income_router",
    "hoa_router",
    "dashboard_router",
]
