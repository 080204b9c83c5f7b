"""API routes package."""

from esign.routes.assist import router as assist_router
from esign.routes.client import router as client_router
from esign.routes.documents import router as documents_router
from esign.routes.health import router as health_router
from esign.routes.payments import router as payments_router
from esign.routes.requests import router as requests_router

__all__ = [
    "assist_router",
    "client_router",
    "documents_router",
    "health_router",
    "payments_router",
    "requests_router",
]
