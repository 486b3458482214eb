# app/api/v1/__init__.py
"""
Versioned API v1: aggregates all sub-routers under ``/api/v1``.

Usage in ``main.py``::

    from app.api.v1 import v1_router
    app.include_router(v1_router)
"""

from fastapi import APIRouter

from app.api.v1.routes.airtable import router as airtable_router
from app.api.v1.routes.hampers import router as hampers_router
from app.api.v1.routes.invoices import router as invoices_router

v1_router = APIRouter(prefix="/api/v1")

# Invoice generator (session Bearer auth)
v1_router.include_router(invoices_router)

# Hamper designer + catalog
v1_router.include_router(hampers_router)

# Ops
v1_router.include_router(airtable_router)

__all__ = ["v1_router"]
