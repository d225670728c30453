"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.excel import router as excel_router
from routes.companies import router as companies_router
from routes.products import router as products_router
from routes.carriers import router as carriers_router

__all__ = [
    "excel_router",
    "companies_router",
    "products_router",
    "carriers_router",
]
