# Routes package

from .invoice_routes import router as invoice_router

__all__ = ["invoice_router"]
