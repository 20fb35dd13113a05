"""API route modules."""

from partsledger.api.routes.health import router as health_router
from partsledger.api.routes.orders import router as orders_router
from partsledger.api.routes.parts import router as parts_router
from partsledger.api.routes.stock import router as stock_router

__all__ = [
    "health_router",
    "parts_router",
    "stock_router",
    "orders_router",
]
