from fastapi import APIRouter

from app.api.v1 import (
    bill_routes,
    customer_routes,
    dashboard_routes,
    inventory_routes,
    invoice_routes,
    product_routes,
    settings_routes,
)

api_router = APIRouter()

api_router.include_router(product_routes.router, prefix="/products", tags=["Products"])
api_router.include_router(customer_routes.router, prefix="/customers", tags=["Customers"])
api_router.include_router(bill_routes.router, prefix="/bills", tags=["Bills"])
api_router.include_router(invoice_routes.router, prefix="/invoices", tags=["Invoices"])
api_router.include_router(inventory_routes.router, prefix="/inventory", tags=["Inventory"])
api_router.include_router(dashboard_routes.router, prefix="/dashboard", tags=["Dashboard"])
api_router.include_router(settings_routes.router, prefix="/settings", tags=["Settings"])
