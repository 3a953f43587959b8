from invoicely.api.auth import router as auth_router
from invoicely.api.clients import router as clients_router
from invoicely.api.company import router as company_router
from invoicely.api.currency import router as currency_router
from invoicely.api.dashboard import router as dashboard_router
from invoicely.api.invoices import router as invoices_router
from invoicely.api.templates import router as templates_router

__all__ = [
    "auth_router",
    "clients_router",
    "company_router",
    "currency_router",
    "dashboard_router",
    "invoices_router",
    "templates_router",
]
