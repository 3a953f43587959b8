"""FastAPI dependencies for Invoicely core services."""
from fastapi import Depends

from invoicely.core.database import InvoicelyDB
from invoicely.di.container import container
from invoicely.services.dashboard import DashboardAggregator, DashboardService
from invoicely.services.exchange_rates import CurrencyConverter
from invoicely.services.invoices import InvoiceService


def get_database() -> InvoicelyDB:
    return container.db()


def get_converter() -> CurrencyConverter:
    return container.converter()


def get_template_registry():
    return container.templates()


def get_preview_engine():
    return container.preview()


def get_dashboard_service(
    db: InvoicelyDB = Depends(get_database),
    converter: CurrencyConverter = Depends(get_converter),
) -> DashboardService:
    return DashboardService(db=db, aggregator=DashboardAggregator(converter))


def get_invoice_service(db: InvoicelyDB = Depends(get_database)) -> InvoiceService:
    return InvoiceService(db=db)
