# Lazy imports to avoid dependency chains at startup
def __getattr__(name):
    if name == "CurrencyConverter":
        from invoicely.services.exchange_rates import CurrencyConverter
        return CurrencyConverter
    elif name == "ExchangeRateCache":
        from invoicely.services.exchange_rates import ExchangeRateCache
        return ExchangeRateCache
    elif name == "DashboardAggregator":
        from invoicely.services.dashboard import DashboardAggregator
        return DashboardAggregator
    elif name == "InvoiceService":
        from invoicely.services.invoices import InvoiceService
        return InvoiceService
    raise AttributeError(f"module 'invoicely.services' has no attribute '{name}'")

__all__ = [
    "CurrencyConverter",
    "ExchangeRateCache",
    "DashboardAggregator",
    "InvoiceService",
]
