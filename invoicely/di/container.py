"""Dependency injection container for core services."""
from invoicely.core import settings
from invoicely.core.database import InvoicelyDB, get_db
from invoicely.pdf.preview import PdfPreviewEngine
from invoicely.pdf.registry import TemplateRegistry
from invoicely.pdf.templates import build_default_registry
from invoicely.services.exchange_rates import (
    CurrencyConverter,
    ExchangeRateApiProvider,
    ExchangeRateCache,
)


class ServiceContainer:
    def __init__(self) -> None:
        self._db = None
        self._rate_cache = None
        self._rate_provider = None
        self._converter = None
        self._templates = None
        self._preview = None

    def db(self) -> InvoicelyDB:
        if self._db is None:
            self._db = get_db()
        return self._db

    def rate_cache(self) -> ExchangeRateCache:
        if self._rate_cache is None:
            self._rate_cache = ExchangeRateCache(ttl_ms=settings.EXCHANGE_RATE_CACHE_SECONDS * 1000)
        return self._rate_cache

    def rate_provider(self) -> ExchangeRateApiProvider:
        if self._rate_provider is None:
            self._rate_provider = ExchangeRateApiProvider()
        return self._rate_provider

    def converter(self) -> CurrencyConverter:
        if self._converter is None:
            self._converter = CurrencyConverter(cache=self.rate_cache(), provider=self.rate_provider())
        return self._converter

    def templates(self) -> TemplateRegistry:
        if self._templates is None:
            self._templates = build_default_registry()
        return self._templates

    def preview(self) -> PdfPreviewEngine:
        if self._preview is None:
            self._preview = PdfPreviewEngine(self.templates())
        return self._preview


container = ServiceContainer()
