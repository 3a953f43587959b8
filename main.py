"""
Invoicely - FastAPI Backend

Invoice management: clients, company profile, invoices rendered to PDF with
interchangeable templates, and multi-currency dashboard reporting.

Run Instructions:
-----------------
1. Install dependencies:
   pip install -e .

2. Run the app locally with uvicorn:
   uvicorn main:app --host 0.0.0.0 --port 8000 --reload

3. Test /health endpoint:
   curl http://localhost:8000/health
"""
import time
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from invoicely.api import (
    auth_router,
    clients_router,
    company_router,
    currency_router,
    dashboard_router,
    invoices_router,
    templates_router,
)
from invoicely.di.container import container
from invoicely.services.errors import ErrorCode, InvoicelyError, status_for
from invoicely.services.logging import log_error, log_request, logger

app = FastAPI(
    title="Invoicely API",
    description="""
    Invoicely API - Invoices, PDF templates and multi-currency reporting

    ## Invoices
    - Client and company profile management
    - Invoice numbering and server-side totals
    - PDF rendering with four templates (Modern Minimalist, Corporate Executive,
      Creative Designer, Classic Professional)

    ## Currency
    - 20 supported currencies with locale-aware formatting
    - Cached exchange rates with reverse-rate and identity fallbacks

    ## Authentication
    Session cookie set by `/auth/login`; the same token is accepted as
    `Authorization: Bearer <token>`.
    """,
    version="1.0.0",
)

app.include_router(auth_router)
app.include_router(clients_router)
app.include_router(company_router)
app.include_router(invoices_router)
app.include_router(templates_router)
app.include_router(currency_router)
app.include_router(dashboard_router)


# Add request logging middleware
class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log requests with their duration."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        client_id = request.client.host if request.client else "unknown"

        try:
            response = await call_next(request)
            duration_ms = (time.time() - start_time) * 1000
            log_request(
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=duration_ms,
                client_id=client_id,
            )
            return response
        except Exception as e:
            log_error("request_exception", str(e), {"path": request.url.path, "method": request.method})
            raise


app.add_middleware(RequestLoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Global exception handler for InvoicelyErrors
@app.exception_handler(InvoicelyError)
async def invoicely_exception_handler(request: Request, exc: InvoicelyError):
    """Handle all InvoicelyErrors with structured responses."""
    status_code = status_for(exc)
    if status_code >= 500:
        log_error(exc.code.value, str(exc), exc.context)
    return JSONResponse(status_code=status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed input is a 400 with the offending fields listed."""
    errors = [
        {"field": ".".join(str(part) for part in error.get("loc", ())[1:]), "message": error.get("msg")}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={
            "error": ErrorCode.VALIDATION_FAILED.value,
            "message": "Invalid request",
            "context": {"errors": errors},
        },
    )


# Global exception handler for unhandled exceptions
@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    log_error(
        "unhandled_exception",
        str(exc),
        {"path": str(request.url.path), "method": request.method},
        exception=exc,
    )
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


@app.on_event("startup")
async def startup_event():
    """Initialize database and template registry on startup."""
    container.db().initialize()
    templates = container.templates()
    logger.info("Invoicely started with %d PDF templates", len(templates))


@app.get("/health", tags=["System"], summary="Health Check")
async def health():
    """No authentication required."""
    return {
        "status": "healthy",
        "version": "v1.0.0",
        "templates": len(container.templates()),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
