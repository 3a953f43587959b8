"""
Invoices API

Listing with search and pagination, creation with server-side totals,
status updates, deletion and PDF rendering.
"""

import logging
import time
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse, Response

from invoicely.api.deps import get_database, get_invoice_service, get_preview_engine
from invoicely.core.auth import CurrentUser, get_current_user
from invoicely.core.database import InvoicelyDB
from invoicely.models.requests import InvoiceCreateRequest, InvoiceStatusRequest
from invoicely.pdf.preview import PdfPreviewEngine
from invoicely.services.errors import NotFoundError, status_for
from invoicely.services.invoices import InvoiceService, build_invoice_data
from invoicely.services.logging import log_pdf_render

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/invoices", tags=["invoices"])


def _summary(row):
    return {
        "id": row["id"],
        "number": row["number"],
        "client": {"name": row.get("client_name"), "email": row.get("client_email")},
        "status": row["status"],
        "total": float(row.get("total") or 0),
        "currency": row.get("currency"),
        "issue_date": row.get("issue_date"),
        "due_date": row.get("due_date"),
        "created_at": row.get("created_at"),
    }


@router.get("")
async def list_invoices(
    status: Optional[str] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user: CurrentUser = Depends(get_current_user),
    db: InvoicelyDB = Depends(get_database),
):
    result = db.list_invoices(user.id, status=status, search=search, page=page, limit=limit)
    return {
        "invoices": [_summary(row) for row in result["invoices"]],
        "pagination": result["pagination"],
    }


@router.post("", status_code=201)
async def create_invoice(
    request: InvoiceCreateRequest,
    user: CurrentUser = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    return service.create_invoice(user.id, request)


@router.get("/{invoice_id}")
async def get_invoice(
    invoice_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: InvoicelyDB = Depends(get_database),
):
    invoice = db.get_invoice(user.id, invoice_id)
    if not invoice:
        raise NotFoundError("Invoice", invoice_id)
    return invoice


@router.put("/{invoice_id}")
async def update_invoice_status(
    invoice_id: str,
    request: InvoiceStatusRequest,
    user: CurrentUser = Depends(get_current_user),
    db: InvoicelyDB = Depends(get_database),
):
    if not db.update_invoice_status(user.id, invoice_id, request.status.value):
        raise NotFoundError("Invoice", invoice_id)
    logger.info("Invoice %s moved to %s", invoice_id, request.status.value)
    return db.get_invoice(user.id, invoice_id)


@router.delete("/{invoice_id}")
async def delete_invoice(
    invoice_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: InvoicelyDB = Depends(get_database),
):
    if not db.delete_invoice(user.id, invoice_id):
        raise NotFoundError("Invoice", invoice_id)
    return {"success": True}


@router.get("/{invoice_id}/pdf")
async def render_invoice_pdf(
    invoice_id: str,
    template_id: Optional[str] = None,
    min_height: Optional[int] = Query(None, ge=0),
    max_height: Optional[int] = Query(None, ge=0),
    viewport_height: Optional[int] = Query(None, ge=0),
    user: CurrentUser = Depends(get_current_user),
    db: InvoicelyDB = Depends(get_database),
    engine: PdfPreviewEngine = Depends(get_preview_engine),
):
    """
    Render the invoice with the requested template, or the one it was
    created with. Unknown ids fall back to the default template.
    """
    invoice = db.get_invoice(user.id, invoice_id)
    if not invoice:
        raise NotFoundError("Invoice", invoice_id)

    render_kwargs = {"min_height": min_height, "max_height": max_height}
    if viewport_height is not None:
        render_kwargs["viewport_height"] = viewport_height
    started = time.time()
    result = engine.render(
        build_invoice_data(invoice),
        template_id=template_id or invoice.get("template_id"),
        **render_kwargs,
    )

    if not result.ok:
        return JSONResponse(status_code=status_for(result.error), content=result.error.to_dict())

    log_pdf_render(
        invoice["number"],
        result.requested_template_id,
        result.template_id,
        reused=result.reused,
        duration_ms=(time.time() - started) * 1000,
    )
    return Response(
        content=result.document,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'inline; filename="{invoice["number"]}.pdf"',
            "X-Template-Id": result.template_id,
            "X-Preview-Height": str(result.height),
        },
    )
