"""
Invoice Service

Totals, numbering and the rendering projection for persisted invoices.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from invoicely.core import settings
from invoicely.core.database import InvoicelyDB
from invoicely.models.invoice import ClientInfo, CompanyInfo, InvoiceData, LineItem
from invoicely.models.requests import InvoiceCreateRequest
from invoicely.services.errors import NotFoundError, ValidationFailedError

logger = logging.getLogger(__name__)

NUMBER_PREFIX = "INV"


@dataclass
class InvoiceTotals:
    items: List[Dict[str, Any]]
    subtotal: float
    tax_rate: float
    tax_amount: float
    total: float


def compute_totals(items: Iterable[Mapping[str, Any]], tax_rate: float = 0) -> InvoiceTotals:
    """
    Derive line amounts and invoice totals.

    amount = quantity * unit_price per line, subtotal = sum of amounts,
    tax = subtotal * tax_rate / 100, total = subtotal + tax.
    """
    lines = []
    for item in items:
        quantity = float(item.get("quantity") or 0)
        unit_price = float(item.get("unit_price") or 0)
        lines.append({
            "description": item.get("description"),
            "quantity": quantity,
            "unit_price": unit_price,
            "amount": quantity * unit_price,
        })
    subtotal = sum(line["amount"] for line in lines)
    tax_rate = float(tax_rate or 0)
    tax_amount = subtotal * tax_rate / 100
    return InvoiceTotals(
        items=lines,
        subtotal=subtotal,
        tax_rate=tax_rate,
        tax_amount=tax_amount,
        total=subtotal + tax_amount,
    )


def next_invoice_number(last_number: Optional[str]) -> str:
    """INV-001 for the first invoice, then the last number plus one."""
    if not last_number:
        return f"{NUMBER_PREFIX}-001"
    try:
        sequence = int(last_number.rsplit("-", 1)[1])
    except (IndexError, ValueError):
        logger.warning("Unparseable invoice number %r, restarting sequence", last_number)
        return f"{NUMBER_PREFIX}-001"
    return f"{NUMBER_PREFIX}-{sequence + 1:03d}"


def _parse_date(value: Union[str, date, datetime, None]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if value:
        return datetime.fromisoformat(str(value)).date()
    return date.today()


def build_invoice_data(invoice: Mapping[str, Any]) -> InvoiceData:
    """Assemble the read-only rendering projection from a get_invoice() record."""
    company = invoice.get("company") or {}
    client = invoice.get("client") or {}
    return InvoiceData(
        number=invoice.get("number") or "",
        issue_date=_parse_date(invoice.get("issue_date")),
        due_date=_parse_date(invoice.get("due_date")),
        currency=invoice.get("currency") or settings.DEFAULT_CURRENCY,
        company=CompanyInfo(
            name=company.get("name") or "",
            email=company.get("email"),
            phone=company.get("phone"),
            address=company.get("address"),
            website=company.get("website"),
        ),
        client=ClientInfo(
            name=client.get("name") or "",
            email=client.get("email"),
            address=client.get("address"),
        ),
        items=[
            LineItem(
                description=item.get("description") or "",
                quantity=item.get("quantity"),
                unit_price=item.get("unit_price"),
                amount=item.get("amount"),
            )
            for item in invoice.get("items") or []
        ],
        subtotal=invoice.get("subtotal"),
        tax_rate=invoice.get("tax_rate"),
        tax_amount=invoice.get("tax_amount"),
        total=invoice.get("total"),
        notes=invoice.get("notes") or None,
    )


class InvoiceService:
    """Invoice creation on top of the store."""

    def __init__(self, db: InvoicelyDB):
        self.db = db

    def create_invoice(self, user_id: str, request: InvoiceCreateRequest) -> Dict[str, Any]:
        company = self.db.find_company_by_user(user_id)
        if not company:
            raise ValidationFailedError("company", "Company not found")
        client = self.db.find_client(user_id, request.client_id)
        if not client:
            raise NotFoundError("Client", request.client_id)

        totals = compute_totals(
            [item.model_dump() for item in request.items], request.tax_rate
        )
        number = next_invoice_number(self.db.get_last_invoice_number(user_id))
        payload = {
            "number": number,
            "status": "DRAFT",
            "issue_date": request.issue_date.isoformat(),
            "due_date": request.due_date.isoformat(),
            "currency": request.currency or company.get("default_currency") or settings.DEFAULT_CURRENCY,
            "subtotal": totals.subtotal,
            "tax_rate": totals.tax_rate,
            "tax_amount": totals.tax_amount,
            "total": totals.total,
            "notes": request.notes,
            "template_id": request.template_id or settings.DEFAULT_TEMPLATE_ID,
            "user_id": user_id,
            "company_id": company["id"],
            "client_id": client["id"],
        }
        return self.db.create_invoice(payload, totals.items)
