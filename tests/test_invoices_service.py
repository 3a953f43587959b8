from datetime import date

import pytest

from invoicely.models.requests import InvoiceCreateRequest
from invoicely.services.errors import NotFoundError, ValidationFailedError
from invoicely.services.invoices import (
    InvoiceService,
    build_invoice_data,
    compute_totals,
    next_invoice_number,
)


class _FakeDB:
    def __init__(self, company=None, clients=None, last_number=None) -> None:
        self.company = company
        self.clients = clients or {}
        self.last_number = last_number
        self.created = []

    def find_company_by_user(self, user_id: str):
        return self.company

    def find_client(self, user_id: str, client_id: str):
        return self.clients.get(client_id)

    def get_last_invoice_number(self, user_id: str):
        return self.last_number

    def create_invoice(self, payload, items):
        self.created.append((payload, items))
        return {"id": "INVC-1", **payload, "items": items}


def _request(**overrides):
    data = {
        "client_id": "CLI-1",
        "issue_date": "2024-06-01",
        "due_date": "2024-07-01",
        "items": [
            {"description": "Design", "quantity": 2, "unit_price": 150},
            {"description": "Hosting", "quantity": 1, "unit_price": 45.5},
        ],
        "tax_rate": 10,
    }
    data.update(overrides)
    return InvoiceCreateRequest(**data)


class TestComputeTotals:

    def test_line_amounts_subtotal_tax_and_total(self):
        totals = compute_totals(
            [{"description": "A", "quantity": 2, "unit_price": 150}, {"description": "B", "quantity": 1, "unit_price": 45.5}],
            tax_rate=10,
        )
        assert [line["amount"] for line in totals.items] == [300.0, 45.5]
        assert totals.subtotal == 345.5
        assert totals.tax_amount == pytest.approx(34.55)
        assert totals.total == pytest.approx(380.05)

    def test_no_tax(self):
        totals = compute_totals([{"description": "A", "quantity": 3, "unit_price": 10}])
        assert totals.tax_rate == 0.0
        assert totals.tax_amount == 0.0
        assert totals.total == 30.0

    def test_empty_items(self):
        totals = compute_totals([], tax_rate=20)
        assert totals.items == []
        assert totals.total == 0.0


class TestNextInvoiceNumber:

    def test_first_invoice(self):
        assert next_invoice_number(None) == "INV-001"
        assert next_invoice_number("") == "INV-001"

    def test_increments_with_padding(self):
        assert next_invoice_number("INV-001") == "INV-002"
        assert next_invoice_number("INV-099") == "INV-100"
        assert next_invoice_number("INV-1000") == "INV-1001"

    def test_unparseable_restarts(self):
        assert next_invoice_number("legacy") == "INV-001"
        assert next_invoice_number("INV-abc") == "INV-001"


class TestInvoiceService:

    def test_create_invoice_computes_server_side_totals(self):
        db = _FakeDB(
            company={"id": "CMP-1", "default_currency": "EUR"},
            clients={"CLI-1": {"id": "CLI-1"}},
            last_number="INV-007",
        )

        invoice = InvoiceService(db).create_invoice("USR-1", _request())

        payload, items = db.created[0]
        assert invoice["number"] == "INV-008"
        assert payload["status"] == "DRAFT"
        assert payload["currency"] == "EUR"
        assert payload["template_id"] == "modern-minimalist"
        assert payload["subtotal"] == 345.5
        assert payload["total"] == pytest.approx(380.05)
        assert payload["issue_date"] == "2024-06-01"
        assert payload["company_id"] == "CMP-1"
        assert [item["amount"] for item in items] == [300.0, 45.5]

    def test_request_currency_and_template_override_defaults(self):
        db = _FakeDB(company={"id": "CMP-1", "default_currency": "EUR"}, clients={"CLI-1": {"id": "CLI-1"}})

        InvoiceService(db).create_invoice(
            "USR-1", _request(currency="gbp", template_id="classic-professional")
        )

        payload, _ = db.created[0]
        assert payload["currency"] == "GBP"
        assert payload["template_id"] == "classic-professional"
        assert payload["number"] == "INV-001"

    def test_missing_company_is_rejected(self):
        db = _FakeDB(company=None, clients={"CLI-1": {"id": "CLI-1"}})
        with pytest.raises(ValidationFailedError) as exc_info:
            InvoiceService(db).create_invoice("USR-1", _request())
        assert exc_info.value.message == "Company not found"
        assert db.created == []

    def test_foreign_client_is_not_found(self):
        db = _FakeDB(company={"id": "CMP-1"}, clients={})
        with pytest.raises(NotFoundError):
            InvoiceService(db).create_invoice("USR-1", _request())


def test_build_invoice_data_from_record():
    record = {
        "number": "INV-003",
        "issue_date": "2024-06-01",
        "due_date": "2024-07-01",
        "currency": "CAD",
        "subtotal": 100.0,
        "tax_rate": 5.0,
        "tax_amount": 5.0,
        "total": 105.0,
        "notes": "",
        "company": {"name": "Acme", "email": "a@acme.test", "website": "https://acme.test"},
        "client": {"name": "Globex", "address": "9 Elm Rd"},
        "items": [{"description": "Work", "quantity": 1.0, "unit_price": 100.0, "amount": 100.0}],
    }

    data = build_invoice_data(record)

    assert data.issue_date == date(2024, 6, 1)
    assert data.due_date == date(2024, 7, 1)
    assert data.currency == "CAD"
    assert data.company.website == "https://acme.test"
    assert data.client.address == "9 Elm Rd"
    assert data.items[0].description == "Work"
    assert data.notes is None
    assert data.to_dict()["issue_date"] == "2024-06-01"


def test_build_invoice_data_tolerates_missing_relations():
    data = build_invoice_data({"number": "INV-009", "issue_date": "2024-06-01", "due_date": "2024-06-15"})
    assert data.company.name == ""
    assert data.client.name == ""
    assert data.items == []
    assert data.currency == "USD"
