"""Layout content checks for the four built-in invoice templates."""
from datetime import date

import pytest

from invoicely.models.invoice import ClientInfo, CompanyInfo, InvoiceData, LineItem
from invoicely.pdf.components import (
    build_pdf,
    format_date,
    money,
    quantity_text,
    safe_number,
    story_text,
    text,
    totals_rows,
)
from invoicely.pdf.registry import TemplateKind
from invoicely.pdf.templates import TEMPLATES

ALL_TEMPLATES = list(TEMPLATES.values())


def _invoice(**overrides):
    data = dict(
        number="INV-042",
        issue_date=date(2024, 1, 15),
        due_date=date(2024, 2, 14),
        company=CompanyInfo(
            name="Acme Studio",
            email="billing@acme.test",
            phone="+1 555 0100",
            address="1 Main St, Springfield",
            website="https://acme.test",
        ),
        client=ClientInfo(name="Globex Corp", email="ap@globex.test", address="9 Elm Rd"),
        items=[
            LineItem("Design work", 2, 150, 300),
            LineItem("Hosting", 1.5, 20, 30),
        ],
        currency="USD",
        subtotal=330,
        tax_rate=10,
        tax_amount=33,
        total=363,
        notes="Net 30",
    )
    data.update(overrides)
    return InvoiceData(**data)


def _text(template, invoice):
    return story_text(template.build_story(invoice))


class TestComponents:

    @pytest.mark.parametrize("value, expected", [
        (None, 0.0),
        ("12.5", 12.5),
        (" 7 ", 7.0),
        ("abc", 0.0),
        (float("nan"), 0.0),
        (float("inf"), 0.0),
        (3, 3.0),
    ])
    def test_safe_number(self, value, expected):
        assert safe_number(value) == expected

    def test_money_uses_invoice_currency(self):
        assert money(1234.5, _invoice(currency="GBP")) == "£1,234.50"
        assert money(None, _invoice(currency="JPY")) == "¥0"

    def test_quantity_text_drops_trailing_zeros(self):
        assert quantity_text(2.0) == "2"
        assert quantity_text("1.50") == "1.5"

    @pytest.mark.parametrize("value, expected", [
        (1234567, "1234567"),
        (1000000.5, "1000000.5"),
        (2.3456789, "2.3456789"),
        (1e16, "10000000000000000"),
        (0.0000001, "0.0000001"),
        (-0.0, "0"),
    ])
    def test_quantity_text_keeps_every_digit(self, value, expected):
        assert quantity_text(value) == expected

    def test_tax_label_keeps_every_digit(self):
        rows = totals_rows(_invoice(tax_rate=7.1234567, tax_amount=23.51))
        assert rows[1][0] == "Tax (7.1234567%)"

    def test_large_quantity_printed_in_items_table(self):
        invoice = _invoice(items=[LineItem("Widgets", 1234567, 1, 1234567)])
        assert "1234567" in _text(ALL_TEMPLATES[0], invoice)

    def test_text_keeps_zero(self):
        assert text(0) == "0"
        assert text(None) == ""

    def test_format_date_patterns(self):
        assert format_date(date(2024, 3, 5), "%b %d, %Y") == "Mar 05, 2024"
        assert format_date("2024-03-05", "%B %d, %Y") == "March 05, 2024"
        assert format_date("not a date", "%B %d, %Y") == "not a date"
        assert format_date(None, "%B %d, %Y") == ""

    def test_tax_row_only_when_rate_positive(self):
        with_tax = totals_rows(_invoice(tax_rate=8.5, tax_amount=28.05))
        assert [label for label, _ in with_tax] == ["Subtotal", "Tax (8.5%)", "Total"]

        without_tax = totals_rows(_invoice(tax_rate=0, tax_amount=0, total=330))
        assert [label for label, _ in without_tax] == ["Subtotal", "Total"]

    def test_malformed_totals_render_as_zero(self):
        rows = totals_rows(_invoice(subtotal="oops", tax_rate=None, total=float("nan")))
        assert rows == [("Subtotal", "$0.00"), ("Total", "$0.00")]


class TestEveryTemplate:

    @pytest.mark.parametrize("template", ALL_TEMPLATES, ids=lambda t: t.id)
    def test_renders_a_pdf(self, template):
        document = build_pdf(template.build_story(_invoice()), title="Invoice INV-042")
        assert document.startswith(b"%PDF")

    @pytest.mark.parametrize("template", ALL_TEMPLATES, ids=lambda t: t.id)
    def test_shows_parties_items_and_totals(self, template):
        lines = _text(template, _invoice())
        joined = "\n".join(lines)

        assert "Acme Studio" in joined
        assert "Globex Corp" in joined
        assert "INV-042" in joined
        assert "Design work" in lines
        assert "1.5" in lines
        assert "$150.00" in lines
        assert "$330.00" in lines
        assert "$33.00" in lines
        assert "$363.00" in lines
        assert "Net 30" in lines

    @pytest.mark.parametrize("template", ALL_TEMPLATES, ids=lambda t: t.id)
    def test_empty_items_show_placeholder_row(self, template):
        lines = _text(template, _invoice(items=[], subtotal=0, tax_rate=0, tax_amount=0, total=0))
        assert "No items" in lines

    @pytest.mark.parametrize("template", ALL_TEMPLATES, ids=lambda t: t.id)
    def test_zero_tax_hides_tax_line(self, template):
        lines = _text(template, _invoice(tax_rate=0, tax_amount=0, total=330))
        assert not any(line.startswith("Tax (") for line in lines)

    @pytest.mark.parametrize("template", ALL_TEMPLATES, ids=lambda t: t.id)
    def test_notes_section_omitted_without_notes(self, template):
        lines = _text(template, _invoice(notes=None))
        assert not any(line.rstrip(":").upper() in ("NOTES", "TERMS & CONDITIONS") for line in lines)

    @pytest.mark.parametrize("template", ALL_TEMPLATES, ids=lambda t: t.id)
    def test_malformed_numbers_do_not_break_rendering(self, template):
        invoice = _invoice(
            items=[LineItem("Broken", None, "abc", float("nan"))],
            subtotal=None,
            tax_rate="x",
            total="nope",
        )
        assert build_pdf(template.build_story(invoice)).startswith(b"%PDF")


def test_grand_total_is_identical_across_templates():
    invoice = _invoice(currency="EUR", subtotal=1234.5, tax_rate=20, tax_amount=246.9, total=1481.4)
    for template in ALL_TEMPLATES:
        assert "€1.481,40" in _text(template, invoice), template.id


def test_modern_minimalist_layout():
    lines = _text(TEMPLATES[TemplateKind.MODERN_MINIMALIST], _invoice())
    assert lines[:2] == ["Invoice", "#INV-042"]
    for label in ("From", "To", "Issue Date", "Due Date", "Rate", "Notes"):
        assert label in lines
    assert "Jan 15, 2024" in lines
    assert "Feb 14, 2024" in lines
    assert "Tax (10%)" in lines
    assert "Total" in lines


def test_corporate_executive_layout():
    lines = _text(TEMPLATES[TemplateKind.CORPORATE_EXECUTIVE], _invoice())
    for label in ("INVOICE", "BILL TO", "INVOICE DETAILS", "INVOICE SUMMARY", "TERMS & CONDITIONS"):
        assert label in lines
    assert "Issue Date: January 15, 2024" in lines
    assert "TOTAL AMOUNT DUE:" in lines
    assert lines[-1] == "Thank you for your business. Payment is due within the terms specified above."


def test_creative_designer_layout():
    lines = _text(TEMPLATES[TemplateKind.CREATIVE_DESIGNER], _invoice())
    assert "Issued: Jan 15, 2024" in lines
    assert "Due: Feb 14, 2024" in lines
    assert "Billed To" in lines
    assert lines[-1] == "Thank you for choosing us!"


def test_classic_professional_layout():
    lines = _text(TEMPLATES[TemplateKind.CLASSIC_PROFESSIONAL], _invoice())
    assert lines[:2] == ["INVOICE", "Invoice #INV-042"]
    for label in ("BILL TO:", "INVOICE DETAILS:", "DESCRIPTION", "QUANTITY", "UNIT PRICE", "NOTES:"):
        assert label in lines
    assert "Due Date: February 14, 2024" in lines
    assert "Tax (10%):" in lines
    assert "TOTAL:" in lines
    assert lines[-1] == "Thank you for your business!"
