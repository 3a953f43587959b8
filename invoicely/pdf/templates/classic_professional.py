"""Classic Professional: centered masthead, bill-to beside invoice details, closing line."""
from typing import Any, List

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, Spacer, Table, TableStyle

from invoicely.models.invoice import InvoiceData
from invoicely.pdf.components import (
    LONG_DATE,
    footer_block,
    format_date,
    items_table,
    make_styles,
    notes_block,
    party_block,
    party_lines,
    text,
    totals_rows,
    totals_table,
)
from invoicely.pdf.registry import PDFTemplate, TemplateColors, TemplateKind

COLORS = TemplateColors(
    primary="#1e3a8a",
    secondary="#f8fafc",
    accent="#3b82f6",
    text="#1e293b",
    muted="#64748b",
)


def build_story(invoice: InvoiceData, palette: TemplateColors) -> List[Any]:
    styles = make_styles(palette)
    company, client = invoice.company, invoice.client
    story: List[Any] = []

    title_style = styles["title"].clone("ClassicTitle", alignment=TA_CENTER)
    story.append(Paragraph("INVOICE", title_style))
    story.append(Paragraph(f"Invoice #{text(invoice.number)}", styles["center"]))
    story.append(Spacer(1, 6 * mm))

    story.append(Paragraph(text(company.name), styles["strong"].clone("ClassicCompany", alignment=TA_CENTER)))
    if company.address:
        story.append(Paragraph(text(company.address), styles["center"]))
    contact = " | ".join(value for value in (company.email, company.phone) if value)
    if contact:
        story.append(Paragraph(text(contact), styles["center"]))
    if company.website:
        story.append(Paragraph(text(company.website), styles["center"]))
    story.append(Spacer(1, 8 * mm))

    details = [
        Paragraph("INVOICE DETAILS:", styles["section"]),
        Paragraph(f"Issue Date: {format_date(invoice.issue_date, LONG_DATE)}", styles["normal"]),
        Paragraph(f"Due Date: {format_date(invoice.due_date, LONG_DATE)}", styles["normal"]),
    ]
    blocks = Table(
        [[party_block("BILL TO:", party_lines(client.name, client.address, client.email), styles), details]],
        colWidths=[90 * mm, 90 * mm],
    )
    blocks.setStyle(TableStyle([
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("BOX", (0, 0), (0, 0), 0.75, colors.HexColor(palette.primary)),
        ("BOX", (1, 0), (1, 0), 0.75, colors.HexColor(palette.primary)),
        ("TOPPADDING", (0, 0), (-1, -1), 6),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
    ]))
    story += [blocks, Spacer(1, 8 * mm)]

    story.append(items_table(
        invoice, palette, styles,
        headers=("DESCRIPTION", "QUANTITY", "UNIT PRICE", "AMOUNT"),
        zebra=False,
    ))
    rows = totals_rows(invoice, subtotal_label="Subtotal:", tax_label="Tax ({rate}%):", total_label="TOTAL:")
    story += [Spacer(1, 6 * mm), totals_table(rows, palette, styles)]
    story += notes_block(invoice, "NOTES:", styles)
    story += footer_block("Thank you for your business!", styles)
    return story


TEMPLATE = PDFTemplate(
    kind=TemplateKind.CLASSIC_PROFESSIONAL,
    name="Classic Professional",
    description="Traditional business template with centered layout and timeless design",
    preview="/templates/classic-professional-preview.png",
    colors=COLORS,
    layout=build_story,
)
