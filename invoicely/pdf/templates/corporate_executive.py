"""Corporate Executive: dark masthead, boxed detail panels, bordered summary."""
from typing import Any, List

from reportlab.lib import colors
from reportlab.lib.enums import TA_RIGHT
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
    primary="#1f2937",
    secondary="#f9fafb",
    accent="#d1d5db",
    text="#111827",
    muted="#6b7280",
)


def build_story(invoice: InvoiceData, palette: TemplateColors) -> List[Any]:
    styles = make_styles(palette)
    company, client = invoice.company, invoice.client
    story: List[Any] = []

    white = styles["normal"].clone("ExecutiveWhite", textColor=colors.white)
    white_title = styles["title_right"].clone("ExecutiveWhiteTitle", textColor=colors.white)

    company_lines = [Paragraph(f"<b>{text(company.name)}</b>", white)]
    if company.address:
        company_lines.append(Paragraph(text(company.address), white))
    contact = " • ".join(value for value in (company.email, company.phone) if value)
    if contact:
        company_lines.append(Paragraph(text(contact), white))
    if company.website:
        company_lines.append(Paragraph(text(company.website), white))

    masthead = Table(
        [[company_lines, [Paragraph("INVOICE", white_title),
                          Paragraph(f"#{text(invoice.number)}", white.clone("ExecutiveNumber", alignment=TA_RIGHT))]]],
        colWidths=[110 * mm, 70 * mm],
    )
    masthead.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, -1), colors.HexColor(palette.primary)),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("TOPPADDING", (0, 0), (-1, -1), 10),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 10),
        ("LEFTPADDING", (0, 0), (-1, -1), 10),
        ("RIGHTPADDING", (0, 0), (-1, -1), 10),
    ]))
    story += [masthead, Spacer(1, 8 * mm)]

    details = [
        Paragraph("INVOICE DETAILS", styles["section"]),
        Paragraph(f"Issue Date: {format_date(invoice.issue_date, LONG_DATE)}", styles["normal"]),
        Paragraph(f"Due Date: {format_date(invoice.due_date, LONG_DATE)}", styles["normal"]),
    ]
    panels = Table(
        [[party_block("BILL TO", party_lines(client.name, client.address, client.email), styles), details]],
        colWidths=[90 * mm, 90 * mm],
    )
    panels.setStyle(TableStyle([
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("GRID", (0, 0), (-1, -1), 0.75, colors.HexColor(palette.accent)),
        ("BACKGROUND", (0, 0), (-1, -1), colors.HexColor(palette.secondary)),
        ("TOPPADDING", (0, 0), (-1, -1), 8),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 8),
    ]))
    story += [panels, Spacer(1, 8 * mm)]

    story.append(items_table(invoice, palette, styles, headers=("DESCRIPTION", "QTY", "UNIT PRICE", "AMOUNT")))

    story += [Spacer(1, 6 * mm), Paragraph("INVOICE SUMMARY", styles["section"].clone("ExecutiveSummary", alignment=TA_RIGHT))]
    rows = totals_rows(
        invoice, subtotal_label="Subtotal:", tax_label="Tax ({rate}%):", total_label="TOTAL AMOUNT DUE:",
    )
    summary = totals_table(rows, palette, styles, width=85 * mm, highlight_total=False)
    summary.setStyle(TableStyle([("BOX", (0, 0), (-1, -1), 0.75, colors.HexColor(palette.accent))]))
    story.append(summary)

    story += notes_block(invoice, "TERMS & CONDITIONS", styles)
    story += footer_block(
        "Thank you for your business. Payment is due within the terms specified above.", styles
    )
    return story


TEMPLATE = PDFTemplate(
    kind=TemplateKind.CORPORATE_EXECUTIVE,
    name="Corporate Executive",
    description="Formal executive template with structured layout and professional borders",
    preview="/templates/corporate-executive-preview.png",
    colors=COLORS,
    layout=build_story,
)
