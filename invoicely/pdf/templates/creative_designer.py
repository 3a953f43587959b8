"""Creative Designer: colour band masthead, offset client card, accent total."""
from typing import Any, List

from reportlab.lib import colors
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, Spacer, Table, TableStyle

from invoicely.models.invoice import InvoiceData
from invoicely.pdf.components import (
    SHORT_DATE,
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
    primary="#ec4899",
    secondary="#fdf2f8",
    accent="#f97316",
    text="#0f172a",
    muted="#64748b",
)


def build_story(invoice: InvoiceData, palette: TemplateColors) -> List[Any]:
    styles = make_styles(palette)
    company, client = invoice.company, invoice.client
    story: List[Any] = []

    white = styles["normal"].clone("CreativeWhite", textColor=colors.white)
    label = [
        Paragraph("Invoice", styles["title"].clone("CreativeLabel", textColor=colors.white)),
        Paragraph(f"#{text(invoice.number)}", white),
        Spacer(1, 3 * mm),
        Paragraph(f"Issued: {format_date(invoice.issue_date, SHORT_DATE)}", white),
        Paragraph(f"Due: {format_date(invoice.due_date, SHORT_DATE)}", white),
    ]
    band = Table(
        [[label, party_block(None, party_lines(company.name, company.address, company.email, company.phone), styles)]],
        colWidths=[80 * mm, 100 * mm],
    )
    band.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (0, 0), colors.HexColor(palette.primary)),
        ("BACKGROUND", (1, 0), (1, 0), colors.HexColor(palette.secondary)),
        ("LINEBELOW", (0, 0), (-1, 0), 3, colors.HexColor(palette.accent)),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("TOPPADDING", (0, 0), (-1, -1), 10),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 10),
        ("LEFTPADDING", (0, 0), (-1, -1), 10),
    ]))
    story += [band, Spacer(1, 8 * mm)]

    card = Table(
        [["", party_block("Billed To", party_lines(client.name, client.address, client.email), styles)]],
        colWidths=[40 * mm, 140 * mm],
    )
    card.setStyle(TableStyle([
        ("LINEBEFORE", (1, 0), (1, 0), 3, colors.HexColor(palette.primary)),
        ("LEFTPADDING", (1, 0), (1, 0), 8),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
    ]))
    story += [card, Spacer(1, 8 * mm)]

    story.append(items_table(invoice, palette, styles, headers=("Description", "Qty", "Rate", "Amount")))
    story += [Spacer(1, 6 * mm), totals_table(totals_rows(invoice), palette, styles)]
    story += notes_block(invoice, "Notes", styles)
    story += footer_block("Thank you for choosing us!", styles)
    return story


TEMPLATE = PDFTemplate(
    kind=TemplateKind.CREATIVE_DESIGNER,
    name="Creative Designer",
    description="Modern creative template with asymmetric layout and bold geometric elements",
    preview="/templates/creative-designer-preview.png",
    colors=COLORS,
    layout=build_story,
)
