"""Modern Minimalist: light header, From/To columns, date strip, zebra rows."""
from typing import Any, List

from reportlab.lib import colors
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, Spacer, Table, TableStyle

from invoicely.models.invoice import InvoiceData
from invoicely.pdf.components import (
    SHORT_DATE,
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
    primary="#2563eb",
    secondary="#f8fafc",
    accent="#64748b",
    text="#0f172a",
    muted="#64748b",
)


def build_story(invoice: InvoiceData, palette: TemplateColors) -> List[Any]:
    styles = make_styles(palette)
    story: List[Any] = []

    header = Table(
        [[Paragraph("Invoice", styles["title"]), Paragraph(f"#{text(invoice.number)}", styles["right"])]],
        colWidths=[120 * mm, 60 * mm],
    )
    header.setStyle(TableStyle([
        ("VALIGN", (0, 0), (-1, -1), "BOTTOM"),
        ("LINEBELOW", (0, 0), (-1, 0), 0.5, colors.HexColor(palette.accent)),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
    ]))
    story += [header, Spacer(1, 8 * mm)]

    company, client = invoice.company, invoice.client
    parties = Table(
        [[
            party_block("From", party_lines(company.name, company.address, company.email, company.phone), styles),
            party_block("To", party_lines(client.name, client.address, client.email), styles),
        ]],
        colWidths=[90 * mm, 90 * mm],
    )
    parties.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "TOP"), ("LEFTPADDING", (0, 0), (-1, -1), 0)]))
    story += [parties, Spacer(1, 6 * mm)]

    dates = Table(
        [
            [Paragraph("Issue Date", styles["label"]), Paragraph("Due Date", styles["label"])],
            [
                Paragraph(format_date(invoice.issue_date, SHORT_DATE), styles["normal"]),
                Paragraph(format_date(invoice.due_date, SHORT_DATE), styles["normal"]),
            ],
        ],
        colWidths=[90 * mm, 90 * mm],
    )
    dates.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, -1), colors.HexColor(palette.secondary)),
        ("TOPPADDING", (0, 0), (-1, -1), 5),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 5),
    ]))
    story += [dates, Spacer(1, 8 * mm)]

    story.append(items_table(invoice, palette, styles, headers=("Description", "Qty", "Rate", "Amount")))
    story += [Spacer(1, 6 * mm), totals_table(totals_rows(invoice), palette, styles)]
    story += notes_block(invoice, "Notes", styles)
    return story


TEMPLATE = PDFTemplate(
    kind=TemplateKind.MODERN_MINIMALIST,
    name="Modern Minimalist",
    description="Clean, minimal design with elegant typography and subtle accents",
    preview="/templates/modern-minimalist-preview.png",
    colors=COLORS,
    layout=build_story,
)
