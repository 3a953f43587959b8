"""
Shared building blocks for invoice layouts.

Every number that reaches a layout goes through safe_number() first, so a
malformed field renders as zero instead of breaking the document.
"""
import io
import logging
import math
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence, Tuple
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from invoicely.models.invoice import InvoiceData
from invoicely.pdf.registry import TemplateColors
from invoicely.services.currency import format_currency

logger = logging.getLogger(__name__)

SHORT_DATE = "%b %d, %Y"
LONG_DATE = "%B %d, %Y"

ROW_RULE = colors.HexColor("#E5E7EB")
BODY_TEXT = colors.HexColor("#374151")

ITEM_COLUMN_WIDTHS = [95 * mm, 20 * mm, 32 * mm, 33 * mm]


def safe_number(value: Any) -> float:
    """Coerce to a finite float; anything unusable becomes 0."""
    if value is None or isinstance(value, bool):
        return float(value or 0)
    try:
        number = float(value.strip() if isinstance(value, str) else value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def money(value: Any, invoice: InvoiceData) -> str:
    return format_currency(safe_number(value), invoice.currency or "USD")


def plain_number(value: Any) -> str:
    """Shortest exact decimal form: no exponent, no trailing zeros."""
    digits = format(Decimal(repr(safe_number(value))), "f")
    if "." in digits:
        digits = digits.rstrip("0").rstrip(".")
    return "0" if digits == "-0" else digits


def quantity_text(value: Any) -> str:
    return plain_number(value)


def format_date(value: Any, pattern: str) -> str:
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return value
    if isinstance(value, (date, datetime)):
        return value.strftime(pattern)
    return ""


def text(value: Any) -> str:
    """Escape free text for Paragraph markup."""
    return escape(str(value)) if value is not None else ""


def make_styles(palette: TemplateColors) -> Dict[str, ParagraphStyle]:
    base = getSampleStyleSheet()
    normal = ParagraphStyle(
        name="InvoiceNormal", parent=base["Normal"], fontName="Helvetica",
        fontSize=10, leading=13, textColor=colors.HexColor(palette.text),
    )
    styles = {
        "normal": normal,
        "right": ParagraphStyle(name="InvoiceRight", parent=normal, alignment=TA_RIGHT),
        "center": ParagraphStyle(name="InvoiceCenter", parent=normal, alignment=TA_CENTER),
        "muted": ParagraphStyle(
            name="InvoiceMuted", parent=normal, fontSize=9, leading=12,
            textColor=colors.HexColor(palette.muted),
        ),
        "label": ParagraphStyle(
            name="InvoiceLabel", parent=normal, fontName="Helvetica-Bold", fontSize=8,
            leading=11, textColor=colors.HexColor(palette.muted),
        ),
        "strong": ParagraphStyle(name="InvoiceStrong", parent=normal, fontName="Helvetica-Bold", fontSize=12, leading=15),
        "title": ParagraphStyle(
            name="InvoiceTitle", parent=normal, fontName="Helvetica-Bold", fontSize=26,
            leading=30, textColor=colors.HexColor(palette.primary),
        ),
        "title_right": ParagraphStyle(
            name="InvoiceTitleRight", parent=normal, fontName="Helvetica-Bold", fontSize=26,
            leading=30, alignment=TA_RIGHT, textColor=colors.HexColor(palette.primary),
        ),
        "cell": ParagraphStyle(name="InvoiceCell", parent=normal, fontSize=9, leading=12, textColor=BODY_TEXT),
        "cell_right": ParagraphStyle(
            name="InvoiceCellRight", parent=normal, fontSize=9, leading=12,
            textColor=BODY_TEXT, alignment=TA_RIGHT,
        ),
        "header_cell": ParagraphStyle(
            name="InvoiceHeaderCell", parent=normal, fontName="Helvetica-Bold", fontSize=9,
            leading=12, textColor=colors.white,
        ),
        "header_cell_right": ParagraphStyle(
            name="InvoiceHeaderCellRight", parent=normal, fontName="Helvetica-Bold", fontSize=9,
            leading=12, textColor=colors.white, alignment=TA_RIGHT,
        ),
        "footer": ParagraphStyle(
            name="InvoiceFooter", parent=normal, fontSize=9, leading=12, alignment=TA_CENTER,
            textColor=colors.HexColor(palette.muted),
        ),
    }
    styles["section"] = ParagraphStyle(
        name="InvoiceSection", parent=styles["label"], textColor=colors.HexColor(palette.primary),
    )
    return styles


def party_lines(name: str, *details: Optional[str]) -> List[str]:
    return [name] + [detail for detail in details if detail]


def party_block(
    heading: Optional[str],
    lines: Sequence[str],
    styles: Dict[str, ParagraphStyle],
) -> List[Paragraph]:
    block = []
    if heading:
        block.append(Paragraph(text(heading), styles["section"]))
    if lines:
        block.append(Paragraph(text(lines[0]), styles["strong"]))
        for line in lines[1:]:
            block.append(Paragraph(text(line), styles["muted"]))
    return block


def items_table(
    invoice: InvoiceData,
    palette: TemplateColors,
    styles: Dict[str, ParagraphStyle],
    headers: Tuple[str, str, str, str] = ("Description", "Qty", "Unit Price", "Amount"),
    zebra: bool = True,
) -> Table:
    """Line items with a coloured header row; an explicit "No items" row when empty."""
    rows: List[List[Any]] = [[
        Paragraph(text(headers[0]), styles["header_cell"]),
        Paragraph(text(headers[1]), styles["header_cell_right"]),
        Paragraph(text(headers[2]), styles["header_cell_right"]),
        Paragraph(text(headers[3]), styles["header_cell_right"]),
    ]]
    commands = [
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor(palette.primary)),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("TOPPADDING", (0, 0), (-1, -1), 7),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 7),
        ("LINEBELOW", (0, 1), (-1, -1), 0.5, ROW_RULE),
    ]

    if invoice.items:
        for index, item in enumerate(invoice.items, start=1):
            rows.append([
                Paragraph(text(item.description), styles["cell"]),
                Paragraph(quantity_text(item.quantity), styles["cell_right"]),
                Paragraph(money(item.unit_price, invoice), styles["cell_right"]),
                Paragraph(money(item.amount, invoice), styles["cell_right"]),
            ])
            if zebra and index % 2 == 1:
                commands.append(("BACKGROUND", (0, index), (-1, index), colors.HexColor(palette.secondary)))
    else:
        rows.append([Paragraph("No items", styles["cell"]), "", "", ""])
        commands.append(("SPAN", (0, 1), (-1, 1)))

    table = Table(rows, colWidths=ITEM_COLUMN_WIDTHS, repeatRows=1)
    table.setStyle(TableStyle(commands))
    return table


def totals_rows(
    invoice: InvoiceData,
    subtotal_label: str = "Subtotal",
    tax_label: str = "Tax ({rate}%)",
    total_label: str = "Total",
) -> List[Tuple[str, str]]:
    """Subtotal, a tax line only when the rate is positive, and the grand total last."""
    rows = [(subtotal_label, money(invoice.subtotal, invoice))]
    tax_rate = safe_number(invoice.tax_rate)
    if tax_rate > 0:
        rows.append((tax_label.format(rate=plain_number(tax_rate)), money(invoice.tax_amount, invoice)))
    rows.append((total_label, money(invoice.total, invoice)))
    return rows


def totals_table(
    rows: Sequence[Tuple[str, str]],
    palette: TemplateColors,
    styles: Dict[str, ParagraphStyle],
    width: float = 75 * mm,
    highlight_total: bool = True,
) -> Table:
    data = [
        [Paragraph(text(label), styles["normal"]), Paragraph(text(value), styles["right"])]
        for label, value in rows[:-1]
    ]
    label, value = rows[-1]
    total_style = styles["header_cell"] if highlight_total else styles["strong"]
    total_style_right = styles["header_cell_right"] if highlight_total else styles["right"]
    data.append([
        Paragraph(f"<b>{text(label)}</b>", total_style),
        Paragraph(f"<b>{text(value)}</b>", total_style_right),
    ])

    commands = [
        ("TOPPADDING", (0, 0), (-1, -1), 5),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 5),
    ]
    if highlight_total:
        commands.append(("BACKGROUND", (0, -1), (-1, -1), colors.HexColor(palette.primary)))
    else:
        commands.append(("LINEABOVE", (0, -1), (-1, -1), 1.5, colors.HexColor(palette.primary)))

    table = Table(data, colWidths=[width * 0.55, width * 0.45], hAlign="RIGHT")
    table.setStyle(TableStyle(commands))
    return table


def notes_block(invoice: InvoiceData, title: str, styles: Dict[str, ParagraphStyle]) -> List[Any]:
    if not invoice.notes:
        return []
    return [
        Spacer(1, 8 * mm),
        Paragraph(text(title), styles["section"]),
        Spacer(1, 2 * mm),
        Paragraph(text(invoice.notes).replace("\n", "<br/>"), styles["muted"]),
    ]


def footer_block(message: str, styles: Dict[str, ParagraphStyle]) -> List[Any]:
    return [Spacer(1, 12 * mm), Paragraph(text(message), styles["footer"])]


def story_text(story: Sequence[Any]) -> List[str]:
    """Plain text of every Paragraph in a story, tables flattened row by row."""
    found: List[str] = []

    def visit(flowable: Any) -> None:
        if isinstance(flowable, Paragraph):
            found.append(flowable.getPlainText())
        elif isinstance(flowable, Table):
            # Table keeps its cells on a private attribute; only tests inspect stories.
            for row in flowable._cellvalues:
                for cell in row:
                    visit(cell)
        elif isinstance(flowable, (list, tuple)):
            for child in flowable:
                visit(child)

    for flowable in story:
        visit(flowable)
    return found


def build_pdf(story: List[Any], title: str = "Invoice") -> bytes:
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=15 * mm,
        leftMargin=15 * mm,
        topMargin=15 * mm,
        bottomMargin=15 * mm,
        title=title,
    )
    doc.build(story)
    return buffer.getvalue()
