"""
PDF Rendering / Preview Engine

Resolves a template (falling back to the registry default), renders the
invoice projection into a PDF and sizes the viewer surface that shows it.

The viewer approximates one A4 page at 96 DPI (794 x 1123 px). Its height
is recalculated whenever the attached viewport is resized; the listener
lives only as long as the viewer is attached.
"""
import logging
import re
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Union

from invoicely.core import settings
from invoicely.models.invoice import InvoiceData
from invoicely.pdf.components import build_pdf
from invoicely.pdf.registry import PDFTemplate, TemplateRegistry
from invoicely.services.errors import TemplateRenderError

logger = logging.getLogger(__name__)

PAGE_WIDTH = 794
FULL_PAGE_HEIGHT = 1123
MIN_PAGE_HEIGHT = 600
# Headers, margins and toolbars around the viewer
VIEWPORT_CHROME = 200

Dimension = Union[int, float, str, None]


def _to_pixels(value: Dimension) -> Optional[int]:
    """Leading integer of a dimension ("640px" -> 640); unset or zero -> None."""
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)):
        return int(value) or None
    match = re.match(r"\s*(-?\d+)", str(value))
    if not match:
        return None
    return int(match.group(1)) or None


def calculate_optimal_height(
    viewport_height: int,
    height: Dimension = None,
    min_height: Dimension = None,
    max_height: Dimension = None,
) -> Union[int, str]:
    """
    Viewer height for a given viewport.

    An explicit height always wins. Otherwise show a full page when
    viewport - 200 leaves room for one, else the available space down to a
    600 px floor. max_height caps at min(available, max_height, full page),
    and min_height is applied last.
    """
    if height:
        return height

    available = viewport_height - VIEWPORT_CHROME
    max_px = _to_pixels(max_height)

    if max_px:
        optimal = min(available, max_px, FULL_PAGE_HEIGHT)
    elif available >= FULL_PAGE_HEIGHT:
        optimal = FULL_PAGE_HEIGHT
    elif available >= MIN_PAGE_HEIGHT:
        optimal = max(available, MIN_PAGE_HEIGHT)
    else:
        optimal = MIN_PAGE_HEIGHT

    min_px = _to_pixels(min_height)
    if min_px:
        optimal = max(optimal, min_px)
    return optimal


def render_cache_key(template_id: str, invoice: InvoiceData) -> str:
    """Template id, item count and an idx-description-qty-price fingerprint per item."""
    items = invoice.items or []
    fingerprint = "|".join(
        f"{index}-{item.description}-{item.quantity}-{item.unit_price}"
        for index, item in enumerate(items)
    )
    return f"{template_id}-{len(items)}-{fingerprint}"


ResizeListener = Callable[[int], None]


class Viewport:
    """Host surface whose height drives the viewer size."""

    def __init__(self, height: int):
        self.height = height
        self._listeners: List[ResizeListener] = []

    def add_listener(self, listener: ResizeListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: ResizeListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def resize(self, height: int) -> None:
        self.height = height
        for listener in list(self._listeners):
            listener(height)


@dataclass
class PreviewResult:
    requested_template_id: str
    height: Union[int, str]
    cache_key: str
    template: Optional[PDFTemplate] = None
    document: Optional[bytes] = None
    error: Optional[TemplateRenderError] = None
    reused: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and self.document is not None

    @property
    def template_id(self) -> Optional[str]:
        return self.template.id if self.template else None


class PdfPreviewEngine:
    """Template resolution and document rendering over an injected registry."""

    def __init__(self, registry: TemplateRegistry, default_template_id: str = settings.DEFAULT_TEMPLATE_ID):
        self.registry = registry
        self.default_template_id = default_template_id

    def resolve(self, template_id: Optional[str]) -> PDFTemplate:
        """Requested template, else the registry default. Raises when the registry is empty."""
        return self.registry.get(template_id) or self.registry.get_default()

    def render_document(self, template: PDFTemplate, invoice: InvoiceData) -> bytes:
        return build_pdf(template.build_story(invoice), title=f"Invoice {invoice.number}")

    def viewer(
        self,
        invoice: InvoiceData,
        template_id: Optional[str] = None,
        height: Dimension = None,
        min_height: Dimension = None,
        max_height: Dimension = None,
    ) -> "PdfPreview":
        return PdfPreview(
            self,
            invoice,
            template_id=template_id or self.default_template_id,
            height=height,
            min_height=min_height,
            max_height=max_height,
        )

    def render(
        self,
        invoice: InvoiceData,
        template_id: Optional[str] = None,
        viewport_height: int = FULL_PAGE_HEIGHT + VIEWPORT_CHROME,
        height: Dimension = None,
        min_height: Dimension = None,
        max_height: Dimension = None,
    ) -> PreviewResult:
        """One-shot render: attach a viewer to a fixed viewport and render once."""
        preview = self.viewer(invoice, template_id, height, min_height, max_height)
        with preview.attach(Viewport(viewport_height)):
            return preview.render()


class PdfPreview:
    """
    A viewer bound to one invoice and template.

    render() reuses the previous document while the render cache key is
    unchanged and the invoice has not been replaced by a different one, so
    re-rendering the host does not rebuild the PDF.
    """

    def __init__(
        self,
        engine: PdfPreviewEngine,
        invoice: InvoiceData,
        template_id: str,
        height: Dimension = None,
        min_height: Dimension = None,
        max_height: Dimension = None,
    ):
        self.engine = engine
        self.invoice = invoice
        self.template_id = template_id
        self.height = height
        self.min_height = min_height
        self.max_height = max_height
        self.container_height: Union[int, str] = "auto"
        self._last: Optional[PreviewResult] = None

    def _recalculate(self, viewport_height: int) -> None:
        self.container_height = calculate_optimal_height(
            viewport_height, self.height, self.min_height, self.max_height
        )

    @contextmanager
    def attach(self, viewport: Viewport) -> Iterator["PdfPreview"]:
        self._recalculate(viewport.height)
        viewport.add_listener(self._recalculate)
        try:
            yield self
        finally:
            viewport.remove_listener(self._recalculate)

    def update(self, invoice: Optional[InvoiceData] = None, template_id: Optional[str] = None) -> None:
        if invoice is not None:
            if invoice != self.invoice:
                self._last = None
            self.invoice = invoice
        if template_id is not None:
            self.template_id = template_id

    @property
    def cache_key(self) -> str:
        return render_cache_key(self.template_id, self.invoice)

    def render(self) -> PreviewResult:
        key = self.cache_key
        if self._last is not None and self._last.cache_key == key and self._last.ok:
            self._last.height = self.container_height
            self._last.reused = True
            return self._last

        result = PreviewResult(
            requested_template_id=self.template_id,
            height=self.container_height,
            cache_key=key,
        )
        try:
            result.template = self.engine.resolve(self.template_id)
            result.document = self.engine.render_document(result.template, self.invoice)
        except Exception as exc:
            logger.error("Could not load template %s: %s", self.template_id, exc)
            result.document = None
            result.error = TemplateRenderError(self.template_id, str(exc))

        self._last = result
        return result
