from datetime import date

import pytest

from invoicely.models.invoice import ClientInfo, CompanyInfo, InvoiceData, LineItem
from invoicely.pdf.preview import (
    FULL_PAGE_HEIGHT,
    MIN_PAGE_HEIGHT,
    PdfPreviewEngine,
    Viewport,
    calculate_optimal_height,
    render_cache_key,
)
from invoicely.pdf.registry import TemplateRegistry
from invoicely.pdf.templates import build_default_registry
from invoicely.services.errors import ErrorCode


def _invoice(items=None):
    return InvoiceData(
        number="INV-007",
        issue_date=date(2024, 5, 1),
        due_date=date(2024, 5, 31),
        company=CompanyInfo(name="Acme"),
        client=ClientInfo(name="Globex"),
        items=[LineItem("Consulting", 3, 100, 300)] if items is None else items,
        subtotal=300,
        total=300,
    )


class TestCalculateOptimalHeight:

    def test_full_page_when_viewport_is_tall(self):
        assert calculate_optimal_height(1400) == FULL_PAGE_HEIGHT
        assert calculate_optimal_height(1323) == FULL_PAGE_HEIGHT

    def test_available_space_between_floor_and_page(self):
        assert calculate_optimal_height(1000) == 800
        assert calculate_optimal_height(800) == MIN_PAGE_HEIGHT

    def test_floor_on_small_viewports(self):
        assert calculate_optimal_height(500) == MIN_PAGE_HEIGHT

    def test_explicit_height_wins(self):
        assert calculate_optimal_height(500, height="90vh") == "90vh"
        assert calculate_optimal_height(2000, height=700, max_height=300) == 700

    def test_max_height_caps(self):
        assert calculate_optimal_height(1400, max_height="900px") == 900
        assert calculate_optimal_height(1400, max_height=5000) == FULL_PAGE_HEIGHT
        assert calculate_optimal_height(900, max_height=1000) == 700

    def test_max_height_can_go_below_floor(self):
        assert calculate_optimal_height(500, max_height=1000) == 300

    def test_min_height_applied_last(self):
        assert calculate_optimal_height(500, max_height=1000, min_height="650px") == 650
        assert calculate_optimal_height(1400, min_height=1500) == 1500

    def test_unparseable_dimensions_are_ignored(self):
        assert calculate_optimal_height(1000, max_height="auto", min_height="0") == 800


class TestRenderCacheKey:

    def test_key_format(self):
        invoice = _invoice([LineItem("A", 1, 10, 10), LineItem("B", 2, 5, 10)])
        assert render_cache_key("classic-professional", invoice) == "classic-professional-2-0-A-1-10|1-B-2-5"

    def test_empty_items(self):
        assert render_cache_key("modern-minimalist", _invoice([])) == "modern-minimalist-0-"

    def test_key_ignores_totals_and_notes(self):
        invoice = _invoice()
        key = render_cache_key("modern-minimalist", invoice)
        invoice.notes = "changed"
        invoice.total = 999
        assert render_cache_key("modern-minimalist", invoice) == key


class TestViewport:

    def test_attach_subscribes_and_detach_unsubscribes(self):
        engine = PdfPreviewEngine(build_default_registry())
        viewport = Viewport(1400)
        preview = engine.viewer(_invoice())
        assert preview.container_height == "auto"

        with preview.attach(viewport):
            assert viewport.listener_count == 1
            assert preview.container_height == FULL_PAGE_HEIGHT
            viewport.resize(900)
            assert preview.container_height == 700

        assert viewport.listener_count == 0
        viewport.resize(1400)
        assert preview.container_height == 700

    def test_listener_removed_when_body_raises(self):
        engine = PdfPreviewEngine(build_default_registry())
        viewport = Viewport(1000)
        with pytest.raises(RuntimeError):
            with engine.viewer(_invoice()).attach(viewport):
                raise RuntimeError("host torn down")
        assert viewport.listener_count == 0


class TestPdfPreviewEngine:

    def test_render_requested_template(self):
        engine = PdfPreviewEngine(build_default_registry())
        result = engine.render(_invoice(), "creative-designer")

        assert result.ok
        assert result.template_id == "creative-designer"
        assert result.document.startswith(b"%PDF")
        assert result.height == FULL_PAGE_HEIGHT
        assert result.reused is False

    def test_unknown_template_falls_back_to_default(self):
        engine = PdfPreviewEngine(build_default_registry())
        result = engine.render(_invoice(), "nonexistent")

        assert result.ok
        assert result.requested_template_id == "nonexistent"
        assert result.template_id == "modern-minimalist"

    def test_missing_template_id_uses_configured_default(self):
        engine = PdfPreviewEngine(build_default_registry(), default_template_id="classic-professional")
        assert engine.render(_invoice()).template_id == "classic-professional"

    def test_render_uses_viewport_height(self):
        engine = PdfPreviewEngine(build_default_registry())
        assert engine.render(_invoice(), viewport_height=700).height == MIN_PAGE_HEIGHT

    def test_rerender_reuses_document_while_key_unchanged(self):
        engine = PdfPreviewEngine(build_default_registry())
        preview = engine.viewer(_invoice(), "corporate-executive")

        with preview.attach(Viewport(1400)) as attached:
            first = attached.render()
            second = attached.render()

        assert first.ok
        assert second.reused is True
        assert second.document is first.document

    def test_changed_items_or_template_rebuild(self):
        engine = PdfPreviewEngine(build_default_registry())
        preview = engine.viewer(_invoice())
        first = preview.render()

        preview.update(invoice=_invoice([LineItem("Consulting", 4, 100, 400)]))
        second = preview.render()
        assert second.reused is False
        assert second.cache_key != first.cache_key

        preview.update(template_id="classic-professional")
        third = preview.render()
        assert third.reused is False
        assert third.template_id == "classic-professional"

    def test_changed_totals_or_notes_rebuild_with_same_items(self):
        engine = PdfPreviewEngine(build_default_registry())
        preview = engine.viewer(_invoice())
        first = preview.render()

        revised = _invoice()
        revised.tax_rate = 10
        revised.tax_amount = 30
        revised.total = 330
        revised.notes = "Net 30"
        preview.update(invoice=revised)
        second = preview.render()

        assert second.cache_key == first.cache_key
        assert second.reused is False
        assert second.document != first.document

    def test_equal_invoice_update_still_reuses(self):
        engine = PdfPreviewEngine(build_default_registry())
        preview = engine.viewer(_invoice())
        first = preview.render()

        preview.update(invoice=_invoice())
        second = preview.render()

        assert second.reused is True
        assert second.document is first.document

    def test_empty_registry_yields_error_state(self):
        engine = PdfPreviewEngine(TemplateRegistry())
        result = engine.render(_invoice(), "modern-minimalist")

        assert not result.ok
        assert result.document is None
        assert result.template is None
        assert result.error.code is ErrorCode.TEMPLATE_RENDER_FAILED
        assert result.error.message == "Could not load template: modern-minimalist"

    def test_failed_render_is_not_reused(self):
        registry = TemplateRegistry()
        engine = PdfPreviewEngine(registry)
        preview = engine.viewer(_invoice())
        assert not preview.render().ok

        for template in build_default_registry().all():
            registry.register(template)
        assert preview.render().ok

    def test_layout_exception_yields_error_state(self, monkeypatch):
        engine = PdfPreviewEngine(build_default_registry())

        def explode(template, invoice):
            raise ValueError("bad layout")

        monkeypatch.setattr(engine, "render_document", explode)
        result = engine.render(_invoice(), "modern-minimalist")

        assert result.error is not None
        assert result.error.detail == "bad layout"
        assert result.template_id == "modern-minimalist"
