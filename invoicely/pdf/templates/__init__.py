"""Built-in invoice layouts and the registry composition point."""
from typing import Dict

from invoicely.pdf.registry import PDFTemplate, TemplateKind, TemplateRegistry
from invoicely.pdf.templates import (
    classic_professional,
    corporate_executive,
    creative_designer,
    modern_minimalist,
)

TEMPLATES: Dict[TemplateKind, PDFTemplate] = {
    TemplateKind.MODERN_MINIMALIST: modern_minimalist.TEMPLATE,
    TemplateKind.CORPORATE_EXECUTIVE: corporate_executive.TEMPLATE,
    TemplateKind.CREATIVE_DESIGNER: creative_designer.TEMPLATE,
    TemplateKind.CLASSIC_PROFESSIONAL: classic_professional.TEMPLATE,
}


def build_default_registry() -> TemplateRegistry:
    """Register every layout in TemplateKind order; Modern Minimalist is the default."""
    registry = TemplateRegistry()
    for kind in TemplateKind:
        registry.register(TEMPLATES[kind])
    return registry
