"""
PDF Template Registry

Id-keyed collection of invoice templates. Built once at startup by
build_default_registry() and injected wherever templates are resolved.
"""
import logging
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from invoicely.models.invoice import InvoiceData
from invoicely.services.errors import NoTemplatesRegisteredError, TemplateIdCollisionError

logger = logging.getLogger(__name__)


class TemplateKind(str, Enum):
    """The closed set of invoice layouts."""
    MODERN_MINIMALIST = "modern-minimalist"
    CORPORATE_EXECUTIVE = "corporate-executive"
    CREATIVE_DESIGNER = "creative-designer"
    CLASSIC_PROFESSIONAL = "classic-professional"


@dataclass(frozen=True)
class TemplateColors:
    primary: str
    secondary: str
    accent: str
    text: str
    muted: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


# layout(invoice, colors) -> list of reportlab flowables
Layout = Callable[[InvoiceData, TemplateColors], List[Any]]


@dataclass(frozen=True)
class PDFTemplate:
    kind: TemplateKind
    name: str
    description: str
    preview: str
    colors: TemplateColors
    layout: Layout

    @property
    def id(self) -> str:
        return self.kind.value

    def build_story(self, invoice: InvoiceData) -> List[Any]:
        return self.layout(invoice, self.colors)

    def to_dict(self) -> Dict[str, Any]:
        """Selector entry: everything except the layout callable."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "preview": self.preview,
            "colors": self.colors.to_dict(),
        }


class TemplateRegistry:
    """Insertion-ordered template map. Duplicate ids are rejected."""

    def __init__(self):
        self._templates: Dict[str, PDFTemplate] = {}

    def register(self, template: PDFTemplate) -> None:
        if template.id in self._templates:
            raise TemplateIdCollisionError(template.id)
        self._templates[template.id] = template
        logger.debug("Registered PDF template %s", template.id)

    def get(self, template_id: Optional[str]) -> Optional[PDFTemplate]:
        if not template_id:
            return None
        return self._templates.get(template_id)

    def get_default(self) -> PDFTemplate:
        """First registered template; raises when the registry is empty."""
        for template in self._templates.values():
            return template
        raise NoTemplatesRegisteredError()

    def all(self) -> List[PDFTemplate]:
        return list(self._templates.values())

    def __contains__(self, template_id: str) -> bool:
        return template_id in self._templates

    def __len__(self) -> int:
        return len(self._templates)
